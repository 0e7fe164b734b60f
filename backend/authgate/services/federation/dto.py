# authgate/services/federation/dto.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from authgate.services.tokens.dto import IssuedToken

if TYPE_CHECKING:
    from authgate.models.user import User


class ReconciliationState(str, Enum):
    """Steps of a federated login, in order. ``FAILED`` is terminal."""

    START = "start"
    IDENTITY_VERIFIED = "identity_verified"
    ACCOUNT_RESOLVED = "account_resolved"
    ASSET_RECONCILED = "asset_reconciled"
    TOKEN_ISSUED = "token_issued"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """
    Local account matched or created for an external identity.

    :param user: The local account.
    :param was_newly_created: ``True`` only for the login that created it.
    """

    user: User
    was_newly_created: bool


@dataclass(frozen=True, slots=True)
class FederatedLoginSuccess:
    result: ReconciliationResult
    token: IssuedToken

    ok = True


@dataclass(frozen=True, slots=True)
class FederatedLoginFailure:
    """
    Federated login aborted.

    :param failed_at: Last state reached before the failure.
    :param reason: Log-safe explanation; never shown to end users verbatim.
    """

    failed_at: ReconciliationState
    reason: str

    ok = False


FederatedLoginOutcome = FederatedLoginSuccess | FederatedLoginFailure
