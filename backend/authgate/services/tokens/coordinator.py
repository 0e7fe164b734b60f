"""Serialized token issuance under a role-specific lifetime."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from authgate.services._shared.ports.token_issuer import TokenIssuer
from authgate.services.tokens.dto import IssuedToken
from authgate.services.tokens.policy import RoleTtlPolicy

if TYPE_CHECKING:
    from authgate.models.user import User

log = logging.getLogger(__name__)

TokenFactory = Callable[[int | None], str]


class TokenIssuanceCoordinator:
    """
    Issue tokens whose lifetime follows the user's role.

    The issuer's default TTL is process-wide state. While a token is being
    produced the default is switched to the role's TTL and put back
    afterwards, whatever the outcome, so no other caller ever observes a
    leaked value. One coordinator (and its lock) exists per application.
    """

    def __init__(self, issuer: TokenIssuer, policy: RoleTtlPolicy) -> None:
        self.issuer = issuer
        self.policy = policy
        self._lock = threading.Lock()

    def issue(self, user: User, token_factory: TokenFactory | None = None) -> IssuedToken:
        """
        Produce a token for ``user`` under the role's lifetime.

        :param user: Account the token is minted for.
        :param token_factory: Callable receiving the TTL in minutes (``None``
            for never-expiring tokens) and returning the encoded token.
            Defaults to :meth:`TokenIssuer.mint` for ``user``.
        :returns: The token plus its lifetime metadata.
        :rtype: IssuedToken
        :raises TokenOperationFailure: Propagated unchanged from the factory,
            after the default TTL has been restored.
        """
        decision = self.policy.resolve(user.role)
        factory = token_factory or (lambda ttl: self.issuer.mint(user, ttl))
        explicit_ttl = None if decision.never_expires else decision.ttl_minutes

        with self._lock:
            previous = self.issuer.get_default_ttl()
            try:
                if previous != decision.ttl_minutes:
                    self.issuer.set_default_ttl(decision.ttl_minutes)
                token = factory(explicit_ttl)
            finally:
                self.issuer.set_default_ttl(previous)

        log.info(
            "Issued token",
            extra={"user_id": user.id, "role": user.role},
        )
        return IssuedToken(
            token=token,
            ttl_minutes=decision.ttl_minutes,
            never_expires=decision.never_expires,
        )
