from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from authgate.services._shared.errors import TokenOperationFailure

if TYPE_CHECKING:
    from authgate.models.user import User


class TokenIssuer(Protocol):
    """
    Port for minting and validating bearer session tokens.

    ``ttl_minutes=None`` means the token carries no expiry claim at all. The
    default TTL is the issuer's process-wide setting; callers that pass an
    explicit TTL never depend on it.
    """

    def get_default_ttl(self) -> int: ...

    def set_default_ttl(self, minutes: int) -> None: ...

    def mint(self, user: User, ttl_minutes: int | None) -> str: ...

    def refresh(self, token: str, ttl_minutes: int | None) -> str: ...

    def subject_of(self, token: str) -> str: ...

    def revoke(self, token: str) -> None: ...


@dataclass
class StubTokenIssuer(TokenIssuer):
    """
    Deterministic issuer used in unit tests.

    Records every default-TTL write and every minted TTL; ``fail_next`` makes
    the next mint/refresh raise :class:`TokenOperationFailure`.
    """

    default_ttl: int = 60
    fail_next: bool = False
    set_calls: list[int] = field(default_factory=list)
    minted: list[tuple[Any, int | None]] = field(default_factory=list)
    revoked: set[str] = field(default_factory=set)
    _seq: int = 0
    _subjects: dict[str, str] = field(default_factory=dict)

    def get_default_ttl(self) -> int:
        return self.default_ttl

    def set_default_ttl(self, minutes: int) -> None:
        self.set_calls.append(minutes)
        self.default_ttl = minutes

    def _issue(self, subject: str, ttl_minutes: int | None) -> str:
        if self.fail_next:
            self.fail_next = False
            raise TokenOperationFailure("Could not create token")
        self._seq += 1
        token = f"tok-{subject}-{self._seq}"
        self._subjects[token] = subject
        self.minted.append((subject, ttl_minutes))
        return token

    def mint(self, user: User, ttl_minutes: int | None) -> str:
        return self._issue(str(user.id), ttl_minutes)

    def refresh(self, token: str, ttl_minutes: int | None) -> str:
        subject = self.subject_of(token)
        new_token = self._issue(subject, ttl_minutes)
        self.revoked.add(token)
        return new_token

    def subject_of(self, token: str) -> str:
        if token in self.revoked or token not in self._subjects:
            raise TokenOperationFailure("Token is invalid or revoked")
        return self._subjects[token]

    def revoke(self, token: str) -> None:
        self.subject_of(token)
        self.revoked.add(token)
