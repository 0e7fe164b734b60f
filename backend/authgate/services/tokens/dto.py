# authgate/services/tokens/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class TtlDecision:
    """
    Lifetime chosen for one token.

    :param ttl_minutes: Minutes the token lives; also reported for
        never-expiring tokens, where it is informational only.
    :type ttl_minutes: int
    :param never_expires: Whether the token is minted without an expiry.
    :type never_expires: bool
    """

    ttl_minutes: int
    never_expires: bool = False


@dataclass(frozen=True, slots=True)
class RoleTtlConfig:
    """
    Token lifetime settings.

    :param default_ttl_minutes: Lifetime used when a role has no usable override.
    :param never_expire_ttl_minutes: Minutes reported for ``never`` roles;
        ``None`` falls back to the default.
    :param role_overrides: Role → raw override (``"never"``, ``480``, ``"480"``).
    """

    default_ttl_minutes: int = 60
    never_expire_ttl_minutes: int | None = None
    role_overrides: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> RoleTtlConfig:
        """Build from a Flask config mapping (``JWT_TTL_MINUTES`` and friends)."""
        return cls(
            default_ttl_minutes=int(config.get("JWT_TTL_MINUTES") or 60),
            never_expire_ttl_minutes=config.get("JWT_NEVER_EXPIRE_TTL_MINUTES"),
            role_overrides=dict(config.get("JWT_ROLE_TTLS") or {}),
        )


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    Bearer token handed back to clients.

    :param token: Encoded token.
    :param ttl_minutes: Lifetime decided by the role policy.
    :param never_expires: ``True`` when the token carries no expiry.
    """

    token: str
    ttl_minutes: int
    never_expires: bool = False
    token_type: str = "bearer"

    @property
    def expires_in(self) -> int | None:
        """Seconds until expiry, or ``None`` for never-expiring tokens."""
        if self.never_expires:
            return None
        return self.ttl_minutes * 60

    def to_dict(self, *, token_key: str = "token") -> dict[str, Any]:
        return {
            token_key: self.token,
            "token_type": self.token_type,
            "expires_in": self.expires_in,
            "never_expires": self.never_expires,
        }
