"""Pure role → token lifetime resolution."""

from __future__ import annotations

from typing import Any

from authgate.services.tokens.dto import RoleTtlConfig, TtlDecision

NEVER = "never"


def _positive_minutes(value: Any) -> int | None:
    """Return ``value`` as positive minutes, or ``None`` when unusable.

    Accepts ints and strings made only of decimal digits. Booleans, floats,
    signed or padded strings are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.isascii() and value.isdigit():
        minutes = int(value)
        return minutes if minutes > 0 else None
    return None


def resolve_role_ttl(role: str | None, cfg: RoleTtlConfig) -> TtlDecision:
    """
    Decide the lifetime of a token minted for ``role``.

    - An override equal to ``"never"`` (any case, not trimmed) yields a
      never-expiring decision reporting ``never_expire_ttl_minutes``, or the
      default when that is unset.
    - A positive integer override yields that many minutes.
    - Anything else, including a missing role, yields the default.

    Never raises; the same inputs always produce the same decision.

    :param role: User role, e.g. ``"admin"``.
    :type role: str | None
    :param cfg: Lifetime settings.
    :type cfg: RoleTtlConfig
    :rtype: TtlDecision
    """
    override = cfg.role_overrides.get(role) if role is not None else None

    if isinstance(override, str) and override.lower() == NEVER:
        ttl = cfg.never_expire_ttl_minutes
        if ttl is None:
            ttl = cfg.default_ttl_minutes
        return TtlDecision(ttl_minutes=ttl, never_expires=True)

    minutes = _positive_minutes(override)
    if minutes is not None:
        return TtlDecision(ttl_minutes=minutes)

    return TtlDecision(ttl_minutes=cfg.default_ttl_minutes)


class RoleTtlPolicy:
    """:func:`resolve_role_ttl` bound to one :class:`RoleTtlConfig`."""

    def __init__(self, cfg: RoleTtlConfig) -> None:
        self.cfg = cfg

    def resolve(self, role: str | None) -> TtlDecision:
        return resolve_role_ttl(role, self.cfg)
