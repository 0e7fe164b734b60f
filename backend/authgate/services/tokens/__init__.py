"""Role-based token lifetime policy and the issuance coordinator."""

from .coordinator import TokenIssuanceCoordinator
from .dto import IssuedToken, RoleTtlConfig, TtlDecision
from .policy import RoleTtlPolicy, resolve_role_ttl

__all__ = [
    "IssuedToken",
    "RoleTtlConfig",
    "RoleTtlPolicy",
    "TokenIssuanceCoordinator",
    "TtlDecision",
    "resolve_role_ttl",
]
