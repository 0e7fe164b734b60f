from .dto import (
    FederatedLoginFailure,
    FederatedLoginOutcome,
    FederatedLoginSuccess,
    ReconciliationResult,
    ReconciliationState,
)
from .service import IdentityReconciler, new_profile_image_key

__all__ = [
    "FederatedLoginFailure",
    "FederatedLoginOutcome",
    "FederatedLoginSuccess",
    "IdentityReconciler",
    "ReconciliationResult",
    "ReconciliationState",
    "new_profile_image_key",
]
