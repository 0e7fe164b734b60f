from authgate.models.user import ROLE_ADMIN, ROLE_CLERK, ROLE_CUSTOMER, User

__all__ = [
    "ROLE_ADMIN",
    "ROLE_CLERK",
    "ROLE_CUSTOMER",
    "User",
]
