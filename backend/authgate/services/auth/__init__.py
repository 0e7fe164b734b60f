from .dto import AuthResultOut, ChangePasswordIn, LoginIn, RegisterIn, StaffIn
from .service import AuthService

__all__ = [
    "AuthService",
    "AuthResultOut",
    "ChangePasswordIn",
    "LoginIn",
    "RegisterIn",
    "StaffIn",
]
