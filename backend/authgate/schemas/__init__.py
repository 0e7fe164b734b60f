"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    LoginSchema,
    RegisterSchema,
    UserSchema,
)

__all__ = [
    "ChangePasswordSchema",
    "LoginSchema",
    "RegisterSchema",
    "UserSchema",
]
