"""
Service-level exceptions.

These are framework-agnostic: no Flask, no HTTP. The API layer turns them
into RFC 7807 responses through ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite reports the column, so the
    column name is matched as well (``uq_users_email`` → ``users.email``).

    :param exc: Error raised during flush/commit.
    :type exc: IntegrityError
    :param constraint_name: Constraint to match, e.g. ``"uq_users_email"``.
    :type constraint_name: str
    :rtype: bool
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    if name.startswith("uq_"):
        table, _, column = name[3:].partition("_")
        return f"{table}.{column}" in message
    return False


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Never an HTTP error itself; safe to raise from repositories or services.
    """


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g. ``"User"``).
    :param key: Identifier or search key.
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


class ValidationFailure(ServiceError):
    """
    Input violates a business rule (missing profile name, bad phone, ...).

    :param message: Client-safe explanation.
    :param field: Offending input field, when there is one.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class ConflictError(ValidationFailure):
    """A uniqueness rule failed (email or phone already taken)."""


class InvalidCredentials(ServiceError):
    """Login mismatch. The message never says which part was wrong."""

    def __init__(self, message: str = "Invalid credentials.") -> None:
        super().__init__(message)


class IdentityVerificationFailure(ServiceError):
    """The external identity provider rejected the callback or returned no email."""


class TokenOperationFailure(ServiceError):
    """Minting, decoding, refreshing or revoking a token failed."""


class AssetStorageDegraded(ServiceError):
    """
    A profile image could not be fetched, stored or deleted.

    Only ever logged; the surrounding login continues without the image.
    """
