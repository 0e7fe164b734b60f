# authgate/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from authgate.services.tokens.dto import IssuedToken

if TYPE_CHECKING:
    from authgate.models.user import User

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for self-service registration.

    Exactly one profile shape is used: ``first_name``/``last_name`` for
    people, ``organization_name`` when ``is_organization`` is set.
    """

    email: str
    password: str
    is_organization: bool = False
    phone: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    organization_name: str | None = None
    dob: date | None = None
    date_founded: date | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param login: Email address or phone number.
    :type login: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    login: str
    password: str


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    user_id: int
    current_password: str
    new_password: str


@dataclass(frozen=True, slots=True)
class StaffIn:
    """Input DTO for provisioning clerk/admin accounts from the CLI."""

    email: str
    password: str
    role: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Authenticated account plus the token minted for it.

    :param user: The account.
    :param token: Issued bearer token with lifetime metadata.
    """

    user: User
    token: IssuedToken
