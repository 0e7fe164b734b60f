"""User model: the single identity record behind every issued token."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates
from werkzeug.security import check_password_hash, generate_password_hash

from authgate.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

ROLE_CUSTOMER = "customer"
ROLE_CLERK = "clerk"
ROLE_ADMIN = "admin"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Customer or staff account.

    Fields
    ------
    first_name, last_name : str | None
        Person profile. Empty for organization accounts.
    organization_name : str | None
        Organization profile. Empty for person accounts.
    email : str
        Login email. Stored normalized (lowercase, trimmed). Unique.
    phone : str | None
        Alternative login identifier. Unique when present.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    is_organization : bool
        Selects which profile shape is populated.
    profile_image : str | None
        Opaque storage key of the avatar, never a URL.
    role : str
        ``customer`` (default), ``clerk`` or ``admin``; drives token TTL.
    """

    __tablename__ = "users"

    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    organization_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    is_organization: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_founded: Mapped[date | None] = mapped_column(Date, nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(255), nullable=True)

    role: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ROLE_CUSTOMER, server_default=ROLE_CUSTOMER
    )
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("phone", name="uq_users_phone"),
        Index("ix_users_role", "role"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        if not self.password_hash:
            return False
        return bool(check_password_hash(self.password_hash, raw))

    # -------------------- Derived views --------------------
    @property
    def display_name(self) -> str:
        """Organization name for organizations, otherwise ``"first last"``."""
        if self.is_organization:
            return self.organization_name or ""
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()

    def jwt_claims(self) -> dict[str, Any]:
        """Custom claims embedded in every token minted for this user."""
        return {
            "email": self.email,
            "is_organization": bool(self.is_organization),
            "role": self.role,
        }

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("phone")
    def _normalize_phone(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        v = str(value).strip()
        return v or None
