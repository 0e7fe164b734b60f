# authgate/services/auth/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from authgate.models.user import ROLE_ADMIN, ROLE_CLERK, ROLE_CUSTOMER, User
from authgate.repositories.user import UserRepository
from authgate.services._shared.base import BaseService
from authgate.services._shared.errors import (
    ConflictError,
    InvalidCredentials,
    NotFoundError,
    TokenOperationFailure,
    ValidationFailure,
    violates,
)
from authgate.services._shared.ports import TokenIssuer
from authgate.services.auth.dto import (
    AuthResultOut,
    ChangePasswordIn,
    LoginIn,
    RegisterIn,
    StaffIn,
)
from authgate.services.tokens.coordinator import TokenIssuanceCoordinator
from authgate.services.tokens.dto import IssuedToken

log = logging.getLogger(__name__)

PHONE_DIGITS = 11
MIN_PASSWORD_LENGTH = 6
STAFF_ROLES = frozenset({ROLE_CLERK, ROLE_ADMIN})


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class AuthService(BaseService):
    """
    Password-based account lifecycle: register, login, refresh, logout.

    Every token goes through the shared :class:`TokenIssuanceCoordinator`,
    so its lifetime follows the account's role.
    """

    def __init__(
        self,
        *,
        coordinator: TokenIssuanceCoordinator,
        issuer: TokenIssuer,
    ) -> None:
        """
        :param coordinator: Process-wide issuance coordinator.
        :param issuer: The coordinator's token issuer, used for refresh/logout.
        """
        super().__init__()
        self.coordinator = coordinator
        self.issuer = issuer

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create a customer account and log it in.

        :raises ValidationFailure: Missing profile fields or malformed phone.
        :raises ConflictError: Email or phone already in use.
        """
        first, last, org = self._profile_shape(dto)
        phone = _clean(dto.phone)
        if phone is None:
            raise ValidationFailure("The phone field is required.", field="phone")
        if not (phone.isdigit() and len(phone) == PHONE_DIGITS):
            raise ValidationFailure(
                f"The phone must be {PHONE_DIGITS} digits.", field="phone"
            )
        if len(dto.password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailure(
                f"The password must be at least {MIN_PASSWORD_LENGTH} characters.",
                field="password",
            )

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            if repo.exists_by_email(dto.email):
                raise ConflictError("The email has already been taken.", field="email")
            if repo.exists_by_phone(phone):
                raise ConflictError("The phone has already been taken.", field="phone")

            user = User(
                email=dto.email,
                phone=phone,
                first_name=first,
                last_name=last,
                organization_name=org,
                is_organization=dto.is_organization,
                dob=None if dto.is_organization else dto.dob,
                date_founded=dto.date_founded if dto.is_organization else None,
                role=ROLE_CUSTOMER,
            )
            user.password = dto.password
            try:
                repo.add(user)
            except IntegrityError as exc:
                # Lost a race against a concurrent registration.
                if violates(exc, "uq_users_phone"):
                    raise ConflictError("The phone has already been taken.", field="phone") from exc
                raise ConflictError("The email has already been taken.", field="email") from exc

        log.info("Registered account", extra={"user_id": user.id, "role": user.role})
        return AuthResultOut(user=user, token=self.coordinator.issue(user))

    @staticmethod
    def _profile_shape(dto: RegisterIn) -> tuple[str | None, str | None, str | None]:
        """Return ``(first, last, organization)`` keeping only the chosen shape."""
        if dto.is_organization:
            org = _clean(dto.organization_name)
            if org is None:
                raise ValidationFailure(
                    "The organization name field is required for organizations.",
                    field="organization_name",
                )
            return None, None, org

        first = _clean(dto.first_name)
        last = _clean(dto.last_name)
        if first is None:
            raise ValidationFailure("The first name field is required.", field="first_name")
        if last is None:
            raise ValidationFailure("The last name field is required.", field="last_name")
        return first, last, None

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Authenticate by email *or* phone plus password.

        :raises InvalidCredentials: On any mismatch; never says which part.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.authenticate(dto.login, dto.password)
            if user is None:
                raise InvalidCredentials()

        return AuthResultOut(user=user, token=self.coordinator.issue(user))

    # ------------------------------------------------------------------ #
    # Refresh / logout
    # ------------------------------------------------------------------ #

    def refresh(self, token: str) -> IssuedToken:
        """
        Exchange a valid token for a new one; the old one is revoked.

        :raises TokenOperationFailure: Expired, revoked or malformed token,
            or the account no longer exists.
        """
        user_id = self._coerce_user_id(self.issuer.subject_of(token))
        try:
            user = self._reload(user_id)
        except NotFoundError as exc:
            raise TokenOperationFailure("Token subject no longer exists") from exc
        return self.coordinator.issue(user, lambda ttl: self.issuer.refresh(token, ttl))

    def logout(self, token: str) -> None:
        """Revoke ``token``; later use of it fails."""
        self.issuer.revoke(token)

    # ------------------------------------------------------------------ #
    # Profile
    # ------------------------------------------------------------------ #

    def me(self, user_id: int | str) -> User:
        return self._reload(self._coerce_user_id(user_id))

    def change_password(self, dto: ChangePasswordIn) -> None:
        """
        Replace the password after checking the current one.

        Existing tokens stay valid.

        :raises ValidationFailure: Wrong current password or too-short new one.
        """
        if len(dto.new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailure(
                f"The new password must be at least {MIN_PASSWORD_LENGTH} characters.",
                field="new_password",
            )
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)
            if not user.verify_password(dto.current_password):
                raise ValidationFailure(
                    "Current password is incorrect.", field="current_password"
                )
            repo.update_password(user.id, dto.new_password)
        log.info("Password changed", extra={"user_id": dto.user_id})

    # ------------------------------------------------------------------ #
    # Staff provisioning (CLI)
    # ------------------------------------------------------------------ #

    def provision_staff(self, dto: StaffIn) -> User:
        """
        Create a clerk or admin account. Nothing is issued.

        :raises ValidationFailure: Unknown staff role.
        :raises ConflictError: Email already in use.
        """
        if dto.role not in STAFF_ROLES:
            raise ValidationFailure(
                f"Role must be one of: {', '.join(sorted(STAFF_ROLES))}.", field="role"
            )
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            if repo.exists_by_email(dto.email):
                raise ConflictError("The email has already been taken.", field="email")
            user = User(
                email=dto.email,
                phone=_clean(dto.phone),
                first_name=_clean(dto.first_name),
                last_name=_clean(dto.last_name),
                is_organization=False,
                role=dto.role,
            )
            user.password = dto.password
            repo.add(user)
        log.info("Provisioned staff account", extra={"user_id": user.id, "role": user.role})
        return user

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _reload(self, user_id: int) -> User:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return user

    @staticmethod
    def _coerce_user_id(subject: int | str) -> int:
        """Ensure the token subject can be treated as an integer user id."""
        if isinstance(subject, int):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise TokenOperationFailure("Invalid token subject.")
