"""User repository for persistence and credential lookups."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from authgate.models.user import User
from authgate.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER issues tokens; it only finds, creates and mutates rows.
    """

    model = User

    def _updatable_fields(self) -> set[str]:
        """Fields callers may assign (never ``role`` or ``password_hash``)."""
        return {
            "first_name",
            "last_name",
            "organization_name",
            "email",
            "phone",
            "dob",
            "date_founded",
            "profile_image",
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_login(self, login: str) -> User | None:
        """Fetch a user whose email *or* phone equals ``login``.

        :param login: Email address or phone number as typed by the user.
        :type login: str
        :returns: Matching user or ``None``.
        :rtype: User | None
        """
        value = login.strip()
        stmt = (
            select(User)
            .where(or_(User.email == value.lower(), User.phone == value))
            .order_by(User.id.asc())
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def exists_by_phone(self, phone: str) -> bool:
        stmt = select(User.id).where(User.phone == phone.strip())
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Atomic upsert ----------------------------

    def get_or_create_by_email(self, email: str, **defaults: Any) -> tuple[User, bool]:
        """Return the user for ``email``, inserting it with ``defaults`` if absent.

        The insert runs inside a SAVEPOINT. When a concurrent request wins the
        race on ``uq_users_email`` the savepoint is rolled back and the
        winner's row is read instead, so the outer transaction stays usable
        and exactly one account exists per email.

        :param email: Natural key of the account.
        :type email: str
        :param defaults: Column values (and ``password``) for a new row.
        :returns: ``(user, created)``.
        :rtype: tuple[User, bool]
        :raises IntegrityError: When the insert fails for another constraint.
        """
        existing = self.get_by_email(email)
        if existing is not None:
            return existing, False

        savepoint = self.session.begin_nested()
        try:
            user = User(email=email, **defaults)
            self.session.add(user)
            self.session.flush()
        except IntegrityError:
            savepoint.rollback()
            winner = self.get_by_email(email)
            if winner is None:
                raise
            return winner, False
        savepoint.commit()
        return user, True

    # ---------------------------- Credentials ----------------------------

    def authenticate(self, login: str, password: str) -> User | None:
        """Return the user for ``login`` when ``password`` matches, else ``None``.

        :param login: Email or phone.
        :type login: str
        :param password: Raw password to verify.
        :type password: str
        :rtype: User | None
        """
        user = self.get_by_login(login)
        if not user or not user.verify_password(password):
            return None
        return user

    def update_password(self, user_id: int, new_password: str) -> None:
        """Update a user's password and flush the session.

        :raises ValueError: If the user does not exist.
        """
        user = self.get(user_id)
        if not user:
            raise ValueError(f"User {user_id} not found.")
        user.password = new_password  # invokes setter → hash
        self.flush()
