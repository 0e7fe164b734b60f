# authgate/services/federation/service.py
from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping

from authgate.models.user import ROLE_CUSTOMER
from authgate.services._shared.base import BaseService
from authgate.services._shared.errors import (
    AssetStorageDegraded,
    IdentityVerificationFailure,
    NotFoundError,
    ServiceError,
)
from authgate.services._shared.ports import (
    AssetStoreRouter,
    AvatarFetcher,
    ExternalIdentity,
    IdentityProvider,
)
from authgate.services._shared.ports.asset_store import PROFILE_IMAGE_PREFIX
from authgate.services.federation.dto import (
    FederatedLoginFailure,
    FederatedLoginOutcome,
    FederatedLoginSuccess,
    ReconciliationResult,
    ReconciliationState,
)
from authgate.services.tokens.coordinator import TokenIssuanceCoordinator

log = logging.getLogger(__name__)


def new_profile_image_key() -> str:
    """Return a fresh ``profile_images/profile_<random>.jpg`` storage key."""
    return f"{PROFILE_IMAGE_PREFIX}profile_{secrets.token_hex(5)}.jpg"


class IdentityReconciler(BaseService):
    """
    Turn a verified external identity into a local account and a token.

    States advance ``START → IDENTITY_VERIFIED → ACCOUNT_RESOLVED →
    ASSET_RECONCILED → TOKEN_ISSUED → DONE``. Failures while verifying,
    resolving the account or issuing the token end in a
    :class:`FederatedLoginFailure`; avatar problems only log
    :class:`AssetStorageDegraded` and the flow carries on.
    """

    def __init__(
        self,
        *,
        provider: IdentityProvider,
        avatar_fetcher: AvatarFetcher,
        assets: AssetStoreRouter,
        coordinator: TokenIssuanceCoordinator,
    ) -> None:
        super().__init__()
        self.provider = provider
        self.avatar_fetcher = avatar_fetcher
        self.assets = assets
        self.coordinator = coordinator

    def authorization_url(self, state: str | None = None) -> str:
        return self.provider.authorization_url(state)

    def handle_callback(self, params: Mapping[str, str]) -> FederatedLoginOutcome:
        """
        Run the whole reconciliation for one provider callback.

        :param params: Query parameters the provider redirected with.
        :returns: Success with account and token, or a tagged failure.
        """
        state = ReconciliationState.START
        try:
            identity = self._verify(params)
            state = ReconciliationState.IDENTITY_VERIFIED

            result = self._resolve_account(identity)
            state = ReconciliationState.ACCOUNT_RESOLVED

            self._reconcile_avatar(result, identity.avatar_url)
            state = ReconciliationState.ASSET_RECONCILED

            token = self.coordinator.issue(result.user)
            state = ReconciliationState.TOKEN_ISSUED
        except ServiceError as exc:
            log.error(
                "Federated login failed: %s",
                exc,
                extra={"provider": self.provider.name, "state": state.value},
            )
            return FederatedLoginFailure(failed_at=state, reason=str(exc))
        except Exception as exc:
            # Provider and database surprises still end as a redirect, not a 500.
            log.exception(
                "Federated login failed unexpectedly",
                extra={"provider": self.provider.name, "state": state.value},
            )
            return FederatedLoginFailure(failed_at=state, reason=f"{type(exc).__name__}: {exc}")

        log.info(
            "Federated login succeeded",
            extra={
                "provider": self.provider.name,
                "state": ReconciliationState.DONE.value,
                "user_id": result.user.id,
                "was_newly_created": result.was_newly_created,
            },
        )
        return FederatedLoginSuccess(result=result, token=token)

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #

    def _verify(self, params: Mapping[str, str]) -> ExternalIdentity:
        identity = self.provider.verify_callback(params)
        if not identity.email:
            raise IdentityVerificationFailure("Identity provider returned no email")
        return identity

    def _resolve_account(self, identity: ExternalIdentity) -> ReconciliationResult:
        """Find the account for the identity's email or create a customer one."""
        with self.rw_uow() as uow:
            user, created = uow.users.get_or_create_by_email(
                str(identity.email),
                first_name=identity.given_name,
                last_name=identity.family_name,
                organization_name=None,
                phone=None,
                is_organization=False,
                role=ROLE_CUSTOMER,
                # Never disclosed; federated users sign in through the provider.
                password=secrets.token_urlsafe(32),
            )
        return ReconciliationResult(user=user, was_newly_created=created)

    def _reconcile_avatar(self, result: ReconciliationResult, avatar_url: str | None) -> None:
        """
        Store the provider avatar and point the account at it.

        Never raises: every storage problem is logged and the account keeps
        its current image.
        """
        if not avatar_url:
            return

        key = self._store_avatar(avatar_url)
        if key is None:
            return

        user = result.user
        old_key = user.profile_image
        if not result.was_newly_created and old_key:
            self._delete_quietly(old_key)

        try:
            with self.rw_uow() as uow:
                fresh = uow.users.get(user.id)
                if fresh is None:
                    raise NotFoundError("User", user.id)
                uow.users.update(fresh, profile_image=key)
        except Exception as exc:
            # The new blob is orphaned and the pointer may name a deleted one.
            self._degraded(
                f"Could not save profile image pointer: {exc}", key, stale_key=old_key
            )

    def _store_avatar(self, url: str) -> str | None:
        key = new_profile_image_key()
        try:
            data = self.avatar_fetcher.fetch(url)
            self.assets.for_new().put(key, data)
        except Exception as exc:
            self._degraded(f"Could not store profile image: {exc}", key)
            return None
        return key

    def _delete_quietly(self, key: str) -> None:
        try:
            store = self.assets.owner_of(key)
            if store.exists(key):
                store.delete(key)
        except Exception as exc:
            self._degraded(f"Could not delete old profile image: {exc}", key)

    @staticmethod
    def _degraded(message: str, key: str, *, stale_key: str | None = None) -> None:
        extra = {"storage_key": key, "state": ReconciliationState.ACCOUNT_RESOLVED.value}
        if stale_key:
            extra["stale_storage_key"] = stale_key
        log.warning("%s", AssetStorageDegraded(message), extra=extra)
