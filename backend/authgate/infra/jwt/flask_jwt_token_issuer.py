# authgate/infra/jwt/flask_jwt_token_issuer.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, cast

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from authgate.services._shared.errors import TokenOperationFailure
from authgate.services._shared.ports import TokenDenylistStore, TokenIssuer

if TYPE_CHECKING:
    from authgate.models.user import User

# Custom claims carried over when a token is refreshed.
CARRIED_CLAIMS = ("email", "is_organization", "role")


class JWTTokenIssuer(TokenIssuer):
    """
    Adapter minting bearer tokens with Flask-JWT-Extended.

    The TTL is always passed explicitly to ``create_access_token``;
    ``None`` becomes ``expires_delta=False`` (no ``exp`` claim). Revocation
    goes to the denylist; tokens without ``exp`` stay listed for
    ``retention_minutes``.

    .. note::
       Requires an active Flask app context with JWT settings.
    """

    def __init__(
        self,
        *,
        denylist: TokenDenylistStore,
        default_ttl_minutes: int = 60,
        retention_minutes: int = 60 * 24 * 30,
    ) -> None:
        self.denylist = denylist
        self._default_ttl = default_ttl_minutes
        self.retention_minutes = retention_minutes

    # ----------------------------- default TTL -----------------------------

    def get_default_ttl(self) -> int:
        return self._default_ttl

    def set_default_ttl(self, minutes: int) -> None:
        self._default_ttl = int(minutes)

    # ------------------------------- issuing --------------------------------

    @staticmethod
    def _expires(ttl_minutes: int | None) -> timedelta | bool:
        return False if ttl_minutes is None else timedelta(minutes=ttl_minutes)

    def _create(self, subject: str, claims: dict[str, Any], ttl_minutes: int | None) -> str:
        try:
            return cast(
                str,
                create_access_token(
                    identity=subject,
                    additional_claims=claims,
                    expires_delta=self._expires(ttl_minutes),
                ),
            )
        except (JWTExtendedException, PyJWTError) as exc:
            raise TokenOperationFailure("Could not create token") from exc

    def mint(self, user: User, ttl_minutes: int | None) -> str:
        return self._create(str(user.id), user.jwt_claims(), ttl_minutes)

    def refresh(self, token: str, ttl_minutes: int | None) -> str:
        """Mint a successor for ``token`` with the same claims, then revoke it."""
        claims = self.decode(token)
        carried = {k: claims[k] for k in CARRIED_CLAIMS if k in claims}
        new_token = self._create(str(claims["sub"]), carried, ttl_minutes)
        self._revoke_claims(claims)
        return new_token

    # ------------------------------ validation ------------------------------

    def decode(self, token: str) -> dict[str, Any]:
        """
        Decode ``token`` and reject expired, malformed or denylisted ones.

        :raises TokenOperationFailure: When the token is unusable.
        """
        try:
            claims = cast(dict[str, Any], decode_token(token))
        except (JWTExtendedException, PyJWTError) as exc:
            raise TokenOperationFailure("Token is invalid or expired") from exc
        if self.denylist.is_revoked(str(claims.get("jti"))):
            raise TokenOperationFailure("Token has been revoked")
        return claims

    def subject_of(self, token: str) -> str:
        return str(self.decode(token)["sub"])

    def revoke(self, token: str) -> None:
        self._revoke_claims(self.decode(token))

    def _revoke_claims(self, claims: dict[str, Any]) -> None:
        exp = claims.get("exp")
        if exp is None:
            expires_at = datetime.now(UTC) + timedelta(minutes=self.retention_minutes)
        else:
            expires_at = datetime.fromtimestamp(int(exp), tz=UTC)
        self.denylist.revoke_jti(jti=str(claims["jti"]), expires_at=expires_at)
