from datetime import timedelta
from typing import Any

import jwt
import structlog

from notevault.core.core import Service
from notevault.core.modules.session.models import Anonymous, Authenticated, Identity, IssuedCredential, SessionToken
from notevault.errors import ExpiredCredentialError, InvalidCredentialError, UserNotFoundError

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "iat", "exp"]


class SessionService(Service):
    """Issues and verifies stateless session credentials (HS256 JWT).

    Nothing is stored server side. Expiry is checked against the core clock rather than
    PyJWT's wall clock so that every time-dependent check in the app agrees.
    """

    def create_credential(self, user_id: int) -> IssuedCredential:
        issued_at = self.core.clock().replace(microsecond=0)
        expires_at = issued_at + timedelta(hours=self.core.config.session_ttl_hours)
        claims = {"sub": str(user_id), "iat": int(issued_at.timestamp()), "exp": int(expires_at.timestamp())}
        token = jwt.encode(claims, self.core.config.session_secret_key, algorithm=ALGORITHM)
        return IssuedCredential(token=SessionToken(token), user_id=user_id, issued_at=issued_at, expires_at=expires_at)

    def decode_credential(self, credential: str) -> int:
        """Check signature and expiry, return the embedded user id. Does not touch the database."""
        try:
            claims: dict[str, Any] = jwt.decode(
                credential,
                self.core.config.session_secret_key,
                algorithms=[ALGORITHM],
                options={"require": REQUIRED_CLAIMS, "verify_exp": False, "verify_iat": False, "verify_nbf": False},
            )
        except jwt.InvalidTokenError as e:
            raise InvalidCredentialError from e

        expires_at = claims["exp"]
        if not isinstance(expires_at, int | float) or isinstance(expires_at, bool):
            raise InvalidCredentialError
        if self.core.clock().timestamp() >= expires_at:
            raise ExpiredCredentialError

        try:
            return int(claims["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidCredentialError from e

    async def verify(self, credential: str) -> int:
        """Resolve a credential to a live user id.

        Raises:
            InvalidCredentialError: Malformed credential or bad signature.
            ExpiredCredentialError: Authentic credential past its expiry.
            UserNotFoundError: The user has been deleted since the credential was issued.
        """
        try:
            user_id = self.decode_credential(credential)
        except (InvalidCredentialError, ExpiredCredentialError) as e:
            logger.debug("credential_rejected", reason=type(e).__name__)
            raise

        if await self.core.services.user.find_user_by_id(user_id) is None:
            logger.info("credential_rejected", reason="UserNotFoundError", user_id=user_id)
            raise UserNotFoundError
        return user_id

    async def identify(self, credential: str | None) -> Identity:
        """Map an optional bearer credential to a request identity."""
        if not credential:
            return Anonymous()
        return Authenticated(user_id=await self.verify(credential))
