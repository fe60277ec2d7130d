import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from core.config import Settings, get_settings
from core.errors import ErrorKind, MatchmakingError

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def create_access_token(self, data: dict) -> str:
        """
        Generates a JWT access token with the provided data and expiration time.
        """
        to_encode = data.copy()
        expire = (
            datetime.now(UTC)
            + timedelta(minutes=self.settings.server_access_token_expire_minutes)
        ).timestamp()
        to_encode.update({"exp": expire})
        return jwt.encode(
            to_encode,
            self.settings.server_secret_key,
            algorithm=self.settings.server_algorithm,
        )

    def decode_access_token(self, token: str) -> dict | None:
        """
        Decodes the JWT access token and returns the contained data.
        """
        try:
            decoded_token = jwt.decode(
                token,
                self.settings.server_secret_key,
                algorithms=[self.settings.server_algorithm],
            )
            return (
                decoded_token
                if decoded_token.get("exp", 0) >= datetime.now(UTC).timestamp()
                else None
            )
        except JWTError:
            return None

    def user_from_authorization(self, authorization: str | None) -> str | None:
        """
        Extracts the user id (``sub``) from an ``Authorization: Bearer`` header.
        """
        if not authorization:
            return None
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None

        payload = self.decode_access_token(token.strip())
        if payload is None:
            return None
        subject = payload.get("sub")
        return str(subject) if subject else None

    def resolve_caller(self, authorization: str | None, body_user_id: str | None) -> str:
        """
        Resolves who is calling: a valid bearer credential wins, otherwise the
        ``userId`` sent in the body. Raises UNAUTHORIZED when neither resolves.
        """
        user_id = self.user_from_authorization(authorization)
        if user_id is None and authorization:
            logger.debug("Bearer credential did not resolve; falling back to body userId")
        if user_id is None:
            user_id = body_user_id or None
        if user_id is None:
            raise MatchmakingError(ErrorKind.UNAUTHORIZED, "Unauthorized: userId not provided")
        return user_id
