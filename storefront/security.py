import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from storefront.config import settings
from storefront.errors import AuthenticationError

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _secret_for(token_type: str) -> str:
    return settings.jwt_refresh_secret if token_type == REFRESH_TOKEN else settings.jwt_secret


def create_token(user_id: uuid.UUID, token_type: str, claims: dict[str, Any] | None = None) -> str:
    if token_type == REFRESH_TOKEN:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    else:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode: dict[str, Any] = dict(claims or {})
    to_encode.update(
        {
            "sub": str(user_id),
            "type": token_type,
            "exp": datetime.now(UTC) + expires_delta,
        }
    )
    return jwt.encode(to_encode, _secret_for(token_type), algorithm=settings.jwt_algorithm)


def create_access_token(user_id: uuid.UUID, email: str) -> str:
    return create_token(user_id, ACCESS_TOKEN, {"email": email})


def create_refresh_token(user_id: uuid.UUID) -> str:
    return create_token(user_id, REFRESH_TOKEN)


def decode_token(token: str, token_type: str) -> uuid.UUID:
    """Return the user id carried by a valid token of the expected type."""
    try:
        payload = jwt.decode(token, _secret_for(token_type), algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise AuthenticationError(f"Invalid {token_type} token")

    if payload.get("type") != token_type or payload.get("sub") is None:
        raise AuthenticationError(f"Invalid {token_type} token")
    try:
        return uuid.UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError(f"Invalid {token_type} token")
