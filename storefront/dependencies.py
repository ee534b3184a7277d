from aiokafka import AIOKafkaProducer
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db
from storefront.errors import AuthenticationError
from storefront.models.user import User
from storefront.security import ACCESS_TOKEN, decode_token
from storefront.services import auth_service
from storefront.services.cache import JSONCache

bearer_scheme = HTTPBearer(auto_error=False)


def request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def get_cache(request: Request) -> JSONCache | None:
    return getattr(request.app.state, "menu_cache", None)


def get_producer(request: Request) -> AIOKafkaProducer | None:
    return getattr(request.app.state, "kafka_producer", None)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    user_id = decode_token(credentials.credentials, ACCESS_TOKEN)
    user = await auth_service.get_user(db, user_id)
    if user is None:
        raise AuthenticationError("Invalid access token")
    return user
