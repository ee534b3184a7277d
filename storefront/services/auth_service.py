import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from storefront.errors import AuthenticationError, EmailAlreadyRegisteredError
from storefront.models.user import User
from storefront.schemas.auth import RegisterRequest
from storefront.security import (
    REFRESH_TOKEN,
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalars().first()


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    return await db.get(User, user_id)


async def register_user(db: AsyncSession, data: RegisterRequest) -> User:
    email = str(data.email).lower()
    if await get_user_by_email(db, email) is not None:
        raise EmailAlreadyRegisteredError()

    # bcrypt is CPU bound; keep it off the event loop
    password_hash = await run_in_threadpool(get_password_hash, data.password)
    user = User(
        name=data.name,
        email=email,
        password_hash=password_hash,
        phone=data.phone,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same address
        await db.rollback()
        raise EmailAlreadyRegisteredError()

    logger.info("User registered", extra={"user_id": str(user.id)})
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if user is None or not await run_in_threadpool(
        verify_password, password, user.password_hash
    ):
        logger.info("Failed login attempt")
        raise AuthenticationError("Invalid credentials")
    return user


async def refresh_access_token(db: AsyncSession, refresh_token: str) -> tuple[str, User]:
    user_id = decode_token(refresh_token, REFRESH_TOKEN)
    user = await get_user(db, user_id)
    if user is None:
        raise AuthenticationError("Invalid refresh token")
    return create_access_token(user.id, user.email), user
