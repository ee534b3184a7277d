"""Integration tests for the account service."""

import threading

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.errors import AuthenticationError
from storefront.schemas.auth import RegisterRequest
from storefront.security import get_password_hash, verify_password
from storefront.services import auth_service


@pytest.mark.integration
class TestPasswordHashingOffLoop:
    """Test suite for keeping bcrypt off the event loop thread."""

    @pytest.fixture
    def hashing_threads(self, monkeypatch: pytest.MonkeyPatch) -> list[int]:
        threads: list[int] = []

        def recording_hash(password: str) -> str:
            threads.append(threading.get_ident())
            return get_password_hash(password)

        def recording_verify(password: str, hashed: str) -> bool:
            threads.append(threading.get_ident())
            return verify_password(password, hashed)

        monkeypatch.setattr(auth_service, "get_password_hash", recording_hash)
        monkeypatch.setattr(auth_service, "verify_password", recording_verify)
        return threads

    @pytest.mark.asyncio
    async def test_register_and_login_hash_in_worker_threads(
        self, db: AsyncSession, hashing_threads: list[int]
    ) -> None:
        """Test hashing and verification run outside the event loop thread."""
        loop_thread = threading.get_ident()
        await auth_service.register_user(
            db,
            RegisterRequest(
                name="Grace Hopper", email="grace@navy-mail.org", password="cobol-1959"
            ),
        )

        user = await auth_service.authenticate_user(db, "grace@navy-mail.org", "cobol-1959")
        with pytest.raises(AuthenticationError):
            await auth_service.authenticate_user(db, "grace@navy-mail.org", "fortran-1957")

        assert user.email == "grace@navy-mail.org"
        assert len(hashing_threads) == 3
        assert loop_thread not in hashing_threads
