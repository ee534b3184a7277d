"""Unit tests for password hashing and JWT handling."""

import uuid

import pytest

from storefront.errors import AuthenticationError
from storefront.security import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)


@pytest.mark.unit
class TestPasswords:
    """Test suite for password hashing."""

    def test_hash_and_verify(self) -> None:
        """Test a hash verifies its own password only."""
        hashed = get_password_hash("s3cret-pass")

        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong-pass", hashed)


@pytest.mark.unit
class TestTokens:
    """Test suite for access and refresh tokens."""

    def test_access_token_round_trip(self) -> None:
        """Test an access token decodes to its user id."""
        user_id = uuid.uuid4()
        token = create_access_token(user_id, "ada@analytical.io")

        assert decode_token(token, ACCESS_TOKEN) == user_id

    def test_refresh_token_round_trip(self) -> None:
        """Test a refresh token decodes to its user id."""
        user_id = uuid.uuid4()

        assert decode_token(create_refresh_token(user_id), REFRESH_TOKEN) == user_id

    def test_token_types_are_not_interchangeable(self) -> None:
        """Test an access token is refused where a refresh token is expected and vice versa."""
        user_id = uuid.uuid4()

        with pytest.raises(AuthenticationError):
            decode_token(create_access_token(user_id, "ada@analytical.io"), REFRESH_TOKEN)
        with pytest.raises(AuthenticationError):
            decode_token(create_refresh_token(user_id), ACCESS_TOKEN)

    def test_garbage_token(self) -> None:
        """Test a malformed token raises AuthenticationError."""
        with pytest.raises(AuthenticationError) as exc_info:
            decode_token("not.a.jwt", ACCESS_TOKEN)

        assert exc_info.value.status_code == 401
