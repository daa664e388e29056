"""Tests for password hashing and access tokens."""
import pytest
from datetime import timedelta
from fastapi import HTTPException
from unittest.mock import AsyncMock, MagicMock
from pymongo.errors import ServerSelectionTimeoutError
from smartsplit.core.auth import create_access_token, decode_access_token, get_current_user
from smartsplit.core.security import (
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)


class TestPasswordHashing:
    """Test password hashing and verification."""

    def test_hash_password_different_outputs(self):
        """Same password hashes differently (different salts)."""
        password = "MySecurePassword123"
        hash1 = hash_password(password)
        hash2 = hash_password(password)

        assert hash1 != hash2
        assert hash1 != password

    def test_verify_password_correct(self):
        hashed = hash_password("MySecurePassword123")

        assert verify_password("MySecurePassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("MySecurePassword123")

        assert verify_password("WrongPassword456", hashed) is False
        assert verify_password("", hashed) is False


class TestAccessToken:
    """JWT round trip through create/decode."""

    def test_token_carries_user_id(self):
        token = create_access_token("507f1f77bcf86cd799439011")

        assert decode_access_token(token) == "507f1f77bcf86cd799439011"

    def test_expired_token_rejected(self):
        token = create_access_token("507f1f77bcf86cd799439011", timedelta(minutes=-5))

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token)
        assert exc_info.value.status_code == 401

    def test_garbage_token_rejected(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token("not.a.token")
        assert exc_info.value.status_code == 401


class TestResetToken:
    def test_generated_token_matches_stored_hash(self):
        token, token_hash = generate_reset_token()

        assert len(token) == 64
        assert token_hash == hash_reset_token(token)
        assert token_hash != token

    def test_tokens_are_unique(self):
        assert generate_reset_token()[0] != generate_reset_token()[0]


@pytest.mark.asyncio
async def test_current_user_lookup_outage_is_503(mock_db):
    mock_db.users.find_one = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
    token = create_access_token("507f1f77bcf86cd799439011")

    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(credentials=MagicMock(credentials=token), db=mock_db)
    assert exc_info.value.status_code == 503
