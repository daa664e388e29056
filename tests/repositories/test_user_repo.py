"""Tests for UserRepository and PasswordResetRepository against mocked collections."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from smartsplit.core.exceptions import StorageFailure, UserAlreadyExists
from smartsplit.models.user import UserCreate
from smartsplit.repositories.password_reset_repo import PasswordResetRepository
from smartsplit.repositories.user_repo import UserRepository


def new_user():
    return UserCreate(username="dana", email="dana@example.com", password="testpassword123")


@pytest.mark.asyncio
async def test_duplicate_key_is_user_already_exists(mock_db):
    mock_db.users.insert_one = AsyncMock(side_effect=DuplicateKeyError("E11000 duplicate key"))

    with patch("smartsplit.repositories.user_repo.hash_password", return_value="hashed"):
        with pytest.raises(UserAlreadyExists):
            await UserRepository(mock_db).create_user(new_user())


@pytest.mark.asyncio
async def test_other_insert_errors_are_storage_failures(mock_db):
    mock_db.users.insert_one = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))

    with patch("smartsplit.repositories.user_repo.hash_password", return_value="hashed"):
        with pytest.raises(StorageFailure):
            await UserRepository(mock_db).create_user(new_user())


@pytest.mark.asyncio
async def test_reads_wrap_driver_errors(mock_db):
    mock_db.users.find_one = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
    failing_cursor = MagicMock()
    failing_cursor.to_list = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
    mock_db.users.find = MagicMock(return_value=failing_cursor)
    repo = UserRepository(mock_db)

    with pytest.raises(StorageFailure):
        await repo.get_user_by_email("alice@example.com")
    with pytest.raises(StorageFailure):
        await repo.get_user_by_username_or_email("alice", "alice@example.com")
    with pytest.raises(StorageFailure):
        await repo.get_user_by_id(str(ObjectId()))
    with pytest.raises(StorageFailure):
        await repo.get_users_by_ids([str(ObjectId())])
    with pytest.raises(StorageFailure):
        await repo.search_users("al")


@pytest.mark.asyncio
async def test_update_password_for_missing_user(mock_db):
    mock_db.users.update_one = AsyncMock(return_value=MagicMock(matched_count=0))

    with patch("smartsplit.repositories.user_repo.hash_password", return_value="hashed"):
        updated = await UserRepository(mock_db).update_password(str(ObjectId()), "brand-new-password")

    assert updated is False


@pytest.mark.asyncio
async def test_store_token_replaces_earlier_token(mock_db):
    expires_at = datetime.now(timezone.utc) + timedelta(hours=1)

    await PasswordResetRepository(mock_db).store_token("u1", "hash-1", expires_at)

    query, update = mock_db.password_reset_tokens.update_one.call_args[0]
    assert query == {"user_id": "u1"}
    assert update["$set"]["token_hash"] == "hash-1"
    assert update["$set"]["expires_at"] == expires_at
    assert mock_db.password_reset_tokens.update_one.call_args[1] == {"upsert": True}


@pytest.mark.asyncio
async def test_find_user_for_token_only_matches_unexpired(mock_db):
    mock_db.password_reset_tokens.find_one = AsyncMock(return_value={"user_id": "u1"})
    before = datetime.now(timezone.utc)

    user_id = await PasswordResetRepository(mock_db).find_user_for_token("hash-1")

    assert user_id == "u1"
    query = mock_db.password_reset_tokens.find_one.call_args[0][0]
    assert query["token_hash"] == "hash-1"
    assert query["expires_at"]["$gt"] >= before


@pytest.mark.asyncio
async def test_reset_token_storage_failure(mock_db):
    mock_db.password_reset_tokens.find_one = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))

    with pytest.raises(StorageFailure):
        await PasswordResetRepository(mock_db).find_user_for_token("hash-1")
