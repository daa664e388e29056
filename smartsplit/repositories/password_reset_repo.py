"""
PasswordResetRepository - one outstanding reset token per user.

Only the sha256 of a token is stored. A TTL index on expires_at lets
MongoDB purge stale rows; lookups still check expiry themselves because
the TTL monitor runs only about once a minute.
"""

from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from smartsplit.core.exceptions import StorageFailure


class PasswordResetRepository:
    """Password reset token operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.password_reset_tokens

    async def store_token(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        """Save a token hash, replacing any earlier token for the same user."""
        try:
            await self.collection.update_one(
                {"user_id": user_id},
                {"$set": {
                    "token_hash": token_hash,
                    "expires_at": expires_at,
                    "created_at": datetime.now(timezone.utc)
                }},
                upsert=True
            )
        except PyMongoError as exc:
            raise StorageFailure(f"Could not store reset token: {exc}") from exc

    async def find_user_for_token(self, token_hash: str) -> Optional[str]:
        """User id owning an unexpired token with this hash, if any."""
        try:
            doc = await self.collection.find_one({
                "token_hash": token_hash,
                "expires_at": {"$gt": datetime.now(timezone.utc)}
            })
        except PyMongoError as exc:
            raise StorageFailure(f"Could not load reset token: {exc}") from exc
        if doc:
            return doc["user_id"]
        return None

    async def delete_for_user(self, user_id: str) -> None:
        try:
            await self.collection.delete_many({"user_id": user_id})
        except PyMongoError as exc:
            raise StorageFailure(f"Could not delete reset token: {exc}") from exc
