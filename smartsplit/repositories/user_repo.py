import re
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from datetime import datetime, timezone
from pymongo.errors import DuplicateKeyError, PyMongoError

from smartsplit.core.exceptions import StorageFailure, UserAlreadyExists
from smartsplit.models.user import UserCreate, UserInDB
from smartsplit.core.security import hash_password

class UserRepository:
    """User database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.users

    async def create_user(self, user_data: UserCreate) -> UserInDB:
        """Create a new user."""
        now = datetime.now(timezone.utc)
        user_dict = {
            "username": user_data.username,
            "email": user_data.email,
            "hashed_password": hash_password(user_data.password),
            "is_deleted": False,
            "created_at": now,
            "updated_at": now
        }

        try:
            result = await self.collection.insert_one(user_dict)
        except DuplicateKeyError as exc:
            # unique email/username index lost a race with a concurrent signup
            raise UserAlreadyExists("Username or email already registered") from exc
        except PyMongoError as exc:
            raise StorageFailure(f"Could not create user: {exc}") from exc
        user_dict["_id"] = result.inserted_id
        return UserInDB(**user_dict)

    async def get_user_by_email(self, email: str) -> UserInDB | None:
        """Get user by email."""
        try:
            user = await self.collection.find_one({"email": email, "is_deleted": False})
        except PyMongoError as exc:
            raise StorageFailure(f"Could not load user: {exc}") from exc
        if user:
            return UserInDB(**user)
        return None

    async def get_user_by_username_or_email(self, username: str, email: str) -> UserInDB | None:
        """Existing user holding either identifier, if any."""
        try:
            user = await self.collection.find_one({
                "$or": [{"username": username}, {"email": email}]
            })
        except PyMongoError as exc:
            raise StorageFailure(f"Could not load user: {exc}") from exc
        if user:
            return UserInDB(**user)
        return None

    async def get_user_by_id(self, user_id: str) -> UserInDB | None:
        """Get user by ID."""
        if not ObjectId.is_valid(user_id):
            return None
        try:
            user = await self.collection.find_one({
                "_id": ObjectId(user_id),
                "is_deleted": False
            })
        except PyMongoError as exc:
            raise StorageFailure(f"Could not load user {user_id}: {exc}") from exc
        if user:
            return UserInDB(**user)
        return None

    async def get_users_by_ids(self, user_ids: List[str]) -> List[UserInDB]:
        """Active users among user_ids; unknown and malformed ids are skipped."""
        oids = [ObjectId(uid) for uid in user_ids if ObjectId.is_valid(uid)]
        if not oids:
            return []
        try:
            docs = await self.collection.find({
                "_id": {"$in": oids},
                "is_deleted": False
            }).to_list(None)
        except PyMongoError as exc:
            raise StorageFailure(f"Could not load users: {exc}") from exc
        return [UserInDB(**doc) for doc in docs]

    async def search_users(self, query: str, limit: int = 10) -> List[UserInDB]:
        """Case-insensitive substring search over username and email."""
        pattern = {"$regex": re.escape(query), "$options": "i"}
        try:
            docs = await self.collection.find({
                "$or": [{"username": pattern}, {"email": pattern}],
                "is_deleted": False
            }).to_list(limit)
        except PyMongoError as exc:
            raise StorageFailure(f"Could not search users: {exc}") from exc
        return [UserInDB(**doc) for doc in docs]

    async def update_password(self, user_id: str, new_password: str) -> bool:
        """Replace a user's password hash. False if the user is gone."""
        try:
            result = await self.collection.update_one(
                {"_id": ObjectId(user_id), "is_deleted": False},
                {"$set": {
                    "hashed_password": hash_password(new_password),
                    "updated_at": datetime.now(timezone.utc)
                }}
            )
        except PyMongoError as exc:
            raise StorageFailure(f"Could not update password: {exc}") from exc
        return result.matched_count == 1
