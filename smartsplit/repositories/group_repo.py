"""
GroupRepository - Groups and their embedded member lists.

Membership is managed here, outside the ledger. The API layer uses it to
check that the acting user belongs to a group before touching the ledger.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from smartsplit.core.exceptions import StorageFailure
from smartsplit.models.group import Group, GroupMember
from smartsplit.models.user import UserInDB

logger = logging.getLogger(__name__)


class GroupRepository:
    """Group database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.groups

    async def create_group(self, name: str, creator: UserInDB, others: List[UserInDB]) -> Group:
        """Create a group; the creator is always the first member."""
        now = datetime.now(timezone.utc)
        members = [GroupMember(user_id=str(creator.id), username=creator.username, joined_at=now)]
        seen = {str(creator.id)}
        for user in others:
            if str(user.id) in seen:
                continue
            seen.add(str(user.id))
            members.append(GroupMember(user_id=str(user.id), username=user.username, joined_at=now))

        group = Group(
            name=name,
            created_by=str(creator.id),
            members=members,
            created_at=now,
            updated_at=now
        )
        try:
            await self.collection.insert_one(group.model_dump(by_alias=True))
        except PyMongoError as exc:
            raise StorageFailure(f"Could not create group: {exc}") from exc
        logger.info("Created group %s with %d members", group.id, len(members))
        return group

    async def get_group(self, group_id: str) -> Optional[Group]:
        """Get group by ID, None for unknown or malformed ids."""
        if not ObjectId.is_valid(group_id):
            return None
        try:
            doc = await self.collection.find_one({"_id": ObjectId(group_id)})
        except PyMongoError as exc:
            raise StorageFailure(f"Could not load group: {exc}") from exc
        if doc:
            return Group(**doc)
        return None

    async def list_user_groups(self, user_id: str) -> List[Group]:
        """Groups the user belongs to, newest first."""
        try:
            docs = await self.collection.find(
                {"members.user_id": user_id}
            ).sort("created_at", -1).to_list(None)
        except PyMongoError as exc:
            raise StorageFailure(f"Could not list groups: {exc}") from exc
        return [Group(**doc) for doc in docs]
