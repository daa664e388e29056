from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from smartsplit.models.balance import Member
from smartsplit.models.base import MongoModel, _utcnow


# Embedded documents don't need MongoModel (no separate _id)
class GroupMember(BaseModel):
    user_id: str
    username: str
    joined_at: datetime = Field(default_factory=_utcnow)


class Group(MongoModel):
    name: str
    created_by: str
    members: List[GroupMember] = []

    def has_member(self, user_id: str) -> bool:
        return any(member.user_id == user_id for member in self.members)

    def ledger_members(self) -> List[Member]:
        """Members in join order, as the balance calculator consumes them."""
        return [
            Member(user_id=member.user_id, username=member.username)
            for member in self.members
        ]
