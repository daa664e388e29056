from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from smartsplit.models.group import Group


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    member_ids: List[str] = []


class GroupMemberResponse(BaseModel):
    user_id: str
    username: str
    joined_at: datetime


class GroupResponse(BaseModel):
    id: str
    name: str
    created_by: str
    created_at: datetime
    member_count: int

    @classmethod
    def from_group(cls, group: Group) -> "GroupResponse":
        return cls(
            id=str(group.id),
            name=group.name,
            created_by=group.created_by,
            created_at=group.created_at,
            member_count=len(group.members)
        )


class GroupMembersResponse(BaseModel):
    group_id: str
    members: List[GroupMemberResponse]
