from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from smartsplit.api.deps import get_member_group, ledger_http_error
from smartsplit.core.auth import get_current_user
from smartsplit.core.exceptions import StorageFailure
from smartsplit.db.mongo import get_db
from smartsplit.models.user import UserInDB
from smartsplit.repositories.group_repo import GroupRepository
from smartsplit.repositories.user_repo import UserRepository
from smartsplit.schemas.expense import ExpenseListResponse, ExpenseResponse
from smartsplit.schemas.group import (
    GroupCreate,
    GroupMemberResponse,
    GroupMembersResponse,
    GroupResponse,
)
from smartsplit.services.ledger_service import LedgerService

router = APIRouter()


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_in: GroupCreate,
    current_user: UserInDB = Depends(get_current_user),
    db = Depends(get_db)
):
    """Create a group; the creator joins automatically."""
    member_ids = [uid for uid in group_in.member_ids if uid != str(current_user.id)]
    try:
        others = await UserRepository(db).get_users_by_ids(member_ids)
    except StorageFailure as exc:
        raise ledger_http_error(exc)
    if len({str(u.id) for u in others}) != len(set(member_ids)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="One or more member ids do not exist"
        )

    try:
        group = await GroupRepository(db).create_group(group_in.name, current_user, others)
    except StorageFailure as exc:
        raise ledger_http_error(exc)
    return GroupResponse.from_group(group)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    current_user: UserInDB = Depends(get_current_user),
    db = Depends(get_db)
):
    """Groups the current user belongs to, newest first."""
    try:
        groups = await GroupRepository(db).list_user_groups(str(current_user.id))
    except StorageFailure as exc:
        raise ledger_http_error(exc)
    return [GroupResponse.from_group(group) for group in groups]


@router.get("/{group_id}/members", response_model=GroupMembersResponse)
async def list_group_members(
    group_id: str,
    current_user: UserInDB = Depends(get_current_user),
    db = Depends(get_db)
):
    """Members in join order (members only)."""
    group = await get_member_group(group_id, current_user, db)
    return GroupMembersResponse(
        group_id=group_id,
        members=[
            GroupMemberResponse(
                user_id=member.user_id,
                username=member.username,
                joined_at=member.joined_at
            )
            for member in group.members
        ]
    )


@router.get("/{group_id}/expenses", response_model=ExpenseListResponse)
async def list_group_expenses(
    group_id: str,
    current_user: UserInDB = Depends(get_current_user),
    db = Depends(get_db)
):
    """Expenses with their splits, newest first (members only)."""
    group = await get_member_group(group_id, current_user, db)
    usernames = {member.user_id: member.username for member in group.members}

    try:
        expenses = await LedgerService(db).list_group_expenses(group_id)
    except StorageFailure as exc:
        raise ledger_http_error(exc)

    return ExpenseListResponse(
        expenses=[ExpenseResponse.from_expense(e, usernames) for e in expenses]
    )
