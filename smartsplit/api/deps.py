"""Shared route helpers: group access checks and ledger error mapping."""
import logging

from fastapi import HTTPException, status

from smartsplit.core.exceptions import (
    GroupNotFound,
    LedgerError,
    LedgerValidationError,
    StorageFailure,
)
from smartsplit.models.group import Group
from smartsplit.models.user import UserInDB
from smartsplit.repositories.group_repo import GroupRepository

logger = logging.getLogger(__name__)


async def get_member_group(group_id: str, current_user: UserInDB, db) -> Group:
    """Load a group the current user belongs to (404 unknown, 403 non-member)."""
    try:
        group = await GroupRepository(db).get_group(group_id)
    except StorageFailure as exc:
        raise ledger_http_error(exc)

    if group is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found"
        )
    if not group.has_member(str(current_user.id)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this group."
        )
    return group


def ledger_http_error(exc: LedgerError) -> HTTPException:
    """Translate a ledger error into the matching HTTP status."""
    if isinstance(exc, LedgerValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc)
        )
    if isinstance(exc, GroupNotFound):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc)
        )
    if isinstance(exc, StorageFailure):
        logger.error("Storage failure: %s", exc)
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage unavailable, try again later"
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )
