from typing import List
from fastapi import APIRouter, HTTPException, Depends, Query
from smartsplit.api.deps import ledger_http_error
from smartsplit.core.auth import get_current_user
from smartsplit.core.exceptions import StorageFailure
from smartsplit.db.mongo import get_db
from smartsplit.models.user import UserInDB, UserResponse
from smartsplit.repositories.user_repo import UserRepository

router = APIRouter()

@router.get("/search", response_model=List[UserResponse])
async def search_users(
    query: str = Query(default=""),
    current_user: UserInDB = Depends(get_current_user),
    db = Depends(get_db)
):
    """Search users by username or email (at most 10 results)"""
    if len(query) < 2:
        raise HTTPException(
            status_code=400,
            detail="Search query must be at least 2 characters."
        )

    try:
        users = await UserRepository(db).search_users(query, limit=10)
    except StorageFailure as exc:
        raise ledger_http_error(exc)
    return [user.to_response() for user in users]
