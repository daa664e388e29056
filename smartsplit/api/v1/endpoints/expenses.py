from fastapi import APIRouter, Depends, HTTPException, status

from smartsplit.api.deps import get_member_group, ledger_http_error
from smartsplit.core.auth import get_current_user
from smartsplit.core.exceptions import LedgerError
from smartsplit.db.mongo import get_db
from smartsplit.models.user import UserInDB
from smartsplit.schemas.expense import (
    ExpenseCreate,
    ExpenseCreatedResponse,
    ExpenseResponse,
)
from smartsplit.services.ledger_service import LedgerService
from smartsplit.utils.split_validation import resolve_splits

router = APIRouter()


@router.post("", response_model=ExpenseCreatedResponse, status_code=status.HTTP_201_CREATED)
async def record_expense(
    expense_in: ExpenseCreate,
    current_user: UserInDB = Depends(get_current_user),
    db = Depends(get_db)
):
    """Record an expense and its splits in one write (members only)."""
    group = await get_member_group(expense_in.group_id, current_user, db)

    # Payer and split users must belong to the group too
    outsiders = [
        uid for uid in [expense_in.payer_id] + [s.user_id for s in expense_in.splits]
        if not group.has_member(uid)
    ]
    if outsiders:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Users not in group: {', '.join(sorted(set(outsiders)))}"
        )

    try:
        splits = resolve_splits(
            expense_in.split_type,
            expense_in.amount,
            [(s.user_id, s.amount, s.percentage) for s in expense_in.splits]
        )
        expense = await LedgerService(db).record_expense(
            group_id=expense_in.group_id,
            payer_id=expense_in.payer_id,
            amount=expense_in.amount,
            description=expense_in.description,
            split_type=expense_in.split_type,
            splits=splits
        )
    except LedgerError as exc:
        raise ledger_http_error(exc)

    usernames = {member.user_id: member.username for member in group.members}
    return ExpenseCreatedResponse(expense=ExpenseResponse.from_expense(expense, usernames))
