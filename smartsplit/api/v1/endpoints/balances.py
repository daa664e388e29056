from fastapi import APIRouter, Depends

from smartsplit.api.deps import get_member_group, ledger_http_error
from smartsplit.core.auth import get_current_user
from smartsplit.core.exceptions import LedgerError
from smartsplit.db.mongo import get_db
from smartsplit.models.user import UserInDB
from smartsplit.schemas.balance import BalanceListResponse
from smartsplit.services.ledger_service import LedgerService

router = APIRouter()


@router.get("/{group_id}", response_model=BalanceListResponse)
async def get_group_balances(
    group_id: str,
    current_user: UserInDB = Depends(get_current_user),
    db = Depends(get_db)
):
    """Paid, owed and net for every member of a group"""
    group = await get_member_group(group_id, current_user, db)

    try:
        balances = await LedgerService(db).compute_balances(
            group_id, group.ledger_members()
        )
    except LedgerError as exc:
        raise ledger_http_error(exc)

    return BalanceListResponse(group_id=group_id, balances=balances)
