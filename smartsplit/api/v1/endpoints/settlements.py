from fastapi import APIRouter, Depends

from smartsplit.api.deps import get_member_group, ledger_http_error
from smartsplit.core.auth import get_current_user
from smartsplit.core.exceptions import LedgerError
from smartsplit.db.mongo import get_db
from smartsplit.models.user import UserInDB
from smartsplit.schemas.balance import SettlementPlanResponse
from smartsplit.services.settlement_service import SettlementService

router = APIRouter()


@router.get("/optimize/{group_id}", response_model=SettlementPlanResponse)
async def optimize_group_settlements(
    group_id: str,
    current_user: UserInDB = Depends(get_current_user),
    db = Depends(get_db)
):
    """Minimal payment plan that settles the group's current balances"""
    await get_member_group(group_id, current_user, db)

    try:
        settlements = await SettlementService(db).optimize_for_group(group_id)
    except LedgerError as exc:
        raise ledger_http_error(exc)

    return SettlementPlanResponse(group_id=group_id, settlements=settlements)
