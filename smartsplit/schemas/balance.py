from typing import List

from pydantic import BaseModel

from smartsplit.models.balance import Balance, Settlement


class BalanceListResponse(BaseModel):
    """Balances of every group member, by username."""
    group_id: str
    balances: List[Balance]


class SettlementPlanResponse(BaseModel):
    """Recomputed on every request; never stored."""
    group_id: str
    settlements: List[Settlement]
