from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from smartsplit.core.money import Money
from smartsplit.models.expense import Expense, SplitType


class SplitIn(BaseModel):
    """One participant in an expense request."""
    user_id: str
    amount: Optional[Money] = None
    percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)


class ExpenseCreate(BaseModel):
    """Request body to record an expense."""
    group_id: str
    payer_id: str
    amount: Money
    description: str = Field(default="", max_length=255)
    split_type: SplitType
    splits: List[SplitIn]


class SplitResponse(BaseModel):
    user_id: str
    username: Optional[str] = None
    amount: Money


class ExpenseResponse(BaseModel):
    """Expense with its splits."""
    id: str
    group_id: str
    payer_id: str
    payer_username: Optional[str] = None
    amount: Money
    description: str
    split_type: SplitType
    created_at: datetime
    splits: List[SplitResponse]

    @classmethod
    def from_expense(cls, expense: Expense, usernames: dict | None = None) -> "ExpenseResponse":
        usernames = usernames or {}
        return cls(
            id=expense.id,
            group_id=expense.group_id,
            payer_id=expense.payer_id,
            payer_username=usernames.get(expense.payer_id),
            amount=expense.amount,
            description=expense.description,
            split_type=expense.split_type,
            created_at=expense.created_at,
            splits=[
                SplitResponse(
                    user_id=split.user_id,
                    username=usernames.get(split.user_id),
                    amount=split.amount
                )
                for split in expense.splits
            ]
        )


class ExpenseCreatedResponse(BaseModel):
    message: str = "Expense added successfully."
    expense: ExpenseResponse


class ExpenseListResponse(BaseModel):
    expenses: List[ExpenseResponse]
