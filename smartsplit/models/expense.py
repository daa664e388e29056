"""
Expense model - append-only ledger records.

Design principles:
- One document per expense, splits embedded (written together or not at all)
- Immutable once created: no update or delete path
- Amounts are Money in Python, integer cents in MongoDB
- Invariant: sum(split.amount) == amount within EPSILON
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, Field, ConfigDict

from smartsplit.core.money import Money
from smartsplit.models.base import _utcnow


def _as_utc(value: datetime) -> datetime:
    # BSON dates are UTC; clients without tz_aware hand them back naive
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SplitType(str, Enum):
    EQUAL = "equal"
    EXACT = "exact"
    PERCENTAGE = "percentage"


class Split(BaseModel):
    """One participant's share of an expense."""
    model_config = ConfigDict(frozen=True)

    expense_id: Optional[str] = None
    user_id: str
    amount: Money


class Expense(BaseModel):
    """
    An expense paid by payer_id and shared across splits.

    Invariants:
    - amount > 0
    - each user_id appears at most once in splits
    - sum(splits.amount) == amount within EPSILON
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: str(ObjectId()), validation_alias="_id")
    group_id: str
    payer_id: str
    amount: Money
    description: str = ""
    split_type: SplitType
    splits: List[Split] = []
    created_at: datetime = Field(default_factory=_utcnow)

    def to_document(self) -> Dict[str, Any]:
        """MongoDB document with embedded splits and integer-cent amounts."""
        return {
            "_id": ObjectId(self.id),
            "group_id": self.group_id,
            "payer_id": self.payer_id,
            "amount_cents": self.amount.cents,
            "description": self.description,
            "split_type": self.split_type.value,
            "splits": [
                {"user_id": split.user_id, "amount_cents": split.amount.cents}
                for split in self.splits
            ],
            "created_at": self.created_at,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Expense":
        expense_id = str(doc["_id"])
        return cls(
            id=expense_id,
            group_id=doc["group_id"],
            payer_id=doc["payer_id"],
            amount=Money.from_cents(doc["amount_cents"]),
            description=doc.get("description", ""),
            split_type=doc["split_type"],
            splits=[
                Split(
                    expense_id=expense_id,
                    user_id=split["user_id"],
                    amount=Money.from_cents(split["amount_cents"]),
                )
                for split in doc.get("splits", [])
            ],
            created_at=_as_utc(doc["created_at"]),
        )
