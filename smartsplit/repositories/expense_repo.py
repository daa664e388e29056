"""
ExpenseRepository - Append-only expense storage.

Storage rules:
1. One document per expense, splits embedded
2. Single insert_one per expense, so an expense and its splits commit together
3. All amounts stored as integer cents
4. No update or delete path
"""

import logging
from typing import Dict, List, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from smartsplit.core.exceptions import StorageFailure
from smartsplit.models.expense import Expense

logger = logging.getLogger(__name__)


class ExpenseRepository:
    """Repository for group expenses and their splits."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.expenses

    async def insert_expense(self, expense: Expense) -> Expense:
        """
        Persist an already-validated expense with all of its splits.

        Raises StorageFailure if MongoDB rejects the write or is unreachable;
        in that case nothing was written.
        """
        try:
            await self.collection.insert_one(expense.to_document())
        except PyMongoError as exc:
            logger.error("Failed to insert expense %s: %s", expense.id, exc)
            raise StorageFailure(f"Could not record expense: {exc}") from exc
        return expense

    async def list_group_expenses(self, group_id: str) -> List[Expense]:
        """All expenses of a group, newest first."""
        try:
            docs = await self.collection.find(
                {"group_id": group_id}
            ).sort("created_at", -1).to_list(None)
        except PyMongoError as exc:
            raise StorageFailure(f"Could not load expenses: {exc}") from exc
        return [Expense.from_document(doc) for doc in docs]

    async def aggregate_group_totals(
        self, group_id: str
    ) -> Tuple[Dict[str, int], Dict[str, int]]:
        """
        Per-user paid and owed totals (in cents) for a group.

        Both totals come out of one $facet pipeline, so they are computed
        over the same set of expense documents.

        Returns: ({user_id: paid_cents}, {user_id: owed_cents})
        """
        pipeline = [
            {"$match": {"group_id": group_id}},
            {
                "$facet": {
                    "paid": [
                        {
                            "$group": {
                                "_id": "$payer_id",
                                "total": {"$sum": "$amount_cents"}
                            }
                        }
                    ],
                    "owed": [
                        {"$unwind": "$splits"},
                        {
                            "$group": {
                                "_id": "$splits.user_id",
                                "total": {"$sum": "$splits.amount_cents"}
                            }
                        }
                    ]
                }
            }
        ]

        try:
            result = await self.collection.aggregate(pipeline).to_list(1)
        except PyMongoError as exc:
            raise StorageFailure(f"Could not aggregate balances: {exc}") from exc

        facets = result[0] if result else {}
        paid = {row["_id"]: row["total"] for row in facets.get("paid", [])}
        owed = {row["_id"]: row["total"] for row in facets.get("owed", [])}
        return paid, owed
