import logging
from typing import Dict, Iterable, List, Sequence

from bson import ObjectId

from smartsplit.core.exceptions import GroupNotFound, InvalidAmount
from smartsplit.core.money import Money
from smartsplit.models.balance import Balance, Member
from smartsplit.models.expense import Expense, Split
from smartsplit.repositories.expense_repo import ExpenseRepository
from smartsplit.utils.split_validation import (
    parse_split_type,
    validate_amount,
    validate_splits,
)

logger = logging.getLogger(__name__)


def calculate_balances(
    members: Iterable[Member],
    paid_cents: Dict[str, int],
    owed_cents: Dict[str, int],
) -> List[Balance]:
    """
    Build one Balance per member from per-user cent totals.

    Members who neither paid nor owe anything still get an all-zero entry.
    Totals for users outside `members` are ignored. Sorted by username
    (case-sensitive), then user_id.
    """
    balances = []
    for member in members:
        total_paid = Money.from_cents(paid_cents.get(member.user_id, 0))
        total_owed = Money.from_cents(owed_cents.get(member.user_id, 0))
        balances.append(
            Balance(
                user_id=member.user_id,
                username=member.username,
                total_paid=total_paid,
                total_owed=total_owed,
                net=total_paid - total_owed,
            )
        )
    balances.sort(key=lambda b: (b.username, b.user_id))
    return balances


class LedgerService:
    """Expense write path and balance reads for one database handle."""

    def __init__(self, db):
        self.expenses = ExpenseRepository(db)

    async def record_expense(
        self,
        group_id: str,
        payer_id: str,
        amount,
        description: str,
        split_type,
        splits: Sequence[Split],
    ) -> Expense:
        """
        Validate and atomically store an expense with its splits.

        All validation happens before the write; on any error nothing is
        stored. Membership is the caller's responsibility.

        Raises InvalidAmount, SplitMismatch, DuplicateSplitTarget,
        InvalidSplitType or StorageFailure.
        """
        try:
            amount = Money(amount)
        except ValueError as exc:
            raise InvalidAmount(str(exc)) from exc
        split_type = parse_split_type(split_type)
        validate_amount(amount)
        validate_splits(amount, splits)

        expense_id = str(ObjectId())
        expense = Expense(
            id=expense_id,
            group_id=group_id,
            payer_id=payer_id,
            amount=amount,
            description=description or "",
            split_type=split_type,
            splits=[
                Split(expense_id=expense_id, user_id=s.user_id, amount=s.amount)
                for s in splits
            ],
        )

        await self.expenses.insert_expense(expense)
        logger.info(
            "Recorded expense %s in group %s: %s paid by %s, %d splits",
            expense.id, group_id, amount, payer_id, len(splits)
        )
        return expense

    async def list_group_expenses(self, group_id: str) -> List[Expense]:
        return await self.expenses.list_group_expenses(group_id)

    async def compute_balances(
        self, group_id: str, members: Sequence[Member]
    ) -> List[Balance]:
        """
        Current balances of every member of a group.

        Raises GroupNotFound when the group has no members.
        """
        if not members:
            raise GroupNotFound(group_id)

        paid, owed = await self.expenses.aggregate_group_totals(group_id)
        logger.debug(
            "Group %s totals: %d payers, %d split users", group_id, len(paid), len(owed)
        )
        return calculate_balances(members, paid, owed)
