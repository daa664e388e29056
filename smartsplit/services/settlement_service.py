"""
Settlement optimizer - turns group balances into a short payment plan.

Algorithm (greedy two-pointer matching):
1. Creditors: net > EPSILON. Debtors: net < -EPSILON. Everyone else is done.
2. Both lists keep the order of the input balances. They are NOT re-sorted
   by amount; input order is the tie-break, which keeps the output
   reproducible but not always the smallest possible plan.
3. Pay min(creditor, debtor) from the current debtor to the current
   creditor, reduce both, advance whichever side dropped below EPSILON.
4. Stop as soon as either side is exhausted.

At most len(creditors) + len(debtors) - 1 settlements are produced.
"""

import logging
from typing import List, Sequence

from smartsplit.core.exceptions import GroupNotFound, InvalidBalance
from smartsplit.core.money import EPSILON, Money
from smartsplit.models.balance import Balance, Settlement
from smartsplit.repositories.group_repo import GroupRepository
from smartsplit.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


def _check_balances(balances: Sequence[Balance]) -> None:
    seen = set()
    for balance in balances:
        for field in ("total_paid", "total_owed", "net"):
            if not isinstance(getattr(balance, field), Money):
                raise InvalidBalance(
                    f"Balance for user {balance.user_id} has non-money {field}"
                )
        if balance.total_paid.is_negative() or balance.total_owed.is_negative():
            raise InvalidBalance(
                f"Balance for user {balance.user_id} has a negative total"
            )
        if balance.net != balance.total_paid - balance.total_owed:
            raise InvalidBalance(
                f"Balance for user {balance.user_id}: net {balance.net} does not "
                f"equal paid {balance.total_paid} minus owed {balance.total_owed}"
            )
        if balance.user_id in seen:
            raise InvalidBalance(f"User {balance.user_id} has more than one balance")
        seen.add(balance.user_id)


def optimize_settlements(balances: Sequence[Balance]) -> List[Settlement]:
    """
    Greedy settlement plan for a balance vector.

    Raises InvalidBalance for malformed input. Output depends only on the
    order and amounts of `balances`.
    """
    _check_balances(balances)

    # [balance, outstanding amount] pairs, in input order
    creditors = [[b, b.net] for b in balances if b.net > EPSILON]
    debtors = [[b, -b.net] for b in balances if b.net < -EPSILON]

    settlements = []
    i = 0
    j = 0

    while i < len(creditors) and j < len(debtors):
        creditor, credit = creditors[i]
        debtor, debt = debtors[j]

        settle = min(credit, debt)
        settlements.append(
            Settlement(
                from_user_id=debtor.user_id,
                from_username=debtor.username,
                to_user_id=creditor.user_id,
                to_username=creditor.username,
                amount=Money(settle),
            )
        )

        creditors[i][1] = credit - settle
        debtors[j][1] = debt - settle

        if creditors[i][1] < EPSILON:
            i += 1
        if debtors[j][1] < EPSILON:
            j += 1

    return settlements


class SettlementService:
    """Recomputes a group's settlement plan from its current ledger."""

    def __init__(self, db):
        self.groups = GroupRepository(db)
        self.ledger = LedgerService(db)

    async def optimize_for_group(self, group_id: str) -> List[Settlement]:
        """Raises GroupNotFound for unknown or empty groups."""
        group = await self.groups.get_group(group_id)
        if group is None:
            raise GroupNotFound(group_id)

        members = group.ledger_members()
        # Balances arrive sorted by username; that order is the tie-break
        balances = await self.ledger.compute_balances(group_id, members)
        settlements = optimize_settlements(balances)
        logger.info(
            "Group %s: %d settlements for %d members", group_id, len(settlements), len(members)
        )
        return settlements
