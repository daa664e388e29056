"""Split validation and allocation utilities."""
from decimal import Decimal, ROUND_FLOOR
from typing import List, Sequence

from smartsplit.core.exceptions import (
    DuplicateSplitTarget,
    InvalidAmount,
    InvalidSplitType,
    SplitMismatch,
)
from smartsplit.core.money import EPSILON, Money
from smartsplit.models.expense import Split, SplitType

HUNDRED = Decimal(100)
PERCENT_TOLERANCE = Decimal("0.01")


def parse_split_type(split_type) -> SplitType:
    """Coerce a raw split type into SplitType."""
    try:
        return SplitType(split_type)
    except ValueError:
        allowed = ", ".join(t.value for t in SplitType)
        raise InvalidSplitType(
            f"Unknown split type '{split_type}', expected one of: {allowed}"
        )


def validate_amount(amount: Money) -> None:
    """Expense total must be strictly positive and fit the stored cents field."""
    if not amount.is_positive():
        raise InvalidAmount(f"Expense amount must be positive, got {amount}")
    if not amount.is_storable():
        raise InvalidAmount(f"Expense amount is too large: {amount}")


def validate_splits(amount: Money, splits: Sequence[Split]) -> None:
    """
    Validate an expense's split set against its total.

    Rules:
    - at least one split
    - no negative split amounts
    - each user_id at most once
    - sum of split amounts equals amount within EPSILON
    """
    if not splits:
        raise SplitMismatch(
            "Expense must have at least one split", expected=amount, actual=Money(0)
        )

    seen = set()
    for split in splits:
        if split.amount.is_negative():
            raise InvalidAmount(
                f"Split for user {split.user_id} has negative amount: {split.amount}"
            )
        if not split.amount.is_storable():
            raise InvalidAmount(
                f"Split for user {split.user_id} is too large: {split.amount}"
            )
        if split.user_id in seen:
            raise DuplicateSplitTarget(split.user_id)
        seen.add(split.user_id)

    total = Money.sum(split.amount for split in splits)
    if not total.is_close(amount, EPSILON):
        raise SplitMismatch(
            f"Splits sum to {total}, expense amount is {amount}",
            expected=amount,
            actual=total,
        )


def _distribute_remainder(base_cents: List[int], remainder: int) -> List[int]:
    """Hand out leftover cents one at a time to the first participants."""
    return [
        cents + (1 if i < remainder else 0)
        for i, cents in enumerate(base_cents)
    ]


def allocate_equal(amount: Money, user_ids: Sequence[str]) -> List[Split]:
    """Divide amount into whole cents across user_ids, remainder to the first few."""
    if not user_ids:
        raise SplitMismatch(
            "Equal split needs at least one participant", expected=amount, actual=Money(0)
        )
    per_user, remainder = divmod(amount.cents, len(user_ids))
    cents = _distribute_remainder([per_user] * len(user_ids), remainder)
    return [
        Split(user_id=user_id, amount=Money.from_cents(c))
        for user_id, c in zip(user_ids, cents)
    ]


def allocate_percentage(
    amount: Money, shares: Sequence[tuple]
) -> List[Split]:
    """
    Turn (user_id, percentage) pairs into cent amounts.

    Percentages must sum to 100 (within 0.01). Shares are taken relative to
    the actual percentage total, floored to whole cents, and the leftover
    cents (fewer than one per participant) go to the first participants.
    """
    if not shares:
        raise SplitMismatch(
            "Percentage split needs at least one participant",
            expected=amount,
            actual=Money(0),
        )

    for user_id, percentage in shares:
        if percentage is None or Decimal(percentage) < 0:
            raise InvalidAmount(
                f"Split for user {user_id} needs a non-negative percentage"
            )

    total_percent = sum((Decimal(p) for _, p in shares), Decimal(0))
    if abs(total_percent - HUNDRED) > PERCENT_TOLERANCE:
        raise SplitMismatch(f"Percentages sum to {total_percent}, expected 100")

    base = [
        int((Decimal(amount.cents) * Decimal(p) / total_percent).to_integral_value(rounding=ROUND_FLOOR))
        for _, p in shares
    ]
    remainder = amount.cents - sum(base)
    cents = _distribute_remainder(base, remainder)
    return [
        Split(user_id=user_id, amount=Money.from_cents(c))
        for (user_id, _), c in zip(shares, cents)
    ]


def resolve_splits(
    split_type: SplitType,
    amount: Money,
    requested: Sequence[tuple],
) -> List[Split]:
    """
    Build the concrete split list for a request.

    `requested` holds (user_id, amount or None, percentage or None) triples.
    - equal: explicit amounts are kept as given; if none are given the
      total is divided evenly
    - exact: every split must carry an amount
    - percentage: every split must carry a percentage
    """
    if split_type == SplitType.EQUAL:
        if all(split_amount is None for _, split_amount, _ in requested):
            return allocate_equal(amount, [user_id for user_id, _, _ in requested])
        return _explicit_splits(requested)

    if split_type == SplitType.PERCENTAGE:
        return allocate_percentage(
            amount, [(user_id, percentage) for user_id, _, percentage in requested]
        )

    return _explicit_splits(requested)


def _explicit_splits(requested: Sequence[tuple]) -> List[Split]:
    splits = []
    for user_id, split_amount, _ in requested:
        if split_amount is None:
            raise SplitMismatch(f"Split for user {user_id} is missing an amount")
        splits.append(Split(user_id=user_id, amount=Money(split_amount)))
    return splits
