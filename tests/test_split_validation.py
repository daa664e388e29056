"""
Tests for split validation and allocation.

Covers:
- Sum invariant with the 0.01 tolerance
- Duplicate and negative splits
- Equal and percentage allocation of leftover cents
"""

from decimal import Decimal

import pytest

from smartsplit.core.exceptions import (
    DuplicateSplitTarget,
    InvalidAmount,
    InvalidSplitType,
    SplitMismatch,
)
from smartsplit.core.money import MAX_CENTS, Money
from smartsplit.models.expense import Split, SplitType
from smartsplit.utils.split_validation import (
    allocate_equal,
    allocate_percentage,
    parse_split_type,
    resolve_splits,
    validate_amount,
    validate_splits,
)


def splits_of(*amounts):
    return [Split(user_id=f"u{i}", amount=Money(a)) for i, a in enumerate(amounts)]


class TestValidateSplits:
    def test_exact_sum_accepted(self):
        validate_splits(Money("100.00"), splits_of("33.33", "33.33", "33.34"))

    def test_one_cent_short_accepted(self):
        validate_splits(Money("100.00"), splits_of("33.33", "33.33", "33.33"))

    def test_ten_cents_short_rejected(self):
        with pytest.raises(SplitMismatch) as exc_info:
            validate_splits(Money("100.00"), splits_of("33.30", "33.30", "33.30"))
        assert exc_info.value.expected == Money("100.00")
        assert exc_info.value.actual == Money("99.90")

    def test_empty_splits_rejected(self):
        with pytest.raises(SplitMismatch):
            validate_splits(Money("10.00"), [])

    def test_duplicate_user_rejected(self):
        splits = [
            Split(user_id="alice", amount=Money("5")),
            Split(user_id="alice", amount=Money("5")),
        ]
        with pytest.raises(DuplicateSplitTarget) as exc_info:
            validate_splits(Money("10"), splits)
        assert exc_info.value.user_id == "alice"

    def test_negative_split_rejected(self):
        with pytest.raises(InvalidAmount):
            validate_splits(Money("10"), splits_of("15", "-5"))

    def test_oversized_split_rejected(self):
        with pytest.raises(InvalidAmount):
            validate_splits(Money("1e20"), splits_of("1e20"))


class TestValidateAmount:
    @pytest.mark.parametrize("amount", ["0", "-1.00"])
    def test_non_positive_rejected(self, amount):
        with pytest.raises(InvalidAmount):
            validate_amount(Money(amount))

    def test_positive_accepted(self):
        validate_amount(Money("0.01"))

    def test_amount_past_int64_cents_rejected(self):
        with pytest.raises(InvalidAmount):
            validate_amount(Money("1e20"))

    def test_largest_storable_amount_accepted(self):
        validate_amount(Money.from_cents(MAX_CENTS))


class TestSplitType:
    def test_known_types(self):
        assert parse_split_type("equal") == SplitType.EQUAL
        assert parse_split_type(SplitType.PERCENTAGE) == SplitType.PERCENTAGE

    def test_unknown_type(self):
        with pytest.raises(InvalidSplitType):
            parse_split_type("shares")


class TestAllocation:
    def test_equal_distributes_leftover_cents_to_first_users(self):
        splits = allocate_equal(Money("100.00"), ["a", "b", "c"])
        assert [s.amount for s in splits] == [Money("33.34"), Money("33.33"), Money("33.33")]
        assert Money.sum(s.amount for s in splits) == Money("100.00")

    def test_equal_even_division(self):
        splits = allocate_equal(Money("90.00"), ["a", "b", "c"])
        assert all(s.amount == Money("30.00") for s in splits)

    def test_percentage_allocation(self):
        splits = allocate_percentage(
            Money("10.00"), [("a", Decimal("33.33")), ("b", Decimal("33.33")), ("c", Decimal("33.34"))]
        )
        assert Money.sum(s.amount for s in splits) == Money("10.00")
        assert [s.amount for s in splits] == [Money("3.34"), Money("3.33"), Money("3.33")]

    def test_percentages_within_tolerance_cover_whole_amount(self):
        splits = allocate_percentage(
            Money("1000000.00"), [("a", Decimal("50")), ("b", Decimal("49.99"))]
        )
        assert Money.sum(s.amount for s in splits) == Money("1000000.00")
        assert splits[0].amount > splits[1].amount
        validate_splits(Money("1000000.00"), splits)

    def test_percentages_must_sum_to_hundred(self):
        with pytest.raises(SplitMismatch):
            allocate_percentage(Money("10.00"), [("a", Decimal("50")), ("b", Decimal("40"))])

    def test_percentage_missing(self):
        with pytest.raises(InvalidAmount):
            allocate_percentage(Money("10.00"), [("a", Decimal("100")), ("b", None)])


class TestResolveSplits:
    def test_equal_without_amounts_is_allocated(self):
        splits = resolve_splits(
            SplitType.EQUAL, Money("10.00"), [("a", None, None), ("b", None, None)]
        )
        assert [s.amount for s in splits] == [Money("5.00"), Money("5.00")]

    def test_equal_with_amounts_keeps_them(self):
        splits = resolve_splits(
            SplitType.EQUAL, Money("10.00"), [("a", Money("5.01"), None), ("b", Money("4.99"), None)]
        )
        assert [s.amount for s in splits] == [Money("5.01"), Money("4.99")]

    def test_exact_requires_every_amount(self):
        with pytest.raises(SplitMismatch):
            resolve_splits(
                SplitType.EXACT, Money("10.00"), [("a", Money("10.00"), None), ("b", None, None)]
            )

    def test_percentage(self):
        splits = resolve_splits(
            SplitType.PERCENTAGE,
            Money("200.00"),
            [("a", None, Decimal("75")), ("b", None, Decimal("25"))]
        )
        assert [s.amount for s in splits] == [Money("150.00"), Money("50.00")]
