"""
Money - fixed-precision currency amounts.

Design principles:
- Two fractional digits (cents), quantized with ROUND_HALF_UP on the way in
- Arithmetic stays in Decimal, so repeated additions never drift
- Stored in MongoDB as integer cents so server-side $sum is exact
- "Effectively zero" / "effectively equal" use EPSILON, never exact equality
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from functools import total_ordering
from typing import Any, Iterable

CENT = Decimal("0.01")
# Largest amount that fits the int64 cents field MongoDB stores
MAX_CENTS = 2**63 - 1


@total_ordering
class Money:
    """Signed fixed-point amount with two fractional digits."""

    __slots__ = ("amount",)

    def __init__(self, value: Any = 0):
        if isinstance(value, Money):
            self.amount = value.amount
            return
        if isinstance(value, bool):
            raise ValueError("Money cannot be built from a bool")
        if isinstance(value, float):
            # repr-based conversion keeps 0.1 as 0.1 instead of its binary expansion
            value = repr(value)
        try:
            amount = Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError(f"Invalid money amount: {value!r}")
        if not amount.is_finite():
            raise ValueError(f"Money amount must be finite, got {value!r}")
        try:
            self.amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise ValueError(f"Money amount out of range: {value!r}")

    # ===== CONSTRUCTION =====

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        return cls(Decimal(int(cents)).scaleb(-2))

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @classmethod
    def sum(cls, values: Iterable["Money"]) -> "Money":
        """Exact sum of a sequence of amounts (0.00 for an empty sequence)."""
        total = Decimal(0)
        for value in values:
            total += Money(value).amount
        return cls(total)

    @property
    def cents(self) -> int:
        return int(self.amount.scaleb(2))

    # ===== ARITHMETIC =====

    def add(self, other: Any) -> "Money":
        return Money(self.amount + Money(other).amount)

    def subtract(self, other: Any) -> "Money":
        return Money(self.amount - Money(other).amount)

    def __add__(self, other: Any) -> "Money":
        return self.add(other)

    def __radd__(self, other: Any) -> "Money":
        # lets the builtin sum() start from 0
        return Money(other).add(self)

    def __sub__(self, other: Any) -> "Money":
        return self.subtract(other)

    def __rsub__(self, other: Any) -> "Money":
        return Money(other).subtract(self)

    def __neg__(self) -> "Money":
        return Money(-self.amount)

    def __abs__(self) -> "Money":
        return Money(abs(self.amount))

    # ===== COMPARISON =====

    def compare(self, other: Any) -> int:
        """-1, 0 or 1, exact at cent precision."""
        diff = self.amount - Money(other).amount
        if diff < 0:
            return -1
        if diff > 0:
            return 1
        return 0

    def is_zero(self, tolerance: "Money | None" = None) -> bool:
        tolerance = EPSILON if tolerance is None else Money(tolerance)
        return abs(self.amount) <= tolerance.amount

    def is_close(self, other: Any, tolerance: "Money | None" = None) -> bool:
        return self.subtract(other).is_zero(tolerance)

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def is_storable(self) -> bool:
        return abs(self.cents) <= MAX_CENTS

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Money):
            return self.amount == other.amount
        if isinstance(other, (int, Decimal)) and not isinstance(other, bool):
            return self.amount == other
        return NotImplemented

    def __lt__(self, other: Any) -> bool:
        if isinstance(other, Money):
            return self.amount < other.amount
        if isinstance(other, (int, Decimal)) and not isinstance(other, bool):
            return self.amount < other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.amount)

    # ===== CONVERSION =====

    def __float__(self) -> float:
        return float(self.amount)

    def __str__(self) -> str:
        return str(self.amount)

    def __repr__(self) -> str:
        return f"Money('{self.amount}')"

    # ===== PYDANTIC =====

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any):
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(
            cls.validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: float(value.amount), when_used="json"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, core_schema: Any, handler: Any):
        return {"type": "number"}

    @classmethod
    def validate(cls, value: Any) -> "Money":
        if isinstance(value, Money):
            return value
        return cls(value)


# Shared tolerance for split-sum validation and creditor/debtor classification.
EPSILON = Money("0.01")
