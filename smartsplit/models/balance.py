"""
Derived ledger views. Nothing here is stored.

- Balance: per-member totals for one group, recomputed on every read
- Settlement: one payer -> payee transfer in an optimized plan
"""

from pydantic import BaseModel, ConfigDict

from smartsplit.core.money import Money


class Member(BaseModel):
    """A group member as the balance calculator sees it."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str


class Balance(BaseModel):
    """
    Net position of one member within a group.

    net = total_paid - total_owed
    Positive net: the group owes this member. Negative: member owes the group.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    total_paid: Money
    total_owed: Money
    net: Money


class Settlement(BaseModel):
    """Debtor pays creditor `amount`."""
    model_config = ConfigDict(frozen=True)

    from_user_id: str
    from_username: str = ""
    to_user_id: str
    to_username: str = ""
    amount: Money
