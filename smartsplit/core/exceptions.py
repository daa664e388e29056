"""Ledger and settlement errors."""


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    pass


class LedgerValidationError(LedgerError):
    """Raised before any write when a request cannot be applied as given."""

    pass


class InvalidAmount(LedgerValidationError):
    """Expense or split amount is negative, zero where a total is required, or too large to store."""

    pass


class SplitMismatch(LedgerValidationError):
    """Splits do not sum to the expense total within tolerance."""

    def __init__(self, message: str, expected=None, actual=None):
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class DuplicateSplitTarget(LedgerValidationError):
    """The same user appears more than once in an expense's splits."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} appears more than once in splits")


class InvalidSplitType(LedgerValidationError):
    """Split type is not one of equal, exact, percentage."""

    pass


class InvalidBalance(LedgerValidationError):
    """A balance handed to the settlement optimizer is malformed."""

    pass


class GroupNotFound(LedgerError):
    """Group does not exist or has no members."""

    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__(f"Group {group_id} not found")


class StorageFailure(LedgerError):
    """Underlying persistence is unavailable or rejected the operation."""

    pass


class UserAlreadyExists(Exception):
    """Username or email is already registered."""

    pass
