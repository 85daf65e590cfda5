"""Errors raised by the revenue and bonus services."""


class BonusError(Exception):
    """Base class for service errors with a user-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BonusValidationError(BonusError):
    """Malformed or out-of-range input; nothing was applied."""


class BonusNotFoundError(BonusError):
    """The referenced record does not exist."""


class BonusStateError(BonusError):
    """Transition attempted from a state that does not allow it."""
