# backend/studio/errors.py
"""
Domain errors raised by the pricing & availability engine.

Every error is a ValueError subclass: callers that only care about
"bad input" can catch ValueError, the HTTP layer maps StudioError to 400.
"""


class StudioError(ValueError):
    """Base class for engine errors."""


class InvalidDateError(StudioError):
    """Date is malformed or outside the supported domain."""


class InvalidTimeError(StudioError):
    """Time of day is malformed ("HH:MM" expected)."""


class InvalidAmountError(StudioError):
    """Negative price, points, credits or counter."""


class HolidayCalendarError(StudioError):
    """Holiday table is inconsistent or does not cover the requested year."""


class DiscountCodeError(StudioError):
    """Discount code cannot be applied."""

    def __init__(self, message: str, reason: str = "invalid"):
        super().__init__(message)
        self.reason = reason
