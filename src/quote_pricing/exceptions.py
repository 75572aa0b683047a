"""
Errors raised by the validation wrapper and the submission layer.

The pricing engine itself never raises; callers validate before invoking it.
"""


class PricingError(ValueError):
    """Base class for caller-surfaced pricing errors."""

    def __init__(self, message: str, errors: list[str] = None):
        super().__init__(message)
        self.errors = errors or [message]


class InvalidConfiguration(PricingError):
    """Pricing configuration missing, non-numeric or out of range."""


class InvalidLineItem(PricingError):
    """Line item with quantity < 1, negative unit price or bad serial numbering."""


class InvalidQuotation(PricingError):
    """Quotation-level problem: no items, bad system capacity, price per kWp too high."""
