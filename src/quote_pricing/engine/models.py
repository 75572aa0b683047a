"""
Data models for the quotation pricing engine.

Uses dataclasses for structured, type-safe data representation.
Configuration and derived totals are frozen; line items stay mutable
because the calling form owns and edits them while a quotation is drafted.
"""
import math
from dataclasses import dataclass, asdict

from ..exceptions import InvalidLineItem


def _read_number(data: dict, key: str, position: int) -> float:
    """Missing or blank reads as 0; anything else must parse as a float."""
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    if isinstance(value, bool):
        raise InvalidLineItem(f"Line {position}: {key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidLineItem(f"Line {position}: {key} must be a number, got {value!r}")


def _read_serial(data: dict, position: int) -> int:
    """Serial number of a row, falling back to its position when absent."""
    value = data.get('serial_number')
    if value is None or (isinstance(value, str) and not value.strip()):
        return position
    number = _read_number(data, 'serial_number', position)
    if not math.isfinite(number) or number != int(number):
        raise InvalidLineItem(f"Line {position}: serial_number must be a whole number, got {value!r}")
    return int(number)


@dataclass(frozen=True)
class PricingConfig:
    """Commission, overprice and VAT percentages (0-100, not fractions)."""
    commission_percent: float
    overprice_percent: float
    vat_rate: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class LineItem:
    """A single contractor-entered line of a quotation."""
    quantity: float
    unit_price: float
    serial_number: int = 1
    item_name: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict, position: int = 1) -> 'LineItem':
        """
        Create LineItem from a form/API row, tolerating missing text fields.

        Args:
            data: Row as received from a form or a transmitted payload
            position: 1-based row position, used when serial_number is absent

        Raises:
            InvalidLineItem: a number cannot be read from the row
        """
        return cls(
            quantity=_read_number(data, 'quantity', position),
            unit_price=_read_number(data, 'unit_price', position),
            serial_number=_read_serial(data, position),
            item_name=data.get('item_name') or "",
            description=data.get('description') or "",
        )

    def to_dict(self) -> dict:
        return {
            "serial_number": self.serial_number,
            "item_name": self.item_name,
            "description": self.description,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
        }


@dataclass(frozen=True)
class LineItemTotals:
    """Per-line monetary breakdown. Never rounded."""
    total_price: float
    commission: float
    overprice: float
    user_price: float
    vendor_net_price: float


@dataclass(frozen=True)
class QuotationTotals:
    """Aggregate breakdown of a quotation, including VAT on the vendor net."""
    total_price: float = 0.0
    commission: float = 0.0
    overprice: float = 0.0
    user_price: float = 0.0
    vendor_net_price: float = 0.0
    amount_before_vat: float = 0.0
    vat_amount: float = 0.0
    final_payable: float = 0.0
    item_count: int = 0

    @property
    def platform_revenue(self) -> float:
        """What the platform keeps: commission from the contractor plus markup from the customer."""
        return self.commission + self.overprice

    def to_dict(self, include_revenue: bool = True) -> dict:
        data = asdict(self)
        if include_revenue:
            data["platform_revenue"] = self.platform_revenue
        return data


def renumber_line_items(items: list[LineItem]) -> list[LineItem]:
    """Reassign serial numbers 1..n in current order (after a row is removed)."""
    for i, item in enumerate(items, start=1):
        item.serial_number = i
    return items
