"""
Validation Service - fail-fast checks a caller places around the engine.

The engine accepts any numbers; this layer rejects configurations and
line items that would produce economically meaningless totals.
"""
import math
from dataclasses import dataclass, field
from typing import Optional, Iterable

from ..config.settings import get_settings, Settings
from ..engine.models import PricingConfig, LineItem, QuotationTotals
from ..engine.pricing_engine import PricingEngine
from ..exceptions import PricingError, InvalidConfiguration, InvalidLineItem, InvalidQuotation
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation pass."""
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: str):
        self.errors.append(error)
        self.valid = False

    def add_warning(self, warning: str):
        self.warnings.append(warning)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        for error in other.errors:
            self.add_error(error)
        self.warnings.extend(other.warnings)
        return self

    def raise_for_errors(self, exc_type: type[PricingError] = PricingError):
        """Raise exc_type carrying every collected error, if any."""
        if not self.valid:
            raise exc_type("; ".join(self.errors), errors=list(self.errors))


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class QuotationValidator:
    """Validates pricing configuration, line items and submission envelopes."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def validate_config(self, config: PricingConfig) -> ValidationResult:
        """Percentages must be finite, within [0, 100] and within the business caps."""
        result = ValidationResult()
        caps = {
            'commission_percent': self.settings.max_commission_percent,
            'overprice_percent': self.settings.max_overprice_percent,
            'vat_rate': self.settings.max_vat_rate,
        }

        for name, cap in caps.items():
            value = getattr(config, name, None)
            if value is None:
                result.add_error(f"{name} is required")
                continue
            if not _is_number(value) or not math.isfinite(value):
                result.add_error(f"{name} must be a finite number")
                continue
            if value < 0 or value > 100:
                result.add_error(f"{name} must be between 0 and 100, got {value}")
            elif value > cap:
                result.add_error(f"{name} cannot exceed {cap}%, got {value}")

        return result

    def validate_line_item(self, item: LineItem) -> ValidationResult:
        """Quantity at least 1, unit price non-negative, both finite."""
        result = ValidationResult()
        label = f"Line {item.serial_number}"

        if not _is_number(item.quantity) or not math.isfinite(item.quantity):
            result.add_error(f"{label}: quantity must be a finite number")
        elif item.quantity < 1:
            result.add_error(f"{label}: quantity must be at least 1, got {item.quantity}")

        if not _is_number(item.unit_price) or not math.isfinite(item.unit_price):
            result.add_error(f"{label}: unit price must be a finite number")
        elif item.unit_price < 0:
            result.add_error(f"{label}: unit price cannot be negative, got {item.unit_price}")
        elif item.unit_price == 0:
            result.add_warning(f"{label}: unit price is zero")

        if not item.item_name.strip():
            result.add_warning(f"{label}: item name is empty")

        return result

    def validate_line_items(self, items: Iterable[LineItem]) -> ValidationResult:
        """Every item valid, at least one item, serial numbers unique and contiguous from 1."""
        items = list(items)
        result = ValidationResult()

        if not items:
            result.add_error("At least one line item is required")
            return result

        for item in items:
            result.merge(self.validate_line_item(item))

        serials = sorted(item.serial_number for item in items)
        if serials != list(range(1, len(items) + 1)):
            result.add_error(
                f"Serial numbers must be unique and contiguous from 1 to {len(items)}, got {serials}"
            )

        return result

    def validate_submission(self, base_price: float, system_capacity_kwp: float) -> ValidationResult:
        """System capacity within range and price per kWp under the cap."""
        result = ValidationResult()

        if not _is_number(system_capacity_kwp) or not math.isfinite(system_capacity_kwp) or system_capacity_kwp <= 0:
            result.add_error(f"System capacity must be a positive number of kWp, got {system_capacity_kwp}")
            return result

        low, high = self.settings.min_system_size_kwp, self.settings.max_system_size_kwp
        if system_capacity_kwp < low or system_capacity_kwp > high:
            result.add_error(f"System size must be between {low:g} and {high:g} kWp")

        price_per_kwp = base_price / system_capacity_kwp
        if price_per_kwp > self.settings.max_price_per_kwp:
            result.add_error(
                f"Price per kWp cannot exceed {self.settings.max_price_per_kwp:g}, got {price_per_kwp:.2f}"
            )

        return result


def validate_quotation(
    config: PricingConfig,
    items: list[LineItem],
    validator: Optional[QuotationValidator] = None,
) -> None:
    """
    Check a configuration and its line items; line warnings are logged.

    Raises:
        InvalidConfiguration: configuration out of range
        InvalidQuotation: no line items
        InvalidLineItem: any line item invalid
    """
    validator = validator or QuotationValidator()

    validator.validate_config(config).raise_for_errors(InvalidConfiguration)

    if not items:
        raise InvalidQuotation("At least one line item is required")

    line_result = validator.validate_line_items(items)
    for warning in line_result.warnings:
        logger.warning(warning)
    line_result.raise_for_errors(InvalidLineItem)


def validated_quotation_totals(
    config: PricingConfig,
    items: Iterable[LineItem],
    engine: Optional[PricingEngine] = None,
    validator: Optional[QuotationValidator] = None,
) -> QuotationTotals:
    """Validate first, then compute. Raises as validate_quotation does."""
    items = list(items)
    engine = engine or PricingEngine()

    validate_quotation(config, items, validator=validator)
    return engine.compute_quotation_totals(config, items)
