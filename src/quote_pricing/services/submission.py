"""
Submission Service - builds the payload sent to the quote-submission API
and re-checks payloads received from it.

Money values are rounded to 2 decimal places here and only here; the
engine never rounds between computation steps.
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Iterable

from ..config.settings import get_settings, Settings
from ..engine.models import PricingConfig, LineItem, QuotationTotals
from ..engine.pricing_engine import PricingEngine
from ..exceptions import InvalidLineItem, InvalidQuotation
from ..logging_config import get_logger
from .config_loader import to_remote_payload
from .validation import QuotationValidator

logger = get_logger(__name__)

CENT = Decimal("0.01")

# LineItemTotals field -> submitted line item key
LINE_FIELDS = {
    'total_price': 'total_price',
    'commission': 'rabhan_commission',
    'overprice': 'rabhan_overprice',
    'user_price': 'user_price',
    'vendor_net_price': 'vendor_net_price',
}

# QuotationTotals field -> submission summary key
SUMMARY_FIELDS = {
    'total_price': 'total_price',
    'commission': 'total_commission',
    'overprice': 'total_over_price',
    'user_price': 'total_user_price',
    'vendor_net_price': 'total_vendor_net',
    'amount_before_vat': 'amount_before_vat',
    'vat_amount': 'vat_amount',
    'final_payable': 'total_payable',
}


def round_money(amount: float) -> float:
    """Round a currency amount to 2 dp, half away from zero."""
    return float(Decimal(repr(amount)).quantize(CENT, rounding=ROUND_HALF_UP))


def format_currency(amount: float, currency: str = "SAR") -> str:
    """Display form used by summaries, e.g. '13,782.75 SAR'."""
    return f"{round_money(amount):,.2f} {currency}"


def price_per_kwp(base_price: float, system_capacity_kwp: float) -> float:
    """Aggregate contractor price divided by system capacity; capacity must be positive."""
    if not system_capacity_kwp or system_capacity_kwp <= 0:
        raise InvalidQuotation(
            f"System capacity must be a positive number of kWp, got {system_capacity_kwp}"
        )
    return base_price / system_capacity_kwp


def build_submission_payload(
    config: PricingConfig,
    items: Iterable[LineItem],
    system_capacity_kwp: float,
    extra: Optional[dict] = None,
    engine: Optional[PricingEngine] = None,
    validator: Optional[QuotationValidator] = None,
) -> dict:
    """
    Serialize the computed breakdown alongside the raw line items.

    Args:
        config: Configuration snapshot used for the calculation
        items: Raw line items as entered
        system_capacity_kwp: Solar system capacity used for price_per_kwp
        extra: Caller fields merged into the envelope (request_id, deadlines, ...)

    Returns:
        JSON-ready dict with per-line figures, base_price, price_per_kwp and summary
    """
    items = list(items)
    engine = engine or PricingEngine()
    validator = validator or QuotationValidator()

    if not items:
        raise InvalidQuotation("At least one line item is required")

    pairs = engine.breakdown(config, items)
    totals = engine.compute_quotation_totals(config, items, lines=[t for _, t in pairs])

    validator.validate_submission(totals.total_price, system_capacity_kwp).raise_for_errors(InvalidQuotation)

    line_items = []
    for item, line_totals in pairs:
        row = item.to_dict()
        for attr, key in LINE_FIELDS.items():
            row[key] = round_money(getattr(line_totals, attr))
        line_items.append(row)

    payload = dict(extra or {})
    payload.update({
        "solar_system_capacity_kwp": system_capacity_kwp,
        "base_price": round_money(totals.total_price),
        "price_per_kwp": round_money(price_per_kwp(totals.total_price, system_capacity_kwp)),
        "pricing_config": to_remote_payload(config),
        "line_items": line_items,
        "totals": summarize(totals),
    })

    logger.info(
        "Built submission payload: %d items, base_price=%s, total_payable=%s",
        len(line_items), payload["base_price"], payload["totals"]["total_payable"],
    )
    return payload


def summarize(totals: QuotationTotals) -> dict:
    """Rounded aggregate summary with the submission API's key names."""
    return {key: round_money(getattr(totals, attr)) for attr, key in SUMMARY_FIELDS.items()}


def verify_submission(
    config: PricingConfig,
    payload: dict,
    settings: Optional[Settings] = None,
    engine: Optional[PricingEngine] = None,
) -> list[str]:
    """
    Recompute totals from the payload's raw line items and compare.

    Transmitted figures are never trusted; every one that differs from the
    recomputed value by more than the money tolerance is reported, as is a
    capacity that is not a positive number.

    Returns:
        List of mismatch descriptions (empty when the payload is consistent)

    Raises:
        InvalidQuotation: line_items or totals have the wrong shape
        InvalidLineItem: a line item is not an object or has an unreadable number
    """
    settings = settings or get_settings()
    engine = engine or PricingEngine()
    tolerance = settings.money_tolerance

    rows = payload.get("line_items") or []
    if not isinstance(rows, list):
        raise InvalidQuotation("line_items must be a list")
    sent_totals = payload.get("totals") or {}
    if not isinstance(sent_totals, dict):
        raise InvalidQuotation("totals must be an object")

    items = []
    for i, row in enumerate(rows, start=1):
        if not isinstance(row, dict):
            raise InvalidLineItem(f"Line {i}: must be an object, got {row!r}")
        items.append(LineItem.from_dict(row, position=i))

    pairs = engine.breakdown(config, items)
    totals = engine.compute_quotation_totals(config, items, lines=[t for _, t in pairs])

    mismatches = []

    def check(label: str, sent, expected: float):
        if sent is None:
            return
        try:
            sent_value = float(sent)
        except (TypeError, ValueError):
            mismatches.append(f"{label}: not a number ({sent!r})")
            return
        if abs(sent_value - expected) > tolerance:
            mismatches.append(f"{label}: sent {sent_value:.2f}, expected {expected:.2f}")

    for row, (item, line_totals) in zip(rows, pairs):
        for attr, key in LINE_FIELDS.items():
            check(f"line {item.serial_number} {key}", row.get(key), getattr(line_totals, attr))

    check("base_price", payload.get("base_price"), totals.total_price)

    for attr, key in SUMMARY_FIELDS.items():
        check(f"totals {key}", sent_totals.get(key), getattr(totals, attr))

    sent_capacity = payload.get("solar_system_capacity_kwp")
    capacity = _read_capacity(sent_capacity)
    if sent_capacity is not None and capacity is None:
        mismatches.append(f"solar_system_capacity_kwp: must be a positive number, got {sent_capacity!r}")
    elif capacity is not None and payload.get("price_per_kwp") is not None:
        check("price_per_kwp", payload["price_per_kwp"], price_per_kwp(totals.total_price, capacity))

    if mismatches:
        logger.warning("Submission totals disagree with recomputation: %s", mismatches)
    return mismatches


def _read_capacity(value) -> Optional[float]:
    """Positive finite capacity, or None when the value cannot serve as one."""
    if isinstance(value, bool):
        return None
    try:
        capacity = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(capacity) or capacity <= 0:
        return None
    return capacity
