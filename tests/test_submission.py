import sys
import os
import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quote_pricing.config.settings import Settings
from quote_pricing.engine import PricingConfig, LineItem
from quote_pricing.exceptions import InvalidLineItem, InvalidQuotation
from quote_pricing.services.submission import (
    round_money, format_currency, price_per_kwp, build_submission_payload, verify_submission,
)
from quote_pricing.services.validation import QuotationValidator


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def validator(settings):
    return QuotationValidator(settings)


@pytest.fixture
def config():
    return PricingConfig(commission_percent=15, overprice_percent=10, vat_rate=15)


@pytest.fixture
def items():
    return [
        LineItem(quantity=24, unit_price=400, serial_number=1, item_name="Solar Panel",
                 description="450W Monocrystalline High Efficiency"),
        LineItem(quantity=1, unit_price=4500, serial_number=2, item_name="Inverter",
                 description="Hybrid Inverter - 10KW MPPT"),
    ]


@pytest.mark.parametrize("amount,expected", [
    (1797.75, 1797.75),
    (150.075, 150.08),
    (2.675, 2.68),
    (0.005, 0.01),
    (-1.005, -1.01),
    (0, 0.0),
    (1342.857142857, 1342.86),
])
def test_round_money(amount, expected):
    assert round_money(amount) == expected


def test_format_currency():
    assert format_currency(13782.75) == "13,782.75 SAR"
    assert format_currency(0.5, currency="USD") == "0.50 USD"


def test_price_per_kwp():
    assert price_per_kwp(14100, 10) == 1410


@pytest.mark.parametrize("capacity", [0, -2, None])
def test_price_per_kwp_guards_capacity(capacity):
    with pytest.raises(InvalidQuotation):
        price_per_kwp(14100, capacity)


def test_payload_shape(config, items, validator):
    payload = build_submission_payload(config, items, 10.5, extra={"request_id": "req-1"}, validator=validator)

    assert payload["request_id"] == "req-1"
    assert payload["base_price"] == 14100
    assert payload["price_per_kwp"] == 1342.86
    assert payload["solar_system_capacity_kwp"] == 10.5
    assert payload["pricing_config"] == {
        "platform_commission_percent": 15,
        "platform_overprice_percent": 10,
        "vat_rate": 15,
    }

    first = payload["line_items"][0]
    assert first["serial_number"] == 1
    assert first["item_name"] == "Solar Panel"
    assert first["quantity"] == 24
    assert first["unit_price"] == 400
    assert first["total_price"] == 9600
    assert first["rabhan_commission"] == 1440
    assert first["rabhan_overprice"] == 960
    assert first["user_price"] == 10560
    assert first["vendor_net_price"] == 8160

    assert payload["totals"] == {
        "total_price": 14100,
        "total_commission": 2115,
        "total_over_price": 1410,
        "total_user_price": 15510,
        "total_vendor_net": 11985,
        "amount_before_vat": 11985,
        "vat_amount": 1797.75,
        "total_payable": 13782.75,
    }


def test_payload_rejects_empty(config, validator):
    with pytest.raises(InvalidQuotation):
        build_submission_payload(config, [], 10, validator=validator)


def test_payload_rejects_zero_capacity(config, items, validator):
    with pytest.raises(InvalidQuotation) as exc_info:
        build_submission_payload(config, items, 0, validator=validator)
    assert "positive" in exc_info.value.errors[0]


def test_payload_rejects_price_per_kwp_over_cap(config, items, validator):
    with pytest.raises(InvalidQuotation, match="Price per kWp"):
        build_submission_payload(config, items, 5, validator=validator)


def test_verify_consistent_payload(config, items, settings, validator):
    payload = build_submission_payload(config, items, 10.5, validator=validator)
    assert verify_submission(config, payload, settings=settings) == []


def test_verify_detects_tampered_figures(config, items, settings, validator):
    payload = build_submission_payload(config, items, 10.5, validator=validator)
    payload["line_items"][1]["rabhan_commission"] = 0
    payload["totals"]["total_payable"] = 20000
    payload["base_price"] = 1

    mismatches = verify_submission(config, payload, settings=settings)

    assert any(m.startswith("line 2 rabhan_commission") for m in mismatches)
    assert any(m.startswith("totals total_payable") for m in mismatches)
    assert any(m.startswith("base_price") for m in mismatches)


def test_verify_uses_config_snapshot(items, settings, validator):
    submitted = build_submission_payload(
        PricingConfig(commission_percent=15, overprice_percent=10, vat_rate=15), items, 10.5, validator=validator
    )
    other = PricingConfig(commission_percent=20, overprice_percent=10, vat_rate=15)

    assert verify_submission(other, submitted, settings=settings) != []


def test_verify_ignores_missing_figures(config, settings):
    payload = {"line_items": [{"quantity": 2, "unit_price": 50}]}
    assert verify_submission(config, payload, settings=settings) == []


def test_verify_reports_non_numeric(config, settings):
    payload = {"line_items": [{"quantity": 2, "unit_price": 50, "total_price": "lots"}]}
    assert verify_submission(config, payload, settings=settings) == ["line 1 total_price: not a number ('lots')"]


@pytest.mark.parametrize("capacity", [-5, 0, "abc", True])
def test_verify_reports_bad_capacity(config, settings, capacity):
    payload = {
        "line_items": [{"quantity": 2, "unit_price": 50}],
        "price_per_kwp": 10,
        "solar_system_capacity_kwp": capacity,
    }
    mismatches = verify_submission(config, payload, settings=settings)
    assert mismatches == [f"solar_system_capacity_kwp: must be a positive number, got {capacity!r}"]


def test_verify_checks_price_per_kwp(config, settings):
    payload = {
        "line_items": [{"quantity": 2, "unit_price": 50}],
        "price_per_kwp": 99,
        "solar_system_capacity_kwp": "10",
    }
    assert verify_submission(config, payload, settings=settings) == ["price_per_kwp: sent 99.00, expected 10.00"]


def test_verify_rejects_non_numeric_quantity(config, settings):
    payload = {"line_items": [{"quantity": "abc", "unit_price": 50}]}
    with pytest.raises(InvalidLineItem) as exc_info:
        verify_submission(config, payload, settings=settings)
    assert "quantity" in exc_info.value.errors[0]


def test_verify_rejects_non_object_row(config, settings):
    with pytest.raises(InvalidLineItem):
        verify_submission(config, {"line_items": [[2, 50]]}, settings=settings)


@pytest.mark.parametrize("payload,message", [
    ({"line_items": {"quantity": 2}}, "line_items must be a list"),
    ({"line_items": [{"quantity": 2, "unit_price": 50}], "totals": [100]}, "totals must be an object"),
    ({"line_items": [{"quantity": 2, "unit_price": 50}], "totals": "100"}, "totals must be an object"),
])
def test_verify_rejects_malformed_envelope(config, settings, payload, message):
    with pytest.raises(InvalidQuotation) as exc_info:
        verify_submission(config, payload, settings=settings)
    assert exc_info.value.errors == [message]


def test_verify_labels_rows_by_position_without_serials(config, settings):
    payload = {"line_items": [
        {"quantity": 1, "unit_price": 10},
        {"quantity": 2, "unit_price": 50, "total_price": 1},
    ]}
    mismatches = verify_submission(config, payload, settings=settings)
    assert mismatches == ["line 2 total_price: sent 1.00, expected 100.00"]
