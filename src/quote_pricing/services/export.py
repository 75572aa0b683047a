"""
Export Service - tabular views of a quotation breakdown.

Reads line items from CSV and renders per-line plus grand-total tables
with pandas. Rounding happens when the table is built for display/export.
"""
from pathlib import Path
from typing import Optional, Iterable

import pandas as pd

from ..engine.models import PricingConfig, LineItem
from ..engine.pricing_engine import PricingEngine
from .submission import round_money

REQUIRED_COLUMNS = ('quantity', 'unit_price')

BREAKDOWN_COLUMNS = [
    'serial_number', 'item_name', 'description', 'quantity', 'unit_price',
    'total_price', 'commission', 'overprice', 'user_price', 'vendor_net_price',
]


def load_line_items_csv(path: Path) -> list[LineItem]:
    """
    Load line items from a CSV file.

    Requires quantity and unit_price columns; serial_number, item_name and
    description are optional. Missing serial numbers follow file order.
    """
    df = pd.read_csv(path)
    df.columns = [c.strip() for c in df.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing required columns: {', '.join(missing)}")

    items = []
    for i, row in enumerate(df.to_dict(orient='records'), start=1):
        serial = row.get('serial_number')
        items.append(LineItem(
            quantity=float(row['quantity']),
            unit_price=float(row['unit_price']),
            serial_number=int(serial) if serial is not None and pd.notna(serial) else i,
            item_name=str(row['item_name']).strip() if pd.notna(row.get('item_name')) else "",
            description=str(row['description']).strip() if pd.notna(row.get('description')) else "",
        ))
    return items


def breakdown_frame(
    config: PricingConfig,
    items: Iterable[LineItem],
    engine: Optional[PricingEngine] = None,
    rounded: bool = True,
) -> pd.DataFrame:
    """One row per line item with its five computed figures."""
    engine = engine or PricingEngine()
    rows = []
    for item, totals in engine.breakdown(config, items):
        row = item.to_dict()
        row.update({
            'total_price': totals.total_price,
            'commission': totals.commission,
            'overprice': totals.overprice,
            'user_price': totals.user_price,
            'vendor_net_price': totals.vendor_net_price,
        })
        rows.append(row)

    df = pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)
    if rounded and not df.empty:
        for col in BREAKDOWN_COLUMNS[5:]:
            df[col] = df[col].map(round_money)
    return df


def summary_frame(
    config: PricingConfig,
    items: Iterable[LineItem],
    engine: Optional[PricingEngine] = None,
) -> pd.DataFrame:
    """Two-column (Figure, Amount) summary of the quotation, rounded for display."""
    engine = engine or PricingEngine()
    totals = engine.compute_quotation_totals(config, items)
    figures = [
        ("Total Price", totals.total_price),
        (f"Commission ({config.commission_percent:g}%)", totals.commission),
        (f"Overprice ({config.overprice_percent:g}%)", totals.overprice),
        ("User Price", totals.user_price),
        ("Vendor Net Price", totals.vendor_net_price),
        ("Amount Before VAT", totals.amount_before_vat),
        (f"VAT ({config.vat_rate:g}%)", totals.vat_amount),
        ("Final Payable", totals.final_payable),
    ]
    return pd.DataFrame(
        [(label, round_money(value)) for label, value in figures],
        columns=['Figure', 'Amount'],
    )


def export_breakdown_csv(
    config: PricingConfig,
    items: Iterable[LineItem],
    path: Path,
    engine: Optional[PricingEngine] = None,
) -> Path:
    """Write the rounded per-line breakdown to CSV and return the path."""
    df = breakdown_frame(config, items, engine=engine)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path
