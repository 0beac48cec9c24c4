from __future__ import annotations

from io import BytesIO
from typing import List, Sequence

import pandas as pd

from salescore.config import DEFAULT_CONFIG, IngestConfig
from salescore.data import SaleRecord

EXPORT_COLUMNS: List[str] = [
    "Date",
    "Store",
    "City",
    "Seller",
    "Manager",
    "Product",
    "Code",
    "Total Amount",
    "Total Quantity",
    "Coupon Count",
    "Items/Coupon",
    "Average Ticket",
]


def format_decimal_br(value: float, decimals: int = 2) -> str:
    """1234.5 -> '1.234,50'"""
    s = f"{float(value):,.{decimals}f}"
    return s.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def coupon_count(value: str) -> int:
    try:
        n = int(float(value))
    except (TypeError, ValueError):
        n = 0
    if n:
        return n
    return 1 if value else 0


def build_export_frame(rows: Sequence[SaleRecord], config: IngestConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """One line per table row (see aggregate_for_table)."""
    out = []
    for r in rows:
        count = coupon_count(r.coupon)
        out.append(
            {
                "Date": r.date.strftime(config.export_date_format),
                "Store": r.store,
                "City": r.city,
                "Seller": r.seller,
                "Manager": r.manager,
                "Product": r.product,
                "Code": r.code,
                "Total Amount": r.amount,
                "Total Quantity": r.quantity,
                "Coupon Count": r.coupon,
                "Items/Coupon": format_decimal_br(r.quantity / count if count else 0.0),
                "Average Ticket": format_decimal_br(r.amount / count if count else 0.0),
            }
        )
    return pd.DataFrame(out, columns=EXPORT_COLUMNS)


def export_to_excel_bytes(rows: Sequence[SaleRecord], config: IngestConfig = DEFAULT_CONFIG) -> bytes:
    buf = BytesIO()
    build_export_frame(rows, config).to_excel(buf, index=False, sheet_name=config.export_sheet_name, engine="openpyxl")
    return buf.getvalue()
