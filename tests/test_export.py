"""Tests for the spreadsheet export of table rows."""
from datetime import datetime
from io import BytesIO

import pandas as pd

from salescore.export import EXPORT_COLUMNS, build_export_frame, coupon_count, export_to_excel_bytes, format_decimal_br
from salescore.metrics_table import aggregate_for_table
from tests.helpers import make_record


def test_format_decimal_br():
    assert format_decimal_br(1234.5) == "1.234,50"
    assert format_decimal_br(0) == "0,00"
    assert format_decimal_br(1234567.891) == "1.234.567,89"
    assert format_decimal_br(2.5, decimals=1) == "2,5"


def test_coupon_count():
    assert coupon_count("3") == 3
    assert coupon_count("C-17") == 1
    assert coupon_count("0") == 1
    assert coupon_count("") == 0


def test_build_export_frame():
    day = datetime(2024, 5, 3, 14)
    records = [
        make_record(0, when=day, coupon="A", amount=1000.0, quantity=2),
        make_record(1, when=day, coupon="B", amount=234.5, quantity=1),
    ]
    frame = build_export_frame(aggregate_for_table(records))

    assert list(frame.columns) == EXPORT_COLUMNS
    row = frame.iloc[0]
    assert row["Date"] == "03/05/2024"
    assert row["Store"] == "Loja A"
    assert row["Seller"] == "Ana"
    assert row["Total Amount"] == 1234.5
    assert row["Total Quantity"] == 3.0
    assert isinstance(row["Coupon Count"], str)
    assert row["Coupon Count"] == "2"
    assert row["Items/Coupon"] == "1,50"
    assert row["Average Ticket"] == "617,25"


def test_export_frame_for_raw_coupon_ids():
    frame = build_export_frame([make_record(0, coupon="NF-9", amount=50.0, quantity=2)])
    assert frame.iloc[0]["Coupon Count"] == "NF-9"
    assert frame.iloc[0]["Average Ticket"] == "50,00"


def test_export_to_excel_bytes_round_trip():
    records = [make_record(i, when=datetime(2024, 5, i + 1), amount=10.0 * (i + 1)) for i in range(3)]
    content = export_to_excel_bytes(aggregate_for_table(records))

    sheets = pd.read_excel(BytesIO(content), sheet_name=None)
    assert list(sheets) == ["Indicadores"]
    df = sheets["Indicadores"]
    assert list(df.columns) == EXPORT_COLUMNS
    assert df["Date"].tolist() == ["03/05/2024", "02/05/2024", "01/05/2024"]
    assert df["Total Amount"].tolist() == [30.0, 20.0, 10.0]


def test_export_empty_rows_keeps_header():
    df = pd.read_excel(BytesIO(export_to_excel_bytes([])), sheet_name="Indicadores")
    assert list(df.columns) == EXPORT_COLUMNS
    assert df.empty
