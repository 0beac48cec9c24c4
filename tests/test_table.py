"""Tests for day x store x seller table rows."""
from datetime import datetime

from salescore.metrics_table import aggregate_for_table
from tests.helpers import make_record


def test_rows_grouped_with_distinct_coupon_count():
    day = datetime(2024, 4, 2, 9)
    records = [
        make_record(0, when=day, coupon="A", quantity=1, amount=10.0),
        make_record(1, when=day.replace(hour=10), coupon="A", quantity=2, amount=20.0),
        make_record(2, when=day.replace(hour=11), coupon="B", quantity=3, amount=30.0),
    ]
    rows = aggregate_for_table(records)

    assert len(rows) == 1
    row = rows[0]
    assert row.quantity == 6.0
    assert row.amount == 60.0
    assert row.coupon == "2"
    assert row.id == "2024-04-02|Loja A|Ana"
    assert row.date == day


def test_rows_sorted_newest_first_and_split_by_key():
    records = [
        make_record(0, when=datetime(2024, 4, 1), seller="Ana"),
        make_record(1, when=datetime(2024, 4, 3), seller="Ana"),
        make_record(2, when=datetime(2024, 4, 1), seller="Bruno"),
        make_record(3, when=datetime(2024, 4, 1), seller="Ana", store="Loja B"),
    ]
    rows = aggregate_for_table(records)
    assert [r.id for r in rows] == [
        "2024-04-03|Loja A|Ana",
        "2024-04-01|Loja A|Ana",
        "2024-04-01|Loja A|Bruno",
        "2024-04-01|Loja B|Ana",
    ]
    assert all(r.coupon == "1" for r in rows)


def test_descriptive_fields_come_from_first_record():
    day = datetime(2024, 4, 2)
    records = [
        make_record(0, when=day, product="Camisa", city="SP", manager="Maria"),
        make_record(1, when=day, product="Calça", city="SP", manager="Maria"),
    ]
    (row,) = aggregate_for_table(records)
    assert row.product == "Camisa"
    assert row.manager == "Maria"
    assert row.month == 3
    assert row.year == 2024


def test_table_ids_are_reproducible():
    records = [make_record(i, when=datetime(2024, 4, i + 1)) for i in range(3)]
    assert [r.id for r in aggregate_for_table(records)] == [r.id for r in aggregate_for_table(records)]


def test_empty_input():
    assert aggregate_for_table([]) == []
