"""Tests for the record-set and lookup ownership of SalesSession."""
import pytest

from salescore.errors import LookupParseError, ParseError, SchemaError
from salescore.session import SalesSession
from tests.helpers import xlsx_bytes


def test_load_sales_then_lookup(pos_export_bytes, lookup_bytes):
    session = SalesSession()
    records = session.load_sales(pos_export_bytes, source_name="vendas.xlsx")
    assert len(records) == 3
    assert all(r.manager == "N/A" for r in records)

    updated = session.load_lookup(lookup_bytes)
    assert updated == 2
    assert [r.manager for r in session.records] == ["Maria", "Maria", "N/A"]
    assert session.status() == {"records": 3, "lookup_entries": 2, "source": "vendas.xlsx"}


def test_load_lookup_then_sales(pos_export_bytes, lookup_bytes):
    session = SalesSession()
    assert session.load_lookup(lookup_bytes) == 0
    records = session.load_sales(pos_export_bytes)
    assert [r.manager for r in records] == ["Maria", "Maria", "N/A"]
    assert records[0].city == "São Paulo"


def test_both_orders_agree(pos_export_bytes, lookup_bytes):
    a = SalesSession()
    a.load_sales(pos_export_bytes)
    a.load_lookup(lookup_bytes)
    b = SalesSession()
    b.load_lookup(lookup_bytes)
    b.load_sales(pos_export_bytes)
    assert [(r.manager, r.city) for r in a.records] == [(r.manager, r.city) for r in b.records]


def test_failed_sales_upload_keeps_previous_records(pos_export_bytes):
    session = SalesSession()
    session.load_sales(pos_export_bytes, source_name="vendas.xlsx")

    with pytest.raises(SchemaError):
        session.load_sales(xlsx_bytes([["Loja", "Vendedor"], ["A", "B"]]), source_name="ruim.xlsx")
    with pytest.raises(ParseError):
        session.load_sales(b"not a spreadsheet")

    assert len(session.records) == 3
    assert session.source_name == "vendas.xlsx"


def test_failed_lookup_upload_keeps_previous_map(lookup_bytes):
    session = SalesSession()
    session.load_lookup(lookup_bytes)

    with pytest.raises(LookupParseError):
        session.load_lookup(b"\x00\x01garbage")

    assert set(session.lookup) == {"LOJA A", "LOJA NORTE"}


def test_reload_lookup_is_idempotent(pos_export_bytes, lookup_bytes):
    session = SalesSession()
    session.load_sales(pos_export_bytes)
    assert session.load_lookup(lookup_bytes) == 2
    assert session.load_lookup(lookup_bytes) == 0


def test_clear(pos_export_bytes, lookup_bytes):
    session = SalesSession()
    session.load_lookup(lookup_bytes)
    session.load_sales(pos_export_bytes, source_name="vendas.xlsx")
    session.clear()
    assert session.status() == {"records": 0, "lookup_entries": 0, "source": None}
