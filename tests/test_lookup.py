"""Tests for the store -> manager/city reference table parser."""
import pytest

from salescore.data import LookupEntry, lookup_from_rows, parse_lookup_table
from salescore.errors import LookupParseError
from tests.helpers import xlsx_bytes


def test_header_detected_below_title_rows(lookup_bytes):
    mapping = parse_lookup_table(lookup_bytes)

    assert mapping == {
        "LOJA A": LookupEntry(manager="Maria", city="São Paulo"),
        "LOJA NORTE": LookupEntry(manager="Carlos", city=""),
    }


def test_header_columns_in_any_order():
    rows = [
        ["Cidade", "Manager", "Store"],
        ["Recife", "Paula", "Loja Leste"],
    ]
    assert lookup_from_rows(rows) == {"LOJA LESTE": LookupEntry(manager="Paula", city="Recife")}


def test_city_column_optional():
    rows = [
        ["Gerente", "Lojas"],
        ["Paula", "Loja Leste"],
    ]
    assert lookup_from_rows(rows) == {"LOJA LESTE": LookupEntry(manager="Paula", city="")}


def test_positional_fallback_when_no_header_found():
    rows = [
        ["Unidade", "Responsável", "Local"],
        ["Loja A", "Maria", "SP"],
        ["Loja B", None, "RJ"],
        ["Loja C", "João"],
    ]
    assert lookup_from_rows(rows) == {
        "LOJA A": LookupEntry(manager="Maria", city="SP"),
        "LOJA C": LookupEntry(manager="João", city=""),
    }


def test_header_beyond_search_window_uses_fallback():
    rows = [[f"linha {i}", "x"] for i in range(20)] + [["Loja", "Gerente"], ["Loja A", "Maria"]]
    mapping = lookup_from_rows(rows)
    # positional parsing from row 1: the late header row itself becomes data
    assert mapping["LOJA"] == LookupEntry(manager="Gerente", city="")
    assert mapping["LOJA A"] == LookupEntry(manager="Maria", city="")


def test_rows_without_store_or_manager_skipped():
    rows = [
        ["Loja", "Gerente", "Cidade"],
        [None, "Maria", "SP"],
        ["Loja B", "  ", "RJ"],
        ["Loja C", "Rita", "BH"],
    ]
    assert lookup_from_rows(rows) == {"LOJA C": LookupEntry(manager="Rita", city="BH")}


def test_duplicate_normalized_keys_last_write_wins():
    rows = [
        ["Loja", "Gerente"],
        ["Loja Norte", "Carlos"],
        ["LOJA  NÓRTE", "Beatriz"],
    ]
    assert lookup_from_rows(rows) == {"LOJA NORTE": LookupEntry(manager="Beatriz", city="")}


def test_empty_sheet_gives_empty_map():
    assert lookup_from_rows([]) == {}


def test_corrupt_lookup_raises_lookup_parse_error():
    with pytest.raises(LookupParseError):
        parse_lookup_table(b"\x00\x01garbage")


def test_numeric_store_codes():
    content = xlsx_bytes([["Loja", "Gerente"], [101, "Maria"]])
    assert parse_lookup_table(content) == {"101": LookupEntry(manager="Maria", city="")}
