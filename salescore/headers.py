"""Heuristic mapping of spreadsheet header rows to logical sale fields.

Each logical field owns an ordered list of rules. Rules are tried top to
bottom; for a given rule the first column (left to right) that matches wins
and no later rule is consulted for that field.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple

import pandas as pd

MatchKind = Literal["exact", "contains"]

REQUIRED_FIELDS: Tuple[str, ...] = ("date", "amount")


@dataclass(frozen=True)
class MatchRule:
    kind: MatchKind
    terms: Tuple[str, ...]
    exclude: Tuple[str, ...] = ()

    def matches(self, header: str) -> bool:
        if not header:
            return False
        if any(x in header for x in self.exclude):
            return False
        if self.kind == "exact":
            return header in self.terms
        return any(t in header for t in self.terms)


def exact(*terms: str) -> MatchRule:
    return MatchRule("exact", terms)


def contains(*terms: str, exclude: Iterable[str] = ()) -> MatchRule:
    return MatchRule("contains", terms, tuple(exclude))


# "Descrição", "Descrição2" and "Descrição3" are positional aliases used by the
# POS export for store, seller and product respectively.
FIELD_RULES: Dict[str, List[MatchRule]] = {
    "date": [
        exact("data", "date"),
        contains("data", "date"),
    ],
    "seller": [
        exact("descrição2", "descricao2"),
        contains("descrição2", "descricao2"),
        contains("vendedor", "salesperson"),
    ],
    "store": [
        exact("descrição", "descricao"),
        contains("descrição", "descricao", exclude=("2", "3")),
        contains("loja", "store"),
    ],
    "city": [
        exact("cidade", "city", "municipio", "município"),
        contains("cidade", "municipio", "município"),
    ],
    "brand": [
        exact("marca", "brand"),
        contains("marca", "fabricante"),
    ],
    "product": [
        exact("descrição3", "descricao3"),
        contains("descrição3", "descricao3"),
        contains("produto", "product"),
    ],
    "code": [
        exact("item"),
        exact("código", "codigo", "code", "sku"),
    ],
    "amount": [
        contains("valor", "total", "amount"),
    ],
    "quantity": [
        contains("qtd", "quant", "qty"),
    ],
    "coupon": [
        exact("cupom", "ticket", "pedido"),
        contains("cupom", "ticket", "pedido"),
        contains("documento", "nota"),
    ],
}


# Reference table headers are matched exactly; store and manager are required.
LOOKUP_RULES: Dict[str, List[MatchRule]] = {
    "store": [exact("loja", "lojas", "store", "descrição", "descricao")],
    "manager": [exact("gerente", "manager")],
    "city": [exact("cidade", "municipio", "município", "city")],
}


def normalize_header(value: object) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return unicodedata.normalize("NFC", str(value)).strip().lower()


def normalize_header_row(row: Iterable[object]) -> List[str]:
    return [normalize_header(v) for v in row]


def resolve_column(headers: Sequence[str], field: str, rules: Optional[Dict[str, List[MatchRule]]] = None) -> Optional[int]:
    """Return the column index for ``field`` or None.

    ``headers`` must already be lowercased and trimmed (see normalize_header_row).
    """
    table = rules if rules is not None else FIELD_RULES
    for rule in table.get(field, []):
        for idx, header in enumerate(headers):
            if rule.matches(header):
                return idx
    return None


def resolve_columns(headers: Sequence[str], rules: Optional[Dict[str, List[MatchRule]]] = None) -> Dict[str, Optional[int]]:
    table = rules if rules is not None else FIELD_RULES
    return {field: resolve_column(headers, field, table) for field in table}


def missing_required(columns: Dict[str, Optional[int]]) -> List[str]:
    return [f for f in REQUIRED_FIELDS if columns.get(f) is None]
