from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Dict, Iterable, List, Optional, Sequence

from salescore.config import DEFAULT_CONFIG, MONTH_NAMES
from salescore.data import SaleRecord

# FilterState field -> SaleRecord attribute
FILTER_DIMENSIONS: Dict[str, str] = {
    "years": "year",
    "months": "month",
    "sellers": "seller",
    "stores": "store",
    "cities": "city",
    "managers": "manager",
    "brands": "brand",
    "codes": "code",
}


@dataclass(frozen=True)
class FilterState:
    years: List[str] = field(default_factory=list)
    months: List[str] = field(default_factory=list)
    sellers: List[str] = field(default_factory=list)
    stores: List[str] = field(default_factory=list)
    cities: List[str] = field(default_factory=list)
    managers: List[str] = field(default_factory=list)
    brands: List[str] = field(default_factory=list)
    codes: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))


def _as_str_list(values: Optional[Iterable[object]]) -> List[str]:
    if values is None:
        return []
    if isinstance(values, (str, int)):
        values = [values]
    out: List[str] = []
    for v in values:
        if v is None:
            continue
        s = str(v)
        if s and s not in out:
            out.append(s)
    return out


def normalize_filters(raw: Optional[dict]) -> FilterState:
    raw = raw or {}
    return FilterState(**{name: _as_str_list(raw.get(name)) for name in FILTER_DIMENSIONS})


def record_matches(record: SaleRecord, filters: FilterState) -> bool:
    for name, attr in FILTER_DIMENSIONS.items():
        selected = getattr(filters, name)
        if selected and str(getattr(record, attr)) not in selected:
            return False
    return True


def filter_records(records: Sequence[SaleRecord], filters: FilterState) -> List[SaleRecord]:
    """AND across dimensions, OR within one; an empty selection is no constraint."""
    if filters.is_empty():
        return list(records)
    return [r for r in records if record_matches(r, filters)]


def filter_options(records: Sequence[SaleRecord]) -> Dict[str, list]:
    na = DEFAULT_CONFIG.na_value

    def distinct(attr: str, drop_na: bool = False) -> List[str]:
        values = {str(getattr(r, attr)) for r in records}
        if drop_na:
            values = {v for v in values if v and v != na}
        return sorted(values)

    months = sorted({r.month for r in records})
    return {
        "years": distinct("year"),
        "months": [{"value": str(m), "label": MONTH_NAMES[m]} for m in months],
        "sellers": distinct("seller"),
        "stores": distinct("store"),
        "cities": distinct("city", drop_na=True),
        "managers": distinct("manager"),
        "brands": distinct("brand"),
        "codes": distinct("code", drop_na=True),
    }
