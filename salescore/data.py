from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from io import BytesIO
from numbers import Number
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from salescore.config import DEFAULT_CONFIG, IngestConfig
from salescore.errors import LookupParseError, ParseError, SchemaError
from salescore.headers import LOOKUP_RULES, missing_required, normalize_header_row, resolve_column, resolve_columns
from salescore.keys import normalize_key

logger = logging.getLogger(__name__)

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %H:%M:%S",
)

RECORD_COLUMNS = [
    "id",
    "date",
    "month",
    "year",
    "seller",
    "store",
    "city",
    "manager",
    "brand",
    "product",
    "code",
    "coupon",
    "amount",
    "quantity",
]

TEXT_FIELDS = ("seller", "store", "city", "brand", "product", "code")

_MIN_DATE = pd.Timestamp.min.ceil("s").to_pydatetime()
_MAX_DATE = pd.Timestamp.max.floor("s").to_pydatetime()


@dataclass
class SaleRecord:
    id: str
    date: datetime
    month: int
    year: int
    seller: str
    store: str
    city: str
    manager: str
    brand: str
    product: str
    code: str
    coupon: str
    amount: float
    quantity: float


@dataclass(frozen=True)
class LookupEntry:
    manager: str
    city: str = ""


LookupMap = Dict[str, LookupEntry]


# ---------------- Cell coercion ----------------
def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def clean_text(value: object, default: str) -> str:
    if _is_missing(value):
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    s = str(value).strip()
    return s if s else default


def _to_float(value: object) -> Optional[float]:
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, Number):
        out = float(value)  # type: ignore[arg-type]
    else:
        s = str(value).strip()
        if not s:
            return None
        try:
            out = float(s)
        except ValueError:
            if "," not in s or "." in s:
                return None
            try:
                out = float(s.replace(",", "."))
            except ValueError:
                return None
    return out if math.isfinite(out) else None


def coerce_amount(value: object) -> float:
    out = _to_float(value)
    return 0.0 if out is None else out


def coerce_quantity(value: object) -> float:
    out = _to_float(value)
    return 1.0 if out is None else out


def excel_serial_to_datetime(serial: float, config: IngestConfig = DEFAULT_CONFIG) -> datetime:
    ms = round((serial - config.excel_epoch_offset_days) * config.seconds_per_day * 1000)
    return datetime(1970, 1, 1) + timedelta(milliseconds=ms)


def _parse_date(value: object, config: IngestConfig) -> Optional[datetime]:
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, pd.Timestamp):
        if value.tzinfo is not None:
            value = value.tz_localize(None)
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, Number):
        try:
            return excel_serial_to_datetime(float(value), config)  # type: ignore[arg-type]
        except (OverflowError, ValueError):
            return None
    text = str(value).strip()
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed.to_pydatetime()


def coerce_date(value: object, config: IngestConfig = DEFAULT_CONFIG) -> Optional[datetime]:
    """Accept native dates, spreadsheet serial numbers or date strings; None when invalid.

    Dates outside the pandas Timestamp range are rejected so the record set
    can always be turned into a frame.
    """
    when = _parse_date(value, config)
    if when is None or not (_MIN_DATE <= when <= _MAX_DATE):
        return None
    return when


# ---------------- Readers ----------------
def read_first_sheet(content: bytes) -> pd.DataFrame:
    """Read the first worksheet without treating any row as header."""
    try:
        return pd.read_excel(BytesIO(content), sheet_name=0, header=None)
    except Exception as exc:
        raise ParseError(f"Could not read spreadsheet: {exc}") from exc


def sheet_rows(df: pd.DataFrame) -> List[list]:
    return [list(row) for row in df.itertuples(index=False, name=None)]


def _cell(row: Sequence[object], idx: Optional[int]) -> object:
    if idx is None or idx >= len(row):
        return None
    return row[idx]


# ---------------- Sales ingestion ----------------
def records_from_rows(
    rows: Sequence[Sequence[object]],
    lookup: Optional[Mapping[str, LookupEntry]] = None,
    config: IngestConfig = DEFAULT_CONFIG,
) -> List[SaleRecord]:
    if len(rows) < 2:
        raise SchemaError("Empty file or invalid format: a header row and at least one data row are required.")

    headers = normalize_header_row(rows[0])
    columns = resolve_columns(headers)
    missing = missing_required(columns)
    if missing:
        raise SchemaError(f"Required columns not found: {', '.join(missing)}")
    logger.info("Resolved sales columns: %s", {k: v for k, v in columns.items() if v is not None})

    lookup = lookup or {}
    na = config.na_value
    records: List[SaleRecord] = []
    dropped = 0
    for index, row in enumerate(rows[1:]):
        when = coerce_date(_cell(row, columns["date"]), config)
        if when is None:
            dropped += 1
            continue

        text = {f: clean_text(_cell(row, columns[f]), na) for f in TEXT_FIELDS}
        entry = lookup.get(normalize_key(text["store"]))
        city = (entry.city if entry else "") or text["city"]
        manager = entry.manager if entry and entry.manager else na

        records.append(
            SaleRecord(
                id=f"row-{index}",
                date=when,
                month=when.month - 1,
                year=when.year,
                seller=text["seller"],
                store=text["store"],
                city=city,
                manager=manager,
                brand=text["brand"],
                product=text["product"],
                code=text["code"],
                coupon=clean_text(_cell(row, columns["coupon"]), f"{config.coupon_prefix}{index}"),
                amount=coerce_amount(_cell(row, columns["amount"])),
                quantity=coerce_quantity(_cell(row, columns["quantity"])),
            )
        )

    logger.info("Ingested %d sales rows (%d dropped for invalid date)", len(records), dropped)
    return records


def ingest_sales(
    content: bytes,
    lookup: Optional[Mapping[str, LookupEntry]] = None,
    config: IngestConfig = DEFAULT_CONFIG,
) -> List[SaleRecord]:
    raw = read_first_sheet(content)
    return records_from_rows(sheet_rows(raw), lookup, config)


# ---------------- Lookup table ----------------
def lookup_from_rows(rows: Sequence[Sequence[object]], config: IngestConfig = DEFAULT_CONFIG) -> LookupMap:
    mapping: LookupMap = {}
    if not rows:
        return mapping

    header_idx: Optional[int] = None
    cols: Dict[str, Optional[int]] = {}
    for i in range(min(len(rows), config.lookup_header_search_rows)):
        headers = normalize_header_row(rows[i])
        store_col = resolve_column(headers, "store", LOOKUP_RULES)
        manager_col = resolve_column(headers, "manager", LOOKUP_RULES)
        if store_col is not None and manager_col is not None:
            header_idx = i
            cols = {"store": store_col, "manager": manager_col, "city": resolve_column(headers, "city", LOOKUP_RULES)}
            break

    if header_idx is None:
        logger.info("Lookup header not detected; using positional columns store/manager/city")
        header_idx = 0
        cols = {"store": 0, "manager": 1, "city": 2}
    else:
        logger.info("Lookup header detected at row %d: %s", header_idx, cols)

    for row in rows[header_idx + 1 :]:
        store = clean_text(_cell(row, cols["store"]), "")
        manager = clean_text(_cell(row, cols["manager"]), "")
        if not store or not manager:
            continue
        city = clean_text(_cell(row, cols["city"]), "")
        mapping[normalize_key(store)] = LookupEntry(manager=manager, city=city)
    return mapping


def parse_lookup_table(content: bytes, config: IngestConfig = DEFAULT_CONFIG) -> LookupMap:
    try:
        raw = read_first_sheet(content)
        mapping = lookup_from_rows(sheet_rows(raw), config)
    except Exception as exc:
        raise LookupParseError(f"Could not read lookup table: {exc}") from exc
    logger.info("Parsed lookup table with %d stores", len(mapping))
    return mapping


# ---------------- Reconciliation ----------------
def reconcile_records(records: Iterable[SaleRecord], lookup: Mapping[str, LookupEntry]) -> int:
    """Re-enrich manager/city in place from a late-loaded lookup map.

    City is only replaced when the lookup provides one. Returns the number of
    records whose fields changed, so a second run with the same map returns 0.
    """
    if not lookup:
        return 0
    changed = 0
    for rec in records:
        entry = lookup.get(normalize_key(rec.store))
        if entry is None:
            continue
        city = entry.city or rec.city
        if rec.manager != entry.manager or rec.city != city:
            rec.manager = entry.manager
            rec.city = city
            changed += 1
    return changed


# ---------------- Frames ----------------
def records_to_frame(records: Sequence[SaleRecord]) -> pd.DataFrame:
    df = pd.DataFrame(
        {col: [getattr(r, col) for r in records] for col in RECORD_COLUMNS},
        columns=RECORD_COLUMNS,
    )
    df["date"] = pd.to_datetime(df["date"])
    df["amount"] = pd.to_numeric(df["amount"]).astype(float)
    df["quantity"] = pd.to_numeric(df["quantity"]).astype(float)
    df["month"] = pd.to_numeric(df["month"]).astype(int)
    df["year"] = pd.to_numeric(df["year"]).astype(int)
    df["coupon"] = df["coupon"].astype(object)
    return df
