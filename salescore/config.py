from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IngestConfig:
    na_value: str = "N/A"
    coupon_prefix: str = "G-"
    lookup_header_search_rows: int = 20
    # 1900-epoch spreadsheet serials: day 25569 is 1970-01-01.
    excel_epoch_offset_days: int = 25569
    seconds_per_day: int = 86400
    export_date_format: str = "%d/%m/%Y"
    export_sheet_name: str = "Indicadores"


DEFAULT_CONFIG = IngestConfig()

MONTH_NAMES = [
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
]
