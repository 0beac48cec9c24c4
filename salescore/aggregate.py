from __future__ import annotations

from typing import Any, Dict, Sequence

from salescore.data import SaleRecord, records_to_frame
from salescore.filters import FilterState, filter_records, normalize_filters
from salescore.metrics_overview import compute_daily_series, compute_monthly_series, compute_summary
from salescore.metrics_rankings import compute_rankings


def aggregate(records: Sequence[SaleRecord]) -> Dict[str, Any]:
    """Full recompute of every derived view for an already filtered record set."""
    df = records_to_frame(records)
    return {
        "summary": compute_summary(df),
        "by_month": compute_monthly_series(df),
        "by_day": compute_daily_series(df),
        **compute_rankings(df),
    }


def prepare_context(filters: dict | FilterState, records: Sequence[SaleRecord]) -> Dict[str, Any]:
    filt = filters if isinstance(filters, FilterState) else normalize_filters(filters)
    filtered = filter_records(records, filt)
    return {
        "filters": filt,
        "records": records,
        "filtered_records": filtered,
        "filtered_frame": records_to_frame(filtered),
    }
