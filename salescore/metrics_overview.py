from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from salescore.charts import series_bar_chart, series_line_chart
from salescore.config import MONTH_NAMES
from salescore.filters import FilterState
from salescore.metrics_rankings import safe_ratio


def _ratio(num: float, den: int) -> float:
    return float(num) / den if den else 0.0


def compute_summary(df: pd.DataFrame) -> Dict[str, Any]:
    if df.empty:
        return {"total_amount": 0.0, "total_quantity": 0.0, "total_coupons": 0, "average_ticket": 0.0, "items_per_coupon": 0.0}
    total_amount = float(df["amount"].sum())
    total_quantity = float(df["quantity"].sum())
    total_coupons = int(df["coupon"].nunique())
    return {
        "total_amount": total_amount,
        "total_quantity": total_quantity,
        "total_coupons": total_coupons,
        "average_ticket": _ratio(total_amount, total_coupons),
        "items_per_coupon": _ratio(total_quantity, total_coupons),
    }


def compute_monthly_series(df: pd.DataFrame) -> Dict[str, List[Dict[str, Any]]]:
    """Month buckets 0-11 across all years (January 2023 and 2024 share a bucket)."""
    if df.empty:
        return {"ticket": [], "revenue": []}
    monthly = (
        df.groupby("month")
        .agg(revenue=("amount", "sum"), coupons=("coupon", "nunique"))
        .reset_index()
        .sort_values("month")
    )
    monthly["ticket"] = safe_ratio(monthly["revenue"], monthly["coupons"])
    ticket: List[Dict[str, Any]] = []
    revenue: List[Dict[str, Any]] = []
    for r in monthly.itertuples(index=False):
        m = int(r.month)
        name = MONTH_NAMES[m][:3]
        ticket.append({"index": m, "name": name, "value": float(r.ticket)})
        revenue.append({"index": m, "name": name, "value": float(r.revenue)})
    return {"ticket": ticket, "revenue": revenue}


def compute_daily_series(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Average ticket per calendar day; day_of_week is 0=Sunday..6=Saturday."""
    if df.empty:
        return []
    daily = (
        df.assign(day=df["date"].dt.normalize())
        .groupby("day")
        .agg(revenue=("amount", "sum"), coupons=("coupon", "nunique"))
        .reset_index()
        .sort_values("day")
    )
    daily["value"] = safe_ratio(daily["revenue"], daily["coupons"])
    points: List[Dict[str, Any]] = []
    for r in daily.itertuples(index=False):
        day: pd.Timestamp = r.day
        points.append(
            {
                "date": day.strftime("%Y-%m-%d"),
                "name": day.strftime("%d/%m"),
                "value": float(r.value),
                "day_of_week": (int(day.dayofweek) + 1) % 7,
            }
        )
    return points


def filter_daily_series(points: List[Dict[str, Any]], day_of_week: Optional[int] = None) -> List[Dict[str, Any]]:
    if day_of_week is None:
        return list(points)
    return [p for p in points if p["day_of_week"] == day_of_week]


def compute_overview(filters: FilterState, ctx: Dict[str, Any], *, day_of_week: Optional[int] = None) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_frame", pd.DataFrame())
    summary = compute_summary(df)
    monthly = compute_monthly_series(df)
    daily = filter_daily_series(compute_daily_series(df), day_of_week)

    charts: Dict[str, Any] = {}
    if not df.empty:
        charts = {
            "ticket_by_month": series_bar_chart(monthly["ticket"], title="Ticket Médio Mensal"),
            "revenue_by_month": series_line_chart(monthly["revenue"], title="Evolução de Vendas"),
            "ticket_by_day": series_bar_chart(daily, title="Ticket Médio por Dia"),
        }

    return {
        "filters": asdict(filters),
        "record_count": int(len(df)),
        "summary": summary,
        "by_month": monthly,
        "by_day": daily,
        "charts": charts,
    }
