from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Literal, Optional

import pandas as pd

from salescore.charts import ranking_bar_chart
from salescore.filters import FilterState

Dimension = Literal["seller", "store", "brand", "product", "city"]
Metric = Literal["revenue", "quantity", "distinct_coupons", "average_ticket", "items_per_coupon"]

RANKING_DIMENSIONS: Dict[str, str] = {
    "seller": "by_seller",
    "store": "by_store",
    "brand": "by_brand",
    "product": "by_product",
    "city": "by_city",
}
METRICS = ("revenue", "quantity", "distinct_coupons", "average_ticket", "items_per_coupon")
GROUP_COLUMNS = ["name", *METRICS]

METRIC_LABELS = {
    "revenue": "Faturamento",
    "quantity": "Quantidade",
    "distinct_coupons": "Cupons",
    "average_ticket": "Ticket Médio",
    "items_per_coupon": "Itens/Cupom",
}


def safe_ratio(num: pd.Series, den: pd.Series) -> pd.Series:
    return (num / den.where(den > 0)).fillna(0.0).astype(float)


def compute_group_metrics(df: pd.DataFrame, key: str) -> pd.DataFrame:
    """One pass per key: sums plus distinct coupons, ratios derived afterwards."""
    if df.empty:
        return pd.DataFrame(columns=GROUP_COLUMNS)
    grouped = (
        df.groupby(key, sort=False)
        .agg(revenue=("amount", "sum"), quantity=("quantity", "sum"), distinct_coupons=("coupon", "nunique"))
        .reset_index()
        .rename(columns={key: "name"})
    )
    grouped["name"] = grouped["name"].astype(str)
    grouped["distinct_coupons"] = grouped["distinct_coupons"].astype(int)
    grouped["average_ticket"] = safe_ratio(grouped["revenue"], grouped["distinct_coupons"])
    grouped["items_per_coupon"] = safe_ratio(grouped["quantity"], grouped["distinct_coupons"])
    return grouped[GROUP_COLUMNS]


def compute_rankings(df: pd.DataFrame) -> Dict[str, List[Dict[str, Any]]]:
    return {out: compute_group_metrics(df, dim).to_dict(orient="records") for dim, out in RANKING_DIMENSIONS.items()}


def rank_groups(groups: List[Dict[str, Any]], metric: Metric = "revenue", top_n: Optional[int] = None) -> List[Dict[str, Any]]:
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric}")
    ordered = sorted(groups, key=lambda g: g[metric], reverse=True)
    ranked = [{"rank": i, **g} for i, g in enumerate(ordered, start=1)]
    return ranked[:top_n] if top_n else ranked


def compute_ranking_page(
    filters: FilterState,
    ctx: Dict[str, Any],
    *,
    dimension: Dimension = "seller",
    metric: Metric = "revenue",
    top_n: Optional[int] = None,
) -> Dict[str, Any]:
    if dimension not in RANKING_DIMENSIONS:
        raise ValueError(f"Unknown dimension: {dimension}")
    df: pd.DataFrame = ctx.get("filtered_frame", pd.DataFrame())
    groups = compute_group_metrics(df, dimension).to_dict(orient="records")
    top = rank_groups(groups, metric, top_n)
    return {
        "filters": asdict(filters),
        "dimension": dimension,
        "metric": metric,
        "top": top,
        "charts": {"ranking": ranking_bar_chart(top, metric=metric, title=METRIC_LABELS[metric])},
    }
