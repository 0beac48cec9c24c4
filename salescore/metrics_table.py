from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Sequence

import pandas as pd

from salescore.data import SaleRecord, records_to_frame
from salescore.filters import FilterState

GROUP_KEY = ["day", "store", "seller"]


def aggregate_for_table(records: Sequence[SaleRecord]) -> List[SaleRecord]:
    """Collapse records into day x store x seller rows, newest first.

    Descriptive fields come from the first record of each group; ``coupon``
    carries the distinct coupon count as a string.
    """
    if not records:
        return []
    df = records_to_frame(records)
    df["day"] = df["date"].dt.strftime("%Y-%m-%d")
    grouped = (
        df.groupby(GROUP_KEY, sort=False)
        .agg(
            date=("date", "first"),
            month=("month", "first"),
            year=("year", "first"),
            city=("city", "first"),
            manager=("manager", "first"),
            brand=("brand", "first"),
            product=("product", "first"),
            code=("code", "first"),
            amount=("amount", "sum"),
            quantity=("quantity", "sum"),
            coupons=("coupon", "nunique"),
        )
        .reset_index()
        .sort_values("date", ascending=False, kind="mergesort")
    )
    return [
        SaleRecord(
            id=f"{r.day}|{r.store}|{r.seller}",
            date=pd.Timestamp(r.date).to_pydatetime(),
            month=int(r.month),
            year=int(r.year),
            seller=r.seller,
            store=r.store,
            city=r.city,
            manager=r.manager,
            brand=r.brand,
            product=r.product,
            code=r.code,
            coupon=str(int(r.coupons)),
            amount=float(r.amount),
            quantity=float(r.quantity),
        )
        for r in grouped.itertuples(index=False)
    ]


def compute_table(filters: FilterState, ctx: Dict[str, Any]) -> Dict[str, Any]:
    rows = aggregate_for_table(ctx.get("filtered_records", []))
    out = []
    for row in rows:
        item = asdict(row)
        item["date"] = row.date.isoformat()
        out.append(item)
    return {"filters": asdict(filters), "rows": out}
