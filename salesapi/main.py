from __future__ import annotations

import logging
import math
from typing import Literal, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from salesapi.schemas import FilterStateModel, StatusResponse, UploadLookupResponse, UploadSalesResponse
from salescore.aggregate import prepare_context
from salescore.errors import IngestError
from salescore.export import export_to_excel_bytes
from salescore.filters import FilterState, filter_options, normalize_filters
from salescore.metrics_overview import compute_overview
from salescore.metrics_rankings import compute_ranking_page
from salescore.metrics_table import aggregate_for_table, compute_table
from salescore.session import SalesSession

app = FastAPI(title="Sales Indicators API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

session = SalesSession()


def get_session() -> SalesSession:
    return session


def _filters_from_model(model: FilterStateModel) -> FilterState:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/status", response_model=StatusResponse)
def status():
    return get_session().status()


@app.post("/reset", response_model=StatusResponse)
def reset():
    sess = get_session()
    sess.clear()
    return sess.status()


@app.post("/upload/sales")
async def upload_sales(request: Request, filename: Optional[str] = Query(default=None)):
    content = await request.body()
    try:
        records = get_session().load_sales(content, source_name=filename)
    except IngestError as exc:
        return _error(exc, 422)
    except Exception as exc:
        logger.exception("upload_sales failed")
        return _error(exc, 500)
    return _json(UploadSalesResponse(records=len(records), source=filename).model_dump())


@app.post("/upload/lookup")
async def upload_lookup(request: Request):
    content = await request.body()
    sess = get_session()
    try:
        updated = sess.load_lookup(content)
    except IngestError as exc:
        return _error(exc, 422)
    except Exception as exc:
        logger.exception("upload_lookup failed")
        return _error(exc, 500)
    return _json(UploadLookupResponse(entries=len(sess.lookup), updated=updated).model_dump())


@app.get("/meta/options")
def meta_options():
    try:
        return _json(filter_options(get_session().records))
    except Exception as exc:
        logger.exception("meta_options failed")
        return _error(exc, 500)


@app.post("/overview")
def overview(filters: FilterStateModel, day_of_week: Optional[int] = Query(default=None, ge=0, le=6)):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, get_session().records)
        return _json(compute_overview(f, ctx, day_of_week=day_of_week))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc, 500)


@app.post("/rankings")
def rankings(
    filters: FilterStateModel,
    dimension: Literal["seller", "store", "brand", "product", "city"] = Query(default="seller"),
    metric: Literal["revenue", "quantity", "distinct_coupons", "average_ticket", "items_per_coupon"] = Query(default="revenue"),
    top_n: Optional[int] = Query(default=None, ge=1),
):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, get_session().records)
        return _json(compute_ranking_page(f, ctx, dimension=dimension, metric=metric, top_n=top_n))
    except Exception as exc:
        logger.exception("rankings failed")
        return _error(exc, 500)


@app.post("/table")
def table(filters: FilterStateModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, get_session().records)
        return _json(compute_table(f, ctx))
    except Exception as exc:
        logger.exception("table failed")
        return _error(exc, 500)


@app.post("/export")
def export(filters: FilterStateModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, get_session().records)
        content = export_to_excel_bytes(aggregate_for_table(ctx["filtered_records"]))
    except Exception as exc:
        logger.exception("export failed")
        return _error(exc, 500)
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=indicadores_vendas.xlsx"},
    )
