from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardFiltersModel, LoadStatusResponse, MetaListResponse, MetaYearsResponse
from schoolstats.data import prepare_context
from schoolstats.metrics_overview import compute_overview
from schoolstats.metrics_table import compute_table
from schoolstats.metrics_teachers import compute_teachers
from schoolstats.metrics_trends import compute_trends
from schoolstats.pagination import normalize_page_size
from schoolstats.session import DashboardSession


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.session = DashboardSession.from_data_dir()
    yield


app = FastAPI(title="School Stats Dashboard API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _session(request: Request) -> DashboardSession:
    return request.app.state.session


def _json(data: object, status_code: int = 200) -> JSONResponse:
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
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        ),
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/dataset")
async def upload_dataset(request: Request):
    try:
        body = await request.body()
        status = _session(request).load(body)
        if not status.ok:
            return _json({"error": status.message, "type": status.error_type}, status_code=400)
        return _json(LoadStatusResponse(kind=status.kind, message=status.message, count=status.count).model_dump())
    except Exception as exc:
        logger.exception("upload_dataset failed")
        return _error(exc)


@app.get("/meta/years")
def meta_years(request: Request):
    try:
        return _json(MetaYearsResponse(years=_session(request).year_options()).model_dump())
    except Exception as exc:
        logger.exception("meta_years failed")
        return _error(exc)


@app.get("/meta/types")
def meta_types(request: Request):
    try:
        return _json(MetaListResponse(values=_session(request).type_options()).model_dump())
    except Exception as exc:
        logger.exception("meta_types failed")
        return _error(exc)


@app.get("/meta/categories")
def meta_categories(request: Request):
    try:
        return _json(MetaListResponse(values=_session(request).category_options()).model_dump())
    except Exception as exc:
        logger.exception("meta_categories failed")
        return _error(exc)


def _context(request: Request, filters: DashboardFiltersModel):
    records = _session(request).records
    ctx = prepare_context(filters.model_dump(), records)
    return ctx["filters"], ctx


@app.post("/overview")
def overview(filters: DashboardFiltersModel, request: Request):
    try:
        f, ctx = _context(request, filters)
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/trends")
def trends(filters: DashboardFiltersModel, request: Request):
    try:
        f, ctx = _context(request, filters)
        return _json(compute_trends(f, ctx))
    except Exception as exc:
        logger.exception("trends failed")
        return _error(exc)


@app.post("/teachers")
def teachers(filters: DashboardFiltersModel, request: Request):
    try:
        f, ctx = _context(request, filters)
        return _json(compute_teachers(f, ctx))
    except Exception as exc:
        logger.exception("teachers failed")
        return _error(exc)


@app.post("/table")
def table(
    filters: DashboardFiltersModel,
    request: Request,
    page: int = Query(default=1),
    page_size: int = Query(default=25),
):
    try:
        f, ctx = _context(request, filters)
        return _json(compute_table(f, ctx, page=page, page_size=normalize_page_size(page_size)))
    except Exception as exc:
        logger.exception("table failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(page: str, filters: DashboardFiltersModel, request: Request):
    try:
        _, ctx = _context(request, filters)
        export_df = ctx.get("filtered") if page == "table" else pd.DataFrame()
        if export_df is None or not hasattr(export_df, "to_csv"):
            export_df = pd.DataFrame()
        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    except Exception as exc:
        logger.exception("export_page failed")
        return _error(exc)
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={page}.csv"})
