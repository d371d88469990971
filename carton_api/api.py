"""
FastAPI application exposing the carton-selection engine.

Endpoints:
- GET /health
- GET / (service info / version)
- GET /cartons/catalog      -> active carton catalog
- POST /cartons/select      -> best single carton, or fits=false
- POST /cartons/split       -> best-effort sequence of cartons + unpacked items
- POST /cartons/suggest     -> ranked alternatives with advisory text

Notes:
- The API uses the Pydantic request/response models defined in `carton_api.models`.
- The computational core is pure Python and runs synchronously; handlers are
  plain `def` so FastAPI runs them in its threadpool.
- The service catalog is read once at import time from $CARTON_API_CATALOG
  (JSON file) or falls back to the built-in default catalog. Requests may
  override it per call.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__ as PACKAGE_VERSION
from .config import config_from_env
from .models import (
    CartonTypeCreate,
    InvalidInputError,
    SelectionRequest,
    SelectionResponse,
    SplitResponse,
    SuggestionRead,
    SuggestionRequest,
    carton_from_dataclass,
    cartontype_to_create,
    cartontypecreate_to_dataclass,
    packitem_to_create,
    packitemcreate_to_dataclass,
    suggestion_from_dataclass,
)
from .selector import CartonSelector, summarize_split

logger = logging.getLogger("carton_api")
logging.basicConfig(level=logging.INFO)

default_selector = CartonSelector(config_from_env())

app = FastAPI(
    title="carton_api - carton selection",
    version=PACKAGE_VERSION,
    description="Chooses shipping cartons for a set of items using a 3D placement check.",
)

# Allow cross-origin calls for common dev scenarios (adjust origins in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Health & info endpoints
# ---------------------------


@app.get("/", summary="Service info")
async def root() -> Dict[str, Any]:
    """
    Basic service information and version.
    """
    return {"service": "carton_api", "version": PACKAGE_VERSION}


@app.get("/health", summary="Health check")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get(
    "/cartons/catalog",
    response_model=List[CartonTypeCreate],
    summary="Active carton catalog",
)
async def catalog() -> List[CartonTypeCreate]:
    return [cartontype_to_create(ct) for ct in default_selector.catalog]


# ---------------------------
# Helpers
# ---------------------------


def _prepare(request: SelectionRequest):
    """
    Validate a request and return (selector, dataclass items).
    """
    if not request.items:
        raise HTTPException(status_code=400, detail="`items` must be a non-empty list.")

    selector = default_selector
    if request.catalog is not None:
        if not request.catalog:
            raise HTTPException(
                status_code=400, detail="`catalog` must be a non-empty list when given."
            )
        selector = CartonSelector(
            default_selector.config.with_catalog(
                cartontypecreate_to_dataclass(c) for c in request.catalog
            )
        )

    items = [packitemcreate_to_dataclass(it) for it in request.items]
    return selector, items


# ---------------------------
# Selection endpoints
# ---------------------------


@app.post(
    "/cartons/select",
    response_model=SelectionResponse,
    summary="Choose the best single carton for a list of items",
)
def select_carton(request: SelectionRequest) -> SelectionResponse:
    """
    Response:
    - fits: false when no single carton holds every item (use /cartons/split)
    - carton: chosen carton with placements and score
    """
    selector, items = _prepare(request)
    logger.info(
        "select_carton called: %d items, %d carton types",
        len(items),
        len(selector.catalog),
    )

    carton = selector.select_optimal_carton(items)
    if not carton:
        return SelectionResponse(fits=False, carton=None)
    return SelectionResponse(fits=True, carton=carton_from_dataclass(carton))


@app.post(
    "/cartons/split",
    response_model=SplitResponse,
    summary="Pack items into as few cartons as the greedy splitter finds",
)
def split_cartons(request: SelectionRequest) -> SplitResponse:
    """
    Response:
    - cartons: cartons built, in order
    - unpacked_items: items no carton could take
    - complete: true when every item was packed
    - summary: counts, utilization and timing for the run
    """
    selector, items = _prepare(request)
    logger.info(
        "split_cartons called: %d items, %d carton types",
        len(items),
        len(selector.catalog),
    )

    started = time.perf_counter()
    result = selector.split_into_multiple_cartons(items)
    elapsed_ms = (time.perf_counter() - started) * 1000.0

    return SplitResponse(
        cartons=[carton_from_dataclass(c) for c in result.cartons],
        unpacked_items=[packitem_to_create(it) for it in result.unpacked],
        complete=result.complete,
        summary=summarize_split(result, elapsed_ms),
    )


@app.post(
    "/cartons/suggest",
    response_model=List[SuggestionRead],
    summary="Rank feasible cartons with advisory text",
)
def suggest_cartons(request: SuggestionRequest) -> List[SuggestionRead]:
    selector, items = _prepare(request)
    suggestions = selector.suggest_alternatives(items, limit=request.limit)
    return [suggestion_from_dataclass(s) for s in suggestions]


# ---------------------------
# Exception handlers
# ---------------------------


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.warning("Invalid input: %s", exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # Basic generic handler to ensure JSON responses for unexpected errors.
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
