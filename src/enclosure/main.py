"""
Circle Enclosure API
FastAPI application returning the smallest set of H3 cells that covers a circle.
"""
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from src.enclosure import config, metrics
from src.enclosure.config import configure_logging
from src.enclosure.enclosure import build
from src.enclosure.errors import EnclosureError, GridIndexFailure, InvalidInput, IterationLimitExceeded
from src.enclosure.grid import DEFAULT_RESOLUTION
from src.enclosure.models import EnclosureResponse, EnclosureStats, ErrorResponse

configure_logging()
logger = logging.getLogger(__name__)

# HTTP status per error kind
ERROR_STATUS = (
    (InvalidInput, 400),
    (IterationLimitExceeded, 422),
    (GridIndexFailure, 500),
)

# Initialize FastAPI application
app = FastAPI(
    title="Circle Enclosure",
    description="Smallest set of H3 hexagons covering a circle on the globe",
    version="1.0.0"
)


def request_deadline(requested: Optional[float]) -> Optional[float]:
    """
    Deadline for one request: the caller's value, capped by ENCLOSURE_DEADLINE_SECONDS.

    A server cap of 0 or less disables the cap.
    """
    server_cap = config.DEADLINE_SECONDS
    if server_cap <= 0:
        return requested
    if requested is None:
        return server_cap
    return min(requested, server_cap)


def error_status(error: EnclosureError) -> int:
    """Map an enclosure error to an HTTP status code."""
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500


@app.exception_handler(EnclosureError)
async def handle_enclosure_error(request: Request, error: EnclosureError):
    status_code = error_status(error)
    metrics.enclosure_requests_total.labels(status=type(error).__name__).inc()
    if status_code >= 500:
        logger.error("enclosure failed for %s: %s", request.url.path, error)
    else:
        logger.info("enclosure rejected for %s: %s", request.url.path, error)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(error), error=type(error).__name__).model_dump(),
    )


@app.get("/metrics")
def get_metrics():
    """
    Prometheus metrics endpoint.

    Returns:
        Response: Prometheus-formatted metrics
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get(
    "/v1/enclosure",
    response_model=EnclosureResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def enclosure(
    lat: float,
    lon: float,
    radius_m: float,
    resolution: int = DEFAULT_RESOLUTION,
    include_boundaries: bool = False,
    max_rings: Optional[int] = None,
    deadline_s: Optional[float] = None,
):
    """
    Get the smallest set of H3 cells covering a circle.

    Process:
    1. Validate center, radius and resolution
    2. Find the cell containing the center
    3. Expand ring by ring, keeping cells that overlap the circle
    4. Stop at the first ring with no overlapping cell

    Args:
        lat: Latitude of the circle center
        lon: Longitude of the circle center
        radius_m: Circle radius in meters
        resolution: H3 resolution (0-15, default 9 = ~174m edge)
        include_boundaries: If True, include each cell's polygon
        max_rings: Optional cap on rings expanded
        deadline_s: Optional time budget in seconds (never above the server cap)

    Returns:
        EnclosureResponse with sorted cell IDs and expansion stats

    Raises:
        400: Invalid center, radius, resolution, max_rings or deadline_s
        422: Ring limit or deadline reached before the circle was enclosed
        500: H3 failed to produce a cell, boundary or ring
    """
    start_time = time.time()

    enc = build(
        (lat, lon),
        radius_m,
        resolution,
        max_rings=max_rings,
        deadline_seconds=request_deadline(deadline_s),
    )
    result = enc.expand()
    cells = sorted(result.cells)

    # Record metrics
    metrics.enclosure_requests_total.labels(status="success").inc()
    metrics.enclosure_rings_expanded.observe(result.stats.rings_expanded)
    metrics.enclosure_cells_returned.observe(len(cells))
    metrics.request_duration_seconds.labels(endpoint="enclosure").observe(time.time() - start_time)

    return EnclosureResponse(
        lat=enc.center.lat,
        lon=enc.center.lng,
        radius_m=enc.radius_meters,
        resolution=enc.resolution,
        center_cell=result.origin,
        total_cells=len(cells),
        cells=cells,
        stats=EnclosureStats(
            rings_expanded=result.stats.rings_expanded,
            cells_tested=result.stats.cells_tested,
            ring_limit=result.stats.ring_limit,
            elapsed_ms=round(result.stats.elapsed_seconds * 1000, 2),
        ),
        boundaries=enc.boundaries(cells) if include_boundaries else None,
    )
