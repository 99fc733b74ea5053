from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class EnclosureStats(BaseModel):
    """Ring expansion bookkeeping for one request."""
    rings_expanded: int
    cells_tested: int
    ring_limit: int
    elapsed_ms: float


class EnclosureResponse(BaseModel):
    """Cells covering a circle at one resolution."""
    lat: float
    lon: float
    radius_m: float = Field(..., gt=0)
    resolution: int = Field(..., ge=0, le=15)
    center_cell: str
    total_cells: int = Field(..., ge=1)
    cells: List[str] = Field(..., description="Sorted H3 cell IDs")
    stats: EnclosureStats
    boundaries: Optional[Dict[str, List[List[float]]]] = Field(
        default=None, description="Closed [lng, lat] rings per cell"
    )


class ErrorResponse(BaseModel):
    detail: str
    error: str
