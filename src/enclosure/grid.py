"""
Spatial indexing using the H3 hexagonal grid system.

The enclosure algorithm only needs three things from the grid: the cell
containing a point, the boundary of a cell, and the ring of cells at a
given grid distance. GridIndex describes that narrow interface and
H3GridIndex implements it with the h3 library.

Resolution guide (average hexagon edge length):
    7 = ~1.2km edge (~5km² area)
    8 = ~460m edge (~0.74km² area)
    9 = ~174m edge (~0.10km² area)  <- default
   12 = ~9m edge
"""
from typing import FrozenSet, Protocol, Tuple

import h3

from .distance import Point
from .errors import GridIndexFailure

# Supported H3 resolution range (0 = coarsest, 15 = finest)
MIN_RESOLUTION = 0
MAX_RESOLUTION = 15

DEFAULT_RESOLUTION = 9

# Errors h3 raises for bad cells, bad coordinates and failed grid traversal
_H3_ERRORS = (h3.H3BaseException, ValueError, TypeError)


class GridIndex(Protocol):
    """The grid operations the enclosure algorithm depends on."""

    def latlng_to_cell(self, point: Point, resolution: int) -> str:
        ...

    def cell_to_boundary(self, cell: str) -> Tuple[Point, ...]:
        ...

    def grid_ring(self, origin: str, k: int) -> FrozenSet[str]:
        ...

    def average_edge_length(self, resolution: int) -> float:
        ...

    def cell_to_latlng(self, cell: str) -> Point:
        ...


class H3GridIndex:
    """
    GridIndex backed by the h3 library (v4 API, string cell ids).

    Every h3 exception is re-raised as GridIndexFailure so callers only
    have to deal with the enclosure error taxonomy.
    """

    def latlng_to_cell(self, point: Point, resolution: int) -> str:
        """
        Convert a point to the H3 cell containing it.

        Returns:
            H3 cell ID (e.g., "8929a1d4d6bffff")
        """
        try:
            # H3 v4+ uses latlng_to_cell instead of geo_to_h3
            return h3.latlng_to_cell(point.lat, point.lng, resolution)
        except _H3_ERRORS as e:
            raise GridIndexFailure("latlng_to_cell", f"({point.lat}, {point.lng}) @ res {resolution}: {e}") from e

    def cell_to_boundary(self, cell: str) -> Tuple[Point, ...]:
        """
        Get the polygon boundary of a cell.

        Returns:
            Vertices in order (5 for pentagons, 6 for hexagons, more for
            cells distorted across icosahedron edges)
        """
        try:
            boundary = h3.cell_to_boundary(cell)
        except _H3_ERRORS as e:
            raise GridIndexFailure("cell_to_boundary", f"{cell}: {e}") from e
        return tuple(Point(lat, lng) for lat, lng in boundary)

    def grid_ring(self, origin: str, k: int) -> FrozenSet[str]:
        """
        Get all cells at exactly k hops from origin.

        h3 falls back to a slower traversal when the ring crosses a
        pentagon, so this works everywhere on the globe.
        """
        try:
            return frozenset(h3.grid_ring(origin, k))
        except _H3_ERRORS as e:
            raise GridIndexFailure("grid_ring", f"{origin} k={k}: {e}") from e

    def average_edge_length(self, resolution: int) -> float:
        """Average hexagon edge length in meters at a resolution."""
        try:
            return h3.average_hexagon_edge_length(resolution, unit="m")
        except _H3_ERRORS as e:
            raise GridIndexFailure("average_edge_length", f"res {resolution}: {e}") from e

    def cell_to_latlng(self, cell: str) -> Point:
        """Center of a cell."""
        try:
            # H3 v4+ uses cell_to_latlng instead of h3_to_geo
            lat, lng = h3.cell_to_latlng(cell)
        except _H3_ERRORS as e:
            raise GridIndexFailure("cell_to_latlng", f"{cell}: {e}") from e
        return Point(lat, lng)


def is_valid_resolution(resolution) -> bool:
    """Whether resolution is an int inside the supported H3 range (bools rejected)."""
    return (
        isinstance(resolution, int)
        and not isinstance(resolution, bool)
        and MIN_RESOLUTION <= resolution <= MAX_RESOLUTION
    )
