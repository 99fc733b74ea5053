"""
Cell/circle overlap test.

A cell is kept when the circle around the center overlaps the cell's
polygon, i.e. the minimum distance from the center to the polygon (as a
closed region) is at most the radius. Checks run cheapest first:
1. Any vertex inside the circle
2. Center inside the polygon
3. Any edge arc within radius of the center

The radius is widened by INCLUSION_TOLERANCE_METERS so rounding error can
only add cells, never drop one.
"""
from typing import Optional, Sequence

from . import config
from .distance import Point, haversine_distance, point_in_spherical_polygon, point_to_arc_distance
from .errors import GridIndexFailure


def min_distance_to_polygon(boundary: Sequence[Point], center: Point) -> float:
    """
    Minimum distance in meters from center to a closed spherical polygon.

    Returns 0 when the center lies inside the polygon.
    """
    if len(boundary) < 3:
        raise GridIndexFailure("cell_to_boundary", f"boundary has {len(boundary)} vertices, need at least 3")

    if point_in_spherical_polygon(center, boundary):
        return 0.0

    return min(
        point_to_arc_distance(center, boundary[i], boundary[(i + 1) % len(boundary)])
        for i in range(len(boundary))
    )


def intersects(
    boundary: Sequence[Point],
    center: Point,
    radius_meters: float,
    tolerance_meters: Optional[float] = None,
) -> bool:
    """
    Decide whether a cell overlaps the circle.

    Args:
        boundary: Cell polygon vertices in order
        center: Circle center
        radius_meters: Circle radius in meters
        tolerance_meters: Extra slack added to the radius (defaults to config)

    Returns:
        True if the cell must be part of the enclosure
    """
    if len(boundary) < 3:
        raise GridIndexFailure("cell_to_boundary", f"boundary has {len(boundary)} vertices, need at least 3")

    if tolerance_meters is None:
        tolerance_meters = config.INCLUSION_TOLERANCE_METERS
    limit = radius_meters + tolerance_meters

    # Fast path: a vertex inside the circle settles it
    if any(haversine_distance(center, vertex) <= limit for vertex in boundary):
        return True

    return min_distance_to_polygon(boundary, center) <= limit
