"""
Spherical geometry on a mean-radius earth.

All distances are great-circle distances in meters on a sphere of radius
EARTH_RADIUS_METERS, the same sphere h3 uses internally, so results agree
with the grid's own notion of distance.
"""
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import h3

from .config import EARTH_RADIUS_METERS

Vector = Tuple[float, float, float]

# Cross products shorter than this mean the arc endpoints coincide (or are antipodal)
_DEGENERATE_ARC = 1e-15


@dataclass(frozen=True)
class Point:
    """Latitude/longitude pair in degrees."""
    lat: float
    lng: float

    def to_lnglat(self) -> List[float]:
        """GeoJSON coordinate order ([lng, lat])."""
        return [self.lng, self.lat]


def haversine_distance(a: Point, b: Point) -> float:
    """
    Great-circle distance between two points.

    Args:
        a: First point
        b: Second point

    Returns:
        Distance in meters (symmetric, never negative)
    """
    # H3 v4+ computes this on its own authalic sphere
    return h3.great_circle_distance((a.lat, a.lng), (b.lat, b.lng), unit="m")


def normalize_longitude(lng: float) -> float:
    """Wrap a longitude in degrees into [-180, 180)."""
    return (lng + 540.0) % 360.0 - 180.0


def destination_point(start: Point, distance_m: float, bearing_deg: float) -> Point:
    """
    Point reached by travelling distance_m meters from start along an initial bearing.

    Args:
        start: Starting point
        distance_m: Distance to travel in meters
        bearing_deg: Initial bearing in degrees clockwise from north

    Returns:
        Destination point with longitude normalized to [-180, 180)
    """
    lat1 = math.radians(start.lat)
    lng1 = math.radians(start.lng)
    bearing = math.radians(bearing_deg)
    angular_distance = distance_m / EARTH_RADIUS_METERS

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular_distance)
        + math.cos(lat1) * math.sin(angular_distance) * math.cos(bearing)
    )
    lng2 = lng1 + math.atan2(
        math.sin(bearing) * math.sin(angular_distance) * math.cos(lat1),
        math.cos(angular_distance) - math.sin(lat1) * math.sin(lat2),
    )

    return Point(math.degrees(lat2), normalize_longitude(math.degrees(lng2)))


def circle_coordinates(center: Point, radius_m: float, num_points: int = 64) -> List[List[float]]:
    """
    Closed outline of a circle as [lng, lat] pairs.

    The first coordinate is repeated at the end so the ring can be used
    directly as a GeoJSON polygon ring.
    """
    if num_points < 3:
        raise ValueError("num_points must be at least 3")

    coordinates = []
    for i in range(num_points):
        bearing = i * 360.0 / num_points
        coordinates.append(destination_point(center, radius_m, bearing).to_lnglat())

    # Close the polygon by repeating the first point
    coordinates.append(list(coordinates[0]))
    return coordinates


def _to_vector(p: Point) -> Vector:
    lat = math.radians(p.lat)
    lng = math.radians(p.lng)
    return (math.cos(lat) * math.cos(lng), math.cos(lat) * math.sin(lng), math.sin(lat))


def _cross(u: Vector, v: Vector) -> Vector:
    return (
        u[1] * v[2] - u[2] * v[1],
        u[2] * v[0] - u[0] * v[2],
        u[0] * v[1] - u[1] * v[0],
    )


def _dot(u: Vector, v: Vector) -> float:
    return u[0] * v[0] + u[1] * v[1] + u[2] * v[2]


def _norm(u: Vector) -> float:
    return math.sqrt(_dot(u, u))


def point_to_arc_distance(p: Point, a: Point, b: Point) -> float:
    """
    Minimum distance from p to the minor great-circle arc between a and b.

    If the closest point of the full great circle falls between a and b the
    answer is the cross-track distance, otherwise it is the distance to the
    nearer endpoint.

    Returns:
        Distance in meters
    """
    pv = _to_vector(p)
    av = _to_vector(a)
    bv = _to_vector(b)

    n = _cross(av, bv)
    n_len = _norm(n)
    if n_len < _DEGENERATE_ARC:
        return min(haversine_distance(p, a), haversine_distance(p, b))
    n = (n[0] / n_len, n[1] / n_len, n[2] / n_len)

    # Projection of p onto the arc's great-circle plane
    along = _dot(pv, n)
    q = (pv[0] - along * n[0], pv[1] - along * n[1], pv[2] - along * n[2])

    if _norm(q) > _DEGENERATE_ARC and _dot(_cross(av, q), n) >= 0 and _dot(_cross(q, bv), n) >= 0:
        cross_track = math.asin(min(1.0, abs(along)))
        return cross_track * EARTH_RADIUS_METERS

    return min(haversine_distance(p, a), haversine_distance(p, b))


def point_in_spherical_polygon(p: Point, vertices: Sequence[Point], epsilon: float = 1e-12) -> bool:
    """
    Whether p lies inside (or on the edge of) a convex spherical polygon.

    Works for either winding order. Points on the far side of the sphere
    are never reported inside, even though they sit on the same side of
    every edge plane.
    """
    if len(vertices) < 3:
        return False

    vectors = [_to_vector(v) for v in vertices]
    normals = [_cross(vectors[i], vectors[(i + 1) % len(vectors)]) for i in range(len(vectors))]

    centroid = (
        sum(v[0] for v in vectors),
        sum(v[1] for v in vectors),
        sum(v[2] for v in vectors),
    )
    winding = sum(_dot(centroid, n) for n in normals)
    if winding == 0:
        return False
    sign = 1.0 if winding > 0 else -1.0

    pv = _to_vector(p)
    if _dot(pv, centroid) <= 0:
        return False

    return all(sign * _dot(pv, n) >= -epsilon for n in normals)
