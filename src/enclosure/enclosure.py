"""
Smallest set of H3 cells enclosing a circle.

Usage:
    enclosure = build(Point(33.4484, -112.0740), radius_meters=500, resolution=9)
    cells = enclosure.hexagons()

build() validates everything up front and raises InvalidInput subclasses;
hexagons() runs the ring expansion and raises GridIndexFailure or
IterationLimitExceeded. Neither retries nor approximates.
"""
import math
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from . import config
from .distance import Point, circle_coordinates
from .errors import InvalidInput, InvalidPoint, InvalidRadius, InvalidResolution
from .expander import EnclosureRequest, ExpansionResult, RingExpander
from .grid import MAX_RESOLUTION, MIN_RESOLUTION, GridIndex, H3GridIndex, is_valid_resolution

CenterLike = Union[Point, Tuple[float, float]]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_point(center: CenterLike) -> Point:
    if isinstance(center, Point):
        lat, lng = center.lat, center.lng
    else:
        try:
            lat, lng = center
        except (TypeError, ValueError):
            raise InvalidPoint(f"Center must be a Point or a (lat, lng) pair, got {center!r}")

    if not _is_number(lat) or not _is_number(lng):
        raise InvalidPoint(f"Latitude and longitude must be numbers, got ({lat!r}, {lng!r})")
    if not math.isfinite(lat) or not math.isfinite(lng):
        raise InvalidPoint(f"Latitude and longitude must be finite, got ({lat}, {lng})")
    if not -90.0 <= lat <= 90.0:
        raise InvalidPoint(f"Latitude must be in [-90, 90], got {lat}")
    if not -180.0 <= lng <= 180.0:
        raise InvalidPoint(f"Longitude must be in [-180, 180], got {lng}")

    return Point(float(lat), float(lng))


def _validate_radius(radius_meters) -> float:
    if not _is_number(radius_meters) or not math.isfinite(radius_meters):
        raise InvalidRadius(f"Radius must be a finite number, got {radius_meters!r}")
    if radius_meters <= 0:
        raise InvalidRadius("Radius must be positive")
    if radius_meters > config.MAX_RADIUS_METERS:
        raise InvalidRadius(
            f"Radius must be at most {config.MAX_RADIUS_METERS:.0f} meters, got {radius_meters}"
        )
    return float(radius_meters)


def validate(center: CenterLike, radius_meters: float, resolution: int) -> EnclosureRequest:
    """
    Validate raw input and build the immutable request.

    Args:
        center: Circle center as a Point or (lat, lng) pair in degrees
        radius_meters: Circle radius in meters
        resolution: H3 resolution (0-15)

    Returns:
        EnclosureRequest

    Raises:
        InvalidPoint, InvalidRadius, InvalidResolution
    """
    point = _validate_point(center)
    radius = _validate_radius(radius_meters)
    if not is_valid_resolution(resolution):
        raise InvalidResolution(
            f"Resolution must be an integer in [{MIN_RESOLUTION}, {MAX_RESOLUTION}], got {resolution!r}"
        )
    return EnclosureRequest(center=point, radius_meters=radius, resolution=resolution)


class Enclosure:
    """
    A validated enclosure request bound to a grid index.

    Instances hold no mutable state; hexagons() can be called any number of
    times and always returns the same set.
    """

    def __init__(
        self,
        request: EnclosureRequest,
        grid: Optional[GridIndex] = None,
        max_rings: Optional[int] = None,
        deadline_seconds: Optional[float] = None,
        workers: Optional[int] = None,
    ):
        self._request = request
        self._grid = grid if grid is not None else H3GridIndex()
        self._max_rings = max_rings
        self._deadline_seconds = deadline_seconds
        self._workers = workers

    @property
    def request(self) -> EnclosureRequest:
        return self._request

    @property
    def center(self) -> Point:
        return self._request.center

    @property
    def radius_meters(self) -> float:
        return self._request.radius_meters

    @property
    def resolution(self) -> int:
        return self._request.resolution

    def expand(self) -> ExpansionResult:
        """Run the ring expansion and return the cells together with run stats."""
        expander = RingExpander(
            self._grid,
            self._request,
            max_rings=self._max_rings,
            deadline_seconds=self._deadline_seconds,
            workers=self._workers,
        )
        return expander.run()

    def hexagons(self) -> FrozenSet[str]:
        """
        Smallest set of cells at the request's resolution covering the circle.

        Raises:
            GridIndexFailure: The grid index failed
            IterationLimitExceeded: No empty ring was found within the ring limit
        """
        return self.expand().cells

    def circle_coordinates(self, num_points: int = 64) -> List[List[float]]:
        """Closed outline of the circle as [lng, lat] pairs."""
        return circle_coordinates(self.center, self.radius_meters, num_points)

    def boundaries(self, cells: Optional[Iterable[str]] = None) -> Dict[str, List[List[float]]]:
        """
        Closed [lng, lat] rings for cells (defaults to hexagons()).

        The first vertex is repeated at the end of each ring.
        """
        if cells is None:
            cells = self.hexagons()

        rings = {}
        for cell in sorted(cells):
            ring = [vertex.to_lnglat() for vertex in self._grid.cell_to_boundary(cell)]
            # Close the polygon by repeating the first point
            if ring:
                ring.append(list(ring[0]))
            rings[cell] = ring
        return rings

    def __repr__(self) -> str:
        return (
            f"Enclosure(center=({self.center.lat}, {self.center.lng}), "
            f"radius_meters={self.radius_meters}, resolution={self.resolution})"
        )


def build(
    center: CenterLike,
    radius_meters: float,
    resolution: int,
    grid: Optional[GridIndex] = None,
    max_rings: Optional[int] = None,
    deadline_seconds: Optional[float] = None,
    workers: Optional[int] = None,
) -> Enclosure:
    """
    Validate input and construct an Enclosure.

    Args:
        center: Circle center as a Point or (lat, lng) pair in degrees
        radius_meters: Circle radius in meters
        resolution: H3 resolution (0-15)
        grid: Grid index to use (defaults to H3GridIndex)
        max_rings: Override for the ring limit
        deadline_seconds: Wall-clock budget for hexagons(), checked before each cell test
        workers: Threads used to test the cells of a ring (1 = serial)

    Raises:
        InvalidInput: Any argument is invalid
    """
    request = validate(center, radius_meters, resolution)

    if max_rings is not None and (not isinstance(max_rings, int) or isinstance(max_rings, bool) or max_rings < 0):
        raise InvalidInput(f"max_rings must be a non-negative integer, got {max_rings!r}")
    if deadline_seconds is not None and (
        not _is_number(deadline_seconds) or not math.isfinite(deadline_seconds) or deadline_seconds <= 0
    ):
        raise InvalidInput(f"deadline_seconds must be a positive number, got {deadline_seconds!r}")
    if workers is not None and (not isinstance(workers, int) or isinstance(workers, bool) or workers < 1):
        raise InvalidInput(f"workers must be a positive integer, got {workers!r}")

    return Enclosure(
        request,
        grid=grid,
        max_rings=max_rings,
        deadline_seconds=deadline_seconds,
        workers=workers,
    )


def smallest_enclosing_cells(lat: float, lng: float, radius_meters: float, resolution: int) -> FrozenSet[str]:
    """Shortcut for build((lat, lng), radius_meters, resolution).hexagons()."""
    return build((lat, lng), radius_meters, resolution).hexagons()
