"""
Shared fixtures: a fake grid index with fully controlled ring geometry.
"""
import time

import pytest

from src.enclosure.distance import Point, destination_point
from src.enclosure.errors import GridIndexFailure

PHOENIX = Point(33.4484, -112.0740)


class FakeGrid:
    """
    GridIndex with concentric rings of small square cells.

    Ring k holds 6k cells named "k:i", centered spacing_m * k meters from the
    center. Each cell is a square with half_size_m meters from its center
    to each side. With always_hit=True every cell is a square around the
    center itself, so expansion never terminates on its own.
    """

    def __init__(
        self,
        center: Point = PHOENIX,
        spacing_m: float = 1000.0,
        half_size_m: float = 100.0,
        edge_length_m: float = 1000.0,
        always_hit: bool = False,
        ring_delay_s: float = 0.0,
        boundary_delay_s: float = 0.0,
        duplicate_origin: bool = False,
        failing_cell: str = None,
    ):
        self.center = center
        self.spacing_m = spacing_m
        self.half_size_m = half_size_m
        self.edge_length_m = edge_length_m
        self.always_hit = always_hit
        self.ring_delay_s = ring_delay_s
        self.boundary_delay_s = boundary_delay_s
        self.duplicate_origin = duplicate_origin
        self.failing_cell = failing_cell
        self.rings_requested = []
        self.boundaries_requested = []

    def latlng_to_cell(self, point, resolution):
        return "0:0"

    def grid_ring(self, origin, k):
        self.rings_requested.append(k)
        if self.ring_delay_s:
            time.sleep(self.ring_delay_s)
        cells = {f"{k}:{i}" for i in range(6 * k)}
        if self.duplicate_origin and k == 1:
            cells.add(origin)
        return frozenset(cells)

    def cell_center(self, cell):
        k, i = (int(part) for part in cell.split(":"))
        if k == 0 or self.always_hit:
            return self.center
        return destination_point(self.center, k * self.spacing_m, i * 360.0 / (6 * k))

    def cell_to_boundary(self, cell):
        self.boundaries_requested.append(cell)
        if self.boundary_delay_s:
            time.sleep(self.boundary_delay_s)
        if cell == self.failing_cell:
            raise GridIndexFailure("cell_to_boundary", f"{cell}: boom")
        center = self.cell_center(cell)
        corner = self.half_size_m * 2 ** 0.5
        return tuple(destination_point(center, corner, bearing) for bearing in (45, 135, 225, 315))

    def average_edge_length(self, resolution):
        return self.edge_length_m

    def cell_to_latlng(self, cell):
        return self.cell_center(cell)


@pytest.fixture
def fake_grid():
    return FakeGrid()


@pytest.fixture
def make_fake_grid():
    return FakeGrid
