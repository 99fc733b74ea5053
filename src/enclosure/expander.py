"""
Ring-by-ring expansion over the H3 grid.

Starting from the cell containing the circle's center, rings of cells at
grid distance k = 1, 2, 3, ... are tested against the circle. Expansion
stops at the first ring in which no cell overlaps the circle: rings only
move further from the origin, so nothing beyond an empty ring can overlap
either.

A ring limit derived from the radius and the resolution's edge length
guards against runaway expansion (pentagon distortion, polar cells, radii
close to global scale). Callers can also pass their own ring limit or a
wall-clock deadline.
"""
import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional

from . import config
from .distance import Point
from .errors import DeadlineExceeded, IterationLimitExceeded
from .grid import GridIndex
from .inclusion import intersects

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnclosureRequest:
    """Validated, immutable input for one enclosure run."""
    center: Point
    radius_meters: float
    resolution: int


@dataclass(frozen=True)
class ExpansionStats:
    """Bookkeeping for one run, used for logging and API responses."""
    rings_expanded: int  # Highest ring tested, including the terminating empty one
    cells_tested: int    # Ring cells that went through the inclusion test
    cells_accepted: int  # Size of the result (origin included)
    ring_limit: int
    elapsed_seconds: float


@dataclass(frozen=True)
class ExpansionResult:
    origin: str
    cells: FrozenSet[str]
    stats: ExpansionStats


class ResultAggregator:
    """Accumulates accepted cells, ignoring duplicates."""

    def __init__(self):
        self._cells = set()

    def add(self, cells: Iterable[str]) -> int:
        """Add cells and return how many of them were new."""
        before = len(self._cells)
        self._cells.update(cells)
        return len(self._cells) - before

    def result(self) -> FrozenSet[str]:
        return frozenset(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, cell) -> bool:
        return cell in self._cells


def ring_limit(
    radius_meters: float,
    edge_length_meters: float,
    factor: Optional[float] = None,
    margin: Optional[int] = None,
) -> int:
    """
    Maximum number of rings a run may expand.

    ceil(factor * radius / edge_length) + margin
    """
    if factor is None:
        factor = config.RING_LIMIT_FACTOR
    if margin is None:
        margin = config.RING_LIMIT_MARGIN
    return int(math.ceil(factor * radius_meters / edge_length_meters)) + margin


class RingExpander:
    """
    Drives the expansion for a single request.

    States: Expanding(0) -> Expanding(1) -> ... -> Done. Ring 0 (the
    origin) is accepted unconditionally. With workers > 1 the cells of a
    ring are tested on a thread pool; rings themselves are always
    processed one after another because the stopping rule depends on the
    previous ring's outcome.
    """

    def __init__(
        self,
        grid: GridIndex,
        request: EnclosureRequest,
        max_rings: Optional[int] = None,
        deadline_seconds: Optional[float] = None,
        workers: Optional[int] = None,
        tolerance_meters: Optional[float] = None,
    ):
        self.grid = grid
        self.request = request
        self.max_rings = max_rings
        self.deadline_seconds = deadline_seconds
        self.workers = workers if workers is not None else config.WORKERS
        self.tolerance_meters = tolerance_meters

    def ring_limit(self) -> int:
        """Ring limit in force for this request (caller override wins)."""
        if self.max_rings is not None:
            return self.max_rings
        edge = self.grid.average_edge_length(self.request.resolution)
        return ring_limit(self.request.radius_meters, edge)

    def run(self) -> ExpansionResult:
        """
        Expand until an empty ring is found.

        Raises:
            GridIndexFailure: The grid could not produce a cell, boundary or ring
            IterationLimitExceeded: The ring limit was reached first
            DeadlineExceeded: The deadline passed first
        """
        started = time.monotonic()
        request = self.request

        origin = self.grid.latlng_to_cell(request.center, request.resolution)
        limit = self.ring_limit()

        aggregator = ResultAggregator()
        aggregator.add([origin])

        cells_tested = 0
        k = 0

        executor = ThreadPoolExecutor(max_workers=self.workers) if self.workers > 1 else None
        try:
            while True:
                k += 1
                if k > limit:
                    raise IterationLimitExceeded(limit, len(aggregator))
                self._check_deadline(started, k - 1, len(aggregator))

                ring = self.grid.grid_ring(origin, k)
                accepted = self._test_ring(ring, executor, started, k - 1, len(aggregator))
                cells_tested += len(ring)

                logger.debug(
                    "ring %d: %d/%d cells overlap circle around (%.6f, %.6f)",
                    k, len(accepted), len(ring), request.center.lat, request.center.lng,
                )

                # Empty ring -> Done
                if not accepted:
                    break
                aggregator.add(accepted)
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

        elapsed = time.monotonic() - started
        cells = aggregator.result()
        stats = ExpansionStats(
            rings_expanded=k,
            cells_tested=cells_tested,
            cells_accepted=len(cells),
            ring_limit=limit,
            elapsed_seconds=elapsed,
        )

        logger.info(
            "enclosed %.1fm circle at (%.6f, %.6f) res %d with %d cells after %d rings (%.1f ms)",
            request.radius_meters, request.center.lat, request.center.lng,
            request.resolution, len(cells), k, elapsed * 1000,
        )

        return ExpansionResult(origin=origin, cells=cells, stats=stats)

    def _check_deadline(self, started: float, rings_done: int, accepted: int) -> None:
        if self.deadline_seconds is None:
            return
        if time.monotonic() - started > self.deadline_seconds:
            logger.warning(
                "deadline of %.3fs exceeded after %d rings", self.deadline_seconds, rings_done
            )
            raise DeadlineExceeded(self.deadline_seconds, rings_done, accepted)

    def _test_cell(self, cell: str) -> bool:
        boundary = self.grid.cell_to_boundary(cell)
        return intersects(boundary, self.request.center, self.request.radius_meters, self.tolerance_meters)

    def _test_ring(
        self,
        ring: Iterable[str],
        executor: Optional[ThreadPoolExecutor],
        started: float,
        rings_done: int,
        accepted: int,
    ) -> List[str]:
        # Sorted so logs and stats do not depend on set iteration order
        cells = sorted(ring)
        verdicts = []
        if executor is None:
            for cell in cells:
                self._check_deadline(started, rings_done, accepted)
                verdicts.append(self._test_cell(cell))
        else:
            # Collect the whole ring, then merge; pending cells are cancelled on a deadline
            futures = [executor.submit(self._test_cell, cell) for cell in cells]
            for future in futures:
                self._check_deadline(started, rings_done, accepted)
                verdicts.append(future.result())
        return [cell for cell, overlaps in zip(cells, verdicts) if overlaps]
