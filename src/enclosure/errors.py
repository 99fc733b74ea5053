"""
Error taxonomy for circle enclosure.

Three kinds of failure reach the caller:
- InvalidInput: bad center, radius or resolution (raised by build/validate)
- GridIndexFailure: the h3 library could not produce a cell, boundary or ring
- IterationLimitExceeded: no empty ring was found within the ring limit
"""
from typing import Optional


class EnclosureError(Exception):
    """Base class for every error raised by the enclosure package."""


class InvalidInput(EnclosureError, ValueError):
    """Input rejected before any grid work was done."""


class InvalidPoint(InvalidInput):
    """Latitude/longitude missing, not finite, or out of range."""


class InvalidRadius(InvalidInput):
    """Radius not finite, not positive, or above the configured maximum."""


class InvalidResolution(InvalidInput):
    """Resolution is not an integer inside the grid's supported range."""


class GridIndexFailure(EnclosureError):
    """The grid index collaborator failed. Never retried."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")


class IterationLimitExceeded(EnclosureError):
    """Ring expansion hit its safety limit before finding an empty ring."""

    def __init__(self, limit: int, accepted: int, message: Optional[str] = None):
        self.limit = limit
        self.accepted = accepted
        super().__init__(
            message
            or f"Ring limit of {limit} reached with {accepted} cells accepted and no empty ring found"
        )


class DeadlineExceeded(IterationLimitExceeded):
    """Ring expansion ran past the caller's deadline."""

    def __init__(self, deadline_seconds: float, rings: int, accepted: int):
        self.deadline_seconds = deadline_seconds
        self.rings = rings
        super().__init__(
            limit=rings,
            accepted=accepted,
            message=f"Deadline of {deadline_seconds}s exceeded after {rings} rings ({accepted} cells accepted)",
        )
