"""Error taxonomy for roadmap generation and Flight Deck calculations."""
from typing import Any


class RoadmapError(Exception):
    """Base class for errors raised by the planning core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RoadmapError):
    """A template, requirement rows, catalog rows or a plan are missing."""


class PolicyUnsatisfiableError(RoadmapError):
    """Upper-level or residency minimums cannot be met with the catalog."""

    def __init__(self, message: str, upper_level_shortfall: int, residency_shortfall: int):
        super().__init__(
            f"{message} (UL shortfall: {upper_level_shortfall}, "
            f"Residency shortfall: {residency_shortfall})"
        )
        self.upper_level_shortfall = upper_level_shortfall
        self.residency_shortfall = residency_shortfall


class CreditBoundsViolationError(RoadmapError):
    """Final credit total fell outside [target, target + slack]."""

    def __init__(self, total: int, target: int, ceiling: int):
        if total < target:
            message = f"Plan has only {total} credits, must be at least {target}"
        else:
            message = f"Plan has {total} credits, must not exceed {ceiling} credits"
        super().__init__(message)
        self.total = total
        self.target = target
        self.ceiling = ceiling


class FlightDeckValidationError(RoadmapError):
    """Flight Deck input did not match the declared shape."""

    def __init__(self, errors: list[dict[str, Any]]):
        fields = ", ".join(e["field"] for e in errors)
        super().__init__(f"Invalid Flight Deck input: {fields}")
        self.errors = errors
