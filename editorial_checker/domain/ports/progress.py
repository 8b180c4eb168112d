"""Progress reporting port used while a fact-check runs."""

from typing import Protocol


class ProgressReporter(Protocol):
    """Receives coarse percentage/stage updates. Return values are ignored."""

    def report(self, percent: float, stage: str, message: str) -> None:
        """Record a progress update."""
        ...


class NullProgressReporter:
    """Progress reporter that drops every update."""

    def report(self, percent: float, stage: str, message: str) -> None:
        pass
