"""
Abstract cube adapter interface for the contribution scorer.

A cube adapter wraps a query backend and a cube decomposition engine. It is
configured with a dataset, a metric expression and a pair of time windows,
and then builds the cube to report how much each explored dimension value
contributed to the metric's change between the baseline and current windows.

Any backend implementing this contract is interchangeable; the scorer only
depends on the abstract methods below.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from rootcause.models.slices import CostEntry, MetricExpression


class CubeError(Exception):
    """Base exception for all cube adapter failures."""

    pass


class OlapQueryError(CubeError):
    """Raised when the underlying query, network or cache layer fails."""

    pass


class DecompositionError(CubeError):
    """Raised when a cube build is malformed or does not converge."""

    pass


class CubeAdapter(ABC):
    """
    Abstract base class for cube decomposition backends.

    Implementations are created fresh for each scoring call, so they may keep
    per-call configuration on the instance. Implementations that share a
    connection across instances must make that connection safe for concurrent
    use themselves.

    The scorer uses each adapter as a context manager and closes it once
    the cost set is built.
    """

    @abstractmethod
    def configure(
        self,
        dataset: str,
        metric_expression: MetricExpression,
        current_start: datetime,
        current_end: datetime,
        baseline_start: datetime,
        baseline_end: datetime,
    ) -> "CubeAdapter":
        """
        Configure the dataset, metric and time windows to decompose.

        All timestamps are UTC. Start bounds are inclusive, end bounds are
        exclusive.

        Args:
            dataset: Dataset (collection) identifier
            metric_expression: Aggregation over the metric, e.g. SUM(views)
            current_start: Current window start
            current_end: Current window end
            baseline_start: Baseline window start
            baseline_end: Baseline window end

        Returns:
            The configured adapter
        """
        pass

    @abstractmethod
    def build_cost_set(
        self,
        dimensions: list[str],
        depth: int,
        hierarchies: list[list[str]],
    ) -> list[CostEntry]:
        """
        Build the cube and return its cost breakdown.

        Args:
            dimensions: Dimension names to explore
            depth: Maximum number of dimensions to explore
            hierarchies: Dimension hierarchies restricting exploration order

        Returns:
            Cost entries, possibly several per dimension value

        Raises:
            OlapQueryError: If the backend query fails
            DecompositionError: If the cube cannot be built from the data
        """
        pass

    def close(self) -> None:
        """Release resources held by the adapter. No-op by default."""
        pass

    def __enter__(self) -> "CubeAdapter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
