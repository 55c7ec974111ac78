"""
Pytest configuration and shared fixtures for the contribution scorer test suite.

Provides model factories, a spy cube adapter for pure unit tests and an
in-memory DuckDB fact table for integration tests.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import duckdb
import pytest
import structlog

os.environ.setdefault("CUBE_DB_PATH", ":memory:")


from rootcause.cube.base import CubeAdapter
from rootcause.models.slices import (
    CostEntry,
    DatasetConfig,
    MetricConfig,
    MetricExpression,
    Slice,
    TimeRange,
)


# ---------------------------------------------------------------------------
# Pydantic model factories — reusable across all test suites
# ---------------------------------------------------------------------------

BASELINE_START = datetime(2024, 1, 1, tzinfo=timezone.utc)
CURRENT_START = datetime(2024, 1, 2, tzinfo=timezone.utc)


def make_metric(name: str = "views", dataset: str = "pageviews", **overrides) -> MetricConfig:
    """Factory function for creating test MetricConfig objects."""
    defaults = dict(name=name, dataset=dataset)
    defaults.update(overrides)
    return MetricConfig(**defaults)


def make_dataset(
    dataset: str = "pageviews",
    dimensions: tuple[str, ...] = ("country",),
    **overrides,
) -> DatasetConfig:
    """Factory function for creating test DatasetConfig objects."""
    defaults = dict(dataset=dataset, dimensions=dimensions)
    defaults.update(overrides)
    return DatasetConfig(**defaults)


def make_slice(
    dimension: str = "country=US",
    score: float = 1.0,
    metric: Optional[MetricConfig] = None,
    dataset: Optional[DatasetConfig] = None,
) -> Slice:
    """Factory function for creating test Slice objects."""
    return Slice(
        metric=metric or make_metric(),
        dataset=dataset or make_dataset(),
        dimension=dimension,
        score=score,
    )


def make_cost(dim_name: str = "country", dim_value: str = "US", cost: float = 1.0) -> CostEntry:
    """Factory function for creating test CostEntry objects."""
    return CostEntry(dim_name=dim_name, dim_value=dim_value, cost=cost)


def make_current_range(days: int = 1) -> TimeRange:
    return TimeRange(start=CURRENT_START, end=CURRENT_START + timedelta(days=days))


def make_baseline_range(days: int = 1) -> TimeRange:
    return TimeRange(start=BASELINE_START, end=BASELINE_START + timedelta(days=days))


# ---------------------------------------------------------------------------
# Spy cube adapter — reusable fake for pure unit tests
# ---------------------------------------------------------------------------

class SpyCubeAdapter(CubeAdapter):
    """
    In-memory CubeAdapter that returns canned cost entries and records calls.

    Use ``factory`` as the scorer's cube_factory; ``factory_calls`` counts
    adapter creations, ``build_calls`` records every build request and
    ``log_context`` holds the structlog context bound during the last build.
    """

    def __init__(self, costs: Optional[list[CostEntry]] = None, error: Optional[Exception] = None):
        self.costs = costs or []
        self.error = error
        self.factory_calls = 0
        self.configured: Optional[dict] = None
        self.build_calls: list[dict] = []
        self.close_calls = 0
        self.log_context: dict = {}

    def factory(self) -> "SpyCubeAdapter":
        self.factory_calls += 1
        return self

    def configure(
        self,
        dataset: str,
        metric_expression: MetricExpression,
        current_start: datetime,
        current_end: datetime,
        baseline_start: datetime,
        baseline_end: datetime,
    ) -> "SpyCubeAdapter":
        self.configured = dict(
            dataset=dataset,
            metric_expression=metric_expression,
            current_start=current_start,
            current_end=current_end,
            baseline_start=baseline_start,
            baseline_end=baseline_end,
        )
        return self

    def build_cost_set(self, dimensions, depth, hierarchies):
        self.build_calls.append(
            dict(dimensions=list(dimensions), depth=depth, hierarchies=list(hierarchies))
        )
        self.log_context = structlog.contextvars.get_contextvars()
        if self.error is not None:
            raise self.error
        return list(self.costs)

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def spy_cube():
    """Spy adapter returning the US/FR cost breakdown."""
    return SpyCubeAdapter(costs=[make_cost("country", "US", 30.0), make_cost("country", "FR", 10.0)])


# ---------------------------------------------------------------------------
# DuckDB fact table — for integration tests
# ---------------------------------------------------------------------------

FACT_ROWS = [
    # baseline day
    (datetime(2024, 1, 1, 6), "US", "chrome", 6.0),
    (datetime(2024, 1, 1, 18), "US", "chrome", 4.0),
    (datetime(2024, 1, 1, 12), "FR", "chrome", 10.0),
    # current day
    (datetime(2024, 1, 2, 6), "US", "chrome", 25.0),
    (datetime(2024, 1, 2, 18), "US", "chrome", 15.0),
    (datetime(2024, 1, 2, 12), "FR", "chrome", 20.0),
    # outside both windows
    (datetime(2024, 1, 3, 0), "DE", "firefox", 500.0),
]


@pytest.fixture
def fact_connection():
    """In-memory DuckDB connection holding a small page view fact table."""
    conn = duckdb.connect(":memory:")
    conn.execute(
        """
        CREATE TABLE metric_facts (
            ts TIMESTAMP,
            country VARCHAR,
            browser VARCHAR,
            views DOUBLE
        )
        """
    )
    conn.executemany("INSERT INTO metric_facts VALUES (?, ?, ?, ?)", FACT_ROWS)
    yield conn
    conn.close()
