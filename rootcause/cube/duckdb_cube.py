"""
DuckDB cube adapter for the contribution scorer.

Decomposes the change of an aggregated metric between a baseline and a
current window over the dimension columns of a DuckDB fact table. The fact
table holds one timestamp column, one column per dimension and one column per
metric:

    ts TIMESTAMP, country VARCHAR, browser VARCHAR, views DOUBLE, ...

For every explored dimension and every value of it, the metric is aggregated
in both windows and the value's cost is its absolute change between them.
Values of different dimensions overlap (every row is counted once per
dimension), so the cost set covers the whole change once per dimension.
"""

from datetime import datetime, timezone
from typing import Optional

import duckdb

from rootcause.models.slices import CostEntry, MetricExpression
from rootcause.utils.logging import get_logger

from .base import CubeAdapter, DecompositionError, OlapQueryError

logger = get_logger(__name__)


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class DuckDBCubeAdapter(CubeAdapter):
    """
    DuckDB implementation of the cube adapter.

    Each adapter works on its own cursor of a shared DuckDB connection, so
    adapters created for concurrent scoring calls do not share query state.

    Attributes:
        fact_table: Table holding the metric facts
        time_column: Timestamp column used to select the windows
    """

    def __init__(
        self,
        connection: Optional[duckdb.DuckDBPyConnection] = None,
        db_path: str = ":memory:",
        fact_table: str = "metric_facts",
        time_column: str = "ts",
    ):
        """
        Initialize the adapter.

        Args:
            connection: Existing DuckDB connection to open a cursor on
            db_path: Database file to connect to when no connection is given
            fact_table: Table holding the metric facts
            time_column: Timestamp column of the fact table

        Raises:
            OlapQueryError: If the database cannot be opened
        """
        try:
            if connection is None:
                connection = duckdb.connect(db_path)
            self._conn = connection.cursor()
        except duckdb.Error as e:
            logger.error("duckdb_cube_connection_failed", db_path=db_path, error=str(e))
            raise OlapQueryError(f"Failed to connect to DuckDB: {e}") from e

        self.fact_table = fact_table
        self.time_column = time_column

        self._dataset: Optional[str] = None
        self._metric_expression: Optional[MetricExpression] = None
        self._current: Optional[tuple[datetime, datetime]] = None
        self._baseline: Optional[tuple[datetime, datetime]] = None

    def configure(
        self,
        dataset: str,
        metric_expression: MetricExpression,
        current_start: datetime,
        current_end: datetime,
        baseline_start: datetime,
        baseline_end: datetime,
    ) -> "DuckDBCubeAdapter":
        self._dataset = dataset
        self._metric_expression = metric_expression
        self._current = (_naive_utc(current_start), _naive_utc(current_end))
        self._baseline = (_naive_utc(baseline_start), _naive_utc(baseline_end))
        return self

    def build_cost_set(
        self,
        dimensions: list[str],
        depth: int,
        hierarchies: list[list[str]],
    ) -> list[CostEntry]:
        """
        Build the cube and return one cost entry per explored dimension value.

        Dimensions named in ``hierarchies`` are explored first, in hierarchy
        order, followed by the remaining dimensions in their given order.
        At most ``depth`` dimensions are explored.

        Raises:
            DecompositionError: If the adapter is not configured or the fact
                table lacks a requested column
            OlapQueryError: If a DuckDB query fails
        """
        if self._metric_expression is None or self._current is None or self._baseline is None:
            raise DecompositionError("Cube adapter must be configured before building")
        if depth < 0:
            raise DecompositionError(f"Cube depth must be non-negative, got {depth}")

        ordered = self._order_dimensions(dimensions, hierarchies)[:depth]
        metric = self._metric_expression.expression_name
        self._check_columns([self.time_column, metric, *ordered])

        costs: list[CostEntry] = []
        for dim_name in ordered:
            rows = self._query_dimension(dim_name)
            for dim_value, current_value, baseline_value in rows:
                change = abs(float(current_value) - float(baseline_value))
                costs.append(
                    CostEntry(dim_name=dim_name, dim_value=str(dim_value), cost=change)
                )

        logger.info(
            "cube_cost_set_built",
            dataset=self._dataset,
            metric=str(self._metric_expression),
            dimensions=ordered,
            entries=len(costs),
        )
        return costs

    def close(self) -> None:
        """Close this adapter's cursor; the shared connection stays open."""
        self._conn.close()

    @staticmethod
    def _order_dimensions(dimensions: list[str], hierarchies: list[list[str]]) -> list[str]:
        ordered: list[str] = []
        for hierarchy in hierarchies:
            for dim_name in hierarchy:
                if dim_name in dimensions and dim_name not in ordered:
                    ordered.append(dim_name)
        ordered.extend(d for d in dimensions if d not in ordered)
        return ordered

    def _check_columns(self, required: list[str]) -> None:
        try:
            described = self._conn.execute(
                f"SELECT * FROM {_quote(self.fact_table)} LIMIT 0"
            ).description
        except duckdb.Error as e:
            logger.error("cube_query_failed", table=self.fact_table, error=str(e))
            raise OlapQueryError(f"Failed to describe {self.fact_table}: {e}") from e

        columns = {col[0] for col in described}
        missing = [c for c in required if c not in columns]
        if missing:
            raise DecompositionError(
                f"Fact table {self.fact_table} is missing columns: {', '.join(missing)}"
            )

    def _query_dimension(self, dim_name: str) -> list[tuple]:
        agg = self._metric_expression.agg_function.value
        metric = _quote(self._metric_expression.expression_name)
        ts = _quote(self.time_column)
        dim = _quote(dim_name)

        query = f"""
            SELECT
                CAST({dim} AS VARCHAR) AS dim_value,
                COALESCE({agg}(CASE WHEN {ts} >= ? AND {ts} < ? THEN {metric} END), 0) AS current_value,
                COALESCE({agg}(CASE WHEN {ts} >= ? AND {ts} < ? THEN {metric} END), 0) AS baseline_value
            FROM {_quote(self.fact_table)}
            WHERE {dim} IS NOT NULL
            GROUP BY 1
            ORDER BY 1
        """
        params = [*self._current, *self._baseline]

        try:
            return self._conn.execute(query, params).fetchall()
        except duckdb.Error as e:
            logger.error(
                "cube_query_failed",
                table=self.fact_table,
                dimension=dim_name,
                error=str(e),
            )
            raise OlapQueryError(f"Failed to query dimension {dim_name}: {e}") from e
