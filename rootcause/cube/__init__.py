"""
Cube decomposition adapters.

The scorer depends only on the CubeAdapter contract; DuckDB is the bundled
backend. Adapters are created per scoring call through get_cube_adapter(),
while the underlying DuckDB connection is shared.
"""

from functools import lru_cache

import duckdb

from rootcause.config import get_settings

from .base import CubeAdapter, CubeError, DecompositionError, OlapQueryError
from .duckdb_cube import DuckDBCubeAdapter


@lru_cache
def get_cube_connection() -> duckdb.DuckDBPyConnection:
    """
    Get the cached DuckDB connection backing the cube (singleton).

    Returns:
        DuckDB connection configured from settings
    """
    settings = get_settings()
    return duckdb.connect(settings.cube_db_path, config={"threads": settings.cube_threads})


def get_cube_adapter() -> CubeAdapter:
    """
    Create a fresh cube adapter on the shared connection.

    Returns:
        CubeAdapter implementation instance
    """
    settings = get_settings()
    return DuckDBCubeAdapter(
        connection=get_cube_connection(),
        fact_table=settings.cube_fact_table,
        time_column=settings.cube_time_column,
    )


__all__ = [
    "CubeAdapter",
    "CubeError",
    "DecompositionError",
    "DuckDBCubeAdapter",
    "OlapQueryError",
    "get_cube_adapter",
    "get_cube_connection",
]
