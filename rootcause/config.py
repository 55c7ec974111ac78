"""
Configuration management using pydantic-settings.
All settings loaded from environment variables (12-factor app).
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Scoring settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="info", description="Log level")
    log_format: str = Field(default="json", description="Log format (json|console)")
    log_configure: bool = Field(
        default=False, description="Let the scorer configure structlog on first use"
    )

    # Cube backend
    cube_db_path: str = Field(default=":memory:", description="DuckDB file backing the cube")
    cube_fact_table: str = Field(default="metric_facts", description="Fact table queried by the cube")
    cube_time_column: str = Field(default="ts", description="Timestamp column of the fact table")
    cube_threads: int = Field(default=4, ge=1, description="DuckDB thread count")

    # Engine Configuration
    default_agg_function: str = Field(
        default="SUM", description="Aggregation applied to the metric before decomposition"
    )
    weight_tolerance: float = Field(
        default=1e-9, gt=0.0, description="Tolerance when checking that weights sum to 1.0"
    )

    # Development
    dev_mode: bool = Field(default=True, description="Development mode")

    @field_validator("default_agg_function")
    @classmethod
    def normalize_agg_function(cls, v: str) -> str:
        """Aggregation names are matched case-insensitively."""
        return v.strip().upper()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure singleton behavior.
    """
    return Settings()
