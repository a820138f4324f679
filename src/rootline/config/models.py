"""Configuration models using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from rootline.config.paths import get_database_path


class DatabaseConfig(BaseModel):
    """Where family data is stored.

    ``database_url`` takes precedence over ``database_path`` when set.
    """

    database_path: Path = Field(default_factory=get_database_path)
    database_url: str | None = None


class DuplicateConfig(BaseModel):
    """Thresholds for fuzzy duplicate-person detection."""

    min_similarity: float = Field(default=0.58, ge=0.0, le=1.0)
    # Above this, a candidate is flagged even when surnames differ
    strong_similarity: float = Field(default=0.8, ge=0.0, le=1.0)
    max_candidates: int = Field(default=5, ge=1)
    long_token_length: int = Field(default=5, ge=3)
    long_token_max_edits: int = Field(default=2, ge=1)
    # Years of slack on each side when comparing birth date ranges
    date_slack_years: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "DuplicateConfig":
        if self.strong_similarity < self.min_similarity:
            raise ValueError("strong_similarity must be >= min_similarity")
        return self


class GraphConfig(BaseModel):
    """Optional plausibility rules for graph mutations."""

    # Minimum years between a parent's and a child's birth; None disables the check
    min_parent_age_gap: int | None = Field(default=None, ge=0)


class ServerConfig(BaseModel):
    """Configuration for HTTP server."""

    host: str = "127.0.0.1"
    port: int = 8080


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_to_file: bool = False
    redact_actor_ids: bool = True


class ConfigError(Exception):
    """Configuration error."""

    pass


class RootlineConfig(BaseModel):
    """Root configuration model."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    duplicates: DuplicateConfig = Field(default_factory=DuplicateConfig)
    graph: GraphConfig = Field(default_factory=GraphConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
