"""Configuration models for the planwise engine and its storage."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class EngineConfig(BaseModel):
    """Recurrence engine configuration."""

    max_backlog_iterations: int = Field(
        default=1000, gt=0, description="Ceiling on backlog catch-up steps"
    )
    backlog_timeout: float | None = Field(
        default=None, gt=0, description="Seconds before a backlog run is cut short"
    )
    one_shot_target_days: int = Field(default=1, ge=0)
    one_shot_limit_days: int = Field(default=7, ge=0)

    @field_validator("one_shot_limit_days")
    @classmethod
    def validate_limit_after_target(cls, v: int, info) -> int:
        target = info.data.get("one_shot_target_days", 0)
        if v < target:
            raise ValueError("one_shot_limit_days must not be below one_shot_target_days")
        return v


class StorageConfig(BaseModel):
    """Storage configuration."""

    db_path: str | None = Field(
        default=None, description="SQLite database path (default: user data dir)"
    )


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="table")
    color: bool = Field(default=True)


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


class AppConfig(BaseModel):
    """Main planwise configuration"""

    engine: EngineConfig = Field(default_factory=EngineConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LogConfig = Field(default_factory=LogConfig)
