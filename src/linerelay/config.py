"""Configuration loading for relay scenarios.

Pydantic-based settings loaded from environment variables (``RELAY_`` prefix)
and an optional .env file. Values are fixed for a scenario but expressed as
parameters so tests and the CLI can override them.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from linerelay.model.token import INT32_MAX, INT32_MIN, TOKEN_MAX, TOKEN_MIN

logger = logging.getLogger(__name__)


class RelayConfig(BaseSettings):
    """Scenario configuration for a line of relay agents.

    Environment Variables:
        RELAY_LINE_LENGTH: Number of agents in the line (default: 5)
        RELAY_START_OFFSET: Time at which the Origin emits the first token (default: 1.0)
        RELAY_STOP_DEADLINE: Time at which all agents cease activity (default: 30.0)
        RELAY_RANDOM_MIN: Lower bound of generated token values (default: 0)
        RELAY_RANDOM_MAX: Upper bound of generated token values (default: 100)
        RELAY_HOP_LATENCY: Time for one token to cross one link (default: 0.5)
        RELAY_TICK_INTERVAL: Simulated time per scheduler tick (default: 0.1)
        RELAY_SEED: Base seed for per-agent random sources (default: unseeded)

    Example:
        >>> config = RelayConfig()  # Loads from environment
        >>> config = RelayConfig(line_length=7, seed=42)
    """

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    line_length: int = Field(
        default=5,
        ge=2,
        description="Number of agents in the line",
    )
    start_offset: float = Field(
        default=1.0,
        ge=0.0,
        description="Simulated time at which the Origin emits the first token",
    )
    stop_deadline: float = Field(
        default=30.0,
        gt=0.0,
        description="Simulated time at which all agents cease activity",
    )
    random_min: int = Field(
        default=TOKEN_MIN,
        ge=INT32_MIN,
        le=INT32_MAX,
        description="Inclusive lower bound for generated token values",
    )
    random_max: int = Field(
        default=TOKEN_MAX,
        ge=INT32_MIN,
        le=INT32_MAX,
        description="Inclusive upper bound for generated token values",
    )
    hop_latency: float = Field(
        default=0.5,
        gt=0.0,
        description="Simulated time for a token to cross one link",
    )
    tick_interval: float = Field(
        default=0.1,
        gt=0.0,
        description="Simulated time advanced by one scheduler tick",
    )
    seed: int | None = Field(
        default=None,
        description="Base seed; agent p draws from Random(seed + p)",
    )

    @model_validator(mode="after")
    def check_consistency(self) -> RelayConfig:
        """Reject timings and ranges the coordinator cannot run."""
        if self.stop_deadline <= self.start_offset:
            raise ValueError(
                f"stop_deadline ({self.stop_deadline}) must be greater than "
                f"start_offset ({self.start_offset})"
            )
        if self.random_min > self.random_max:
            raise ValueError(
                f"random_min ({self.random_min}) must not exceed random_max ({self.random_max})"
            )
        if self.tick_interval > self.hop_latency:
            raise ValueError(
                f"tick_interval ({self.tick_interval}) must not exceed "
                f"hop_latency ({self.hop_latency})"
            )
        return self

    @property
    def value_range(self) -> tuple[int, int]:
        """Inclusive bounds for generated token values."""
        return (self.random_min, self.random_max)

    def __repr__(self) -> str:
        return (
            f"RelayConfig("
            f"line_length={self.line_length}, "
            f"start_offset={self.start_offset}, "
            f"stop_deadline={self.stop_deadline}, "
            f"value_range=[{self.random_min}, {self.random_max}], "
            f"hop_latency={self.hop_latency}, "
            f"tick_interval={self.tick_interval}, "
            f"seed={self.seed}"
            f")"
        )


@lru_cache
def get_relay_config() -> RelayConfig:
    """Get cached relay configuration singleton.

    To reload configuration, call get_relay_config.cache_clear() first.
    """
    config = RelayConfig()
    logger.info("Loaded relay configuration: %r", config)
    return config
