"""Scheduler configuration loaded from environment variables."""

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Floor below which no configuration may push the ease factor
MINIMUM_EASE_FLOOR = 1.3

ENV_PREFIX = "SRS_"


class SchedulerConfig(BaseModel):
    """Tunable constants of the SM-2 family scheduler."""

    model_config = ConfigDict(frozen=True)

    default_ease: float = Field(2.5, description="Ease factor of a newly enrolled item")
    minimum_ease: float = Field(MINIMUM_EASE_FLOOR, ge=MINIMUM_EASE_FLOOR, description="Ease factor floor")
    lapse_ease_penalty: float = Field(0.2, ge=0, description="Ease lost on an 'again' grade")
    first_interval_days: int = Field(1, ge=1)
    second_interval_days: int = Field(6, ge=1)
    maturity_threshold_days: int = Field(21, ge=0, description="Intervals above this count as mature")
    max_interval_days: int = Field(365, ge=1, description="Upper bound for any interval")
    hard_interval_multiplier: float = Field(0.8, gt=0)
    easy_interval_multiplier: float = Field(1.3, ge=1, description="Easy grades never shrink the interval")
    learned_repetitions: int = Field(3, ge=1, description="Successful repetitions after which an item is learned")
    daily_review_limit: int | None = Field(None, ge=0, description="Max reviews offered per session")

    @model_validator(mode="after")
    def _check_ease_bounds(self) -> "SchedulerConfig":
        if self.default_ease < self.minimum_ease:
            raise ValueError(
                f"default_ease ({self.default_ease}) must not be below minimum_ease ({self.minimum_ease})"
            )
        return self

    @model_validator(mode="after")
    def _check_interval_order(self) -> "SchedulerConfig":
        if self.first_interval_days > self.second_interval_days:
            raise ValueError(
                f"first_interval_days ({self.first_interval_days}) must not exceed "
                f"second_interval_days ({self.second_interval_days})"
            )
        return self


def _read_env_overrides() -> dict[str, str | None]:
    overrides: dict[str, str | None] = {}
    for name in SchedulerConfig.model_fields:
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is None:
            continue
        raw = raw.strip()
        # An empty or "none" limit means unlimited
        if name == "daily_review_limit" and raw.lower() in ("", "none", "off"):
            overrides[name] = None
        else:
            overrides[name] = raw
    return overrides


@lru_cache()
def get_scheduler_config() -> SchedulerConfig:
    """Get cached scheduler settings from SRS_* environment variables."""
    return SchedulerConfig(**_read_env_overrides())
