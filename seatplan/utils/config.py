"""Environment-driven application settings."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional


def _default_partition_prefixes() -> dict[str, str]:
    return {
        "七年级": "07011",
        "八年级": "08011",
        "九年级": "09011",
        "Grade 7": "07011",
        "Grade 8": "08011",
        "Grade 9": "09011",
    }


def _default_min_per_group() -> dict[str, int]:
    return {
        "八年级": 4,
        "九年级": 5,
        "Grade 8": 4,
        "Grade 9": 5,
    }


def _default_partition_order() -> tuple[str, ...]:
    return ("七年级", "八年级", "九年级", "Grade 7", "Grade 8", "Grade 9")


@dataclass(frozen=True)
class Settings:
    app_name: str = "Seat Plan Allocation Engine"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    seating_default_capacity: int = 36
    seating_max_capacity: int = 72
    seating_grid_width: int = 6
    seating_default_strategy: str = "last"
    seating_default_prefix: str = "00011"
    seating_unknown_partition: str = "Unknown"
    seating_random_seed: Optional[int] = None
    seating_partition_prefixes: dict[str, str] = field(
        default_factory=_default_partition_prefixes
    )
    seating_min_per_group: dict[str, int] = field(default_factory=_default_min_per_group)
    seating_partition_order: tuple[str, ...] = field(
        default_factory=_default_partition_order
    )


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_json_object(name: str) -> Optional[dict]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    value = json.loads(raw)
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a JSON object")
    return value


def _env_list(name: str) -> Optional[tuple[str, ...]]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once from environment variables.

    Mapping-valued overrides (``SEATING_PARTITION_PREFIXES``,
    ``SEATING_MIN_PER_GROUP``) are JSON objects; ``SEATING_PARTITION_ORDER``
    is a comma-separated list.
    """

    defaults = Settings()
    prefixes = _env_json_object("SEATING_PARTITION_PREFIXES")
    min_per_group = _env_json_object("SEATING_MIN_PER_GROUP")
    partition_order = _env_list("SEATING_PARTITION_ORDER")

    return Settings(
        app_name=os.getenv("APP_NAME", defaults.app_name),
        app_version=os.getenv("APP_VERSION", defaults.app_version),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        seating_default_capacity=_env_int(
            "SEATING_DEFAULT_CAPACITY", defaults.seating_default_capacity
        ),
        seating_max_capacity=_env_int("SEATING_MAX_CAPACITY", defaults.seating_max_capacity),
        seating_grid_width=_env_int("SEATING_GRID_WIDTH", defaults.seating_grid_width),
        seating_default_strategy=os.getenv(
            "SEATING_DEFAULT_STRATEGY", defaults.seating_default_strategy
        ),
        seating_default_prefix=os.getenv(
            "SEATING_DEFAULT_PREFIX", defaults.seating_default_prefix
        ),
        seating_unknown_partition=os.getenv(
            "SEATING_UNKNOWN_PARTITION", defaults.seating_unknown_partition
        ),
        seating_random_seed=_env_int("SEATING_RANDOM_SEED", None),
        seating_partition_prefixes=(
            {str(key): str(value) for key, value in prefixes.items()}
            if prefixes is not None
            else defaults.seating_partition_prefixes
        ),
        seating_min_per_group=(
            {str(key): int(value) for key, value in min_per_group.items()}
            if min_per_group is not None
            else defaults.seating_min_per_group
        ),
        seating_partition_order=(
            partition_order
            if partition_order is not None
            else defaults.seating_partition_order
        ),
    )
