"""Domain-level validation rules for a seating run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from seatplan.domain.errors import InvalidCapacityError, SeatingValidationError
from seatplan.domain.models import DistributionStrategy


@dataclass(frozen=True)
class SeatingConfig:
    capacity: int
    strategy: DistributionStrategy
    default_prefix: str
    prefix_by_partition: Mapping[str, str] = field(default_factory=dict)
    min_per_group_by_partition: Mapping[str, int] = field(default_factory=dict)
    partition_order: tuple[str, ...] = ()
    grid_width: int = 6
    max_capacity: int = 72


def validate_capacity(capacity: int, max_capacity: int) -> None:
    if not 1 <= capacity <= max_capacity:
        raise InvalidCapacityError(
            f"capacity must be between 1 and {max_capacity}, got {capacity}"
        )


def validate_seating_config(config: SeatingConfig) -> None:
    validate_capacity(config.capacity, config.max_capacity)
    if config.grid_width <= 0:
        raise SeatingValidationError("grid_width must be > 0")
    for partition_key, minimum in config.min_per_group_by_partition.items():
        if minimum < 0:
            raise SeatingValidationError(
                f"min_per_group for partition {partition_key!r} must be >= 0"
            )


def parse_strategy(value: DistributionStrategy | str) -> DistributionStrategy:
    try:
        return DistributionStrategy(value)
    except ValueError as exc:
        choices = ", ".join(item.value for item in DistributionStrategy)
        raise SeatingValidationError(
            f"distribution strategy must be one of {choices}, got {value!r}"
        ) from exc
