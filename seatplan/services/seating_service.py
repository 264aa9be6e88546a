"""Roster-to-seating orchestration across partitions."""

from __future__ import annotations

import random
from dataclasses import replace
from typing import Mapping, Optional, Sequence

from seatplan.domain.constraints import (
    SeatingConfig,
    parse_strategy,
    validate_capacity,
    validate_seating_config,
)
from seatplan.domain.errors import EmptyRosterError, InvalidMemberError
from seatplan.domain.identity import resolve_prefix
from seatplan.domain.models import (
    DistributionStrategy,
    Member,
    SeatingArrangement,
    SeatingResult,
)
from seatplan.services.grid_assigner import DEFAULT_GRID_WIDTH, assign_seats
from seatplan.services.quota_allocator import allocate
from seatplan.services.reporting import (
    AllocationReporter,
    CompositeReporter,
    LoggingReporter,
)
from seatplan.services.room_sizer import build_room_plans, plan_room_sizes
from seatplan.utils.config import Settings, get_settings
from seatplan.utils.logger import get_logger


logger = get_logger(__name__)

DEFAULT_PREFIX = "00011"
DEFAULT_MAX_CAPACITY = 72
UNKNOWN_PARTITION = "Unknown"


def partition_roster(
    roster: Sequence[Member],
    unknown_partition: str = UNKNOWN_PARTITION,
) -> dict[str, list[Member]]:
    """Group members by partition key in encounter order.

    Members with a blank key are relabelled with ``unknown_partition``.
    """
    partitions: dict[str, list[Member]] = {}
    for member in roster:
        if not member.name or not member.name.strip():
            raise InvalidMemberError("Every roster member needs a non-empty name")
        if not member.partition_key:
            member = replace(member, partition_key=unknown_partition)
        partitions.setdefault(member.partition_key, []).append(member)
    return partitions


def _partition_rank(
    partition_key: str,
    partition_order: Sequence[str],
    encounter_index: int,
) -> tuple[int, int]:
    if partition_key in partition_order:
        return (0, list(partition_order).index(partition_key))
    return (1, encounter_index)


def generate_seating(
    roster: Sequence[Member],
    capacity: int,
    strategy: DistributionStrategy,
    prefix_by_partition: Mapping[str, str],
    min_per_group_by_partition: Mapping[str, int],
    rng: random.Random,
    *,
    partition_order: Sequence[str] = (),
    default_prefix: Optional[str] = DEFAULT_PREFIX,
    reporter: Optional[AllocationReporter] = None,
    grid_width: int = DEFAULT_GRID_WIDTH,
    max_capacity: int = DEFAULT_MAX_CAPACITY,
    unknown_partition: str = UNKNOWN_PARTITION,
) -> list[SeatingArrangement]:
    """Split the roster into rooms and seats, one partition at a time.

    Room numbers restart at 1 in each partition. Arrangements are ordered by
    ``partition_order`` (unlisted partitions follow in encounter order), then
    by room number. All validation happens before any allocation work.
    """
    if not roster:
        raise EmptyRosterError("Roster is empty; nothing to allocate")
    validate_capacity(capacity, max_capacity)
    strategy = parse_strategy(strategy)

    partitions = partition_roster(roster, unknown_partition)
    for partition_key in partitions:
        resolve_prefix(partition_key, prefix_by_partition, default_prefix)

    ranked: list[tuple[tuple[int, int], SeatingArrangement]] = []
    for encounter_index, (partition_key, members) in enumerate(partitions.items()):
        quota = min_per_group_by_partition.get(partition_key, 0)
        plans = build_room_plans(plan_room_sizes(len(members), capacity, strategy))
        rooms = allocate(
            members,
            plans,
            quota,
            rng,
            reporter=reporter,
            partition_key=partition_key,
        )
        rank = _partition_rank(partition_key, partition_order, encounter_index)
        for plan, room_members in zip(plans, rooms):
            placements = assign_seats(
                room_members,
                plan.room_number,
                prefix_by_partition,
                default_prefix,
                rng,
                grid_width=grid_width,
            )
            ranked.append(
                (
                    rank,
                    SeatingArrangement(
                        partition_key=partition_key,
                        room_number=plan.room_number,
                        placements=tuple(placements),
                    ),
                )
            )
        logger.debug(
            "Partition seated | partition=%s | members=%s | rooms=%s | quota=%s",
            partition_key,
            len(members),
            len(plans),
            quota,
        )

    ranked.sort(key=lambda item: (item[0], item[1].room_number))
    return [arrangement for _, arrangement in ranked]


class SeatingService:
    """Runs seating generation with configured defaults."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        reporter: Optional[AllocationReporter] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._reporter = reporter or LoggingReporter()

    def build_config(
        self,
        *,
        capacity: Optional[int] = None,
        strategy: DistributionStrategy | str | None = None,
        prefix_by_partition: Optional[Mapping[str, str]] = None,
        min_per_group_by_partition: Optional[Mapping[str, int]] = None,
        partition_order: Optional[Sequence[str]] = None,
    ) -> SeatingConfig:
        settings = self._settings
        config = SeatingConfig(
            capacity=capacity if capacity is not None else settings.seating_default_capacity,
            strategy=parse_strategy(
                strategy if strategy is not None else settings.seating_default_strategy
            ),
            default_prefix=settings.seating_default_prefix,
            prefix_by_partition=dict(
                prefix_by_partition
                if prefix_by_partition is not None
                else settings.seating_partition_prefixes
            ),
            min_per_group_by_partition=dict(
                min_per_group_by_partition
                if min_per_group_by_partition is not None
                else settings.seating_min_per_group
            ),
            partition_order=tuple(
                partition_order
                if partition_order is not None
                else settings.seating_partition_order
            ),
            grid_width=settings.seating_grid_width,
            max_capacity=settings.seating_max_capacity,
        )
        validate_seating_config(config)
        return config

    def generate(
        self,
        roster: Sequence[Member],
        *,
        capacity: Optional[int] = None,
        strategy: DistributionStrategy | str | None = None,
        prefix_by_partition: Optional[Mapping[str, str]] = None,
        min_per_group_by_partition: Optional[Mapping[str, int]] = None,
        partition_order: Optional[Sequence[str]] = None,
        seed: Optional[int] = None,
        reporter: Optional[AllocationReporter] = None,
    ) -> SeatingResult:
        if not roster:
            raise EmptyRosterError("Roster is empty; nothing to allocate")
        config = self.build_config(
            capacity=capacity,
            strategy=strategy,
            prefix_by_partition=prefix_by_partition,
            min_per_group_by_partition=min_per_group_by_partition,
            partition_order=partition_order,
        )
        # A None seed draws from system entropy.
        rng = random.Random(seed if seed is not None else self._settings.seating_random_seed)
        active_reporter = (
            CompositeReporter(self._reporter, reporter) if reporter is not None else self._reporter
        )

        arrangements = generate_seating(
            roster,
            config.capacity,
            config.strategy,
            config.prefix_by_partition,
            config.min_per_group_by_partition,
            rng,
            partition_order=config.partition_order,
            default_prefix=config.default_prefix,
            reporter=active_reporter,
            grid_width=config.grid_width,
            max_capacity=config.max_capacity,
            unknown_partition=self._settings.seating_unknown_partition,
        )
        result = SeatingResult(
            arrangements=arrangements,
            total_members=len(roster),
            total_rooms=len(arrangements),
        )
        logger.info(
            "Seating generated | members=%s | rooms=%s | capacity=%s | strategy=%s",
            result.total_members,
            result.total_rooms,
            config.capacity,
            config.strategy.value,
        )
        return result
