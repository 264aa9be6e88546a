"""Domain models for room distribution and seat assignment."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DistributionStrategy(str, Enum):
    """How the remainder of a cohort is handled when rooms do not divide evenly."""

    PACK_LAST = "last"
    SEPARATE_REMAINDER = "separate"
    AVERAGE = "average"


@dataclass(frozen=True)
class Member:
    name: str
    group: str
    partition_key: str


@dataclass(frozen=True)
class RoomPlan:
    room_number: int
    target_size: int


@dataclass(frozen=True)
class Placement:
    member: Member
    room_number: int
    seat_number: int
    row: int
    col: int
    identity: str


@dataclass(frozen=True)
class SeatingArrangement:
    partition_key: str
    room_number: int
    placements: tuple[Placement, ...]

    @property
    def size(self) -> int:
        return len(self.placements)


@dataclass(frozen=True)
class RoomSummary:
    """Per-room outcome of quota allocation, emitted to reporters."""

    partition_key: str
    room_number: int
    target_size: int
    actual_size: int
    group_counts: dict[str, int] = field(default_factory=dict)
    under_quota_groups: tuple[str, ...] = ()

    @property
    def over_target(self) -> bool:
        return self.actual_size > self.target_size

    @property
    def under_target(self) -> bool:
        return self.actual_size < self.target_size


@dataclass(frozen=True)
class SeatingResult:
    arrangements: list[SeatingArrangement]
    total_members: int
    total_rooms: int
