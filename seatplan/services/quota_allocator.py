"""Distribute a partition's members over rooms with a per-group minimum.

Allocation runs in named phases so each can be exercised on its own:

1. ``seed_quotas`` places exactly ``quota`` members of every group into each
   room the group can fill, and collects the rest of the group as overflow.
2. ``distribute_overflow`` hands overflow members to the emptiest room the
   group already occupies.
3. ``rebalance_rooms`` pushes excess members forward and backfills short
   rooms. Members move singly into rooms where their group already holds
   quota, or as whole quota-sized blocks; groups below quota never move.

Quota is best effort: nothing here raises, and every member ends up in
exactly one room.
"""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence

from seatplan.domain.models import Member, RoomPlan, RoomSummary
from seatplan.services.reporting import AllocationReporter
from seatplan.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass
class RoomBuffer:
    """Mutable working state of one room during allocation."""

    plan: RoomPlan
    members: list[Member] = field(default_factory=list)
    group_counts: Counter = field(default_factory=Counter)

    @property
    def gap(self) -> int:
        return self.plan.target_size - len(self.members)

    def add(self, member: Member) -> None:
        self.members.append(member)
        self.group_counts[member.group] += 1

    def pop(self, index: int) -> Member:
        member = self.members.pop(index)
        self.group_counts[member.group] -= 1
        if self.group_counts[member.group] == 0:
            del self.group_counts[member.group]
        return member


@dataclass(frozen=True)
class OverflowMember:
    member: Member
    eligible_rooms: tuple[int, ...]


def group_members(members: Sequence[Member]) -> dict[str, list[Member]]:
    """Group by label, keeping first-encounter order of groups and members."""
    groups: dict[str, list[Member]] = {}
    for member in members:
        groups.setdefault(member.group, []).append(member)
    return groups


def seed_quotas(
    groups: dict[str, list[Member]],
    rooms: list[RoomBuffer],
    quota: int,
    rng: random.Random,
) -> list[OverflowMember]:
    overflow: list[OverflowMember] = []
    for group, members in groups.items():
        shuffled = list(members)
        rng.shuffle(shuffled)
        usable_rooms = min(len(shuffled) // quota, len(rooms))

        if usable_rooms == 0:
            # Too small to meet quota anywhere: keep the group together.
            for member in shuffled:
                rooms[0].add(member)
            logger.debug(
                "Group below quota seeded into first room | group=%s | size=%s | quota=%s",
                group,
                len(shuffled),
                quota,
            )
            continue

        for room_index in range(usable_rooms):
            start = room_index * quota
            for member in shuffled[start:start + quota]:
                rooms[room_index].add(member)

        eligible = tuple(range(usable_rooms))
        overflow.extend(
            OverflowMember(member=member, eligible_rooms=eligible)
            for member in shuffled[usable_rooms * quota:]
        )
    return overflow


def distribute_overflow(
    overflow: Sequence[OverflowMember],
    rooms: list[RoomBuffer],
    rng: random.Random,
) -> None:
    pool = list(overflow)
    rng.shuffle(pool)
    for entry in pool:
        group = entry.member.group
        open_rooms = [index for index in entry.eligible_rooms if rooms[index].gap > 0]
        if not open_rooms:
            rooms[entry.eligible_rooms[-1]].add(entry.member)
            continue
        target = min(
            open_rooms,
            key=lambda index: (-rooms[index].gap, rooms[index].group_counts[group], index),
        )
        rooms[target].add(entry.member)


def _is_movable(
    room: RoomBuffer,
    member: Member,
    quota: int,
    group_totals: Counter,
) -> bool:
    # Groups below quota stay whole wherever phase 1 put them.
    if group_totals[member.group] < quota:
        return False
    return room.group_counts[member.group] - 1 >= quota


def _take_block(source: RoomBuffer, group: str, size: int) -> list[Member]:
    block: list[Member] = []
    index = len(source.members) - 1
    while index >= 0 and len(block) < size:
        if source.members[index].group == group:
            block.append(source.pop(index))
        index -= 1
    return block


def _take_movable(
    source: RoomBuffer,
    count: int,
    quota: int,
    group_totals: Counter,
    destination: RoomBuffer,
) -> list[Member]:
    """Remove up to ``count`` movable members from the back of ``source``.

    A single member only moves into a room where its group already holds
    quota. A group absent from ``destination`` moves as a block of exactly
    ``quota`` members, and only while ``source`` keeps a full quota of it.
    Anything else stays put, leaving ``source`` over target.
    """
    taken: list[Member] = []
    incoming: Counter = Counter()
    while len(taken) < count:
        index = len(source.members) - 1
        while index >= 0 and len(taken) < count:
            member = source.members[index]
            established = destination.group_counts[member.group] + incoming[member.group] >= quota
            if established and _is_movable(source, member, quota, group_totals):
                taken.append(source.pop(index))
                incoming[member.group] += 1
            index -= 1

        if count - len(taken) < quota:
            break
        block_group = next(
            (
                group
                for group, held in source.group_counts.items()
                if held >= 2 * quota and destination.group_counts[group] + incoming[group] == 0
            ),
            None,
        )
        if block_group is None:
            break
        taken.extend(_take_block(source, block_group, quota))
        incoming[block_group] += quota
    return taken


def rebalance_rooms(
    rooms: list[RoomBuffer],
    quota: int,
    group_totals: Counter,
) -> None:
    for index in range(len(rooms) - 1):
        excess = -rooms[index].gap
        if excess <= 0:
            continue
        destination = rooms[index + 1]
        for member in _take_movable(rooms[index], excess, quota, group_totals, destination):
            destination.add(member)

    for index, room in enumerate(rooms):
        for later in rooms[index + 1:]:
            needed = room.gap
            if needed <= 0:
                break
            surplus = -later.gap
            if surplus <= 0:
                continue
            moved = _take_movable(later, min(needed, surplus), quota, group_totals, room)
            for member in moved:
                room.add(member)


def _under_quota_groups(
    room: RoomBuffer,
    quota: int,
    group_totals: Counter,
) -> tuple[str, ...]:
    if quota <= 0:
        return ()
    return tuple(
        group
        for group, count in room.group_counts.items()
        if count < quota and count < group_totals[group]
    )


def _cut_shuffled(
    members: Sequence[Member],
    rooms: list[RoomBuffer],
    rng: random.Random,
) -> None:
    shuffled = list(members)
    rng.shuffle(shuffled)
    start = 0
    for room in rooms:
        for member in shuffled[start:start + room.plan.target_size]:
            room.add(member)
        start += room.plan.target_size
    for member in shuffled[start:]:
        rooms[-1].add(member)


def allocate(
    members: Sequence[Member],
    room_plans: Sequence[RoomPlan],
    min_per_group_per_room: int,
    rng: random.Random,
    reporter: Optional[AllocationReporter] = None,
    partition_key: str = "",
) -> list[list[Member]]:
    """Return one member list per room plan, in plan order."""
    if not room_plans:
        if members:
            raise ValueError("room_plans must not be empty when members are given")
        return []

    rooms = [RoomBuffer(plan=plan) for plan in room_plans]
    quota = max(0, min_per_group_per_room)
    group_totals = Counter(member.group for member in members)

    if quota == 0:
        _cut_shuffled(members, rooms, rng)
    else:
        overflow = seed_quotas(group_members(members), rooms, quota, rng)
        logger.debug(
            "Quota seeding complete | partition=%s | seeded=%s | overflow=%s",
            partition_key,
            len(members) - len(overflow),
            len(overflow),
        )
        distribute_overflow(overflow, rooms, rng)
        rebalance_rooms(rooms, quota, group_totals)

    for room in rooms:
        rng.shuffle(room.members)
        if reporter is not None:
            reporter.room_summary(
                RoomSummary(
                    partition_key=partition_key,
                    room_number=room.plan.room_number,
                    target_size=room.plan.target_size,
                    actual_size=len(room.members),
                    group_counts=dict(room.group_counts),
                    under_quota_groups=_under_quota_groups(room, quota, group_totals),
                )
            )

    return [list(room.members) for room in rooms]
