from __future__ import annotations

import random
from collections import Counter

from seatplan.domain.models import DistributionStrategy, Member, RoomPlan
from seatplan.services.quota_allocator import (
    OverflowMember,
    RoomBuffer,
    allocate,
    distribute_overflow,
    group_members,
    rebalance_rooms,
    seed_quotas,
)
from seatplan.services.reporting import CollectingReporter
from seatplan.services.room_sizer import build_room_plans, plan_room_sizes


def _roster(group_sizes: dict[str, int], partition: str = "Grade 8") -> list[Member]:
    return [
        Member(name=f"{group}-{index:02d}", group=group, partition_key=partition)
        for group, size in group_sizes.items()
        for index in range(size)
    ]


def _buffer(room_number: int, target: int, groups: list[str]) -> RoomBuffer:
    room = RoomBuffer(plan=RoomPlan(room_number=room_number, target_size=target))
    for index, group in enumerate(groups):
        room.add(Member(name=f"r{room_number}-{group}-{index}", group=group, partition_key="P"))
    return room


def test_every_room_meets_quota_for_every_group():
    members = _roster({"Class 1": 20, "Class 2": 20, "Class 3": 20})
    plans = build_room_plans([30, 30])

    rooms = allocate(members, plans, 4, random.Random(11))

    assert [len(room) for room in rooms] == [30, 30]
    for room in rooms:
        counts = Counter(member.group for member in room)
        assert set(counts) == {"Class 1", "Class 2", "Class 3"}
        assert all(count >= 4 for count in counts.values())


def test_allocation_conserves_members_across_seeds():
    members = _roster({"A": 13, "B": 7, "C": 22, "D": 3, "E": 9})
    plans = build_room_plans([18, 18, 18])

    for seed in range(10):
        rooms = allocate(members, plans, 4, random.Random(seed))
        flattened = [member for room in rooms for member in room]
        assert Counter(flattened) == Counter(members)


def test_group_below_quota_is_kept_together_in_first_room():
    members = _roster({"A": 20, "B": 20, "C": 2})
    plans = build_room_plans([21, 21])

    rooms = allocate(members, plans, 4, random.Random(3))

    assert [len(room) for room in rooms] == [21, 21]
    assert sum(1 for member in rooms[0] if member.group == "C") == 2
    assert all(member.group != "C" for member in rooms[1])


def test_zero_quota_cuts_shuffled_roster_into_plan_sizes():
    members = _roster({"A": 10, "B": 15})
    plans = build_room_plans([12, 13])

    rooms = allocate(members, plans, 0, random.Random(5))

    assert [len(room) for room in rooms] == [12, 13]
    assert Counter(member for room in rooms for member in room) == Counter(members)


def test_same_seed_gives_same_allocation():
    members = _roster({"A": 17, "B": 19, "C": 11})
    plans = build_room_plans([24, 23])

    first = allocate(members, plans, 4, random.Random(99))
    second = allocate(members, plans, 4, random.Random(99))

    assert first == second


def test_seed_quotas_fills_usable_rooms_and_returns_overflow():
    groups = group_members(_roster({"A": 10}))
    rooms = [RoomBuffer(plan=plan) for plan in build_room_plans([5, 5, 5])]

    overflow = seed_quotas(groups, rooms, 4, random.Random(0))

    assert [len(room.members) for room in rooms] == [4, 4, 0]
    assert len(overflow) == 2
    assert all(entry.eligible_rooms == (0, 1) for entry in overflow)


def test_distribute_overflow_prefers_largest_gap_then_fewest_of_group():
    rooms = [_buffer(1, 6, ["A", "A", "A"]), _buffer(2, 6, ["B"])]
    member = Member(name="extra", group="A", partition_key="P")

    distribute_overflow([OverflowMember(member=member, eligible_rooms=(0, 1))], rooms, random.Random(0))

    assert member in rooms[1].members

    rooms = [_buffer(1, 4, ["B", "B"]), _buffer(2, 4, ["A", "B"])]
    member = Member(name="extra", group="A", partition_key="P")

    distribute_overflow([OverflowMember(member=member, eligible_rooms=(0, 1))], rooms, random.Random(0))

    assert member in rooms[0].members


def test_distribute_overflow_appends_to_last_eligible_room_when_full():
    rooms = [_buffer(1, 2, ["A", "A"]), _buffer(2, 2, ["A", "A"]), _buffer(3, 5, [])]
    member = Member(name="extra", group="A", partition_key="P")

    distribute_overflow([OverflowMember(member=member, eligible_rooms=(0, 1))], rooms, random.Random(0))

    assert member in rooms[1].members
    assert rooms[2].members == []


def test_rebalance_moves_excess_without_breaking_quota():
    rooms = [_buffer(1, 4, ["A", "A", "A", "B", "B"]), _buffer(2, 4, ["A", "A", "B"])]

    rebalance_rooms(rooms, 2, Counter({"A": 5, "B": 3}))

    assert [len(room.members) for room in rooms] == [4, 4]
    assert rooms[0].group_counts == Counter({"A": 2, "B": 2})
    assert rooms[1].group_counts == Counter({"A": 3, "B": 1})


def test_rebalance_leaves_room_over_target_when_nothing_is_movable():
    rooms = [_buffer(1, 2, ["A", "A", "A"]), _buffer(2, 1, [])]

    rebalance_rooms(rooms, 3, Counter({"A": 3}))

    assert len(rooms[0].members) == 3
    assert rooms[1].members == []


def test_rebalance_backfills_short_room_from_later_room():
    rooms = [_buffer(1, 4, ["A", "A"]), _buffer(2, 4, ["A", "A", "A", "A", "A", "A"])]

    rebalance_rooms(rooms, 2, Counter({"A": 8}))

    assert [len(room.members) for room in rooms] == [4, 4]


def test_quota_shortfall_is_reported_not_raised():
    members = _roster({f"Class {index}": 5 for index in range(10)})
    plans = build_room_plans([25, 25])
    reporter = CollectingReporter()

    rooms = allocate(members, plans, 4, random.Random(1), reporter=reporter, partition_key="Grade 8")

    assert sum(len(room) for room in rooms) == 50
    first, second = reporter.summaries
    assert first.room_number == 1 and first.over_target
    assert second.room_number == 2 and second.under_target
    assert first.actual_size == 50
    assert second.actual_size == 0 and second.under_quota_groups == ()
    assert first.partition_key == "Grade 8"
    assert reporter.warnings()


def test_reporter_receives_one_summary_per_room():
    members = _roster({"A": 20, "B": 20, "C": 20})
    reporter = CollectingReporter()

    allocate(members, build_room_plans([30, 30]), 4, random.Random(2), reporter=reporter)

    assert [summary.room_number for summary in reporter.summaries] == [1, 2]
    assert all(summary.under_quota_groups == () for summary in reporter.summaries)
    assert all(summary.actual_size == 30 for summary in reporter.summaries)
    assert reporter.warnings() == []


def test_no_rooms_and_no_members_returns_empty():
    assert allocate([], [], 4, random.Random(0)) == []


def _assert_quota_or_whole_group(rooms: list[list[Member]], quota: int, totals: Counter) -> None:
    for room_index, room in enumerate(rooms):
        for group, count in Counter(member.group for member in room).items():
            assert count >= quota or count == totals[group], (room_index, group, count, quota)


def test_small_groups_stay_whole_when_first_room_is_over_target():
    members = _roster({"G0": 9, "G1": 10, "G2": 7, "G3": 3, "G4": 3, "G5": 9})
    plans = build_room_plans([21, 20])

    for seed in range(50):
        rooms = allocate(members, plans, 5, random.Random(seed))
        for group in ("G3", "G4"):
            holders = [index for index, room in enumerate(rooms) if any(m.group == group for m in room)]
            assert holders == [0]


def test_rebalance_never_moves_below_quota_group():
    rooms = [_buffer(1, 3, ["A", "A", "A", "S", "S"]), _buffer(2, 4, ["A", "A", "A"])]

    rebalance_rooms(rooms, 3, Counter({"A": 6, "S": 2}))

    assert rooms[0].group_counts == Counter({"A": 3, "S": 2})
    assert rooms[1].group_counts == Counter({"A": 3})


def test_rebalance_does_not_open_partial_group_in_new_room():
    rooms = [_buffer(1, 5, ["A"] * 9), _buffer(2, 5, ["B"] * 5)]

    rebalance_rooms(rooms, 5, Counter({"A": 9, "B": 5}))

    assert rooms[0].group_counts == Counter({"A": 9})
    assert rooms[1].group_counts == Counter({"B": 5})


def test_rebalance_moves_whole_quota_block_into_room_without_group():
    rooms = [_buffer(1, 4, ["A"] * 8), _buffer(2, 4, [])]

    rebalance_rooms(rooms, 2, Counter({"A": 8}))

    assert rooms[0].group_counts == Counter({"A": 4})
    assert rooms[1].group_counts == Counter({"A": 4})


def test_every_group_meets_quota_or_stays_whole_for_random_rosters():
    strategies = list(DistributionStrategy)
    for seed in range(300):
        shape_rng = random.Random(seed)
        group_sizes = {f"G{index}": shape_rng.randint(1, 20) for index in range(shape_rng.randint(1, 6))}
        quota = shape_rng.randint(2, 5)
        capacity = shape_rng.randint(6, 30)
        strategy = shape_rng.choice(strategies)
        members = _roster(group_sizes)
        plans = build_room_plans(plan_room_sizes(len(members), capacity, strategy))

        rooms = allocate(members, plans, quota, random.Random(seed))

        assert Counter(member for room in rooms for member in room) == Counter(members)
        _assert_quota_or_whole_group(rooms, quota, Counter(group_sizes))
