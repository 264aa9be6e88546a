from __future__ import annotations

import pytest

from seatplan.domain.errors import InvalidCapacityError
from seatplan.domain.models import DistributionStrategy, RoomPlan
from seatplan.services.room_sizer import build_room_plans, plan_room_sizes


def test_pack_last_folds_remainder_into_last_room():
    assert plan_room_sizes(90, 36, DistributionStrategy.PACK_LAST) == [36, 54]
    assert plan_room_sizes(100, 36, DistributionStrategy.PACK_LAST) == [36, 64]


def test_separate_remainder_opens_extra_room():
    assert plan_room_sizes(90, 36, DistributionStrategy.SEPARATE_REMAINDER) == [36, 36, 18]
    assert plan_room_sizes(100, 36, DistributionStrategy.SEPARATE_REMAINDER) == [36, 36, 28]


def test_average_spreads_evenly_front_rooms_first():
    assert plan_room_sizes(90, 36, DistributionStrategy.AVERAGE) == [45, 45]
    assert plan_room_sizes(100, 36, DistributionStrategy.AVERAGE) == [34, 33, 33]


def test_cohort_smaller_than_capacity_is_one_room():
    for strategy in DistributionStrategy:
        assert plan_room_sizes(20, 36, strategy) == [20]


def test_exact_multiple_gives_full_rooms_for_every_strategy():
    for strategy in DistributionStrategy:
        assert plan_room_sizes(72, 36, strategy) == [36, 36]


def test_sizes_always_sum_to_total():
    for total in (1, 5, 37, 71, 250):
        for strategy in DistributionStrategy:
            sizes = plan_room_sizes(total, 36, strategy)
            assert sum(sizes) == total
            assert all(size > 0 for size in sizes)


def test_average_sizes_differ_by_at_most_one():
    sizes = plan_room_sizes(250, 36, DistributionStrategy.AVERAGE)
    assert len(sizes) == 250 // 36 + 1
    assert max(sizes) - min(sizes) <= 1


def test_empty_cohort_needs_no_rooms():
    assert plan_room_sizes(0, 36, DistributionStrategy.PACK_LAST) == []


def test_strategy_accepts_wire_value():
    assert plan_room_sizes(90, 36, "separate") == [36, 36, 18]


def test_capacity_below_one_raises():
    with pytest.raises(InvalidCapacityError):
        plan_room_sizes(10, 0, DistributionStrategy.PACK_LAST)


def test_build_room_plans_numbers_rooms_from_one():
    assert build_room_plans([36, 54]) == [
        RoomPlan(room_number=1, target_size=36),
        RoomPlan(room_number=2, target_size=54),
    ]
