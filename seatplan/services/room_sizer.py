"""Room count and target size planning."""

from __future__ import annotations

from seatplan.domain.errors import InvalidCapacityError
from seatplan.domain.models import DistributionStrategy, RoomPlan


def plan_room_sizes(
    total_count: int,
    capacity: int,
    strategy: DistributionStrategy,
) -> list[int]:
    """Split ``total_count`` members into room target sizes.

    ``PACK_LAST`` folds the remainder into the last full room,
    ``SEPARATE_REMAINDER`` opens an extra room for it and ``AVERAGE`` spreads
    everyone over ``total // capacity + 1`` rooms, front rooms taking the
    extra unit first. An exact multiple of ``capacity`` yields full rooms
    regardless of strategy.
    """
    if capacity < 1:
        raise InvalidCapacityError(f"capacity must be >= 1, got {capacity}")
    if total_count <= 0:
        return []

    full_rooms, remainder = divmod(total_count, capacity)
    if remainder == 0:
        return [capacity] * full_rooms

    strategy = DistributionStrategy(strategy)
    if strategy is DistributionStrategy.PACK_LAST:
        if full_rooms == 0:
            return [remainder]
        sizes = [capacity] * full_rooms
        sizes[-1] += remainder
        return sizes
    if strategy is DistributionStrategy.SEPARATE_REMAINDER:
        return [capacity] * full_rooms + [remainder]

    room_count = full_rooms + 1
    base_size, extra = divmod(total_count, room_count)
    return [base_size + (1 if index < extra else 0) for index in range(room_count)]


def build_room_plans(sizes: list[int]) -> list[RoomPlan]:
    return [
        RoomPlan(room_number=index + 1, target_size=size)
        for index, size in enumerate(sizes)
    ]
