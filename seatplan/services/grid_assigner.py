"""Seat placement inside a single room."""

from __future__ import annotations

import math
import random
from collections import Counter
from typing import Mapping, Optional, Sequence

from seatplan.domain.identity import compose_identity, resolve_prefix
from seatplan.domain.models import Member, Placement


DEFAULT_GRID_WIDTH = 6

_NEIGHBOUR_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))

Grid = list[list[Optional[Member]]]


def neighbour_groups(grid: Grid, row: int, col: int) -> set[str]:
    """Group labels seated directly above, below, left and right of a cell.

    Blank labels never count as a conflict.
    """
    groups: set[str] = set()
    for row_offset, col_offset in _NEIGHBOUR_OFFSETS:
        neighbour_row = row + row_offset
        neighbour_col = col + col_offset
        if not 0 <= neighbour_row < len(grid):
            continue
        if not 0 <= neighbour_col < len(grid[neighbour_row]):
            continue
        occupant = grid[neighbour_row][neighbour_col]
        if occupant is not None and occupant.group:
            groups.add(occupant.group)
    return groups


def select_member_index(
    pool: Sequence[Member],
    blocked_groups: set[str],
    rng: random.Random,
) -> int:
    """Pick the next member for a cell.

    Among members whose group is not blocked, the group with the most members
    still in the pool wins (earliest pool position on ties). If every member
    is blocked the pick is random.
    """
    remaining = Counter(member.group for member in pool)
    best: Optional[int] = None
    for index, member in enumerate(pool):
        if member.group in blocked_groups:
            continue
        if best is None or remaining[member.group] > remaining[pool[best].group]:
            best = index
    if best is None:
        return rng.randrange(len(pool))
    return best


def _empty_grid(grid_rows: int, grid_width: int) -> Grid:
    return [[None] * grid_width for _ in range(grid_rows)]


def greedy_layout(
    members: Sequence[Member],
    grid_rows: int,
    grid_width: int,
    rng: random.Random,
) -> Grid:
    pool = list(members)
    grid = _empty_grid(grid_rows, grid_width)
    for row in range(grid_rows):
        for col in range(grid_width):
            if not pool:
                return grid
            index = select_member_index(pool, neighbour_groups(grid, row, col), rng)
            grid[row][col] = pool.pop(index)
    return grid


def checkerboard_layout(
    members: Sequence[Member],
    grid_rows: int,
    grid_width: int,
) -> Grid:
    """Lay groups out largest first over dark cells, then over light cells.

    Uses the same cells as ``greedy_layout``. Two cells of the same colour are
    never neighbours, so only a group spilling from the dark cells onto the
    light ones can touch itself.
    """
    cells = [(row, col) for row in range(grid_rows) for col in range(grid_width)]
    cells = cells[:len(members)]
    dark = [cell for cell in cells if (cell[0] + cell[1]) % 2 == 0]
    light = [cell for cell in cells if (cell[0] + cell[1]) % 2 == 1]

    by_group: dict[str, list[Member]] = {}
    for member in members:
        by_group.setdefault(member.group, []).append(member)
    ordered = [
        member
        for group in sorted(by_group, key=lambda group: -len(by_group[group]))
        for member in by_group[group]
    ]

    grid = _empty_grid(grid_rows, grid_width)
    for (row, col), member in zip(dark + light, ordered):
        grid[row][col] = member
    return grid


def grid_conflicts(grid: Grid) -> int:
    conflicts = 0
    for row, cells in enumerate(grid):
        for col, member in enumerate(cells):
            if member is None or not member.group:
                continue
            below = grid[row + 1][col] if row + 1 < len(grid) else None
            right = cells[col + 1] if col + 1 < len(cells) else None
            conflicts += sum(
                1 for other in (below, right) if other is not None and other.group == member.group
            )
    return conflicts


def assign_seats(
    members: Sequence[Member],
    room_number: int,
    prefix_by_partition: Mapping[str, str],
    default_prefix: Optional[str],
    rng: random.Random,
    grid_width: int = DEFAULT_GRID_WIDTH,
) -> list[Placement]:
    """Seat ``members`` on a ``grid_width``-column grid, avoiding same-group neighbours.

    Cells are filled row by row with ``greedy_layout``. When that leaves
    same-group neighbours, the ``checkerboard_layout`` of the same members is
    used instead if it has fewer. Seat numbers run down each column
    (``seat = col * grid_rows + row + 1``) and the result is returned in that
    column-major order, matching the printed seating chart.
    """
    if grid_width < 1:
        raise ValueError("grid_width must be >= 1")
    if not members:
        return []

    grid_rows = math.ceil(len(members) / grid_width)
    grid = greedy_layout(members, grid_rows, grid_width, rng)
    conflicts = grid_conflicts(grid)
    if conflicts:
        fallback = checkerboard_layout(members, grid_rows, grid_width)
        if grid_conflicts(fallback) < conflicts:
            grid = fallback

    placements: list[Placement] = []
    for col in range(grid_width):
        for row in range(grid_rows):
            member = grid[row][col]
            if member is None:
                continue
            seat_number = col * grid_rows + row + 1
            prefix = resolve_prefix(member.partition_key, prefix_by_partition, default_prefix)
            placements.append(
                Placement(
                    member=member,
                    room_number=room_number,
                    seat_number=seat_number,
                    row=row + 1,
                    col=col + 1,
                    identity=compose_identity(prefix, room_number, seat_number),
                )
            )
    return placements


def count_adjacent_conflicts(placements: Sequence[Placement]) -> int:
    """Number of horizontally or vertically adjacent pairs sharing a group."""
    groups = {(placement.row, placement.col): placement.member.group for placement in placements}
    conflicts = 0
    for (row, col), group in groups.items():
        if not group:
            continue
        if groups.get((row + 1, col)) == group:
            conflicts += 1
        if groups.get((row, col + 1)) == group:
            conflicts += 1
    return conflicts
