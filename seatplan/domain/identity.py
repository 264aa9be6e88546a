"""Seat identity composition.

Identities have the fixed shape ``<prefix><room:02d><seat:02d>`` and are
consumed verbatim by downstream export formatting.
"""

from __future__ import annotations

from typing import Mapping, Optional

from seatplan.domain.errors import MissingPrefixError


def resolve_prefix(
    partition_key: str,
    prefix_by_partition: Mapping[str, str],
    default_prefix: Optional[str],
) -> str:
    """Return the partition's prefix, falling back to ``default_prefix``."""
    prefix = prefix_by_partition.get(partition_key)
    if prefix:
        return prefix
    if default_prefix:
        return default_prefix
    raise MissingPrefixError(
        f"No identity prefix configured for partition {partition_key!r} and no default prefix"
    )


def compose_identity(prefix: str, room_number: int, seat_number: int) -> str:
    return f"{prefix}{room_number:02d}{seat_number:02d}"
