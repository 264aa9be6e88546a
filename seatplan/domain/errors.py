"""Validation failures raised before any seating work is returned."""

from __future__ import annotations


class SeatingValidationError(Exception):
    """Base class for rejected seating inputs."""


class InvalidCapacityError(SeatingValidationError):
    """Raised when the per-room capacity is outside the accepted range."""


class EmptyRosterError(SeatingValidationError):
    """Raised when there are no members to allocate."""


class MissingPrefixError(SeatingValidationError):
    """Raised when no identity prefix can be resolved for a partition."""


class InvalidMemberError(SeatingValidationError):
    """Raised when a roster record cannot be seated (e.g. blank name)."""
