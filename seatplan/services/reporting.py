"""Optional observers for per-room allocation outcomes."""

from __future__ import annotations

from seatplan.domain.models import RoomSummary
from seatplan.utils.logger import get_logger


logger = get_logger(__name__)


class AllocationReporter:
    """Receives one summary per room after quota allocation. No-op by default."""

    def room_summary(self, summary: RoomSummary) -> None:
        del summary


class LoggingReporter(AllocationReporter):
    def room_summary(self, summary: RoomSummary) -> None:
        if summary.under_quota_groups:
            logger.warning(
                "Room below group quota | partition=%s | room=%s | groups=%s",
                summary.partition_key,
                summary.room_number,
                ",".join(summary.under_quota_groups),
            )
        if summary.over_target or summary.under_target:
            logger.warning(
                "Room size off target | partition=%s | room=%s | target=%s | actual=%s",
                summary.partition_key,
                summary.room_number,
                summary.target_size,
                summary.actual_size,
            )
        logger.debug(
            "Room allocated | partition=%s | room=%s | size=%s | groups=%s",
            summary.partition_key,
            summary.room_number,
            summary.actual_size,
            summary.group_counts,
        )


class CollectingReporter(AllocationReporter):
    """Keeps every summary in memory, in emission order."""

    def __init__(self) -> None:
        self.summaries: list[RoomSummary] = []

    def room_summary(self, summary: RoomSummary) -> None:
        self.summaries.append(summary)

    def warnings(self) -> list[str]:
        messages: list[str] = []
        for summary in self.summaries:
            label = f"{summary.partition_key} room {summary.room_number:02d}"
            if summary.under_quota_groups:
                messages.append(
                    f"{label}: below group quota for {', '.join(summary.under_quota_groups)}"
                )
            if summary.over_target:
                messages.append(
                    f"{label}: {summary.actual_size} members exceeds target {summary.target_size}"
                )
            elif summary.under_target:
                messages.append(
                    f"{label}: {summary.actual_size} members below target {summary.target_size}"
                )
        return messages


class CompositeReporter(AllocationReporter):
    def __init__(self, *reporters: AllocationReporter) -> None:
        self._reporters = reporters

    def room_summary(self, summary: RoomSummary) -> None:
        for reporter in self._reporters:
            reporter.room_summary(summary)
