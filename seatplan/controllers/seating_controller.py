"""HTTP controller layer for seating generation.

Payloads use camelCase on the wire (``studentsPerRoom``, ``examId``);
snake_case field names are accepted as well. Grades posted as
七年级/八年级/九年级 pick up the configured prefixes and class quotas
without any overrides.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from seatplan.controllers.dependencies import get_seating_service
from seatplan.domain.errors import SeatingValidationError
from seatplan.domain.models import DistributionStrategy, Member, Placement, SeatingArrangement
from seatplan.services.reporting import CollectingReporter
from seatplan.services.seating_service import SeatingService
from seatplan.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["seating"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StudentRecord(CamelModel):
    """One roster row as produced by the ingestion collaborator."""

    name: str
    class_name: str = ""
    grade: str = ""


class GenerateSeatingRequest(CamelModel):
    students: list[StudentRecord]
    grade_prefixes: dict[str, str] | None = None
    students_per_room: int | None = None
    distribution_strategy: DistributionStrategy | None = None
    min_per_class: dict[str, int] | None = None
    grade_order: list[str] | None = None
    seed: int | None = Field(default=None, ge=0)


class SeatResponse(CamelModel):
    seat_number: int = Field(gt=0)
    name: str
    exam_id: str
    room_number: int = Field(gt=0)
    row: int = Field(gt=0)
    col: int = Field(gt=0)
    class_name: str
    grade: str


class SeatingArrangementResponse(CamelModel):
    room_number: int = Field(gt=0)
    grade: str
    students: list[SeatResponse]


class GenerateSeatingResponse(CamelModel):
    success: bool
    seating_arrangements: list[SeatingArrangementResponse]
    total_students: int = Field(ge=0)
    total_rooms: int = Field(ge=0)
    warnings: list[str] = Field(default_factory=list)


class HealthResponse(CamelModel):
    status: str
    version: str


def _to_member(record: StudentRecord) -> Member:
    return Member(
        name=record.name.strip(),
        group=record.class_name.strip(),
        partition_key=record.grade.strip(),
    )


def _to_seat(placement: Placement) -> SeatResponse:
    return SeatResponse(
        seat_number=placement.seat_number,
        name=placement.member.name,
        exam_id=placement.identity,
        room_number=placement.room_number,
        row=placement.row,
        col=placement.col,
        class_name=placement.member.group,
        grade=placement.member.partition_key,
    )


def _to_arrangement(arrangement: SeatingArrangement) -> SeatingArrangementResponse:
    return SeatingArrangementResponse(
        room_number=arrangement.room_number,
        grade=arrangement.partition_key,
        students=[_to_seat(placement) for placement in arrangement.placements],
    )


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    return HealthResponse(status="ok", version=request.app.version)


@router.post(
    "/generate_seating",
    response_model=GenerateSeatingResponse,
    status_code=status.HTTP_200_OK,
)
async def generate_seating(
    payload: GenerateSeatingRequest,
    service: SeatingService = Depends(get_seating_service),
) -> GenerateSeatingResponse:
    """Allocate the posted roster to rooms and seats."""
    collector = CollectingReporter()
    try:
        result = service.generate(
            [_to_member(record) for record in payload.students],
            capacity=payload.students_per_room,
            strategy=payload.distribution_strategy,
            prefix_by_partition=payload.grade_prefixes,
            min_per_group_by_partition=payload.min_per_class,
            partition_order=payload.grade_order,
            seed=payload.seed,
            reporter=collector,
        )
        return GenerateSeatingResponse(
            success=True,
            seating_arrangements=[_to_arrangement(item) for item in result.arrangements],
            total_students=result.total_members,
            total_rooms=result.total_rooms,
            warnings=collector.warnings(),
        )
    except SeatingValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.exception("Unexpected seating generation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate seating",
        ) from exc
