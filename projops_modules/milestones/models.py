"""
Milestone Domain Models.

Result objects returned by MilestoneService, plus the converters from ORM
rows to the engine's read-only snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from projops_engines.delay_stats import DelayLogRecord
from projops_engines.schedule import (
    MilestoneSnapshot,
    ScheduleViolation,
    WeeklyStatus,
)
from projops_kernel.domain.values import (
    DelayAttribution,
    DelayEntityType,
    MilestoneStatus,
)
from projops_kernel.models.delay_log import DelayLogModel
from projops_kernel.models.milestone import Milestone
from projops_kernel.models.project import Project


@dataclass(frozen=True)
class ProjectInfo:
    """A project and its baseline state."""

    id: UUID
    name: str
    original_deadline: date | None
    current_deadline: date | None
    is_baselined: bool
    baselined_at: datetime | None = None
    baselined_by_id: str | None = None
    client_name: str | None = None

    @classmethod
    def from_orm(cls, project: Project) -> ProjectInfo:
        return cls(
            id=project.id,
            name=project.name,
            original_deadline=project.original_deadline,
            current_deadline=project.current_deadline,
            is_baselined=project.is_baselined,
            baselined_at=project.baselined_at,
            baselined_by_id=project.baselined_by_id,
            client_name=project.client_name,
        )


def to_snapshot(milestone: Milestone) -> MilestoneSnapshot:
    return MilestoneSnapshot(
        id=milestone.id,
        name=milestone.name,
        current_planned_end_date=milestone.current_planned_end_date,
        original_planned_end_date=milestone.original_planned_end_date,
        status=MilestoneStatus(milestone.status),
        actual_end_date=milestone.actual_end_date,
        order=milestone.sort_order,
    )


def _aware(value: datetime) -> datetime:
    # SQLite hands DateTime(timezone=True) back naive; stored values are UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def to_delay_record(row: DelayLogModel) -> DelayLogRecord:
    return DelayLogRecord(
        id=row.id,
        entity_type=DelayEntityType(row.entity_type),
        entity_id=row.entity_id,
        entity_name=row.entity_name,
        previous_date=row.previous_date,
        new_date=row.new_date,
        delay_days=row.delay_days,
        reason=row.reason,
        attribution=DelayAttribution(row.attribution),
        logged_at=_aware(row.logged_at),
        logged_by_id=row.logged_by_id,
        logged_by_name=row.logged_by_name,
        cumulative_project_delay=row.cumulative_project_delay,
    )


@dataclass(frozen=True)
class MilestoneResult:
    """Outcome of creating or editing a milestone."""

    milestone: MilestoneSnapshot | None
    violations: tuple[ScheduleViolation, ...] = ()

    @property
    def is_success(self) -> bool:
        return not self.violations


@dataclass(frozen=True)
class BaselineLockResult:
    """Outcome of a baseline lock attempt."""

    project_id: UUID
    locked: bool
    violations: tuple[ScheduleViolation, ...] = ()
    baselined_at: datetime | None = None
    milestone_count: int = 0

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]


@dataclass(frozen=True)
class DateChangeResult:
    """
    Outcome of moving a milestone or project date.

    ``applied`` is False when the delay gate refused the change; in that
    case nothing was written and ``violations`` says why.
    """

    entity_id: UUID
    applied: bool
    previous_date: date | None
    new_date: date
    delay_days: int = 0
    delay_log: DelayLogRecord | None = None
    violations: tuple[ScheduleViolation, ...] = ()

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]


@dataclass(frozen=True)
class WeeklyReport:
    """Auto-generated part of a weekly project update."""

    week_start: date
    status: WeeklyStatus
    cumulative_delay: int
    milestone_summary: str
    delay_summary: str
