"""
Schedule Engine - baseline lock, delay gate and slip analysis for milestones.

Pure functions with no I/O.  Dates are calendar dates passed in by the
caller; nothing here reads the clock.

A project's schedule has two phases:

    draft      milestone dates move freely, nothing is logged
    baselined  every milestone's original date is frozen at its
               lock-time value; each later date move needs a reason
               (>= 20 characters) and an attribution, and is logged

Validation outcomes are returned as ScheduleViolation values so a form
can show all of them at once.  Nothing in this module raises for bad user
input.

Usage:
    from projops_engines.schedule import check_baseline_lock, compute_cascade_risk

    check = check_baseline_lock(snapshots)
    if not check.valid:
        show(check.messages)

    for risk in compute_cascade_risk(snapshots):
        print(risk.milestone.name, risk.slip, risk.cascade_risk)
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

from projops_engines.tracer import traced_engine
from projops_kernel.domain.values import DelayAttribution, MilestoneStatus
from projops_kernel.logging_config import get_logger

logger = get_logger("engines.schedule")

MIN_REASON_LENGTH = 20
MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 100
DELAYED_THRESHOLD_DAYS = 7


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# =============================================================================
# Violations
# =============================================================================


class ViolationKind(str, Enum):
    """Why a schedule operation was refused."""

    NO_MILESTONES = "no_milestones"
    MISSING_END_DATE = "missing_end_date"
    SHORT_NAME = "short_name"
    LONG_NAME = "long_name"
    REASON_TOO_SHORT = "reason_too_short"
    MISSING_ATTRIBUTION = "missing_attribution"
    DATE_UNCHANGED = "date_unchanged"
    ALREADY_BASELINED = "already_baselined"


@dataclass(frozen=True)
class ScheduleViolation:
    """One human-readable problem, tagged with its kind."""

    kind: ViolationKind
    message: str
    milestone_names: tuple[str, ...] = ()


def delay_days(previous: date, new: date) -> int:
    """Signed whole days from ``previous`` to ``new``; positive is a slip."""
    return (new - previous).days


def validate_delay_reason(
    reason: str | None,
    min_length: int = MIN_REASON_LENGTH,
) -> ScheduleViolation | None:
    trimmed = (reason or "").strip()
    if len(trimmed) < min_length:
        return ScheduleViolation(
            kind=ViolationKind.REASON_TOO_SHORT,
            message=(
                f"Please provide a detailed reason (min {min_length} characters). "
                f"Current: {len(trimmed)}"
            ),
        )
    return None


def validate_milestone_name(
    name: str | None,
    min_length: int = MIN_NAME_LENGTH,
    max_length: int = MAX_NAME_LENGTH,
) -> ScheduleViolation | None:
    trimmed = (name or "").strip()
    if len(trimmed) < min_length:
        return ScheduleViolation(
            kind=ViolationKind.SHORT_NAME,
            message=f"Milestone name must be at least {min_length} characters",
        )
    if len(trimmed) > max_length:
        return ScheduleViolation(
            kind=ViolationKind.LONG_NAME,
            message=f"Milestone name must be less than {max_length} characters",
        )
    return None


# =============================================================================
# Baseline lock
# =============================================================================


@dataclass(frozen=True)
class MilestoneSnapshot:
    """
    Read-only view of a milestone for the schedule engine.

    Services build these from ORM rows; tests build them directly.
    """

    id: Any
    name: str
    current_planned_end_date: date | None
    original_planned_end_date: date | None = None
    status: MilestoneStatus = MilestoneStatus.NOT_STARTED
    actual_end_date: date | None = None
    order: int = 0


@dataclass(frozen=True)
class BaselineCheck:
    """Outcome of the baseline-lock precondition check."""

    violations: tuple[ScheduleViolation, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]


@traced_engine("baseline_check", "1.0", fingerprint_fields=("milestones", "is_baselined"))
def check_baseline_lock(
    milestones: Sequence[MilestoneSnapshot],
    is_baselined: bool = False,
    min_name_length: int = MIN_NAME_LENGTH,
) -> BaselineCheck:
    """
    Check whether a project's milestones can be baselined.

    Every problem is reported, not just the first:
        - the project is already baselined (the lock is one-way);
        - there are no milestones;
        - some milestones have no current planned end date (listed by name);
        - some milestone names are shorter than ``min_name_length``.
    """
    if is_baselined:
        return BaselineCheck(
            violations=(
                ScheduleViolation(
                    kind=ViolationKind.ALREADY_BASELINED,
                    message="Baseline is already locked for this project",
                ),
            )
        )

    if not milestones:
        return BaselineCheck(
            violations=(
                ScheduleViolation(
                    kind=ViolationKind.NO_MILESTONES,
                    message="At least one milestone is required to lock baseline",
                ),
            )
        )

    violations: list[ScheduleViolation] = []

    missing_dates = tuple(m.name for m in milestones if m.current_planned_end_date is None)
    if missing_dates:
        violations.append(
            ScheduleViolation(
                kind=ViolationKind.MISSING_END_DATE,
                message=f"Milestones missing end dates: {', '.join(missing_dates)}",
                milestone_names=missing_dates,
            )
        )

    short_names = tuple(
        m.name or "" for m in milestones
        if len((m.name or "").strip()) < min_name_length
    )
    if short_names:
        violations.append(
            ScheduleViolation(
                kind=ViolationKind.SHORT_NAME,
                message=(
                    f"All milestones must have names "
                    f"(at least {min_name_length} characters)"
                ),
                milestone_names=short_names,
            )
        )

    if violations:
        logger.info(
            "baseline_lock_refused",
            extra={
                "milestone_count": len(milestones),
                "violations": [v.kind.value for v in violations],
            },
        )

    return BaselineCheck(violations=tuple(violations))


def plan_baseline_lock(milestones: Iterable[MilestoneSnapshot]) -> dict[Any, date]:
    """Original date each milestone receives at lock: its current date."""
    return {
        m.id: m.current_planned_end_date
        for m in milestones
        if m.current_planned_end_date is not None
    }


# =============================================================================
# Delay gate
# =============================================================================


@dataclass(frozen=True)
class DelayRequest:
    """A proposed date move on a baselined milestone."""

    previous_date: date
    new_date: date
    reason: str | None
    attribution: DelayAttribution | str | None


@dataclass(frozen=True)
class DelayCheck:
    """
    Outcome of the delay gate.

    ``delay_days`` is computed even when the request is refused so a form
    can show it.  Negative values (pull-forwards) are valid.
    """

    delay_days: int
    attribution: DelayAttribution | None
    reason: str
    violations: tuple[ScheduleViolation, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]


def check_delay_request(
    request: DelayRequest,
    min_reason_length: int = MIN_REASON_LENGTH,
) -> DelayCheck:
    """Validate a proposed post-baseline date change."""
    violations: list[ScheduleViolation] = []

    if request.new_date == request.previous_date:
        violations.append(
            ScheduleViolation(
                kind=ViolationKind.DATE_UNCHANGED,
                message="New date is the same as the current date",
            )
        )

    reason_violation = validate_delay_reason(request.reason, min_reason_length)
    if reason_violation is not None:
        violations.append(reason_violation)

    attribution = DelayAttribution.parse(request.attribution)
    if attribution is None:
        if request.attribution in (None, ""):
            message = "Please select what caused this change"
        else:
            message = f"Unknown delay attribution: {request.attribution}"
        violations.append(
            ScheduleViolation(kind=ViolationKind.MISSING_ATTRIBUTION, message=message)
        )

    return DelayCheck(
        delay_days=delay_days(request.previous_date, request.new_date),
        attribution=attribution,
        reason=(request.reason or "").strip(),
        violations=tuple(violations),
    )


def requires_delay_log(
    is_baselined: bool,
    old_date: date | None,
    new_date: date | None,
) -> bool:
    """True when a date edit must go through the delay gate."""
    if not is_baselined or old_date is None:
        return False
    return old_date != new_date


# =============================================================================
# Slip and cascade risk
# =============================================================================


def compute_slip(milestone: MilestoneSnapshot) -> int:
    """``current - original`` in days; 0 when either date is missing."""
    if milestone.current_planned_end_date is None or milestone.original_planned_end_date is None:
        return 0
    return delay_days(milestone.original_planned_end_date, milestone.current_planned_end_date)


@dataclass(frozen=True)
class MilestoneRisk:
    """A milestone with its own slip and the slip it inherits from upstream."""

    milestone: MilestoneSnapshot
    slip: int
    cascade_risk: int

    @property
    def is_at_risk(self) -> bool:
        return self.cascade_risk > 0


@traced_engine("cascade_risk", "1.0", fingerprint_fields=("milestones",))
def compute_cascade_risk(milestones: Sequence[MilestoneSnapshot]) -> list[MilestoneRisk]:
    """
    One-pass cascade-risk scan in current-date order.

    Milestones without a current date sort first.  A milestone that has not
    slipped itself inherits the largest slip seen so far; one that has
    slipped (either way) carries no cascade risk.  Pull-forwards never
    lower the running maximum below zero.
    """
    ordered = sorted(
        milestones,
        key=lambda m: m.current_planned_end_date or date.min,
    )

    risks: list[MilestoneRisk] = []
    max_slip_so_far = 0
    for milestone in ordered:
        slip = compute_slip(milestone)
        cascade = max_slip_so_far if slip == 0 and max_slip_so_far > 0 else 0
        max_slip_so_far = max(max_slip_so_far, slip)
        risks.append(MilestoneRisk(milestone=milestone, slip=slip, cascade_risk=cascade))

    return risks


@dataclass(frozen=True)
class ScheduleSummary:
    """Headline numbers for a baselined schedule."""

    total_slip: int
    baseline_end: date | None
    projected_end: date | None


def summarize_schedule(
    risks: Sequence[MilestoneRisk],
    project_original_deadline: date | None = None,
) -> ScheduleSummary:
    """
    Total slip is the worst single slip (never below zero).  The baseline
    end is the project's original deadline, falling back to the original
    date of the last milestone in date order.
    """
    total_slip = max((r.slip for r in risks), default=0)
    total_slip = max(total_slip, 0)

    baseline_end = project_original_deadline
    if baseline_end is None and risks:
        baseline_end = risks[-1].milestone.original_planned_end_date

    projected_end = baseline_end
    if baseline_end is not None and total_slip > 0:
        projected_end = baseline_end + timedelta(days=total_slip)

    return ScheduleSummary(
        total_slip=total_slip,
        baseline_end=baseline_end,
        projected_end=projected_end,
    )


def variance_label(original: date | None, current: date) -> str:
    """Short display of a milestone's variance against its baseline."""
    if original is None:
        return "No baseline"
    delta = delay_days(original, current)
    if delta == 0:
        return "On Track"
    if delta > 0:
        return f"+{delta} days"
    return f"{delta} days"


def cumulative_delay(original_deadline: date | None, current_deadline: date | None) -> int:
    """Project-level delay in days; 0 without an original deadline."""
    if original_deadline is None or current_deadline is None:
        return 0
    return delay_days(original_deadline, current_deadline)


# =============================================================================
# Weekly status and milestone statistics
# =============================================================================


class WeeklyStatus(str, Enum):
    ON_TRACK = "on-track"
    AT_RISK = "at-risk"
    DELAYED = "delayed"


def weekly_status(
    cumulative_delay_days: int,
    has_blocked_milestones: bool,
    delayed_threshold: int = DELAYED_THRESHOLD_DAYS,
) -> WeeklyStatus:
    if cumulative_delay_days > delayed_threshold:
        return WeeklyStatus.DELAYED
    if cumulative_delay_days > 0 or has_blocked_milestones:
        return WeeklyStatus.AT_RISK
    return WeeklyStatus.ON_TRACK


@dataclass(frozen=True)
class MilestoneStats:
    total: int
    not_started: int
    in_progress: int
    completed: int
    blocked: int
    completion_percentage: int


def milestone_stats(milestones: Sequence[MilestoneSnapshot]) -> MilestoneStats:
    counts = {status: 0 for status in MilestoneStatus}
    for m in milestones:
        counts[MilestoneStatus(m.status)] += 1

    total = len(milestones)
    completed = counts[MilestoneStatus.COMPLETED]
    percentage = 0
    if total:
        percentage = round_half_up(Decimal(completed * 100) / Decimal(total))

    return MilestoneStats(
        total=total,
        not_started=counts[MilestoneStatus.NOT_STARTED],
        in_progress=counts[MilestoneStatus.IN_PROGRESS],
        completed=completed,
        blocked=counts[MilestoneStatus.BLOCKED],
        completion_percentage=percentage,
    )


def milestone_summary(milestones: Sequence[MilestoneSnapshot]) -> str:
    """One-line status roll call, e.g. "✅ Planning, 🔄 Build"."""
    if not milestones:
        return "No milestones defined"
    ordered = sorted(milestones, key=lambda m: m.order)
    return ", ".join(f"{MilestoneStatus(m.status).icon} {m.name}" for m in ordered)


def week_start(on: date) -> date:
    """Monday of the week containing ``on``."""
    return on - timedelta(days=on.weekday())


# =============================================================================
# Templates
# =============================================================================


@dataclass(frozen=True)
class MilestoneTemplateItem:
    name: str
    description: str
    percentage_of_timeline: int


DEFAULT_MILESTONE_TEMPLATE: tuple[MilestoneTemplateItem, ...] = (
    MilestoneTemplateItem(
        name="Planning & Design",
        description="Requirements gathering, engineering design, BOM finalization",
        percentage_of_timeline=25,
    ),
    MilestoneTemplateItem(
        name="Procurement",
        description="Vendor selection, PO creation, materials ordering",
        percentage_of_timeline=50,
    ),
    MilestoneTemplateItem(
        name="Build & Test",
        description="Assembly, integration, quality testing",
        percentage_of_timeline=80,
    ),
    MilestoneTemplateItem(
        name="Delivery",
        description="Final inspection, shipping, installation, handover",
        percentage_of_timeline=100,
    ),
)


def template_dates(
    start: date,
    end: date,
    template: Sequence[MilestoneTemplateItem] = DEFAULT_MILESTONE_TEMPLATE,
) -> list[tuple[MilestoneTemplateItem, date]]:
    """
    Spread template milestones over ``start``..``end``.

    Each item lands ``round(total_days * pct / 100)`` days after start.
    """
    t0 = time.monotonic()
    total_days = (end - start).days
    planned = [
        (
            item,
            start + timedelta(
                days=round_half_up(Decimal(total_days * item.percentage_of_timeline) / 100)
            ),
        )
        for item in template
    ]
    logger.debug(
        "template_dates_computed",
        extra={
            "total_days": total_days,
            "item_count": len(planned),
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        },
    )
    return planned
