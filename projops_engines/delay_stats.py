"""
Delay Statistics Engine - aggregate a project's delay log.

Pure functions with no I/O.  Input is the full list of a project's delay
log records; nothing is read from storage here.

Aggregation counts slips only: entries with a positive day delta add to
the totals, pull-forwards (negative deltas) and zero deltas are skipped.
``logged_count`` still counts every entry.  The weekly summary text, by
contrast, nets all entries logged in the week.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from projops_engines.schedule import round_half_up
from projops_engines.tracer import traced_engine
from projops_kernel.domain.values import DelayAttribution, DelayEntityType
from projops_kernel.logging_config import get_logger

logger = get_logger("engines.delay_stats")


@dataclass(frozen=True)
class DelayLogRecord:
    """Read-only view of one delay log entry."""

    entity_type: DelayEntityType
    entity_id: Any
    entity_name: str
    previous_date: date
    new_date: date
    delay_days: int
    reason: str
    attribution: DelayAttribution
    logged_at: datetime
    logged_by_id: str = ""
    logged_by_name: str = ""
    cumulative_project_delay: int | None = None
    id: Any = None


@dataclass(frozen=True)
class AttributionTotal:
    days: int = 0
    count: int = 0


@dataclass(frozen=True)
class DelayStats:
    """Slip totals for a project, split by attribution."""

    total_delay_days: int
    delay_count: int
    logged_count: int
    by_attribution: dict[DelayAttribution, AttributionTotal] = field(default_factory=dict)
    internal_days: int = 0
    external_days: int = 0
    internal_percentage: int = 0
    external_percentage: int = 0


@traced_engine("delay_stats", "1.0", fingerprint_fields=("logs",))
def aggregate_delay_stats(logs: Sequence[DelayLogRecord]) -> DelayStats:
    """
    Aggregate positive slips by attribution.

    All five attribution keys are present in ``by_attribution`` even when
    zero.  Percentages are of total slip days, rounded half-up, and 0 when
    there is no slip.
    """
    t0 = time.monotonic()
    days = {a: 0 for a in DelayAttribution}
    counts = {a: 0 for a in DelayAttribution}

    for log in logs:
        if log.delay_days > 0:
            attribution = DelayAttribution(log.attribution)
            days[attribution] += log.delay_days
            counts[attribution] += 1

    total = sum(days.values())
    internal = sum(d for a, d in days.items() if a.is_internal)
    external = sum(d for a, d in days.items() if a.is_external)

    def pct(part: int) -> int:
        if total <= 0:
            return 0
        return round_half_up(Decimal(part * 100) / Decimal(total))

    stats = DelayStats(
        total_delay_days=total,
        delay_count=sum(counts.values()),
        logged_count=len(logs),
        by_attribution={a: AttributionTotal(days=days[a], count=counts[a]) for a in DelayAttribution},
        internal_days=internal,
        external_days=external,
        internal_percentage=pct(internal),
        external_percentage=pct(external),
    )

    logger.info(
        "delay_stats_computed",
        extra={
            "logged_count": stats.logged_count,
            "delay_count": stats.delay_count,
            "total_delay_days": total,
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        },
    )
    return stats


def logs_since(logs: Sequence[DelayLogRecord], since: date) -> list[DelayLogRecord]:
    """Entries logged on or after ``since``."""
    return [log for log in logs if log.logged_at.date() >= since]


def weekly_delay_summary(logs: Sequence[DelayLogRecord], week_start: date) -> str:
    """
    Net schedule movement logged in the week starting ``week_start``.

    Entries after the week are ignored as well, so a past week can be
    summarized.
    """
    week_end = week_start + timedelta(days=7)
    week = [log for log in logs_since(logs, week_start) if log.logged_at.date() < week_end]

    if not week:
        return "No delays logged this week"

    net = sum(log.delay_days for log in week)
    entity_count = len({log.entity_name for log in week})
    noun = "milestone" if entity_count == 1 else "milestones"

    if net > 0:
        return f"+{net} days across {entity_count} {noun}"
    if net < 0:
        return f"{net} days (ahead of schedule) across {entity_count} {noun}"
    return "No net delay this week"


@dataclass(frozen=True)
class DelayHistoryGroup:
    day: date
    logs: tuple[DelayLogRecord, ...]

    @property
    def formatted_date(self) -> str:
        return f"{self.day:%B} {self.day.day}, {self.day.year}"


def group_by_logged_date(logs: Sequence[DelayLogRecord]) -> list[DelayHistoryGroup]:
    """Group entries by the calendar day they were logged, newest day first."""
    grouped: dict[date, list[DelayLogRecord]] = {}
    for log in sorted(logs, key=lambda entry: entry.logged_at, reverse=True):
        grouped.setdefault(log.logged_at.date(), []).append(log)

    return [
        DelayHistoryGroup(day=day, logs=tuple(entries))
        for day, entries in sorted(grouped.items(), key=lambda kv: kv[0], reverse=True)
    ]
