"""
Module: projops_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    projops_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import projops_kernel.domain and projops_kernel.logging_config
    (and sibling engine modules).  MUST NOT import projops_modules.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates are explicit parameters supplied by services from the clock.
    - Decimal-only arithmetic for money; floats are converted through str().
    - Schedule and counterparty validation failures are returned as values;
      only malformed arguments (negative rate, unknown format) raise ValueError.

Usage:
    from projops_engines import calculate_po_totals, determine_tax_type
    from projops_engines import check_baseline_lock, compute_cascade_risk
"""

from projops_kernel.logging_config import get_logger

logger = get_logger("engines")

from projops_engines.amount_words import number_to_words, rupees_to_words
from projops_engines.delay_stats import (
    AttributionTotal,
    DelayHistoryGroup,
    DelayLogRecord,
    DelayStats,
    aggregate_delay_stats,
    group_by_logged_date,
    logs_since,
    weekly_delay_summary,
)
from projops_engines.gst import (
    INDIAN_STATE_CODES,
    POWarning,
    POWarningKind,
    WarningSeverity,
    determine_tax_type,
    extract_jurisdiction_code,
    state_name,
    validate_counterparty_for_po,
)
from projops_engines.po_numbering import (
    PONumberFormat,
    financial_year_label,
    financial_year_start,
    generate_po_number,
)
from projops_engines.po_totals import POLineItem, POTotals, calculate_po_totals
from projops_engines.schedule import (
    DEFAULT_MILESTONE_TEMPLATE,
    BaselineCheck,
    DelayCheck,
    DelayRequest,
    MilestoneRisk,
    MilestoneSnapshot,
    MilestoneStats,
    MilestoneTemplateItem,
    ScheduleSummary,
    ScheduleViolation,
    ViolationKind,
    WeeklyStatus,
    check_baseline_lock,
    check_delay_request,
    compute_cascade_risk,
    compute_slip,
    cumulative_delay,
    delay_days,
    milestone_stats,
    milestone_summary,
    plan_baseline_lock,
    requires_delay_log,
    summarize_schedule,
    template_dates,
    validate_delay_reason,
    validate_milestone_name,
    variance_label,
    week_start,
    weekly_status,
)

__all__ = [
    # amount_words
    "number_to_words",
    "rupees_to_words",
    # delay_stats
    "AttributionTotal",
    "DelayHistoryGroup",
    "DelayLogRecord",
    "DelayStats",
    "aggregate_delay_stats",
    "group_by_logged_date",
    "logs_since",
    "weekly_delay_summary",
    # gst
    "INDIAN_STATE_CODES",
    "POWarning",
    "POWarningKind",
    "WarningSeverity",
    "determine_tax_type",
    "extract_jurisdiction_code",
    "state_name",
    "validate_counterparty_for_po",
    # po_numbering
    "PONumberFormat",
    "financial_year_label",
    "financial_year_start",
    "generate_po_number",
    # po_totals
    "POLineItem",
    "POTotals",
    "calculate_po_totals",
    # schedule
    "DEFAULT_MILESTONE_TEMPLATE",
    "BaselineCheck",
    "DelayCheck",
    "DelayRequest",
    "MilestoneRisk",
    "MilestoneSnapshot",
    "MilestoneStats",
    "MilestoneTemplateItem",
    "ScheduleSummary",
    "ScheduleViolation",
    "ViolationKind",
    "WeeklyStatus",
    "check_baseline_lock",
    "check_delay_request",
    "compute_cascade_risk",
    "compute_slip",
    "cumulative_delay",
    "delay_days",
    "milestone_stats",
    "milestone_summary",
    "plan_baseline_lock",
    "requires_delay_log",
    "summarize_schedule",
    "template_dates",
    "validate_delay_reason",
    "validate_milestone_name",
    "variance_label",
    "week_start",
    "weekly_status",
]
