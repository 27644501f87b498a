"""
Tests for delay log aggregation.

Covers:
- Attribution totals count positive slips only
- Internal / external split and percentages
- Weekly summary text
- History grouping by logged day
"""

from datetime import UTC, date, datetime

from projops_engines.delay_stats import (
    DelayLogRecord,
    aggregate_delay_stats,
    group_by_logged_date,
    logs_since,
    weekly_delay_summary,
)
from projops_kernel.domain.values import DelayAttribution, DelayEntityType


def _log(name, days, attribution, logged_at, entity_type=DelayEntityType.MILESTONE):
    previous = date(2025, 8, 1)
    return DelayLogRecord(
        entity_type=entity_type,
        entity_id=name,
        entity_name=name,
        previous_date=previous,
        new_date=date.fromordinal(previous.toordinal() + days),
        delay_days=days,
        reason="Supplier confirmed a revised dispatch date",
        attribution=attribution,
        logged_at=logged_at,
    )


MON = datetime(2025, 6, 9, 10, 0, tzinfo=UTC)
WED = datetime(2025, 6, 11, 16, 30, tzinfo=UTC)
NEXT_MON = datetime(2025, 6, 16, 9, 0, tzinfo=UTC)


class TestAggregateDelayStats:
    def test_empty(self):
        stats = aggregate_delay_stats([])

        assert stats.total_delay_days == 0
        assert stats.delay_count == 0
        assert stats.logged_count == 0
        assert stats.internal_percentage == 0
        assert stats.external_percentage == 0
        assert set(stats.by_attribution) == set(DelayAttribution)

    def test_split_by_attribution(self):
        stats = aggregate_delay_stats(
            [
                _log("Panel Build", 10, DelayAttribution.EXTERNAL_VENDOR, MON),
                _log("Design Review", 5, DelayAttribution.INTERNAL_TEAM, WED),
            ]
        )

        assert stats.total_delay_days == 15
        assert stats.delay_count == 2
        assert stats.internal_days == 5
        assert stats.external_days == 10
        assert stats.internal_percentage == 33
        assert stats.external_percentage == 67
        vendor = stats.by_attribution[DelayAttribution.EXTERNAL_VENDOR]
        assert (vendor.days, vendor.count) == (10, 1)
        client = stats.by_attribution[DelayAttribution.EXTERNAL_CLIENT]
        assert (client.days, client.count) == (0, 0)

    def test_pull_forwards_and_zero_skipped(self):
        stats = aggregate_delay_stats(
            [
                _log("Panel Build", 10, DelayAttribution.EXTERNAL_VENDOR, MON),
                _log("Panel Build", -4, DelayAttribution.EXTERNAL_VENDOR, WED),
                _log("Design Review", 0, DelayAttribution.INTERNAL_PROCESS, WED),
            ]
        )

        assert stats.total_delay_days == 10
        assert stats.delay_count == 1
        assert stats.logged_count == 3
        assert stats.external_percentage == 100
        assert stats.internal_percentage == 0

    def test_accepts_raw_attribution_strings(self):
        stats = aggregate_delay_stats([_log("Panel Build", 3, "internal-process", MON)])
        assert stats.by_attribution[DelayAttribution.INTERNAL_PROCESS].days == 3

    def test_percentages_round_half_up(self):
        stats = aggregate_delay_stats(
            [
                _log("A milestone", 1, DelayAttribution.INTERNAL_TEAM, MON),
                _log("B milestone", 7, DelayAttribution.EXTERNAL_OTHER, MON),
            ]
        )
        # 12.5% and 87.5%
        assert stats.internal_percentage == 13
        assert stats.external_percentage == 88


class TestWeeklySummary:
    def test_no_entries(self):
        assert weekly_delay_summary([], date(2025, 6, 9)) == "No delays logged this week"

    def test_net_slip(self):
        logs = [
            _log("Panel Build", 10, DelayAttribution.EXTERNAL_VENDOR, MON),
            _log("Design Review", 5, DelayAttribution.INTERNAL_TEAM, WED),
            _log("Panel Build", -3, DelayAttribution.EXTERNAL_VENDOR, WED),
        ]
        assert weekly_delay_summary(logs, date(2025, 6, 9)) == "+12 days across 2 milestones"

    def test_singular_noun(self):
        logs = [_log("Panel Build", 4, DelayAttribution.EXTERNAL_VENDOR, MON)]
        assert weekly_delay_summary(logs, date(2025, 6, 9)) == "+4 days across 1 milestone"

    def test_net_pull_forward(self):
        logs = [_log("Panel Build", -6, DelayAttribution.INTERNAL_TEAM, WED)]
        assert (
            weekly_delay_summary(logs, date(2025, 6, 9))
            == "-6 days (ahead of schedule) across 1 milestone"
        )

    def test_net_zero(self):
        logs = [
            _log("Panel Build", 3, DelayAttribution.INTERNAL_TEAM, MON),
            _log("Panel Build", -3, DelayAttribution.INTERNAL_TEAM, WED),
        ]
        assert weekly_delay_summary(logs, date(2025, 6, 9)) == "No net delay this week"

    def test_entries_outside_week_ignored(self):
        logs = [_log("Panel Build", 9, DelayAttribution.INTERNAL_TEAM, NEXT_MON)]
        assert weekly_delay_summary(logs, date(2025, 6, 9)) == "No delays logged this week"

    def test_logs_since(self):
        logs = [
            _log("Panel Build", 1, DelayAttribution.INTERNAL_TEAM, MON),
            _log("Panel Build", 2, DelayAttribution.INTERNAL_TEAM, NEXT_MON),
        ]
        assert [log.delay_days for log in logs_since(logs, date(2025, 6, 16))] == [2]


class TestHistoryGrouping:
    def test_newest_day_first(self):
        early = datetime(2025, 6, 11, 9, 0, tzinfo=UTC)
        groups = group_by_logged_date(
            [
                _log("Design Review", 5, DelayAttribution.INTERNAL_TEAM, MON),
                _log("Panel Build", 10, DelayAttribution.EXTERNAL_VENDOR, early),
                _log("Site Commissioning", 2, DelayAttribution.EXTERNAL_CLIENT, WED),
            ]
        )

        assert [g.day for g in groups] == [date(2025, 6, 11), date(2025, 6, 9)]
        assert [log.entity_name for log in groups[0].logs] == [
            "Site Commissioning",
            "Panel Build",
        ]
        assert groups[1].formatted_date == "June 9, 2025"

    def test_empty(self):
        assert group_by_logged_date([]) == []
