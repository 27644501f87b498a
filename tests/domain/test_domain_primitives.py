"""Tests for the clock, actor identity and domain enumerations."""

from datetime import date, datetime, timedelta, timezone

import pytest

from projops_kernel.domain.clock import DeterministicClock, SystemClock
from projops_kernel.domain.identity import Actor
from projops_kernel.domain.values import (
    DelayAttribution,
    MilestoneStatus,
    PurchaseOrderStatus,
    TaxRegime,
)

IST = timezone(timedelta(hours=5, minutes=30))


class TestDeterministicClock:
    def test_default_time(self):
        clock = DeterministicClock()
        assert clock.now() == datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
        assert clock.today() == date(2025, 6, 15)

    def test_stable_until_advanced(self):
        clock = DeterministicClock()
        assert clock.now() == clock.now()

        clock.advance(90)
        assert clock.now() == datetime(2025, 6, 15, 12, 1, 30, tzinfo=timezone.utc)

    def test_tick(self):
        clock = DeterministicClock()
        assert clock.tick() == datetime(2025, 6, 15, 12, 0, 1, tzinfo=timezone.utc)

    def test_set_date_and_advance_days(self):
        clock = DeterministicClock()
        clock.set_date(date(2026, 3, 31))
        clock.advance_days(1)

        assert clock.today() == date(2026, 4, 1)

    def test_today_follows_clock_zone(self):
        clock = DeterministicClock(datetime(2025, 3, 31, 23, 0, tzinfo=IST))
        assert clock.today() == date(2025, 3, 31)
        assert clock.now_utc().date() == date(2025, 3, 31)

        clock.set_time(datetime(2025, 4, 1, 2, 0, tzinfo=IST))
        assert clock.today() == date(2025, 4, 1)
        assert clock.now_utc().date() == date(2025, 3, 31)


class TestSystemClock:
    def test_aware(self):
        assert SystemClock().now().tzinfo is not None

    def test_zone(self):
        assert SystemClock(IST).now().utcoffset() == timedelta(hours=5, minutes=30)


class TestActor:
    def test_label(self):
        assert Actor("u-1", "Priya Nair").label == "Priya Nair"
        assert Actor("u-1").label == "u-1"

    @pytest.mark.parametrize("user_id", ["", "   "])
    def test_user_id_required(self, user_id):
        with pytest.raises(ValueError):
            Actor(user_id)


class TestValues:
    def test_attribution_sides(self):
        internal = {a for a in DelayAttribution if a.is_internal}
        external = {a for a in DelayAttribution if a.is_external}

        assert internal == {DelayAttribution.INTERNAL_TEAM, DelayAttribution.INTERNAL_PROCESS}
        assert len(external) == 3
        assert not internal & external

    def test_attribution_parse(self):
        assert DelayAttribution.parse("external-client") == DelayAttribution.EXTERNAL_CLIENT
        assert DelayAttribution.parse(DelayAttribution.INTERNAL_TEAM) == DelayAttribution.INTERNAL_TEAM
        assert DelayAttribution.parse("weather") is None
        assert DelayAttribution.parse(None) is None

    def test_attribution_labels(self):
        assert DelayAttribution.EXTERNAL_VENDOR.label == "External - Vendor"
        assert "Supplier" in DelayAttribution.EXTERNAL_VENDOR.description

    def test_terminal_po_statuses(self):
        terminal = {s for s in PurchaseOrderStatus if s.is_terminal}
        assert terminal == {PurchaseOrderStatus.COMPLETED, PurchaseOrderStatus.CANCELLED}

    def test_milestone_status_label(self):
        assert MilestoneStatus.NOT_STARTED.label == "Not Started"
        assert MilestoneStatus.BLOCKED.icon == "🚫"

    def test_tax_regime_values(self):
        assert TaxRegime("igst") is TaxRegime.SINGLE
        assert TaxRegime.SPLIT.value == "cgst_sgst"
