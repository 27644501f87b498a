"""
End-to-end scenarios across the services.

Each scenario runs through the public services with a real database
session, the way a caller would use them.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from projops_config.schema import POSettings
from projops_engines.amount_words import number_to_words
from projops_engines.po_totals import POLineItem
from projops_kernel.domain.values import DelayAttribution, TaxRegime
from projops_modules.milestones.service import MilestoneService
from projops_modules.procurement.service import PurchaseOrderService


@pytest.fixture
def milestones(session, clock, ops_config):
    return MilestoneService(session, clock=clock, config=ops_config)


@pytest.fixture
def purchasing(session, clock, ops_config):
    return PurchaseOrderService(session, config=ops_config, clock=clock)


@pytest.fixture
def project(milestones, actor):
    return milestones.create_project("Bottling Line Controls", actor, client_name="Acme Foods")


ONE_ITEM = [POLineItem(description="Control panel", quantity=1, rate="10000")]


class TestPurchaseOrderScenarios:
    def test_same_state_supplier_splits_tax(self, purchasing, project, actor):
        vendor = purchasing.register_vendor(
            "Mysuru Panels", actor, gstin="29AAFCM1111A1Z3"
        )

        po = purchasing.create_purchase_order(
            project.id, vendor.id, ONE_ITEM, actor
        ).purchase_order

        assert po.tax_type == TaxRegime.SPLIT
        assert po.cgst_amount == Decimal("900.00")
        assert po.sgst_amount == Decimal("900.00")
        assert po.igst_amount is None
        assert po.total_amount == Decimal("11800.00")

    def test_other_state_supplier_pays_igst(self, purchasing, project, actor):
        vendor = purchasing.register_vendor(
            "Pune Automation", actor, gstin="27AAGCP2222B1Z4"
        )

        po = purchasing.create_purchase_order(
            project.id, vendor.id, ONE_ITEM, actor
        ).purchase_order

        assert po.tax_type == TaxRegime.SINGLE
        assert po.igst_amount == Decimal("1800.00")
        assert po.cgst_amount is None
        assert po.total_amount == Decimal("11800.00")
        assert po.amount_in_words == "INR Eleven Thousand Eight Hundred Only"

    def test_amount_in_words(self):
        assert number_to_words(1575000) == "INR Fifteen Lakh Seventy Five Thousand Only"

    @pytest.mark.parametrize(
        "today, expected",
        [
            (date(2025, 4, 10), "PO/QT/25-26/001"),
            (date(2025, 2, 10), "PO/QT/24-25/001"),
        ],
    )
    def test_financial_year_numbers(
        self, session, clock, ops_config, project, actor, today, expected
    ):
        clock.set_date(today)
        config = replace(
            ops_config,
            purchase_orders=POSettings(prefix="PO/QT", number_format="financial-year"),
        )
        purchasing = PurchaseOrderService(session, config=config, clock=clock)
        vendor = purchasing.register_vendor("Pune Automation", actor, gstin="27AAGCP2222B1Z4")

        po = purchasing.create_purchase_order(
            project.id, vendor.id, ONE_ITEM, actor
        ).purchase_order

        assert po.po_number == expected
        assert po.po_date == today


class TestBaselineScenario:
    def test_vendor_slip_after_baseline(self, milestones, project, actor, clock):
        added = milestones.add_milestone(
            project.id, "Factory Acceptance Test", date(2025, 11, 1), actor
        )
        assert milestones.lock_baseline(project.id, actor).locked

        reason = "Vendor delayed PLC delivery"
        assert len(reason) >= 25
        result = milestones.change_milestone_date(
            project.id,
            added.milestone.id,
            date(2025, 11, 15),
            actor,
            reason=reason,
            attribution=DelayAttribution.EXTERNAL_VENDOR,
        )

        assert result.applied
        assert result.delay_days == 14
        log = result.delay_log
        assert log.delay_days == 14
        assert log.previous_date == date(2025, 11, 1)
        assert log.new_date == date(2025, 11, 15)
        assert log.attribution == DelayAttribution.EXTERNAL_VENDOR
        assert log.logged_by_id == actor.user_id
        assert log.logged_at == clock.now()

        milestone = milestones.list_milestones(project.id)[0]
        assert milestone.current_planned_end_date == date(2025, 11, 15)
        assert milestone.original_planned_end_date == date(2025, 11, 1)

        stats = milestones.delay_stats(project.id)
        assert stats.total_delay_days == 14
        assert stats.external_percentage == 100
        assert [r.slip for r in milestones.cascade_view(project.id)] == [14]
