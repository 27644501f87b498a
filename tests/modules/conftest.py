"""
Shared fixtures for module tests.

Every fixture is opt-in.  Each test declares the services and parent
records it depends on in its signature.
"""

from datetime import date

import pytest

from projops_modules.milestones.service import MilestoneService
from projops_modules.procurement.service import PurchaseOrderService


@pytest.fixture
def milestone_service(session, clock, ops_config) -> MilestoneService:
    return MilestoneService(session, clock=clock, config=ops_config)


@pytest.fixture
def po_service(session, clock, ops_config) -> PurchaseOrderService:
    return PurchaseOrderService(session, config=ops_config, clock=clock)


@pytest.fixture
def project(milestone_service, actor, deadline):
    """A draft project with a deadline and no milestones."""
    return milestone_service.create_project(
        "Packaging Line Retrofit",
        actor,
        original_deadline=deadline,
        client_name="Acme Foods",
    )


@pytest.fixture
def planned_project(milestone_service, project, actor):
    """A draft project with three dated milestones."""
    for name, end in (
        ("Design Review", date(2025, 7, 1)),
        ("Panel Build", date(2025, 8, 1)),
        ("Site Commissioning", date(2025, 9, 1)),
    ):
        result = milestone_service.add_milestone(project.id, name, end, actor)
        assert result.is_success
    return project


@pytest.fixture
def baselined_project(milestone_service, planned_project, actor):
    result = milestone_service.lock_baseline(planned_project.id, actor)
    assert result.locked
    return milestone_service.get_project(planned_project.id)


@pytest.fixture
def interstate_vendor(po_service, actor):
    """Maharashtra supplier: IGST against a Karnataka buyer."""
    return po_service.register_vendor(
        "Deccan Drives & Controls",
        actor,
        gstin="27AAACD1234E1Z2",
        email="sales@deccandrives.example",
    )


@pytest.fixture
def local_vendor(po_service, actor):
    """Karnataka supplier: CGST + SGST against a Karnataka buyer."""
    return po_service.register_vendor(
        "Bengaluru Cable House",
        actor,
        gstin="29AABCB5678K1Z9",
    )


@pytest.fixture
def unregistered_vendor(po_service, actor):
    """Supplier with no GST data on file."""
    return po_service.register_vendor("Corner Hardware Store", actor)
