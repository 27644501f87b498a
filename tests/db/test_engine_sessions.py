"""Tests for the engine module's session helpers."""

from datetime import date

import pytest
from sqlalchemy import delete, select

from projops_kernel.db import engine as engine_module
from projops_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    session_scope,
)
from projops_kernel.db.immutability import unregister_immutability_listeners
from projops_kernel.domain.clock import DeterministicClock
from projops_kernel.domain.values import DelayAttribution
from projops_kernel.exceptions import ImmutabilityViolationError
from projops_kernel.models.delay_log import DelayLogModel
from projops_kernel.services.sequence_service import SequenceCounter
from projops_modules.milestones.service import MilestoneService


@pytest.fixture
def counter_name(db_tables):
    name = "test:session-scope"
    yield name
    with session_scope() as session:
        session.execute(delete(SequenceCounter).where(SequenceCounter.name == name))


def _stored_value(name):
    with session_scope() as session:
        return session.execute(
            select(SequenceCounter.current_value).where(SequenceCounter.name == name)
        ).scalar_one_or_none()


class TestSessionScope:
    def test_commits_on_success(self, counter_name):
        with session_scope() as session:
            session.add(SequenceCounter(name=counter_name, current_value=7))

        assert _stored_value(counter_name) == 7

    def test_rolls_back_and_reraises(self, counter_name, captured_logs):
        with pytest.raises(RuntimeError, match="abort"):
            with session_scope() as session:
                session.add(SequenceCounter(name=counter_name, current_value=7))
                session.flush()
                raise RuntimeError("abort")

        assert _stored_value(counter_name) is None
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())


class TestFactory:
    def test_sessions_keep_loaded_state_after_commit(self, db_tables):
        assert get_session_factory().kw["expire_on_commit"] is False
        assert get_engine().dialect.name in ("sqlite", "postgresql")


@pytest.fixture
def standalone_session(monkeypatch):
    """A session on a fresh engine, built the way an application starts up.

    Does not use ``db_tables``, so nothing registers the immutability
    listeners except ``init_engine_from_url`` itself.
    """
    monkeypatch.setattr(engine_module, "_engine", None)
    monkeypatch.setattr(engine_module, "_SessionFactory", None)
    unregister_immutability_listeners()

    eng = init_engine_from_url("sqlite://")
    create_tables()
    sess = get_session()
    yield sess
    sess.close()
    eng.dispose()


def _logged_delay(sess, actor, ops_config):
    service = MilestoneService(sess, clock=DeterministicClock(), config=ops_config)
    project = service.create_project(
        "Conveyor Upgrade", actor, original_deadline=date(2025, 9, 30)
    )
    milestone_ids = {}
    for name, end in (
        ("Design Review", date(2025, 7, 1)),
        ("Panel Build", date(2025, 8, 1)),
        ("Site Commissioning", date(2025, 9, 1)),
    ):
        added = service.add_milestone(project.id, name, end, actor)
        milestone_ids[name] = added.milestone.id
    assert service.lock_baseline(project.id, actor).locked

    result = service.change_milestone_date(
        project.id,
        milestone_ids["Panel Build"],
        date(2025, 8, 15),
        actor,
        reason="Vendor delayed PLC delivery by two weeks",
        attribution=DelayAttribution.EXTERNAL_VENDOR,
    )
    assert result.applied
    return sess.get(DelayLogModel, result.delay_log.id)


class TestStartupGuards:
    """Engine initialization alone is enough to protect the audit trail."""

    def test_delay_log_update_blocked(self, standalone_session, actor, ops_config):
        row = _logged_delay(standalone_session, actor, ops_config)

        row.reason = "Rewritten after the fact"
        with pytest.raises(ImmutabilityViolationError):
            standalone_session.commit()
        standalone_session.rollback()

    def test_delay_log_delete_blocked(self, standalone_session, actor, ops_config):
        row = _logged_delay(standalone_session, actor, ops_config)
        log_id = row.id

        standalone_session.delete(row)
        with pytest.raises(ImmutabilityViolationError):
            standalone_session.commit()
        standalone_session.rollback()
        assert standalone_session.get(DelayLogModel, log_id) is not None
