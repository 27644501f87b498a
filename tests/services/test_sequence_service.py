"""
Tests for SequenceService.

Covers:
- First allocation honours the start value
- Strictly increasing values per counter
- Independent counters per PO prefix
- Rollback returns the value
"""

import pytest

from projops_kernel.services.sequence_service import SequenceService


class TestNextValue:
    def test_first_value_is_start(self, session):
        seq = SequenceService(session)
        assert seq.next_value("po:PO-A") == 1
        assert seq.next_value("po:PO-B", start=41) == 41

    def test_increments(self, session):
        seq = SequenceService(session)
        values = [seq.next_value("po:PO-A") for _ in range(5)]
        assert values == [1, 2, 3, 4, 5]

    def test_start_ignored_once_counter_exists(self, session):
        seq = SequenceService(session)
        seq.next_value("po:PO-A", start=10)
        assert seq.next_value("po:PO-A", start=500) == 11

    def test_counters_are_independent(self, session):
        seq = SequenceService(session)
        seq.next_value(SequenceService.po_counter("PO-A"))
        seq.next_value(SequenceService.po_counter("PO-A"))

        assert seq.next_value(SequenceService.po_counter("PO/B")) == 1
        assert seq.current_value("po:PO-A") == 2

    def test_invalid_start(self, session):
        with pytest.raises(ValueError):
            SequenceService(session).next_value("po:PO-A", start=0)


class TestCurrentAndReset:
    def test_unknown_counter(self, session):
        assert SequenceService(session).current_value("po:nothing") is None

    def test_reset(self, session):
        seq = SequenceService(session)
        seq.next_value("po:PO-A")
        seq.next_value("po:PO-A")
        seq.reset("po:PO-A", 0)

        assert seq.next_value("po:PO-A") == 1

    def test_reset_creates_counter(self, session):
        seq = SequenceService(session)
        seq.reset("po:PO-NEW", 99)
        assert seq.next_value("po:PO-NEW") == 100


class TestTransactional:
    def test_rollback_returns_value(self, session):
        seq = SequenceService(session)
        seq.next_value("po:PO-A")
        session.commit()

        seq.next_value("po:PO-A")
        session.rollback()

        assert seq.next_value("po:PO-A") == 2

    def test_po_counter_name(self):
        assert SequenceService.po_counter("PO-QT") == "po:PO-QT"
