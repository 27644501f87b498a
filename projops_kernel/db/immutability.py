"""
ORM-level immutability enforcement for schedule audit records.

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database.  The listeners below intercept those events and raise
ImmutabilityViolationError, which aborts the flush and leaves the database
untouched.

    session.flush()
         |
         v
    [before_update event] --> _check_*_immutability() --> ImmutabilityViolationError
         |                                                        ^
         v                                                        |
    [before_delete event] --> _check_*_delete() -----------------+
         |
         v
    SQL sent to database (only if checks pass)

Protected entities
------------------

Entity          | When immutable                         | Fields
----------------|----------------------------------------|-------------------------
DelayLogModel   | Always (from creation)                 | every field, and DELETE
Milestone       | Once set, while the project is         | original_planned_end_date
                | baselined                              |

Usage
-----

init_engine_from_url() registers the listeners, so every process that
opens the database is guarded.  Registering again is a no-op:

    from projops_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()

Tests that need to violate the rules on purpose unregister first:

    unregister_immutability_listeners()
    # ... forbidden operation ...
    register_immutability_listeners()
"""

from sqlalchemy import event, select
from sqlalchemy.orm.attributes import get_history

from projops_kernel.exceptions import ImmutabilityViolationError
from projops_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_delay_log_immutability(mapper, connection, target):
    """Prevent any update to a delay log entry."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "DelayLog",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="DelayLog",
        entity_id=str(target.id),
        reason="Delay log entries are append-only and cannot be modified",
    )


def _check_delay_log_delete(mapper, connection, target):
    """Prevent deletion of a delay log entry."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "DelayLog",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="DelayLog",
        entity_id=str(target.id),
        reason="Delay log entries cannot be deleted",
    )


def _project_is_baselined(connection, project_id) -> bool:
    from projops_kernel.models.project import Project

    result = connection.execute(
        select(Project.is_baselined).where(Project.id == project_id)
    ).scalar_one_or_none()
    return bool(result)


def _check_milestone_baseline_immutability(mapper, connection, target):
    """
    Prevent rewriting a milestone's original planned end date.

    The baseline lock is the only writer of the original date for existing
    milestones; milestones added afterwards get it at insert time.  Once a
    value is present on a baselined project it is frozen.
    """
    history = get_history(target, "original_planned_end_date")
    if not history.deleted:
        return

    previous = history.deleted[0]
    if previous is None:
        return

    if not _project_is_baselined(connection, target.project_id):
        return

    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "Milestone",
            "entity_id": str(target.id),
            "operation": "UPDATE",
            "field": "original_planned_end_date",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="Milestone",
        entity_id=str(target.id),
        reason="Original planned end date is frozen once the project is baselined",
    )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Safe to call more than once; already-registered listeners are skipped.
    """
    from projops_kernel.models.delay_log import DelayLogModel
    from projops_kernel.models.milestone import Milestone

    listeners = [
        (DelayLogModel, "before_update", _check_delay_log_immutability),
        (DelayLogModel, "before_delete", _check_delay_log_delete),
        (Milestone, "before_update", _check_milestone_baseline_immutability),
    ]
    for target, event_name, listener_fn in listeners:
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if not registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests that intentionally violate the rules.
    """
    from projops_kernel.models.delay_log import DelayLogModel
    from projops_kernel.models.milestone import Milestone

    _safe_remove_listener(DelayLogModel, "before_update", _check_delay_log_immutability)
    _safe_remove_listener(DelayLogModel, "before_delete", _check_delay_log_delete)
    _safe_remove_listener(
        Milestone, "before_update", _check_milestone_baseline_immutability
    )
