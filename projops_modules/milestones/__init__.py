"""
Milestone Module (``projops_modules.milestones``).

Responsibility
--------------
Project schedule lifecycle: milestone CRUD, the one-way baseline lock,
delay-gated date changes with an append-only delay log, and read-side
schedule views (cascade risk, delay statistics, weekly report).

Architecture position
---------------------
**Modules layer** -- a service facade that delegates every decision to
``projops_engines.schedule`` / ``projops_engines.delay_stats`` and every
write to ``projops_kernel`` ORM models.

Failure modes
-------------
* Refused operations return result objects with ``violations``.
* Unknown ids raise ``ProjectNotFoundError`` / ``MilestoneNotFoundError``.
* Database exceptions propagate after session rollback.
"""

from projops_modules.milestones.models import (
    BaselineLockResult,
    DateChangeResult,
    MilestoneResult,
    ProjectInfo,
    WeeklyReport,
)
from projops_modules.milestones.service import MilestoneService

__all__ = [
    "BaselineLockResult",
    "DateChangeResult",
    "MilestoneResult",
    "MilestoneService",
    "ProjectInfo",
    "WeeklyReport",
]
