"""
Milestone Module Service (``projops_modules.milestones.service``).

Responsibility
--------------
Orchestrates the milestone lifecycle of a project: adding and editing
milestones, locking the baseline, moving dates through the delay gate,
and the read-side views (delay statistics, cascade risk, schedule summary,
weekly report).  Pure decisions are delegated to
``projops_engines.schedule`` and ``projops_engines.delay_stats``; this
class turns their results into atomic writes.

Architecture position
---------------------
**Modules layer** -- thin glue between the engines and the kernel ORM.
``MilestoneService`` is the sole public entry point for schedule writes.

Invariants enforced
-------------------
* Each public mutator owns the transaction boundary (``commit`` on success,
  ``rollback`` on refusal or exception).
* Baseline lock and delay-logged date changes take ``SELECT ... FOR UPDATE``
  on the project row first, so two locks, or a lock and a date change,
  cannot interleave.
* On a baselined project a date move and its delay log entry are written
  in the same commit or not at all.
* Milestones added after the lock start on baseline (original = current).

Failure modes
-------------
* Validation refusals  -> result objects carrying ``ScheduleViolation``s;
  nothing written.
* Unknown project / milestone  -> ``ProjectNotFoundError`` /
  ``MilestoneNotFoundError``.
* Template on a non-empty project or past deadline  ->
  ``TemplateApplicationError``.
* Unexpected exception  -> session rolled back, exception re-raised.

Audit relevance
---------------
Delay log rows are immutable (see ``projops_kernel.db.immutability``) and
carry actor id, actor name, clock timestamp, reason and attribution.
Structured log events are emitted on every commit and refusal.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from projops_config.schema import OpsConfig, ScheduleSettings
from projops_engines.delay_stats import (
    DelayHistoryGroup,
    DelayLogRecord,
    DelayStats,
    aggregate_delay_stats,
    group_by_logged_date,
    weekly_delay_summary,
)
from projops_engines.schedule import (
    DEFAULT_MILESTONE_TEMPLATE,
    DelayRequest,
    MilestoneRisk,
    MilestoneSnapshot,
    MilestoneStats,
    MilestoneTemplateItem,
    ScheduleSummary,
    check_baseline_lock,
    check_delay_request,
    compute_cascade_risk,
    cumulative_delay,
    milestone_stats,
    milestone_summary,
    plan_baseline_lock,
    requires_delay_log,
    summarize_schedule,
    template_dates,
    validate_milestone_name,
    week_start,
    weekly_status,
)
from projops_kernel.domain.clock import Clock, SystemClock
from projops_kernel.domain.identity import Actor
from projops_kernel.domain.values import (
    DelayAttribution,
    DelayEntityType,
    MilestoneStatus,
)
from projops_kernel.exceptions import (
    MilestoneNotFoundError,
    ProjectNotFoundError,
    TemplateApplicationError,
)
from projops_kernel.logging_config import LogContext, get_logger
from projops_kernel.models.delay_log import DelayLogModel
from projops_kernel.models.milestone import Milestone
from projops_kernel.models.project import Project
from projops_modules.milestones.models import (
    BaselineLockResult,
    DateChangeResult,
    MilestoneResult,
    ProjectInfo,
    WeeklyReport,
    to_delay_record,
    to_snapshot,
)

logger = get_logger("modules.milestones.service")


class MilestoneService:
    """
    Orchestrates milestone and baseline operations for projects.

    Contract
    --------
    * Mutators return result objects; callers inspect ``locked`` /
      ``applied`` / ``is_success`` and show ``messages`` on refusal.
    * Queries return engine snapshots and records, never ORM rows.

    Guarantees
    ----------
    * Session is committed only when the change is applied.
    * Clock is injectable; every timestamp and "today" comes from it.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: OpsConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._settings: ScheduleSettings = config.schedule if config else ScheduleSettings()

    # =========================================================================
    # Loading helpers
    # =========================================================================

    def _load_project(self, project_id: UUID, for_update: bool = False) -> Project:
        stmt = select(Project).where(Project.id == project_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        project = self._session.execute(stmt).scalar_one_or_none()
        if project is None:
            raise ProjectNotFoundError(str(project_id))
        return project

    def _load_milestone(self, project_id: UUID, milestone_id: UUID) -> Milestone:
        milestone = self._session.execute(
            select(Milestone).where(
                Milestone.id == milestone_id,
                Milestone.project_id == project_id,
            )
        ).scalar_one_or_none()
        if milestone is None:
            raise MilestoneNotFoundError(str(project_id), str(milestone_id))
        return milestone

    def _milestone_rows(self, project_id: UUID) -> list[Milestone]:
        return list(
            self._session.execute(
                select(Milestone)
                .where(Milestone.project_id == project_id)
                .order_by(Milestone.sort_order)
            ).scalars()
        )

    def _next_order(self, project_id: UUID) -> int:
        current_max = self._session.execute(
            select(func.max(Milestone.sort_order)).where(Milestone.project_id == project_id)
        ).scalar()
        return (current_max or 0) + 1

    # =========================================================================
    # Projects
    # =========================================================================

    def create_project(
        self,
        name: str,
        actor: Actor,
        original_deadline: date | None = None,
        client_name: str | None = None,
        description: str | None = None,
    ) -> ProjectInfo:
        """Create a draft (not baselined) project.  Setup only."""
        try:
            project = Project(
                name=name.strip(),
                client_name=client_name,
                description=description,
                original_deadline=original_deadline,
                current_deadline=original_deadline,
                is_baselined=False,
                created_by_id=actor.user_id,
            )
            self._session.add(project)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "project_created",
            extra={"project_id": str(project.id), "actor_id": actor.user_id},
        )
        return ProjectInfo.from_orm(project)

    def get_project(self, project_id: UUID) -> ProjectInfo:
        return ProjectInfo.from_orm(self._load_project(project_id))

    # =========================================================================
    # Milestone CRUD
    # =========================================================================

    def add_milestone(
        self,
        project_id: UUID,
        name: str,
        current_planned_end_date: date,
        actor: Actor,
        description: str | None = None,
        status: MilestoneStatus = MilestoneStatus.NOT_STARTED,
    ) -> MilestoneResult:
        """
        Append a milestone at the end of the project's order.

        On a baselined project the new milestone starts on baseline.
        """
        violation = validate_milestone_name(
            name,
            self._settings.min_name_length,
            self._settings.max_name_length,
        )
        if violation is not None:
            return MilestoneResult(milestone=None, violations=(violation,))

        with LogContext.bind(project_id=str(project_id), actor_id=actor.user_id):
            try:
                project = self._load_project(project_id, for_update=True)
                milestone = Milestone(
                    project_id=project.id,
                    name=name.strip(),
                    description=(description or "").strip() or None,
                    sort_order=self._next_order(project.id),
                    status=MilestoneStatus(status),
                    current_planned_end_date=current_planned_end_date,
                    original_planned_end_date=(
                        current_planned_end_date if project.is_baselined else None
                    ),
                    created_by_id=actor.user_id,
                )
                self._session.add(milestone)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "milestone_added",
                extra={
                    "milestone_id": str(milestone.id),
                    "sort_order": milestone.sort_order,
                    "on_baseline": project.is_baselined,
                },
            )
            return MilestoneResult(milestone=to_snapshot(milestone))

    def update_details(
        self,
        project_id: UUID,
        milestone_id: UUID,
        actor: Actor,
        name: str | None = None,
        description: str | None = None,
    ) -> MilestoneResult:
        """Rename a milestone or change its description.  Dates go through change_milestone_date."""
        if name is not None:
            violation = validate_milestone_name(
                name,
                self._settings.min_name_length,
                self._settings.max_name_length,
            )
            if violation is not None:
                return MilestoneResult(milestone=None, violations=(violation,))

        try:
            milestone = self._load_milestone(project_id, milestone_id)
            if name is not None:
                milestone.name = name.strip()
            if description is not None:
                milestone.description = description.strip() or None
            milestone.updated_by_id = actor.user_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        return MilestoneResult(milestone=to_snapshot(milestone))

    def update_status(
        self,
        project_id: UUID,
        milestone_id: UUID,
        status: MilestoneStatus | str,
        actor: Actor,
        progress_note: str | None = None,
    ) -> MilestoneSnapshot:
        """
        Set a milestone's status.  Any status may follow any other.

        Moving to completed stamps today's date as the actual end date.  A
        progress note, even an empty one, stamps the progress date.
        """
        status = MilestoneStatus(status)
        today = self._clock.today()
        try:
            milestone = self._load_milestone(project_id, milestone_id)
            previous = MilestoneStatus(milestone.status)
            milestone.status = status
            if status == MilestoneStatus.COMPLETED:
                milestone.actual_end_date = today
            if progress_note is not None:
                milestone.progress_note = progress_note.strip() or None
                milestone.last_progress_date = today
            milestone.updated_by_id = actor.user_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "milestone_status_changed",
            extra={
                "project_id": str(project_id),
                "milestone_id": str(milestone_id),
                "from_status": previous.value,
                "to_status": status.value,
            },
        )
        return to_snapshot(milestone)

    def delete_milestone(self, project_id: UUID, milestone_id: UUID, actor: Actor) -> None:
        """Delete a milestone.  Its delay log entries are kept."""
        try:
            self._load_project(project_id, for_update=True)
            milestone = self._load_milestone(project_id, milestone_id)
            self._session.delete(milestone)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "milestone_deleted",
            extra={
                "project_id": str(project_id),
                "milestone_id": str(milestone_id),
                "actor_id": actor.user_id,
            },
        )

    def reorder_milestones(
        self,
        project_id: UUID,
        milestone_ids: Sequence[UUID],
        actor: Actor,
    ) -> list[MilestoneSnapshot]:
        """Renumber milestones 1..n in the given order, in one commit."""
        try:
            self._load_project(project_id, for_update=True)
            rows = {m.id: m for m in self._milestone_rows(project_id)}
            for index, milestone_id in enumerate(milestone_ids, start=1):
                milestone = rows.get(milestone_id)
                if milestone is None:
                    raise MilestoneNotFoundError(str(project_id), str(milestone_id))
                milestone.sort_order = index
                milestone.updated_by_id = actor.user_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        return self.list_milestones(project_id)

    def apply_template(
        self,
        project_id: UUID,
        deadline: date,
        actor: Actor,
        template: Sequence[MilestoneTemplateItem] = DEFAULT_MILESTONE_TEMPLATE,
    ) -> list[MilestoneSnapshot]:
        """
        Create the template's milestones spread from today to ``deadline``.

        Raises:
            TemplateApplicationError: If the project already has milestones
                or the deadline is not after today.
        """
        today = self._clock.today()
        try:
            project = self._load_project(project_id, for_update=True)
            if self._milestone_rows(project_id):
                raise TemplateApplicationError(
                    str(project_id),
                    "Project already has milestones. Delete existing milestones first.",
                )
            if deadline <= today:
                raise TemplateApplicationError(
                    str(project_id),
                    "Project deadline must be in the future to apply template.",
                )

            for order, (item, planned) in enumerate(
                template_dates(today, deadline, template), start=1
            ):
                self._session.add(
                    Milestone(
                        project_id=project.id,
                        name=item.name,
                        description=item.description,
                        sort_order=order,
                        status=MilestoneStatus.NOT_STARTED,
                        current_planned_end_date=planned,
                        original_planned_end_date=planned if project.is_baselined else None,
                        created_by_id=actor.user_id,
                    )
                )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "milestone_template_applied",
            extra={
                "project_id": str(project_id),
                "item_count": len(template),
                "deadline": deadline,
            },
        )
        return self.list_milestones(project_id)

    # =========================================================================
    # Baseline lock
    # =========================================================================

    def lock_baseline(self, project_id: UUID, actor: Actor) -> BaselineLockResult:
        """
        Freeze every milestone's original date at its current date.

        The precondition check and the writes run under a row lock on the
        project, in one transaction.  A refusal writes nothing.
        """
        with LogContext.bind(project_id=str(project_id), actor_id=actor.user_id):
            try:
                project = self._load_project(project_id, for_update=True)
                rows = self._milestone_rows(project_id)
                check = check_baseline_lock(
                    [to_snapshot(m) for m in rows],
                    is_baselined=project.is_baselined,
                    min_name_length=self._settings.min_name_length,
                )
                if not check.valid:
                    self._session.rollback()
                    return BaselineLockResult(
                        project_id=project_id,
                        locked=False,
                        violations=check.violations,
                        milestone_count=len(rows),
                    )

                plan = plan_baseline_lock(to_snapshot(m) for m in rows)
                for milestone in rows:
                    milestone.original_planned_end_date = plan[milestone.id]
                    milestone.updated_by_id = actor.user_id

                now = self._clock.now()
                project.is_baselined = True
                project.baselined_at = now
                project.baselined_by_id = actor.user_id
                if project.original_deadline is None:
                    project.original_deadline = project.current_deadline
                project.updated_by_id = actor.user_id
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.warning("baseline_lock_rolled_back", exc_info=True)
                raise

            logger.info(
                "baseline_locked",
                extra={"milestone_count": len(rows), "baselined_at": now},
            )
            return BaselineLockResult(
                project_id=project_id,
                locked=True,
                baselined_at=now,
                milestone_count=len(rows),
            )

    # =========================================================================
    # Date changes and the delay gate
    # =========================================================================

    def change_milestone_date(
        self,
        project_id: UUID,
        milestone_id: UUID,
        new_date: date,
        actor: Actor,
        reason: str | None = None,
        attribution: DelayAttribution | str | None = None,
    ) -> DateChangeResult:
        """
        Move a milestone's current planned end date.

        Before the baseline: a direct update, nothing logged.  After: the
        move needs a reason and an attribution; the date and its delay log
        entry are committed together or not at all.
        """
        with LogContext.bind(project_id=str(project_id), actor_id=actor.user_id):
            try:
                project = self._load_project(project_id, for_update=True)
                milestone = self._load_milestone(project_id, milestone_id)
                previous = milestone.current_planned_end_date

                if not requires_delay_log(project.is_baselined, previous, new_date):
                    milestone.current_planned_end_date = new_date
                    milestone.updated_by_id = actor.user_id
                    self._session.commit()
                    return DateChangeResult(
                        entity_id=milestone.id,
                        applied=True,
                        previous_date=previous,
                        new_date=new_date,
                        delay_days=(new_date - previous).days if previous else 0,
                    )

                result = self._apply_logged_change(
                    project=project,
                    entity_type=DelayEntityType.MILESTONE,
                    entity_id=milestone.id,
                    entity_name=milestone.name,
                    previous=previous,
                    new_date=new_date,
                    reason=reason,
                    attribution=attribution,
                    actor=actor,
                )
                if result.applied:
                    milestone.current_planned_end_date = new_date
                    milestone.updated_by_id = actor.user_id
                    self._session.commit()
                else:
                    self._session.rollback()
            except Exception:
                self._session.rollback()
                raise

            self._log_date_change(result)
            return result

    def change_project_deadline(
        self,
        project_id: UUID,
        new_deadline: date,
        actor: Actor,
        reason: str | None = None,
        attribution: DelayAttribution | str | None = None,
    ) -> DateChangeResult:
        """
        Move the project deadline.

        Before the baseline the original deadline follows the current one.
        After it, the move goes through the same delay gate as milestones.
        """
        with LogContext.bind(project_id=str(project_id), actor_id=actor.user_id):
            try:
                project = self._load_project(project_id, for_update=True)
                previous = project.current_deadline

                if not requires_delay_log(project.is_baselined, previous, new_deadline):
                    project.current_deadline = new_deadline
                    if not project.is_baselined:
                        project.original_deadline = new_deadline
                    project.updated_by_id = actor.user_id
                    self._session.commit()
                    return DateChangeResult(
                        entity_id=project.id,
                        applied=True,
                        previous_date=previous,
                        new_date=new_deadline,
                        delay_days=(new_deadline - previous).days if previous else 0,
                    )

                project.current_deadline = new_deadline
                result = self._apply_logged_change(
                    project=project,
                    entity_type=DelayEntityType.PROJECT,
                    entity_id=project.id,
                    entity_name=project.name,
                    previous=previous,
                    new_date=new_deadline,
                    reason=reason,
                    attribution=attribution,
                    actor=actor,
                )
                if result.applied:
                    project.updated_by_id = actor.user_id
                    self._session.commit()
                else:
                    self._session.rollback()
            except Exception:
                self._session.rollback()
                raise

            self._log_date_change(result)
            return result

    def _apply_logged_change(
        self,
        project: Project,
        entity_type: DelayEntityType,
        entity_id: UUID,
        entity_name: str,
        previous: date,
        new_date: date,
        reason: str | None,
        attribution: DelayAttribution | str | None,
        actor: Actor,
    ) -> DateChangeResult:
        """Run the delay gate and stage the log row.  Caller commits or rolls back."""
        check = check_delay_request(
            DelayRequest(
                previous_date=previous,
                new_date=new_date,
                reason=reason,
                attribution=attribution,
            ),
            min_reason_length=self._settings.min_reason_length,
        )
        if not check.valid:
            return DateChangeResult(
                entity_id=entity_id,
                applied=False,
                previous_date=previous,
                new_date=new_date,
                delay_days=check.delay_days,
                violations=check.violations,
            )

        row = DelayLogModel(
            project_id=project.id,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            previous_date=previous,
            new_date=new_date,
            delay_days=check.delay_days,
            reason=check.reason,
            attribution=check.attribution,
            logged_by_id=actor.user_id,
            logged_by_name=actor.label,
            logged_at=self._clock.now(),
            cumulative_project_delay=cumulative_delay(
                project.original_deadline, project.current_deadline
            ),
        )
        self._session.add(row)
        self._session.flush()

        return DateChangeResult(
            entity_id=entity_id,
            applied=True,
            previous_date=previous,
            new_date=new_date,
            delay_days=check.delay_days,
            delay_log=to_delay_record(row),
        )

    def _log_date_change(self, result: DateChangeResult) -> None:
        if result.applied:
            logger.info(
                "delay_logged",
                extra={
                    "entity_id": str(result.entity_id),
                    "delay_days": result.delay_days,
                    "attribution": result.delay_log.attribution if result.delay_log else None,
                },
            )
        else:
            logger.info(
                "date_change_refused",
                extra={
                    "entity_id": str(result.entity_id),
                    "violations": [v.kind.value for v in result.violations],
                },
            )

    # =========================================================================
    # Queries
    # =========================================================================

    def list_milestones(self, project_id: UUID) -> list[MilestoneSnapshot]:
        self._load_project(project_id)
        return [to_snapshot(m) for m in self._milestone_rows(project_id)]

    def list_delay_logs(
        self,
        project_id: UUID,
        milestone_id: UUID | None = None,
        attribution: DelayAttribution | str | None = None,
    ) -> list[DelayLogRecord]:
        """Delay log entries, newest first, optionally filtered."""
        self._load_project(project_id)
        stmt = select(DelayLogModel).where(DelayLogModel.project_id == project_id)
        if milestone_id is not None:
            stmt = stmt.where(
                DelayLogModel.entity_type == DelayEntityType.MILESTONE.value,
                DelayLogModel.entity_id == milestone_id,
            )
        if attribution is not None:
            stmt = stmt.where(
                DelayLogModel.attribution == DelayAttribution(attribution).value
            )
        stmt = stmt.order_by(DelayLogModel.logged_at.desc())
        return [to_delay_record(row) for row in self._session.execute(stmt).scalars()]

    def delay_stats(self, project_id: UUID) -> DelayStats:
        return aggregate_delay_stats(self.list_delay_logs(project_id))

    def delay_history(self, project_id: UUID) -> list[DelayHistoryGroup]:
        return group_by_logged_date(self.list_delay_logs(project_id))

    def cascade_view(self, project_id: UUID) -> list[MilestoneRisk]:
        return compute_cascade_risk(self.list_milestones(project_id))

    def schedule_summary(self, project_id: UUID) -> ScheduleSummary:
        project = self._load_project(project_id)
        return summarize_schedule(
            self.cascade_view(project_id),
            project_original_deadline=project.original_deadline,
        )

    def milestone_stats(self, project_id: UUID) -> MilestoneStats:
        return milestone_stats(self.list_milestones(project_id))

    def weekly_report(self, project_id: UUID) -> WeeklyReport:
        """Auto-generated status, milestone roll call and delay summary for this week."""
        project = self._load_project(project_id)
        milestones = self.list_milestones(project_id)
        delay = cumulative_delay(project.original_deadline, project.current_deadline)
        has_blocked = any(m.status == MilestoneStatus.BLOCKED for m in milestones)
        monday = week_start(self._clock.today())

        return WeeklyReport(
            week_start=monday,
            status=weekly_status(
                delay,
                has_blocked,
                delayed_threshold=self._settings.delayed_threshold_days,
            ),
            cumulative_delay=delay,
            milestone_summary=milestone_summary(milestones),
            delay_summary=weekly_delay_summary(self.list_delay_logs(project_id), monday),
        )
