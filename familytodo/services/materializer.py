"""Creation of the next task of a recurring series."""

from __future__ import annotations

from datetime import datetime
import logging
import uuid

from sqlalchemy.orm import Session

from familytodo.models.attachment import TaskAttachment
from familytodo.models.task import Task
from familytodo.recurrence.rule import rule_from_task, series_state_from_task, stored_rule_columns
from familytodo.services.time_manager import get_current_time
from familytodo.utils.recurrence_utils import has_ended, next_occurrence

logger = logging.getLogger("familytodo.recurrence")


class OccurrenceMaterializer:
    """Materialize successors of recurring tasks on an explicit session.

    The materializer works inside the caller's unit of work: it adds and flushes
    rows but never commits, so the caller decides whether the successor is kept
    together with the task's own state change or rolled back with it.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def materialize_next(self, task: Task, now: datetime | None = None) -> Task | None:
        """Create the next occurrence of ``task``'s series.

        Args:
            task: Task row as it was before being completed or removed.
            now: Completion / removal moment; defaults to the current time.

        Returns:
            The flushed successor (with its id), or None when the task does not
            repeat, the series has ended, or there is no next date.

        Raises:
            RecurrenceRuleError: The stored rule cannot be interpreted.
            SQLAlchemyError: Storage failed; nothing was kept by the flush.
        """
        rule = rule_from_task(task)
        if rule is None:
            return None

        now = now or get_current_time()
        state = series_state_from_task(task)
        if has_ended(rule, state, now):
            logger.info(
                "Series ended: task_id=%s occurrence=%s end_count=%s end_date=%s",
                task.id,
                state.occurrence_number,
                rule.end_count,
                rule.end_date,
            )
            return None

        next_due = next_occurrence(rule, task.due_date, now)
        if next_due is None:
            logger.info("No next date for task_id=%s, series stops", task.id)
            return None

        group_id = state.group_id or str(uuid.uuid4())
        if task.recurring_group_id is None:
            # First materialization: the originating task joins the new group
            task.recurring_group_id = group_id

        successor = Task(
            title=task.title,
            description=task.description,
            category_id=task.category_id,
            priority=task.priority,
            due_date=next_due,
            recurring_occurrence=state.occurrence_number + 1,
            recurring_group_id=group_id,
            parent_task_id=state.parent_task_id or task.id,
            **stored_rule_columns(task),
        )
        self.db.add(successor)
        self.db.flush()

        self._copy_assignments(task, successor)
        if rule.copy_attachments:
            self._copy_attachments(task, successor)
        self.db.flush()

        logger.info(
            "Materialized occurrence %s of group %s: task_id=%s -> new_task_id=%s due=%s",
            successor.recurring_occurrence,
            group_id,
            task.id,
            successor.id,
            next_due.isoformat(),
        )
        return successor

    def _copy_assignments(self, source: Task, target: Task) -> None:
        target.assignees = list(source.assignees)

    def _copy_attachments(self, source: Task, target: Task) -> None:
        """Copy attachment metadata; the stored files are shared, not duplicated."""
        for attachment in source.attachments:
            self.db.add(
                TaskAttachment(
                    task_id=target.id,
                    filename=attachment.filename,
                    original_name=attachment.original_name,
                    url=attachment.url,
                    type=attachment.type,
                    size=attachment.size,
                    uploaded_by=attachment.uploaded_by,
                    uploaded_at=get_current_time(),
                )
            )
