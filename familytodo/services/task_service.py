"""Service for task business logic."""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session, selectinload

from familytodo.database import transaction
from familytodo.models.attachment import TaskAttachment
from familytodo.models.category import Category
from familytodo.models.person import Person
from familytodo.models.task import Task
from familytodo.recurrence.rule import rule_columns
from familytodo.schemas.recurrence import parse_recurrence_settings
from familytodo.services.materializer import OccurrenceMaterializer
from familytodo.services.time_manager import get_current_time

if TYPE_CHECKING:
    from familytodo.schemas.task import AttachmentCreate, TaskCreate, TaskUpdate

logger = logging.getLogger("familytodo.tasks")


@dataclass(slots=True)
class TaskTransition:
    """Outcome of completing or removing a task.

    ``changed`` is False when the task was already in the requested state; in that
    case nothing was written and ``successor`` is None.
    """

    task: Task
    successor: Task | None = None
    changed: bool = True


class TaskService:
    """Service for managing household tasks."""

    @staticmethod
    def _get_people_by_ids(db: Session, person_ids: list[int]) -> list[Person]:
        """Load people by IDs ensuring all exist."""
        if not person_ids:
            return []
        unique_ids = sorted(set(person_ids))
        people = (
            db.query(Person)
            .filter(Person.id.in_(unique_ids), Person.deleted.is_(False))
            .all()
        )
        missing = sorted(set(unique_ids) - {person.id for person in people})
        if missing:
            raise ValueError(f"People not found: {missing}")
        person_map = {person.id: person for person in people}
        return [person_map[person_id] for person_id in unique_ids]

    @staticmethod
    def _ensure_category(db: Session, category_id: int | None) -> None:
        if category_id is None:
            return
        exists = (
            db.query(Category.id)
            .filter(Category.id == category_id, Category.deleted.is_(False))
            .first()
        )
        if not exists:
            raise ValueError(f"Category not found: {category_id}")

    @staticmethod
    def create_task(db: Session, task_data: "TaskCreate") -> Task:
        """Create a task, optionally recurring."""
        TaskService._ensure_category(db, task_data.category_id)

        payload = task_data.model_dump(
            exclude={"recurring_settings", "recurring_pattern", "assigned_people"}
        )
        if task_data.recurring_settings is not None:
            columns = rule_columns(parse_recurrence_settings(task_data.recurring_settings))
        else:
            columns = rule_columns(None)
            if task_data.recurring_pattern is not None:
                columns["recurring_pattern"] = task_data.recurring_pattern.value

        task = Task(**payload, **columns)
        task.assignees = TaskService._get_people_by_ids(db, task_data.assigned_people)

        db.add(task)
        db.commit()
        db.refresh(task)
        logger.info(
            "Task created: task_id=%s unit=%s pattern=%s",
            task.id,
            task.recurring_unit,
            task.recurring_pattern,
        )
        return task

    @staticmethod
    def get_task(db: Session, task_id: int, include_deleted: bool = False) -> Task | None:
        """Get a task by ID."""
        query = db.query(Task).options(selectinload(Task.assignees)).filter(Task.id == task_id)
        if not include_deleted:
            query = query.filter(Task.deleted.is_(False))
        return query.first()

    @staticmethod
    def get_all_tasks(
        db: Session,
        person_id: int | None = None,
        category_id: int | None = None,
        priority: int | None = None,
        completed: bool | None = None,
        include_deleted: bool = False,
    ) -> list[Task]:
        """List tasks ordered by priority and due date."""
        query = db.query(Task).options(selectinload(Task.assignees))
        if not include_deleted:
            query = query.filter(Task.deleted.is_(False))
        if completed is not None:
            query = query.filter(Task.completed.is_(completed))
        if category_id is not None:
            query = query.filter(Task.category_id == category_id)
        if priority is not None:
            query = query.filter(Task.priority == priority)
        if person_id is not None:
            query = query.filter(Task.assignees.any(Person.id == person_id))
        return query.order_by(Task.priority.asc(), Task.due_date.asc(), Task.id.asc()).all()

    @staticmethod
    def get_series(db: Session, group_id: str) -> list[Task]:
        """All tasks of one recurring series, oldest occurrence first."""
        return (
            db.query(Task)
            .options(selectinload(Task.assignees))
            .filter(Task.recurring_group_id == group_id)
            .order_by(Task.recurring_occurrence.asc(), Task.id.asc())
            .all()
        )

    @staticmethod
    def update_task(db: Session, task_id: int, task_data: "TaskUpdate") -> Task | None:
        """Update a task. Sent recurrence settings replace the whole rule."""
        task = TaskService.get_task(db, task_id)
        if not task:
            return None

        fields_set = task_data.model_fields_set
        update_data = task_data.model_dump(
            exclude_unset=True,
            exclude={"recurring_settings", "recurring_pattern", "assigned_people"},
        )
        if "category_id" in update_data:
            TaskService._ensure_category(db, update_data["category_id"])

        for key, value in update_data.items():
            setattr(task, key, value)

        if "recurring_settings" in fields_set:
            for key, value in rule_columns(parse_recurrence_settings(task_data.recurring_settings)).items():
                setattr(task, key, value)
        elif "recurring_pattern" in fields_set:
            pattern = task_data.recurring_pattern
            task.recurring_pattern = pattern.value if pattern is not None else None

        if task_data.assigned_people is not None:
            task.assignees = TaskService._get_people_by_ids(db, task_data.assigned_people)

        db.commit()
        db.refresh(task)
        logger.info("Task updated: task_id=%s fields=%s", task.id, sorted(fields_set))
        return task

    @staticmethod
    def _advance_series(db: Session, task: Task, now: datetime) -> Task | None:
        """Hand the series of ``task`` on to its successor, at most once per task.

        ``recurrence_finalized`` is switched with a compare-and-set, so of two
        concurrent triggers for the same task only one gets to materialize.
        """
        claimed = (
            db.query(Task)
            .filter(Task.id == task.id, Task.recurrence_finalized.is_(False))
            .update({Task.recurrence_finalized: True}, synchronize_session=False)
        )
        if not claimed:
            logger.info("Series of task_id=%s already advanced, skipping", task.id)
            return None
        return OccurrenceMaterializer(db).materialize_next(task, now)

    @staticmethod
    def complete_task(db: Session, task_id: int, now: datetime | None = None) -> TaskTransition | None:
        """Mark a task completed and materialize the next occurrence of its series.

        Both happen in one transaction: if the successor cannot be created, the
        task stays uncompleted and the error propagates.
        """
        task = TaskService.get_task(db, task_id)
        if not task:
            return None
        now = now or get_current_time()

        with transaction(db):
            # The loaded row keeps its pre-mutation values (no session sync)
            changed = (
                db.query(Task)
                .filter(Task.id == task_id, Task.completed.is_(False), Task.deleted.is_(False))
                .update(
                    {Task.completed: True, Task.completed_at: now, Task.updated_at: now},
                    synchronize_session=False,
                )
            )
            successor = None
            if changed and task.is_recurring:
                successor = TaskService._advance_series(db, task, now)

        db.refresh(task)
        if not changed:
            logger.info("Task already completed: task_id=%s", task_id)
            return TaskTransition(task=task, changed=False)
        if successor is not None:
            db.refresh(successor)
        logger.info(
            "Task completed: task_id=%s successor_id=%s",
            task_id,
            successor.id if successor is not None else None,
        )
        return TaskTransition(task=task, successor=successor)

    @staticmethod
    def uncomplete_task(db: Session, task_id: int) -> Task | None:
        """Revert task completion.

        An already materialized successor is kept, and completing the task again
        does not create a second one.
        """
        task = TaskService.get_task(db, task_id)
        if not task:
            return None
        task.completed = False
        task.completed_at = None
        db.commit()
        db.refresh(task)
        logger.info("Task uncompleted: task_id=%s", task_id)
        return task

    @staticmethod
    def delete_task(db: Session, task_id: int, now: datetime | None = None) -> TaskTransition | None:
        """Soft delete a task, materializing the next occurrence first.

        A completed recurring task has already handed its series on, so deleting
        it afterwards creates nothing new.
        """
        task = TaskService.get_task(db, task_id, include_deleted=True)
        if not task:
            return None
        now = now or get_current_time()

        with transaction(db):
            changed = (
                db.query(Task)
                .filter(Task.id == task_id, Task.deleted.is_(False))
                .update(
                    {Task.deleted: True, Task.deleted_at: now, Task.updated_at: now},
                    synchronize_session=False,
                )
            )
            successor = None
            if changed and task.is_recurring:
                successor = TaskService._advance_series(db, task, now)

        db.refresh(task)
        if not changed:
            logger.info("Task already deleted: task_id=%s", task_id)
            return TaskTransition(task=task, changed=False)
        if successor is not None:
            db.refresh(successor)
        logger.info(
            "Task deleted: task_id=%s successor_id=%s",
            task_id,
            successor.id if successor is not None else None,
        )
        return TaskTransition(task=task, successor=successor)

    @staticmethod
    def add_attachment(db: Session, task_id: int, data: "AttachmentCreate") -> TaskAttachment | None:
        """Register metadata of an already stored file on a task."""
        task = TaskService.get_task(db, task_id)
        if not task:
            return None
        attachment = TaskAttachment(task_id=task.id, uploaded_at=get_current_time(), **data.model_dump())
        db.add(attachment)
        db.commit()
        db.refresh(attachment)
        return attachment

    @staticmethod
    def get_attachments(db: Session, task_id: int) -> list[TaskAttachment] | None:
        task = TaskService.get_task(db, task_id, include_deleted=True)
        if not task:
            return None
        return list(task.attachments)
