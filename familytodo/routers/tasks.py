"""API router for household tasks."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from familytodo.database import get_db
from familytodo.routers.realtime import (
    TASK_COMPLETED,
    TASK_CREATED,
    TASK_DELETED,
    TASK_UNCOMPLETED,
    TASK_UPDATED,
    publish,
)
from familytodo.schemas.task import (
    AttachmentCreate,
    AttachmentResponse,
    TaskCreate,
    TaskDetailResponse,
    TaskResponse,
    TaskUpdate,
)
from familytodo.services.task_service import TaskService

router = APIRouter()
logger = logging.getLogger("familytodo.tasks")


def _not_found(task_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Task with id {task_id} not found",
    )


def _unprocessable(exc: Exception) -> HTTPException:
    detail = exc.errors(include_url=False) if isinstance(exc, ValidationError) else str(exc)
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


def _dump(task) -> dict:
    return TaskResponse.model_validate(task).model_dump(mode="json")


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    db: Session = Depends(get_db),
) -> TaskResponse:
    """Create a new task, optionally recurring."""
    try:
        created_task = TaskService.create_task(db, task)
    except ValueError as exc:
        # RecurrenceRuleError and ValidationError are ValueErrors too
        raise _unprocessable(exc) from exc
    logger.info("HTTP create: task_id=%s", created_task.id)
    payload = _dump(created_task)
    publish(TASK_CREATED, payload)
    return payload


@router.get("/", response_model=list[TaskResponse])
def get_tasks(
    person_id: int | None = Query(None, description="Only tasks assigned to this person"),
    category_id: int | None = Query(None, description="Only tasks of this category"),
    priority: int | None = Query(None, ge=1, le=3),
    completed: bool | None = Query(None, description="Filter by completion state"),
    include_deleted: bool = Query(False, description="Also return removed tasks"),
    db: Session = Depends(get_db),
) -> list[TaskResponse]:
    """Get tasks with optional filters."""
    tasks = TaskService.get_all_tasks(
        db,
        person_id=person_id,
        category_id=category_id,
        priority=priority,
        completed=completed,
        include_deleted=include_deleted,
    )
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/series/{group_id}", response_model=list[TaskResponse])
def get_series(
    group_id: str,
    db: Session = Depends(get_db),
) -> list[TaskResponse]:
    """Get every occurrence of a recurring series, including completed and removed ones."""
    tasks = TaskService.get_series(db, group_id)
    if not tasks:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Series {group_id} not found",
        )
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
) -> TaskResponse:
    """Get a specific task by ID."""
    task = TaskService.get_task(db, task_id)
    if not task:
        raise _not_found(task_id)
    return TaskResponse.model_validate(task)


@router.get("/{task_id}/details", response_model=TaskDetailResponse)
def get_task_details(
    task_id: int,
    db: Session = Depends(get_db),
) -> TaskDetailResponse:
    """Get a task with attachments and comments, also when it was removed."""
    task = TaskService.get_task(db, task_id, include_deleted=True)
    if not task:
        raise _not_found(task_id)
    return TaskDetailResponse.model_validate(task)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
) -> TaskResponse:
    """Update a task."""
    try:
        updated_task = TaskService.update_task(db, task_id, task_update)
    except ValueError as exc:
        raise _unprocessable(exc) from exc
    if not updated_task:
        raise _not_found(task_id)
    logger.info("HTTP update: task_id=%s", updated_task.id)
    payload = _dump(updated_task)
    publish(TASK_UPDATED, payload)
    return payload


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
) -> None:
    """Remove a task; a recurring task hands its series on first."""
    try:
        transition = TaskService.delete_task(db, task_id)
    except ValueError as exc:
        raise _unprocessable(exc) from exc
    if not transition:
        raise _not_found(task_id)
    logger.info("HTTP delete: task_id=%s changed=%s", task_id, transition.changed)
    if not transition.changed:
        return
    publish(TASK_DELETED, {"id": task_id})
    if transition.successor is not None:
        publish(TASK_CREATED, _dump(transition.successor))


@router.post("/{task_id}/complete", response_model=TaskResponse)
def complete_task(
    task_id: int,
    db: Session = Depends(get_db),
) -> TaskResponse:
    """Mark a task completed; a recurring task gets its next occurrence."""
    try:
        transition = TaskService.complete_task(db, task_id)
    except ValueError as exc:
        raise _unprocessable(exc) from exc
    if not transition:
        raise _not_found(task_id)
    logger.info("HTTP complete: task_id=%s changed=%s", task_id, transition.changed)
    payload = _dump(transition.task)
    if transition.changed:
        publish(TASK_COMPLETED, payload)
        if transition.successor is not None:
            publish(TASK_CREATED, _dump(transition.successor))
    return payload


@router.post("/{task_id}/uncomplete", response_model=TaskResponse)
def uncomplete_task(
    task_id: int,
    db: Session = Depends(get_db),
) -> TaskResponse:
    """Cancel task completion."""
    uncompleted_task = TaskService.uncomplete_task(db, task_id)
    if not uncompleted_task:
        raise _not_found(task_id)
    logger.info("HTTP uncomplete: task_id=%s", uncompleted_task.id)
    payload = _dump(uncompleted_task)
    publish(TASK_UNCOMPLETED, payload)
    return payload


@router.get("/{task_id}/attachments", response_model=list[AttachmentResponse])
def list_attachments(
    task_id: int,
    db: Session = Depends(get_db),
) -> list[AttachmentResponse]:
    """List attachment metadata of a task."""
    attachments = TaskService.get_attachments(db, task_id)
    if attachments is None:
        raise _not_found(task_id)
    return [AttachmentResponse.model_validate(item) for item in attachments]


@router.post(
    "/{task_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_attachment(
    task_id: int,
    attachment: AttachmentCreate,
    db: Session = Depends(get_db),
) -> AttachmentResponse:
    """Register an already stored file on a task."""
    created = TaskService.add_attachment(db, task_id, attachment)
    if not created:
        raise _not_found(task_id)
    logger.info("HTTP attachment: task_id=%s attachment_id=%s", task_id, created.id)
    return AttachmentResponse.model_validate(created)
