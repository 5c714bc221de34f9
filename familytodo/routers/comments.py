"""API router for comments on tasks."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from familytodo.database import get_db
from familytodo.routers.realtime import COMMENT_ADDED, COMMENT_DELETED, COMMENT_UPDATED, publish
from familytodo.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from familytodo.services.comment_service import CommentService

router = APIRouter()
logger = logging.getLogger("familytodo.comments")


def _comment_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")


def _task_not_found(task_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task with id {task_id} not found")


@router.get("/task/{task_id}", response_model=list[CommentResponse])
def list_comments(task_id: int, db: Session = Depends(get_db)) -> list[CommentResponse]:
    """List comments of a task, newest first."""
    comments = CommentService.get_comments(db, task_id)
    if comments is None:
        raise _task_not_found(task_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post("/task/{task_id}", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(task_id: int, comment: CommentCreate, db: Session = Depends(get_db)) -> CommentResponse:
    """Add a comment to a task."""
    try:
        created = CommentService.add_comment(db, task_id, comment)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    if not created:
        raise _task_not_found(task_id)
    payload = CommentResponse.model_validate(created).model_dump(mode="json")
    publish(COMMENT_ADDED, {"task_id": task_id, "comment": payload})
    return payload


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(comment_id: int, comment_update: CommentUpdate, db: Session = Depends(get_db)) -> CommentResponse:
    """Edit the text of a comment."""
    updated = CommentService.update_comment(db, comment_id, comment_update)
    if not updated:
        raise _comment_not_found()
    payload = CommentResponse.model_validate(updated).model_dump(mode="json")
    publish(COMMENT_UPDATED, {"task_id": updated.task_id, "comment": payload})
    return payload


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(comment_id: int, db: Session = Depends(get_db)) -> None:
    """Delete a comment."""
    task_id = CommentService.delete_comment(db, comment_id)
    if task_id is None:
        raise _comment_not_found()
    publish(COMMENT_DELETED, {"task_id": task_id, "comment_id": comment_id})
