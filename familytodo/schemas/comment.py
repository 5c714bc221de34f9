"""Pydantic schemas for task comments."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

from familytodo.services.time_manager import as_utc


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("Comment text is required")
    return value


class CommentCreate(BaseModel):
    """Schema for adding a comment to a task."""

    person_id: int | None = Field(
        None,
        validation_alias=AliasChoices("person_id", "personId"),
        description="Author, if known",
    )
    comment: str = Field(..., min_length=1, description="Comment text")

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, value: str) -> str:
        return _require_text(value)


class CommentUpdate(BaseModel):
    """Schema for editing the text of a comment."""

    comment: str = Field(..., min_length=1)

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, value: str) -> str:
        return _require_text(value)


class CommentResponse(BaseModel):
    """Comment returned from the API, with the author's display fields."""

    id: int
    task_id: int
    person_id: int | None = None
    comment: str
    person_name: str | None = None
    person_photo: str | None = None
    person_color: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at")
    def serialize_utc(self, value: datetime) -> datetime:
        return as_utc(value)


__all__ = ["CommentCreate", "CommentResponse", "CommentUpdate"]
