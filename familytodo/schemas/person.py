"""Pydantic schemas for Person model."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from familytodo.services.time_manager import as_utc


class PersonBase(BaseModel):
    """Base schema for a household member."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: str | None = Field(None, max_length=255, description="Optional email")
    photo_url: str | None = Field(None, max_length=512, description="Avatar URL")
    color: str | None = Field(None, pattern=r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


class PersonCreate(PersonBase):
    """Schema for creating a person."""

    pass


class PersonUpdate(BaseModel):
    """Schema for updating a person."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    photo_url: str | None = Field(None, max_length=512)
    color: str | None = Field(None, pattern=r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


class PersonResponse(PersonBase):
    """Schema returned from API."""

    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at")
    def serialize_utc(self, value: datetime) -> datetime:
        return as_utc(value)


class PersonSummary(BaseModel):
    """Lightweight schema to embed with tasks."""

    id: int
    name: str
    photo_url: str | None = None
    color: str | None = None

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "PersonBase",
    "PersonCreate",
    "PersonUpdate",
    "PersonResponse",
    "PersonSummary",
]
