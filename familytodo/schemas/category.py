"""Pydantic schemas for categories."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from familytodo.services.time_manager import as_utc


class CategoryBase(BaseModel):
    """Base category schema."""

    name: str = Field(..., min_length=1, max_length=255)
    icon: str = Field(..., min_length=1, max_length=32, description="Emoji shown next to the name")
    color: str | None = Field(None, pattern=r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
    sort_order: int = Field(0, ge=0)


class CategoryCreate(CategoryBase):
    """Schema for creating a category."""

    pass


class CategoryUpdate(BaseModel):
    """Schema for updating a category."""

    name: str | None = Field(None, min_length=1, max_length=255)
    icon: str | None = Field(None, min_length=1, max_length=32)
    color: str | None = Field(None, pattern=r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
    sort_order: int | None = Field(None, ge=0)


class CategoryResponse(CategoryBase):
    """Schema for category response."""

    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at")
    def serialize_utc(self, value: datetime) -> datetime:
        return as_utc(value)
