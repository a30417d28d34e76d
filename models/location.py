"""Location model - a pickup/return branch."""

from datetime import datetime, UTC
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base

DEFAULT_LOCATION_NAME = "Default Location"


class Location(Base):
    """Location ORM model."""

    __tablename__ = "locations"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )


# Pydantic schemas
class LocationBase(BaseModel):
    """Base location schema."""

    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    contact_phone: str | None = None


class LocationCreate(LocationBase):
    """Schema for creating a location."""


class LocationUpdate(BaseModel):
    """Schema for updating a location. All fields are optional."""

    name: str | None = Field(default=None, min_length=1)
    address: str | None = Field(default=None, min_length=1)
    city: str | None = Field(default=None, min_length=1)
    country: str | None = Field(default=None, min_length=1)
    contact_phone: str | None = None


class LocationResponse(LocationBase):
    """Schema for location response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
