"""Vehicle model - a rentable vehicle with its specification."""

from datetime import datetime, UTC
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base


class Vehicle(Base):
    """Vehicle ORM model."""

    __tablename__ = "vehicles"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True,
    )
    manufacturer: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    fuel_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    engine_capacity: Mapped[str | None] = mapped_column(String(50), nullable=True)
    transmission: Mapped[str | None] = mapped_column(String(50), nullable=True)
    seating_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    features: Mapped[str | None] = mapped_column(Text, nullable=True)
    rental_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    availability: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


# Pydantic schemas
class VehicleBase(BaseModel):
    """Base vehicle schema."""

    manufacturer: str = Field(min_length=1)
    model: str = Field(min_length=1)
    year: int = Field(ge=1900, le=2100)
    fuel_type: str | None = None
    engine_capacity: str | None = None
    transmission: str | None = None
    seating_capacity: int | None = Field(default=None, ge=1)
    color: str | None = None
    features: str | None = None
    rental_rate: Decimal = Field(gt=0)
    availability: bool = True


class VehicleCreate(VehicleBase):
    """Schema for creating a vehicle."""


class VehicleUpdate(BaseModel):
    """Schema for updating a vehicle. All fields are optional."""

    manufacturer: str | None = Field(default=None, min_length=1)
    model: str | None = Field(default=None, min_length=1)
    year: int | None = Field(default=None, ge=1900, le=2100)
    fuel_type: str | None = None
    engine_capacity: str | None = None
    transmission: str | None = None
    seating_capacity: int | None = Field(default=None, ge=1)
    color: str | None = None
    features: str | None = None
    rental_rate: Decimal | None = Field(default=None, gt=0)
    availability: bool | None = None


class VehicleResponse(VehicleBase):
    """Schema for vehicle response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
