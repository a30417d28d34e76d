"""Booking model - a vehicle reserved by a user for a date range."""

from datetime import date, datetime, UTC
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from models.location import LocationResponse
from models.user import UserResponse


class BookingStatus(str, Enum):
    """Lifecycle states of a booking, stored capitalized."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: "str | BookingStatus") -> "BookingStatus":
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(
            f"booking_status must be one of: {', '.join(m.value for m in cls)}"
        )


class Booking(Base):
    """Booking ORM model."""

    __tablename__ = "bookings"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    vehicle_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("vehicles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    location_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("locations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    booking_date: Mapped[date] = mapped_column(Date, nullable=False)
    return_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    booking_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING.value
    )
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
class BookingCreate(BaseModel):
    """Schema for creating a booking directly (without a payment)."""

    user_id: UUID
    vehicle_id: UUID
    location_id: UUID
    booking_date: date
    return_date: date
    total_amount: Decimal = Field(gt=0)
    booking_status: BookingStatus = BookingStatus.PENDING

    @field_validator("booking_status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return BookingStatus.parse(value)

    @model_validator(mode="after")
    def _check_dates(self):
        if self.return_date < self.booking_date:
            raise ValueError("return_date must not be before booking_date")
        return self


class BookingUpdate(BaseModel):
    """Schema for updating a booking. All fields are optional."""

    location_id: UUID | None = None
    booking_date: date | None = None
    return_date: date | None = None
    total_amount: Decimal | None = Field(default=None, gt=0)
    booking_status: BookingStatus | None = None

    @field_validator("booking_status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        if value is None:
            return None
        return BookingStatus.parse(value)


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    vehicle_id: UUID
    location_id: UUID
    booking_date: date
    return_date: date
    total_amount: Decimal
    booking_status: str
    created_at: datetime
    updated_at: datetime


class BookingVehicleInfo(BaseModel):
    """Vehicle summary embedded in booking details."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    manufacturer: str
    model: str
    year: int
    fuel_type: str | None = None
    rental_rate: Decimal
    availability: bool


class BookingDetailResponse(BookingResponse):
    """Booking with the user, vehicle and location it references."""

    user: UserResponse
    vehicle: BookingVehicleInfo
    location: LocationResponse
