"""Payment model - money received against a booking."""

from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlalchemy import JSON, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from models.booking import BookingResponse
from models.user import UserResponse

PAYMENT_STATUS_SUCCESS = "success"


class Payment(Base):
    """Payment ORM model."""

    __tablename__ = "payments"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True,
    )
    booking_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("bookings.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    payment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # One payment row per provider intent; NULL for manually recorded payments
    provider_payment_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True, index=True
    )
    provider_metadata: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
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
class PaymentCreate(BaseModel):
    """Schema for recording a payment manually."""

    booking_id: UUID
    amount: Decimal = Field(gt=0)
    payment_status: str = "pending"
    payment_method: str | None = None
    transaction_id: str | None = None


class PaymentUpdate(BaseModel):
    """Schema for updating a payment. All fields are optional."""

    amount: Decimal | None = Field(default=None, gt=0)
    payment_status: str | None = None
    payment_method: str | None = None
    transaction_id: str | None = None


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    amount: Decimal
    payment_status: str
    payment_date: datetime
    payment_method: str | None = None
    transaction_id: str | None = None
    provider_payment_id: str | None = None
    provider_metadata: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime


class PaymentDetailResponse(PaymentResponse):
    """Payment with its booking and the booking's user."""

    booking: BookingResponse
    user: UserResponse


# Payment provider endpoints use the client's camelCase field names
class CreateIntentRequest(BaseModel):
    """Body of POST /payments/create-intent. Amount is in major currency units."""

    amount: Decimal = Field(gt=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    metadata: dict[str, str] | None = None


class CreateIntentResponse(BaseModel):
    clientSecret: str
    amount: Decimal
    id: str


class ConfirmPaymentRequest(BaseModel):
    """Body of POST /payments/confirm.

    Identifiers are kept as strings so a malformed one is reported as
    InvalidIdentifierFormat by the confirmation workflow.
    """

    paymentIntentId: str = Field(min_length=1)
    userId: str = Field(min_length=1)
    vehicleId: str = Field(min_length=1)
    bookingId: str | None = None
    locationId: str | None = None
    amount: Decimal = Field(gt=0)
    startDate: date
    endDate: date
    paymentMethod: str = Field(min_length=1)

    @field_validator("startDate", "endDate", mode="before")
    @classmethod
    def _date_part(cls, value):
        # Clients send either a date or a full ISO timestamp
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @model_validator(mode="after")
    def _check_dates(self):
        if self.endDate < self.startDate:
            raise ValueError("endDate must not be before startDate")
        return self


class PaymentIntentSummary(BaseModel):
    id: str
    amount: int
    status: str


class ConfirmPaymentResponse(BaseModel):
    message: str
    success: bool
    bookingId: UUID
    paymentId: UUID
    paymentIntent: PaymentIntentSummary
