"""Support ticket model - a customer's request for help."""

from datetime import datetime, UTC
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from models.user import UserResponse


class TicketStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"

    @classmethod
    def parse(cls, value: "str | TicketStatus") -> "TicketStatus":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("_", " ")
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"status must be one of: {', '.join(m.value for m in cls)}")


class Ticket(Base):
    """Support ticket ORM model."""

    __tablename__ = "support_tickets"

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
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TicketStatus.OPEN.value
    )
    assigned_admin_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
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
class TicketCreate(BaseModel):
    """Schema for opening a ticket."""

    user_id: UUID
    subject: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)


class TicketUpdate(BaseModel):
    """Schema for updating a ticket. status and assigned_admin_id are admin-only."""

    subject: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    status: TicketStatus | None = None
    assigned_admin_id: UUID | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        if value is None:
            return None
        return TicketStatus.parse(value)


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    subject: str
    description: str
    status: str
    assigned_admin_id: UUID | None = None
    created_at: datetime
    updated_at: datetime


class TicketDetailResponse(TicketResponse):
    """Ticket with the user who opened it."""

    user: UserResponse
