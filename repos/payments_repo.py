"""Repository for Payment database operations."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.booking import Booking
from models.payment import Payment
from models.user import User


def _detail_query():
    """Payments joined with their booking and the booking's user."""
    return (
        select(Payment, Booking, User)
        .join(Booking, Payment.booking_id == Booking.id)
        .join(User, Booking.user_id == User.id)
    )


async def get_by_id(session: AsyncSession, payment_id: UUID) -> Payment | None:
    """
    Get a payment by ID.

    Args:
        session: Database session
        payment_id: Payment ID to fetch

    Returns:
        Payment if found, None otherwise
    """
    result = await session.execute(select(Payment).where(Payment.id == payment_id))
    return result.scalar_one_or_none()


async def get_by_provider_payment_id(
    session: AsyncSession, provider_payment_id: str
) -> Payment | None:
    """
    Get the payment recorded for a payment-provider intent.

    Args:
        session: Database session
        provider_payment_id: The provider's payment intent ID

    Returns:
        Payment if one was recorded, None otherwise
    """
    result = await session.execute(
        select(Payment).where(Payment.provider_payment_id == provider_payment_id)
    )
    return result.scalar_one_or_none()


async def get_detail_by_id(
    session: AsyncSession, payment_id: UUID
) -> tuple[Payment, Booking, User] | None:
    result = await session.execute(_detail_query().where(Payment.id == payment_id))
    row = result.one_or_none()
    return tuple(row) if row is not None else None


async def list_details(session: AsyncSession) -> list[tuple[Payment, Booking, User]]:
    """
    List payments with their booking and user, newest first.

    Args:
        session: Database session

    Returns:
        List of (payment, booking, user) rows
    """
    result = await session.execute(_detail_query().order_by(Payment.created_at.desc()))
    return [tuple(row) for row in result.all()]


async def count_for_booking(session: AsyncSession, booking_id: UUID) -> int:
    result = await session.execute(
        select(func.count()).select_from(Payment).where(Payment.booking_id == booking_id)
    )
    return int(result.scalar_one())


async def create(session: AsyncSession, payment: Payment) -> Payment:
    """
    Create a new payment.

    Args:
        session: Database session
        payment: Payment instance to create

    Returns:
        Created payment
    """
    session.add(payment)
    await session.flush()
    await session.refresh(payment)
    return payment


async def save(session: AsyncSession, payment: Payment) -> Payment:
    await session.flush()
    await session.refresh(payment)
    return payment


async def delete(session: AsyncSession, payment: Payment) -> None:
    await session.delete(payment)
    await session.flush()
