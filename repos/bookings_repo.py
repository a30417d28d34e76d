"""Repository for Booking database operations."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.booking import Booking
from models.location import Location
from models.user import User
from models.vehicle import Vehicle


def _detail_query():
    """Bookings joined with the user, vehicle and location they reference."""
    return (
        select(Booking, User, Vehicle, Location)
        .join(User, Booking.user_id == User.id)
        .join(Vehicle, Booking.vehicle_id == Vehicle.id)
        .join(Location, Booking.location_id == Location.id)
    )


async def get_by_id(session: AsyncSession, booking_id: UUID) -> Booking | None:
    """
    Get a booking by ID.

    Args:
        session: Database session
        booking_id: Booking ID to fetch

    Returns:
        Booking if found, None otherwise
    """
    result = await session.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def get_detail_by_id(
    session: AsyncSession, booking_id: UUID
) -> tuple[Booking, User, Vehicle, Location] | None:
    """
    Get a booking together with its user, vehicle and location.

    Args:
        session: Database session
        booking_id: Booking ID to fetch

    Returns:
        (booking, user, vehicle, location) if found, None otherwise
    """
    result = await session.execute(_detail_query().where(Booking.id == booking_id))
    row = result.one_or_none()
    return tuple(row) if row is not None else None


async def list_details(
    session: AsyncSession,
    *,
    user_id: UUID | None = None,
) -> list[tuple[Booking, User, Vehicle, Location]]:
    """
    List bookings with their references, newest first.

    Args:
        session: Database session
        user_id: If given, only bookings made by this user

    Returns:
        List of (booking, user, vehicle, location) rows
    """
    query = _detail_query().order_by(Booking.created_at.desc())
    if user_id is not None:
        query = query.where(Booking.user_id == user_id)
    result = await session.execute(query)
    return [tuple(row) for row in result.all()]


async def count_referencing(
    session: AsyncSession,
    *,
    user_id: UUID | None = None,
    vehicle_id: UUID | None = None,
    location_id: UUID | None = None,
) -> int:
    """Count bookings that reference the given user, vehicle or location."""
    query = select(func.count()).select_from(Booking)
    if user_id is not None:
        query = query.where(Booking.user_id == user_id)
    if vehicle_id is not None:
        query = query.where(Booking.vehicle_id == vehicle_id)
    if location_id is not None:
        query = query.where(Booking.location_id == location_id)
    result = await session.execute(query)
    return int(result.scalar_one())


async def create(session: AsyncSession, booking: Booking) -> Booking:
    """
    Create a new booking.

    Args:
        session: Database session
        booking: Booking instance to create

    Returns:
        Created booking
    """
    session.add(booking)
    await session.flush()
    await session.refresh(booking)
    return booking


async def save(session: AsyncSession, booking: Booking) -> Booking:
    await session.flush()
    await session.refresh(booking)
    return booking


async def delete(session: AsyncSession, booking: Booking) -> None:
    await session.delete(booking)
    await session.flush()
