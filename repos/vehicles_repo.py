"""Repository for Vehicle database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.vehicle import Vehicle


async def get_by_id(session: AsyncSession, vehicle_id: UUID) -> Vehicle | None:
    """
    Get a vehicle by ID.

    Args:
        session: Database session
        vehicle_id: Vehicle ID to fetch

    Returns:
        Vehicle if found, None otherwise
    """
    result = await session.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    return result.scalar_one_or_none()


async def list_all(session: AsyncSession, *, available_only: bool = False) -> list[Vehicle]:
    """
    List vehicles, newest first.

    Args:
        session: Database session
        available_only: If True, only vehicles currently available for rent

    Returns:
        List of vehicles
    """
    query = select(Vehicle).order_by(Vehicle.created_at.desc())
    if available_only:
        query = query.where(Vehicle.availability.is_(True))
    result = await session.execute(query)
    return [vehicle for vehicle in result.scalars().all()]


async def create(session: AsyncSession, vehicle: Vehicle) -> Vehicle:
    session.add(vehicle)
    await session.flush()
    await session.refresh(vehicle)
    return vehicle


async def save(session: AsyncSession, vehicle: Vehicle) -> Vehicle:
    await session.flush()
    await session.refresh(vehicle)
    return vehicle


async def delete(session: AsyncSession, vehicle: Vehicle) -> None:
    await session.delete(vehicle)
    await session.flush()
