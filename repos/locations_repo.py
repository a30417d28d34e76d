"""Repository for Location database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.location import Location


async def get_by_id(session: AsyncSession, location_id: UUID) -> Location | None:
    """
    Get a location by ID.

    Args:
        session: Database session
        location_id: Location ID to fetch

    Returns:
        Location if found, None otherwise
    """
    result = await session.execute(select(Location).where(Location.id == location_id))
    return result.scalar_one_or_none()


async def get_any(session: AsyncSession) -> Location | None:
    """
    Get the oldest location, if any exists.

    Args:
        session: Database session

    Returns:
        A location, or None when the table is empty
    """
    result = await session.execute(
        select(Location).order_by(Location.created_at.asc(), Location.id.asc()).limit(1)
    )
    return result.scalar_one_or_none()


async def list_all(session: AsyncSession) -> list[Location]:
    """
    List locations ordered by name.

    Args:
        session: Database session

    Returns:
        List of locations
    """
    result = await session.execute(select(Location).order_by(Location.name))
    return [location for location in result.scalars().all()]


async def create(session: AsyncSession, location: Location) -> Location:
    session.add(location)
    await session.flush()
    await session.refresh(location)
    return location


async def save(session: AsyncSession, location: Location) -> Location:
    await session.flush()
    await session.refresh(location)
    return location


async def delete(session: AsyncSession, location: Location) -> None:
    await session.delete(location)
    await session.flush()
