"""Service layer for Location business logic."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from errors import NotFoundError, ValidationError
from models.location import DEFAULT_LOCATION_NAME, Location, LocationCreate, LocationUpdate
from repos import bookings_repo, locations_repo

logger = logging.getLogger(__name__)


async def create_location(session: AsyncSession, *, payload: LocationCreate) -> Location:
    location = await locations_repo.create(session, Location(**payload.model_dump()))
    await session.commit()
    logger.info("Created location %s", location.id)
    return location


async def get_location(session: AsyncSession, *, location_id: UUID) -> Location:
    """
    Get a location by ID.

    Raises:
        NotFoundError: If the location does not exist
    """
    location = await locations_repo.get_by_id(session, location_id)
    if not location:
        raise NotFoundError("Location not found")
    return location


async def list_locations(session: AsyncSession) -> list[Location]:
    return await locations_repo.list_all(session)


async def get_or_create_default_location(session: AsyncSession) -> Location:
    """
    Return any existing location, creating a placeholder when there is none.

    Bookings require a location. Callers that do not name one get the oldest
    location on record; only an empty table produces a new row. The caller
    owns the transaction; nothing is committed here.

    Args:
        session: Database session

    Returns:
        An existing or newly created location
    """
    location = await locations_repo.get_any(session)
    if location is not None:
        return location

    location = Location(
        name=DEFAULT_LOCATION_NAME,
        address="Not specified",
        city="Not specified",
        country="Not specified",
    )
    location = await locations_repo.create(session, location)
    logger.warning("No locations on record; created default location %s", location.id)
    return location


async def update_location(
    session: AsyncSession,
    *,
    location_id: UUID,
    payload: LocationUpdate,
) -> Location:
    location = await get_location(session, location_id=location_id)

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(location, field, value)

    location = await locations_repo.save(session, location)
    await session.commit()
    return location


async def delete_location(session: AsyncSession, *, location_id: UUID) -> None:
    """
    Delete a location.

    Raises:
        NotFoundError: If the location does not exist
        ValidationError: If bookings still reference the location
    """
    location = await get_location(session, location_id=location_id)
    if await bookings_repo.count_referencing(session, location_id=location.id):
        raise ValidationError("Location has bookings and cannot be deleted")

    await locations_repo.delete(session, location)
    await session.commit()
    logger.info("Deleted location %s", location_id)
