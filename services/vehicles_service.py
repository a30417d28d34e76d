"""Service layer for Vehicle business logic."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from errors import NotFoundError, ValidationError
from models.vehicle import Vehicle, VehicleCreate, VehicleUpdate
from repos import bookings_repo, vehicles_repo

logger = logging.getLogger(__name__)


async def create_vehicle(session: AsyncSession, *, payload: VehicleCreate) -> Vehicle:
    """
    Create a new vehicle.

    Args:
        session: Database session
        payload: Vehicle creation data

    Returns:
        Created vehicle
    """
    vehicle = Vehicle(**payload.model_dump())
    vehicle = await vehicles_repo.create(session, vehicle)
    await session.commit()
    logger.info("Created vehicle %s", vehicle.id)
    return vehicle


async def get_vehicle(session: AsyncSession, *, vehicle_id: UUID) -> Vehicle:
    """
    Get a vehicle by ID.

    Raises:
        NotFoundError: If the vehicle does not exist
    """
    vehicle = await vehicles_repo.get_by_id(session, vehicle_id)
    if not vehicle:
        raise NotFoundError("Vehicle not found")
    return vehicle


async def list_vehicles(session: AsyncSession, *, available_only: bool = False) -> list[Vehicle]:
    return await vehicles_repo.list_all(session, available_only=available_only)


async def update_vehicle(
    session: AsyncSession,
    *,
    vehicle_id: UUID,
    payload: VehicleUpdate,
) -> Vehicle:
    """Update a vehicle. Only provided fields are changed."""
    vehicle = await get_vehicle(session, vehicle_id=vehicle_id)

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(vehicle, field, value)

    vehicle = await vehicles_repo.save(session, vehicle)
    await session.commit()
    return vehicle


async def delete_vehicle(session: AsyncSession, *, vehicle_id: UUID) -> None:
    """
    Delete a vehicle.

    Raises:
        NotFoundError: If the vehicle does not exist
        ValidationError: If bookings still reference the vehicle
    """
    vehicle = await get_vehicle(session, vehicle_id=vehicle_id)
    if await bookings_repo.count_referencing(session, vehicle_id=vehicle.id):
        raise ValidationError("Vehicle has bookings and cannot be deleted")

    await vehicles_repo.delete(session, vehicle)
    await session.commit()
    logger.info("Deleted vehicle %s", vehicle_id)
