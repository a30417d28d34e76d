"""Vehicle catalogue endpoints."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import admin_role_auth, get_db
from auth.schemas import DecodedToken
from errors import DomainError
from models.vehicle import VehicleCreate, VehicleResponse, VehicleUpdate
from services import vehicles_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/vehicles", response_model=List[VehicleResponse])
async def list_vehicles_endpoint(
    available: bool = Query(False, description="Only return vehicles that can be rented"),
    db: AsyncSession = Depends(get_db),
):
    """
    List vehicles. Public.

    Returns:
        List of vehicles, newest first.
    """
    try:
        return await vehicles_service.list_vehicles(db, available_only=available)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch vehicles")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch vehicles: {str(e)}",
        )


@router.get("/vehicles/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle_endpoint(
    vehicle_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a vehicle by ID. Public.

    Raises:
        404 if the vehicle does not exist.
    """
    try:
        return await vehicles_service.get_vehicle(db, vehicle_id=vehicle_id)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch vehicle %s", vehicle_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch vehicle: {str(e)}",
        )


@router.post("/vehicles", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle_endpoint(
    vehicle_data: VehicleCreate,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """Add a vehicle to the catalogue."""
    try:
        return await vehicles_service.create_vehicle(db, payload=vehicle_data)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to create vehicle")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create vehicle: {str(e)}",
        )


@router.put("/vehicles/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle_endpoint(
    vehicle_id: UUID,
    vehicle_data: VehicleUpdate,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a vehicle. Only provided fields are changed.

    Raises:
        404 if the vehicle does not exist.
    """
    try:
        return await vehicles_service.update_vehicle(db, vehicle_id=vehicle_id, payload=vehicle_data)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to update vehicle %s", vehicle_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update vehicle: {str(e)}",
        )


@router.delete("/vehicles/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle_endpoint(
    vehicle_id: UUID,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a vehicle.

    Raises:
        404 if the vehicle does not exist.
        400 if bookings still reference the vehicle.
    """
    try:
        await vehicles_service.delete_vehicle(db, vehicle_id=vehicle_id)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to delete vehicle %s", vehicle_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete vehicle: {str(e)}",
        )
