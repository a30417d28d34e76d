"""Pickup/return location endpoints."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import admin_role_auth, get_db
from auth.schemas import DecodedToken
from errors import DomainError
from models.location import LocationCreate, LocationResponse, LocationUpdate
from services import locations_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/locations", response_model=List[LocationResponse])
async def list_locations_endpoint(db: AsyncSession = Depends(get_db)):
    """List locations by name. Public."""
    try:
        return await locations_service.list_locations(db)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch locations")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch locations: {str(e)}",
        )


@router.get("/locations/{location_id}", response_model=LocationResponse)
async def get_location_endpoint(
    location_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a location by ID. Public.

    Raises:
        404 if the location does not exist.
    """
    try:
        return await locations_service.get_location(db, location_id=location_id)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch location %s", location_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch location: {str(e)}",
        )


@router.post("/locations", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def create_location_endpoint(
    location_data: LocationCreate,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await locations_service.create_location(db, payload=location_data)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to create location")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create location: {str(e)}",
        )


@router.put("/locations/{location_id}", response_model=LocationResponse)
async def update_location_endpoint(
    location_id: UUID,
    location_data: LocationUpdate,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await locations_service.update_location(
            db, location_id=location_id, payload=location_data
        )
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to update location %s", location_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update location: {str(e)}",
        )


@router.delete("/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location_endpoint(
    location_id: UUID,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a location.

    Raises:
        404 if the location does not exist.
        400 if bookings still reference the location.
    """
    try:
        await locations_service.delete_location(db, location_id=location_id)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to delete location %s", location_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete location: {str(e)}",
        )
