"""Booking endpoints.

Admins and customers can both use these routes; customers only ever see and
change their own bookings.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import admin_role_auth, both_roles_auth, get_db
from auth.schemas import DecodedToken
from errors import DomainError
from models.booking import BookingCreate, BookingDetailResponse, BookingResponse, BookingUpdate
from services import bookings_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/bookings", response_model=List[BookingDetailResponse])
async def list_bookings_endpoint(
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    List bookings with their user, vehicle and location.

    Admins get every booking; other callers get their own.
    """
    try:
        return await bookings_service.list_bookings(db, caller=caller)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch bookings")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch bookings: {str(e)}",
        )


@router.get("/bookings/user/{user_id}", response_model=List[BookingDetailResponse])
async def list_user_bookings_endpoint(
    user_id: UUID,
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    List one user's bookings.

    Raises:
        403 if a non-admin asks for someone else's bookings.
    """
    try:
        return await bookings_service.list_bookings(db, caller=caller, user_id=user_id)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch bookings for user %s", user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch bookings: {str(e)}",
        )


@router.get("/bookings/{booking_id}", response_model=BookingDetailResponse)
async def get_booking_endpoint(
    booking_id: UUID,
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a booking with its user, vehicle and location.

    Raises:
        404 if the booking does not exist or belongs to another user.
    """
    try:
        return await bookings_service.get_booking(db, caller=caller, booking_id=booking_id)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch booking %s", booking_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch booking: {str(e)}",
        )


@router.post("/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a booking without going through payment.

    Raises:
        403 if a non-admin books for another user.
        404 if the user, vehicle or location does not exist.
    """
    try:
        return await bookings_service.create_booking(db, caller=caller, payload=booking_data)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to create booking")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create booking: {str(e)}",
        )


@router.put("/bookings/{booking_id}", response_model=BookingResponse)
async def update_booking_endpoint(
    booking_id: UUID,
    booking_data: BookingUpdate,
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await bookings_service.update_booking(
            db, caller=caller, booking_id=booking_id, payload=booking_data
        )
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to update booking %s", booking_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update booking: {str(e)}",
        )


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking_endpoint(
    booking_id: UUID,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a booking. Admin only.

    Raises:
        404 if the booking does not exist.
        400 if payments still reference the booking.
    """
    try:
        await bookings_service.delete_booking(db, booking_id=booking_id)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to delete booking %s", booking_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete booking: {str(e)}",
        )
