"""Admin listing endpoints backing the back-office tables."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import admin_role_auth, get_db
from auth.schemas import DecodedToken
from errors import DomainError
from models.booking import BookingDetailResponse
from models.payment import PaymentDetailResponse
from models.ticket import TicketDetailResponse
from models.user import UserResponse
from models.vehicle import VehicleResponse
from services import (
    bookings_service,
    payments_service,
    tickets_service,
    users_service,
    vehicles_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/admin/users", response_model=List[UserResponse])
async def admin_list_users(
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """List every user (admin only)."""
    try:
        return await users_service.list_users(db)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch users")
        raise HTTPException(status_code=500, detail=f"Failed to fetch users: {str(e)}")


@router.get("/admin/vehicles", response_model=List[VehicleResponse])
async def admin_list_vehicles(
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """List every vehicle, including unavailable ones (admin only)."""
    try:
        return await vehicles_service.list_vehicles(db)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch vehicles")
        raise HTTPException(status_code=500, detail=f"Failed to fetch vehicles: {str(e)}")


@router.get("/admin/bookings", response_model=List[BookingDetailResponse])
async def admin_list_bookings(
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """List every booking with its user, vehicle and location (admin only)."""
    try:
        return await bookings_service.list_bookings(db, caller=caller)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch bookings")
        raise HTTPException(status_code=500, detail=f"Failed to fetch bookings: {str(e)}")


@router.get("/admin/payments", response_model=List[PaymentDetailResponse])
async def admin_list_payments(
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """List every payment with its booking and user (admin only)."""
    try:
        return await payments_service.list_payments(db)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch payments")
        raise HTTPException(status_code=500, detail=f"Failed to fetch payments: {str(e)}")


@router.get("/admin/tickets", response_model=List[TicketDetailResponse])
async def admin_list_tickets(
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """List every support ticket with the user who opened it (admin only)."""
    try:
        return await tickets_service.list_tickets(db, caller=caller)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch tickets")
        raise HTTPException(status_code=500, detail=f"Failed to fetch tickets: {str(e)}")
