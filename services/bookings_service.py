"""Service layer for Booking business logic."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from auth.roles import Role
from auth.schemas import DecodedToken
from errors import AuthorizationError, NotFoundError, ValidationError
from models.booking import (
    Booking,
    BookingCreate,
    BookingDetailResponse,
    BookingResponse,
    BookingUpdate,
    BookingVehicleInfo,
)
from models.location import LocationResponse
from models.user import UserResponse
from repos import bookings_repo, locations_repo, payments_repo, users_repo, vehicles_repo

logger = logging.getLogger(__name__)


def _is_admin(caller: DecodedToken) -> bool:
    return caller.role == Role.ADMIN.value


def _ensure_can_access(caller: DecodedToken, user_id: UUID) -> None:
    """Non-admin callers may only act on their own bookings."""
    if not _is_admin(caller) and caller.user_id != user_id:
        raise AuthorizationError("Insufficient permissions")


def to_detail(row) -> BookingDetailResponse:
    """Map a (booking, user, vehicle, location) row to its response schema."""
    booking, user, vehicle, location = row
    return BookingDetailResponse(
        **BookingResponse.model_validate(booking).model_dump(),
        user=UserResponse.model_validate(user),
        vehicle=BookingVehicleInfo.model_validate(vehicle),
        location=LocationResponse.model_validate(location),
    )


async def _ensure_references_exist(
    session: AsyncSession,
    *,
    user_id: UUID | None = None,
    vehicle_id: UUID | None = None,
    location_id: UUID | None = None,
) -> None:
    if user_id is not None and await users_repo.get_by_id(session, user_id) is None:
        raise NotFoundError(f"User {user_id} does not exist")
    if vehicle_id is not None and await vehicles_repo.get_by_id(session, vehicle_id) is None:
        raise NotFoundError(f"Vehicle {vehicle_id} does not exist")
    if location_id is not None and await locations_repo.get_by_id(session, location_id) is None:
        raise NotFoundError(f"Location {location_id} does not exist")


async def create_booking(
    session: AsyncSession,
    *,
    caller: DecodedToken,
    payload: BookingCreate,
) -> Booking:
    """
    Create a booking directly, without a payment.

    Args:
        session: Database session
        caller: Decoded token of the requesting user
        payload: Booking creation data

    Returns:
        Created booking

    Raises:
        AuthorizationError: If a non-admin books on behalf of someone else
        NotFoundError: If the user, vehicle or location does not exist
    """
    _ensure_can_access(caller, payload.user_id)
    await _ensure_references_exist(
        session,
        user_id=payload.user_id,
        vehicle_id=payload.vehicle_id,
        location_id=payload.location_id,
    )

    booking = Booking(
        user_id=payload.user_id,
        vehicle_id=payload.vehicle_id,
        location_id=payload.location_id,
        booking_date=payload.booking_date,
        return_date=payload.return_date,
        total_amount=payload.total_amount,
        booking_status=payload.booking_status.value,
    )
    booking = await bookings_repo.create(session, booking)
    await session.commit()

    logger.info("Created booking %s for user %s", booking.id, booking.user_id)
    return booking


async def get_booking(
    session: AsyncSession,
    *,
    caller: DecodedToken,
    booking_id: UUID,
) -> BookingDetailResponse:
    """
    Get a booking with its user, vehicle and location.

    Raises:
        NotFoundError: If the booking does not exist or belongs to someone else
    """
    row = await bookings_repo.get_detail_by_id(session, booking_id)
    if row is None or (not _is_admin(caller) and row[0].user_id != caller.user_id):
        raise NotFoundError("Booking not found")
    return to_detail(row)


async def list_bookings(
    session: AsyncSession,
    *,
    caller: DecodedToken,
    user_id: UUID | None = None,
) -> list[BookingDetailResponse]:
    """
    List bookings.

    Admins see every booking (or one user's, when user_id is given); other
    callers only ever see their own.
    """
    if user_id is not None:
        _ensure_can_access(caller, user_id)
    elif not _is_admin(caller):
        user_id = caller.user_id

    rows = await bookings_repo.list_details(session, user_id=user_id)
    return [to_detail(row) for row in rows]


async def update_booking(
    session: AsyncSession,
    *,
    caller: DecodedToken,
    booking_id: UUID,
    payload: BookingUpdate,
) -> Booking:
    """
    Update a booking. Only provided fields are changed.

    Raises:
        NotFoundError: If the booking or the new location does not exist
        ValidationError: If the resulting date range is inverted
    """
    booking = await bookings_repo.get_by_id(session, booking_id)
    if booking is None or (not _is_admin(caller) and booking.user_id != caller.user_id):
        raise NotFoundError("Booking not found")

    update_data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "location_id" in update_data:
        await _ensure_references_exist(session, location_id=update_data["location_id"])

    booking_date = update_data.get("booking_date", booking.booking_date)
    return_date = update_data.get("return_date", booking.return_date)
    if return_date < booking_date:
        raise ValidationError("return_date must not be before booking_date")

    if "booking_status" in update_data:
        update_data["booking_status"] = update_data["booking_status"].value

    for field, value in update_data.items():
        setattr(booking, field, value)

    booking = await bookings_repo.save(session, booking)
    await session.commit()
    logger.info("Updated booking %s", booking.id)
    return booking


async def delete_booking(session: AsyncSession, *, booking_id: UUID) -> None:
    """
    Delete a booking.

    Raises:
        NotFoundError: If the booking does not exist
        ValidationError: If payments still reference the booking
    """
    booking = await bookings_repo.get_by_id(session, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    if await payments_repo.count_for_booking(session, booking.id):
        raise ValidationError("Booking has payments and cannot be deleted")

    await bookings_repo.delete(session, booking)
    await session.commit()
    logger.info("Deleted booking %s", booking_id)
