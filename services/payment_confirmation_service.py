"""Booking-payment confirmation workflow.

Turns a succeeded payment intent into a confirmed Booking and its Payment.
Both rows (plus a default Location, when one has to be created) are written
in one transaction: either all of them exist afterwards or none do.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, UTC
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.roles import Role
from auth.schemas import DecodedToken
from db import transaction
from errors import (
    AuthorizationError,
    ForeignKeyViolation,
    InvalidIdentifierFormat,
    PaymentNotSucceeded,
    PersistenceFailure,
    ProviderTimeoutError,
    ValidationError,
)
from models.booking import Booking, BookingStatus
from models.location import Location
from models.payment import PAYMENT_STATUS_SUCCESS, ConfirmPaymentRequest, Payment
from repos import bookings_repo, locations_repo, payments_repo, users_repo, vehicles_repo
from services.locations_service import get_or_create_default_location
from services.payment_gateway import PROVIDER_NAME, RetrievedIntent, StripePaymentGateway, to_minor_units

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmationResult:
    booking_id: UUID
    payment_id: UUID
    payment_intent: RetrievedIntent
    created: bool  # False when the intent had already been recorded


def _parse_id(value: str, field: str) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError) as e:
        raise InvalidIdentifierFormat(f"Invalid {field} format: {value!r}") from e


async def _resolve_location(session: AsyncSession, location_id: UUID | None) -> Location:
    if location_id is None:
        return await get_or_create_default_location(session)

    location = await locations_repo.get_by_id(session, location_id)
    if location is None:
        raise ForeignKeyViolation(f"Location {location_id} does not exist")
    return location


async def _already_recorded(
    session: AsyncSession,
    intent: RetrievedIntent,
    *,
    user_id: UUID,
    vehicle_id: UUID,
) -> ConfirmationResult | None:
    """Return the recorded booking/payment for an intent, if the request matches it."""
    payment = await payments_repo.get_by_provider_payment_id(session, intent.id)
    if payment is None:
        return None

    booking = await bookings_repo.get_by_id(session, payment.booking_id)
    if booking is None or booking.user_id != user_id or booking.vehicle_id != vehicle_id:
        logger.warning(
            "Payment intent %s replayed for user %s vehicle %s but recorded for booking %s",
            intent.id,
            user_id,
            vehicle_id,
            payment.booking_id,
        )
        raise ValidationError(
            f"Payment intent {intent.id} is already recorded for a different booking"
        )

    logger.info(
        "Payment intent %s already recorded as payment %s (booking %s)",
        intent.id,
        payment.id,
        payment.booking_id,
    )
    return ConfirmationResult(
        booking_id=payment.booking_id,
        payment_id=payment.id,
        payment_intent=intent,
        created=False,
    )


async def confirm_payment(
    session: AsyncSession,
    gateway: StripePaymentGateway,
    *,
    payload: ConfirmPaymentRequest,
    caller: DecodedToken | None = None,
) -> ConfirmationResult:
    """
    Record a booking and its payment for a succeeded payment intent.

    Args:
        session: Database session
        gateway: Payment intent gateway used to verify the intent
        payload: Confirmation request
        caller: Requesting user; non-admins may only book for themselves

    Returns:
        ConfirmationResult with the booking and payment IDs

    Raises:
        PaymentNotSucceeded: If the intent is not in the succeeded state
        InvalidIdentifierFormat: If an ID in the request cannot be parsed
        AuthorizationError: If a non-admin caller confirms for another user
        ValidationError: If the amount differs from the charged amount, or the
            intent is already recorded for another user or vehicle
        ForeignKeyViolation: If the user, vehicle or location does not exist
        PersistenceFailure: If the provider timed out or the database write failed
        ProviderError: If the provider rejected the lookup
    """
    try:
        intent = await gateway.retrieve_intent(payload.paymentIntentId)
    except ProviderTimeoutError as e:
        raise PersistenceFailure(
            "Payment provider timed out while verifying the payment; please retry"
        ) from e

    if not intent.succeeded:
        logger.warning(
            "Refusing to confirm payment intent %s in status %s", intent.id, intent.status
        )
        raise PaymentNotSucceeded(intent.status)

    user_id = _parse_id(payload.userId, "userId")
    vehicle_id = _parse_id(payload.vehicleId, "vehicleId")
    booking_id = _parse_id(payload.bookingId, "bookingId") if payload.bookingId else uuid4()
    location_id = _parse_id(payload.locationId, "locationId") if payload.locationId else None

    if caller is not None and caller.role != Role.ADMIN.value and caller.user_id != user_id:
        raise AuthorizationError("Insufficient permissions")

    if intent.amount != to_minor_units(payload.amount):
        logger.warning(
            "Payment intent %s amount %s differs from requested amount %s",
            intent.id,
            intent.amount,
            payload.amount,
        )
        raise ValidationError(
            f"Amount {payload.amount} does not match the amount charged for payment intent {intent.id}"
        )

    existing = await _already_recorded(session, intent, user_id=user_id, vehicle_id=vehicle_id)
    if existing is not None:
        return existing

    try:
        async with transaction(session):
            if await users_repo.get_by_id(session, user_id) is None:
                raise ForeignKeyViolation(f"User {user_id} does not exist")
            if await vehicles_repo.get_by_id(session, vehicle_id) is None:
                raise ForeignKeyViolation(f"Vehicle {vehicle_id} does not exist")

            location = await _resolve_location(session, location_id)

            booking = await bookings_repo.create(
                session,
                Booking(
                    id=booking_id,
                    user_id=user_id,
                    vehicle_id=vehicle_id,
                    location_id=location.id,
                    booking_date=payload.startDate,
                    return_date=payload.endDate,
                    total_amount=payload.amount,
                    booking_status=BookingStatus.CONFIRMED.value,
                ),
            )

            payment = await payments_repo.create(
                session,
                Payment(
                    booking_id=booking.id,
                    amount=payload.amount,
                    payment_status=PAYMENT_STATUS_SUCCESS,
                    payment_method=PROVIDER_NAME,
                    transaction_id=intent.id,
                    provider_payment_id=intent.id,
                    provider_metadata={
                        "provider": PROVIDER_NAME,
                        "payment_intent_id": intent.id,
                        "provider_status": intent.status,
                        "amount_minor_units": intent.amount,
                        "booking_id": str(booking.id),
                        "payment_method": payload.paymentMethod,
                        "confirmed_at": datetime.now(UTC).isoformat(),
                    },
                ),
            )
            booking_id, payment_id = booking.id, payment.id
    except IntegrityError as e:
        # A concurrent confirmation of the same intent may have won the unique index
        existing = await _already_recorded(
            session, intent, user_id=user_id, vehicle_id=vehicle_id
        )
        if existing is not None:
            return existing
        logger.error("Integrity error confirming payment intent %s: %s", intent.id, e.orig)
        raise PersistenceFailure("Failed to record booking and payment") from e
    except SQLAlchemyError as e:
        logger.error("Database error confirming payment intent %s: %s", intent.id, e)
        raise PersistenceFailure("Failed to record booking and payment") from e

    logger.info(
        "Confirmed payment intent %s: booking %s, payment %s", intent.id, booking_id, payment_id
    )
    return ConfirmationResult(
        booking_id=booking_id,
        payment_id=payment_id,
        payment_intent=intent,
        created=True,
    )
