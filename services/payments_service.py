"""Service layer for Payment business logic."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from errors import NotFoundError
from models.booking import BookingResponse
from models.payment import (
    CreateIntentRequest,
    CreateIntentResponse,
    Payment,
    PaymentCreate,
    PaymentDetailResponse,
    PaymentResponse,
    PaymentUpdate,
)
from models.user import UserResponse
from repos import bookings_repo, payments_repo
from services.payment_gateway import StripePaymentGateway, from_minor_units, to_minor_units

logger = logging.getLogger(__name__)


def to_detail(row) -> PaymentDetailResponse:
    """Map a (payment, booking, user) row to its response schema."""
    payment, booking, user = row
    return PaymentDetailResponse(
        **PaymentResponse.model_validate(payment).model_dump(),
        booking=BookingResponse.model_validate(booking),
        user=UserResponse.model_validate(user),
    )


async def create_payment_intent(
    gateway: StripePaymentGateway,
    *,
    payload: CreateIntentRequest,
) -> CreateIntentResponse:
    """
    Create a provider payment intent for the frontend to confirm.

    Args:
        gateway: Payment intent gateway
        payload: Amount (major units), optional currency and metadata

    Returns:
        CreateIntentResponse with the client secret and intent ID
    """
    intent = await gateway.create_intent(
        to_minor_units(payload.amount),
        currency=payload.currency,
        metadata=payload.metadata,
    )
    return CreateIntentResponse(
        clientSecret=intent.client_secret,
        amount=from_minor_units(intent.amount),
        id=intent.provider_intent_id,
    )


async def create_payment(session: AsyncSession, *, payload: PaymentCreate) -> Payment:
    """
    Record a payment manually (e.g. cash at the counter).

    Raises:
        NotFoundError: If the booking does not exist
    """
    if await bookings_repo.get_by_id(session, payload.booking_id) is None:
        raise NotFoundError(f"Booking {payload.booking_id} does not exist")

    payment = await payments_repo.create(session, Payment(**payload.model_dump()))
    await session.commit()
    logger.info("Recorded payment %s for booking %s", payment.id, payment.booking_id)
    return payment


async def get_payment(session: AsyncSession, *, payment_id: UUID) -> PaymentDetailResponse:
    row = await payments_repo.get_detail_by_id(session, payment_id)
    if row is None:
        raise NotFoundError("Payment not found")
    return to_detail(row)


async def list_payments(session: AsyncSession) -> list[PaymentDetailResponse]:
    return [to_detail(row) for row in await payments_repo.list_details(session)]


async def update_payment(
    session: AsyncSession,
    *,
    payment_id: UUID,
    payload: PaymentUpdate,
) -> Payment:
    payment = await payments_repo.get_by_id(session, payment_id)
    if payment is None:
        raise NotFoundError("Payment not found")

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(payment, field, value)

    payment = await payments_repo.save(session, payment)
    await session.commit()
    return payment


async def delete_payment(session: AsyncSession, *, payment_id: UUID) -> None:
    payment = await payments_repo.get_by_id(session, payment_id)
    if payment is None:
        raise NotFoundError("Payment not found")

    await payments_repo.delete(session, payment)
    await session.commit()
    logger.info("Deleted payment %s", payment_id)
