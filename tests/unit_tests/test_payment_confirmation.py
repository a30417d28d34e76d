"""Unit tests for the booking-payment confirmation workflow.

These tests verify that a confirmation writes a booking and its payment
together or not at all, that a location is reused rather than duplicated, and
that confirming the same intent twice records it once.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import verify_token
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
from models.location import DEFAULT_LOCATION_NAME, Location
from models.payment import ConfirmPaymentRequest, Payment
from repos import payments_repo
from services.payment_confirmation_service import confirm_payment


async def _count(db_session: AsyncSession, model) -> int:
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


def _request(user_id, vehicle_id, **overrides) -> ConfirmPaymentRequest:
    data = {
        "paymentIntentId": "pi_ok",
        "userId": str(user_id),
        "vehicleId": str(vehicle_id),
        "amount": "150.00",
        "startDate": "2025-03-01",
        "endDate": "2025-03-04",
        "paymentMethod": "card",
    }
    data.update(overrides)
    return ConfirmPaymentRequest(**data)


@pytest.mark.asyncio
async def test_unsucceeded_intent_writes_nothing(db_session, payment_gateway, customer_user, vehicle):
    """Test: An intent awaiting a payment method is refused before any write."""
    payment_gateway.add_intent("pi_ok", status="requires_payment_method")

    with pytest.raises(PaymentNotSucceeded) as exc_info:
        await confirm_payment(
            db_session, payment_gateway, payload=_request(customer_user.id, vehicle.id)
        )

    assert exc_info.value.message == "Payment not successful. Status: requires_payment_method"
    assert exc_info.value.provider_status == "requires_payment_method"
    assert await _count(db_session, Booking) == 0
    assert await _count(db_session, Payment) == 0
    assert await _count(db_session, Location) == 0


@pytest.mark.asyncio
async def test_succeeded_intent_creates_booking_payment_and_default_location(
    db_session, payment_gateway, customer_user, vehicle
):
    payment_gateway.add_intent("pi_ok", amount=15000)
    user_id, vehicle_id = customer_user.id, vehicle.id

    result = await confirm_payment(db_session, payment_gateway, payload=_request(user_id, vehicle_id))

    assert result.created is True
    assert result.payment_intent.id == "pi_ok"

    locations = (await db_session.execute(select(Location))).scalars().all()
    assert [loc.name for loc in locations] == [DEFAULT_LOCATION_NAME]

    booking = (await db_session.execute(select(Booking))).scalar_one()
    assert booking.id == result.booking_id
    assert booking.user_id == user_id
    assert booking.vehicle_id == vehicle_id
    assert booking.location_id == locations[0].id
    assert booking.booking_status == BookingStatus.CONFIRMED.value
    assert booking.booking_date == date(2025, 3, 1)
    assert booking.return_date == date(2025, 3, 4)
    assert booking.total_amount == Decimal("150.00")

    payment = (await db_session.execute(select(Payment))).scalar_one()
    assert payment.id == result.payment_id
    assert payment.booking_id == booking.id
    assert payment.payment_status == "success"
    assert payment.payment_method == "stripe"
    assert payment.transaction_id == "pi_ok"
    assert payment.provider_payment_id == "pi_ok"
    assert payment.provider_metadata["payment_method"] == "card"
    assert payment.provider_metadata["provider_status"] == "succeeded"


@pytest.mark.asyncio
async def test_existing_location_is_reused(db_session, payment_gateway, customer_user, vehicle):
    """Test: Two confirmations without a locationId share one default location."""
    payment_gateway.add_intent("pi_first")
    payment_gateway.add_intent("pi_second")
    user_id, vehicle_id = customer_user.id, vehicle.id

    first = await confirm_payment(
        db_session, payment_gateway, payload=_request(user_id, vehicle_id, paymentIntentId="pi_first")
    )
    second = await confirm_payment(
        db_session, payment_gateway, payload=_request(user_id, vehicle_id, paymentIntentId="pi_second")
    )

    assert first.booking_id != second.booking_id
    assert await _count(db_session, Location) == 1
    assert await _count(db_session, Booking) == 2
    assert await _count(db_session, Payment) == 2


@pytest.mark.asyncio
async def test_named_location_and_booking_id_are_used(
    db_session, payment_gateway, customer_user, vehicle, location
):
    payment_gateway.add_intent("pi_ok")
    booking_id = uuid4()
    location_id = location.id

    result = await confirm_payment(
        db_session,
        payment_gateway,
        payload=_request(
            customer_user.id, vehicle.id, bookingId=str(booking_id), locationId=str(location_id)
        ),
    )

    assert result.booking_id == booking_id
    booking = (await db_session.execute(select(Booking))).scalar_one()
    assert booking.location_id == location_id
    assert await _count(db_session, Location) == 1


@pytest.mark.asyncio
async def test_payment_failure_rolls_back_booking_and_location(
    db_session, payment_gateway, customer_user, vehicle, monkeypatch
):
    """Test: If the payment insert fails, the booking and default location are undone."""
    payment_gateway.add_intent("pi_ok")
    request = _request(customer_user.id, vehicle.id)

    async def failing_create(session, payment):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(payments_repo, "create", failing_create)

    with pytest.raises(PersistenceFailure):
        await confirm_payment(db_session, payment_gateway, payload=request)

    assert await _count(db_session, Booking) == 0
    assert await _count(db_session, Payment) == 0
    assert await _count(db_session, Location) == 0


@pytest.mark.asyncio
async def test_repeat_confirmation_is_idempotent(db_session, payment_gateway, customer_user, vehicle):
    payment_gateway.add_intent("pi_ok")
    request = _request(customer_user.id, vehicle.id)

    first = await confirm_payment(db_session, payment_gateway, payload=request)
    second = await confirm_payment(db_session, payment_gateway, payload=request)

    assert first.created is True
    assert second.created is False
    assert second.booking_id == first.booking_id
    assert second.payment_id == first.payment_id
    assert await _count(db_session, Booking) == 1
    assert await _count(db_session, Payment) == 1


@pytest.mark.asyncio
async def test_missing_user_is_foreign_key_violation(db_session, payment_gateway, vehicle):
    payment_gateway.add_intent("pi_ok")
    missing_user = uuid4()
    request = _request(missing_user, vehicle.id)

    with pytest.raises(ForeignKeyViolation) as exc_info:
        await confirm_payment(db_session, payment_gateway, payload=request)

    assert "User" in exc_info.value.message
    assert str(missing_user) in exc_info.value.message
    assert await _count(db_session, Booking) == 0
    assert await _count(db_session, Location) == 0


@pytest.mark.asyncio
async def test_missing_vehicle_is_foreign_key_violation(db_session, payment_gateway, customer_user):
    payment_gateway.add_intent("pi_ok")
    request = _request(customer_user.id, uuid4())

    with pytest.raises(ForeignKeyViolation) as exc_info:
        await confirm_payment(db_session, payment_gateway, payload=request)

    assert "Vehicle" in exc_info.value.message
    assert await _count(db_session, Booking) == 0


@pytest.mark.asyncio
async def test_malformed_identifier(db_session, payment_gateway, vehicle):
    payment_gateway.add_intent("pi_ok")
    request = _request("not-a-uuid", vehicle.id)

    with pytest.raises(InvalidIdentifierFormat) as exc_info:
        await confirm_payment(db_session, payment_gateway, payload=request)

    assert "userId" in exc_info.value.message
    assert await _count(db_session, Booking) == 0


@pytest.mark.asyncio
async def test_provider_timeout_is_persistence_failure(db_session, payment_gateway, customer_user, vehicle):
    payment_gateway.retrieve_error = ProviderTimeoutError("timed out")
    request = _request(customer_user.id, vehicle.id)

    with pytest.raises(PersistenceFailure):
        await confirm_payment(db_session, payment_gateway, payload=request)

    assert await _count(db_session, Booking) == 0


@pytest.mark.asyncio
async def test_non_admin_cannot_confirm_for_another_user(
    db_session, payment_gateway, customer_user, other_customer, vehicle
):
    from auth.jwt import create_access_token

    payment_gateway.add_intent("pi_ok")
    token = create_access_token(
        user_id=str(customer_user.id),
        first_name=customer_user.first_name,
        last_name=customer_user.last_name,
        email=customer_user.email,
        role="user",
        secret="s",
    )
    caller = verify_token(token, "s")
    request = _request(other_customer.id, vehicle.id)

    with pytest.raises(AuthorizationError):
        await confirm_payment(db_session, payment_gateway, payload=request, caller=caller)

    assert await _count(db_session, Booking) == 0


@pytest.mark.asyncio
async def test_consumed_intent_no_longer_succeeded_is_rejected(
    db_session, payment_gateway, customer_user, vehicle
):
    """Test: Re-confirming an intent whose provider status moved on creates nothing new."""
    payment_gateway.add_intent("pi_ok")
    request = _request(customer_user.id, vehicle.id)
    await confirm_payment(db_session, payment_gateway, payload=request)

    payment_gateway.add_intent("pi_ok", status="canceled")

    with pytest.raises(PaymentNotSucceeded):
        await confirm_payment(db_session, payment_gateway, payload=request)

    assert await _count(db_session, Booking) == 1
    assert await _count(db_session, Payment) == 1


@pytest.mark.asyncio
async def test_amount_differing_from_charge_is_rejected(
    db_session, payment_gateway, customer_user, vehicle
):
    """Test: A request claiming more than the intent charged records nothing."""
    payment_gateway.add_intent("pi_ok", amount=50)
    request = _request(customer_user.id, vehicle.id, amount="5000.00")

    with pytest.raises(ValidationError) as exc_info:
        await confirm_payment(db_session, payment_gateway, payload=request)

    assert "does not match" in exc_info.value.message
    assert await _count(db_session, Booking) == 0
    assert await _count(db_session, Payment) == 0
    assert await _count(db_session, Location) == 0


@pytest.mark.asyncio
async def test_replay_by_another_user_does_not_return_first_booking(
    db_session, payment_gateway, customer_user, other_customer, vehicle, token_factory
):
    payment_gateway.add_intent("pi_ok")
    first = await confirm_payment(
        db_session, payment_gateway, payload=_request(customer_user.id, vehicle.id)
    )
    other_id = other_customer.id
    caller = verify_token(token_factory(other_customer, secret="s"), "s")

    with pytest.raises(ValidationError) as exc_info:
        await confirm_payment(
            db_session, payment_gateway, payload=_request(other_id, vehicle.id), caller=caller
        )

    assert str(first.booking_id) not in exc_info.value.message
    assert await _count(db_session, Booking) == 1
    assert await _count(db_session, Payment) == 1


@pytest.mark.asyncio
async def test_replay_for_another_vehicle_is_rejected(
    db_session, payment_gateway, customer_user, vehicle
):
    payment_gateway.add_intent("pi_ok")
    user_id = customer_user.id
    await confirm_payment(db_session, payment_gateway, payload=_request(user_id, vehicle.id))

    with pytest.raises(ValidationError):
        await confirm_payment(db_session, payment_gateway, payload=_request(user_id, uuid4()))

    assert await _count(db_session, Booking) == 1
