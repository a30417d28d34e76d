"""Payment endpoints.

Admins manage payment records directly. Both roles can start a payment
intent and, once the client has completed it, confirm it into a booking.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import admin_role_auth, both_roles_auth, get_db, get_payment_gateway
from auth.schemas import DecodedToken
from errors import DomainError
from models.payment import (
    ConfirmPaymentRequest,
    ConfirmPaymentResponse,
    CreateIntentRequest,
    CreateIntentResponse,
    PaymentCreate,
    PaymentDetailResponse,
    PaymentIntentSummary,
    PaymentResponse,
    PaymentUpdate,
)
from services import payments_service
from services.payment_confirmation_service import confirm_payment
from services.payment_gateway import StripePaymentGateway

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/payments/create-intent", response_model=CreateIntentResponse)
async def create_intent_endpoint(
    intent_data: CreateIntentRequest,
    caller: DecodedToken = Depends(both_roles_auth),
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
):
    """
    Create a payment intent for the client to complete.

    The amount is in major currency units (e.g. 49.99).

    Returns:
        Client secret, amount and provider intent ID.

    Raises:
        500 if payments are not configured or the provider rejects the call.
    """
    try:
        return await payments_service.create_payment_intent(gateway, payload=intent_data)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to create payment intent")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create payment intent: {str(e)}",
        )


@router.post("/payments/confirm", response_model=ConfirmPaymentResponse)
async def confirm_payment_endpoint(
    confirm_data: ConfirmPaymentRequest,
    response: Response,
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
):
    """
    Confirm a succeeded payment intent and record the booking and payment.

    Answers 201 when the booking and payment are created, and 200 with the
    original IDs when the intent had already been confirmed.

    Raises:
        400 if the amount differs from the charged amount, or the intent is
            already recorded for another user or vehicle.
        403 if a non-admin confirms for another user.
        500 if the intent has not succeeded, an identifier is malformed,
            a referenced row is missing or the writes fail.
    """
    try:
        result = await confirm_payment(db, gateway, payload=confirm_data, caller=caller)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to confirm payment intent %s", confirm_data.paymentIntentId)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to confirm payment: {str(e)}",
        )

    response.status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
    return ConfirmPaymentResponse(
        message="Payment confirmed and booking created successfully",
        success=True,
        bookingId=result.booking_id,
        paymentId=result.payment_id,
        paymentIntent=PaymentIntentSummary(
            id=result.payment_intent.id,
            amount=result.payment_intent.amount,
            status=result.payment_intent.status,
        ),
    )


@router.get("/payments", response_model=List[PaymentDetailResponse])
async def list_payments_endpoint(
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """List payments with their booking and user."""
    try:
        return await payments_service.list_payments(db)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch payments")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch payments: {str(e)}",
        )


@router.get("/payments/{payment_id}", response_model=PaymentDetailResponse)
async def get_payment_endpoint(
    payment_id: UUID,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await payments_service.get_payment(db, payment_id=payment_id)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch payment %s", payment_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch payment: {str(e)}",
        )


@router.post("/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment_endpoint(
    payment_data: PaymentCreate,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a payment taken outside the provider flow.

    Raises:
        404 if the booking does not exist.
    """
    try:
        return await payments_service.create_payment(db, payload=payment_data)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to create payment")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create payment: {str(e)}",
        )


@router.put("/payments/{payment_id}", response_model=PaymentResponse)
async def update_payment_endpoint(
    payment_id: UUID,
    payment_data: PaymentUpdate,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await payments_service.update_payment(
            db, payment_id=payment_id, payload=payment_data
        )
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to update payment %s", payment_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update payment: {str(e)}",
        )


@router.delete("/payments/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment_endpoint(
    payment_id: UUID,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    try:
        await payments_service.delete_payment(db, payment_id=payment_id)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to delete payment %s", payment_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete payment: {str(e)}",
        )
