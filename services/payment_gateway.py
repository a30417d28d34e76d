"""Payment intent gateway backed by Stripe.

A thin adapter: marshals arguments into Stripe calls and maps Stripe failures
onto the domain error taxonomy. It holds no business rules.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable

import stripe

from errors import ConfigurationError, ProviderError, ProviderTimeoutError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "stripe"
PAYMENT_INTENT_SUCCEEDED = "succeeded"


@dataclass(frozen=True)
class CreatedIntent:
    client_secret: str
    provider_intent_id: str
    amount: int  # minor units


@dataclass(frozen=True)
class RetrievedIntent:
    id: str
    status: str
    amount: int  # minor units

    @property
    def succeeded(self) -> bool:
        return self.status == PAYMENT_INTENT_SUCCEEDED


def to_minor_units(amount: Decimal | int | float | str) -> int:
    """Convert a major-unit amount (e.g. 12.34) to minor units (1234)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> Decimal:
    return (Decimal(amount) / 100).quantize(Decimal("0.01"))


class StripePaymentGateway:
    """Creates and retrieves Stripe payment intents.

    The API key is passed on every call instead of being set on the stripe
    module, so several gateways (or tests) never share credentials.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        currency: str = "usd",
        timeout_seconds: float = 10.0,
    ):
        self._api_key = api_key
        self.currency = currency
        self.timeout_seconds = timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _call(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        if not self._api_key:
            raise ConfigurationError("Server configuration error")

        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, api_key=self._api_key, **kwargs),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                "Stripe %s timed out after %.1fs", operation, self.timeout_seconds
            )
            raise ProviderTimeoutError(
                f"Payment provider did not respond to {operation} in time"
            ) from e
        except stripe.StripeError as e:
            logger.error(
                "Stripe %s failed: %s (http_status=%s, code=%s)",
                operation,
                e.user_message or str(e),
                e.http_status,
                e.code,
            )
            raise ProviderError(
                f"Payment provider rejected {operation}: {e.user_message or str(e)}"
            ) from e

    async def create_intent(
        self,
        amount_minor_units: int,
        currency: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> CreatedIntent:
        """
        Create a payment intent.

        Args:
            amount_minor_units: Amount in the currency's minor units
            currency: ISO currency code (defaults to the gateway currency)
            metadata: Free-form string metadata stored on the intent

        Returns:
            CreatedIntent with the client secret the frontend confirms against

        Raises:
            ConfigurationError: If no API key is configured
            ProviderError: If Stripe rejects the request or times out
        """
        intent = await self._call(
            "create_intent",
            stripe.PaymentIntent.create,
            amount=amount_minor_units,
            currency=(currency or self.currency).lower(),
            metadata=metadata or {},
            automatic_payment_methods={"enabled": True},
        )
        logger.info("Created payment intent %s for %s minor units", intent.id, intent.amount)
        return CreatedIntent(
            client_secret=intent.client_secret,
            provider_intent_id=intent.id,
            amount=intent.amount,
        )

    async def retrieve_intent(self, provider_intent_id: str) -> RetrievedIntent:
        """
        Retrieve a payment intent.

        Args:
            provider_intent_id: Stripe payment intent ID

        Returns:
            RetrievedIntent with the provider's lifecycle status

        Raises:
            ConfigurationError: If no API key is configured
            ProviderError: If Stripe rejects the request or times out
        """
        intent = await self._call(
            "retrieve_intent",
            stripe.PaymentIntent.retrieve,
            provider_intent_id,
        )
        return RetrievedIntent(id=intent.id, status=intent.status, amount=intent.amount)
