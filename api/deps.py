"""FastAPI dependencies for authentication, authorization and database."""

import logging

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import DEFAULT_ALGORITHM, verify_token
from auth.roles import RolePolicy, policy_allows
from auth.schemas import DecodedToken
from config import Settings
from db import get_db as get_db_session
from errors import AuthenticationError, AuthorizationError, ConfigurationError
from services.payment_gateway import StripePaymentGateway

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


async def get_db() -> AsyncSession:
    """
    Dependency to get database session.
    Reuses the get_db function from db.py.
    """
    async for session in get_db_session():
        yield session


class RoleAuthorizationGate:
    """
    Checks a request's bearer token against a role policy.

    Built once at startup with the signing secret; holds no per-request state.
    """

    def __init__(self, secret: str | None, algorithm: str = DEFAULT_ALGORITHM):
        self._secret = secret
        self._algorithm = algorithm

    def authorize(self, authorization: str | None, policy: RolePolicy) -> DecodedToken:
        """
        Authorize a request.

        Args:
            authorization: Raw Authorization header value (None if absent)
            policy: Role policy required by the route

        Returns:
            DecodedToken of the authenticated caller

        Raises:
            AuthenticationError: Missing header, missing Bearer prefix, or invalid/expired token
            ConfigurationError: No signing secret configured
            AuthorizationError: Token role does not satisfy the policy
        """
        if not authorization:
            raise AuthenticationError("Authorization header is required")

        if not authorization.startswith(BEARER_PREFIX):
            raise AuthenticationError("Bearer token is required")

        if not self._secret:
            raise ConfigurationError("Server configuration error")

        token = authorization[len(BEARER_PREFIX):]
        decoded = verify_token(token, self._secret, algorithm=self._algorithm)
        if decoded is None:
            raise AuthenticationError("Invalid or expired token")

        if not policy_allows(policy, decoded.role):
            logger.warning(
                "Insufficient permissions: user %s has role %r, policy %s",
                decoded.sub,
                decoded.role,
                policy.value,
            )
            raise AuthorizationError("Insufficient permissions")

        return decoded


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_payment_gateway(request: Request) -> StripePaymentGateway:
    """Dependency returning the payment gateway built at startup."""
    return request.app.state.payment_gateway


def require_role(policy: RolePolicy):
    """
    Build a dependency enforcing a role policy.

    The decoded token is stored on request.state.user and returned to the
    handler.

    Args:
        policy: Role policy required by the route

    Returns:
        FastAPI dependency callable
    """

    async def dependency(request: Request) -> DecodedToken:
        gate: RoleAuthorizationGate = request.app.state.auth_gate
        try:
            decoded = gate.authorize(request.headers.get("Authorization"), policy)
        except (AuthenticationError, AuthorizationError) as e:
            logger.warning(
                "Rejected %s %s: %s", request.method, request.url.path, e.message
            )
            raise
        request.state.user = decoded
        return decoded

    return dependency


admin_role_auth = require_role(RolePolicy.ADMIN)
user_role_auth = require_role(RolePolicy.USER)
customer_role_auth = require_role(RolePolicy.CUSTOMER)
both_roles_auth = require_role(RolePolicy.BOTH)
