"""Service layer for login and token issuance."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import create_access_token
from auth.passwords import verify_password_async
from auth.roles import Role, parse_role
from errors import ConfigurationError, ValidationError
from models.user import User
from repos import users_repo

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def token_role_for(user: User) -> Role:
    """Role written into the token; unrecognised stored roles fall back to 'user'."""
    return parse_role(user.role) or Role.USER


async def login(
    session: AsyncSession,
    *,
    email: str,
    password: str,
    secret: str | None,
    algorithm: str,
    expires_minutes: int,
) -> tuple[str, User]:
    """
    Check credentials and issue an access token.

    Args:
        session: Database session
        email: Login email
        password: Plain text password
        secret: Token signing secret
        algorithm: Token signing algorithm
        expires_minutes: Token lifetime in minutes

    Returns:
        (access_token, user)

    Raises:
        ConfigurationError: If no signing secret is configured
        ValidationError: If the email is unknown or the password is wrong
    """
    if not secret:
        raise ConfigurationError("Server configuration error")

    user = await users_repo.get_by_email(session, email)
    if user is None:
        logger.info("Login failed: unknown email")
        raise ValidationError(INVALID_CREDENTIALS)

    if not await verify_password_async(password, user.password_hash):
        logger.info("Login failed: wrong password for user %s", user.id)
        raise ValidationError(INVALID_CREDENTIALS)

    token = create_access_token(
        user_id=str(user.id),
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        role=token_role_for(user).value,
        secret=secret,
        algorithm=algorithm,
        expires_minutes=expires_minutes,
    )
    logger.info("User %s logged in", user.id)
    return token, user
