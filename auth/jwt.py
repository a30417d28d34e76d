"""JWT token creation and validation."""

import logging
from datetime import datetime, timedelta, UTC
from uuid import UUID

from jose import jwt, JWTError
from pydantic import ValidationError

from auth.schemas import DecodedToken

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "HS256"


def create_access_token(
    *,
    user_id: str,
    first_name: str,
    last_name: str,
    email: str,
    role: str,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
    expires_minutes: int = 60,
    now: datetime | None = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: User id, stored in the "sub" claim
        first_name: User first name
        last_name: User last name
        email: User email
        role: Role claim
        secret: Signing secret
        algorithm: Signing algorithm
        expires_minutes: Token lifetime in minutes
        now: Issue time (defaults to the current time)

    Returns:
        Encoded JWT token string
    """
    issued_at = now or datetime.now(UTC)
    expires_at = issued_at + timedelta(minutes=expires_minutes)

    payload = {
        "sub": str(user_id),
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "role": role,
        "iat": int(issued_at.timestamp()),  # JWT expects Unix timestamps
        "exp": int(expires_at.timestamp()),
    }

    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(
    token: str,
    secret: str,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    now: datetime | None = None,
) -> DecodedToken | None:
    """
    Verify a token's signature and temporal claims and decode it.

    Never raises: every failure is logged and reported as None.

    Args:
        token: JWT token string
        secret: Signing secret
        algorithm: Expected signing algorithm
        now: Reference time for the expiry check (defaults to the current time)

    Returns:
        DecodedToken if the token is valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require_exp": True, "require_iat": True, "require_sub": True},
        )
        decoded = DecodedToken(
            sub=str(UUID(payload["sub"])),
            first_name=payload["first_name"],
            last_name=payload["last_name"],
            email=payload["email"],
            role=payload["role"],
            iat=datetime.fromtimestamp(payload["iat"], UTC),
            exp=datetime.fromtimestamp(payload["exp"], UTC),
        )
    except JWTError as e:
        logger.warning("Token verification failed: %s", e)
        return None
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        logger.warning("Token payload is malformed: %s", e)
        return None

    # exp must be strictly after the reference time
    current_time = now or datetime.now(UTC)
    if decoded.exp <= current_time:
        logger.warning("Token expired at %s", decoded.exp.isoformat())
        return None

    return decoded
