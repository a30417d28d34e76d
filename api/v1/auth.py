"""Authentication endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db, get_settings
from config import Settings
from errors import DomainError
from models.user import UserRegister, UserResponse
from services import auth_service, users_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


class LoginRequest(BaseModel):
    """Request schema for login."""

    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Response schema for login."""

    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: UserRegister,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new account with the 'user' role.

    Returns:
        RegisterResponse with the created user

    Raises:
        400 if the email is already registered
    """
    try:
        user = await users_service.create_user(db, payload=request)
        return RegisterResponse(
            message="User registered successfully",
            user=UserResponse.model_validate(user),
        )
    except DomainError:
        raise
    except Exception:
        await db.rollback()
        logger.exception("Failed to register user")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register user",
        )


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Check credentials and return a signed access token.

    The token carries the user id, names, email and role, and expires after
    JWT_EXPIRES_MINUTES. Send it back as "Authorization: Bearer <token>".

    Raises:
        400 if the email or password is wrong
        500 if no signing secret is configured
    """
    try:
        token, user = await auth_service.login(
            db,
            email=request.email,
            password=request.password,
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            expires_minutes=settings.JWT_EXPIRES_MINUTES,
        )
        return LoginResponse(
            message="Login successful",
            access_token=token,
            user=UserResponse.model_validate(user),
        )
    except DomainError:
        raise
    except Exception:
        logger.exception("Failed to log in user")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to log in",
        )
