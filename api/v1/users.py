"""User management endpoints (admin only)."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import admin_role_auth, get_db
from auth.schemas import DecodedToken
from errors import DomainError
from models.user import UserCreate, UserResponse, UserUpdate
from services import users_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users", response_model=List[UserResponse])
async def list_users_endpoint(
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    List all users.

    Returns:
        List of users (password hashes are never included).
    """
    try:
        return await users_service.list_users(db)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch users")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch users: {str(e)}",
        )


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user_endpoint(
    user_id: UUID,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a user by ID.

    Raises:
        404 if the user does not exist.
    """
    try:
        return await users_service.get_user(db, user_id=user_id)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch user %s", user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch user: {str(e)}",
        )


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user_endpoint(
    user_data: UserCreate,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a user with an explicit role.

    Raises:
        400 if the email is already registered.
    """
    try:
        return await users_service.create_user(db, payload=user_data)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to create user")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create user: {str(e)}",
        )


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user_endpoint(
    user_id: UUID,
    user_data: UserUpdate,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a user. Only provided fields are changed.

    Raises:
        404 if the user does not exist.
        400 if the new email belongs to another user.
    """
    try:
        return await users_service.update_user(db, user_id=user_id, payload=user_data)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to update user %s", user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update user: {str(e)}",
        )


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_endpoint(
    user_id: UUID,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a user.

    Raises:
        404 if the user does not exist.
        400 if the user still has bookings.
    """
    try:
        await users_service.delete_user(db, user_id=user_id)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to delete user %s", user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete user: {str(e)}",
        )
