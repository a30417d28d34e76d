"""Service layer for User business logic."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from auth.passwords import hash_password_async
from auth.roles import Role
from errors import NotFoundError, ValidationError
from models.user import User, UserCreate, UserRegister, UserUpdate
from repos import bookings_repo, tickets_repo, users_repo

logger = logging.getLogger(__name__)


async def create_user(
    session: AsyncSession,
    *,
    payload: UserRegister | UserCreate,
) -> User:
    """
    Create a user with a hashed password.

    Self-registration (UserRegister) always yields the 'user' role; admins
    creating users (UserCreate) choose the role.

    Args:
        session: Database session
        payload: User creation data

    Returns:
        Created user

    Raises:
        ValidationError: If the email is already registered
    """
    email = payload.email.lower()
    if await users_repo.get_by_email(session, email) is not None:
        raise ValidationError("Email already exists")

    role = payload.role if isinstance(payload, UserCreate) else Role.USER

    user = User(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=email,
        contact_phone=payload.contact_phone,
        address=payload.address,
        password_hash=await hash_password_async(payload.password),
        role=role.value,
    )
    user = await users_repo.create(session, user)
    await session.commit()

    logger.info("Created user %s with role %s", user.id, user.role)
    return user


async def get_user(session: AsyncSession, *, user_id: UUID) -> User:
    """
    Get a user by ID.

    Raises:
        NotFoundError: If the user does not exist
    """
    user = await users_repo.get_by_id(session, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def list_users(session: AsyncSession) -> list[User]:
    return await users_repo.list_all(session)


async def update_user(
    session: AsyncSession,
    *,
    user_id: UUID,
    payload: UserUpdate,
) -> User:
    """
    Update an existing user. Only provided fields are changed.

    Raises:
        NotFoundError: If the user does not exist
        ValidationError: If the new email belongs to another user
    """
    user = await get_user(session, user_id=user_id)
    update_data = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in update_data:
        email = update_data["email"].lower()
        existing = await users_repo.get_by_email(session, email)
        if existing is not None and existing.id != user.id:
            raise ValidationError("Email already exists")
        update_data["email"] = email

    if "password" in update_data:
        user.password_hash = await hash_password_async(update_data.pop("password"))

    if "role" in update_data:
        update_data["role"] = Role(update_data["role"]).value

    for field, value in update_data.items():
        setattr(user, field, value)

    user = await users_repo.save(session, user)
    await session.commit()
    return user


async def delete_user(session: AsyncSession, *, user_id: UUID) -> None:
    """
    Delete a user.

    Raises:
        NotFoundError: If the user does not exist
        ValidationError: If bookings or support tickets still reference the user
    """
    user = await get_user(session, user_id=user_id)
    if await bookings_repo.count_referencing(session, user_id=user.id):
        raise ValidationError("User has bookings and cannot be deleted")
    if await tickets_repo.count_referencing_user(session, user.id):
        raise ValidationError("User has support tickets and cannot be deleted")

    await users_repo.delete(session, user)
    await session.commit()
    logger.info("Deleted user %s", user_id)
