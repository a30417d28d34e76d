"""Repository for User database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User


async def get_by_id(session: AsyncSession, user_id: UUID) -> User | None:
    """
    Get a user by ID.

    Args:
        session: Database session
        user_id: User ID to fetch

    Returns:
        User if found, None otherwise
    """
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_by_email(session: AsyncSession, email: str) -> User | None:
    """
    Get a user by email (case-insensitive; emails are stored lowercased).

    Args:
        session: Database session
        email: Email address

    Returns:
        User if found, None otherwise
    """
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def list_all(session: AsyncSession) -> list[User]:
    """
    List all users, newest first.

    Args:
        session: Database session

    Returns:
        List of users
    """
    result = await session.execute(select(User).order_by(User.created_at.desc()))
    return [user for user in result.scalars().all()]


async def create(session: AsyncSession, user: User) -> User:
    """
    Create a new user.

    Args:
        session: Database session
        user: User instance to create

    Returns:
        Created user
    """
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


async def save(session: AsyncSession, user: User) -> User:
    """
    Save (update) an existing user.

    Args:
        session: Database session
        user: User instance to save

    Returns:
        Saved user
    """
    await session.flush()
    await session.refresh(user)
    return user


async def delete(session: AsyncSession, user: User) -> None:
    """
    Delete a user.

    Args:
        session: Database session
        user: User instance to delete
    """
    await session.delete(user)
    await session.flush()
