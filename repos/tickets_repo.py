"""Repository for support Ticket database operations."""

from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.ticket import Ticket
from models.user import User


async def get_by_id(session: AsyncSession, ticket_id: UUID) -> Ticket | None:
    """
    Get a ticket by ID.

    Args:
        session: Database session
        ticket_id: Ticket ID to fetch

    Returns:
        Ticket if found, None otherwise
    """
    result = await session.execute(select(Ticket).where(Ticket.id == ticket_id))
    return result.scalar_one_or_none()


async def get_detail_by_id(
    session: AsyncSession, ticket_id: UUID
) -> tuple[Ticket, User] | None:
    """Get a ticket together with the user who opened it."""
    result = await session.execute(
        select(Ticket, User).join(User, Ticket.user_id == User.id).where(Ticket.id == ticket_id)
    )
    row = result.one_or_none()
    return tuple(row) if row is not None else None


async def list_details(
    session: AsyncSession,
    *,
    user_id: UUID | None = None,
) -> list[tuple[Ticket, User]]:
    """
    List tickets with the users who opened them, newest first.

    Args:
        session: Database session
        user_id: If given, only tickets opened by this user

    Returns:
        List of (ticket, user) rows
    """
    query = (
        select(Ticket, User)
        .join(User, Ticket.user_id == User.id)
        .order_by(Ticket.created_at.desc())
    )
    if user_id is not None:
        query = query.where(Ticket.user_id == user_id)
    result = await session.execute(query)
    return [tuple(row) for row in result.all()]


async def count_referencing_user(session: AsyncSession, user_id: UUID) -> int:
    """Count tickets opened by, or assigned to, the given user."""
    result = await session.execute(
        select(func.count())
        .select_from(Ticket)
        .where(or_(Ticket.user_id == user_id, Ticket.assigned_admin_id == user_id))
    )
    return int(result.scalar_one())


async def create(session: AsyncSession, ticket: Ticket) -> Ticket:
    session.add(ticket)
    await session.flush()
    await session.refresh(ticket)
    return ticket


async def save(session: AsyncSession, ticket: Ticket) -> Ticket:
    await session.flush()
    await session.refresh(ticket)
    return ticket


async def delete(session: AsyncSession, ticket: Ticket) -> None:
    await session.delete(ticket)
    await session.flush()
