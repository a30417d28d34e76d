"""Service layer for support Ticket business logic."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from auth.roles import Role
from auth.schemas import DecodedToken
from errors import AuthorizationError, NotFoundError, ValidationError
from models.ticket import Ticket, TicketCreate, TicketDetailResponse, TicketResponse, TicketUpdate
from models.user import UserResponse
from repos import tickets_repo, users_repo

logger = logging.getLogger(__name__)

ADMIN_ONLY_FIELDS = ("status", "assigned_admin_id")


def _is_admin(caller: DecodedToken) -> bool:
    return caller.role == Role.ADMIN.value


def to_detail(row) -> TicketDetailResponse:
    ticket, user = row
    return TicketDetailResponse(
        **TicketResponse.model_validate(ticket).model_dump(),
        user=UserResponse.model_validate(user),
    )


async def _get_visible_ticket(
    session: AsyncSession, caller: DecodedToken, ticket_id: UUID
) -> Ticket:
    ticket = await tickets_repo.get_by_id(session, ticket_id)
    if ticket is None or (not _is_admin(caller) and ticket.user_id != caller.user_id):
        raise NotFoundError("Ticket not found")
    return ticket


async def create_ticket(
    session: AsyncSession,
    *,
    caller: DecodedToken,
    payload: TicketCreate,
) -> Ticket:
    """
    Open a support ticket.

    Args:
        session: Database session
        caller: Decoded token of the requesting user
        payload: Ticket creation data

    Returns:
        Created ticket, in the Open state

    Raises:
        AuthorizationError: If a non-admin opens a ticket for someone else
        NotFoundError: If the user does not exist
    """
    if not _is_admin(caller) and caller.user_id != payload.user_id:
        raise AuthorizationError("Insufficient permissions")
    if await users_repo.get_by_id(session, payload.user_id) is None:
        raise NotFoundError(f"User {payload.user_id} does not exist")

    ticket = await tickets_repo.create(
        session,
        Ticket(
            user_id=payload.user_id,
            subject=payload.subject,
            description=payload.description,
        ),
    )
    await session.commit()

    logger.info("Opened ticket %s for user %s", ticket.id, ticket.user_id)
    return ticket


async def get_ticket(
    session: AsyncSession,
    *,
    caller: DecodedToken,
    ticket_id: UUID,
) -> TicketDetailResponse:
    """
    Get a ticket with the user who opened it.

    Raises:
        NotFoundError: If the ticket does not exist or belongs to someone else
    """
    row = await tickets_repo.get_detail_by_id(session, ticket_id)
    if row is None or (not _is_admin(caller) and row[0].user_id != caller.user_id):
        raise NotFoundError("Ticket not found")
    return to_detail(row)


async def list_tickets(
    session: AsyncSession,
    *,
    caller: DecodedToken,
) -> list[TicketDetailResponse]:
    """List tickets; admins see all of them, other callers their own."""
    user_id = None if _is_admin(caller) else caller.user_id
    rows = await tickets_repo.list_details(session, user_id=user_id)
    return [to_detail(row) for row in rows]


async def update_ticket(
    session: AsyncSession,
    *,
    caller: DecodedToken,
    ticket_id: UUID,
    payload: TicketUpdate,
) -> Ticket:
    """
    Update a ticket. Only provided fields are changed.

    Owners may edit the subject and description; changing the status or the
    assigned admin is reserved for admins.

    Raises:
        NotFoundError: If the ticket does not exist or belongs to someone else
        AuthorizationError: If a non-admin changes an admin-only field
        ValidationError: If the assignee is not an admin
    """
    ticket = await _get_visible_ticket(session, caller, ticket_id)

    update_data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not _is_admin(caller) and any(field in update_data for field in ADMIN_ONLY_FIELDS):
        raise AuthorizationError("Insufficient permissions")

    if "assigned_admin_id" in update_data:
        assignee = await users_repo.get_by_id(session, update_data["assigned_admin_id"])
        if assignee is None or assignee.role != Role.ADMIN.value:
            raise ValidationError("Tickets can only be assigned to an admin")

    if "status" in update_data:
        update_data["status"] = update_data["status"].value

    for field, value in update_data.items():
        setattr(ticket, field, value)

    ticket = await tickets_repo.save(session, ticket)
    await session.commit()
    logger.info("Updated ticket %s", ticket.id)
    return ticket


async def delete_ticket(session: AsyncSession, *, ticket_id: UUID) -> None:
    """
    Delete a ticket.

    Raises:
        NotFoundError: If the ticket does not exist
    """
    ticket = await tickets_repo.get_by_id(session, ticket_id)
    if ticket is None:
        raise NotFoundError("Ticket not found")

    await tickets_repo.delete(session, ticket)
    await session.commit()
    logger.info("Deleted ticket %s", ticket_id)
