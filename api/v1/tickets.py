"""Support ticket endpoints.

Customers open and follow their own tickets; admins see every ticket and
manage status and assignment.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import admin_role_auth, both_roles_auth, get_db
from auth.schemas import DecodedToken
from errors import DomainError
from models.ticket import TicketCreate, TicketDetailResponse, TicketResponse, TicketUpdate
from services import tickets_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/tickets", response_model=List[TicketDetailResponse])
async def list_tickets_endpoint(
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
):
    """List tickets, newest first. Non-admins get their own."""
    try:
        return await tickets_service.list_tickets(db, caller=caller)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch tickets")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch tickets: {str(e)}",
        )


@router.get("/tickets/{ticket_id}", response_model=TicketDetailResponse)
async def get_ticket_endpoint(
    ticket_id: UUID,
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a ticket with the user who opened it.

    Raises:
        404 if the ticket does not exist or belongs to another user.
    """
    try:
        return await tickets_service.get_ticket(db, caller=caller, ticket_id=ticket_id)
    except DomainError:
        raise
    except Exception as e:
        logger.exception("Failed to fetch ticket %s", ticket_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch ticket: {str(e)}",
        )


@router.post("/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket_endpoint(
    ticket_data: TicketCreate,
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Open a support ticket.

    Raises:
        403 if a non-admin opens a ticket for another user.
        404 if the user does not exist.
    """
    try:
        return await tickets_service.create_ticket(db, caller=caller, payload=ticket_data)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to create ticket")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create ticket: {str(e)}",
        )


@router.put("/tickets/{ticket_id}", response_model=TicketResponse)
async def update_ticket_endpoint(
    ticket_id: UUID,
    ticket_data: TicketUpdate,
    caller: DecodedToken = Depends(both_roles_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a ticket.

    Raises:
        403 if a non-admin changes the status or assignee.
        404 if the ticket does not exist or belongs to another user.
        400 if the assignee is not an admin.
    """
    try:
        return await tickets_service.update_ticket(
            db, caller=caller, ticket_id=ticket_id, payload=ticket_data
        )
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to update ticket %s", ticket_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update ticket: {str(e)}",
        )


@router.delete("/tickets/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ticket_endpoint(
    ticket_id: UUID,
    caller: DecodedToken = Depends(admin_role_auth),
    db: AsyncSession = Depends(get_db),
):
    """Delete a ticket. Admin only."""
    try:
        await tickets_service.delete_ticket(db, ticket_id=ticket_id)
    except DomainError:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to delete ticket %s", ticket_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete ticket: {str(e)}",
        )
