"""Database models."""

from db import Base

# Import all models so metadata.create_all sees every table
from models.user import User
from models.vehicle import Vehicle
from models.location import Location
from models.booking import Booking
from models.payment import Payment
from models.ticket import Ticket

__all__ = [
    "Base",
    "User",
    "Vehicle",
    "Location",
    "Booking",
    "Payment",
    "Ticket",
]
