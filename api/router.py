"""Main API router that includes versioned routers."""

from fastapi import APIRouter

from api.v1 import auth, bookings, health, locations, payments, tickets, users, vehicles
from api.v1.admin import listings as admin_listings

# Main API router
api_router = APIRouter()

# Include v1 routers
v1_router = APIRouter(prefix="/v1")
v1_router.include_router(health.router, tags=["health"])
v1_router.include_router(auth.router, tags=["auth"])
v1_router.include_router(users.router, tags=["users"])
v1_router.include_router(vehicles.router, tags=["vehicles"])
v1_router.include_router(locations.router, tags=["locations"])
v1_router.include_router(bookings.router, tags=["bookings"])
v1_router.include_router(payments.router, tags=["payments"])
v1_router.include_router(tickets.router, tags=["tickets"])
v1_router.include_router(admin_listings.router, tags=["admin"])

api_router.include_router(v1_router)
