"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
import logging_config
import models  # noqa: F401  (registers tables on Base.metadata)
from api import router as api_router
from api.deps import RoleAuthorizationGate
from db import close_db, init_db
from errors import register_error_handlers
from services.payment_gateway import StripePaymentGateway


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    await init_db()
    yield
    # Shutdown
    await close_db()


def create_app(settings: config.Settings = config.settings) -> FastAPI:
    """
    Build the application.

    The auth gate and payment gateway are built here from the given settings
    and stored on app.state; request handlers never read the environment.

    Args:
        settings: Application settings

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Vehicle Rental API",
        description="Vehicle rental and booking backend",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.auth_gate = RoleAuthorizationGate(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    app.state.payment_gateway = StripePaymentGateway(
        settings.STRIPE_SECRET_KEY,
        currency=settings.STRIPE_CURRENCY,
        timeout_seconds=settings.PAYMENT_PROVIDER_TIMEOUT_SECONDS,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Include API router
    app.include_router(api_router.api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Vehicle Rental API",
            "version": "0.1.0",
        }

    return app


# Setup logging
logging_config.setup_logging(config.settings.LOG_LEVEL)

app = create_app()
