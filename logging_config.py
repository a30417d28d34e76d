"""Logging configuration for the application."""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure application logging.

    Args:
        level: Logging level name (default: INFO)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )
    # SQLAlchemy engine logging is controlled by the engine echo flag
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # Stripe's SDK logs every request at INFO
    logging.getLogger("stripe").setLevel(logging.WARNING)
