# app/core/logging_config.py
import logging
import sys

from app.core import config


def configure_logging(level: str = None):
    """Set up root logging once for the API process."""
    logging.basicConfig(
        level=getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # SQL echo goes through its own logger
    if config.SQL_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
