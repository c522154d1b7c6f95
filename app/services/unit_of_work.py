# app/services/unit_of_work.py
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)


def commit(db: Session, what: str):
    """Commit, or roll back and raise StorageError."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {what}: {e}", exc_info=True)
        raise StorageError(f"Failed to {what}") from e
