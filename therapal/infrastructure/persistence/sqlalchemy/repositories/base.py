from contextlib import contextmanager
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from .....exceptions import PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def persistence_guard(session: Session, action: str):
    """Roll back and surface any driver failure as PersistenceError."""
    try:
        yield
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database error while trying to {action}: {e}")
        raise PersistenceError(f"Failed to {action}") from e
