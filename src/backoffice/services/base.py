"""Shared transaction handling for the service layer."""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.errors import BackofficeError, InternalError

logger = logging.getLogger(__name__)


@contextmanager
def store_operation(db: Session, operation: str, **context):
    """
    Run a unit of work against the store.

    Domain errors roll the transaction back and propagate unchanged. Any other
    store failure rolls back, is logged with ``operation`` and ``context``, and
    surfaces as a generic InternalError.
    """
    try:
        yield
    except BackofficeError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[%s] Store failure %s: %s", operation, context, e)
        raise InternalError() from e
