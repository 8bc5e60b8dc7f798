"""
Transaction boundary for business operations

Every lifecycle operation runs inside atomic(): it commits on success and
rolls back completely on any exception. Domain errors pass through
unchanged; stale item versions become a retryable conflict; anything else
is logged with its traceback and surfaced as a generic integrity failure.
"""

from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from custody import db
from custody.buisness.lifecycle.errors import (
    LifecycleDomainError,
    ConcurrentModificationError,
    LifecycleIntegrityError,
)
from custody.utils.logger import get_logger

logger = get_logger("custody.core.unit_of_work")


@contextmanager
def atomic(operation: str):
    """
    Run a block as one transaction.

    Args:
        operation: Name used in log lines, e.g. "inward.create"

    Raises:
        LifecycleDomainError: Re-raised after rollback
        ConcurrentModificationError: A versioned row was changed by someone else
        LifecycleIntegrityError: Any other failure (root cause is logged)
    """
    try:
        yield db.session
        db.session.commit()
    except LifecycleDomainError as e:
        db.session.rollback()
        logger.info(f"{operation} rejected: {e.kind}: {e.message}")
        raise
    except StaleDataError as e:
        db.session.rollback()
        logger.warning(f"{operation} hit a concurrent modification: {e}")
        raise ConcurrentModificationError(
            "The item was modified by another request. Reload and try again."
        ) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception(f"{operation} failed with a database error")
        raise LifecycleIntegrityError() from e
    except Exception as e:
        db.session.rollback()
        logger.exception(f"{operation} failed unexpectedly")
        raise LifecycleIntegrityError() from e
