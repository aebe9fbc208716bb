"""
Service error taxonomy and translation of storage failures
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from google.api_core import exceptions as gcp_exceptions
from sqlalchemy import exc as sa_exc

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for every failure the services surface"""

    status_code = 500
    error_code = "SERVER_ERROR"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ServiceError):
    """Malformed, missing or out-of-range input"""

    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message, details={"fields": fields or []})
        self.fields = fields or []


class NotFoundError(ServiceError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class DomainConflict(ServiceError):
    """Business rule violation on otherwise well-formed input"""

    status_code = 409
    error_code = "CONFLICT"


class AlreadyJoinedError(DomainConflict):
    error_code = "ALREADY_JOINED"

    def __init__(self, message: str = "Already joined this event"):
        super().__init__(message)


class PastEventError(DomainConflict):
    status_code = 400
    error_code = "PAST_EVENT"

    def __init__(self, message: str = "Cannot join past events"):
        super().__init__(message)


class UnavailableError(ServiceError):
    """Persistence layer unreachable or not ready"""

    status_code = 503
    error_code = "DATABASE_UNAVAILABLE"

    def __init__(self, message: str = "Database temporarily unavailable"):
        super().__init__(message)


_UNAVAILABLE_GCP = (
    gcp_exceptions.ServiceUnavailable,
    gcp_exceptions.DeadlineExceeded,
    gcp_exceptions.RetryError,
)


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy / Firestore failures as service errors.

    Rejected values become ValidationError, everything else UnavailableError.
    Service errors raised inside the block pass through untouched.
    """
    try:
        yield
    except ServiceError:
        raise
    except (sa_exc.OperationalError, sa_exc.DisconnectionError, sa_exc.TimeoutError) as exc:
        logger.error("Database unreachable during %s: %s", operation, exc)
        raise UnavailableError() from exc
    except (sa_exc.IntegrityError, sa_exc.DataError) as exc:
        # The store is reachable but refused the values
        logger.warning("Database rejected values during %s: %s", operation, exc.orig)
        raise ValidationError("Invalid field value") from exc
    except _UNAVAILABLE_GCP as exc:
        logger.error("Firestore unreachable during %s: %s", operation, exc)
        raise UnavailableError() from exc
    except (sa_exc.SQLAlchemyError, gcp_exceptions.GoogleAPICallError) as exc:
        logger.exception("Storage failure during %s", operation)
        raise UnavailableError("Database operation failed") from exc
