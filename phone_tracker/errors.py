"""
Error kinds raised by the tracker operations.

Every failure an operation reports is a ``TrackerError`` subclass with a
stable ``kind`` string, so callers branch on the type (or the kind) and
never on message text. Database exceptions raised by Django are
translated into these kinds at the operation boundary by
``translate_store_errors``.
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from django.db import (DatabaseError, IntegrityError, InterfaceError,
                       OperationalError)

logger = logging.getLogger(__name__)


class TrackerError(Exception):
    """
    Base class for all tracker failures.

    Attributes:
        kind: Stable machine-readable error kind
        message: Human-readable message naming the operation and device
        device_id: External identifier of the device involved, if any
        operation: Name of the operation that failed, if known
        detail: Diagnostic text from the underlying store, if any
        retryable: Whether the caller may retry the same request
        status_code: HTTP status used when the error crosses the API
    """

    kind: str = 'internal'
    retryable: bool = False
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        device_id: str | None = None,
        operation: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.message = message
        self.device_id = device_id
        self.operation = operation
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dictionary for JSON responses."""
        result: dict[str, Any] = {
            'kind': self.kind,
            'message': self.message,
            'operation': self.operation,
            'device_id': self.device_id,
            'retryable': self.retryable,
        }
        if self.detail is not None:
            result['detail'] = self.detail
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"device_id={self.device_id!r}, operation={self.operation!r})"
        )


class InvalidArgument(TrackerError):
    """Input failed validation; raised before any store access."""

    kind = 'invalid_argument'
    status_code = 400

    def __init__(self, message: str, *, field: str | None = None, **kwargs: Any) -> None:
        self.field = field
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field is not None:
            result['field'] = self.field
        return result


class NotFound(TrackerError):
    """The referenced device is not registered."""

    kind = 'not_found'
    status_code = 404


class DataIntegrityError(TrackerError):
    """Stored state violates an invariant the tracker relies on."""

    kind = 'data_integrity'
    status_code = 500


class StoreUnavailable(TrackerError):
    """The database could not be reached or did not answer in time."""

    kind = 'store_unavailable'
    retryable = True
    status_code = 503


@contextmanager
def translate_store_errors(operation: str, device_id: str) -> Iterator[None]:
    """
    Re-raise database exceptions from the wrapped block as tracker errors.

    Tracker errors raised inside the block pass through unchanged. The
    original database exception is kept as ``__cause__`` and its text is
    exposed only as ``detail``.

    Args:
        operation: Name of the operation being executed
        device_id: External identifier the operation was called with

    Raises:
        StoreUnavailable: For connection loss, lock or statement timeouts
        DataIntegrityError: For constraint violations and other store faults
    """
    try:
        yield
    except TrackerError:
        raise
    except (OperationalError, InterfaceError) as e:
        logger.warning("Store unavailable during %s for device %s: %s", operation, device_id, e)
        raise StoreUnavailable(
            f"Store unavailable during {operation} for device '{device_id}'",
            device_id=device_id,
            operation=operation,
            detail=str(e),
        ) from e
    except IntegrityError as e:
        logger.error("Constraint violated during %s for device %s: %s", operation, device_id, e)
        raise DataIntegrityError(
            f"Constraint violated during {operation} for device '{device_id}'",
            device_id=device_id,
            operation=operation,
            detail=str(e),
        ) from e
    except DatabaseError as e:
        logger.error("Store fault during %s for device %s: %s", operation, device_id, e)
        raise DataIntegrityError(
            f"Store fault during {operation} for device '{device_id}'",
            device_id=device_id,
            operation=operation,
            detail=str(e),
        ) from e
