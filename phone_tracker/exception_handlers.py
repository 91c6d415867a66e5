"""
DRF exception handler rendering tracker failures as structured errors.

Every error body has the shape ``{"error": {"kind": ..., "message": ...}}``
so clients can branch on ``kind`` instead of parsing messages.
"""
import logging
from typing import Any

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .errors import InvalidArgument, TrackerError

logger = logging.getLogger(__name__)


def _operation_name(context: dict[str, Any]) -> str | None:
    view = context.get('view')
    action = getattr(view, 'action', None)
    return getattr(view, 'procedure_names', {}).get(action, action)


def tracker_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """
    Convert exceptions raised by API views into error responses.

    ``TrackerError`` subclasses map to their own status code. DRF
    request-decoding failures become ``invalid_argument`` errors carrying
    the per-field messages. Anything else is left to DRF's default
    handler, which re-raises unknown exceptions.
    """
    if isinstance(exc, TrackerError):
        if exc.operation is None:
            exc.operation = _operation_name(context)
        return Response({'error': exc.to_dict()}, status=exc.status_code)

    if isinstance(exc, (exceptions.ValidationError, exceptions.ParseError)):
        detail = exc.detail
        error = InvalidArgument(
            "Expected a well-formed request, got invalid fields"
            if isinstance(exc, exceptions.ValidationError)
            else f"Expected a JSON request body: {detail}",
            operation=_operation_name(context),
        ).to_dict()
        if isinstance(exc, exceptions.ValidationError):
            error['fields'] = detail
        logger.debug("Rejected request for %s: %s", error['operation'], detail)
        return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)
    if response is not None:
        response.data = {
            'error': {
                'kind': getattr(exc, 'default_code', 'error'),
                'message': str(getattr(exc, 'detail', exc)),
                'operation': _operation_name(context),
                'device_id': None,
                'retryable': False,
            }
        }
    return response
