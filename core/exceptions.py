"""
API error taxonomy and the project-wide DRF exception handler.

Domain operations raise the stock DRF exceptions for validation (400),
permission (403) and not-found (404) failures, plus Conflict (409) for
requests that clash with current state. Anything else is treated as an
unexpected failure: logged in full and answered with a generic 500.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    """The request clashes with the current state of the resource."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The request conflicts with the current state of the resource.'
    default_code = 'conflict'


def api_exception_handler(exc, context):
    """
    Translate exceptions raised inside API views into responses.

    - DRF exceptions: handled by DRF's default handler
    - Django model ValidationError (from clean()): 400 with its messages
    - Everything else: logged with request context, generic 500
    """
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, 'error_dict') else exc.messages
        exc = ValidationError(detail=detail)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    request = context.get('request')
    view = context.get('view')
    user = getattr(request, 'user', None)
    logger.error(
        f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}, "
        f"Path: {getattr(request, 'path', 'unknown')}, "
        f"User ID: {getattr(user, 'id', None)}",
        exc_info=exc
    )
    return Response(
        {'detail': 'An unexpected error occurred.'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
