"""
Scheduling errors and their mapping onto API responses.
"""

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.views import exception_handler


class SeriesNotFound(ObjectDoesNotExist):
    """No session carries the requested series id."""


def api_exception_handler(exc, context):
    """
    Let service-layer errors reach clients as 400/404 responses.

    Django ValidationErrors keep their field -> messages mapping so the
    client can tell which field failed.
    """
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, 'error_dict') else exc.messages
        exc = DRFValidationError(detail=detail)
    elif isinstance(exc, ObjectDoesNotExist):
        exc = NotFound(detail=str(exc) or 'Not found.')

    return exception_handler(exc, context)
