"""DRF exception handler that keeps every error inside the JSON envelope."""
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.views import exception_handler

from .responses import error_response, flatten_errors

logger = logging.getLogger(__name__)


def envelope_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is not None:
        details = response.data
        if isinstance(details, dict) and set(details.keys()) <= {'detail', 'code', 'messages'}:
            message = str(details.get('detail', ''))
            details = None
        else:
            message = flatten_errors(details)
        wrapped = error_response(message, response.status_code, details=details)
        # keep WWW-Authenticate and friends
        for header, value in response.items():
            wrapped[header] = value
        return wrapped

    view = context.get('view')
    view_name = getattr(view, '__name__', None) or view.__class__.__name__ if view else 'unknown'
    if isinstance(exc, DatabaseError):
        logger.error(f"Database error in {view_name}: {str(exc)}")
        return error_response('Erreur de base de données', status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.exception(f"Unhandled error in {view_name}: {str(exc)}")
    return error_response('Erreur interne du serveur', status.HTTP_500_INTERNAL_SERVER_ERROR)
