"""
JSON envelope helpers.

Every API answer is either ``{"success": true, "data": ...}`` or
``{"success": false, "error": "..."}``.
"""
from rest_framework import status
from rest_framework.response import Response


def success_response(data=None, status_code=status.HTTP_200_OK, message=None, **extra):
    payload = {'success': True}
    if data is not None:
        payload['data'] = data
    if message:
        payload['message'] = message
    payload.update(extra)
    return Response(payload, status=status_code)


def error_response(error, status_code=status.HTTP_400_BAD_REQUEST, details=None):
    payload = {'success': False, 'error': error}
    if details is not None:
        payload['details'] = details
    return Response(payload, status=status_code)


def flatten_errors(errors):
    """Turn DRF serializer errors into one readable line."""
    if isinstance(errors, str):
        return errors
    if isinstance(errors, (list, tuple)):
        return ' '.join(flatten_errors(e) for e in errors)
    if isinstance(errors, dict):
        parts = []
        for field, value in errors.items():
            message = flatten_errors(value)
            if field in ('non_field_errors', 'detail'):
                parts.append(message)
            else:
                parts.append(f"{field}: {message}")
        return '; '.join(parts)
    return str(errors)


def validation_error_response(errors):
    return error_response(flatten_errors(errors), status.HTTP_400_BAD_REQUEST, details=errors)
