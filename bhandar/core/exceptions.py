"""
DRF exception handler that always exposes an "error" key.

Clients surface response["error"] to the user, so validation errors keep
their field mapping and additionally carry the first message under "error".
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def first_message(data):
    """Return the first human-readable message in a DRF error payload"""
    if isinstance(data, dict):
        if 'detail' in data:
            return first_message(data['detail'])
        for key, value in data.items():
            message = first_message(value)
            if message:
                return message if key == 'non_field_errors' else f"{key}: {message}"
        return None
    if isinstance(data, (list, tuple)):
        for value in data:
            message = first_message(value)
            if message:
                return message
        return None
    return str(data) if data is not None else None


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        request = context.get('request')
        path = request.path if request is not None else '?'
        logger.error(f"Unexpected error in {path}: {str(exc)}", exc_info=exc)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = response.data
    if isinstance(data, dict):
        if 'error' not in data:
            data['error'] = first_message(data) or 'Request failed'
    else:
        response.data = {'error': first_message(data) or 'Request failed', 'errors': data}

    if response.status_code >= 500:
        logger.error(f"API error {response.status_code}: {response.data.get('error')}")
    return response


def validation_error_response(errors, status_code=status.HTTP_400_BAD_REQUEST):
    """Serializer or filterset errors with the first message repeated under "error" """
    return Response({**errors, 'error': first_message(errors) or 'Request failed'}, status=status_code)
