"""
Success envelope shared by the permission and audit endpoints.
"""
from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(data=None, message=None, status=http_status.HTTP_200_OK, **extra):
    """Render ``{"success": true, "data": ..., "message"?: ...}`` plus any extra keys."""
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message
    body.update(extra)
    return Response(body, status=status)
