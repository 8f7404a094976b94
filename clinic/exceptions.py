import logging

from rest_framework.exceptions import ValidationError
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception("unhandled error in %s", view.__class__.__name__ if view else 'view')
        return Response({'success': False, 'message': 'Internal server error', 'error': str(exc)}, status=500)
    # normalize response
    if isinstance(exc, ValidationError):
        return Response({'success': False, 'message': 'Validation failed', 'errors': resp.data},
                        status=resp.status_code)
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'success': False, 'message': str(detail)}, status=resp.status_code, headers=_auth_headers(resp))


def _auth_headers(resp):
    headers = {}
    for name in ('WWW-Authenticate', 'Retry-After'):
        if resp.has_header(name):
            headers[name] = resp[name]
    return headers
