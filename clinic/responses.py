"""
Response envelope helpers.

Every API response has the shape ``{success, message?, data?, error?}``;
list endpoints nest their rows under a plural key next to a
``pagination`` block.
"""
import math

from rest_framework.response import Response


def ok(data=None, message=None, status=200):
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return Response(body, status=status)


def fail(message, status=400, error=None):
    body = {'success': False, 'message': message}
    if error:
        body['error'] = error
    return Response(body, status=status)


def not_found(what):
    return fail(f'{what} not found', status=404)


def paginate(qs, page, limit, key, fmt):
    """Slice ``qs`` for the requested page and format each row."""
    total = qs.count()
    start = (page - 1) * limit
    rows = [fmt(obj) for obj in qs[start:start + limit]]
    return {
        key: rows,
        'pagination': {'total': total, 'page': page, 'pages': math.ceil(total / limit) if limit else 0},
    }
