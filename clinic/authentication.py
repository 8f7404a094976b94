"""
JWT authentication for the API.

Clients send ``Authorization: Bearer <token>``.  Tokens are issued by
:mod:`clinic.auth_views` and carry the ``id``, ``email`` and ``role`` of
the user.  Keeping this class in its own module avoids circular imports
when Django REST framework imports authentication classes during
initialisation.
"""
from __future__ import annotations

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt import authentication
from rest_framework_simplejwt.tokens import RefreshToken


class JWTAuthentication(authentication.JWTAuthentication):
    """Bearer JWT authentication that also refuses inactive accounts."""

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if getattr(user, 'status', 'active') != 'active':
            raise AuthenticationFailed('Account is not active', code='user_inactive')
        return user


def issue_tokens(user) -> dict:
    """Return a fresh access/refresh pair with the role claims attached."""
    refresh = RefreshToken.for_user(user)
    # for_user stringifies the id claim; clients read it as a number
    refresh['id'] = user.id
    refresh['email'] = user.email
    refresh['role'] = user.role
    return {'token': str(refresh.access_token), 'refreshToken': str(refresh)}
