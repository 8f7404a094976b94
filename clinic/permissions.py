"""
Role based permission classes.

Each class lets through authenticated users whose ``role`` is in its
``roles`` set; everyone else gets 403.
"""
from rest_framework.permissions import BasePermission


class HasRole(BasePermission):
    roles: frozenset = frozenset()
    message = 'You do not have permission to perform this action'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) in self.roles)


class IsAdmin(HasRole):
    """Administrators only."""
    roles = frozenset({"admin"})


class IsAdminOrDoctor(HasRole):
    roles = frozenset({"admin", "doctor"})


class IsAdminOrNurse(HasRole):
    roles = frozenset({"admin", "nurse"})


class IsStaff(HasRole):
    """Hospital staff: admin, doctor or nurse."""
    roles = frozenset({"admin", "doctor", "nurse"})
