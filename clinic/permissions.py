"""
Role based permissions for front-desk staff.
"""
from rest_framework.permissions import BasePermission

STAFF_ROLES = {"reception", "doctor", "admin"}


class IsStaffRole(BasePermission):
    """Any signed-in front-desk role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated
                    and (getattr(user, "role", None) in STAFF_ROLES or user.is_superuser))


class IsAdminRole(BasePermission):
    """Allow access only to administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated
                    and (getattr(user, "role", None) == "admin" or user.is_superuser))
