# shared/common/permissions.py
"""
Permission Classes for Role-Based Access Control (RBAC)
"""

from typing import List
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView


class BasePermission(permissions.BasePermission):
    """Base permission class with utility methods"""

    def get_user_roles(self, request: Request) -> List[str]:
        """Get roles from user object or JWT payload"""
        if hasattr(request.user, 'roles'):
            return request.user.roles
        if hasattr(request, 'auth') and isinstance(request.auth, dict):
            return request.auth.get('roles', [])
        return []


class HasRole(BasePermission):
    """Check if user has any of the required roles"""

    required_roles: List[str] = []

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not request.user or not request.user.is_authenticated:
            return False

        return bool(set(self.required_roles) & set(self.get_user_roles(request)))


class IsOwnerOrAdmin(BasePermission):
    """Owner of the object, or an administrator"""

    owner_field: str = 'user_id'

    def has_object_permission(self, request: Request, view: APIView, obj) -> bool:
        if not request.user or not request.user.is_authenticated:
            return False

        if set(self.get_user_roles(request)) & set(Roles.ADMINS):
            return True

        owner_id = getattr(obj, self.owner_field, None)
        return str(request.user.id) == str(owner_id)


# =============================================================================
# ROLE CONSTANTS
# =============================================================================

class Roles:
    """
    Role constants issued by the identity service.
    """

    SYSTEM_ADMIN = 'system_admin'
    ADMIN = 'admin'
    RESIDENT = 'resident'

    ADMINS = [ADMIN, SYSTEM_ADMIN]


# =============================================================================
# ROLE-SPECIFIC PERMISSIONS
# =============================================================================

class IsAdmin(HasRole):
    """Hostel administrators"""
    required_roles = Roles.ADMINS
