"""
Role-based permission classes.

Roles live on the user row (``User.role``), independent of Django's
``is_staff``/``is_superuser`` flags used by the Django admin site.

Permission Classes:
    IsAdminRole - admin or super admin
    IsSuperAdmin - super admin only
"""

from rest_framework.permissions import BasePermission

from apps.accounts.models import UserRole


class IsAdminRole(BasePermission):
    """
    Permission: User must hold the admin or super admin role.
    """

    message = 'Admin access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated
            and user.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN)
        )


class IsSuperAdmin(BasePermission):
    """
    Permission: User must be a super admin.
    """

    message = 'Super admin access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated
            and user.role == UserRole.SUPER_ADMIN
        )
