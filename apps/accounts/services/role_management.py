"""
Role management service.

Handles admin role assignment and permission checks with proper
transaction safety.
"""

import logging
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from apps.accounts.models import UserRole
from apps.core.retry import with_retry

from .exceptions import (
    InsufficientPermissionsError,
    InvalidRoleError,
    LastSuperAdminError,
    UserNotFoundError,
)

User = get_user_model()
logger = logging.getLogger(__name__)

ADMIN_ROLES = (UserRole.ADMIN, UserRole.SUPER_ADMIN)

# Actions a regular admin may perform; super admins may do anything.
ADMIN_ALLOWED_ACTIONS = frozenset([
    'view_users',
    'update_user_kyc',
    'view_investments',
    'approve_investment',
    'reject_investment',
    'view_parking_lots',
    'create_parking_lot',
    'update_parking_lot',
])


def get_current_user_role(user) -> Optional[str]:
    """
    Role of the caller.

    Args:
        user: request.user (may be anonymous or None)

    Returns:
        None without an authenticated session, otherwise the stored role,
        falling back to ``user`` when it is blank.
    """
    if user is None or not user.is_authenticated:
        return None

    role = (
        User.objects
        .filter(id=user.id)
        .values_list('role', flat=True)
        .first()
    )
    return role or UserRole.USER


def check_admin_access(user) -> bool:
    """Return True if the user holds an admin or super admin role."""
    return get_current_user_role(user) in ADMIN_ROLES


def _other_super_admins_exist(*, exclude_id: UUID) -> bool:
    return (
        User.objects
        .filter(role=UserRole.SUPER_ADMIN, is_active=True)
        .exclude(id=exclude_id)
        .exists()
    )


@with_retry
@transaction.atomic
def assign_user_role(
    *,
    target_user_id: UUID,
    role: str,
    assigned_by: User
) -> User:
    """
    Assign a role to a user.

    Rules:
        - Only super admins can assign the super admin role
        - Plain users cannot assign any role
        - Only super admins can change the role of an admin or super admin
        - The last super admin cannot be demoted

    Args:
        target_user_id: ID of user whose role changes
        role: New role (user, admin, super_admin)
        assigned_by: User performing the assignment

    Returns:
        Updated User instance

    Raises:
        InvalidRoleError: If role is not a known role
        InsufficientPermissionsError: If assigner lacks permission
        UserNotFoundError: If target user doesn't exist
        LastSuperAdminError: If demoting the only super admin
    """
    if role not in UserRole.values:
        raise InvalidRoleError(f"Invalid role: {role}")

    assigner_role = get_current_user_role(assigned_by)

    if assigner_role != UserRole.SUPER_ADMIN and role == UserRole.SUPER_ADMIN:
        raise InsufficientPermissionsError(
            "Only super admins can assign super admin role"
        )

    if assigner_role not in ADMIN_ROLES:
        raise InsufficientPermissionsError(
            "Insufficient permissions to assign roles"
        )

    try:
        target = User.objects.select_for_update().get(id=target_user_id)
    except (User.DoesNotExist, ValidationError):
        raise UserNotFoundError(f"User {target_user_id} not found")

    if target.role in ADMIN_ROLES and assigner_role != UserRole.SUPER_ADMIN:
        raise InsufficientPermissionsError(
            "Only super admins can change the role of an admin"
        )

    if target.role == UserRole.SUPER_ADMIN and role != UserRole.SUPER_ADMIN:
        # Lock every super admin row so two concurrent demotions cannot
        # both see the other one as remaining.
        list(
            User.objects
            .select_for_update()
            .filter(role=UserRole.SUPER_ADMIN)
            .values_list('id', flat=True)
        )
        if not _other_super_admins_exist(exclude_id=target.id):
            raise LastSuperAdminError("Cannot demote the last super admin")

    target.role = role
    target.role_assigned_by = str(assigned_by.id)
    target.role_assigned_at = timezone.now()
    target.save(update_fields=['role', 'role_assigned_by', 'role_assigned_at', 'updated_at'])

    logger.info(
        "User %s assigned role %s to user %s",
        assigned_by.id, role, target.id
    )
    return target


@transaction.atomic
def promote_user_to_admin(*, user_id: UUID) -> User:
    """
    Give a user the admin role without assigner checks.

    Intended for trusted callers (management commands, Django admin).

    Raises:
        UserNotFoundError: If user doesn't exist
    """
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except (User.DoesNotExist, ValidationError):
        raise UserNotFoundError(f"User {user_id} not found")

    user.role = UserRole.ADMIN
    user.save(update_fields=['role', 'updated_at'])
    return user


@transaction.atomic
def revoke_admin_access(*, user_id: UUID) -> User:
    """
    Reset a user's role to ``user``.

    Raises:
        UserNotFoundError: If user doesn't exist
        LastSuperAdminError: If the user is the only super admin
    """
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except (User.DoesNotExist, ValidationError):
        raise UserNotFoundError(f"User {user_id} not found")

    if user.role == UserRole.SUPER_ADMIN and not _other_super_admins_exist(exclude_id=user.id):
        raise LastSuperAdminError("Cannot revoke access of the last super admin")

    user.role = UserRole.USER
    user.save(update_fields=['role', 'updated_at'])
    return user


def can_remove_admin(*, current_user_id: UUID, target_user_id: UUID) -> bool:
    """
    Check whether the current user may demote the target.

    Only super admins may remove admins. Demoting a super admin is
    allowed only while at least one other super admin remains.

    Args:
        current_user_id: ID of user requesting the removal
        target_user_id: ID of user to be demoted

    Returns:
        bool: True if the removal is allowed
    """
    current_role = (
        User.objects
        .filter(id=current_user_id)
        .values_list('role', flat=True)
        .first()
    )
    if current_role != UserRole.SUPER_ADMIN:
        return False

    target_role = (
        User.objects
        .filter(id=target_user_id)
        .values_list('role', flat=True)
        .first()
    )
    if target_role is None:
        return False

    if target_role != UserRole.SUPER_ADMIN:
        return True

    return _other_super_admins_exist(exclude_id=target_user_id)


def get_admin_users() -> QuerySet:
    """All users holding an admin or super admin role."""
    return User.objects.filter(role__in=ADMIN_ROLES).order_by('-created_at')


def count_admin_users() -> dict:
    """Return ``{'admins': int, 'super_admins': int}``."""
    counts = User.objects.aggregate(
        admins=Count('id', filter=Q(role=UserRole.ADMIN)),
        super_admins=Count('id', filter=Q(role=UserRole.SUPER_ADMIN)),
    )
    return {
        'admins': counts['admins'] or 0,
        'super_admins': counts['super_admins'] or 0,
    }


def validate_admin_action(
    *,
    user,
    action_type: str,
    target_user_id: Optional[UUID] = None
) -> bool:
    """
    Decide whether the user may perform an admin action.

    Super admins may do everything. Admins may not act on other admins or
    super admins and are limited to ADMIN_ALLOWED_ACTIONS. Everybody else
    is refused.

    Args:
        user: Acting user
        action_type: Action name, e.g. ``approve_investment``
        target_user_id: Optional user the action applies to

    Returns:
        bool: True if allowed
    """
    role = get_current_user_role(user)

    if role == UserRole.SUPER_ADMIN:
        return True

    if role != UserRole.ADMIN:
        return False

    if target_user_id:
        target_role = (
            User.objects
            .filter(id=target_user_id)
            .values_list('role', flat=True)
            .first()
        )
        if target_role in ADMIN_ROLES:
            return False

    return action_type in ADMIN_ALLOWED_ACTIONS
