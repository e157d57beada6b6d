"""Account management service."""

import logging
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, QuerySet

from apps.core.retry import with_retry

from .exceptions import LastSuperAdminError, UserNotFoundError

User = get_user_model()
logger = logging.getLogger(__name__)


def get_user_by_id(*, user_id: UUID) -> User:
    """
    Get a user by ID.

    Raises:
        UserNotFoundError: If user doesn't exist
    """
    try:
        return User.objects.get(id=user_id)
    except (User.DoesNotExist, ValidationError):
        raise UserNotFoundError(f"User {user_id} not found")


def get_all_users() -> QuerySet:
    """All active accounts, newest first, annotated with ``investment_count``."""
    return (
        User.objects
        .filter(deleted_at__isnull=True)
        .annotate(investment_count=Count('investments'))
        .order_by('-created_at')
    )


@transaction.atomic
def update_user_profile(
    *,
    user: User,
    name: Optional[str] = None,
    phone: Optional[str] = None
) -> User:
    """Update the editable profile fields of a user."""
    update_fields = ['updated_at']
    if name is not None:
        user.name = name.strip()
        update_fields.append('name')
    if phone is not None:
        user.phone = phone.strip()
        update_fields.append('phone')
    user.save(update_fields=update_fields)
    return user


@with_retry
@transaction.atomic
def delete_user(*, user_id: UUID) -> None:
    """
    Delete a user account.

    The row is anonymized rather than removed so that investment records
    and lot totals stay consistent.

    Raises:
        UserNotFoundError: If user doesn't exist
        LastSuperAdminError: If the user is the only super admin
    """
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except (User.DoesNotExist, ValidationError):
        raise UserNotFoundError(f"User {user_id} not found")

    if user.is_super_admin:
        others = (
            User.objects
            .filter(role=user.role, is_active=True)
            .exclude(id=user.id)
            .exists()
        )
        if not others:
            raise LastSuperAdminError("Cannot delete the last super admin")

    user.anonymize()
    logger.info("Deleted user %s", user_id)
