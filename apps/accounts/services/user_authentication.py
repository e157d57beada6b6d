"""Email and password login for investors and admins."""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from .exceptions import InactiveAccountError, InvalidCredentialsError

User = get_user_model()
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check credentials and stamp ``last_login``.

    Emails match case-insensitively. Anonymized (deleted) accounts are
    reported as invalid credentials, deactivated ones as inactive.

    Returns:
        Authenticated User instance

    Raises:
        InvalidCredentialsError: Unknown email, wrong password or deleted account
        InactiveAccountError: Password matched but the account is deactivated
    """
    normalized = (email or '').strip()

    user = (
        User.objects
        .select_for_update()
        .filter(email__iexact=normalized, deleted_at__isnull=True)
        .first()
    )

    if user is None or not user.check_password(password):
        logger.info("Failed login for %s", normalized)
        raise InvalidCredentialsError(INVALID_CREDENTIALS)

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    logger.info("User %s logged in", user.id)
    return user
