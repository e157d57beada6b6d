"""User registration service."""

import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from apps.accounts.models import KYCStatus, UserRole

from .exceptions import UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128


def validate_registration_data(*, email: str, password: str, name: str) -> None:
    """
    Check registration input against the account rules.

    Raises:
        UserRegistrationError: On the first rule that fails
    """
    try:
        validate_email((email or '').strip())
    except ValidationError:
        raise UserRegistrationError("Please enter a valid email address")

    if len(password or '') < PASSWORD_MIN_LENGTH:
        raise UserRegistrationError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    if len(password) > PASSWORD_MAX_LENGTH:
        raise UserRegistrationError(
            f"Password must be less than {PASSWORD_MAX_LENGTH} characters"
        )

    stripped = (name or '').strip()
    if not NAME_MIN_LENGTH <= len(stripped) <= NAME_MAX_LENGTH:
        raise UserRegistrationError(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    name: str,
    phone: str = ""
) -> User:
    """
    Register a new investor account.

    New accounts start with KYC status ``pending`` and role ``user``.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        name: Full name, 2-50 characters
        phone: Optional phone number

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If validation fails or the email is taken
    """
    validate_registration_data(email=email, password=password, name=name)

    email = User.objects.normalize_email(email.strip())
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("An account with this email already exists")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            name=name.strip(),
            phone=phone.strip(),
            kyc_status=KYCStatus.PENDING,
            role=UserRole.USER,
        )
    except IntegrityError as e:
        raise UserRegistrationError(f"Registration failed: {str(e)}")

    logger.info("Registered user %s", user.id)
    return user
