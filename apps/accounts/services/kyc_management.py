"""
KYC management service.

KYC review status on the user plus the documents each user uploaded to
cloud storage.
"""

import logging
from typing import Iterable, List
from uuid import UUID

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import KYCDocument, KYCStatus
from apps.core.retry import with_retry

from .account_management import get_all_users
from .exceptions import InvalidKYCStatusError, UserNotFoundError

User = get_user_model()
logger = logging.getLogger(__name__)


def _validate_status(status: str) -> None:
    if status not in KYCStatus.values:
        raise InvalidKYCStatusError(f"Invalid KYC status: {status}")


@with_retry
@transaction.atomic
def update_user_kyc_status(*, user_id: UUID, status: str, notes: str = '') -> User:
    """
    Record the outcome of a KYC review.

    Args:
        user_id: ID of reviewed user
        status: pending, verified or rejected
        notes: Optional reviewer notes (e.g. rejection reason)

    Returns:
        Updated User instance

    Raises:
        InvalidKYCStatusError: If status is unknown
        UserNotFoundError: If user doesn't exist
    """
    _validate_status(status)

    try:
        user = User.objects.select_for_update().get(id=user_id)
    except (User.DoesNotExist, ValidationError):
        raise UserNotFoundError(f"User {user_id} not found")

    user.kyc_status = status
    user.kyc_notes = notes or ''
    user.kyc_updated_at = timezone.now()
    user.save(update_fields=['kyc_status', 'kyc_notes', 'kyc_updated_at', 'updated_at'])

    logger.info("KYC status of user %s set to %s", user_id, status)
    return user


@with_retry
@transaction.atomic
def bulk_update_kyc_status(
    *,
    user_ids: Iterable[UUID],
    status: str,
    notes: str = ''
) -> int:
    """
    Set the same KYC status on many users in one transaction.

    Returns:
        Number of users updated

    Raises:
        InvalidKYCStatusError: If status is unknown
        UserNotFoundError: If any of the ids doesn't exist (nothing is written)
    """
    _validate_status(status)

    user_ids = list(user_ids)
    users = list(User.objects.select_for_update().filter(id__in=user_ids))

    found = {str(u.id) for u in users}
    missing = [str(uid) for uid in user_ids if str(uid) not in found]
    if missing:
        raise UserNotFoundError(f"Users not found: {', '.join(missing)}")

    now = timezone.now()
    updated = User.objects.filter(id__in=user_ids).update(
        kyc_status=status,
        kyc_notes=notes or '',
        kyc_updated_at=now,
        updated_at=now,
    )

    logger.info("Bulk KYC update: %d users set to %s", updated, status)
    return updated


def get_users_by_kyc_status(*, status: str) -> QuerySet:
    """Active accounts with the given KYC status, as annotated by get_all_users."""
    _validate_status(status)
    return get_all_users().filter(kyc_status=status)


@transaction.atomic
def add_kyc_document(
    *,
    user: User,
    document_type: str,
    url: str = '',
    public_id: str = '',
    file_name: str = '',
    size: int = 0
) -> KYCDocument:
    """Register a document the user uploaded to cloud storage."""
    document = KYCDocument.objects.create(
        user=user,
        document_type=document_type,
        url=url,
        public_id=public_id,
        file_name=file_name,
        size=size,
    )
    logger.info("User %s uploaded %s document %s", user.id, document_type, document.id)
    return document


def get_kyc_documents_for_user(*, user_id: UUID) -> List[KYCDocument]:
    """
    All KYC documents of a user, newest first.

    Raises:
        UserNotFoundError: If user doesn't exist
    """
    if not User.objects.filter(id=user_id).exists():
        raise UserNotFoundError(f"User {user_id} not found")

    return list(KYCDocument.objects.filter(user_id=user_id).order_by('-uploaded_at'))


@transaction.atomic
def cleanup_invalid_kyc_documents(*, user_id: UUID) -> int:
    """
    Delete documents that can never be displayed.

    A document is unusable when it has neither a real URL (empty or a
    ``test://`` placeholder) nor a storage public id.

    Returns:
        Number of documents deleted
    """
    invalid_ids = [
        doc.id
        for doc in KYCDocument.objects.select_for_update().filter(user_id=user_id)
        if not doc.has_valid_url() and not doc.public_id
    ]

    if not invalid_ids:
        return 0

    deleted, _ = KYCDocument.objects.filter(id__in=invalid_ids).delete()
    logger.info("Removed %d invalid KYC documents for user %s", deleted, user_id)
    return deleted
