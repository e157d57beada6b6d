"""Payment confirmation and lease acceptance."""

import logging
from decimal import Decimal
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.core.retry import with_retry
from apps.investments.models import ApprovalStatus, Investment, PaymentStatus

from .exceptions import InvalidInvestmentStateError
from .lifecycle import lock_investment

User = get_user_model()
logger = logging.getLogger(__name__)


@with_retry
@transaction.atomic
def confirm_payment(
    *,
    investment_id: UUID,
    payment_status: str,
    confirmed_by: User
) -> Investment:
    """
    Record the outcome of an admin's payment check.

    On success the investment waits for approval and, unless an admin
    created it (its amount was counted then), the user's running total
    grows by the amount.

    Args:
        investment_id: ID of investment
        payment_status: success or failed
        confirmed_by: Admin checking the payment

    Returns:
        Updated Investment instance

    Raises:
        InvestmentNotFoundError: If investment doesn't exist
        InvalidInvestmentStateError: If the status is not success/failed,
            the payment was already confirmed or the investment is decided
    """
    if payment_status not in (PaymentStatus.SUCCESS, PaymentStatus.FAILED):
        raise InvalidInvestmentStateError("Payment status must be 'success' or 'failed'")

    investment = lock_investment(investment_id=investment_id)

    if investment.admin_approval_status != ApprovalStatus.PENDING:
        raise InvalidInvestmentStateError(
            f"Cannot change payment once the investment is {investment.admin_approval_status}"
        )
    if investment.payment_status == PaymentStatus.SUCCESS:
        raise InvalidInvestmentStateError("Payment is already confirmed")

    investment.payment_status = payment_status

    if payment_status == PaymentStatus.FAILED:
        investment.save(update_fields=['payment_status', 'updated_at'])
        logger.info("Payment of investment %s marked failed by %s", investment.id, confirmed_by.id)
        return investment

    now = timezone.now()
    investment.payment_confirmed_at = now
    investment.payment_confirmed_by = confirmed_by
    investment.save(update_fields=[
        'payment_status',
        'payment_confirmed_at',
        'payment_confirmed_by',
        'updated_at',
    ])

    if not investment.created_by_admin:
        user = User.objects.select_for_update().get(id=investment.user_id)
        user.total_investment += Decimal(investment.amount)
        user.last_investment_date = now
        user.save(update_fields=['total_investment', 'last_investment_date', 'updated_at'])

    logger.info("Payment of investment %s confirmed by %s", investment.id, confirmed_by.id)
    return investment


@transaction.atomic
def update_lease_status(*, investment_id: UUID, lease_accepted: bool) -> Investment:
    """
    Set whether the investor accepted the lease agreement.

    Raises:
        InvestmentNotFoundError: If investment doesn't exist
    """
    investment = lock_investment(investment_id=investment_id)
    investment.lease_accepted = lease_accepted
    investment.save(update_fields=['lease_accepted', 'updated_at'])
    return investment
