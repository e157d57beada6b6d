"""
Investment approval service.

Approve, reject and release investments. Each operation is one
transaction that locks the investment, then its parking lot, then the
investing user, so a failure part-way leaves nothing half written and
concurrent admins serialize on the same rows.
"""

import logging
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.core.retry import with_retry
from apps.investments.models import ApprovalStatus, Investment, InventoryState, PaymentStatus
from apps.parking.services import ParkingServiceError, lock_parking_lot

from .exceptions import (
    InvalidInvestmentStateError,
    InvestmentAlreadyApprovedError,
    InvestmentsServiceError,
    PaymentNotConfirmedError,
)
from .lifecycle import lock_investment, release_inventory, reserve_inventory

User = get_user_model()
logger = logging.getLogger(__name__)

AUTO_APPROVAL_NOTE = 'Auto-approved after payment confirmation'


def _approve(*, investment: Investment, approved_by: User, notes: str) -> Investment:
    """Shared approval steps; caller holds the investment lock."""
    if investment.is_approved:
        raise InvestmentAlreadyApprovedError("Investment is already approved")
    if investment.is_rejected:
        raise InvalidInvestmentStateError("Cannot approve a rejected investment")

    # Offline investments reserved their lots at creation; online ones
    # reserve them now.
    if investment.inventory_state == InventoryState.DRAFT:
        lot = reserve_inventory(investment)
    else:
        lot = lock_parking_lot(lot_id=investment.parking_lot_id)

    lot.total_invested_amount += investment.amount
    lot.save(update_fields=['total_invested_amount', 'updated_at'])

    now = timezone.now()
    user = User.objects.select_for_update().get(id=investment.user_id)
    user.approved_investment_total += Decimal(investment.amount)
    user.last_approved_investment_date = now
    user.save(update_fields=[
        'approved_investment_total',
        'last_approved_investment_date',
        'updated_at',
    ])

    investment.admin_approval_status = ApprovalStatus.APPROVED
    investment.approved_at = now
    investment.approved_by = approved_by
    investment.admin_notes = notes or ''
    investment.save(update_fields=[
        'admin_approval_status',
        'approved_at',
        'approved_by',
        'admin_notes',
        'updated_at',
    ])

    logger.info(
        "Investment %s approved by %s (%d lots on %s)",
        investment.id, approved_by.id, investment.selected_lots, lot.id
    )
    return investment


@with_retry
@transaction.atomic
def approve_investment_after_payment(
    *,
    investment_id: UUID,
    approved_by: User,
    notes: str = '',
    auto_approve: bool = False
) -> Investment:
    """
    Approve an investment whose payment has been confirmed.

    Adds the amount to the user's approved total and to the lot's
    invested amount. Lots are reserved now unless the investment already
    holds them (offline path).

    Args:
        investment_id: ID of investment to approve
        approved_by: Admin approving
        notes: Admin notes
        auto_approve: Use the automatic approval note when no notes given

    Returns:
        Approved Investment instance

    Raises:
        InvestmentNotFoundError: If investment doesn't exist
        PaymentNotConfirmedError: If payment status is not success
        InvestmentAlreadyApprovedError: If already approved
        InvalidInvestmentStateError: If the investment was rejected
        InsufficientLotsError: If the lot cannot cover the selection
    """
    investment = lock_investment(investment_id=investment_id)

    if investment.payment_status != PaymentStatus.SUCCESS:
        raise PaymentNotConfirmedError("Payment must be confirmed before approval")

    if auto_approve and not notes:
        notes = AUTO_APPROVAL_NOTE

    if investment.payment_confirmed_at is None:
        investment.payment_confirmed_at = timezone.now()
        investment.payment_confirmed_by = approved_by
        investment.save(update_fields=['payment_confirmed_at', 'payment_confirmed_by', 'updated_at'])

    return _approve(investment=investment, approved_by=approved_by, notes=notes)


@with_retry
@transaction.atomic
def approve_investment(
    *,
    investment_id: UUID,
    approved_by: User,
    notes: str = ''
) -> Investment:
    """
    Approve an investment without checking its payment status.

    Same inventory handling as approve_investment_after_payment.

    Raises:
        InvestmentNotFoundError: If investment doesn't exist
        InvestmentAlreadyApprovedError: If already approved
        InvalidInvestmentStateError: If the investment was rejected
        InsufficientLotsError: If the lot cannot cover the selection
    """
    investment = lock_investment(investment_id=investment_id)
    return _approve(investment=investment, approved_by=approved_by, notes=notes)


@with_retry
@transaction.atomic
def reject_investment(
    *,
    investment_id: UUID,
    rejected_by: User,
    reason: str
) -> Investment:
    """
    Reject a pending investment.

    Only the decision is recorded. Lots the investment reserved stay
    reserved until release_investment is called.

    Args:
        investment_id: ID of investment to reject
        rejected_by: Admin rejecting
        reason: Reason shown to the investor

    Returns:
        Rejected Investment instance

    Raises:
        InvestmentNotFoundError: If investment doesn't exist
        InvalidInvestmentStateError: If already approved or rejected
    """
    investment = lock_investment(investment_id=investment_id)

    if investment.is_approved:
        raise InvalidInvestmentStateError("Cannot reject an approved investment")
    if investment.is_rejected:
        raise InvalidInvestmentStateError("Investment is already rejected")

    investment.admin_approval_status = ApprovalStatus.REJECTED
    investment.rejection_reason = reason or ''
    investment.rejected_at = timezone.now()
    investment.rejected_by = rejected_by
    investment.save(update_fields=[
        'admin_approval_status',
        'rejection_reason',
        'rejected_at',
        'rejected_by',
        'updated_at',
    ])

    logger.info("Investment %s rejected by %s", investment.id, rejected_by.id)
    return investment


@with_retry
@transaction.atomic
def release_investment(*, investment_id: UUID) -> Investment:
    """
    Return the lots held by a rejected investment to its parking lot.

    Raises:
        InvestmentNotFoundError: If investment doesn't exist
        InvalidInvestmentStateError: If not rejected or holding no lots
    """
    investment = lock_investment(investment_id=investment_id)

    if not investment.is_rejected:
        raise InvalidInvestmentStateError("Only rejected investments can release their lots")

    release_inventory(investment)
    return investment


def batch_approve_investments(
    *,
    investment_ids: Iterable[UUID],
    approved_by: User,
    notes: str = ''
) -> dict:
    """
    Approve several investments one by one.

    Each id is approved in its own transaction; a failure is recorded and
    the remaining ids are still processed.

    Args:
        investment_ids: IDs to approve, in order
        approved_by: Admin approving
        notes: Admin notes applied to every approval

    Returns:
        dict: ``{'successful': [id, ...], 'failed': [{'id': id, 'error': msg}, ...]}``
    """
    results = {'successful': [], 'failed': []}

    for investment_id in investment_ids:
        try:
            approve_investment_after_payment(
                investment_id=investment_id,
                approved_by=approved_by,
                notes=notes,
            )
            results['successful'].append(str(investment_id))
        except (InvestmentsServiceError, ParkingServiceError, DatabaseError) as e:
            logger.warning("Batch approval of %s failed: %s", investment_id, e)
            results['failed'].append({'id': str(investment_id), 'error': str(e)})

    return results
