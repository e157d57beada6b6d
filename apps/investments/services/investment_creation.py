"""
Investment creation service.

Three entry points, differing in payment state and in when lots are
reserved:

- create_investment: status fields as supplied, lots reserved when a
  lot count is given
- create_pending_investment: user-submitted offline request, nothing
  reserved until approval
- create_investment_after_offline_payment: admin-recorded paid
  investment, lots reserved immediately
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.accounts.services import UserNotFoundError
from apps.core.retry import with_retry
from apps.investments.models import (
    ApprovalStatus,
    Investment,
    PaymentMethod,
    PaymentStatus,
)
from apps.parking.services import lock_parking_lot

from .exceptions import InvalidInvestmentAmountError, InvalidInvestmentStateError
from .lifecycle import reserve_inventory

User = get_user_model()
logger = logging.getLogger(__name__)


def _validate_amounts(amount: Decimal, selected_lots: Optional[int]) -> None:
    if amount is None or Decimal(amount) <= 0:
        raise InvalidInvestmentAmountError("Investment amount must be greater than zero")
    if selected_lots is not None and selected_lots < 1:
        raise InvalidInvestmentAmountError("Selected lots must be at least 1")


def _lock_user(user_id: UUID) -> User:
    try:
        return User.objects.select_for_update().get(id=user_id)
    except (User.DoesNotExist, ValidationError):
        raise UserNotFoundError(f"User {user_id} not found")


@with_retry
@transaction.atomic
def create_investment(
    *,
    user: User,
    parking_lot_id: UUID,
    amount: Decimal,
    selected_lots: Optional[int] = None,
    payment_status: str = PaymentStatus.PENDING,
    payment_method: str = PaymentMethod.ONLINE,
    lease_accepted: bool = False,
    expected_roi: Optional[Decimal] = None
) -> Investment:
    """
    Create an investment with the supplied status fields.

    Approval always starts pending; it only changes through the approval
    transitions. When ``selected_lots`` is given the lots are reserved in
    the same transaction.

    Args:
        user: Investing user
        parking_lot_id: ID of the parking lot
        amount: Invested amount
        selected_lots: Number of lots, reserved right away when given
        payment_status: Initial payment status
        payment_method: How the user pays
        lease_accepted: Whether the lease agreement was accepted
        expected_roi: Expected ROI, defaults to the lot's ROI

    Returns:
        Created Investment instance

    Raises:
        InvalidInvestmentAmountError: If amount or lot count is not positive
        InvalidInvestmentStateError: If payment_status is unknown
        ParkingLotNotFoundError: If lot doesn't exist
        InsufficientLotsError: If the lot cannot cover the selection
    """
    _validate_amounts(amount, selected_lots)

    if payment_status not in PaymentStatus.values:
        raise InvalidInvestmentStateError(f"Invalid payment status: {payment_status}")

    lot = lock_parking_lot(lot_id=parking_lot_id)

    investment = Investment.objects.create(
        user=user,
        parking_lot=lot,
        amount=amount,
        selected_lots=selected_lots or 1,
        payment_status=payment_status,
        admin_approval_status=ApprovalStatus.PENDING,
        payment_method=payment_method,
        lease_accepted=lease_accepted,
        expected_roi=expected_roi if expected_roi is not None else lot.roi,
    )

    if selected_lots:
        reserve_inventory(investment)

    logger.info("User %s created investment %s", user.id, investment.id)
    return investment


@with_retry
@transaction.atomic
def create_pending_investment(
    *,
    user: User,
    parking_lot_id: UUID,
    amount: Decimal,
    selected_lots: int = 1,
    payment_method: str = PaymentMethod.OFFLINE
) -> Investment:
    """
    Record an investment request awaiting payment and admin approval.

    Lot inventory is left untouched; lots are reserved when the
    investment is approved.

    Args:
        user: Investing user
        parking_lot_id: ID of the parking lot
        amount: Invested amount
        selected_lots: Number of lots requested (default 1)
        payment_method: Payment method (default offline)

    Returns:
        Created Investment instance

    Raises:
        InvalidInvestmentAmountError: If amount or lot count is not positive
        ParkingLotNotFoundError: If lot doesn't exist
    """
    _validate_amounts(amount, selected_lots)

    lot = lock_parking_lot(lot_id=parking_lot_id)

    investment = Investment.objects.create(
        user=user,
        parking_lot=lot,
        amount=amount,
        selected_lots=selected_lots,
        payment_method=payment_method,
        payment_status=PaymentStatus.PENDING,
        admin_approval_status=ApprovalStatus.PENDING,
        lease_accepted=False,
        expected_roi=lot.roi,
    )

    logger.info(
        "User %s submitted pending investment %s for %d lots",
        user.id, investment.id, selected_lots
    )
    return investment


@with_retry
@transaction.atomic
def create_investment_after_offline_payment(
    *,
    user_id: UUID,
    parking_lot_id: UUID,
    amount: Decimal,
    created_by: User,
    selected_lots: int = 1,
    payment_method: str = PaymentMethod.OFFLINE,
    notes: str = ''
) -> Investment:
    """
    Record an investment an admin received payment for outside the app.

    Payment is already confirmed, approval is pending. The user's running
    total grows by the amount and the lots are reserved immediately, so
    approving it later does not touch inventory again.

    Args:
        user_id: ID of investing user
        parking_lot_id: ID of the parking lot
        amount: Amount received
        created_by: Admin recording the payment
        selected_lots: Number of lots bought (default 1)
        payment_method: How the payment was received
        notes: Admin notes

    Returns:
        Created Investment instance

    Raises:
        InvalidInvestmentAmountError: If amount or lot count is not positive
        UserNotFoundError: If user doesn't exist
        ParkingLotNotFoundError: If lot doesn't exist
        InsufficientLotsError: If the lot cannot cover the selection
    """
    _validate_amounts(amount, selected_lots)

    lot = lock_parking_lot(lot_id=parking_lot_id)
    user = _lock_user(user_id)
    now = timezone.now()

    investment = Investment.objects.create(
        user=user,
        parking_lot=lot,
        amount=amount,
        selected_lots=selected_lots,
        payment_method=payment_method,
        payment_status=PaymentStatus.SUCCESS,
        admin_approval_status=ApprovalStatus.PENDING,
        lease_accepted=False,
        created_by_admin=True,
        admin_notes=notes,
        expected_roi=lot.roi,
        payment_confirmed_at=now,
        payment_confirmed_by=created_by,
    )

    reserve_inventory(investment)

    user.total_investment += Decimal(amount)
    user.last_investment_date = now
    user.save(update_fields=['total_investment', 'last_investment_date', 'updated_at'])

    logger.info(
        "Admin %s recorded offline investment %s for user %s",
        created_by.id, investment.id, user.id
    )
    return investment
