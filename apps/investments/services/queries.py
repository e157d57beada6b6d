"""Read-only investment queries."""

from uuid import UUID

from django.db.models import QuerySet

from apps.investments.models import ApprovalStatus, Investment, PaymentStatus

from .exceptions import InvalidInvestmentStateError


def _base_queryset() -> QuerySet:
    return Investment.objects.select_related('user', 'parking_lot')


def get_all_investments() -> QuerySet:
    """Every investment, newest first."""
    return _base_queryset().order_by('-created_at')


def get_investments_by_status(*, payment_status: str) -> QuerySet:
    """Investments with the given payment status, newest first."""
    if payment_status not in PaymentStatus.values:
        raise InvalidInvestmentStateError(f"Invalid payment status: {payment_status}")
    return _base_queryset().filter(payment_status=payment_status).order_by('-created_at')


def get_pending_investments() -> QuerySet:
    """Paid investments waiting for an admin decision."""
    return _base_queryset().filter(
        admin_approval_status=ApprovalStatus.PENDING,
        payment_status=PaymentStatus.SUCCESS,
    ).order_by('-created_at')


def get_user_investments(*, user_id: UUID) -> QuerySet:
    """Approved investments of a user (the portfolio)."""
    return _base_queryset().filter(
        user_id=user_id,
        admin_approval_status=ApprovalStatus.APPROVED,
    ).order_by('-created_at')


def get_user_investment_history(*, user_id: UUID) -> QuerySet:
    """All investments of a user regardless of status."""
    return _base_queryset().filter(user_id=user_id).order_by('-created_at')
