"""
Analytics Module
=================

This module provides aggregate queries for the admin dashboard and the
investor portfolio screen. It reads users, parking lots and investments.

Classes:
    AnalyticsQueries: Static methods for the statistics endpoints.

Key Features:
    - System-wide user, KYC, lot and investment counts
    - Headline admin analytics
    - Dashboard report with a generation timestamp
    - Per-investor portfolio returns

Example:
    Getting system statistics::

        from apps.analytics.analytics import AnalyticsQueries

        stats = AnalyticsQueries.system_stats()
        print(f"{stats['verified_users']} of {stats['total_users']} users verified")
        print(f"Invested: {stats['total_investment_value']}")

Note:
    This module is read-only and doesn't modify any data. All methods
    are static and can be called without instantiation.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import Avg, Count, DecimalField, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.accounts.models import KYCStatus
from apps.investments.models import ApprovalStatus, Investment
from apps.parking.models import ParkingLot, ParkingLotStatus

User = get_user_model()

ZERO = Decimal('0.00')


def _money_sum(field):
    return Coalesce(
        Sum(field),
        ZERO,
        output_field=DecimalField(max_digits=16, decimal_places=2)
    )


class AnalyticsQueries:
    """
    Aggregate queries for analytics endpoints.

    The admin statistics are computed with aggregate queries; only the
    portfolio summary iterates rows, one investor's worth.

    Methods:
        system_stats: Users, KYC, lots and investment totals.
        admin_analytics: Headline numbers for the admin dashboard.
        dashboard_data: Report of totals and approval counts.
        portfolio_summary: Returns of one investor's approved investments.

    Note:
        All methods return plain dictionaries, making them suitable for
        JSON serialization in API responses.
    """

    @staticmethod
    def system_stats():
        """
        Calculate system-wide statistics.

        Returns:
            dict: A dictionary containing:
                - total_users (int): Every registered user.
                - verified_users (int): Users with verified KYC.
                - pending_kyc (int): Users whose KYC awaits review.
                - total_parking_lots (int): Every parking lot.
                - active_parking_lots (int): Lots with status active.
                - total_investments (int): Every investment.
                - approved_investments (int): Approved investments.
                - total_investment_value (Decimal): Sum of all amounts,
                  whatever their status.
                - average_roi (Decimal): Mean expected ROI of investments
                  that carry one, 0 when none do.

        Example:
            ::

                stats = AnalyticsQueries.system_stats()
                print(f"Average ROI: {stats['average_roi']}%")
        """
        users = User.objects.aggregate(
            total_users=Count('id'),
            verified_users=Count('id', filter=Q(kyc_status=KYCStatus.VERIFIED)),
            pending_kyc=Count('id', filter=Q(kyc_status=KYCStatus.PENDING)),
        )

        lots = ParkingLot.objects.aggregate(
            total_parking_lots=Count('id'),
            active_parking_lots=Count('id', filter=Q(status=ParkingLotStatus.ACTIVE)),
        )

        investments = Investment.objects.aggregate(
            total_investments=Count('id'),
            approved_investments=Count(
                'id', filter=Q(admin_approval_status=ApprovalStatus.APPROVED)
            ),
            total_investment_value=_money_sum('amount'),
            average_roi=Avg('expected_roi'),
        )

        average_roi = investments.pop('average_roi')
        return {
            **users,
            **lots,
            **investments,
            'average_roi': round(Decimal(str(average_roi)), 2) if average_roi is not None else ZERO,
        }

    @staticmethod
    def admin_analytics():
        """
        Headline numbers for the admin dashboard.

        Returns:
            dict: A dictionary containing:
                - total_users (int): Every registered user.
                - total_investment (Decimal): Sum of all investment amounts.
                - active_parking_lots (int): Lots with status active.
                - monthly_revenue (Decimal): Always 0, payouts are not
                  tracked.
        """
        return {
            'total_users': User.objects.count(),
            'total_investment': Investment.objects.aggregate(
                total=_money_sum('amount')
            )['total'],
            'active_parking_lots': ParkingLot.objects.filter(
                status=ParkingLotStatus.ACTIVE
            ).count(),
            'monthly_revenue': ZERO,
        }

    @staticmethod
    def dashboard_data():
        """
        Report of totals and approval counts.

        Returns:
            dict: A dictionary containing:
                - total_users (int)
                - total_investments (int)
                - total_parking_lots (int)
                - total_investment_amount (Decimal)
                - pending_investments (int): Awaiting an admin decision.
                - approved_investments (int)
                - generated_at (datetime): When the report was built.
        """
        investments = Investment.objects.aggregate(
            total_investments=Count('id'),
            total_investment_amount=_money_sum('amount'),
            pending_investments=Count(
                'id', filter=Q(admin_approval_status=ApprovalStatus.PENDING)
            ),
            approved_investments=Count(
                'id', filter=Q(admin_approval_status=ApprovalStatus.APPROVED)
            ),
        )

        return {
            'total_users': User.objects.count(),
            'total_parking_lots': ParkingLot.objects.count(),
            **investments,
            'generated_at': timezone.now(),
        }

    @staticmethod
    def portfolio_summary(user_id):
        """
        Returns of a user's approved investments.

        Each investment earns ``amount * roi / 100`` a year at the current
        ROI of its parking lot, paid out monthly.

        Args:
            user_id (UUID): The investor's unique identifier.

        Returns:
            dict: A dictionary containing:
                - total_invested (Decimal): Sum of approved amounts.
                - total_monthly_return (Decimal): Expected monthly payout.
                - total_annual_return (Decimal): Expected yearly payout.
                - average_roi (Decimal): Annual return as a percentage of
                  the invested total, 0 without investments.
                - total_investments (int): Number of approved investments.

        Example:
            ::

                summary = AnalyticsQueries.portfolio_summary(user.id)
                print(f"{summary['total_monthly_return']} per month")
        """
        investments = Investment.objects.filter(
            user_id=user_id,
            admin_approval_status=ApprovalStatus.APPROVED,
        ).select_related('parking_lot')

        total_invested = ZERO
        total_annual_return = ZERO
        count = 0

        for investment in investments:
            total_invested += investment.amount
            total_annual_return += investment.amount * investment.parking_lot.roi / Decimal('100')
            count += 1

        average_roi = (
            total_annual_return / total_invested * Decimal('100')
            if total_invested > 0 else ZERO
        )

        return {
            'total_invested': total_invested,
            'total_monthly_return': round(total_annual_return / Decimal('12'), 2),
            'total_annual_return': round(total_annual_return, 2),
            'average_roi': round(average_roi, 2),
            'total_investments': count,
        }
