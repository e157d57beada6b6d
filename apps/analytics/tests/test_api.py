import pytest
import uuid
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.analytics.analytics import AnalyticsQueries


# =============================================================================
# Admin Statistics Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestSystemStats:
    """Tests for GET /api/analytics/system-stats/"""

    def test_requires_admin_role(self, analytics_user_client):
        response = analytics_user_client.get(reverse('analytics:system-stats'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_requires_auth(self, api_client):
        response = api_client.get(reverse('analytics:system-stats'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_counts(self, analytics_admin_client, analytics_portfolio):
        response = analytics_admin_client.get(reverse('analytics:system-stats'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_users'] == 3
        assert response.data['verified_users'] == 2
        assert response.data['pending_kyc'] == 1
        assert response.data['total_parking_lots'] == 2
        assert response.data['active_parking_lots'] == 1
        assert response.data['total_investments'] == 4
        assert response.data['approved_investments'] == 3
        assert Decimal(str(response.data['total_investment_value'])) == Decimal('550000.00')
        # (12 + 6 + 12 + 12) / 4
        assert Decimal(str(response.data['average_roi'])) == Decimal('10.50')

    def test_empty_system(self, analytics_admin_client):
        response = analytics_admin_client.get(reverse('analytics:system-stats'))

        assert response.data['total_investments'] == 0
        assert Decimal(str(response.data['total_investment_value'])) == Decimal('0')
        assert Decimal(str(response.data['average_roi'])) == Decimal('0')


@pytest.mark.django_db
class TestAdminAnalytics:
    """Tests for GET /api/analytics/admin/"""

    def test_headline_numbers(self, analytics_admin_client, analytics_portfolio):
        response = analytics_admin_client.get(reverse('analytics:admin-analytics'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_users'] == 3
        assert response.data['active_parking_lots'] == 1
        assert Decimal(str(response.data['total_investment'])) == Decimal('550000.00')
        assert Decimal(str(response.data['monthly_revenue'])) == Decimal('0')

    def test_requires_admin_role(self, analytics_user_client):
        response = analytics_user_client.get(reverse('analytics:admin-analytics'))

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestDashboard:
    """Tests for GET /api/analytics/dashboard/"""

    def test_report(self, analytics_admin_client, analytics_portfolio):
        response = analytics_admin_client.get(reverse('analytics:dashboard'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_investments'] == 4
        assert response.data['pending_investments'] == 1
        assert response.data['approved_investments'] == 3
        assert response.data['total_parking_lots'] == 2
        assert Decimal(str(response.data['total_investment_amount'])) == Decimal('550000.00')
        assert response.data['generated_at']

    def test_requires_admin_role(self, analytics_user_client):
        response = analytics_user_client.get(reverse('analytics:dashboard'))

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Portfolio Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestPortfolioSummary:
    """Tests for GET /api/analytics/portfolio/ and /user/{id}/portfolio/"""

    def test_my_portfolio(self, analytics_user_client, analytics_portfolio):
        response = analytics_user_client.get(reverse('analytics:my-portfolio'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_investments'] == 2
        assert Decimal(str(response.data['total_invested'])) == Decimal('350000.00')
        # 300000 * 12% + 50000 * 6%
        assert Decimal(str(response.data['total_annual_return'])) == Decimal('39000.00')
        assert Decimal(str(response.data['total_monthly_return'])) == Decimal('3250.00')
        assert Decimal(str(response.data['average_roi'])) == Decimal('11.14')

    def test_empty_portfolio(self, analytics_user_client):
        response = analytics_user_client.get(reverse('analytics:my-portfolio'))

        assert response.data['total_investments'] == 0
        assert Decimal(str(response.data['average_roi'])) == Decimal('0')

    def test_own_portfolio_by_id(self, analytics_user_client, analytics_user, analytics_portfolio):
        response = analytics_user_client.get(
            reverse('analytics:user-portfolio', args=[analytics_user.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_investments'] == 2

    def test_other_users_portfolio_forbidden(
        self, analytics_user_client, analytics_other_user, analytics_portfolio
    ):
        response = analytics_user_client.get(
            reverse('analytics:user-portfolio', args=[analytics_other_user.id])
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_reads_any_portfolio(
        self, analytics_admin_client, analytics_other_user, analytics_portfolio
    ):
        response = analytics_admin_client.get(
            reverse('analytics:user-portfolio', args=[analytics_other_user.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(str(response.data['total_invested'])) == Decimal('100000.00')

    def test_admin_unknown_user(self, analytics_admin_client):
        response = analytics_admin_client.get(
            reverse('analytics:user-portfolio', args=[uuid.uuid4()])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Query Tests
# =============================================================================

@pytest.mark.django_db
class TestAnalyticsQueries:

    def test_portfolio_uses_current_lot_roi(self, analytics_user, analytics_lot, analytics_portfolio):
        analytics_lot.roi = Decimal('10.00')
        analytics_lot.save()

        summary = AnalyticsQueries.portfolio_summary(analytics_user.id)

        # 300000 * 10% + 50000 * 6%
        assert summary['total_annual_return'] == Decimal('33000.00')

    def test_pending_investments_excluded_from_portfolio(self, analytics_user, analytics_portfolio):
        analytics_portfolio['approved_main'].delete()
        analytics_portfolio['approved_annex'].delete()

        summary = AnalyticsQueries.portfolio_summary(analytics_user.id)

        assert summary['total_investments'] == 0
        assert summary['total_invested'] == Decimal('0.00')
