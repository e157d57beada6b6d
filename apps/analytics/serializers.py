"""
Response serializers for the analytics app.

The analytics endpoints take no input; these serializers document and
format the dictionaries returned by ``AnalyticsQueries``.

Response Serializers:
    SystemStatsSerializer - System-wide statistics
    AdminAnalyticsSerializer - Headline admin numbers
    DashboardResponseSerializer - Dashboard report
    PortfolioSummarySerializer - Investor portfolio returns
"""

from rest_framework import serializers


class SystemStatsSerializer(serializers.Serializer):
    """Response serializer for system statistics."""
    total_users = serializers.IntegerField()
    verified_users = serializers.IntegerField()
    pending_kyc = serializers.IntegerField()
    total_parking_lots = serializers.IntegerField()
    active_parking_lots = serializers.IntegerField()
    total_investments = serializers.IntegerField()
    approved_investments = serializers.IntegerField()
    total_investment_value = serializers.DecimalField(max_digits=16, decimal_places=2)
    average_roi = serializers.DecimalField(max_digits=7, decimal_places=2)


class AdminAnalyticsSerializer(serializers.Serializer):
    """Response serializer for admin analytics."""
    total_users = serializers.IntegerField()
    total_investment = serializers.DecimalField(max_digits=16, decimal_places=2)
    active_parking_lots = serializers.IntegerField()
    monthly_revenue = serializers.DecimalField(max_digits=16, decimal_places=2)


class DashboardResponseSerializer(serializers.Serializer):
    """Response serializer for the dashboard report."""
    total_users = serializers.IntegerField()
    total_investments = serializers.IntegerField()
    total_parking_lots = serializers.IntegerField()
    total_investment_amount = serializers.DecimalField(max_digits=16, decimal_places=2)
    pending_investments = serializers.IntegerField()
    approved_investments = serializers.IntegerField()
    generated_at = serializers.DateTimeField()


class PortfolioSummarySerializer(serializers.Serializer):
    """Response serializer for an investor's portfolio summary."""
    total_invested = serializers.DecimalField(max_digits=16, decimal_places=2)
    total_monthly_return = serializers.DecimalField(max_digits=16, decimal_places=2)
    total_annual_return = serializers.DecimalField(max_digits=16, decimal_places=2)
    average_roi = serializers.DecimalField(max_digits=7, decimal_places=2)
    total_investments = serializers.IntegerField()


class ErrorSerializer(serializers.Serializer):
    """Standard error response serializer."""
    error = serializers.CharField()
