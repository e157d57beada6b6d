from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.models import User
from apps.accounts.permissions import IsAdminRole
from apps.accounts.services import check_admin_access
from .analytics import AnalyticsQueries
from .serializers import (
    AdminAnalyticsSerializer,
    DashboardResponseSerializer,
    ErrorSerializer,
    PortfolioSummarySerializer,
    SystemStatsSerializer,
)


@extend_schema(
    responses={200: SystemStatsSerializer},
    description="System-wide user, KYC, parking lot and investment statistics.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def system_stats(request):
    """Get system statistics - thin HTTP handler."""
    data = AnalyticsQueries.system_stats()
    return Response(SystemStatsSerializer(data).data)


@extend_schema(
    responses={200: AdminAnalyticsSerializer},
    description="Headline numbers for the admin dashboard.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_analytics(request):
    """Get admin analytics - thin HTTP handler."""
    data = AnalyticsQueries.admin_analytics()
    return Response(AdminAnalyticsSerializer(data).data)


@extend_schema(
    responses={200: DashboardResponseSerializer},
    description="Dashboard report of investment totals and approval counts.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def dashboard(request):
    """Get dashboard report - thin HTTP handler."""
    data = AnalyticsQueries.dashboard_data()
    return Response(DashboardResponseSerializer(data).data)


@extend_schema(
    responses={
        200: PortfolioSummarySerializer,
        403: ErrorSerializer,
    },
    description="Expected returns of a user's approved investments. "
                "Admins may request any user; investors only themselves.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def portfolio_summary(request, user_id=None):
    """Get portfolio summary - thin HTTP handler."""
    # Use current user if no ID provided
    target_user_id = user_id if user_id is not None else request.user.id

    if str(target_user_id) != str(request.user.id) and not check_admin_access(request.user):
        return Response(
            {'error': "You cannot view another user's portfolio"},
            status=status.HTTP_403_FORBIDDEN
        )

    get_object_or_404(User, id=target_user_id)

    data = AnalyticsQueries.portfolio_summary(user_id=target_user_id)
    return Response(PortfolioSummarySerializer(data).data)
