import logging

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsAdminRole
from apps.accounts.services import UserNotFoundError, check_admin_access
from apps.notifications.service import get_notification_center
from apps.parking.services import (
    InsufficientLotsError,
    InvalidLotCountError,
    ParkingLotNotFoundError,
)
from .models import Investment, PaymentStatus
from .serializers import (
    ApproveInvestmentSerializer,
    BatchApprovalResultSerializer,
    BatchApproveSerializer,
    ConfirmPaymentSerializer,
    InvestmentCreateSerializer,
    InvestmentFilterSerializer,
    InvestmentSerializer,
    LeaseStatusSerializer,
    OfflineInvestmentCreateSerializer,
    RejectInvestmentSerializer,
)
from .services import (
    approve_investment,
    approve_investment_after_payment,
    batch_approve_investments,
    confirm_payment,
    create_investment_after_offline_payment,
    create_pending_investment,
    get_all_investments,
    get_pending_investments,
    get_user_investment_history,
    get_user_investments,
    reject_investment,
    release_investment,
    update_lease_status,
    # Exceptions
    InvalidInvestmentAmountError,
    InvalidInvestmentStateError,
    InvestmentAlreadyApprovedError,
    InvestmentNotFoundError,
    PaymentNotConfirmedError,
)

logger = logging.getLogger(__name__)

# Domain errors mapped to HTTP status codes, most specific first.
ERROR_STATUS = (
    ((InvestmentNotFoundError, ParkingLotNotFoundError, UserNotFoundError), status.HTTP_404_NOT_FOUND),
    ((InvestmentAlreadyApprovedError, InvalidInvestmentStateError,
      PaymentNotConfirmedError, InsufficientLotsError), status.HTTP_409_CONFLICT),
    ((InvalidInvestmentAmountError, InvalidLotCountError), status.HTTP_400_BAD_REQUEST),
)
HANDLED_ERRORS = tuple(exc for group, _ in ERROR_STATUS for exc in group)


def _error_response(error):
    for exceptions, status_code in ERROR_STATUS:
        if isinstance(error, exceptions):
            return Response({'error': str(error)}, status=status_code)
    raise error


class InvestmentPagination(PageNumberPagination):
    """Custom pagination for investments."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class InvestmentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for investments.

    Investors see and create their own investments. Admins see all of
    them and drive the approval lifecycle. Lifecycle events are pushed to
    the investor's notifications after the service call commits.

    list: Own investments (admins: all, filterable)
    retrieve: One investment
    create: Submit a pending investment request
    """

    serializer_class = InvestmentSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = InvestmentPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    admin_actions = [
        'offline',
        'approve',
        'approve_after_payment',
        'reject',
        'release',
        'confirm_payment',
        'batch_approve',
        'pending',
    ]

    def get_permissions(self):
        if self.action in self.admin_actions:
            return [IsAuthenticated(), IsAdminRole()]
        return [IsAuthenticated()]

    def get_queryset(self):
        user = self.request.user

        if not check_admin_access(user):
            return get_user_investment_history(user_id=user.id)

        queryset = get_all_investments()
        if self.action != 'list':
            return queryset

        filter_serializer = InvestmentFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        filters = filter_serializer.validated_data

        if filters.get('payment_status'):
            queryset = queryset.filter(payment_status=filters['payment_status'])
        if filters.get('admin_approval_status'):
            queryset = queryset.filter(admin_approval_status=filters['admin_approval_status'])
        if filters.get('user'):
            queryset = queryset.filter(user_id=filters['user'])
        if filters.get('parking_lot'):
            queryset = queryset.filter(parking_lot_id=filters['parking_lot'])

        return queryset

    def _notify(self, investment):
        return get_notification_center().for_user(investment.user_id)

    @extend_schema(request=InvestmentCreateSerializer, responses={201: InvestmentSerializer})
    def create(self, request, *args, **kwargs):
        """Submit an investment request; lots are reserved on approval."""
        serializer = InvestmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            investment = create_pending_investment(user=request.user, **serializer.validated_data)
        except HANDLED_ERRORS as e:
            return _error_response(e)

        self._notify(investment).create_investment_notification(
            investment, investment.parking_lot.name
        )
        return Response(InvestmentSerializer(investment).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=OfflineInvestmentCreateSerializer, responses={201: InvestmentSerializer})
    @action(detail=False, methods=['post'])
    def offline(self, request):
        """Record an investment paid outside the app (admin)."""
        serializer = OfflineInvestmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            investment = create_investment_after_offline_payment(
                created_by=request.user,
                **serializer.validated_data
            )
        except HANDLED_ERRORS as e:
            return _error_response(e)

        self._notify(investment).create_investment_notification(
            investment, investment.parking_lot.name
        )
        return Response(InvestmentSerializer(investment).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ApproveInvestmentSerializer, responses={200: InvestmentSerializer})
    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        """Approve an investment regardless of its payment status (admin)."""
        serializer = ApproveInvestmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            investment = approve_investment(
                investment_id=pk,
                approved_by=request.user,
                notes=serializer.validated_data['notes'],
            )
        except HANDLED_ERRORS as e:
            return _error_response(e)

        self._notify(investment).create_investment_approval_notification(
            investment, investment.parking_lot.name
        )
        return Response(InvestmentSerializer(investment).data)

    @extend_schema(request=ApproveInvestmentSerializer, responses={200: InvestmentSerializer})
    @action(detail=True, methods=['post'], url_path='approve-after-payment')
    def approve_after_payment(self, request, pk=None):
        """Approve an investment whose payment is confirmed (admin)."""
        serializer = ApproveInvestmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            investment = approve_investment_after_payment(
                investment_id=pk,
                approved_by=request.user,
                **serializer.validated_data
            )
        except HANDLED_ERRORS as e:
            return _error_response(e)

        self._notify(investment).create_investment_approval_notification(
            investment, investment.parking_lot.name
        )
        return Response(InvestmentSerializer(investment).data)

    @extend_schema(request=RejectInvestmentSerializer, responses={200: InvestmentSerializer})
    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """Reject an investment (admin). Reserved lots stay reserved."""
        serializer = RejectInvestmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            investment = reject_investment(
                investment_id=pk,
                rejected_by=request.user,
                reason=serializer.validated_data['reason'],
            )
        except HANDLED_ERRORS as e:
            return _error_response(e)

        self._notify(investment).create_investment_rejection_notification(
            investment, investment.parking_lot.name, investment.rejection_reason
        )
        return Response(InvestmentSerializer(investment).data)

    @extend_schema(request=None, responses={200: InvestmentSerializer})
    @action(detail=True, methods=['post'])
    def release(self, request, pk=None):
        """Return the lots of a rejected investment to its parking lot (admin)."""
        try:
            investment = release_investment(investment_id=pk)
        except HANDLED_ERRORS as e:
            return _error_response(e)

        return Response(InvestmentSerializer(investment).data)

    @extend_schema(request=ConfirmPaymentSerializer, responses={200: InvestmentSerializer})
    @action(detail=True, methods=['post'], url_path='confirm-payment')
    def confirm_payment(self, request, pk=None):
        """Record whether the investor's payment arrived (admin)."""
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment_status = serializer.validated_data['payment_status']

        try:
            investment = confirm_payment(
                investment_id=pk,
                payment_status=payment_status,
                confirmed_by=request.user,
            )
        except HANDLED_ERRORS as e:
            return _error_response(e)

        notifications = self._notify(investment)
        if payment_status == PaymentStatus.SUCCESS:
            notifications.create_payment_success_notification(
                investment.amount, investment.parking_lot.name
            )
        else:
            notifications.create_payment_failure_notification(
                investment.amount,
                investment.parking_lot.name,
                'Payment could not be verified'
            )
        return Response(InvestmentSerializer(investment).data)

    @extend_schema(request=LeaseStatusSerializer, responses={200: InvestmentSerializer})
    @action(detail=True, methods=['post'])
    def lease(self, request, pk=None):
        """Record the investor's lease agreement decision."""
        serializer = LeaseStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        # Non-admin querysets only contain the caller's investments
        if not self.get_queryset().filter(id=pk).exists():
            return Response({'error': 'Investment not found'}, status=status.HTTP_404_NOT_FOUND)

        try:
            investment = update_lease_status(
                investment_id=pk,
                lease_accepted=serializer.validated_data['lease_accepted'],
            )
        except HANDLED_ERRORS as e:
            return _error_response(e)

        return Response(InvestmentSerializer(investment).data)

    @extend_schema(request=BatchApproveSerializer, responses={200: BatchApprovalResultSerializer})
    @action(detail=False, methods=['post'], url_path='batch-approve')
    def batch_approve(self, request):
        """Approve several paid investments; failures don't stop the batch (admin)."""
        serializer = BatchApproveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        results = batch_approve_investments(
            investment_ids=serializer.validated_data['investment_ids'],
            approved_by=request.user,
            notes=serializer.validated_data['notes'],
        )

        approved = Investment.objects.select_related('parking_lot').filter(
            id__in=results['successful']
        )
        for investment in approved:
            self._notify(investment).create_investment_approval_notification(
                investment, investment.parking_lot.name
            )

        logger.info(
            "Batch approval by %s: %d approved, %d failed",
            request.user.id, len(results['successful']), len(results['failed'])
        )
        return Response(results)

    @action(detail=False, methods=['get'])
    def pending(self, request):
        """Paid investments waiting for a decision (admin)."""
        page = self.paginate_queryset(get_pending_investments())
        serializer = InvestmentSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @action(detail=False, methods=['get'])
    def portfolio(self, request):
        """The caller's approved investments."""
        investments = get_user_investments(user_id=request.user.id)
        serializer = InvestmentSerializer(investments, many=True)
        return Response(serializer.data)
