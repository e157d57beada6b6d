from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsAdminRole
from apps.accounts.services import check_admin_access
from apps.investments.models import ApprovalStatus
from apps.notifications.service import get_notification_center
from .serializers import (
    ParkingLotCreateSerializer,
    ParkingLotSerializer,
    ParkingLotUpdateSerializer,
)
from .services import (
    create_parking_lot,
    delete_parking_lot,
    get_all_parking_lots,
    get_available_parking_lots,
    get_parking_lot_by_id,
    update_parking_lot,
    # Exceptions
    InvalidLotCountError,
    ParkingLotInUseError,
    ParkingLotNotFoundError,
)


class ParkingLotPagination(PageNumberPagination):
    """Custom pagination for parking lots."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ParkingLotViewSet(viewsets.ModelViewSet):
    """
    ViewSet for parking lots.

    Investors see lots that still have inventory. Admins see every lot and
    manage them. Views are thin HTTP handlers; rules live in services.

    list: Lots (admins: all, ?available=true to narrow)
    retrieve: One lot
    create: New lot (admin)
    partial_update: Edit a lot (admin), ROI changes notify its investors
    destroy: Delete a lot without investments (admin)
    """

    serializer_class = ParkingLotSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ParkingLotPagination
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        is_admin = check_admin_access(self.request.user)
        only_available = self.request.query_params.get('available') == 'true'

        if is_admin and not only_available:
            return get_all_parking_lots()
        return get_available_parking_lots()

    def get_permissions(self):
        if self.action in ['create', 'partial_update', 'destroy']:
            return [IsAuthenticated(), IsAdminRole()]
        return [IsAuthenticated()]

    @extend_schema(parameters=[
        OpenApiParameter('available', bool, description='Only lots with free inventory'),
    ])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        try:
            lot = get_parking_lot_by_id(lot_id=self.kwargs['pk'])
        except ParkingLotNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ParkingLotSerializer(lot).data)

    @extend_schema(request=ParkingLotCreateSerializer, responses={201: ParkingLotSerializer})
    def create(self, request, *args, **kwargs):
        """Create a parking lot."""
        serializer = ParkingLotCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            lot = create_parking_lot(**serializer.validated_data)
        except InvalidLotCountError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ParkingLotSerializer(lot).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ParkingLotUpdateSerializer, responses={200: ParkingLotSerializer})
    def partial_update(self, request, *args, **kwargs):
        """Update a parking lot; ROI changes are pushed to its investors."""
        serializer = ParkingLotUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            lot = update_parking_lot(lot_id=self.kwargs['pk'], **serializer.validated_data)
        except ParkingLotNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidLotCountError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        if lot.roi != lot.previous_roi:
            investor_ids = (
                lot.investments
                .filter(admin_approval_status=ApprovalStatus.APPROVED)
                .values_list('user_id', flat=True)
                .distinct()
            )
            get_notification_center().broadcast_roi_update(
                investor_ids, lot.name, lot.previous_roi, lot.roi
            )

        return Response(ParkingLotSerializer(lot).data)

    def destroy(self, request, *args, **kwargs):
        """Delete a parking lot."""
        try:
            delete_parking_lot(lot_id=self.kwargs['pk'])
        except ParkingLotNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ParkingLotInUseError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'])
    def availability(self, request, pk=None):
        """Inventory counters of one lot."""
        try:
            lot = get_parking_lot_by_id(lot_id=pk)
        except ParkingLotNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response({
            'total_lots': lot.total_lots,
            'available_lots': lot.available_lots,
            'reserved_lots': lot.reserved_lots,
            'availability': lot.availability,
        })
