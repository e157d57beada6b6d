from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .exceptions import NotificationNotFoundError
from .serializers import NotificationFilterSerializer, NotificationSerializer
from .service import get_notification_center


class NotificationViewSet(viewsets.ViewSet):
    """
    The caller's in-app notifications.

    Backed by the process-wide notification center, not the database.

    list: Notifications, newest first (?unread=true, ?type=)
    destroy: Delete one notification
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-f-]{36}'

    def _service(self):
        return get_notification_center().for_user(self.request.user.id)

    @extend_schema(
        parameters=[NotificationFilterSerializer],
        responses={200: NotificationSerializer(many=True)},
    )
    def list(self, request):
        filter_serializer = NotificationFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        filters = filter_serializer.validated_data

        service = self._service()
        if filters.get('type'):
            notifications = service.get_notifications_by_type(filters['type'])
        else:
            notifications = service.get_notifications()

        if filters['unread']:
            notifications = [n for n in notifications if not n.read]

        return Response(NotificationSerializer(notifications, many=True).data)

    def destroy(self, request, pk=None):
        try:
            self._service().delete_notification(pk)
        except NotificationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: NotificationSerializer})
    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        """Mark one notification as read."""
        try:
            notification = self._service().mark_as_read(pk)
        except NotificationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(NotificationSerializer(notification).data)

    @extend_schema(
        request=None,
        responses={200: inline_serializer(
            name='MarkAllReadResponse',
            fields={'marked': serializers.IntegerField()},
        )},
    )
    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        """Mark every notification as read."""
        return Response({'marked': self._service().mark_all_as_read()})

    @extend_schema(responses={200: inline_serializer(
        name='UnreadCountResponse',
        fields={
            'unread': serializers.IntegerField(),
            'total': serializers.IntegerField(),
        },
    )})
    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        """Unread and total notification counts."""
        service = self._service()
        return Response({
            'unread': service.get_unread_count(),
            'total': service.get_notification_count(),
        })

    @extend_schema(request=None, responses={204: None})
    @action(detail=False, methods=['delete'])
    def clear(self, request):
        """Delete every notification."""
        self._service().clear_all_notifications()
        return Response(status=status.HTTP_204_NO_CONTENT)
