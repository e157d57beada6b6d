from rest_framework import serializers

from .service import NotificationPriority, NotificationType


class NotificationSerializer(serializers.Serializer):
    """Serializes the in-memory Notification dataclass."""

    id = serializers.CharField(read_only=True)
    type = serializers.ChoiceField(choices=NotificationType.choices, read_only=True)
    title = serializers.CharField(read_only=True)
    message = serializers.CharField(read_only=True)
    priority = serializers.ChoiceField(choices=NotificationPriority.choices, read_only=True)
    data = serializers.DictField(read_only=True)
    action_url = serializers.CharField(read_only=True, allow_null=True)
    read = serializers.BooleanField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True)


class NotificationFilterSerializer(serializers.Serializer):
    """Query parameters for the notification list."""

    unread = serializers.BooleanField(required=False, default=False)
    type = serializers.ChoiceField(choices=NotificationType.choices, required=False)
