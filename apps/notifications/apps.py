from django.apps import AppConfig
from django.conf import settings


class NotificationsConfig(AppConfig):
    name = 'apps.notifications'
    label = 'notifications'
    verbose_name = 'Notifications'

    def ready(self):
        from .service import NotificationCenter

        self.center = NotificationCenter(
            limit=getattr(settings, 'NOTIFICATION_LIMIT', 100)
        )
