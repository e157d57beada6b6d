"""Domain-specific exceptions for the notification dispatcher."""


class NotificationsServiceError(Exception):
    """Base exception for notification services."""
    pass


class NotificationNotFoundError(NotificationsServiceError):
    """Raised when a notification id is not in the list."""
    pass


class ServiceDisposedError(NotificationsServiceError):
    """Raised when a disposed notification service is used."""
    pass
