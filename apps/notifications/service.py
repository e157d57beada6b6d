"""
In-app notification dispatcher.

Notifications live in memory only and are lost when the process exits.

Classes:
    Notification: One alert shown to a user.
    NotificationService: Capped, newest-first list with listener fan-out.
    NotificationCenter: One NotificationService per user for the process.

Lifecycle:
    A service is constructed, subscribed to with ``add_listener`` (which
    returns an unsubscribe callable) and finally ``dispose``d, after
    which it refuses further use. The process-wide center is created by
    the notifications app config and reached with
    ``get_notification_center()``; tests build their own services.

Example::

    service = NotificationService(limit=100)
    unsubscribe = service.add_listener(lambda items: print(len(items)))
    service.create_kyc_approval_notification('Asha')
    unsubscribe()
    service.dispose()
"""

from dataclasses import dataclass, field
from decimal import Decimal
import logging
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from django.apps import apps
from django.db import models
from django.utils import timezone

from .exceptions import NotificationNotFoundError, ServiceDisposedError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100


class NotificationType(models.TextChoices):
    INVESTMENT_CREATED = 'investment_created', 'Investment Created'
    INVESTMENT_APPROVED = 'investment_approved', 'Investment Approved'
    INVESTMENT_REJECTED = 'investment_rejected', 'Investment Rejected'
    PAYOUT_RECEIVED = 'payout_received', 'Payout Received'
    KYC_APPROVED = 'kyc_approved', 'KYC Approved'
    KYC_REJECTED = 'kyc_rejected', 'KYC Rejected'
    PAYMENT_SUCCESS = 'payment_success', 'Payment Success'
    PAYMENT_FAILED = 'payment_failed', 'Payment Failed'
    ROI_UPDATE = 'roi_update', 'ROI Update'
    SYSTEM_ALERT = 'system_alert', 'System Alert'


class NotificationPriority(models.TextChoices):
    LOW = 'low', 'Low'
    NORMAL = 'normal', 'Normal'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


@dataclass
class Notification:
    type: str
    title: str
    message: str
    priority: str = NotificationPriority.NORMAL
    data: Dict[str, Any] = field(default_factory=dict)
    action_url: Optional[str] = None
    read: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: Any = field(default_factory=timezone.now)


Listener = Callable[[List[Notification]], None]


def format_inr(amount) -> str:
    """Format an amount as rupees: 150000 -> '₹150,000', 1250.5 -> '₹1,250.50'."""
    value = Decimal(str(amount or 0))
    if value == value.to_integral_value():
        return f"₹{int(value):,}"
    return f"₹{value:,.2f}"


class NotificationService:
    """
    Capped in-memory notification list for one recipient.

    The newest notification comes first. When the list grows past
    ``limit`` the oldest entries are dropped. Every mutation (add, mark
    read, delete, clear) calls each listener with a copy of the list.
    """

    def __init__(self, limit: int = DEFAULT_LIMIT):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self._notifications: List[Notification] = []
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._disposed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Drop listeners and notifications; the service cannot be reused."""
        with self._lock:
            self._listeners = []
            self._notifications = []
            self._disposed = True

    def _check_alive(self) -> None:
        if self._disposed:
            raise ServiceDisposedError("Notification service has been disposed")

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """
        Subscribe to list changes.

        Returns:
            Callable that removes the listener again
        """
        with self._lock:
            self._check_alive()
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                self._listeners = [
                    existing for existing in self._listeners if existing is not listener
                ]

        return unsubscribe

    def _notify_listeners(self) -> None:
        snapshot = list(self._notifications)
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_notification(self, notification: Notification) -> Notification:
        with self._lock:
            self._check_alive()
            self._notifications.insert(0, notification)
            if len(self._notifications) > self.limit:
                del self._notifications[self.limit:]
            self._notify_listeners()

        logger.debug("Notification %s (%s): %s", notification.id, notification.type, notification.title)
        return notification

    def mark_as_read(self, notification_id: str) -> Notification:
        with self._lock:
            self._check_alive()
            notification = self._find(notification_id)
            notification.read = True
            self._notify_listeners()
            return notification

    def mark_all_as_read(self) -> int:
        """Mark everything read and return how many were unread."""
        with self._lock:
            self._check_alive()
            changed = 0
            for notification in self._notifications:
                if not notification.read:
                    notification.read = True
                    changed += 1
            self._notify_listeners()
            return changed

    def delete_notification(self, notification_id: str) -> None:
        with self._lock:
            self._check_alive()
            notification = self._find(notification_id)
            self._notifications.remove(notification)
            self._notify_listeners()

    def clear_all_notifications(self) -> None:
        with self._lock:
            self._check_alive()
            self._notifications = []
            self._notify_listeners()

    def _find(self, notification_id: str) -> Notification:
        for notification in self._notifications:
            if notification.id == notification_id:
                return notification
        raise NotificationNotFoundError(f"Notification {notification_id} not found")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_notifications(self) -> List[Notification]:
        with self._lock:
            return list(self._notifications)

    def get_unread_notifications(self) -> List[Notification]:
        with self._lock:
            return [n for n in self._notifications if not n.read]

    def get_notifications_by_type(self, notification_type: str) -> List[Notification]:
        with self._lock:
            return [n for n in self._notifications if n.type == notification_type]

    def get_notification_count(self) -> int:
        with self._lock:
            return len(self._notifications)

    def get_unread_count(self) -> int:
        with self._lock:
            return sum(1 for n in self._notifications if not n.read)

    # ------------------------------------------------------------------
    # Event-specific creators
    # ------------------------------------------------------------------

    def create_investment_notification(self, investment, parking_lot_name: str) -> Notification:
        return self.add_notification(Notification(
            type=NotificationType.INVESTMENT_CREATED,
            title='Investment Created Successfully!',
            message=(
                f"Your investment of {format_inr(investment.amount)} in "
                f"{parking_lot_name} has been created."
            ),
            priority=NotificationPriority.HIGH,
            data={
                'investment_id': str(investment.id),
                'parking_lot_id': str(investment.parking_lot_id),
            },
            action_url='Portfolio',
        ))

    def create_payout_notification(self, amount, investment_id, payout_id=None) -> Notification:
        return self.add_notification(Notification(
            type=NotificationType.PAYOUT_RECEIVED,
            title='Monthly Payout Received!',
            message=f"You have received {format_inr(amount)} from your investment.",
            priority=NotificationPriority.HIGH,
            data={
                'payout_id': str(payout_id) if payout_id else None,
                'investment_id': str(investment_id),
            },
            action_url='Portfolio',
        ))

    def create_kyc_approval_notification(self, user_name: str) -> Notification:
        return self.add_notification(Notification(
            type=NotificationType.KYC_APPROVED,
            title='KYC Verification Approved!',
            message=f"Congratulations {user_name}! Your KYC verification has been approved.",
            priority=NotificationPriority.HIGH,
            action_url='Browse',
        ))

    def create_kyc_rejection_notification(self, user_name: str, reason: str) -> Notification:
        return self.add_notification(Notification(
            type=NotificationType.KYC_REJECTED,
            title='KYC Verification Rejected',
            message=(
                f"Your KYC verification was rejected: {reason}. "
                "Please update your documents and try again."
            ),
            priority=NotificationPriority.URGENT,
            data={'user_name': user_name},
            action_url='Profile',
        ))

    def create_payment_success_notification(self, amount, parking_lot_name: str) -> Notification:
        return self.add_notification(Notification(
            type=NotificationType.PAYMENT_SUCCESS,
            title='Payment Successful!',
            message=(
                f"Your payment of {format_inr(amount)} for {parking_lot_name} "
                "has been processed successfully."
            ),
            priority=NotificationPriority.HIGH,
            action_url='Portfolio',
        ))

    def create_payment_failure_notification(self, amount, parking_lot_name: str, error: str) -> Notification:
        return self.add_notification(Notification(
            type=NotificationType.PAYMENT_FAILED,
            title='Payment Failed',
            message=f"Your payment of {format_inr(amount)} for {parking_lot_name} failed: {error}",
            priority=NotificationPriority.URGENT,
            action_url='InvestmentFlow',
        ))

    def create_roi_update_notification(self, parking_lot_name: str, old_roi, new_roi) -> Notification:
        return self.add_notification(Notification(
            type=NotificationType.ROI_UPDATE,
            title='ROI Update',
            message=f"ROI for {parking_lot_name} has been updated from {old_roi}% to {new_roi}%.",
            priority=NotificationPriority.NORMAL,
            data={'old_roi': str(old_roi), 'new_roi': str(new_roi)},
            action_url='Browse',
        ))

    def create_investment_approval_notification(self, investment, parking_lot_name: str) -> Notification:
        return self.add_notification(Notification(
            type=NotificationType.INVESTMENT_APPROVED,
            title='Investment Approved! 🎉',
            message=(
                f"Great news! Your investment of {format_inr(investment.amount)} in "
                f"{parking_lot_name} has been approved by our admin team. "
                "You can now view it in your portfolio."
            ),
            priority=NotificationPriority.HIGH,
            data={
                'investment_id': str(investment.id),
                'parking_lot_name': parking_lot_name,
            },
            action_url='Portfolio',
        ))

    def create_investment_rejection_notification(
        self,
        investment,
        parking_lot_name: str,
        reason: Optional[str] = None
    ) -> Notification:
        reason_text = f" Reason: {reason}" if reason else ''
        return self.add_notification(Notification(
            type=NotificationType.INVESTMENT_REJECTED,
            title='Investment Rejected',
            message=(
                f"Unfortunately, your investment of {format_inr(investment.amount)} in "
                f"{parking_lot_name} has been rejected by our admin team.{reason_text} "
                "Please contact support for more information."
            ),
            priority=NotificationPriority.URGENT,
            data={
                'investment_id': str(investment.id),
                'parking_lot_name': parking_lot_name,
                'reason': reason,
            },
            action_url='Browse',
        ))

    def create_system_alert(
        self,
        title: str,
        message: str,
        priority: str = NotificationPriority.HIGH
    ) -> Notification:
        return self.add_notification(Notification(
            type=NotificationType.SYSTEM_ALERT,
            title=title,
            message=message,
            priority=priority,
        ))


class NotificationCenter:
    """Lazily created NotificationService per user id."""

    def __init__(self, limit: int = DEFAULT_LIMIT):
        self.limit = limit
        self._services: Dict[str, NotificationService] = {}
        self._lock = threading.Lock()

    def for_user(self, user_id) -> NotificationService:
        key = str(user_id)
        with self._lock:
            service = self._services.get(key)
            if service is None or service.disposed:
                service = NotificationService(limit=self.limit)
                self._services[key] = service
            return service

    def broadcast_roi_update(self, user_ids, parking_lot_name: str, old_roi, new_roi) -> int:
        """Send an ROI update to each user; returns how many were notified."""
        count = 0
        for user_id in set(str(u) for u in user_ids):
            self.for_user(user_id).create_roi_update_notification(parking_lot_name, old_roi, new_roi)
            count += 1
        return count

    def dispose(self) -> None:
        """Dispose every per-user service; the center itself stays usable."""
        with self._lock:
            services = list(self._services.values())
            self._services = {}
        for service in services:
            service.dispose()


def get_notification_center() -> NotificationCenter:
    """The center owned by the notifications app for this process."""
    return apps.get_app_config('notifications').center
