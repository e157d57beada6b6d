from decimal import Decimal
from types import SimpleNamespace
import uuid

import pytest

from apps.notifications.exceptions import NotificationNotFoundError, ServiceDisposedError
from apps.notifications.service import (
    Notification,
    NotificationCenter,
    NotificationPriority,
    NotificationService,
    NotificationType,
    format_inr,
)


def _alert(title='Heads up'):
    return Notification(type=NotificationType.SYSTEM_ALERT, title=title, message='...')


@pytest.fixture
def service():
    service = NotificationService(limit=100)
    yield service
    service.dispose()


class TestNotificationList:

    def test_newest_first(self, service):
        service.add_notification(_alert('first'))
        service.add_notification(_alert('second'))

        assert [n.title for n in service.get_notifications()] == ['second', 'first']

    def test_capped_at_limit_dropping_oldest(self, service):
        for i in range(105):
            service.add_notification(_alert(str(i)))

        notifications = service.get_notifications()
        assert len(notifications) == 100
        assert notifications[0].title == '104'
        assert notifications[-1].title == '5'

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            NotificationService(limit=0)

    def test_get_notifications_returns_a_copy(self, service):
        service.add_notification(_alert())

        service.get_notifications().clear()

        assert service.get_notification_count() == 1

    def test_mark_as_read(self, service):
        notification = service.add_notification(_alert())

        service.mark_as_read(notification.id)

        assert service.get_unread_count() == 0
        assert service.get_unread_notifications() == []

    def test_mark_all_returns_changed_count(self, service):
        first = service.add_notification(_alert())
        service.add_notification(_alert())
        service.add_notification(_alert())
        service.mark_as_read(first.id)

        assert service.mark_all_as_read() == 2
        assert service.mark_all_as_read() == 0

    def test_delete(self, service):
        keep = service.add_notification(_alert('keep'))
        drop = service.add_notification(_alert('drop'))

        service.delete_notification(drop.id)

        assert service.get_notifications() == [keep]

    def test_unknown_id(self, service):
        with pytest.raises(NotificationNotFoundError):
            service.mark_as_read('missing')
        with pytest.raises(NotificationNotFoundError):
            service.delete_notification('missing')

    def test_clear(self, service):
        service.add_notification(_alert())

        service.clear_all_notifications()

        assert service.get_notification_count() == 0

    def test_filter_by_type(self, service):
        service.create_kyc_approval_notification('Asha')
        service.add_notification(_alert())

        kyc = service.get_notifications_by_type(NotificationType.KYC_APPROVED)

        assert [n.type for n in kyc] == [NotificationType.KYC_APPROVED]


class TestListeners:

    def test_every_mutation_notifies(self, service):
        snapshots = []
        service.add_listener(lambda items: snapshots.append(len(items)))

        first = service.add_notification(_alert())
        service.add_notification(_alert())
        service.mark_as_read(first.id)
        service.mark_all_as_read()
        service.delete_notification(first.id)
        service.clear_all_notifications()

        assert snapshots == [1, 2, 2, 2, 1, 0]

    def test_listener_receives_current_list(self, service):
        received = []
        service.add_listener(received.append)

        notification = service.add_notification(_alert())

        assert received == [[notification]]

    def test_unsubscribe(self, service):
        calls = []
        unsubscribe = service.add_listener(lambda items: calls.append(items))

        service.add_notification(_alert())
        unsubscribe()
        service.add_notification(_alert())

        assert len(calls) == 1

    def test_unsubscribe_twice_is_harmless(self, service):
        unsubscribe = service.add_listener(lambda items: None)

        unsubscribe()
        unsubscribe()


class TestDispose:

    def test_disposed_service_refuses_use(self):
        service = NotificationService()
        service.add_notification(_alert())

        service.dispose()

        assert service.disposed
        assert service.get_notifications() == []
        with pytest.raises(ServiceDisposedError):
            service.add_notification(_alert())
        with pytest.raises(ServiceDisposedError):
            service.add_listener(lambda items: None)
        with pytest.raises(ServiceDisposedError):
            service.mark_all_as_read()

    def test_dispose_drops_listeners(self):
        calls = []
        service = NotificationService()
        service.add_listener(calls.append)

        service.dispose()

        assert calls == []


class TestEventNotifications:

    def test_investment_created(self, service):
        investment = SimpleNamespace(
            id=uuid.uuid4(), parking_lot_id=uuid.uuid4(), amount=Decimal('150000')
        )

        notification = service.create_investment_notification(investment, 'MG Road Plaza')

        assert notification.type == NotificationType.INVESTMENT_CREATED
        assert notification.priority == NotificationPriority.HIGH
        assert notification.message == (
            'Your investment of ₹150,000 in MG Road Plaza has been created.'
        )
        assert notification.data['investment_id'] == str(investment.id)
        assert notification.action_url == 'Portfolio'

    def test_investment_rejected_with_reason(self, service):
        investment = SimpleNamespace(id=uuid.uuid4(), amount=Decimal('5000'))

        notification = service.create_investment_rejection_notification(
            investment, 'Lake View', 'Duplicate request'
        )

        assert notification.priority == NotificationPriority.URGENT
        assert 'Reason: Duplicate request' in notification.message
        assert notification.data['reason'] == 'Duplicate request'

    def test_investment_rejected_without_reason(self, service):
        investment = SimpleNamespace(id=uuid.uuid4(), amount=Decimal('5000'))

        notification = service.create_investment_rejection_notification(investment, 'Lake View')

        assert 'Reason:' not in notification.message

    def test_payout(self, service):
        notification = service.create_payout_notification(Decimal('1250.50'), 'inv-1')

        assert notification.type == NotificationType.PAYOUT_RECEIVED
        assert '₹1,250.50' in notification.message
        assert notification.data == {'payout_id': None, 'investment_id': 'inv-1'}

    def test_payment_failure(self, service):
        notification = service.create_payment_failure_notification(100, 'Lake View', 'Card declined')

        assert notification.type == NotificationType.PAYMENT_FAILED
        assert notification.message.endswith('failed: Card declined')
        assert notification.action_url == 'InvestmentFlow'

    def test_roi_update(self, service):
        notification = service.create_roi_update_notification(
            'Lake View', Decimal('8.00'), Decimal('9.50')
        )

        assert notification.message == 'ROI for Lake View has been updated from 8.00% to 9.50%.'

    def test_system_alert_priority(self, service):
        notification = service.create_system_alert(
            'Maintenance', 'Back soon', priority=NotificationPriority.LOW
        )

        assert notification.priority == NotificationPriority.LOW
        assert notification.read is False


class TestNotificationCenter:

    def test_one_service_per_user(self):
        center = NotificationCenter(limit=5)
        user_id = uuid.uuid4()

        assert center.for_user(user_id) is center.for_user(str(user_id))
        assert center.for_user(user_id) is not center.for_user(uuid.uuid4())
        assert center.for_user(user_id).limit == 5

    def test_broadcast_roi_update_deduplicates(self):
        center = NotificationCenter()
        first, second = uuid.uuid4(), uuid.uuid4()

        sent = center.broadcast_roi_update([first, second, first], 'Lake View', 8, 9)

        assert sent == 2
        assert center.for_user(first).get_notification_count() == 1
        assert center.for_user(second).get_notification_count() == 1

    def test_dispose_replaces_services(self):
        center = NotificationCenter()
        user_id = uuid.uuid4()
        old = center.for_user(user_id)
        old.add_notification(_alert())

        center.dispose()

        assert old.disposed
        assert center.for_user(user_id) is not old
        assert center.for_user(user_id).get_notification_count() == 0


@pytest.mark.parametrize('amount, expected', [
    (150000, '₹150,000'),
    (Decimal('1250.5'), '₹1,250.50'),
    (None, '₹0'),
])
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected
