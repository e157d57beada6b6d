import uuid

import pytest
from django.urls import reverse
from rest_framework import status

from apps.notifications.service import NotificationType


@pytest.mark.django_db
class TestNotificationList:

    def test_requires_auth(self, api_client):
        response = api_client.get(reverse('notifications:notification-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_newest_first(self, recipient_client, inbox):
        response = recipient_client.get(reverse('notifications:notification-list'))

        assert response.status_code == status.HTTP_200_OK
        assert [n['type'] for n in response.data] == [
            NotificationType.SYSTEM_ALERT,
            NotificationType.KYC_APPROVED,
        ]
        assert response.data[0]['read'] is False

    def test_other_users_notifications_hidden(self, recipient_client, bystander, notification_center):
        notification_center.for_user(bystander.id).create_system_alert('Private', 'Not yours')

        response = recipient_client.get(reverse('notifications:notification-list'))

        assert response.data == []

    def test_filter_by_type(self, recipient_client, inbox):
        response = recipient_client.get(
            reverse('notifications:notification-list'), {'type': 'kyc_approved'}
        )

        assert [n['type'] for n in response.data] == [NotificationType.KYC_APPROVED]

    def test_filter_unread(self, recipient_client, inbox):
        inbox.mark_as_read(inbox.get_notifications()[0].id)

        response = recipient_client.get(
            reverse('notifications:notification-list'), {'unread': 'true'}
        )

        assert [n['type'] for n in response.data] == [NotificationType.KYC_APPROVED]


@pytest.mark.django_db
class TestNotificationActions:

    def test_mark_read(self, recipient_client, inbox):
        notification = inbox.get_notifications()[0]

        response = recipient_client.post(
            reverse('notifications:notification-read', args=[notification.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['read'] is True
        assert inbox.get_unread_count() == 1

    def test_mark_read_unknown(self, recipient_client, inbox):
        response = recipient_client.post(
            reverse('notifications:notification-read', args=[uuid.uuid4()])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_read_all(self, recipient_client, inbox):
        response = recipient_client.post(reverse('notifications:notification-read-all'))

        assert response.data == {'marked': 2}
        assert inbox.get_unread_count() == 0

    def test_unread_count(self, recipient_client, inbox):
        inbox.mark_as_read(inbox.get_notifications()[1].id)

        response = recipient_client.get(reverse('notifications:notification-unread-count'))

        assert response.data == {'unread': 1, 'total': 2}

    def test_delete(self, recipient_client, inbox):
        notification = inbox.get_notifications()[0]

        response = recipient_client.delete(
            reverse('notifications:notification-detail', args=[notification.id])
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert inbox.get_notification_count() == 1

    def test_delete_unknown(self, recipient_client, inbox):
        response = recipient_client.delete(
            reverse('notifications:notification-detail', args=[uuid.uuid4()])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_clear(self, recipient_client, inbox):
        response = recipient_client.delete(reverse('notifications:notification-clear'))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert inbox.get_notification_count() == 0
