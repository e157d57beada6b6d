import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
from apps.notifications.service import get_notification_center


@pytest.fixture(autouse=True)
def notification_center():
    """Process-wide notification center, emptied after each test."""
    center = get_notification_center()
    yield center
    center.dispose()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def recipient(db):
    """Create and return the user receiving notifications."""
    return User.objects.create_user(
        email='recipient@example.com',
        password='TestPass123!',
        name='Notified User',
    )


@pytest.fixture
def bystander(db):
    """Create and return a user whose notifications stay separate."""
    return User.objects.create_user(
        email='bystander@example.com',
        password='TestPass123!',
        name='Bystander',
    )


@pytest.fixture
def recipient_client(recipient):
    client = APIClient()
    refresh = RefreshToken.for_user(recipient)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def inbox(recipient, notification_center):
    """The recipient's notification service with a KYC approval and a system alert."""
    service = notification_center.for_user(recipient.id)
    service.create_kyc_approval_notification('Notified User')
    service.create_system_alert('Maintenance', 'Scheduled downtime tonight')
    return service
