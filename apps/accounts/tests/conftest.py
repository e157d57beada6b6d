import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import KYCStatus, User, UserRole
from apps.notifications.service import get_notification_center


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


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
def user(db):
    """Create and return a plain investor."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        name='Test User',
    )


@pytest.fixture
def other_user(db):
    """Create and return another investor."""
    return User.objects.create_user(
        email='otheruser@example.com',
        password='OtherPass123!',
        name='Other User',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def admin_user(db):
    """Create and return a user with the admin role."""
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        name='Admin User',
        role=UserRole.ADMIN,
        kyc_status=KYCStatus.VERIFIED,
    )


@pytest.fixture
def super_admin(db):
    """Create and return a super admin."""
    return User.objects.create_user(
        email='super@example.com',
        password='SuperPass123!',
        name='Super Admin',
        role=UserRole.SUPER_ADMIN,
        kyc_status=KYCStatus.VERIFIED,
    )


@pytest.fixture
def second_super_admin(db):
    """Create and return a second super admin."""
    return User.objects.create_user(
        email='super2@example.com',
        password='SuperPass123!',
        name='Second Super Admin',
        role=UserRole.SUPER_ADMIN,
    )


@pytest.fixture
def authenticated_client(user):
    """Return an API client authenticated as the investor."""
    return _client_for(user)


@pytest.fixture
def admin_client(admin_user):
    """Return an API client authenticated as the admin."""
    return _client_for(admin_user)


@pytest.fixture
def super_admin_client(super_admin):
    """Return an API client authenticated as the super admin."""
    return _client_for(super_admin)
