from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import KYCStatus, User, UserRole
from apps.investments.services import (
    confirm_payment,
    create_investment_after_offline_payment,
    create_pending_investment,
)
from apps.notifications.service import get_notification_center
from apps.parking.models import ParkingLot


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


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def investor(db):
    """Create and return a verified investor."""
    return User.objects.create_user(
        email='asha@example.com',
        password='TestPass123!',
        name='Asha Investor',
        kyc_status=KYCStatus.VERIFIED,
    )


@pytest.fixture
def second_investor(db):
    """Create and return another investor."""
    return User.objects.create_user(
        email='ravi@example.com',
        password='TestPass123!',
        name='Ravi Investor',
        kyc_status=KYCStatus.VERIFIED,
    )


@pytest.fixture
def investment_admin(db):
    """Create and return an admin reviewing investments."""
    return User.objects.create_user(
        email='reviewer@example.com',
        password='TestPass123!',
        name='Investment Reviewer',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def investor_client(investor):
    return _client_for(investor)


@pytest.fixture
def second_investor_client(second_investor):
    return _client_for(second_investor)


@pytest.fixture
def admin_client(investment_admin):
    return _client_for(investment_admin)


# =============================================================================
# Parking lots and investments
# =============================================================================

@pytest.fixture
def parking_lot(db):
    """Ten free lots at 8% ROI."""
    return ParkingLot.objects.create(
        name='MG Road Plaza',
        location='Bengaluru',
        price=Decimal('100000.00'),
        roi=Decimal('8.00'),
        total_lots=10,
        available_lots=10,
    )


@pytest.fixture
def pending_investment(investor, parking_lot):
    """Online request for three lots; unpaid, nothing reserved."""
    return create_pending_investment(
        user=investor,
        parking_lot_id=parking_lot.id,
        amount=Decimal('300000.00'),
        selected_lots=3,
    )


@pytest.fixture
def paid_investment(pending_investment, investment_admin):
    """The pending request with its payment confirmed."""
    return confirm_payment(
        investment_id=pending_investment.id,
        payment_status='success',
        confirmed_by=investment_admin,
    )


@pytest.fixture
def offline_investment(investor, parking_lot, investment_admin):
    """Admin-recorded paid investment of two lots; lots reserved."""
    return create_investment_after_offline_payment(
        user_id=investor.id,
        parking_lot_id=parking_lot.id,
        amount=Decimal('200000.00'),
        created_by=investment_admin,
        selected_lots=2,
    )
