from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import KYCStatus, User, UserRole
from apps.investments.models import ApprovalStatus, InventoryState, Investment, PaymentStatus
from apps.notifications.service import get_notification_center
from apps.parking.models import ParkingLot, ParkingLotStatus


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
        email='investor@example.com',
        password='TestPass123!',
        name='Lot Investor',
        kyc_status=KYCStatus.VERIFIED,
    )


@pytest.fixture
def parking_admin(db):
    """Create and return an admin managing lots."""
    return User.objects.create_user(
        email='parking_admin@example.com',
        password='TestPass123!',
        name='Parking Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def investor_client(investor):
    return _client_for(investor)


@pytest.fixture
def parking_admin_client(parking_admin):
    return _client_for(parking_admin)


# =============================================================================
# Parking lots
# =============================================================================

@pytest.fixture
def parking_lot(db):
    """Ten free lots at 8% ROI."""
    return ParkingLot.objects.create(
        name='MG Road Plaza',
        location='Bengaluru',
        price=Decimal('250000.00'),
        roi=Decimal('8.00'),
        total_lots=10,
        available_lots=10,
    )


@pytest.fixture
def sold_out_lot(db):
    """Lot with no free inventory."""
    return ParkingLot.objects.create(
        name='Airport Road Hub',
        location='Hyderabad',
        price=Decimal('180000.00'),
        roi=Decimal('7.50'),
        total_lots=4,
        available_lots=0,
    )


@pytest.fixture
def inactive_lot(db):
    """Lot an admin switched off."""
    return ParkingLot.objects.create(
        name='Old Town Garage',
        location='Pune',
        price=Decimal('90000.00'),
        total_lots=5,
        available_lots=5,
        status=ParkingLotStatus.INACTIVE,
    )


@pytest.fixture
def approved_investment(investor, parking_lot):
    """Approved investment of two lots on parking_lot."""
    parking_lot.available_lots = 8
    parking_lot.save()
    return Investment.objects.create(
        user=investor,
        parking_lot=parking_lot,
        amount=Decimal('500000.00'),
        selected_lots=2,
        payment_status=PaymentStatus.SUCCESS,
        admin_approval_status=ApprovalStatus.APPROVED,
        inventory_state=InventoryState.RESERVED,
    )
