import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import KYCStatus, User, UserRole
from apps.investments.models import ApprovalStatus, InventoryState, Investment, PaymentStatus
from apps.parking.models import ParkingLot, ParkingLotStatus


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def analytics_user(db):
    """Create the main analytics test investor."""
    return User.objects.create_user(
        email='analytics_user@example.com',
        password='TestPass123!',
        name='Analytics User',
        kyc_status=KYCStatus.VERIFIED,
    )


@pytest.fixture
def analytics_other_user(db):
    """Create an investor with KYC still pending."""
    return User.objects.create_user(
        email='analytics_other@example.com',
        password='TestPass123!',
        name='Other Analytics User',
    )


@pytest.fixture
def analytics_admin(db):
    """Create an admin allowed to read statistics."""
    return User.objects.create_user(
        email='analytics_admin@example.com',
        password='TestPass123!',
        name='Analytics Admin',
        role=UserRole.ADMIN,
        kyc_status=KYCStatus.VERIFIED,
    )


@pytest.fixture
def analytics_user_client(analytics_user):
    return _client_for(analytics_user)


@pytest.fixture
def analytics_admin_client(analytics_admin):
    return _client_for(analytics_admin)


# =============================================================================
# Parking lots and investments
# =============================================================================

@pytest.fixture
def analytics_lot(db):
    """Active lot paying 12% a year."""
    return ParkingLot.objects.create(
        name='Analytics Plaza',
        location='Mumbai',
        price=Decimal('100000.00'),
        roi=Decimal('12.00'),
        total_lots=10,
        available_lots=7,
    )


@pytest.fixture
def analytics_second_lot(db):
    """Inactive lot paying 6% a year."""
    return ParkingLot.objects.create(
        name='Analytics Annex',
        location='Thane',
        price=Decimal('50000.00'),
        roi=Decimal('6.00'),
        total_lots=4,
        available_lots=3,
        status=ParkingLotStatus.INACTIVE,
    )


def _investment(user, lot, amount, approval, payment=PaymentStatus.SUCCESS, lots=1):
    return Investment.objects.create(
        user=user,
        parking_lot=lot,
        amount=Decimal(amount),
        selected_lots=lots,
        expected_roi=lot.roi,
        payment_status=payment,
        admin_approval_status=approval,
        inventory_state=InventoryState.RESERVED,
    )


@pytest.fixture
def analytics_portfolio(analytics_user, analytics_other_user, analytics_lot, analytics_second_lot):
    """
    Two approved investments for analytics_user (12% on 300000, 6% on
    50000), one pending for the same user and one approved for the other
    user.
    """
    return {
        'approved_main': _investment(
            analytics_user, analytics_lot, '300000.00', ApprovalStatus.APPROVED, lots=3
        ),
        'approved_annex': _investment(
            analytics_user, analytics_second_lot, '50000.00', ApprovalStatus.APPROVED
        ),
        'pending': _investment(
            analytics_user, analytics_lot, '100000.00', ApprovalStatus.PENDING,
            payment=PaymentStatus.PENDING
        ),
        'other_approved': _investment(
            analytics_other_user, analytics_lot, '100000.00', ApprovalStatus.APPROVED
        ),
    }
