"""
Parking lot management service.

CRUD for parking lots. Inventory counters are changed only through
``inventory.reserve_lots`` / ``inventory.release_lots``, except when an
admin resizes a lot.
"""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from apps.core.retry import with_retry
from apps.parking.models import ParkingLot, ParkingLotStatus

from .exceptions import (
    InvalidLotCountError,
    ParkingLotInUseError,
    ParkingLotNotFoundError,
)
from .inventory import lock_parking_lot

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset([
    'name',
    'location',
    'price',
    'roi',
    'details',
    'images',
    'status',
    'total_lots',
])


def get_parking_lot_by_id(*, lot_id: UUID) -> ParkingLot:
    """
    Get a parking lot by ID.

    Raises:
        ParkingLotNotFoundError: If lot doesn't exist
    """
    try:
        return ParkingLot.objects.get(id=lot_id)
    except (ParkingLot.DoesNotExist, ValidationError):
        raise ParkingLotNotFoundError(f"Parking lot {lot_id} not found")


def get_all_parking_lots() -> QuerySet:
    """Every parking lot regardless of status, newest first."""
    return ParkingLot.objects.all().order_by('-created_at')


def get_available_parking_lots() -> QuerySet:
    """Lots that still have inventory to sell."""
    return ParkingLot.objects.filter(availability=True).order_by('-created_at')


@transaction.atomic
def create_parking_lot(
    *,
    name: str,
    location: str,
    price: Decimal,
    total_lots: int,
    roi: Decimal = Decimal('0.00'),
    details: str = '',
    images: Optional[List[str]] = None,
    available_lots: Optional[int] = None,
    status: str = ParkingLotStatus.ACTIVE
) -> ParkingLot:
    """
    Create a new parking lot.

    Args:
        name: Display name
        location: Address or area
        price: Price per lot
        total_lots: Number of lots in the facility
        roi: Expected annual ROI in percent
        details: Free-form description
        images: List of image URLs
        available_lots: Lots open for investment, defaults to total_lots
        status: active, inactive or pending

    Returns:
        Created ParkingLot instance

    Raises:
        InvalidLotCountError: If available_lots exceeds total_lots
    """
    if available_lots is None:
        available_lots = total_lots

    if available_lots > total_lots:
        raise InvalidLotCountError("Available lots cannot exceed total lots")

    lot = ParkingLot.objects.create(
        name=name,
        location=location,
        price=price,
        roi=roi,
        details=details,
        images=images or [],
        total_lots=total_lots,
        available_lots=available_lots,
        status=status,
    )

    logger.info("Created parking lot %s (%d lots)", lot.id, total_lots)
    return lot


@with_retry
@transaction.atomic
def update_parking_lot(*, lot_id: UUID, **updates) -> ParkingLot:
    """
    Update descriptive fields of a parking lot.

    Changing ``total_lots`` shifts ``available_lots`` by the same amount so
    lots already reserved by investments stay reserved. The returned lot
    carries ``previous_roi``, read under the row lock, so callers can
    report an ROI change.

    Args:
        lot_id: ID of lot to update
        **updates: Any of UPDATABLE_FIELDS

    Returns:
        Updated ParkingLot instance with ``previous_roi`` set

    Raises:
        ParkingLotNotFoundError: If lot doesn't exist
        InvalidLotCountError: If new total is below the reserved count
    """
    unknown = set(updates) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    lot = lock_parking_lot(lot_id=lot_id)
    previous_roi = lot.roi

    if 'total_lots' in updates:
        new_total = updates.pop('total_lots')
        if new_total < lot.reserved_lots:
            raise InvalidLotCountError(
                f"Total lots cannot be below the {lot.reserved_lots} lots already reserved"
            )
        lot.available_lots += new_total - lot.total_lots
        lot.total_lots = new_total

    for field, value in updates.items():
        setattr(lot, field, value)

    lot.save()
    lot.previous_roi = previous_roi

    logger.info("Updated parking lot %s", lot.id)
    return lot


@with_retry
@transaction.atomic
def delete_parking_lot(*, lot_id: UUID) -> None:
    """
    Delete a parking lot that no investment references.

    Raises:
        ParkingLotNotFoundError: If lot doesn't exist
        ParkingLotInUseError: If any investment references the lot
    """
    lot = lock_parking_lot(lot_id=lot_id)

    if lot.investments.exists():
        raise ParkingLotInUseError("Cannot delete parking lot with active investments")

    lot.delete()
    logger.info("Deleted parking lot %s", lot_id)
