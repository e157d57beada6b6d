"""
Lot inventory transitions.

``reserve_lots`` and ``release_lots`` are the only functions that change
``ParkingLot.available_lots``. Both expect to run inside a transaction
and lock the lot row themselves.
"""

import logging
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.parking.models import ParkingLot

from .exceptions import (
    InsufficientLotsError,
    InvalidLotCountError,
    ParkingLotNotFoundError,
)

logger = logging.getLogger(__name__)


def lock_parking_lot(*, lot_id: UUID) -> ParkingLot:
    """
    Fetch a lot with a row lock for the rest of the transaction.

    Raises:
        ParkingLotNotFoundError: If lot doesn't exist
    """
    try:
        return ParkingLot.objects.select_for_update().get(id=lot_id)
    except (ParkingLot.DoesNotExist, ValidationError):
        raise ParkingLotNotFoundError(f"Parking lot {lot_id} not found")


@transaction.atomic
def reserve_lots(*, lot_id: UUID, count: int) -> ParkingLot:
    """
    Take ``count`` lots out of the available inventory.

    Fails instead of clamping, so available_lots never goes negative.

    Returns:
        Updated ParkingLot

    Raises:
        InvalidLotCountError: If count is not positive
        ParkingLotNotFoundError: If lot doesn't exist
        InsufficientLotsError: If fewer than ``count`` lots are available
    """
    if count is None or count < 1:
        raise InvalidLotCountError("Selected lots must be at least 1")

    lot = lock_parking_lot(lot_id=lot_id)

    if lot.available_lots < count:
        raise InsufficientLotsError(
            f"Insufficient available lots. Only {lot.available_lots} lots "
            f"available, but {count} requested."
        )

    lot.available_lots -= count
    lot.save(update_fields=['available_lots', 'updated_at'])

    logger.info(
        "Reserved %d lots on %s, %d remaining",
        count, lot.id, lot.available_lots
    )
    return lot


@transaction.atomic
def release_lots(*, lot_id: UUID, count: int) -> ParkingLot:
    """
    Return ``count`` previously reserved lots to the inventory.

    Raises:
        InvalidLotCountError: If count is not positive or would exceed total_lots
        ParkingLotNotFoundError: If lot doesn't exist
    """
    if count is None or count < 1:
        raise InvalidLotCountError("Released lots must be at least 1")

    lot = lock_parking_lot(lot_id=lot_id)

    if lot.available_lots + count > lot.total_lots:
        raise InvalidLotCountError(
            f"Cannot release {count} lots: only {lot.reserved_lots} are reserved"
        )

    lot.available_lots += count
    lot.save(update_fields=['available_lots', 'updated_at'])

    logger.info(
        "Released %d lots on %s, %d available",
        count, lot.id, lot.available_lots
    )
    return lot
