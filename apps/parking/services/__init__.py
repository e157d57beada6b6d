"""Services for parking lot business logic."""

from .exceptions import (
    ParkingServiceError,
    ParkingLotNotFoundError,
    ParkingLotInUseError,
    InsufficientLotsError,
    InvalidLotCountError,
)
from .inventory import lock_parking_lot, reserve_lots, release_lots
from .lot_management import (
    get_parking_lot_by_id,
    get_all_parking_lots,
    get_available_parking_lots,
    create_parking_lot,
    update_parking_lot,
    delete_parking_lot,
)

__all__ = [
    # Exceptions
    'ParkingServiceError',
    'ParkingLotNotFoundError',
    'ParkingLotInUseError',
    'InsufficientLotsError',
    'InvalidLotCountError',
    # Inventory
    'lock_parking_lot',
    'reserve_lots',
    'release_lots',
    # Lot management
    'get_parking_lot_by_id',
    'get_all_parking_lots',
    'get_available_parking_lots',
    'create_parking_lot',
    'update_parking_lot',
    'delete_parking_lot',
]
