"""Domain-specific exceptions for parking services."""


class ParkingServiceError(Exception):
    """Base exception for parking services."""
    pass


class ParkingLotNotFoundError(ParkingServiceError):
    """Raised when parking lot does not exist."""
    pass


class ParkingLotInUseError(ParkingServiceError):
    """Raised when deleting a lot that investments still reference."""
    pass


class InsufficientLotsError(ParkingServiceError):
    """Raised when a reservation asks for more lots than are available."""
    pass


class InvalidLotCountError(ParkingServiceError):
    """Raised when a lot count is not a positive number or breaks inventory bounds."""
    pass
