"""Domain-specific exceptions for investment services."""


class InvestmentsServiceError(Exception):
    """Base exception for investment services."""
    pass


class InvestmentNotFoundError(InvestmentsServiceError):
    """Raised when investment does not exist."""
    pass


class PaymentNotConfirmedError(InvestmentsServiceError):
    """Raised when approving an investment whose payment is not confirmed."""
    pass


class InvestmentAlreadyApprovedError(InvestmentsServiceError):
    """Raised when approving an investment a second time."""
    pass


class InvalidInvestmentStateError(InvestmentsServiceError):
    """Raised when a lifecycle transition is not allowed from the current state."""
    pass


class InvalidInvestmentAmountError(InvestmentsServiceError):
    """Raised when amount or lot count is not positive."""
    pass
