"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when user registration fails."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class InsufficientPermissionsError(AccountsServiceError):
    """Raised when the acting user's role does not allow the operation."""
    pass


class LastSuperAdminError(AccountsServiceError):
    """Raised when an operation would leave the system without a super admin."""
    pass


class InvalidRoleError(AccountsServiceError):
    """Raised when an unknown role is requested."""
    pass


class InvalidKYCStatusError(AccountsServiceError):
    """Raised when an unknown KYC status is requested."""
    pass
