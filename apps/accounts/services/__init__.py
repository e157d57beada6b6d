"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    InsufficientPermissionsError,
    LastSuperAdminError,
    InvalidRoleError,
    InvalidKYCStatusError,
)
from .user_registration import register_user, validate_registration_data
from .user_authentication import authenticate_user
from .account_management import (
    get_user_by_id,
    get_all_users,
    update_user_profile,
    delete_user,
)
from .role_management import (
    get_current_user_role,
    check_admin_access,
    assign_user_role,
    promote_user_to_admin,
    revoke_admin_access,
    can_remove_admin,
    get_admin_users,
    count_admin_users,
    validate_admin_action,
)
from .kyc_management import (
    update_user_kyc_status,
    bulk_update_kyc_status,
    get_users_by_kyc_status,
    add_kyc_document,
    get_kyc_documents_for_user,
    cleanup_invalid_kyc_documents,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'InsufficientPermissionsError',
    'LastSuperAdminError',
    'InvalidRoleError',
    'InvalidKYCStatusError',
    # Registration / authentication
    'register_user',
    'validate_registration_data',
    'authenticate_user',
    # Account management
    'get_user_by_id',
    'get_all_users',
    'update_user_profile',
    'delete_user',
    # Roles
    'get_current_user_role',
    'check_admin_access',
    'assign_user_role',
    'promote_user_to_admin',
    'revoke_admin_access',
    'can_remove_admin',
    'get_admin_users',
    'count_admin_users',
    'validate_admin_action',
    # KYC
    'update_user_kyc_status',
    'bulk_update_kyc_status',
    'get_users_by_kyc_status',
    'add_kyc_document',
    'get_kyc_documents_for_user',
    'cleanup_invalid_kyc_documents',
]
