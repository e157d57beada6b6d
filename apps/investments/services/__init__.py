"""Services for investment business logic."""

from .exceptions import (
    InvestmentsServiceError,
    InvestmentNotFoundError,
    PaymentNotConfirmedError,
    InvestmentAlreadyApprovedError,
    InvalidInvestmentStateError,
    InvalidInvestmentAmountError,
)
from .lifecycle import lock_investment, reserve_inventory, release_inventory
from .investment_creation import (
    create_investment,
    create_pending_investment,
    create_investment_after_offline_payment,
)
from .approval import (
    AUTO_APPROVAL_NOTE,
    approve_investment_after_payment,
    approve_investment,
    reject_investment,
    release_investment,
    batch_approve_investments,
)
from .payment import confirm_payment, update_lease_status
from .queries import (
    get_all_investments,
    get_investments_by_status,
    get_pending_investments,
    get_user_investments,
    get_user_investment_history,
)

__all__ = [
    # Exceptions
    'InvestmentsServiceError',
    'InvestmentNotFoundError',
    'PaymentNotConfirmedError',
    'InvestmentAlreadyApprovedError',
    'InvalidInvestmentStateError',
    'InvalidInvestmentAmountError',
    # Lifecycle transitions
    'lock_investment',
    'reserve_inventory',
    'release_inventory',
    # Creation
    'create_investment',
    'create_pending_investment',
    'create_investment_after_offline_payment',
    # Approval
    'AUTO_APPROVAL_NOTE',
    'approve_investment_after_payment',
    'approve_investment',
    'reject_investment',
    'release_investment',
    'batch_approve_investments',
    # Payment
    'confirm_payment',
    'update_lease_status',
    # Queries
    'get_all_investments',
    'get_investments_by_status',
    'get_pending_investments',
    'get_user_investments',
    'get_user_investment_history',
]
