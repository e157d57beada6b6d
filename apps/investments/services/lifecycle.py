"""
Investment state transitions.

An investment moves through one explicit state machine:

    draft -> reserved -> approved
                      -> rejected -> released

``reserve_inventory`` is the only transition that takes lots from a
parking lot and ``release_inventory`` the only one that gives them back.
Both creation paths and approval go through ``reserve_inventory``; which
path calls it first decides when the lots are taken.
"""

import logging
from uuid import UUID

from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.investments.models import Investment, InventoryState
from apps.parking.models import ParkingLot
from apps.parking.services import release_lots, reserve_lots

from .exceptions import InvalidInvestmentStateError, InvestmentNotFoundError

logger = logging.getLogger(__name__)


def lock_investment(*, investment_id: UUID) -> Investment:
    """
    Fetch an investment with a row lock for the rest of the transaction.

    Raises:
        InvestmentNotFoundError: If investment doesn't exist
    """
    try:
        return (
            Investment.objects
            .select_for_update()
            .get(id=investment_id)
        )
    except (Investment.DoesNotExist, ValidationError):
        raise InvestmentNotFoundError(f"Investment {investment_id} not found")


def reserve_inventory(investment: Investment) -> ParkingLot:
    """
    Transition draft -> reserved, taking the selected lots off the lot.

    Must run inside a transaction with the investment locked.

    Raises:
        InvalidInvestmentStateError: If the investment is not a draft
        InsufficientLotsError: If the lot cannot cover the selection
    """
    if investment.inventory_state != InventoryState.DRAFT:
        raise InvalidInvestmentStateError(
            f"Cannot reserve lots for an investment in state '{investment.inventory_state}'"
        )

    lot = reserve_lots(lot_id=investment.parking_lot_id, count=investment.selected_lots)

    investment.inventory_state = InventoryState.RESERVED
    investment.save(update_fields=['inventory_state', 'updated_at'])

    logger.info(
        "Investment %s reserved %d lots on %s",
        investment.id, investment.selected_lots, lot.id
    )
    return lot


def release_inventory(investment: Investment) -> ParkingLot:
    """
    Transition reserved -> released, returning the lots to the lot.

    Must run inside a transaction with the investment locked.

    Raises:
        InvalidInvestmentStateError: If the investment holds no lots
    """
    if investment.inventory_state != InventoryState.RESERVED:
        raise InvalidInvestmentStateError("Investment holds no reserved lots")

    lot = release_lots(lot_id=investment.parking_lot_id, count=investment.selected_lots)

    investment.inventory_state = InventoryState.RELEASED
    investment.released_at = timezone.now()
    investment.save(update_fields=['inventory_state', 'released_at', 'updated_at'])

    logger.info(
        "Investment %s released %d lots on %s",
        investment.id, investment.selected_lots, lot.id
    )
    return lot
