from decimal import Decimal
import uuid

from django.core.validators import MinValueValidator
from django.db import models


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    SUCCESS = 'success', 'Success'
    FAILED = 'failed', 'Failed'


class ApprovalStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class InventoryState(models.TextChoices):
    """Whether the investment currently holds lots on its parking lot."""
    DRAFT = 'draft', 'Draft'
    RESERVED = 'reserved', 'Reserved'
    RELEASED = 'released', 'Released'


class PaymentMethod(models.TextChoices):
    ONLINE = 'online', 'Online'
    OFFLINE = 'offline', 'Offline'
    BANK_TRANSFER = 'bank_transfer', 'Bank Transfer'
    CASH = 'cash', 'Cash'
    CHEQUE = 'cheque', 'Cheque'


class Investment(models.Model):
    """
    A user's purchase of lots in a parking facility.

    Lifecycle: draft -> reserved -> approved | rejected (-> released).
    ``inventory_state`` tracks the lots held on the parking lot,
    ``admin_approval_status`` tracks the admin decision.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='investments'
    )
    parking_lot = models.ForeignKey(
        'parking.ParkingLot',
        on_delete=models.PROTECT,
        related_name='investments'
    )

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    selected_lots = models.PositiveIntegerField(default=1)
    expected_roi = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.OFFLINE
    )

    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True
    )
    admin_approval_status = models.CharField(
        max_length=20,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
        db_index=True
    )
    inventory_state = models.CharField(
        max_length=20,
        choices=InventoryState.choices,
        default=InventoryState.DRAFT
    )
    lease_accepted = models.BooleanField(default=False)
    created_by_admin = models.BooleanField(default=False)

    admin_notes = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)

    # Audit
    payment_confirmed_at = models.DateTimeField(null=True, blank=True)
    payment_confirmed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='confirmed_investments'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_investments'
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='rejected_investments'
    )
    released_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'investments'
        indexes = [
            models.Index(fields=['user', 'created_at']),
            models.Index(fields=['parking_lot', 'admin_approval_status']),
            models.Index(fields=['admin_approval_status', 'payment_status']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} - {self.parking_lot.name} ({self.amount})"

    @property
    def is_approved(self):
        return self.admin_approval_status == ApprovalStatus.APPROVED

    @property
    def is_rejected(self):
        return self.admin_approval_status == ApprovalStatus.REJECTED

    @property
    def holds_lots(self):
        return self.inventory_state == InventoryState.RESERVED
