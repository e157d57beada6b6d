from decimal import Decimal
import uuid

from django.core.validators import MinValueValidator
from django.db import models


class ParkingLotStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'
    PENDING = 'pending', 'Pending'


class ParkingLot(models.Model):
    """Parking facility whose individual lots are offered for investment."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    location = models.CharField(max_length=255)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Price per lot"
    )
    roi = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Expected annual return in percent"
    )
    details = models.TextField(blank=True)
    images = models.JSONField(default=list, blank=True)

    # Inventory
    total_lots = models.PositiveIntegerField(default=0)
    available_lots = models.PositiveIntegerField(default=0)
    availability = models.BooleanField(default=False, db_index=True)

    status = models.CharField(
        max_length=20,
        choices=ParkingLotStatus.choices,
        default=ParkingLotStatus.ACTIVE,
        db_index=True
    )
    total_invested_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'parking_lots'
        indexes = [
            models.Index(fields=['availability', 'status']),
            models.Index(fields=['created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.available_lots}/{self.total_lots})"

    def save(self, *args, **kwargs):
        self.availability = self.available_lots > 0
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'available_lots' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'availability'}
        super().save(*args, **kwargs)

    @property
    def reserved_lots(self):
        return self.total_lots - self.available_lots
