from decimal import Decimal

from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from .models import ApprovalStatus, Investment, PaymentMethod, PaymentStatus


# =============================================================================
# Output Serializers
# =============================================================================

class InvestmentSerializer(serializers.ModelSerializer):
    """Investment as shown to its owner and to admins."""

    user = UserMinimalSerializer(read_only=True)
    parking_lot_name = serializers.CharField(source='parking_lot.name', read_only=True)
    parking_lot_location = serializers.CharField(source='parking_lot.location', read_only=True)

    class Meta:
        model = Investment
        fields = [
            'id',
            'user',
            'parking_lot',
            'parking_lot_name',
            'parking_lot_location',
            'amount',
            'selected_lots',
            'expected_roi',
            'payment_method',
            'payment_status',
            'admin_approval_status',
            'inventory_state',
            'lease_accepted',
            'created_by_admin',
            'admin_notes',
            'rejection_reason',
            'payment_confirmed_at',
            'approved_at',
            'rejected_at',
            'released_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class BatchApprovalResultSerializer(serializers.Serializer):
    """Outcome of a batch approval."""

    successful = serializers.ListField(child=serializers.CharField())
    failed = serializers.ListField(child=serializers.DictField())


# =============================================================================
# Input Serializers
# =============================================================================

class InvestmentCreateSerializer(serializers.Serializer):
    """Investor submits a request for lots in a parking lot."""

    parking_lot_id = serializers.UUIDField()
    amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0.01')
    )
    selected_lots = serializers.IntegerField(min_value=1, default=1)
    payment_method = serializers.ChoiceField(
        choices=PaymentMethod.choices,
        default=PaymentMethod.OFFLINE
    )


class OfflineInvestmentCreateSerializer(serializers.Serializer):
    """Admin records an investment paid outside the app."""

    user_id = serializers.UUIDField()
    parking_lot_id = serializers.UUIDField()
    amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0.01')
    )
    selected_lots = serializers.IntegerField(min_value=1, default=1)
    payment_method = serializers.ChoiceField(
        choices=PaymentMethod.choices,
        default=PaymentMethod.OFFLINE
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class ApproveInvestmentSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    auto_approve = serializers.BooleanField(required=False, default=False)


class RejectInvestmentSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000)


class BatchApproveSerializer(serializers.Serializer):
    # Malformed ids are reported per item in the batch result.
    investment_ids = serializers.ListField(
        child=serializers.CharField(max_length=64),
        allow_empty=False,
        max_length=100
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class ConfirmPaymentSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(
        choices=[PaymentStatus.SUCCESS, PaymentStatus.FAILED]
    )


class LeaseStatusSerializer(serializers.Serializer):
    lease_accepted = serializers.BooleanField()


class InvestmentFilterSerializer(serializers.Serializer):
    """Query parameters for admin investment lists."""

    payment_status = serializers.ChoiceField(
        choices=PaymentStatus.choices, required=False
    )
    admin_approval_status = serializers.ChoiceField(
        choices=ApprovalStatus.choices, required=False
    )
    user = serializers.UUIDField(required=False)
    parking_lot = serializers.UUIDField(required=False)
