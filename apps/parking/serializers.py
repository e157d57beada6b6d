from decimal import Decimal

from rest_framework import serializers

from .models import ParkingLot, ParkingLotStatus


class ParkingLotSerializer(serializers.ModelSerializer):
    """Parking lot with inventory counters."""

    reserved_lots = serializers.IntegerField(read_only=True)

    class Meta:
        model = ParkingLot
        fields = [
            'id',
            'name',
            'location',
            'price',
            'roi',
            'details',
            'images',
            'total_lots',
            'available_lots',
            'reserved_lots',
            'availability',
            'status',
            'total_invested_amount',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ParkingLotCreateSerializer(serializers.Serializer):
    """Input for creating a parking lot."""

    name = serializers.CharField(max_length=200)
    location = serializers.CharField(max_length=255)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.00')
    )
    roi = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal('0.00'),
        required=False, default=Decimal('0.00')
    )
    details = serializers.CharField(required=False, allow_blank=True, default='')
    images = serializers.ListField(
        child=serializers.URLField(), required=False, default=list
    )
    total_lots = serializers.IntegerField(min_value=0)
    available_lots = serializers.IntegerField(min_value=0, required=False)
    status = serializers.ChoiceField(
        choices=ParkingLotStatus.choices,
        required=False,
        default=ParkingLotStatus.ACTIVE
    )

    def validate(self, attrs):
        available = attrs.get('available_lots')
        if available is not None and available > attrs['total_lots']:
            raise serializers.ValidationError({
                'available_lots': 'Available lots cannot exceed total lots.'
            })
        return attrs


class ParkingLotUpdateSerializer(serializers.Serializer):
    """Partial update of a parking lot. Every field is optional."""

    name = serializers.CharField(max_length=200, required=False)
    location = serializers.CharField(max_length=255, required=False)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False
    )
    roi = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal('0.00'), required=False
    )
    details = serializers.CharField(required=False, allow_blank=True)
    images = serializers.ListField(child=serializers.URLField(), required=False)
    total_lots = serializers.IntegerField(min_value=0, required=False)
    status = serializers.ChoiceField(choices=ParkingLotStatus.choices, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No fields to update.')
        return attrs
