from rest_framework import serializers

from apps.accounts.services.user_registration import (
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
)
from .models import DocumentType, KYCDocument, KYCStatus, User, UserRole


# =============================================================================
# Output Serializers
# =============================================================================

class UserSerializer(serializers.ModelSerializer):
    """Own profile as shown to the user."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'phone',
            'kyc_status',
            'role',
            'total_investment',
            'approved_investment_total',
            'last_investment_date',
            'created_at',
            'last_login',
        ]
        read_only_fields = [
            'id',
            'email',
            'kyc_status',
            'role',
            'total_investment',
            'approved_investment_total',
            'last_investment_date',
            'created_at',
            'last_login',
        ]


class UserAdminSerializer(serializers.ModelSerializer):
    """Full user record for admin screens."""

    investment_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'phone',
            'kyc_status',
            'kyc_notes',
            'kyc_updated_at',
            'role',
            'role_assigned_by',
            'role_assigned_at',
            'total_investment',
            'approved_investment_total',
            'last_investment_date',
            'last_approved_investment_date',
            'investment_count',
            'is_active',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class KYCDocumentSerializer(serializers.ModelSerializer):
    """KYC document with the URL resolved for display."""

    display_url = serializers.SerializerMethodField()

    class Meta:
        model = KYCDocument
        fields = [
            'id',
            'document_type',
            'url',
            'public_id',
            'display_url',
            'file_name',
            'size',
            'verified',
            'uploaded_at',
        ]
        read_only_fields = ['id', 'display_url', 'verified', 'uploaded_at']

    def get_display_url(self, obj):
        return obj.resolved_url()


# =============================================================================
# Input Serializers
# =============================================================================

class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for user registration."""

    email = serializers.EmailField(required=True)
    name = serializers.CharField(
        required=True,
        min_length=NAME_MIN_LENGTH,
        max_length=NAME_MAX_LENGTH
    )
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    password = serializers.CharField(
        write_only=True,
        required=True,
        min_length=PASSWORD_MIN_LENGTH,
        max_length=PASSWORD_MAX_LENGTH,
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class ProfileUpdateSerializer(serializers.Serializer):
    """Editable profile fields."""

    name = serializers.CharField(
        required=False,
        min_length=NAME_MIN_LENGTH,
        max_length=NAME_MAX_LENGTH
    )
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)


class KYCStatusUpdateSerializer(serializers.Serializer):
    """Validate input for a KYC review decision."""

    status = serializers.ChoiceField(choices=KYCStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class BulkKYCStatusUpdateSerializer(KYCStatusUpdateSerializer):
    """Validate input for a bulk KYC review decision."""

    user_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=False,
        max_length=500
    )


class KYCStatusFilterSerializer(serializers.Serializer):
    """Validate query parameters for user filtering."""

    kyc_status = serializers.ChoiceField(choices=KYCStatus.choices, required=False)


class AssignRoleSerializer(serializers.Serializer):
    """Validate input for role assignment."""

    role = serializers.ChoiceField(choices=UserRole.choices)


class KYCDocumentCreateSerializer(serializers.Serializer):
    """Validate metadata of a document uploaded to cloud storage."""

    document_type = serializers.ChoiceField(choices=DocumentType.choices)
    url = serializers.CharField(required=False, allow_blank=True, max_length=500)
    public_id = serializers.CharField(required=False, allow_blank=True, max_length=255)
    file_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    size = serializers.IntegerField(required=False, min_value=0)

    def validate(self, attrs):
        if not attrs.get('url') and not attrs.get('public_id'):
            raise serializers.ValidationError('Either url or public_id is required')
        return attrs
