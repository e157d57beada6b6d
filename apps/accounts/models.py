from decimal import Decimal
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone


class UserRole(models.TextChoices):
    USER = 'user', 'User'
    ADMIN = 'admin', 'Admin'
    SUPER_ADMIN = 'super_admin', 'Super Admin'


class KYCStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    VERIFIED = 'verified', 'Verified'
    REJECTED = 'rejected', 'Rejected'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.SUPER_ADMIN)
        extra_fields.setdefault('role_assigned_by', 'system')

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Investor or administrator account with email authentication."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    name = models.CharField(max_length=50, blank=True)
    phone = models.CharField(max_length=20, blank=True)

    # KYC
    kyc_status = models.CharField(
        max_length=20,
        choices=KYCStatus.choices,
        default=KYCStatus.PENDING,
        db_index=True
    )
    kyc_notes = models.TextField(blank=True)
    kyc_updated_at = models.DateTimeField(null=True, blank=True)

    # Role
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.USER,
        db_index=True
    )
    role_assigned_by = models.CharField(max_length=64, blank=True)
    role_assigned_at = models.DateTimeField(null=True, blank=True)

    # Running investment totals
    total_investment = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )
    approved_investment_total = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )
    last_investment_date = models.DateTimeField(null=True, blank=True)
    last_approved_investment_date = models.DateTimeField(null=True, blank=True)

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login = models.DateTimeField(null=True, blank=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email']),
            models.Index(fields=['role']),
            models.Index(fields=['kyc_status', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.email

    def get_display_name(self):
        """Return name or email prefix."""
        return self.name or self.email.split('@')[0]

    @property
    def is_admin(self):
        return self.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN)

    @property
    def is_super_admin(self):
        return self.role == UserRole.SUPER_ADMIN

    def anonymize(self):
        """Strip personal data but keep the row so investments stay attributable."""
        self.email = f"deleted_{self.id}@anonymized.local"
        self.name = "Deleted User"
        self.phone = ''
        self.is_active = False
        self.deleted_at = timezone.now()
        self.set_unusable_password()
        self.save()


class DocumentType(models.TextChoices):
    ID_PROOF = 'id_proof', 'ID Proof'
    ADDRESS_PROOF = 'address_proof', 'Address Proof'
    SELFIE = 'selfie', 'Selfie'


class KYCDocument(models.Model):
    """Identity document uploaded by a user to cloud storage."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='kyc_documents')
    document_type = models.CharField(max_length=20, choices=DocumentType.choices)
    url = models.CharField(max_length=500, blank=True)
    public_id = models.CharField(max_length=255, blank=True)
    file_name = models.CharField(max_length=255, blank=True)
    size = models.PositiveIntegerField(default=0)
    verified = models.BooleanField(default=False)
    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'kyc_documents'
        indexes = [
            models.Index(fields=['user', 'uploaded_at']),
        ]
        ordering = ['-uploaded_at']

    def __str__(self):
        return f"{self.user.email} - {self.document_type}"

    def has_valid_url(self):
        return bool(self.url) and not self.url.startswith('test://')

    def resolved_url(self):
        """Direct URL if stored, otherwise built from the storage public id."""
        if self.has_valid_url():
            return self.url
        if self.public_id:
            cloud_name = settings.CLOUDINARY_CLOUD_NAME
            return f"https://res.cloudinary.com/{cloud_name}/image/upload/{self.public_id}"
        return ''
