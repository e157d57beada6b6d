# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import KYCDocument, KYCStatus, User, UserRole


BADGE = (
    '<span style="background: {}; color: white; padding: 3px 8px; '
    'border-radius: 10px; font-size: 11px;">{}</span>'
)

KYC_COLORS = {
    KYCStatus.VERIFIED: '#6B8E5E',
    KYCStatus.PENDING: '#C9A227',
    KYCStatus.REJECTED: '#B85C5C',
}

ROLE_COLORS = {
    UserRole.SUPER_ADMIN: '#5C3D99',
    UserRole.ADMIN: '#2F6DB5',
    UserRole.USER: '#888888',
}


class KYCDocumentInline(admin.TabularInline):
    """Inline admin for KYC documents."""
    model = KYCDocument
    extra = 0
    fields = ['document_type', 'url', 'public_id', 'verified', 'uploaded_at']
    readonly_fields = ['uploaded_at']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for investor and administrator accounts.

    Provides:
    - User listing with KYC and role badges
    - Filtering by KYC status and role
    - Bulk KYC decisions
    - Admin promotion and revocation
    - Anonymization for deletion requests
    """

    list_display = [
        'email',
        'name',
        'kyc_badge',
        'role_badge',
        'total_investment',
        'approved_investment_total',
        'created_at',
    ]

    list_filter = [
        'kyc_status',
        'role',
        'is_active',
        'created_at',
    ]

    search_fields = [
        'email',
        'name',
        'phone',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'
    inlines = [KYCDocumentInline]

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'name', 'phone', 'password')
        }),
        ('KYC', {
            'fields': ('kyc_status', 'kyc_notes', 'kyc_updated_at'),
        }),
        ('Role', {
            'fields': ('role', 'role_assigned_by', 'role_assigned_at'),
        }),
        ('Investments', {
            'fields': (
                'total_investment',
                'approved_investment_total',
                'last_investment_date',
                'last_approved_investment_date',
            ),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login', 'deleted_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'name', 'phone', 'password1', 'password2'),
        }),
    )

    readonly_fields = [
        'role_assigned_by',
        'role_assigned_at',
        'total_investment',
        'approved_investment_total',
        'last_investment_date',
        'last_approved_investment_date',
        'kyc_updated_at',
        'created_at',
        'last_login',
        'deleted_at',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def kyc_badge(self, obj):
        """Display KYC status as colored badge."""
        return format_html(BADGE, KYC_COLORS.get(obj.kyc_status, '#888888'), obj.get_kyc_status_display())
    kyc_badge.short_description = 'KYC'
    kyc_badge.admin_order_field = 'kyc_status'

    def role_badge(self, obj):
        """Display role as colored badge."""
        return format_html(BADGE, ROLE_COLORS.get(obj.role, '#888888'), obj.get_role_display())
    role_badge.short_description = 'Role'
    role_badge.admin_order_field = 'role'

    actions = [
        'verify_kyc',
        'reject_kyc',
        'promote_to_admin',
        'revoke_admin',
        'anonymize_users',
    ]

    @admin.action(description='Mark KYC as verified')
    def verify_kyc(self, request, queryset):
        from .services import bulk_update_kyc_status
        count = bulk_update_kyc_status(
            user_ids=list(queryset.values_list('id', flat=True)),
            status=KYCStatus.VERIFIED,
            notes='Verified in admin',
        )
        self.message_user(request, f'Verified KYC of {count} user(s).')

    @admin.action(description='Mark KYC as rejected')
    def reject_kyc(self, request, queryset):
        from .services import bulk_update_kyc_status
        count = bulk_update_kyc_status(
            user_ids=list(queryset.values_list('id', flat=True)),
            status=KYCStatus.REJECTED,
            notes='Rejected in admin',
        )
        self.message_user(request, f'Rejected KYC of {count} user(s).')

    @admin.action(description='Promote selected users to admin')
    def promote_to_admin(self, request, queryset):
        from .services import promote_user_to_admin
        users = queryset.filter(role=UserRole.USER)
        count = 0
        for user in users:
            promote_user_to_admin(user_id=user.id)
            count += 1
        self.message_user(request, f'Promoted {count} user(s) to admin.')

    @admin.action(description='Revoke admin access')
    def revoke_admin(self, request, queryset):
        from .services import LastSuperAdminError, revoke_admin_access
        count = 0
        for user in queryset.exclude(role=UserRole.USER):
            try:
                revoke_admin_access(user_id=user.id)
            except LastSuperAdminError as e:
                self.message_user(request, str(e), level=messages.WARNING)
                continue
            count += 1
        self.message_user(request, f'Revoked admin access of {count} user(s).')

    @admin.action(description='Anonymize selected users (IRREVERSIBLE)')
    def anonymize_users(self, request, queryset):
        """Anonymize selected users, skipping admins."""
        safe_queryset = queryset.filter(role=UserRole.USER, is_superuser=False)
        count = 0
        for user in safe_queryset:
            user.anonymize()
            count += 1

        skipped = queryset.count() - count
        msg = f'Anonymized {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} admin(s) for safety.'
        self.message_user(request, msg)


@admin.register(KYCDocument)
class KYCDocumentAdmin(admin.ModelAdmin):
    """Admin interface for KYC documents."""

    list_display = ['user', 'document_type', 'file_name', 'verified', 'uploaded_at']
    list_filter = ['document_type', 'verified', 'uploaded_at']
    search_fields = ['user__email', 'file_name', 'public_id']
    readonly_fields = ['uploaded_at']
    ordering = ['-uploaded_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user')
