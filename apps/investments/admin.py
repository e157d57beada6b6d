from django.contrib import admin
from django.utils.html import format_html

from apps.parking.services import ParkingServiceError
from .models import ApprovalStatus, Investment, PaymentStatus
from .services import (
    InvestmentsServiceError,
    approve_investment_after_payment,
    reject_investment,
    release_investment,
)

BADGE_HTML = (
    '<span style="background: {}; color: {}; padding: 3px 8px; '
    'border-radius: 10px; font-size: 11px;">{}</span>'
)


@admin.register(Investment)
class InvestmentAdmin(admin.ModelAdmin):
    """
    Admin interface for Investments.

    Approval actions go through the investment services so inventory and
    user totals stay consistent with the API.
    """

    list_display = [
        'user',
        'parking_lot',
        'amount',
        'selected_lots',
        'payment_method',
        'payment_status_badge',
        'approval_status_badge',
        'inventory_state',
        'created_by_admin',
        'created_at',
    ]

    list_filter = [
        'payment_status',
        'admin_approval_status',
        'inventory_state',
        'payment_method',
        'created_by_admin',
        'created_at',
    ]

    search_fields = [
        'user__email',
        'user__name',
        'parking_lot__name',
        'parking_lot__location',
        'admin_notes',
    ]

    # Lifecycle fields change only through the actions below
    readonly_fields = [
        'payment_status',
        'admin_approval_status',
        'inventory_state',
        'payment_confirmed_at',
        'payment_confirmed_by',
        'approved_at',
        'approved_by',
        'rejected_at',
        'rejected_by',
        'released_at',
        'created_at',
        'updated_at',
    ]

    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Investment', {
            'fields': (
                'user',
                'parking_lot',
                'amount',
                'selected_lots',
                'expected_roi',
                'payment_method',
                'lease_accepted',
                'created_by_admin',
            )
        }),
        ('Status', {
            'fields': (
                'payment_status',
                'admin_approval_status',
                'inventory_state',
            )
        }),
        ('Decision', {
            'fields': (
                'admin_notes',
                'rejection_reason',
                'payment_confirmed_at',
                'payment_confirmed_by',
                'approved_at',
                'approved_by',
                'rejected_at',
                'rejected_by',
                'released_at',
            ),
            'classes': ('collapse',),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def payment_status_badge(self, obj):
        """Display payment status as colored badge."""
        colors = {
            PaymentStatus.PENDING: ('#E5C49A', '#2C1810'),
            PaymentStatus.SUCCESS: ('#6B8E5E', 'white'),
            PaymentStatus.FAILED: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.payment_status, ('#ccc', '#666'))
        return format_html(BADGE_HTML, bg, fg, obj.get_payment_status_display())
    payment_status_badge.short_description = 'Payment'
    payment_status_badge.admin_order_field = 'payment_status'

    def approval_status_badge(self, obj):
        """Display approval status as colored badge."""
        colors = {
            ApprovalStatus.PENDING: ('#E5C49A', '#2C1810'),
            ApprovalStatus.APPROVED: ('#6B8E5E', 'white'),
            ApprovalStatus.REJECTED: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.admin_approval_status, ('#ccc', '#666'))
        return format_html(BADGE_HTML, bg, fg, obj.get_admin_approval_status_display())
    approval_status_badge.short_description = 'Approval'
    approval_status_badge.admin_order_field = 'admin_approval_status'

    actions = [
        'approve_selected',
        'reject_selected',
        'release_selected',
    ]

    def _run(self, request, queryset, operation, verb):
        count = 0
        for investment in queryset:
            try:
                operation(investment)
                count += 1
            except (InvestmentsServiceError, ParkingServiceError) as e:
                self.message_user(
                    request,
                    f'Investment {investment.id}: {e}',
                    level='warning'
                )
        self.message_user(request, f'{verb} {count} investment(s).')

    @admin.action(description='Approve selected (payment must be confirmed)')
    def approve_selected(self, request, queryset):
        self._run(
            request, queryset,
            lambda inv: approve_investment_after_payment(
                investment_id=inv.id, approved_by=request.user
            ),
            'Approved'
        )

    @admin.action(description='Reject selected')
    def reject_selected(self, request, queryset):
        self._run(
            request, queryset,
            lambda inv: reject_investment(
                investment_id=inv.id,
                rejected_by=request.user,
                reason='Rejected from admin site'
            ),
            'Rejected'
        )

    @admin.action(description='Release lots of rejected investments')
    def release_selected(self, request, queryset):
        self._run(
            request, queryset,
            lambda inv: release_investment(investment_id=inv.id),
            'Released'
        )

    def get_queryset(self, request):
        """Optimize query with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related('user', 'parking_lot', 'approved_by', 'rejected_by')
