from django.contrib import admin

from apps.parking.models import ParkingLot, ParkingLotStatus


@admin.register(ParkingLot)
class ParkingLotAdmin(admin.ModelAdmin):
    """Admin interface for Parking Lots."""

    list_display = [
        'name',
        'location',
        'price',
        'roi',
        'get_inventory',
        'availability',
        'status',
        'total_invested_amount',
        'created_at'
    ]
    list_filter = ['status', 'availability', 'created_at']
    search_fields = ['name', 'location', 'details']
    readonly_fields = [
        'availability',
        'total_invested_amount',
        'created_at',
        'updated_at'
    ]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'location', 'details', 'images')
        }),
        ('Pricing', {
            'fields': ('price', 'roi')
        }),
        ('Inventory', {
            'fields': ('total_lots', 'available_lots', 'availability', 'status')
        }),
        ('Statistics', {
            'fields': ('total_invested_amount',),
            'classes': ('collapse',)
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['activate_lots', 'deactivate_lots']

    def get_inventory(self, obj):
        """Display available over total lots."""
        return f"{obj.available_lots}/{obj.total_lots}"
    get_inventory.short_description = 'Available'

    def activate_lots(self, request, queryset):
        """Activate selected lots."""
        count = queryset.update(status=ParkingLotStatus.ACTIVE)
        self.message_user(request, f"Activated {count} parking lots")
    activate_lots.short_description = "Activate selected parking lots"

    def deactivate_lots(self, request, queryset):
        """Deactivate selected lots."""
        count = queryset.update(status=ParkingLotStatus.INACTIVE)
        self.message_user(request, f"Deactivated {count} parking lots")
    deactivate_lots.short_description = "Deactivate selected parking lots"
