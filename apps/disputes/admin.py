from django.contrib import admin
from .models import Dispute, DisputeTransition


class DisputeTransitionInline(admin.TabularInline):
    model = DisputeTransition
    extra = 0
    can_delete = False
    readonly_fields = ['from_status', 'to_status', 'actor', 'notes', 'created_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Dispute)
class DisputeAdmin(admin.ModelAdmin):
    """
    Read-only admin for Disputes.

    Status changes go through the API so they stay conditional and audited.
    """

    list_display = ['reference', 'manufacturer', 'claimed_amount', 'status', 'refunded_amount', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['reference', 'manufacturer__email', 'manufacturer__company_name', 'reason']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']
    inlines = [DisputeTransitionInline]

    fieldsets = (
        ('Claim', {
            'fields': ('payment', 'manufacturer', 'reference', 'amount', 'claimed_amount', 'reason', 'description')
        }),
        ('Investigation', {
            'fields': ('status', 'investigator', 'investigation_notes', 'investigation_started_at')
        }),
        ('Outcome', {
            'fields': ('resolution_notes', 'resolved_by', 'resolved_at', 'refunded_amount', 'refunded_at')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
