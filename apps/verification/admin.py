from django.contrib import admin
from .models import VerificationLog


@admin.register(VerificationLog)
class VerificationLogAdmin(admin.ModelAdmin):
    """Read-only view of the append-only verification log."""

    list_display = ['code_value', 'verdict', 'base_verdict', 'risk_score', 'trust_decision', 'created_at']
    list_filter = ['verdict', 'trust_decision', 'created_at']
    search_fields = ['code_value', 'ip_address', 'user__email']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
