from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Read-only view of gateway payments; they are owned by billing."""

    list_display = ['reference', 'manufacturer', 'amount', 'currency', 'created_at']
    list_filter = ['currency', 'created_at']
    search_fields = ['reference', 'manufacturer__email', 'manufacturer__company_name']
    date_hierarchy = 'created_at'

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
