from django.contrib import admin
from .models import Product, Batch, BatchRecall, Code


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for Products."""

    list_display = ['name', 'category', 'manufacturer', 'is_active', 'created_at']
    list_filter = ['is_active', 'category', 'created_at']
    search_fields = ['name', 'category', 'manufacturer__email', 'manufacturer__company_name']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['name']


class BatchRecallInline(admin.TabularInline):
    model = BatchRecall
    extra = 0
    readonly_fields = ['reason', 'description', 'status', 'initiated_at', 'closed_at']
    can_delete = False


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    """Admin interface for Batches."""

    list_display = ['batch_number', 'product', 'production_date', 'expiry_date', 'code_count', 'created_at']
    list_filter = ['production_date', 'expiry_date']
    search_fields = ['batch_number', 'product__name']
    readonly_fields = ['created_at']
    date_hierarchy = 'created_at'
    inlines = [BatchRecallInline]

    def code_count(self, obj):
        return obj.codes.count()
    code_count.short_description = 'Codes'


@admin.register(Code)
class CodeAdmin(admin.ModelAdmin):
    """
    Read-only admin for Codes.

    Codes are issued through the batch services and redeemed through
    verification; nothing here may change or delete them.
    """

    list_display = ['value', 'batch', 'is_used', 'used_at', 'created_at']
    list_filter = ['is_used', 'created_at']
    search_fields = ['value', 'batch__batch_number']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
