# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, UserRole


ROLE_COLORS = {
    UserRole.MANUFACTURER: ('#3E6E8E', 'white'),
    UserRole.CONSUMER: ('#ccc', '#666'),
    UserRole.ADMIN: ('#A47449', 'white'),
}


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.

    Provides:
    - User listing with role badges
    - Filtering by role and status
    - Search by email, display name and company
    """

    list_display = [
        'email',
        'display_name',
        'company_name',
        'role_badge',
        'is_active',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'role',
        'is_active',
        'is_staff',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
        'company_name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    # Remove username field references from BaseUserAdmin
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'password')
        }),
        ('Organisation', {
            'fields': ('role', 'company_name'),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'role', 'company_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = [
        'created_at',
        'last_login',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def role_badge(self, obj):
        """Display platform role as colored badge."""
        bg, fg = ROLE_COLORS.get(obj.role, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_role_display()
        )
    role_badge.short_description = 'Role'
    role_badge.admin_order_field = 'role'

    actions = ['activate_users', 'deactivate_users']

    @admin.action(description='Activate selected users')
    def activate_users(self, request, queryset):
        """Activate selected users."""
        count = queryset.update(is_active=True)
        self.message_user(request, f'Activated {count} user(s).')

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        """Deactivate selected users (excludes superusers for safety)."""
        safe_queryset = queryset.filter(is_superuser=False)
        count = safe_queryset.update(is_active=False)
        skipped = queryset.count() - count
        msg = f'Deactivated {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} superuser(s) for safety.'
        self.message_user(request, msg)
