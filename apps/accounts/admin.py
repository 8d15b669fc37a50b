"""
Admin configuration for accounts app.

The roster used by auto-assign is managed here: active users with the
'user' role receive daily tasks, in first name / last name order.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import Count, Q
from django.utils import timezone
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):

    list_display = (
        'email', 'full_name_display', 'post', 'role',
        'roster_display', 'open_tasks', 'created_at'
    )
    list_filter = ('role', 'is_active', 'is_staff')
    search_fields = ('email', 'first_name', 'last_name', 'post')
    ordering = ('first_name', 'last_name', 'id')
    list_per_page = 25

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('Personal Info'), {'fields': ('first_name', 'last_name', 'post')}),
        (_('Roster'), {'fields': ('role', 'is_active')}),
        (_('Permissions'), {
            'fields': ('is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Important dates'), {
            'fields': ('last_login', 'created_at', 'updated_at'),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'email', 'first_name', 'last_name', 'post',
                'password1', 'password2', 'role'
            ),
        }),
    )

    readonly_fields = ('created_at', 'updated_at', 'last_login')

    actions = ['remove_from_roster', 'add_to_roster']

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            _open_tasks=Count(
                'assigned_tasks',
                filter=~Q(assigned_tasks__status='completed'),
            )
        )

    def full_name_display(self, obj):
        return obj.get_full_name() or '-'
    full_name_display.short_description = 'Name'
    full_name_display.admin_order_field = 'first_name'

    def roster_display(self, obj):
        """Whether the next auto-assign batch will include this user."""
        if obj.is_assignee():
            return format_html('<span style="color: #059669;">{}</span> In roster', '●')
        return format_html('<span style="color: #6B7280;">{}</span> Excluded', '○')
    roster_display.short_description = 'Auto-assign'

    def open_tasks(self, obj):
        return obj._open_tasks
    open_tasks.short_description = 'Open tasks'
    open_tasks.admin_order_field = '_open_tasks'

    # Roster changes take effect on the next batch
    def remove_from_roster(self, request, queryset):
        count = queryset.update(is_active=False, updated_at=timezone.now())
        self.message_user(request, f'{count} user(s) deactivated and removed from the roster.')
    remove_from_roster.short_description = 'Deactivate selected users'

    def add_to_roster(self, request, queryset):
        count = queryset.filter(role=User.Role.USER).update(is_active=True, updated_at=timezone.now())
        self.message_user(request, f'{count} user(s) activated and added to the roster.')
    add_to_roster.short_description = 'Activate selected users'
