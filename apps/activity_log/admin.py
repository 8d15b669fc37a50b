"""
Admin configuration for activity_log app.
"""

from django.contrib import admin
from .models import TaskActivity


@admin.register(TaskActivity)
class TaskActivityAdmin(admin.ModelAdmin):
    """Read-only audit trail; entries are written by the task services."""

    list_display = ('task', 'actor_display', 'action_type', 'source_display', 'created_at')
    list_filter = ('action_type', 'task__source', 'task__category', 'created_at')
    search_fields = ('task__reference_number', 'task__title', 'description', 'user__email')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = (
        'task', 'user', 'action_type', 'description',
        'field_name', 'old_value', 'new_value', 'created_at'
    )

    def actor_display(self, obj):
        return obj.user or 'System'
    actor_display.short_description = 'By'

    def source_display(self, obj):
        return obj.task.get_source_display()
    source_display.short_description = 'Task source'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('task', 'user')
