"""
Admin configuration for tasks app.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Task, TaskDefinition
from .services import create_task_from_definition


@admin.register(TaskDefinition)
class TaskDefinitionAdmin(admin.ModelAdmin):
    """Admin for the task catalog."""

    list_display = (
        'title', 'template_id', 'category', 'position',
        'estimated_time_minutes', 'is_active'
    )
    list_editable = ('position', 'is_active')
    list_filter = ('category', 'is_active')
    search_fields = ('title', 'template_id', 'description')
    ordering = ('category', 'position', 'id')
    prepopulated_fields = {'template_id': ('title',)}

    actions = ['create_unassigned_tasks']

    def create_unassigned_tasks(self, request, queryset):
        """Create one unassigned task per selected template."""
        count = 0
        for definition in queryset:
            create_task_from_definition(definition, created_by=request.user)
            count += 1
        self.message_user(request, f'{count} task(s) created from templates.')
    create_unassigned_tasks.short_description = 'Create unassigned tasks from selected templates'


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    list_display = (
        'reference_number', 'title', 'category', 'assignee',
        'status_display', 'due_date', 'source', 'is_overdue_display',
        'created_at'
    )
    list_filter = ('status', 'category', 'source', 'due_date', 'created_at')
    search_fields = ('reference_number', 'title', 'description')
    ordering = ('-created_at',)
    date_hierarchy = 'due_date'

    readonly_fields = (
        'reference_number', 'source', 'created_at', 'updated_at', 'completed_at'
    )

    fieldsets = (
        (None, {
            'fields': ('reference_number', 'title', 'description', 'category')
        }),
        ('Assignment', {
            'fields': ('assignee', 'created_by', 'source')
        }),
        ('Status & Effort', {
            'fields': ('status', 'due_date', 'estimated_time_minutes', 'actual_time_minutes')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'completed_at'),
            'classes': ('collapse',),
        }),
    )

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('assignee', 'created_by')

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'pending': '#FFA500',      # Orange
            'in_progress': '#3498db',  # Blue
            'completed': '#27ae60',    # Green
        }
        color = colors.get(obj.status, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def is_overdue_display(self, obj):
        """Display overdue status."""
        if obj.is_overdue:
            return format_html('<span style="color: red;">{}</span>', 'OVERDUE')
        return ''
    is_overdue_display.short_description = 'Overdue'
