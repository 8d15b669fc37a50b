"""
Admin configuration for assignments app.
"""

from django.contrib import admin, messages

from .engine import run_daily_auto_assign
from .exceptions import BatchInProgress, NoEligibleUsers
from .models import AssignmentRun, AutoAssignConfig, ScheduleConfig


class SingletonAdmin(admin.ModelAdmin):
    """Admin for single-row configuration models."""

    def has_add_permission(self, request):
        return not self.model.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AutoAssignConfig)
class AutoAssignConfigAdmin(SingletonAdmin):

    list_display = (
        '__str__', 'include_unassigned', 'assign_to_all_users',
        'skip_existing', 'updated_at'
    )
    readonly_fields = ('updated_at',)

    actions = ['run_now']

    def run_now(self, request, queryset):
        """Run a manual batch with the saved options."""
        config = queryset.first() or AutoAssignConfig.load()
        try:
            result = run_daily_auto_assign(
                config.to_options(),
                trigger=AssignmentRun.Trigger.MANUAL,
                triggered_by=request.user,
            )
        except (NoEligibleUsers, BatchInProgress) as e:
            self.message_user(request, str(e), level=messages.ERROR)
            return

        self.message_user(request, result.message)
        if result.failures:
            self.message_user(
                request,
                f'{len(result.failures)} task(s) could not be created. See the run log.',
                level=messages.WARNING,
            )
    run_now.short_description = 'Run auto-assign now'


@admin.register(ScheduleConfig)
class ScheduleConfigAdmin(SingletonAdmin):

    list_display = ('__str__', 'enabled', 'time_of_day', 'last_run_date', 'updated_at')
    readonly_fields = ('last_run_date', 'updated_at')


@admin.register(AssignmentRun)
class AssignmentRunAdmin(admin.ModelAdmin):
    """Read-only log of executed batches."""

    list_display = (
        'started_at', 'trigger', 'strategy', 'triggered_by',
        'user_count', 'template_count', 'existing_count',
        'tasks_created', 'tasks_assigned', 'failure_count'
    )
    list_filter = ('trigger', 'strategy', 'started_at')
    ordering = ('-started_at',)
    date_hierarchy = 'started_at'

    def failure_count(self, obj):
        return obj.failure_count
    failure_count.short_description = 'Failures'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('triggered_by')
