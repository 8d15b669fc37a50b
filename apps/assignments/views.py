"""
Views for the assignments app (Admin only, JSON responses).

Includes:
- Manual auto-assign run
- Auto-assign configuration (read/update)
- Daily schedule configuration (read/update)
"""

from django.contrib.auth.decorators import login_required, user_passes_test
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

from .engine import preview_existing_daily_tasks, run_daily_auto_assign
from .exceptions import BatchInProgress, NoEligibleUsers
from .forms import AutoAssignConfigForm, AutoAssignRunForm, ScheduleConfigForm
from .models import AssignmentRun
from .services import get_auto_assign_config, get_schedule_config, set_schedule_config


def is_admin(user):
    """Check if user is an admin."""
    return user.is_authenticated and user.is_admin()


@login_required
@user_passes_test(is_admin)
@require_POST
def run_auto_assign(request):
    """
    Run a manual auto-assign batch.

    When skip_existing is on and daily tasks already exist for today, the
    batch is not started unless 'confirm' is set; the response carries
    the existing count so the caller can ask the user.
    """
    form = AutoAssignRunForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors.get_json_data()}, status=400)

    options = form.get_options(get_auto_assign_config().to_options())

    if options.skip_existing and not form.cleaned_data['confirm']:
        existing = preview_existing_daily_tasks()
        if existing:
            return JsonResponse({
                'status': 'confirmation_required',
                'existing_count': existing,
                'message': (
                    f'Daily tasks for today already exist ({existing} tasks). '
                    'Do you want to assign additional tasks to unassigned users?'
                ),
            }, status=409)

    try:
        result = run_daily_auto_assign(
            options,
            trigger=AssignmentRun.Trigger.MANUAL,
            triggered_by=request.user,
        )
    except NoEligibleUsers as e:
        return JsonResponse({'error': 'no_eligible_users', 'message': str(e)}, status=400)
    except BatchInProgress as e:
        return JsonResponse({'error': 'batch_in_progress', 'message': str(e)}, status=409)

    return JsonResponse(result.as_dict())


@login_required
@user_passes_test(is_admin)
@require_http_methods(['GET', 'POST'])
def auto_assign_config(request):
    """Read or replace the persisted auto-assign options."""
    config = get_auto_assign_config()

    if request.method == 'POST':
        form = AutoAssignConfigForm(request.POST, instance=config)
        if not form.is_valid():
            return JsonResponse({'errors': form.errors.get_json_data()}, status=400)
        config = form.save()

    return JsonResponse(config.to_options().as_dict())


@login_required
@user_passes_test(is_admin)
@require_http_methods(['GET', 'POST'])
def schedule_config(request):
    """Read or update the daily schedule."""
    if request.method == 'POST':
        form = ScheduleConfigForm(request.POST)
        if not form.is_valid():
            return JsonResponse({'errors': form.errors.get_json_data()}, status=400)
        schedule = set_schedule_config(
            enabled=form.cleaned_data['enabled'],
            time_of_day=form.cleaned_data['time_of_day'],
        )
    else:
        schedule = get_schedule_config()

    return JsonResponse(schedule.as_dict())
