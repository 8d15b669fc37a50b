"""
Service layer for tasks app.

All business logic for task operations is centralized here.
This enables reuse from the admin, management commands and the
auto-assign engine.

Services:
- default_due_date: Category-specific deadline for new tasks
- get_task_definitions: Catalog of templates for a category
- get_tasks_for_date: Tasks of a category due on a calendar date
- create_task: Create a new task (one independent commit)
- create_task_from_definition: Create a task from a catalog template
- assign_task: Assign an unassigned task to a user
- change_status: Change task status with workflow validation
"""

from datetime import datetime, time, timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .models import Category, Task, TaskDefinition
from apps.activity_log.models import log_task_activity, TaskActivity


def default_due_date(category, now=None):
    """
    Deadline for a task created now in the given category.

    The deadline is the last second of the local calendar day that lies
    DUE_DATE_HORIZON_DAYS[category] days after today: a daily task is due
    before tomorrow begins, weekly a week later, monthly 15 days later.

    Args:
        category: daily/weekly/monthly
        now: Reference time (defaults to timezone.now())

    Returns:
        Aware datetime in the current time zone

    Raises:
        ValidationError: If the category is unknown
    """
    horizons = settings.DUE_DATE_HORIZON_DAYS
    if category not in horizons:
        raise ValidationError(f"Unknown task category: {category}")

    today = timezone.localdate(now)
    due_day = today + timedelta(days=horizons[category])
    return timezone.make_aware(datetime.combine(due_day, time(23, 59, 59)))


def get_task_definitions(category):
    """
    Return active templates for a category in catalog order.

    Args:
        category: daily/weekly/monthly

    Returns:
        list of TaskDefinition instances
    """
    return list(
        TaskDefinition.objects.filter(category=category, is_active=True)
        .order_by('position', 'id')
    )


def get_tasks_for_date(category, date):
    """
    Return tasks of a category whose due date falls on a local calendar date.

    Args:
        category: daily/weekly/monthly
        date: datetime.date in the current time zone

    Returns:
        QuerySet of Task objects
    """
    start = timezone.make_aware(datetime.combine(date, time.min))
    end = start + timedelta(days=1)
    return Task.objects.filter(
        category=category,
        due_date__gte=start,
        due_date__lt=end,
    ).select_related('assignee')


def create_task(
    title: str,
    category: str = Category.DAILY,
    description: str = '',
    estimated_time_minutes: int = 30,
    due_date=None,
    assignee=None,
    created_by=None,
    source: str = Task.Source.MANUAL,
):
    """
    Central task creation function.
    Called by the admin, management commands and the auto-assign engine.

    Each call commits on its own: a caller creating many tasks gets no
    rollback of earlier ones when a later one fails.

    Args:
        title: Task title (required)
        category: daily/weekly/monthly (default: daily)
        description: Task description (optional)
        estimated_time_minutes: Expected effort in minutes
        due_date: Deadline (defaults to the category's default due date)
        assignee: User to assign the task to (optional)
        created_by: User creating the task (None for the engine)
        source: manual/auto_assign (default: manual)

    Returns:
        Created Task instance

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    if not title or not title.strip():
        raise ValidationError("Task title is required.")

    if category not in Category.values:
        raise ValidationError(f"Unknown task category: {category}")

    if assignee is not None and not assignee.is_active:
        raise ValidationError("Cannot assign task to inactive user.")

    if due_date is None:
        due_date = default_due_date(category)

    with transaction.atomic():
        task = Task.objects.create(
            title=title.strip(),
            description=description.strip() if description else '',
            category=category,
            estimated_time_minutes=estimated_time_minutes,
            due_date=due_date,
            assignee=assignee,
            created_by=created_by,
            source=source,
        )

        if assignee is not None:
            description_text = f'Task created and assigned to {assignee.get_full_name()}'
        else:
            description_text = f'Unassigned task created: "{task.title}"'

        log_task_activity(
            task=task,
            user=created_by,
            action_type=TaskActivity.ActionType.CREATED,
            description=description_text
        )

    return task


def create_task_from_definition(definition, assignee=None, created_by=None,
                                source=Task.Source.MANUAL, now=None):
    """
    Create a task from a catalog template with the category's default due date.

    Args:
        definition: TaskDefinition instance
        assignee: User to assign the task to (optional)
        created_by: User creating the task (optional)
        source: manual/auto_assign
        now: Reference time for the due date

    Returns:
        Created Task instance
    """
    return create_task(
        title=definition.title,
        category=definition.category,
        description=definition.description,
        estimated_time_minutes=definition.estimated_time_minutes,
        due_date=default_due_date(definition.category, now=now),
        assignee=assignee,
        created_by=created_by,
        source=source,
    )


def assign_task(task, user, assigned_by=None):
    """
    Assign a task to a user.

    Args:
        task: Task instance
        user: New assignee
        assigned_by: User performing the assignment (optional)

    Returns:
        Updated Task instance

    Raises:
        ValidationError: If the user is inactive or already assigned
    """
    if not user.is_active:
        raise ValidationError("Cannot assign task to inactive user.")

    if task.assignee_id == user.pk:
        raise ValidationError("Task is already assigned to this user.")

    old_assignee = task.assignee

    with transaction.atomic():
        task.assignee = user
        task.save(update_fields=['assignee', 'updated_at'])

        log_task_activity(
            task=task,
            user=assigned_by,
            action_type=TaskActivity.ActionType.ASSIGNED,
            description=f'Assigned to {user.get_full_name()}',
            field_name='assignee',
            old_value=old_assignee.email if old_assignee else None,
            new_value=user.email
        )

    return task


def change_status(task, new_status, user=None, actual_time_minutes=None):
    """
    Change task status with workflow validation.

    Workflow: pending → in_progress → completed (pending may complete directly)

    Args:
        task: Task instance
        new_status: Target status
        user: User changing the status (optional)
        actual_time_minutes: Time actually spent, recorded on completion

    Returns:
        Updated Task instance

    Raises:
        ValidationError: If transition is invalid
    """
    old_status = task.status

    if not task.can_transition_to(new_status):
        raise ValidationError(
            f"Cannot change status from '{task.get_status_display()}' to "
            f"'{dict(Task.Status.choices).get(new_status, new_status)}'."
        )

    with transaction.atomic():
        task.status = new_status

        if new_status == Task.Status.COMPLETED:
            task.completed_at = timezone.now()
            if actual_time_minutes is not None:
                task.actual_time_minutes = actual_time_minutes

        task.save()

        log_task_activity(
            task=task,
            user=user,
            action_type=TaskActivity.ActionType.STATUS_CHANGED,
            description=f'Status changed from {dict(Task.Status.choices).get(old_status)} to {dict(Task.Status.choices).get(new_status)}',
            field_name='status',
            old_value=old_status,
            new_value=new_status
        )

    return task
