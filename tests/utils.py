"""Shared helpers for building users, templates and tasks in tests."""

from datetime import datetime

from django.utils import timezone

from apps.accounts.models import User
from apps.tasks.models import TaskDefinition
from apps.tasks.services import create_task, default_due_date

# 10:00 local time on a fixed date
NOW = timezone.make_aware(datetime(2026, 10, 19, 10, 0))
TODAY = NOW.date()


def make_user(first_name, role=User.Role.USER, **extra):
    return User.objects.create_user(
        email=f'{first_name.lower()}@example.com',
        password='Example-Passw0rd!',
        first_name=first_name,
        last_name='Tester',
        role=role,
        **extra,
    )


def make_roster(*names):
    """Create regular users; roster order follows the (alphabetical) names."""
    return [make_user(name) for name in names]


def make_admin():
    return make_user('Admin', role=User.Role.ADMIN, is_staff=True)


def make_definitions(count, category='daily'):
    return [
        TaskDefinition.objects.create(
            template_id=f'{category}-{index}',
            title=f'{category.title()} Task {index}',
            description=f'Template {index}',
            category=category,
            estimated_time_minutes=15 + index,
            position=index,
        )
        for index in range(count)
    ]


def make_daily_task(title, assignee=None, now=NOW):
    """Create a daily task due on the same day as `now`."""
    return create_task(
        title=title,
        category='daily',
        due_date=default_due_date('daily', now=now),
        assignee=assignee,
    )
