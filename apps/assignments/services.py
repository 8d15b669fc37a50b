"""
Configuration store for auto-assignment.

The auto-assign options and the daily schedule are process-wide settings
kept as single database rows. They are seeded from settings.AUTO_ASSIGN
on first read and saved whenever they change. Callers get a fresh copy
on every read; nothing here caches between calls.

Services:
- get_auto_assign_config / set_auto_assign_config
- get_schedule_config / set_schedule_config
- parse_time_of_day: Validate an HH:MM string
- mark_schedule_ran: Record a scheduled run (last_run_date only moves forward)
"""

import logging
import re
from datetime import time

from django.db.models import Q

from .exceptions import InvalidScheduleTime
from .models import AutoAssignConfig, ScheduleConfig
from .strategies import get_strategy

logger = logging.getLogger(__name__)

TIME_OF_DAY_RE = re.compile(r'^(\d{1,2}):(\d{2})$')


def get_auto_assign_config():
    return AutoAssignConfig.load()


def set_auto_assign_config(strategy=None, include_unassigned=None,
                           assign_to_all_users=None, skip_existing=None):
    """
    Update the persisted auto-assign options.

    Fields left as None keep their current value.

    Raises:
        ValueError: If the strategy name is unknown
    """
    config = AutoAssignConfig.load()

    if strategy is not None:
        get_strategy(strategy)
        config.strategy = strategy
    if include_unassigned is not None:
        config.include_unassigned = include_unassigned
    if assign_to_all_users is not None:
        config.assign_to_all_users = assign_to_all_users
    if skip_existing is not None:
        config.skip_existing = skip_existing

    config.save()
    logger.info(f'Auto-assign configuration saved: {config.to_options().as_dict()}')
    return config


def get_schedule_config():
    return ScheduleConfig.load()


def parse_time_of_day(value):
    """
    Parse a 24-hour HH:MM time of day.

    Args:
        value: 'HH:MM' string or datetime.time

    Returns:
        datetime.time

    Raises:
        InvalidScheduleTime: If the value is not a valid time of day
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    match = TIME_OF_DAY_RE.match(str(value or '').strip())
    if not match:
        raise InvalidScheduleTime(value)

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidScheduleTime(value)

    return time(hour, minute)


def set_schedule_config(enabled=None, time_of_day=None):
    """
    Update the daily schedule.

    Changes take effect on the next scheduler tick. last_run_date is not
    touched, so re-enabling on a day that already ran does not run again.

    Args:
        enabled: Turn the schedule on or off (None keeps the current value)
        time_of_day: 'HH:MM' or datetime.time (None keeps the current value)

    Returns:
        Saved ScheduleConfig

    Raises:
        InvalidScheduleTime: If time_of_day is malformed
    """
    schedule = ScheduleConfig.load()

    if time_of_day is not None:
        schedule.time_of_day = parse_time_of_day(time_of_day)
    if enabled is not None:
        schedule.enabled = enabled

    schedule.save(update_fields=['enabled', 'time_of_day', 'updated_at'])
    logger.info(f'Auto-assign schedule saved: {schedule.as_dict()}')
    return schedule


def mark_schedule_ran(run_date):
    """
    Set last_run_date to run_date unless it is already that date or later.

    Returns:
        bool: True if last_run_date moved forward
    """
    schedule = ScheduleConfig.load()
    updated = ScheduleConfig.objects.filter(pk=schedule.pk).filter(
        Q(last_run_date__isnull=True) | Q(last_run_date__lt=run_date)
    ).update(last_run_date=run_date)

    if updated:
        logger.info(f'Scheduled auto-assign recorded for {run_date}')
    return bool(updated)
