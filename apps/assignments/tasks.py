"""
Scheduled jobs for the assignments app.

Registered with Django-Q2 by the setup_schedules management command:
- Scheduled auto-assign check (every minute)
"""

from .schedule import ScheduleTrigger

_trigger = ScheduleTrigger()


def check_scheduled_auto_assign():
    """
    Scheduled job to run every minute.

    Runs the daily auto-assign batch once when the configured time of
    day comes round. Returns the trigger state for the job result.
    """
    return _trigger.tick().value
