"""
Auto-assignment models.

Models:
- AutoAssignConfig: Persisted default options for auto-assign batches (singleton)
- ScheduleConfig: Daily schedule for the auto-assign batch (singleton)
- AssignmentRun: Audit record of each executed batch
"""

from dataclasses import dataclass, replace
from datetime import time

from django.conf import settings
from django.db import models
from django.utils.dateparse import parse_time


class Strategy(models.TextChoices):
    DISTRIBUTE = 'distribute', 'Distribute'
    ROUND_ROBIN = 'round-robin', 'Round-robin'
    LOAD_BALANCE = 'load-balance', 'Load balance'


@dataclass(frozen=True)
class AutoAssignOptions:
    """Immutable snapshot of the options for one batch."""

    strategy: str = Strategy.DISTRIBUTE
    include_unassigned: bool = True
    assign_to_all_users: bool = True
    skip_existing: bool = True

    def override(self, **changes):
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def as_dict(self):
        return {
            'strategy': str(self.strategy),
            'include_unassigned': self.include_unassigned,
            'assign_to_all_users': self.assign_to_all_users,
            'skip_existing': self.skip_existing,
        }


class SingletonModel(models.Model):
    """
    Process-wide configuration stored as a single row (pk=1).

    load() creates the row from settings defaults the first time it is read.
    """

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def seed_defaults(cls):
        return {}

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(pk=1, defaults=cls.seed_defaults())
        return obj


class AutoAssignConfig(SingletonModel):
    """Default options used by scheduled batches and pre-filled for manual ones."""

    strategy = models.CharField(
        max_length=20,
        choices=Strategy.choices,
        default=Strategy.DISTRIBUTE,
    )
    include_unassigned = models.BooleanField(
        default=True,
        help_text='Also create one unassigned task per template'
    )
    assign_to_all_users = models.BooleanField(
        default=True,
        help_text='Create assigned tasks for the roster using the strategy'
    )
    skip_existing = models.BooleanField(
        default=True,
        help_text="Don't recreate tasks that already exist for today"
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'auto-assign configuration'
        verbose_name_plural = 'auto-assign configuration'

    def __str__(self):
        return f"Auto-assign: {self.get_strategy_display()}"

    @classmethod
    def seed_defaults(cls):
        conf = settings.AUTO_ASSIGN
        return {
            'strategy': conf['DEFAULT_STRATEGY'],
            'include_unassigned': conf['DEFAULT_INCLUDE_UNASSIGNED'],
            'assign_to_all_users': conf['DEFAULT_ASSIGN_TO_ALL_USERS'],
            'skip_existing': conf['DEFAULT_SKIP_EXISTING'],
        }

    def to_options(self):
        return AutoAssignOptions(
            strategy=self.strategy,
            include_unassigned=self.include_unassigned,
            assign_to_all_users=self.assign_to_all_users,
            skip_existing=self.skip_existing,
        )


class ScheduleConfig(SingletonModel):
    """
    Daily auto-assign schedule.

    last_run_date only moves forward; at most one scheduled run per date.
    """

    enabled = models.BooleanField(default=False)
    time_of_day = models.TimeField(default=time(9, 0))
    last_run_date = models.DateField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'auto-assign schedule'
        verbose_name_plural = 'auto-assign schedule'

    def __str__(self):
        state = 'enabled' if self.enabled else 'disabled'
        return f"Daily at {self.time_of_day:%H:%M} ({state})"

    @classmethod
    def seed_defaults(cls):
        return {
            'enabled': False,
            'time_of_day': parse_time(settings.AUTO_ASSIGN['DEFAULT_SCHEDULE_TIME']) or time(9, 0),
        }

    @property
    def scheduled_minutes(self):
        return self.time_of_day.hour * 60 + self.time_of_day.minute

    def as_dict(self):
        return {
            'enabled': self.enabled,
            'time_of_day': self.time_of_day.strftime('%H:%M'),
            'last_run_date': self.last_run_date.isoformat() if self.last_run_date else None,
        }


class AssignmentRun(models.Model):
    """
    Audit record of one executed auto-assign batch.

    Batches refused before any write (empty roster, batch already running)
    are not recorded.
    """

    class Trigger(models.TextChoices):
        MANUAL = 'manual', 'Manual'
        SCHEDULED = 'scheduled', 'Scheduled'

    trigger = models.CharField(
        max_length=10,
        choices=Trigger.choices,
        default=Trigger.MANUAL,
        db_index=True,
    )
    triggered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assignment_runs',
    )

    # Options used for the batch
    strategy = models.CharField(max_length=20, choices=Strategy.choices)
    include_unassigned = models.BooleanField()
    assign_to_all_users = models.BooleanField()
    skip_existing = models.BooleanField()

    # Outcome
    user_count = models.PositiveIntegerField(default=0)
    template_count = models.PositiveIntegerField(default=0)
    existing_count = models.PositiveIntegerField(
        default=0,
        help_text="Daily tasks already due today when the batch started"
    )
    tasks_created = models.PositiveIntegerField(default=0)
    tasks_assigned = models.PositiveIntegerField(default=0)
    failures = models.JSONField(default=list, blank=True)

    started_at = models.DateTimeField()
    finished_at = models.DateTimeField()

    class Meta:
        verbose_name = 'assignment run'
        verbose_name_plural = 'assignment runs'
        ordering = ['-started_at', '-id']

    def __str__(self):
        return (
            f"{self.get_trigger_display()} run at {self.started_at:%Y-%m-%d %H:%M}: "
            f"{self.tasks_created} created, {self.tasks_assigned} assigned"
        )

    @property
    def failure_count(self):
        return len(self.failures or [])
