"""
Management command to set up the Django-Q2 schedule for auto-assignment.

This command creates/updates the scheduled task required for:
- The once-a-day auto-assign check (polled every minute)

Usage:
    python manage.py setup_schedules

The command is idempotent - safe to run multiple times.
An existing schedule will be updated if its configuration changed.
"""
from django.core.management.base import BaseCommand
from django_q.models import Schedule

SCHEDULE_NAME = 'Scheduled Auto-Assign Check'


class Command(BaseCommand):
    help = 'Set up the Django-Q2 schedule for the daily auto-assign check'

    def handle(self, *args, **options):
        self.stdout.write('\nSetting up Django-Q2 schedules...\n')

        # Polls every minute; the trigger itself decides whether today's
        # batch is due, so the run time is configured in ScheduleConfig
        schedule, created = Schedule.objects.update_or_create(
            name=SCHEDULE_NAME,
            defaults={
                'func': 'apps.assignments.tasks.check_scheduled_auto_assign',
                'schedule_type': Schedule.MINUTES,
                'minutes': 1,
                'repeats': -1,  # Run forever
            }
        )
        if created:
            self.stdout.write(
                self.style.SUCCESS(f'✓ Created schedule: {SCHEDULE_NAME} (every minute)')
            )
        else:
            self.stdout.write(
                self.style.WARNING(f'↻ Updated schedule: {SCHEDULE_NAME} (every minute)')
            )

        self.stdout.write('')
        self.stdout.write(
            self.style.NOTICE(
                'Note: Ensure Django-Q cluster is running: python manage.py qcluster'
            )
        )
        self.stdout.write('')
