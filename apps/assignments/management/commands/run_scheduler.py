"""
Management command to run the auto-assign scheduler in the foreground.

Alternative to the Django-Q2 cluster for single-process deployments.

Usage:
    python manage.py run_scheduler
    python manage.py run_scheduler --interval 30
"""
from django.conf import settings
from django.core.management.base import BaseCommand

from apps.assignments.schedule import ScheduleTicker


class Command(BaseCommand):
    help = 'Check the auto-assign schedule at a fixed interval until interrupted'

    def add_arguments(self, parser):
        parser.add_argument(
            '--interval', type=int,
            default=settings.AUTO_ASSIGN['TICK_INTERVAL_SECONDS'],
            help='Seconds between checks',
        )

    def handle(self, *args, **options):
        ticker = ScheduleTicker(interval=options['interval'])
        self.stdout.write(
            self.style.SUCCESS(f'Auto-assign scheduler running every {ticker.interval}s. Ctrl+C to stop.')
        )
        try:
            ticker.run_forever()
        except KeyboardInterrupt:
            ticker.stop()
            self.stdout.write('\nScheduler stopped.')
