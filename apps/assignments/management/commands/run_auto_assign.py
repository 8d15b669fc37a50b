"""
Management command to run a manual auto-assign batch.

Usage:
    python manage.py run_auto_assign
    python manage.py run_auto_assign --strategy round-robin --no-include-unassigned
    python manage.py run_auto_assign --yes

Options not given on the command line come from the saved configuration.
Manual runs never count as the day's scheduled run.
"""
import argparse

from django.core.management.base import BaseCommand, CommandError

from apps.assignments.engine import preview_existing_daily_tasks, run_daily_auto_assign
from apps.assignments.exceptions import BatchInProgress, NoEligibleUsers
from apps.assignments.models import AssignmentRun, Strategy
from apps.assignments.services import get_auto_assign_config


class Command(BaseCommand):
    help = 'Create and assign today\'s daily tasks'

    def add_arguments(self, parser):
        parser.add_argument('--strategy', choices=Strategy.values)
        parser.add_argument('--include-unassigned', action=argparse.BooleanOptionalAction, default=None)
        parser.add_argument('--assign-to-all-users', action=argparse.BooleanOptionalAction, default=None)
        parser.add_argument('--skip-existing', action=argparse.BooleanOptionalAction, default=None)
        parser.add_argument(
            '--yes', action='store_true',
            help='Run without asking when daily tasks already exist for today',
        )

    def handle(self, *args, **options):
        run_options = get_auto_assign_config().to_options().override(
            strategy=options['strategy'],
            include_unassigned=options['include_unassigned'],
            assign_to_all_users=options['assign_to_all_users'],
            skip_existing=options['skip_existing'],
        )

        if run_options.skip_existing and not options['yes']:
            existing = preview_existing_daily_tasks()
            if existing:
                answer = input(
                    f'Daily tasks for today already exist ({existing} tasks). '
                    'Assign additional tasks? [y/N] '
                )
                if answer.strip().lower() not in ('y', 'yes'):
                    self.stdout.write(self.style.WARNING('Cancelled.'))
                    return

        try:
            result = run_daily_auto_assign(run_options, trigger=AssignmentRun.Trigger.MANUAL)
        except (NoEligibleUsers, BatchInProgress) as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(result.message))
        for failure in result.failures:
            self.stdout.write(self.style.ERROR(f'✗ {failure}'))
