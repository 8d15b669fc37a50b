"""
Auto-assign engine.

Creates today's daily tasks from the catalog for the current roster.

Services:
- run_daily_auto_assign: Run one batch with the given options
- preview_existing_daily_tasks: Count today's daily tasks before a run
- is_batch_in_progress: Whether a batch currently holds the batch flag
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils import timezone

from apps.accounts.services import get_eligible_users
from apps.tasks.models import Category, Task
from apps.tasks.services import create_task_from_definition, get_task_definitions

from .exceptions import BatchInProgress, NoEligibleUsers, WriteFailure
from .index import ExistingAssignmentIndex
from .models import AssignmentRun
from .strategies import get_strategy

logger = logging.getLogger(__name__)

# At most one batch in flight per process
_batch_lock = threading.Lock()


@dataclass
class AutoAssignResult:
    """Outcome of one batch."""

    tasks_created: int = 0
    tasks_assigned: int = 0
    existing_count: int = 0
    confirmation_required: bool = False
    failures: list = field(default_factory=list)
    run: AssignmentRun = None

    @property
    def message(self):
        return (
            f'Successfully created {self.tasks_created} daily tasks and '
            f'assigned {self.tasks_assigned} to users.'
        )

    def as_dict(self):
        return {
            'tasks_created': self.tasks_created,
            'tasks_assigned': self.tasks_assigned,
            'existing_count': self.existing_count,
            'confirmation_required': self.confirmation_required,
            'failures': [failure.as_dict() for failure in self.failures],
            'run_id': self.run.pk if self.run else None,
            'message': self.message,
        }


@contextmanager
def batch_guard():
    """
    Hold the process-wide batch flag for the duration of a batch.

    Raises:
        BatchInProgress: If another batch holds the flag
    """
    if not _batch_lock.acquire(blocking=False):
        raise BatchInProgress()
    try:
        yield
    finally:
        _batch_lock.release()


def is_batch_in_progress():
    return _batch_lock.locked()


def preview_existing_daily_tasks(now=None):
    """
    Count daily tasks already due today.

    Callers use this to ask for confirmation before running a batch with
    skip_existing set.
    """
    return len(ExistingAssignmentIndex.for_today(now))


def run_daily_auto_assign(options, trigger=AssignmentRun.Trigger.MANUAL,
                          triggered_by=None, now=None):
    """
    Create today's daily tasks for the roster.

    Steps:
    1. Read the daily catalog and the roster fresh
    2. Snapshot today's daily tasks (ExistingAssignmentIndex)
    3. If assign_to_all_users: for each user, for each template, ask the
       strategy; create an assigned task unless skip_existing is set and
       the same title is already assigned to that user today
    4. If include_unassigned: for each template, create one unassigned task
       unless skip_existing is set and any task with that title exists today

    Each task is committed on its own. A failed create is recorded in
    result.failures and the batch moves on; earlier creates stay.

    Args:
        options: AutoAssignOptions snapshot
        trigger: AssignmentRun.Trigger (manual/scheduled)
        triggered_by: User who started a manual run (optional)
        now: Reference time for "today" and due dates (defaults to now)

    Returns:
        AutoAssignResult

    Raises:
        ValueError: If the strategy name is unknown
        NoEligibleUsers: If the roster is empty (nothing is written)
        BatchInProgress: If another batch is running
    """
    should_assign = get_strategy(options.strategy)

    with batch_guard():
        started_at = timezone.now()

        templates = get_task_definitions(Category.DAILY)
        users = get_eligible_users()

        if not users:
            logger.warning('Auto-assign skipped: no eligible users')
            raise NoEligibleUsers()

        index = ExistingAssignmentIndex.for_today(now)
        result = AutoAssignResult(
            existing_count=len(index),
            confirmation_required=options.skip_existing and len(index) > 0,
        )

        logger.info(
            f'Auto-assign started ({trigger}): strategy={options.strategy}, '
            f'{len(users)} users, {len(templates)} templates, '
            f'{len(index)} existing daily tasks today'
        )

        user_count = len(users)
        min_load = index.min_load(user.pk for user in users)

        if options.assign_to_all_users:
            for user_index, user in enumerate(users):
                current_load = index.load_for(user.pk)

                for task_index, definition in enumerate(templates):
                    if not should_assign(user_index, task_index, user_count,
                                         current_load, min_load):
                        continue

                    if options.skip_existing and index.has_assignment(definition.title, user.pk):
                        continue

                    if _create(definition, user, result, now):
                        result.tasks_created += 1
                        result.tasks_assigned += 1

        if options.include_unassigned:
            for definition in templates:
                if options.skip_existing and index.has_title(definition.title):
                    continue

                if _create(definition, None, result, now):
                    result.tasks_created += 1

        result.run = AssignmentRun.objects.create(
            trigger=trigger,
            triggered_by=triggered_by,
            strategy=options.strategy,
            include_unassigned=options.include_unassigned,
            assign_to_all_users=options.assign_to_all_users,
            skip_existing=options.skip_existing,
            user_count=user_count,
            template_count=len(templates),
            existing_count=result.existing_count,
            tasks_created=result.tasks_created,
            tasks_assigned=result.tasks_assigned,
            failures=[failure.as_dict() for failure in result.failures],
            started_at=started_at,
            finished_at=timezone.now(),
        )

        logger.info(
            f'Auto-assign finished ({trigger}): {result.tasks_created} created, '
            f'{result.tasks_assigned} assigned, {len(result.failures)} failed'
        )

    return result


def _create(definition, user, result, now):
    """Create one task; record a WriteFailure instead of raising."""
    try:
        create_task_from_definition(
            definition,
            assignee=user,
            source=Task.Source.AUTO_ASSIGN,
            now=now,
        )
    except (DatabaseError, ValidationError) as e:
        failure = WriteFailure(definition.title, user, e)
        logger.error(str(failure))
        result.failures.append(failure)
        return False
    return True
