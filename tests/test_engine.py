from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from apps.activity_log.models import TaskActivity
from apps.assignments import engine
from apps.assignments.engine import (
    batch_guard, is_batch_in_progress, preview_existing_daily_tasks, run_daily_auto_assign,
)
from apps.assignments.exceptions import BatchInProgress, NoEligibleUsers
from apps.assignments.index import ExistingAssignmentIndex
from apps.assignments.models import AssignmentRun, AutoAssignOptions
from apps.tasks.models import Task, TaskDefinition
from apps.tasks.services import create_task_from_definition, default_due_date

from .utils import NOW, TODAY, make_admin, make_daily_task, make_definitions, make_roster, make_user


def assigned_only(strategy, skip_existing=True):
    return AutoAssignOptions(
        strategy=strategy,
        include_unassigned=False,
        assign_to_all_users=True,
        skip_existing=skip_existing,
    )


def assignment_pairs():
    return sorted(
        Task.objects.filter(assignee__isnull=False)
        .values_list('title', 'assignee__first_name')
    )


class StrategyBatchTests(TestCase):

    def setUp(self):
        self.alice, self.bob, self.carol = make_roster('Alice', 'Bob', 'Carol')

    def test_round_robin_assigns_each_template_to_one_user(self):
        make_definitions(2)

        result = run_daily_auto_assign(assigned_only('round-robin'), now=NOW)

        self.assertEqual(result.tasks_created, 2)
        self.assertEqual(result.tasks_assigned, 2)
        self.assertEqual(assignment_pairs(), [
            ('Daily Task 0', 'Alice'),
            ('Daily Task 1', 'Bob'),
        ])

    def test_distribute_formula_only_assigns_multiples_of_roster_size(self):
        make_definitions(4)

        result = run_daily_auto_assign(assigned_only('distribute'), now=NOW)

        # Only template 0 qualifies with three users, and it goes to all of them
        self.assertEqual(result.tasks_created, 3)
        self.assertEqual(assignment_pairs(), [
            ('Daily Task 0', 'Alice'),
            ('Daily Task 0', 'Bob'),
            ('Daily Task 0', 'Carol'),
        ])

    def test_load_balance_ties_receive_the_same_template(self):
        make_definitions(2)
        make_daily_task('Earlier chore', assignee=self.carol)

        result = run_daily_auto_assign(assigned_only('load-balance'), now=NOW)

        self.assertEqual(result.tasks_assigned, 4)
        created = Task.objects.filter(source=Task.Source.AUTO_ASSIGN)
        self.assertEqual(
            sorted(created.filter(title='Daily Task 0').values_list('assignee__first_name', flat=True)),
            ['Alice', 'Bob'],
        )
        self.assertFalse(created.filter(assignee=self.carol).exists())

    def test_created_tasks_use_daily_defaults(self):
        make_definitions(1)

        run_daily_auto_assign(assigned_only('round-robin'), now=NOW)

        task = Task.objects.get()
        self.assertEqual(task.status, Task.Status.PENDING)
        self.assertEqual(task.category, 'daily')
        self.assertEqual(task.source, Task.Source.AUTO_ASSIGN)
        self.assertEqual(task.due_date, default_due_date('daily', now=NOW))
        self.assertEqual(task.estimated_time_minutes, 15)
        self.assertEqual(task.description, 'Template 0')
        self.assertIsNone(task.created_by)

    def test_only_daily_active_templates_are_used(self):
        make_definitions(1)
        make_definitions(2, category='weekly')
        TaskDefinition.objects.create(
            template_id='daily-retired', title='Retired chore', position=1, is_active=False,
        )

        result = run_daily_auto_assign(assigned_only('round-robin'), now=NOW)

        self.assertEqual(result.tasks_created, 1)
        self.assertEqual(assignment_pairs(), [('Daily Task 0', 'Alice')])

    def test_unknown_strategy_is_rejected_before_any_write(self):
        make_definitions(1)

        with self.assertRaises(ValueError):
            run_daily_auto_assign(assigned_only('fastest-first'), now=NOW)

        self.assertFalse(Task.objects.exists())
        self.assertFalse(is_batch_in_progress())


class DedupTests(TestCase):

    def setUp(self):
        make_roster('Alice', 'Bob', 'Carol')
        make_definitions(2)
        self.options = AutoAssignOptions(strategy='round-robin')

    def test_second_run_same_day_creates_nothing(self):
        first = run_daily_auto_assign(self.options, now=NOW)
        second = run_daily_auto_assign(self.options, now=NOW)

        self.assertEqual(first.tasks_created, 4)
        self.assertEqual(first.tasks_assigned, 2)
        self.assertFalse(first.confirmation_required)

        self.assertEqual(second.tasks_created, 0)
        self.assertEqual(second.tasks_assigned, 0)
        self.assertEqual(second.existing_count, 4)
        self.assertTrue(second.confirmation_required)
        self.assertEqual(Task.objects.count(), 4)

    def test_without_skip_existing_everything_is_created_again(self):
        options = self.options.override(skip_existing=False)

        run_daily_auto_assign(options, now=NOW)
        second = run_daily_auto_assign(options, now=NOW)

        self.assertEqual(second.tasks_created, 4)
        self.assertFalse(second.confirmation_required)
        self.assertEqual(Task.objects.count(), 8)

    def test_unassigned_copy_of_a_title_blocks_unassigned_backfill_only(self):
        make_daily_task('Daily Task 0')

        result = run_daily_auto_assign(self.options, now=NOW)

        # Both assignments are still created; only template 1 gets an unassigned copy
        self.assertEqual(result.tasks_assigned, 2)
        self.assertEqual(result.tasks_created, 3)
        self.assertEqual(
            Task.objects.filter(title='Daily Task 0', assignee__isnull=True).count(), 1
        )

    def test_tasks_from_another_day_do_not_count(self):
        yesterday = NOW.replace(day=18)
        make_daily_task('Daily Task 0', now=yesterday)

        result = run_daily_auto_assign(self.options, now=NOW)

        self.assertEqual(result.existing_count, 0)
        self.assertEqual(result.tasks_created, 4)

    def test_preview_counts_todays_daily_tasks(self):
        self.assertEqual(preview_existing_daily_tasks(now=NOW), 0)
        run_daily_auto_assign(self.options, now=NOW)
        self.assertEqual(preview_existing_daily_tasks(now=NOW), 4)


class UnassignedBackfillTests(TestCase):

    def setUp(self):
        make_roster('Alice', 'Bob', 'Carol')
        make_definitions(4)

    def test_one_unassigned_task_per_template_for_every_strategy(self):
        for strategy in ('distribute', 'round-robin', 'load-balance'):
            with self.subTest(strategy=strategy):
                Task.objects.all().delete()
                options = AutoAssignOptions(
                    strategy=strategy,
                    include_unassigned=True,
                    assign_to_all_users=False,
                )

                result = run_daily_auto_assign(options, now=NOW)

                self.assertEqual(result.tasks_created, 4)
                self.assertEqual(result.tasks_assigned, 0)
                self.assertFalse(Task.objects.filter(assignee__isnull=False).exists())
                self.assertEqual(
                    sorted(Task.objects.values_list('title', flat=True)),
                    ['Daily Task 0', 'Daily Task 1', 'Daily Task 2', 'Daily Task 3'],
                )

    def test_nothing_selected_creates_nothing(self):
        options = AutoAssignOptions(include_unassigned=False, assign_to_all_users=False)

        result = run_daily_auto_assign(options, now=NOW)

        self.assertEqual(result.tasks_created, 0)
        self.assertEqual(AssignmentRun.objects.count(), 1)


class RosterTests(TestCase):

    def test_empty_roster_raises_and_writes_nothing(self):
        make_admin()
        make_definitions(3)

        with self.assertRaises(NoEligibleUsers):
            run_daily_auto_assign(AutoAssignOptions(), now=NOW)

        self.assertFalse(Task.objects.exists())
        self.assertFalse(AssignmentRun.objects.exists())
        self.assertFalse(is_batch_in_progress())

    def test_inactive_users_and_admins_are_not_assigned(self):
        make_admin()
        make_user('Dora', is_active=False)
        (alice,) = make_roster('Alice')
        make_definitions(2)

        result = run_daily_auto_assign(assigned_only('round-robin'), now=NOW)

        self.assertEqual(result.tasks_assigned, 1)
        self.assertEqual(Task.objects.get().assignee, alice)

    def test_roster_is_read_fresh_on_every_run(self):
        make_roster('Alice')
        make_definitions(2)
        options = assigned_only('round-robin')

        first = run_daily_auto_assign(options, now=NOW)
        make_user('Bob')
        second = run_daily_auto_assign(options, now=NOW)

        self.assertEqual(first.tasks_created, 2)
        # Alice already holds both templates; Bob now owns template 1
        self.assertEqual(second.tasks_created, 1)
        self.assertEqual(
            Task.objects.filter(assignee__first_name='Bob').get().title, 'Daily Task 1'
        )


class FailureAndConcurrencyTests(TestCase):

    def setUp(self):
        make_roster('Alice', 'Bob')
        make_definitions(2)

    def test_write_failure_is_recorded_and_batch_continues(self):
        def flaky_create(definition, **kwargs):
            if definition.title == 'Daily Task 0':
                raise ValidationError('disk full')
            return create_task_from_definition(definition, **kwargs)

        with mock.patch.object(engine, 'create_task_from_definition', side_effect=flaky_create):
            result = run_daily_auto_assign(AutoAssignOptions(strategy='round-robin'), now=NOW)

        # Alice's assignment and the unassigned copy of template 0 failed
        self.assertEqual(len(result.failures), 2)
        self.assertEqual(result.tasks_created, 2)
        self.assertEqual(result.tasks_assigned, 1)
        self.assertEqual({f.title for f in result.failures}, {'Daily Task 0'})
        self.assertEqual(
            sorted(Task.objects.values_list('title', flat=True)),
            ['Daily Task 1', 'Daily Task 1'],
        )
        self.assertEqual(len(result.run.failures), 2)

    def test_busy_day_reference_numbers_do_not_fail_writes(self):
        Task.objects.create(
            reference_number=f'TASK-{timezone.localdate():%Y%m%d}-9999',
            title='Weekly stock take',
            category='weekly',
            due_date=default_due_date('weekly', now=NOW),
        )

        result = run_daily_auto_assign(assigned_only('round-robin', skip_existing=False), now=NOW)

        self.assertEqual(result.failures, [])
        self.assertEqual(result.tasks_created, 2)

    def test_concurrent_batch_is_refused(self):
        with batch_guard():
            self.assertTrue(is_batch_in_progress())
            with self.assertRaises(BatchInProgress):
                run_daily_auto_assign(AutoAssignOptions(), now=NOW)

        self.assertFalse(is_batch_in_progress())
        self.assertFalse(Task.objects.exists())

    def test_batch_flag_is_released_after_error(self):
        with mock.patch.object(engine, 'get_eligible_users', side_effect=RuntimeError('boom')):
            with self.assertRaises(RuntimeError):
                run_daily_auto_assign(AutoAssignOptions(), now=NOW)

        self.assertFalse(is_batch_in_progress())
        result = run_daily_auto_assign(AutoAssignOptions(), now=NOW)
        self.assertGreater(result.tasks_created, 0)


class RunRecordTests(TestCase):

    def test_run_is_recorded_with_options_and_counts(self):
        admin = make_admin()
        make_roster('Alice', 'Bob')
        make_definitions(3)

        result = run_daily_auto_assign(
            AutoAssignOptions(strategy='round-robin'),
            trigger=AssignmentRun.Trigger.MANUAL,
            triggered_by=admin,
            now=NOW,
        )

        run = AssignmentRun.objects.get()
        self.assertEqual(result.run, run)
        self.assertEqual(run.trigger, 'manual')
        self.assertEqual(run.triggered_by, admin)
        self.assertEqual(run.strategy, 'round-robin')
        self.assertEqual(run.user_count, 2)
        self.assertEqual(run.template_count, 3)
        self.assertEqual(run.tasks_created, 6)
        self.assertEqual(run.tasks_assigned, 3)
        self.assertEqual(run.failures, [])

    def test_result_as_dict(self):
        make_roster('Alice')
        make_definitions(1)

        data = run_daily_auto_assign(AutoAssignOptions(), now=NOW).as_dict()

        self.assertEqual(data['tasks_created'], 2)
        self.assertEqual(data['tasks_assigned'], 1)
        self.assertEqual(data['failures'], [])
        self.assertEqual(
            data['message'],
            'Successfully created 2 daily tasks and assigned 1 to users.',
        )

    def test_each_created_task_is_logged(self):
        make_roster('Alice')
        make_definitions(1)

        run_daily_auto_assign(AutoAssignOptions(), now=NOW)

        self.assertEqual(
            TaskActivity.objects.filter(action_type=TaskActivity.ActionType.CREATED).count(), 2
        )


class ExistingAssignmentIndexTests(TestCase):

    def test_index_tracks_titles_pairs_and_loads(self):
        alice, bob = make_roster('Alice', 'Bob')
        make_daily_task('Sweep', assignee=alice)
        make_daily_task('Mop', assignee=alice)
        make_daily_task('Dust')

        index = ExistingAssignmentIndex.for_date(TODAY)

        self.assertEqual(len(index), 3)
        self.assertTrue(index.has_assignment('Sweep', alice.pk))
        self.assertFalse(index.has_assignment('Sweep', bob.pk))
        self.assertTrue(index.has_title('Dust'))
        self.assertFalse(index.has_assignment('Dust', alice.pk))
        self.assertEqual(index.load_for(alice.pk), 2)
        self.assertEqual(index.load_for(bob.pk), 0)
        self.assertEqual(index.min_load([alice.pk, bob.pk]), 0)
        self.assertEqual(index.min_load([]), 0)
