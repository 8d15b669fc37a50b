from datetime import datetime, time, timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from apps.activity_log.models import TaskActivity
from apps.tasks.models import Task
from apps.tasks.services import (
    assign_task, change_status, create_task, create_task_from_definition,
    default_due_date, get_task_definitions, get_tasks_for_date,
)

from .utils import NOW, TODAY, make_admin, make_definitions, make_user


def end_of(day):
    return timezone.make_aware(datetime.combine(day, time(23, 59, 59)))


class DefaultDueDateTests(TestCase):

    def test_horizon_per_category(self):
        self.assertEqual(default_due_date('daily', now=NOW), end_of(TODAY))
        self.assertEqual(default_due_date('weekly', now=NOW), end_of(TODAY + timedelta(days=7)))
        self.assertEqual(default_due_date('monthly', now=NOW), end_of(TODAY + timedelta(days=15)))

    def test_unknown_category(self):
        with self.assertRaises(ValidationError):
            default_due_date('yearly', now=NOW)


class CatalogTests(TestCase):

    def test_definitions_are_filtered_and_ordered(self):
        first, second, retired = make_definitions(3)
        make_definitions(1, category='weekly')
        first.position = 5
        first.save()
        retired.is_active = False
        retired.save()

        self.assertEqual(get_task_definitions('daily'), [second, first])
        self.assertEqual(len(get_task_definitions('weekly')), 1)

    def test_tasks_for_date_uses_local_day_bounds(self):
        on_day = create_task('On the day', due_date=end_of(TODAY))
        create_task('Day before', due_date=end_of(TODAY - timedelta(days=1)))
        create_task('Next midnight', due_date=end_of(TODAY) + timedelta(seconds=1))
        create_task('Weekly', category='weekly', due_date=end_of(TODAY))

        self.assertEqual(list(get_tasks_for_date('daily', TODAY)), [on_day])


class CreateTaskTests(TestCase):

    def test_creates_task_and_logs_activity(self):
        admin = make_admin()
        alice = make_user('Alice')

        task = create_task('  Check stock ', assignee=alice, created_by=admin)

        self.assertEqual(task.title, 'Check stock')
        self.assertEqual(task.status, Task.Status.PENDING)
        self.assertEqual(task.source, Task.Source.MANUAL)
        self.assertRegex(task.reference_number, r'^TASK-\d{8}-0001$')
        activity = TaskActivity.objects.get(task=task)
        self.assertEqual(activity.action_type, TaskActivity.ActionType.CREATED)
        self.assertEqual(activity.user, admin)

    def test_reference_numbers_increase(self):
        first = create_task('First')
        second = create_task('Second')

        self.assertLess(first.reference_number, second.reference_number)
        self.assertTrue(second.reference_number.endswith('-0002'))

    def test_reference_numbers_continue_past_9999(self):
        prefix = f'TASK-{timezone.localdate():%Y%m%d}-'
        Task.objects.create(
            reference_number=f'{prefix}9999',
            title='Busy day',
            due_date=end_of(TODAY),
        )

        first = create_task('First')
        second = create_task('Second')

        self.assertEqual(first.reference_number, f'{prefix}10000')
        self.assertEqual(second.reference_number, f'{prefix}10001')

    def test_rejects_blank_title(self):
        with self.assertRaises(ValidationError):
            create_task('   ')
        self.assertFalse(Task.objects.exists())

    def test_rejects_unknown_category(self):
        with self.assertRaises(ValidationError):
            create_task('Task', category='yearly')

    def test_rejects_inactive_assignee(self):
        bob = make_user('Bob', is_active=False)

        with self.assertRaises(ValidationError):
            create_task('Task', assignee=bob)
        self.assertFalse(Task.objects.exists())

    def test_from_definition_copies_template(self):
        definition, = make_definitions(1, category='weekly')

        task = create_task_from_definition(definition, source=Task.Source.AUTO_ASSIGN, now=NOW)

        self.assertEqual(task.title, 'Weekly Task 0')
        self.assertEqual(task.description, 'Template 0')
        self.assertEqual(task.category, 'weekly')
        self.assertEqual(task.estimated_time_minutes, 15)
        self.assertEqual(task.due_date, end_of(TODAY + timedelta(days=7)))
        self.assertIsNone(task.assignee)
        self.assertEqual(task.source, Task.Source.AUTO_ASSIGN)


class AssignAndStatusTests(TestCase):

    def setUp(self):
        self.alice = make_user('Alice')
        self.task = create_task('Open the shop')

    def test_assign_unassigned_task(self):
        assign_task(self.task, self.alice)

        self.task.refresh_from_db()
        self.assertEqual(self.task.assignee, self.alice)
        activity = TaskActivity.objects.get(action_type=TaskActivity.ActionType.ASSIGNED)
        self.assertIsNone(activity.old_value)
        self.assertEqual(activity.new_value, 'alice@example.com')

    def test_assign_twice_to_same_user(self):
        assign_task(self.task, self.alice)

        with self.assertRaises(ValidationError):
            assign_task(self.task, self.alice)

    def test_status_workflow(self):
        change_status(self.task, Task.Status.IN_PROGRESS, user=self.alice)
        change_status(self.task, Task.Status.COMPLETED, user=self.alice, actual_time_minutes=20)

        self.task.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.COMPLETED)
        self.assertIsNotNone(self.task.completed_at)
        self.assertEqual(self.task.actual_time_minutes, 20)
        self.assertFalse(self.task.is_overdue)
        self.assertEqual(
            TaskActivity.objects.filter(action_type=TaskActivity.ActionType.STATUS_CHANGED).count(),
            2
        )

    def test_completed_task_cannot_reopen(self):
        change_status(self.task, Task.Status.COMPLETED)

        with self.assertRaises(ValidationError):
            change_status(self.task, Task.Status.PENDING)

    def test_overdue_when_past_due(self):
        task = create_task('Late', due_date=timezone.now() - timedelta(minutes=1))

        self.assertTrue(task.is_overdue)
