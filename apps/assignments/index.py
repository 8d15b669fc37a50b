"""
Snapshot of the daily tasks already due today.

Built once at the start of a batch and never refreshed while the batch
runs, so dedup and load-balance decisions all see the same state.
"""

from collections import Counter

from django.utils import timezone

from apps.tasks.models import Category
from apps.tasks.services import get_tasks_for_date


class ExistingAssignmentIndex:
    """Read-only view over today's daily tasks."""

    def __init__(self, tasks):
        self._count = 0
        self._titles = set()
        self._assignments = set()
        self._loads = Counter()

        for task in tasks:
            self._count += 1
            self._titles.add(task.title)
            if task.assignee_id is not None:
                self._assignments.add((task.title, task.assignee_id))
                self._loads[task.assignee_id] += 1

    @classmethod
    def for_date(cls, date):
        return cls(get_tasks_for_date(Category.DAILY, date))

    @classmethod
    def for_today(cls, now=None):
        return cls.for_date(timezone.localdate(now))

    def __len__(self):
        return self._count

    def has_assignment(self, title, user_id):
        """True if a task with this title is already assigned to the user."""
        return (title, user_id) in self._assignments

    def has_title(self, title):
        """True if any task with this title exists, assigned or not."""
        return title in self._titles

    def load_for(self, user_id):
        return self._loads[user_id]

    def min_load(self, user_ids):
        """Lowest load among the given users; 0 for an empty roster."""
        return min((self.load_for(user_id) for user_id in user_ids), default=0)
