"""
Errors raised by the auto-assign engine and its configuration store.
"""

from django.core.exceptions import ValidationError


class AutoAssignError(Exception):
    """Base class for auto-assign errors."""


class NoEligibleUsers(AutoAssignError):
    """The roster was empty when a batch started. Nothing was written."""

    def __init__(self, message='No users available for task assignment.'):
        super().__init__(message)


class BatchInProgress(AutoAssignError):
    """Another auto-assign batch is still running in this process."""

    def __init__(self, message='An auto-assign batch is already in progress.'):
        super().__init__(message)


class WriteFailure(AutoAssignError):
    """
    A single task could not be created.

    Collected per item in the batch result; the batch keeps going.
    """

    def __init__(self, title, user=None, error=None):
        self.title = title
        self.user = user
        self.error = error
        target = user.email if user is not None else 'unassigned'
        super().__init__(f'Failed to create "{title}" for {target}: {error}')

    def as_dict(self):
        return {
            'title': self.title,
            'user_id': self.user.pk if self.user is not None else None,
            'error': str(self.error),
        }


class InvalidScheduleTime(ValidationError):
    """Malformed time of day in the schedule configuration."""

    def __init__(self, value):
        super().__init__(
            'Invalid schedule time "%(value)s". Use 24-hour HH:MM.',
            code='invalid_schedule_time',
            params={'value': value},
        )
        self.value = value
