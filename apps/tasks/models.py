"""
Task models.

Models:
- TaskDefinition: Reusable template for a recurring task, grouped by category
- Task: Concrete unit of work created from a template (or ad hoc)
"""

from django.db import models
from django.db.models import IntegerField, Max
from django.db.models.functions import Cast, Substr
from django.conf import settings
from django.utils import timezone


class Category(models.TextChoices):
    DAILY = 'daily', 'Daily'
    WEEKLY = 'weekly', 'Weekly'
    MONTHLY = 'monthly', 'Monthly'


class TaskDefinition(models.Model):
    """
    Task template in the catalog.

    Catalog order (position, then id) is significant: assignment
    strategies pick templates by their index in this order.
    """

    template_id = models.SlugField(
        max_length=64,
        unique=True,
        help_text='Stable identifier of the template'
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(
        max_length=10,
        choices=Category.choices,
        default=Category.DAILY,
        db_index=True,
    )
    estimated_time_minutes = models.PositiveIntegerField(default=30)
    position = models.PositiveIntegerField(
        default=0,
        help_text='Order within the category'
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = 'task definition'
        verbose_name_plural = 'task definitions'
        ordering = ['category', 'position', 'id']

    def __str__(self):
        return f"[{self.get_category_display()}] {self.title}"


class Task(models.Model):
    """
    Main Task model (a task instance).

    Reference number format: TASK-YYYYMMDD-NNNN

    Status workflow: pending → in_progress → completed
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'

    class Source(models.TextChoices):
        MANUAL = 'manual', 'Manual'
        AUTO_ASSIGN = 'auto_assign', 'Auto-assign'

    # Core fields
    reference_number = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        help_text='Auto-generated: TASK-YYYYMMDD-NNNN'
    )
    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)
    category = models.CharField(
        max_length=10,
        choices=Category.choices,
        default=Category.DAILY,
    )
    estimated_time_minutes = models.PositiveIntegerField(default=30)

    # Relationships
    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_tasks',
        help_text='Empty for unassigned tasks'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_tasks',
        help_text='Empty when created by the auto-assign engine'
    )

    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    due_date = models.DateTimeField(db_index=True)
    source = models.CharField(
        max_length=15,
        choices=Source.choices,
        default=Source.MANUAL,
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    actual_time_minutes = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['category', 'due_date'], name='tasks_category_due_idx'),
            models.Index(fields=['status', 'assignee'], name='tasks_status_assignee_idx'),
        ]

    def __str__(self):
        return f"{self.reference_number}: {self.title}"

    def save(self, *args, **kwargs):
        if not self.reference_number:
            self.reference_number = self._generate_reference_number()
        super().save(*args, **kwargs)

    def _generate_reference_number(self):
        """Generate unique reference number: TASK-YYYYMMDD-NNNN"""
        today = timezone.localdate().strftime('%Y%m%d')
        prefix = f'TASK-{today}-'

        # Numeric max: past 9999 the suffix grows a digit and no longer sorts as text
        last = Task.objects.filter(reference_number__startswith=prefix).aggregate(
            last=Max(Cast(Substr('reference_number', len(prefix) + 1), IntegerField()))
        )['last']
        sequence = (last or 0) + 1

        return f'{prefix}{sequence:04d}'

    @property
    def is_assigned(self):
        return self.assignee_id is not None

    @property
    def is_overdue(self):
        """Check if task is past its due date and not completed."""
        if self.status == self.Status.COMPLETED:
            return False
        return timezone.now() > self.due_date

    def can_transition_to(self, new_status):
        """Check if status transition is valid."""
        valid_transitions = {
            self.Status.PENDING: [self.Status.IN_PROGRESS, self.Status.COMPLETED],
            self.Status.IN_PROGRESS: [self.Status.COMPLETED],
        }
        return new_status in valid_transitions.get(self.status, [])
