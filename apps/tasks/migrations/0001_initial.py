import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='TaskDefinition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('template_id', models.SlugField(help_text='Stable identifier of the template', max_length=64, unique=True)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('category', models.CharField(choices=[('daily', 'Daily'), ('weekly', 'Weekly'), ('monthly', 'Monthly')], db_index=True, default='daily', max_length=10)),
                ('estimated_time_minutes', models.PositiveIntegerField(default=30)),
                ('position', models.PositiveIntegerField(default=0, help_text='Order within the category')),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={
                'verbose_name': 'task definition',
                'verbose_name_plural': 'task definitions',
                'ordering': ['category', 'position', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Task',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reference_number', models.CharField(editable=False, help_text='Auto-generated: TASK-YYYYMMDD-NNNN', max_length=20, unique=True)),
                ('title', models.CharField(db_index=True, max_length=255)),
                ('description', models.TextField(blank=True)),
                ('category', models.CharField(choices=[('daily', 'Daily'), ('weekly', 'Weekly'), ('monthly', 'Monthly')], default='daily', max_length=10)),
                ('estimated_time_minutes', models.PositiveIntegerField(default=30)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed')], db_index=True, default='pending', max_length=15)),
                ('due_date', models.DateTimeField(db_index=True)),
                ('source', models.CharField(choices=[('manual', 'Manual'), ('auto_assign', 'Auto-assign')], default='manual', max_length=15)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('actual_time_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('assignee', models.ForeignKey(blank=True, help_text='Empty for unassigned tasks', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_tasks', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, help_text='Empty when created by the auto-assign engine', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_tasks', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'task',
                'verbose_name_plural': 'tasks',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['category', 'due_date'], name='tasks_category_due_idx'),
                    models.Index(fields=['status', 'assignee'], name='tasks_status_assignee_idx'),
                ],
            },
        ),
    ]
