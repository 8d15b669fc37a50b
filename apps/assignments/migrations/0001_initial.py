import datetime

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
            name='AutoAssignConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('strategy', models.CharField(choices=[('distribute', 'Distribute'), ('round-robin', 'Round-robin'), ('load-balance', 'Load balance')], default='distribute', max_length=20)),
                ('include_unassigned', models.BooleanField(default=True, help_text='Also create one unassigned task per template')),
                ('assign_to_all_users', models.BooleanField(default=True, help_text='Create assigned tasks for the roster using the strategy')),
                ('skip_existing', models.BooleanField(default=True, help_text="Don't recreate tasks that already exist for today")),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'auto-assign configuration',
                'verbose_name_plural': 'auto-assign configuration',
            },
        ),
        migrations.CreateModel(
            name='ScheduleConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('enabled', models.BooleanField(default=False)),
                ('time_of_day', models.TimeField(default=datetime.time(9, 0))),
                ('last_run_date', models.DateField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'auto-assign schedule',
                'verbose_name_plural': 'auto-assign schedule',
            },
        ),
        migrations.CreateModel(
            name='AssignmentRun',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('trigger', models.CharField(choices=[('manual', 'Manual'), ('scheduled', 'Scheduled')], db_index=True, default='manual', max_length=10)),
                ('strategy', models.CharField(choices=[('distribute', 'Distribute'), ('round-robin', 'Round-robin'), ('load-balance', 'Load balance')], max_length=20)),
                ('include_unassigned', models.BooleanField()),
                ('assign_to_all_users', models.BooleanField()),
                ('skip_existing', models.BooleanField()),
                ('user_count', models.PositiveIntegerField(default=0)),
                ('template_count', models.PositiveIntegerField(default=0)),
                ('existing_count', models.PositiveIntegerField(default=0, help_text='Daily tasks already due today when the batch started')),
                ('tasks_created', models.PositiveIntegerField(default=0)),
                ('tasks_assigned', models.PositiveIntegerField(default=0)),
                ('failures', models.JSONField(blank=True, default=list)),
                ('started_at', models.DateTimeField()),
                ('finished_at', models.DateTimeField()),
                ('triggered_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assignment_runs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'assignment run',
                'verbose_name_plural': 'assignment runs',
                'ordering': ['-started_at', '-id'],
            },
        ),
    ]
