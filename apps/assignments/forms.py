"""
Forms for the assignments app.

Includes:
- AutoAssignConfigForm: Edit the persisted auto-assign options
- AutoAssignRunForm: Per-run overrides for a manual batch
- ScheduleConfigForm: Enable/disable the daily schedule and set its time
"""

from django import forms

from .models import AutoAssignConfig, Strategy
from .services import parse_time_of_day


class AutoAssignConfigForm(forms.ModelForm):

    class Meta:
        model = AutoAssignConfig
        fields = ['strategy', 'include_unassigned', 'assign_to_all_users', 'skip_existing']


class AutoAssignRunForm(forms.Form):
    """
    Options for one manual run.

    Fields left out of the request fall back to the persisted configuration.
    """

    strategy = forms.ChoiceField(choices=Strategy.choices, required=False)
    include_unassigned = forms.NullBooleanField(required=False)
    assign_to_all_users = forms.NullBooleanField(required=False)
    skip_existing = forms.NullBooleanField(required=False)
    confirm = forms.BooleanField(
        required=False,
        help_text='Run even though daily tasks already exist for today'
    )

    def get_options(self, defaults):
        """Apply the submitted overrides to an AutoAssignOptions snapshot."""
        data = self.cleaned_data
        return defaults.override(
            strategy=data.get('strategy') or None,
            include_unassigned=data.get('include_unassigned'),
            assign_to_all_users=data.get('assign_to_all_users'),
            skip_existing=data.get('skip_existing'),
        )


class ScheduleConfigForm(forms.Form):

    enabled = forms.BooleanField(required=False)
    time_of_day = forms.CharField(
        max_length=5,
        help_text='24-hour HH:MM'
    )

    def clean_time_of_day(self):
        # InvalidScheduleTime is a ValidationError and becomes a field error
        return parse_time_of_day(self.cleaned_data['time_of_day'])
