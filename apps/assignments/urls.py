"""
URL configuration for assignments app.
"""

from django.urls import path
from . import views

app_name = 'assignments'

urlpatterns = [
    path('run/', views.run_auto_assign, name='run'),
    path('config/', views.auto_assign_config, name='config'),
    path('schedule/', views.schedule_config, name='schedule'),
]
