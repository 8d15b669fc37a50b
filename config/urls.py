"""
URL configuration for task_rota project.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings

urlpatterns = [
    path('admin/', admin.site.urls),

    # App URLs
    path('assignments/', include('apps.assignments.urls', namespace='assignments')),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    import debug_toolbar
    urlpatterns = [
        path('__debug__/', include(debug_toolbar.urls)),
    ] + urlpatterns

# Admin site customization
admin.site.site_header = 'Task Rota Administration'
admin.site.site_title = 'Task Rota Admin'
admin.site.index_title = 'Welcome to Task Rota Admin'
