"""
ERP Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("module-events", views.module_events_list_view),
    path("module-events/process", views.process_module_event_view),
    path("module-events/<str:event_id>/logs", views.module_event_logs_view),
]
