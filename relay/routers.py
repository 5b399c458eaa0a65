"""
URL mappings for the relay API.

Paths match the ones the dashboard front-end calls.  Note that trailing
slashes are deliberately omitted.
"""
from django.urls import path, include

from .views import cases
from .views import doctors
from .views import health
from .views.auth import login_view


urlpatterns = [
    # exposes /metrics
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    # Doctors
    path('api/doctors', doctors.doctors_list, name='doctors_list'),
    # Cases
    path('api/cases', cases.case_list, name='case_list'),
    path('api/cases/<str:case_id>/status', cases.case_status_update, name='case_status_update'),
    path('api/cases/<str:case_id>/update', cases.case_update, name='case_update'),
]
