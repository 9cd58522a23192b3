"""
URL mappings for the front-desk API.

Paths carry no trailing slash to match the front-end client.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view
from .views import health
from .views.appointments import (
    appointment_detail,
    appointment_reschedule,
    appointment_status,
    appointment_swap,
    appointments,
)
from .views.availability import appointment_slots, booking_window
from .views.patients import patient_search_by_phone
from .views.settings import appointment_settings

urlpatterns = [
    # auth
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout'),

    # appointments
    path('api/appointments', appointments, name='appointments'),
    path('api/appointments/slots', appointment_slots, name='appointment_slots'),
    path('api/appointments/booking-window', booking_window, name='booking_window'),
    path('api/appointments/swap', appointment_swap, name='appointment_swap'),
    path('api/appointments/<int:pk>', appointment_detail, name='appointment_detail'),
    path('api/appointments/<int:pk>/reschedule', appointment_reschedule, name='appointment_reschedule'),
    path('api/appointments/<int:pk>/status', appointment_status, name='appointment_status'),

    # patients and settings
    path('api/patients/search/by-phone', patient_search_by_phone, name='patient_search_by_phone'),
    path('api/settings/appointments', appointment_settings, name='appointment_settings'),

    # ops
    path('healthz', health.healthz, name='healthz'),
    path('', include('django_prometheus.urls')),
]
