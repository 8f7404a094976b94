"""
URL mappings for the hospital API.

Paths carry no trailing slash.  Fixed sub-paths such as ``stats`` are
registered ahead of the ``<int:pk>`` routes of the same resource.
"""
from django.urls import include, path

from .auth_views import (
    change_password_view,
    login_view,
    logout_view,
    profile_view,
    refresh_view,
    register_view,
)
from .views import appointments, bills, doctors, health, inventory, patients, records

urlpatterns = [
    path('api/health', health.healthz, name='health'),

    # Auth
    path('api/auth/register', register_view, name='register_view'),
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', refresh_view, name='refresh_view'),
    path('api/auth/logout', logout_view, name='logout_view'),
    path('api/auth/profile', profile_view, name='profile_view'),
    path('api/auth/change-password', change_password_view, name='change_password_view'),

    # Patients
    path('api/patients', patients.patients, name='patients'),
    path('api/patients/stats', patients.patient_stats, name='patient_stats'),
    path('api/patients/<int:pk>', patients.patient_detail, name='patient_detail'),

    # Doctors
    path('api/doctors', doctors.doctors, name='doctors'),
    path('api/doctors/available', doctors.available_doctors, name='available_doctors'),
    path('api/doctors/<int:pk>', doctors.doctor_detail, name='doctor_detail'),
    path('api/doctors/<int:pk>/schedule', doctors.doctor_schedule, name='doctor_schedule'),

    # Appointments
    path('api/appointments', appointments.appointments, name='appointments'),
    path('api/appointments/stats', appointments.appointment_stats, name='appointment_stats'),
    path('api/appointments/today', appointments.today_appointments, name='today_appointments'),
    path('api/appointments/<int:pk>', appointments.appointment_detail, name='appointment_detail'),
    path('api/appointments/<int:pk>/cancel', appointments.appointment_cancel, name='appointment_cancel'),

    # Medical records
    path('api/records', records.records, name='records'),
    path('api/records/patient/<int:patient_id>/history', records.patient_record_history,
         name='patient_record_history'),
    path('api/records/<int:pk>', records.record_detail, name='record_detail'),

    # Billing
    path('api/bills', bills.bills, name='bills'),
    path('api/bills/stats', bills.bill_stats, name='bill_stats'),
    path('api/bills/<int:pk>', bills.bill_detail, name='bill_detail'),
    path('api/bills/<int:pk>/payment', bills.bill_payment, name='bill_payment'),

    # Inventory
    path('api/inventory', inventory.inventory, name='inventory'),
    path('api/inventory/stats', inventory.inventory_stats, name='inventory_stats'),
    path('api/inventory/low-stock', inventory.inventory_low_stock, name='inventory_low_stock'),
    path('api/inventory/expired', inventory.inventory_expired, name='inventory_expired'),
    path('api/inventory/expiring-soon', inventory.inventory_expiring_soon, name='inventory_expiring_soon'),
    path('api/inventory/<int:pk>', inventory.inventory_detail, name='inventory_detail'),
    path('api/inventory/<int:pk>/stock', inventory.inventory_stock, name='inventory_stock'),

    # Prometheus exposes /metrics
    path('', include('django_prometheus.urls')),
]
