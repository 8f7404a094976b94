"""
Django admin registrations for the clinic models.

Superusers can inspect and correct data through ``/admin/``.  Derived
fields (bill balances, inventory status) are read-only here since the
services recompute them.
"""

from django.contrib import admin

from .models import (
    Appointment,
    AuditEvent,
    Bill,
    Doctor,
    InventoryItem,
    MedicalRecord,
    Patient,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'role', 'status', 'is_staff', 'is_superuser')
    list_filter = ('role', 'status')
    search_fields = ('email', 'name', 'phone')
    ordering = ('email',)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('user', 'gender', 'date_of_birth', 'blood_group', 'created_at')
    list_filter = ('gender', 'blood_group')
    search_fields = ('user__email', 'user__name')


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('user', 'specialization', 'license_number', 'availability', 'consultation_fee')
    list_filter = ('specialization', 'availability')
    search_fields = ('user__email', 'user__name', 'license_number')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'appointment_date', 'appointment_time', 'type', 'status')
    list_filter = ('status', 'type', 'appointment_date')
    search_fields = ('patient__user__name', 'doctor__user__name')


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'visit_date', 'diagnosis')
    search_fields = ('patient__user__name', 'diagnosis')


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'patient', 'total_amount', 'paid_amount', 'balance_amount', 'status')
    list_filter = ('status', 'payment_method')
    search_fields = ('invoice_number', 'patient__user__name')
    readonly_fields = ('balance_amount', 'status')


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('item_name', 'category', 'quantity', 'min_quantity', 'expiry_date', 'status')
    list_filter = ('category', 'status')
    search_fields = ('item_name', 'supplier', 'batch_number')
    readonly_fields = ('status',)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
