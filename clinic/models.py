"""
Database models for the Medicore backend.

These models capture users and their role profiles (patients and
doctors), appointments, medical records, bills and the pharmacy
inventory.  Field names follow Django conventions; views translate them
to the camelCase names the front-end expects.
"""
from __future__ import annotations

from decimal import Decimal

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.db.models import Q
from django.utils import timezone


class UserManager(BaseUserManager):
    """Manager for the email-based :class:`User` model."""
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email address must be set')
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.ROLE_ADMIN)
        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Account used to log in.  Identified by email.

    ``role`` decides which endpoints are reachable; ``status`` lets an
    administrator disable an account without deleting it.  The password
    is only ever stored as a Django hash.
    """
    ROLE_ADMIN = 'admin'
    ROLE_DOCTOR = 'doctor'
    ROLE_NURSE = 'nurse'
    ROLE_PATIENT = 'patient'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_NURSE, 'Nurse'),
        (ROLE_PATIENT, 'Patient'),
    ]
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
    ]

    username = None
    first_name = None
    last_name = None
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS: list[str] = ['name']

    objects = UserManager()

    def get_full_name(self) -> str:
        return self.name

    def get_short_name(self) -> str:
        return self.name

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class Patient(models.Model):
    """Clinical profile of a user with the patient role."""
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient_profile')
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    blood_group = models.CharField(max_length=8, blank=True)
    address = models.TextField(blank=True)
    emergency_contact = models.CharField(max_length=255, blank=True)
    medical_history = models.TextField(blank=True)
    allergies = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user.name} (patient #{self.pk})"


class Doctor(models.Model):
    """Professional profile of a user with the doctor role."""
    AVAILABILITY_AVAILABLE = 'available'
    AVAILABILITY_CHOICES = [
        (AVAILABILITY_AVAILABLE, 'Available'),
        ('on_leave', 'On leave'),
        ('busy', 'Busy'),
    ]
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    specialization = models.CharField(max_length=255, db_index=True)
    qualification = models.CharField(max_length=255)
    experience = models.PositiveIntegerField(default=0, help_text="Years of practice")
    license_number = models.CharField(max_length=64, unique=True)
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    # Weekly schedule, e.g. {"monday": ["09:00-12:00"]}
    schedule = models.JSONField(default=dict, blank=True)
    availability = models.CharField(
        max_length=10, choices=AVAILABILITY_CHOICES, default=AVAILABILITY_AVAILABLE, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user.name} ({self.specialization})"


class Appointment(models.Model):
    """A booked slot of a doctor's time for a patient.

    A slot is the (doctor, appointment_date, appointment_time) tuple.  At
    most one appointment per slot may be in an active status; this is
    enforced by :mod:`clinic.services.appointments` and, as the last line,
    by the partial unique constraint below.
    """
    STATUS_SCHEDULED = 'scheduled'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_NO_SHOW = 'no_show'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No show'),
    ]
    ACTIVE_STATUSES = (STATUS_SCHEDULED, STATUS_CONFIRMED)

    TYPE_CHOICES = [
        ('consultation', 'Consultation'),
        ('follow_up', 'Follow up'),
        ('emergency', 'Emergency'),
        ('checkup', 'Checkup'),
    ]

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='appointments')
    appointment_date = models.DateField()
    appointment_time = models.TimeField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='consultation')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    reason = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['appointment_date', 'appointment_time']
        indexes = [
            models.Index(fields=['doctor', 'appointment_date', 'appointment_time'], name='appointment_slot_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['doctor', 'appointment_date', 'appointment_time'],
                condition=Q(status__in=['scheduled', 'confirmed']),
                name='unique_active_appointment_slot',
            ),
        ]

    def __str__(self) -> str:
        return f"Appointment #{self.pk} d={self.doctor_id} {self.appointment_date} {self.appointment_time}"


class MedicalRecord(models.Model):
    """Notes from a visit, written by a doctor about a patient."""
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medical_records')
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='medical_records')
    visit_date = models.DateTimeField(default=timezone.now)
    diagnosis = models.TextField()
    symptoms = models.TextField(blank=True)
    prescription = models.TextField(blank=True)
    lab_tests = models.TextField(blank=True)
    treatment_notes = models.TextField(blank=True)
    follow_up_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-visit_date']

    def __str__(self) -> str:
        return f"Record #{self.pk} p={self.patient_id} d={self.doctor_id}"


class Bill(models.Model):
    """An invoice issued to a patient.

    ``balance_amount`` always equals ``total_amount - paid_amount`` and the
    status is ``paid`` exactly when the balance is zero; see
    :mod:`clinic.services.billing` for the rules that keep this true.
    """
    STATUS_PENDING = 'pending'
    STATUS_PARTIALLY_PAID = 'partially_paid'
    STATUS_PAID = 'paid'
    STATUS_OVERDUE = 'overdue'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PARTIALLY_PAID, 'Partially paid'),
        (STATUS_PAID, 'Paid'),
        (STATUS_OVERDUE, 'Overdue'),
    ]
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('insurance', 'Insurance'),
        ('online', 'Online'),
    ]

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='bills')
    invoice_number = models.CharField(max_length=32, unique=True)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    balance_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    bill_date = models.DateTimeField(default=timezone.now)
    due_date = models.DateField(null=True, blank=True)
    # List of {"name": str, "quantity": int, "price": str}
    services = models.JSONField(default=list, blank=True)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-bill_date']

    def __str__(self) -> str:
        return f"{self.invoice_number} ({self.status})"


class InventoryItem(models.Model):
    """A stocked item.  ``status`` is recomputed on every save."""
    CATEGORY_CHOICES = [
        ('medicine', 'Medicine'),
        ('equipment', 'Equipment'),
        ('supplies', 'Supplies'),
        ('consumables', 'Consumables'),
    ]
    STATUS_IN_STOCK = 'in_stock'
    STATUS_LOW_STOCK = 'low_stock'
    STATUS_OUT_OF_STOCK = 'out_of_stock'
    STATUS_EXPIRED = 'expired'
    STATUS_CHOICES = [
        (STATUS_IN_STOCK, 'In stock'),
        (STATUS_LOW_STOCK, 'Low stock'),
        (STATUS_OUT_OF_STOCK, 'Out of stock'),
        (STATUS_EXPIRED, 'Expired'),
    ]

    item_name = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, db_index=True)
    quantity = models.IntegerField(default=0)
    min_quantity = models.IntegerField(default=10, help_text="Minimum quantity before a low stock alert")
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    supplier = models.CharField(max_length=255, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    batch_number = models.CharField(max_length=64, blank=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_IN_STOCK, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def save(self, *args, **kwargs):
        from clinic.services.inventory import derive_inventory_status

        self.status = derive_inventory_status(
            self.quantity, self.min_quantity, self.expiry_date, timezone.localdate()
        )
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'status' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['status']
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.item_name} ({self.status})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
