"""
Appointment booking.

A slot is the (doctor, date, time) tuple; at most one appointment per
slot may be ``scheduled`` or ``confirmed``.  Booking and rescheduling run
the conflict check and the write in one transaction holding a lock on the
doctor row, and the partial unique constraint on :class:`Appointment`
rejects whatever slips past on databases without row locks.
"""
import logging
from datetime import date, time
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from clinic.models import Appointment, Doctor, Patient
from clinic.services.profiles import format_doctor_brief, format_patient_brief, scope_by_role

logger = logging.getLogger(__name__)

SLOT_TAKEN = 'This time slot is already booked'


class BookingError(Exception):
    """A booking was refused.  ``str(exc)`` is the client message."""


class SlotUnavailable(BookingError):
    def __init__(self, message: str = SLOT_TAKEN):
        super().__init__(message)


class DoctorUnavailable(BookingError):
    def __init__(self, message: str = 'Doctor is not available'):
        super().__init__(message)


def can_book(doctor_id: int, appointment_date: date, appointment_time: time,
             exclude_appointment_id: Optional[int] = None) -> bool:
    """True when no other active appointment holds the slot."""
    qs = Appointment.objects.filter(
        doctor_id=doctor_id,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        status__in=Appointment.ACTIVE_STATUSES,
    )
    if exclude_appointment_id is not None:
        qs = qs.exclude(pk=exclude_appointment_id)
    return not qs.exists()


def book_appointment(*, patient: Patient, doctor_id: int, appointment_date: date, appointment_time: time,
                     appointment_type: str = 'consultation', reason: str = '') -> Appointment:
    try:
        with transaction.atomic():
            doctor = Doctor.objects.select_for_update().get(pk=doctor_id)
            if doctor.availability != Doctor.AVAILABILITY_AVAILABLE:
                raise DoctorUnavailable()
            if not can_book(doctor.pk, appointment_date, appointment_time):
                logger.info("slot conflict: doctor=%s %s %s", doctor.pk, appointment_date, appointment_time)
                raise SlotUnavailable()
            appointment = Appointment.objects.create(
                patient=patient,
                doctor=doctor,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                type=appointment_type or 'consultation',
                reason=reason or '',
            )
    except IntegrityError:
        logger.warning("slot constraint hit: doctor=%s %s %s", doctor_id, appointment_date, appointment_time)
        raise SlotUnavailable()
    return appointment


def update_appointment(appointment_id: int, **changes) -> Appointment:
    """Apply partial changes; moving to a new slot re-runs the conflict check.

    The check runs when both a date and a time are supplied and the
    appointment stays active, excluding the appointment itself so that
    re-saving its current slot succeeds.
    """
    try:
        with transaction.atomic():
            appointment = Appointment.objects.select_for_update().get(pk=appointment_id)
            # serialise slot changes per doctor
            Doctor.objects.select_for_update().get(pk=appointment.doctor_id)
            new_date = changes.get('appointment_date')
            new_time = changes.get('appointment_time')
            new_status = changes.get('status') or appointment.status
            if new_date and new_time and new_status in Appointment.ACTIVE_STATUSES:
                if not can_book(appointment.doctor_id, new_date, new_time, exclude_appointment_id=appointment.pk):
                    raise SlotUnavailable()
            for field in ('appointment_date', 'appointment_time', 'type', 'status', 'notes'):
                value = changes.get(field)
                if value is not None:
                    setattr(appointment, field, value)
            appointment.save()
    except IntegrityError:
        raise SlotUnavailable()
    return appointment


def cancel_appointment(appointment: Appointment) -> Appointment:
    appointment.status = Appointment.STATUS_CANCELLED
    appointment.save(update_fields=['status', 'updated_at'])
    return appointment


def todays_appointments(user):
    qs = Appointment.objects.select_related('patient__user', 'doctor__user').filter(
        appointment_date=timezone.localdate()
    )
    return scope_by_role(qs, user).order_by('appointment_time')


def appointment_stats() -> dict:
    qs = Appointment.objects.all()
    return {
        'totalAppointments': qs.count(),
        'todayAppointments': qs.filter(appointment_date=timezone.localdate()).count(),
        'scheduledAppointments': qs.filter(status=Appointment.STATUS_SCHEDULED).count(),
        'completedAppointments': qs.filter(status=Appointment.STATUS_COMPLETED).count(),
        'cancelledAppointments': qs.filter(status=Appointment.STATUS_CANCELLED).count(),
    }


def format_appointment(a: Appointment) -> dict:
    return {
        'id': a.id,
        'patientId': a.patient_id,
        'doctorId': a.doctor_id,
        'patient': format_patient_brief(a.patient),
        'doctor': format_doctor_brief(a.doctor),
        'appointmentDate': a.appointment_date.isoformat(),
        'appointmentTime': a.appointment_time.strftime('%H:%M:%S'),
        'type': a.type,
        'status': a.status,
        'reason': a.reason,
        'notes': a.notes,
        'createdAt': a.created_at.isoformat() if a.created_at else None,
    }
