"""
Appointment views.

Rows are narrowed to the caller's own profile for doctors and patients.
Booking and rescheduling go through :mod:`clinic.services.appointments`,
which owns the slot conflict rule.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import Appointment, Doctor, Patient, User
from clinic.permissions import IsAdminOrDoctor
from clinic.responses import fail, not_found, ok, paginate
from clinic.serializers.appointment import (
    AppointmentCreateSerializer,
    AppointmentListQuerySerializer,
    AppointmentUpdateSerializer,
)
from clinic.services.appointments import (
    BookingError,
    appointment_stats as compute_appointment_stats,
    book_appointment,
    cancel_appointment,
    format_appointment,
    todays_appointments,
    update_appointment,
)
from clinic.services.profiles import patient_for_user, scope_by_role


def _visible(user):
    qs = Appointment.objects.select_related('patient__user', 'doctor__user')
    return scope_by_role(qs, user)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def appointments(request):
    if request.method == 'GET':
        q = AppointmentListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        v = q.validated_data
        qs = _visible(request.user)
        if v.get('status'):
            qs = qs.filter(status=v['status'])
        if v.get('date'):
            qs = qs.filter(appointment_date=v['date'])
        if v.get('doctorId'):
            qs = qs.filter(doctor_id=v['doctorId'])
        if v.get('patientId'):
            qs = qs.filter(patient_id=v['patientId'])
        qs = qs.order_by('-appointment_date', '-appointment_time')
        return ok(paginate(qs, v['page'], v['limit'], 'appointments', format_appointment))

    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if request.user.role == User.ROLE_PATIENT:
        # patients always book for themselves
        patient = patient_for_user(request.user)
    elif v.get('patientId'):
        patient = Patient.objects.filter(pk=v['patientId']).first()
    else:
        return fail('patientId is required')
    if patient is None:
        return not_found('Patient')
    if not Doctor.objects.filter(pk=v['doctorId']).exists():
        return not_found('Doctor')
    try:
        appointment = book_appointment(
            patient=patient,
            doctor_id=v['doctorId'],
            appointment_date=v['appointmentDate'],
            appointment_time=v['appointmentTime'],
            appointment_type=v.get('type'),
            reason=v.get('reason', ''),
        )
    except BookingError as e:
        return fail(str(e))
    return ok(format_appointment(appointment), message='Appointment created successfully', status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrDoctor])
def appointment_stats(request):
    return ok(compute_appointment_stats())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def today_appointments(request):
    return ok([format_appointment(a) for a in todays_appointments(request.user)])


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, pk: int):
    appointment = _visible(request.user).filter(pk=pk).first()
    if appointment is None:
        return not_found('Appointment')
    if request.method == 'GET':
        return ok(format_appointment(appointment))

    s = AppointmentUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if (request.user.role == User.ROLE_PATIENT and v.get('status')
            and v['status'] != Appointment.STATUS_CANCELLED):
        return fail('Patients can only cancel their appointments', status=403)
    try:
        appointment = update_appointment(
            appointment.pk,
            appointment_date=v.get('appointmentDate') or appointment.appointment_date,
            appointment_time=v.get('appointmentTime') or appointment.appointment_time,
            type=v.get('type'),
            status=v.get('status'),
            notes=v.get('notes'),
        )
    except BookingError as e:
        return fail(str(e))
    return ok(format_appointment(appointment), message='Appointment updated successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def appointment_cancel(request, pk: int):
    appointment = _visible(request.user).filter(pk=pk).first()
    if appointment is None:
        return not_found('Appointment')
    cancel_appointment(appointment)
    return ok(format_appointment(appointment), message='Appointment cancelled successfully')
