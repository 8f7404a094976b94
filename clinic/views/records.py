"""
Medical record views.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import MedicalRecord, Patient, User
from clinic.responses import fail, not_found, ok, paginate
from clinic.serializers.record import RecordCreateSerializer, RecordListQuerySerializer, RecordUpdateSerializer
from clinic.services.audit import log_action
from clinic.services.profiles import owns_patient, scope_by_role
from clinic.services.records import can_edit, format_record, patient_history, resolve_author

FORBIDDEN = 'You do not have permission to perform this action'

FIELD_MAP = (
    ('diagnosis', 'diagnosis'),
    ('symptoms', 'symptoms'),
    ('prescription', 'prescription'),
    ('labTests', 'lab_tests'),
    ('treatmentNotes', 'treatment_notes'),
    ('followUpDate', 'follow_up_date'),
)


def _visible(user):
    qs = MedicalRecord.objects.select_related('patient__user', 'doctor__user')
    return scope_by_role(qs, user)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def records(request):
    if request.method == 'GET':
        q = RecordListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        v = q.validated_data
        qs = _visible(request.user)
        if v.get('patientId'):
            qs = qs.filter(patient_id=v['patientId'])
        if v.get('doctorId'):
            qs = qs.filter(doctor_id=v['doctorId'])
        qs = qs.order_by('-visit_date')
        return ok(paginate(qs, v['page'], v['limit'], 'records', format_record))

    if request.user.role not in (User.ROLE_ADMIN, User.ROLE_DOCTOR):
        return fail(FORBIDDEN, status=403)
    s = RecordCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    patient = Patient.objects.filter(pk=v['patientId']).first()
    if patient is None:
        return not_found('Patient')
    # a doctor always files under their own profile
    doctor_id = v.get('doctorId') if request.user.role == User.ROLE_ADMIN else None
    doctor = resolve_author(request.user, doctor_id)
    if doctor is None:
        return not_found('Doctor')
    record = MedicalRecord.objects.create(
        patient=patient,
        doctor=doctor,
        **{dst: v[src] for src, dst in FIELD_MAP if src in v},
    )
    log_action(user=request.user, action='record_create', object_type='medical_record', object_id=record.id,
               detail={'patient': patient.id})
    return ok(format_record(record), message='Medical record created successfully', status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def record_detail(request, pk: int):
    record = _visible(request.user).filter(pk=pk).first()
    if record is None:
        return not_found('Medical record')

    if request.method == 'GET':
        return ok(format_record(record))

    if request.method == 'DELETE':
        if request.user.role != User.ROLE_ADMIN:
            return fail(FORBIDDEN, status=403)
        record.delete()
        log_action(user=request.user, action='record_delete', object_type='medical_record', object_id=pk)
        return ok(message='Medical record deleted successfully')

    if request.user.role not in (User.ROLE_ADMIN, User.ROLE_DOCTOR):
        return fail(FORBIDDEN, status=403)
    if not can_edit(request.user, record):
        return fail('You can only update your own records', status=403)
    s = RecordUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    for src, dst in FIELD_MAP:
        if src in v:
            setattr(record, dst, v[src])
    record.save()
    log_action(user=request.user, action='record_update', object_type='medical_record', object_id=pk,
               detail={'fields': sorted(v.keys())})
    return ok(format_record(record), message='Medical record updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_record_history(request, patient_id: int):
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        return not_found('Patient')
    if not owns_patient(request.user, patient):
        return fail('You can only view your own medical history', status=403)
    return ok([format_record(r, with_patient=False) for r in patient_history(patient)])
