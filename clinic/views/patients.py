"""
Patient management views.

Staff list and search patients; admins create and delete them.  A patient
may read and update only their own profile.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import Patient, User
from clinic.permissions import IsAdmin, IsStaff
from clinic.responses import fail, not_found, ok, paginate
from clinic.serializers.patient import (
    PatientCreateSerializer,
    PatientListQuerySerializer,
    PatientUpdateSerializer,
)
from clinic.services.audit import log_action
from clinic.services.profiles import (
    create_patient,
    delete_with_user,
    format_patient,
    owns_patient,
    patient_stats as compute_patient_stats,
    search_patients,
)

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    ('dateOfBirth', 'date_of_birth'),
    ('gender', 'gender'),
    ('bloodGroup', 'blood_group'),
    ('address', 'address'),
    ('emergencyContact', 'emergency_contact'),
    ('medicalHistory', 'medical_history'),
    ('allergies', 'allergies'),
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaff])
def patients(request):
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        v = q.validated_data
        qs = search_patients(v.get('search', ''))
        return ok(paginate(qs, v['page'], v['limit'], 'patients', format_patient))

    if request.user.role != User.ROLE_ADMIN:
        return fail('You do not have permission to perform this action', status=403)
    s = PatientCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if User.objects.filter(email=v['email']).exists():
        return fail('Email already exists')
    profile = {dst: v[src] for src, dst in PROFILE_FIELDS if src in v}
    try:
        patient = create_patient(name=v['name'], email=v['email'], password=v['password'],
                                 phone=v.get('phone', ''), **profile)
    except IntegrityError:
        return fail('Email already exists')
    log_action(user=request.user, action='patient_create', object_type='patient', object_id=patient.id)
    return ok(format_patient(patient), message='Patient created successfully', status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def patient_stats(request):
    return ok(compute_patient_stats())


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def patient_detail(request, pk: int):
    patient = Patient.objects.select_related('user').filter(pk=pk).first()
    if patient is None:
        return not_found('Patient')

    if request.method == 'DELETE':
        if request.user.role != User.ROLE_ADMIN:
            return fail('You do not have permission to perform this action', status=403)
        delete_with_user(patient)
        logger.info("patient %s deleted by user %s", pk, request.user.pk)
        log_action(user=request.user, action='patient_delete', object_type='patient', object_id=pk)
        return ok(message='Patient deleted successfully')

    if request.user.role == User.ROLE_PATIENT and not owns_patient(request.user, patient):
        if request.method == 'GET':
            return fail('You can only view your own patient profile', status=403)
        return fail('Unauthorized: You can only update your own patient profile.', status=403)

    if request.method == 'GET':
        return ok(format_patient(patient))

    s = PatientUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = patient.user
    if 'name' in v:
        user.name = v['name']
    elif 'firstName' in v or 'lastName' in v:
        user.name = ' '.join(p for p in (v.get('firstName', ''), v.get('lastName', '')) if p) or user.name
    if 'phone' in v:
        user.phone = v['phone']
    user.save()
    if 'chronicConditions' in v and 'medicalHistory' not in v:
        v['medicalHistory'] = v['chronicConditions']
    for src, dst in PROFILE_FIELDS:
        if src in v:
            setattr(patient, dst, v[src])
    patient.save()
    return ok(format_patient(patient), message='Patient profile updated successfully')
