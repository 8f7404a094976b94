"""
Doctor directory and schedules.
"""
from __future__ import annotations

from django.db import IntegrityError
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import Doctor, User
from clinic.responses import fail, not_found, ok, paginate
from clinic.serializers.doctor import (
    DoctorCreateSerializer,
    DoctorListQuerySerializer,
    DoctorUpdateSerializer,
    ScheduleUpdateSerializer,
)
from clinic.services.audit import log_action
from clinic.services.profiles import create_doctor, delete_with_user, format_doctor, owns_doctor, search_doctors

FORBIDDEN = 'You do not have permission to perform this action'


def _can_manage(user, doctor: Doctor) -> bool:
    return user.role == User.ROLE_ADMIN or (user.role == User.ROLE_DOCTOR and owns_doctor(user, doctor))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def doctors(request):
    if request.method == 'GET':
        q = DoctorListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        v = q.validated_data
        qs = search_doctors(v.get('search', ''), v.get('specialization', ''))
        return ok(paginate(qs, v['page'], v['limit'], 'doctors', format_doctor))

    if request.user.role != User.ROLE_ADMIN:
        return fail(FORBIDDEN, status=403)
    s = DoctorCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if User.objects.filter(email=v['email']).exists():
        return fail('Email already exists')
    if Doctor.objects.filter(license_number=v['licenseNumber']).exists():
        return fail('License number already exists')
    try:
        doctor = create_doctor(
            name=v['name'], email=v['email'], password=v['password'], phone=v.get('phone', ''),
            specialization=v['specialization'], qualification=v['qualification'],
            experience=v.get('experience', 0), license_number=v['licenseNumber'],
            consultation_fee=v.get('consultationFee', 0), schedule=v.get('schedule') or {},
        )
    except IntegrityError:
        return fail('Email or license number already exists')
    log_action(user=request.user, action='doctor_create', object_type='doctor', object_id=doctor.id)
    return ok(format_doctor(doctor), message='Doctor created successfully', status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_doctors(request):
    qs = Doctor.objects.select_related('user').filter(availability=Doctor.AVAILABILITY_AVAILABLE)
    specialization = request.query_params.get('specialization')
    if specialization:
        qs = qs.filter(specialization=specialization)
    return ok([format_doctor(d) for d in qs.order_by('user__name')])


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def doctor_detail(request, pk: int):
    doctor = Doctor.objects.select_related('user').filter(pk=pk).first()
    if doctor is None:
        return not_found('Doctor')

    if request.method == 'GET':
        return ok(format_doctor(doctor))

    if request.method == 'DELETE':
        if request.user.role != User.ROLE_ADMIN:
            return fail(FORBIDDEN, status=403)
        delete_with_user(doctor)
        log_action(user=request.user, action='doctor_delete', object_type='doctor', object_id=pk)
        return ok(message='Doctor deleted successfully')

    if not _can_manage(request.user, doctor):
        return fail(FORBIDDEN, status=403)
    s = DoctorUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = doctor.user
    if 'name' in v:
        user.name = v['name']
    if 'phone' in v:
        user.phone = v['phone']
    user.save()
    for src, dst in (('specialization', 'specialization'), ('qualification', 'qualification'),
                     ('experience', 'experience'), ('consultationFee', 'consultation_fee'),
                     ('schedule', 'schedule'), ('availability', 'availability')):
        if src in v:
            setattr(doctor, dst, v[src])
    doctor.save()
    return ok(format_doctor(doctor), message='Doctor updated successfully')


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def doctor_schedule(request, pk: int):
    doctor = Doctor.objects.select_related('user').filter(pk=pk).first()
    if doctor is None:
        return not_found('Doctor')
    if request.method == 'GET':
        return ok({'schedule': doctor.schedule, 'availability': doctor.availability})

    if not _can_manage(request.user, doctor):
        return fail(FORBIDDEN, status=403)
    s = ScheduleUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if 'schedule' in v:
        doctor.schedule = v['schedule'] or {}
    if 'availability' in v:
        doctor.availability = v['availability']
    doctor.save(update_fields=['schedule', 'availability', 'updated_at'])
    return ok({'schedule': doctor.schedule, 'availability': doctor.availability},
              message='Schedule updated successfully')
