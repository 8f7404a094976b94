"""
Authentication views.

Login, registration and the caller's own profile.  Token issuing lives in
:mod:`clinic.authentication` so that the authentication class can be
imported by Django REST framework without pulling in these views.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.authentication import issue_tokens
from clinic.models import User
from clinic.responses import fail, ok
from clinic.serializers.auth import (
    ChangePasswordSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
)
from clinic.services.audit import client_ip, log_action
from clinic.services.profiles import (
    create_patient,
    doctor_for_user,
    format_doctor,
    format_patient,
    format_user,
    patient_for_user,
)

logger = logging.getLogger(__name__)


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


def _profile_payload(user) -> dict:
    data = {'user': format_user(user)}
    if user.role == User.ROLE_PATIENT:
        patient = patient_for_user(user)
        data['profile'] = format_patient(patient) if patient else None
    elif user.role == User.ROLE_DOCTOR:
        doctor = doctor_for_user(user)
        data['profile'] = format_doctor(doctor) if doctor else None
    return data


# ---------------------------------------------------------------------
# Register / login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """Create an account.

    Anyone may register as a patient.  An authenticated admin may create
    staff accounts by passing ``role``; for everyone else the field is
    ignored.
    """
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data

    if User.objects.filter(email=v['email']).exists():
        return fail('Email already registered')

    caller = request.user
    role = User.ROLE_PATIENT
    if getattr(caller, 'is_authenticated', False) and caller.role == User.ROLE_ADMIN:
        role = v.get('role') or User.ROLE_PATIENT

    try:
        if role == User.ROLE_PATIENT and v.get('dateOfBirth'):
            user = create_patient(name=v['name'], email=v['email'], password=v['password'],
                                  phone=v.get('phone', ''), date_of_birth=v['dateOfBirth'],
                                  gender=v.get('gender') or 'other', blood_group=v.get('bloodGroup', '')).user
        else:
            user = User.objects.create_user(email=v['email'], password=v['password'], name=v['name'],
                                            phone=v.get('phone', ''), role=role)
    except IntegrityError:
        return fail('Email already registered')

    log_action(user=user, action='register', object_type='user', object_id=user.id,
               detail={'role': user.role, 'ip': client_ip(request)})
    data = {'user': format_user(user)}
    data.update(issue_tokens(user))
    return ok(data, message='Registration successful', status=201)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    email = s.validated_data['email']
    password = s.validated_data['password']

    user = User.objects.filter(email=email).first()
    if user is None or not user.check_password(password):
        log_action(user=None, action='login', object_type='user', object_id=None,
                   detail={'result': 'fail', 'email': email, 'ip': client_ip(request)})
        return fail('Invalid email or password', status=401)
    if user.status != User.STATUS_ACTIVE:
        return fail('Account is not active', status=403)

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': client_ip(request)})
    data = {'user': format_user(user)}
    data.update(issue_tokens(user))
    return ok(data, message='Login successful')


# ---------------------------------------------------------------------
# Own profile
# ---------------------------------------------------------------------
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    user = request.user
    if request.method == 'GET':
        return ok(_profile_payload(user))

    s = ProfileUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    for src, dst in (('name', 'name'), ('phone', 'phone')):
        if src in v:
            setattr(user, dst, v[src])
    user.save()

    if user.role == User.ROLE_PATIENT:
        patient = patient_for_user(user)
        if patient:
            for src, dst in (('address', 'address'), ('bloodGroup', 'blood_group'),
                             ('emergencyContact', 'emergency_contact'), ('allergies', 'allergies')):
                if src in v:
                    setattr(patient, dst, v[src])
            patient.save()
    elif user.role == User.ROLE_DOCTOR:
        doctor = doctor_for_user(user)
        if doctor:
            for src, dst in (('qualification', 'qualification'), ('consultationFee', 'consultation_fee')):
                if src in v:
                    setattr(doctor, dst, v[src])
            doctor.save()

    return ok(_profile_payload(user), message='Profile updated successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    s = ChangePasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = request.user
    if not user.check_password(s.validated_data['currentPassword']):
        return fail('Current password is incorrect', status=401)
    user.set_password(s.validated_data['newPassword'])
    user.save(update_fields=['password'])
    log_action(user=user, action='change_password', object_type='user', object_id=user.id)
    return ok(message='Password changed successfully')


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_view(request):
    """Exchange a refresh token for a new access token."""
    raw = request.data.get('refreshToken') or request.data.get('refresh')
    if not raw:
        return fail('Refresh token is required')
    try:
        refresh = RefreshToken(raw)
        access = refresh.access_token
    except TokenError as e:
        return fail('Invalid or expired refresh token', status=401, error=str(e))
    return ok({'token': str(access)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the given refresh token, or all of the caller's."""
    raw = request.data.get('refreshToken') or request.data.get('refresh')
    count = 0
    if raw:
        try:
            RefreshToken(raw).blacklist()
            count = 1
        except TokenError as e:
            return fail('Invalid or expired refresh token', error=str(e))
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    logger.info("user %s logged out, %s token(s) blacklisted", request.user.pk, count)
    return ok({'blacklisted': count}, message='Logged out successfully')
