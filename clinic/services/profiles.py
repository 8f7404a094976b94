"""
Role profiles and per-request row scoping.

Doctors and patients are users with an attached profile row.  List
endpoints narrow their querysets to the caller's own profile when the
caller is a doctor or a patient; a caller of such a role without a
profile sees nothing.
"""
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q

from clinic.models import Doctor, Patient

User = get_user_model()


def doctor_for_user(user) -> Optional[Doctor]:
    return Doctor.objects.filter(user_id=getattr(user, 'id', None)).first()


def patient_for_user(user) -> Optional[Patient]:
    return Patient.objects.filter(user_id=getattr(user, 'id', None)).first()


def scope_by_role(qs, user, *, doctor_field: Optional[str] = 'doctor', patient_field: Optional[str] = 'patient'):
    """Restrict ``qs`` to rows belonging to a doctor/patient caller."""
    role = getattr(user, 'role', '')
    if role == User.ROLE_DOCTOR and doctor_field:
        doctor = doctor_for_user(user)
        return qs.filter(**{doctor_field: doctor}) if doctor else qs.none()
    if role == User.ROLE_PATIENT and patient_field:
        patient = patient_for_user(user)
        return qs.filter(**{patient_field: patient}) if patient else qs.none()
    return qs


def owns_patient(user, patient: Patient) -> bool:
    return getattr(user, 'role', '') != User.ROLE_PATIENT or patient.user_id == user.id


def owns_doctor(user, doctor: Doctor) -> bool:
    return getattr(user, 'role', '') != User.ROLE_DOCTOR or doctor.user_id == user.id


def search_patients(search: str = ''):
    qs = Patient.objects.select_related('user').order_by('-created_at')
    if search:
        qs = qs.filter(Q(user__name__icontains=search) | Q(user__email__icontains=search))
    return qs


def search_doctors(search: str = '', specialization: str = ''):
    qs = Doctor.objects.select_related('user').order_by('-created_at')
    if specialization:
        qs = qs.filter(specialization=specialization)
    if search:
        qs = qs.filter(user__name__icontains=search)
    return qs


@transaction.atomic
def create_patient(*, name, email, password, phone='', **profile) -> Patient:
    user = User.objects.create_user(email=email, password=password, name=name, phone=phone or '',
                                    role=User.ROLE_PATIENT)
    return Patient.objects.create(user=user, **profile)


@transaction.atomic
def create_doctor(*, name, email, password, phone='', **profile) -> Doctor:
    user = User.objects.create_user(email=email, password=password, name=name, phone=phone or '',
                                    role=User.ROLE_DOCTOR)
    return Doctor.objects.create(user=user, **profile)


@transaction.atomic
def delete_with_user(profile) -> None:
    """Remove a patient or doctor profile together with its login."""
    user = profile.user
    profile.delete()
    user.delete()


def patient_stats() -> dict:
    qs = Patient.objects.all()
    return {
        'totalPatients': qs.count(),
        'activePatients': qs.filter(user__status=User.STATUS_ACTIVE).count(),
        'malePatients': qs.filter(gender='male').count(),
        'femalePatients': qs.filter(gender='female').count(),
    }


def format_user(user) -> dict:
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'phone': user.phone,
        'role': user.role,
        'status': user.status,
    }


def format_patient_brief(patient: Patient) -> dict:
    return {'id': patient.id, 'user': format_user(patient.user)}


def format_doctor_brief(doctor: Doctor) -> dict:
    return {'id': doctor.id, 'specialization': doctor.specialization, 'user': format_user(doctor.user)}


def format_patient(patient: Patient) -> dict:
    return {
        'id': patient.id,
        'userId': patient.user_id,
        'user': format_user(patient.user),
        'dateOfBirth': patient.date_of_birth.isoformat() if patient.date_of_birth else None,
        'gender': patient.gender,
        'bloodGroup': patient.blood_group,
        'address': patient.address,
        'emergencyContact': patient.emergency_contact,
        'medicalHistory': patient.medical_history,
        'allergies': patient.allergies,
        'createdAt': patient.created_at.isoformat() if patient.created_at else None,
    }


def format_doctor(doctor: Doctor) -> dict:
    return {
        'id': doctor.id,
        'userId': doctor.user_id,
        'user': format_user(doctor.user),
        'specialization': doctor.specialization,
        'qualification': doctor.qualification,
        'experience': doctor.experience,
        'licenseNumber': doctor.license_number,
        'consultationFee': str(doctor.consultation_fee),
        'schedule': doctor.schedule,
        'availability': doctor.availability,
        'createdAt': doctor.created_at.isoformat() if doctor.created_at else None,
    }
