from typing import Optional

from clinic.models import Doctor, MedicalRecord, Patient
from clinic.services.profiles import doctor_for_user, format_doctor_brief, format_patient_brief


def resolve_author(user, doctor_id: Optional[int]) -> Optional[Doctor]:
    """Doctor a new record is filed under.

    A doctor who does not name one files under their own profile.
    """
    if doctor_id:
        return Doctor.objects.filter(pk=doctor_id).first()
    if getattr(user, 'role', '') == 'doctor':
        return doctor_for_user(user)
    return None


def can_edit(user, record: MedicalRecord) -> bool:
    """Admins edit any record; doctors only those they wrote."""
    if getattr(user, 'role', '') == 'doctor':
        doctor = doctor_for_user(user)
        return bool(doctor and record.doctor_id == doctor.id)
    return True


def patient_history(patient: Patient):
    return MedicalRecord.objects.filter(patient=patient).select_related('doctor__user').order_by('-visit_date')


def format_record(r: MedicalRecord, *, with_patient: bool = True) -> dict:
    data = {
        'id': r.id,
        'patientId': r.patient_id,
        'doctorId': r.doctor_id,
        'doctor': format_doctor_brief(r.doctor),
        'visitDate': r.visit_date.isoformat() if r.visit_date else None,
        'diagnosis': r.diagnosis,
        'symptoms': r.symptoms,
        'prescription': r.prescription,
        'labTests': r.lab_tests,
        'treatmentNotes': r.treatment_notes,
        'followUpDate': r.follow_up_date.isoformat() if r.follow_up_date else None,
    }
    if with_patient:
        data['patient'] = format_patient_brief(r.patient)
    return data
