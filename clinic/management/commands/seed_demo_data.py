"""
Seed the database with demo accounts and sample clinic data.

Safe to run repeatedly: accounts are matched by email and sample rows are
only created for a fresh database.
"""
from datetime import date, time, timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from clinic.models import Appointment, Bill, Doctor, InventoryItem, MedicalRecord, Patient, User
from clinic.services.billing import apply_payment, create_bill

ACCOUNTS = [
    ('System Administrator', 'admin@hospital.com', User.ROLE_ADMIN, '+1234567890'),
    ('Dr. Sarah Johnson', 'doctor@hospital.com', User.ROLE_DOCTOR, '+1234567891'),
    ('Dr. Michael Brown', 'michael.brown@hospital.com', User.ROLE_DOCTOR, '+1234567894'),
    ('Nurse Mary Smith', 'nurse@hospital.com', User.ROLE_NURSE, '+1234567892'),
    ('John Doe', 'patient@hospital.com', User.ROLE_PATIENT, '+1234567893'),
    ('Jane Smith', 'jane.smith@hospital.com', User.ROLE_PATIENT, '+1234567895'),
]

DOCTORS = {
    'doctor@hospital.com': dict(specialization='Cardiology', qualification='MD, MBBS, Cardiology',
                                experience=15, license_number='DOC-2024-001',
                                consultation_fee=Decimal('150.00')),
    'michael.brown@hospital.com': dict(specialization='Orthopedics', qualification='MD, MS Orthopedics',
                                       experience=10, license_number='DOC-2024-002',
                                       consultation_fee=Decimal('120.00')),
}

PATIENTS = {
    'patient@hospital.com': dict(date_of_birth=date(1990, 5, 15), gender='male', blood_group='A+',
                                 address='123 Main Street, New York, NY 10001',
                                 emergency_contact='+1234567896',
                                 medical_history='No major medical history', allergies='None'),
    'jane.smith@hospital.com': dict(date_of_birth=date(1985, 8, 22), gender='female', blood_group='O+',
                                    address='456 Oak Avenue, Los Angeles, CA 90001',
                                    emergency_contact='+1234567897',
                                    medical_history='Asthma', allergies='Penicillin'),
}

INVENTORY = [
    dict(item_name='Paracetamol 500mg', category='medicine', quantity=500, min_quantity=50,
         unit_price=Decimal('0.50'), supplier='PharmaCorp', expiry_days=800, batch_number='BATCH-001',
         description='Pain relief and fever reducer'),
    dict(item_name='Surgical Gloves (Box of 100)', category='supplies', quantity=200, min_quantity=100,
         unit_price=Decimal('2.50'), supplier='MedSupply Inc', expiry_days=900, batch_number='BATCH-002',
         description='Latex-free surgical gloves'),
    dict(item_name='Insulin Injection 100IU/ml', category='medicine', quantity=30, min_quantity=20,
         unit_price=Decimal('15.00'), supplier='PharmaCorp', expiry_days=20, batch_number='BATCH-003',
         description='Insulin for diabetes management'),
    dict(item_name='Face Masks (Box of 50)', category='supplies', quantity=1000, min_quantity=200,
         unit_price=Decimal('0.25'), supplier='SafetyFirst', expiry_days=800, batch_number='BATCH-004',
         description='3-ply disposable face masks'),
    dict(item_name='Blood Pressure Monitor', category='equipment', quantity=15, min_quantity=5,
         unit_price=Decimal('150.00'), supplier='MediTech', expiry_days=None, batch_number='EQUIP-001',
         description='Digital blood pressure monitoring device'),
]


class Command(BaseCommand):
    help = "Create demo accounts and sample data (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('--reset-passwords', action='store_true',
                            help='Set every demo account back to the demo password.')

    @transaction.atomic
    def handle(self, *args, **opts):
        password = settings.DEMO_PASSWORD
        users = {}
        for name, email, role, phone in ACCOUNTS:
            user = User.objects.filter(email=email).first()
            if user is None:
                user = User.objects.create_user(email=email, password=password, name=name, role=role, phone=phone)
                self.stdout.write(self.style.SUCCESS(f"created: {email} ({role})"))
            elif opts['reset_passwords']:
                user.set_password(password)
                user.status = User.STATUS_ACTIVE
                user.save(update_fields=['password', 'status'])
                self.stdout.write(f"reset: {email}")
            users[email] = user

        doctors = {email: Doctor.objects.get_or_create(user=users[email], defaults=profile)[0]
                   for email, profile in DOCTORS.items()}
        patients = {email: Patient.objects.get_or_create(user=users[email], defaults=profile)[0]
                    for email, profile in PATIENTS.items()}

        if Appointment.objects.exists() or Bill.objects.exists() or InventoryItem.objects.exists():
            self.stdout.write("sample data already present, skipping")
            return

        john, jane = patients['patient@hospital.com'], patients['jane.smith@hospital.com']
        sarah, michael = doctors['doctor@hospital.com'], doctors['michael.brown@hospital.com']
        today = timezone.localdate()

        Appointment.objects.create(patient=john, doctor=sarah, appointment_date=today + timedelta(days=1),
                                   appointment_time=time(10, 0), type='consultation',
                                   reason='Regular checkup and blood pressure monitoring')
        Appointment.objects.create(patient=john, doctor=sarah, appointment_date=today + timedelta(days=2),
                                   appointment_time=time(14, 0), type='follow_up',
                                   reason='Follow-up visit for hypertension')
        Appointment.objects.create(patient=jane, doctor=michael, appointment_date=today + timedelta(days=1),
                                   appointment_time=time(11, 0), type='consultation',
                                   reason='Knee pain consultation')

        MedicalRecord.objects.create(
            patient=john, doctor=sarah, diagnosis='Hypertension (Stage 1)',
            symptoms='High blood pressure, occasional headaches',
            prescription='Amlodipine 5mg once daily, Lifestyle modifications',
            lab_tests='Blood pressure monitoring, ECG',
            treatment_notes='Monitor blood pressure regularly. Follow up in 2 weeks. Reduce sodium intake.',
            follow_up_date=today + timedelta(days=14),
        )
        MedicalRecord.objects.create(
            patient=jane, doctor=michael, diagnosis='Knee Osteoarthritis',
            symptoms='Joint pain, stiffness, reduced mobility',
            prescription='Ibuprofen 400mg as needed, Physical therapy',
            lab_tests='X-Ray knee joint',
            treatment_notes='Physical therapy recommended. Avoid strenuous activities.',
            follow_up_date=today + timedelta(days=18),
        )

        paid = create_bill(john, services=[
            {'name': 'Consultation', 'quantity': 1, 'price': Decimal('150')},
            {'name': 'Lab Test - Blood Pressure', 'quantity': 1, 'price': Decimal('100')},
        ], due_date=today + timedelta(days=10))
        apply_payment(paid.pk, paid.total_amount, 'card')
        create_bill(jane, services=[
            {'name': 'Consultation', 'quantity': 1, 'price': Decimal('120')},
            {'name': 'X-Ray', 'quantity': 1, 'price': Decimal('380')},
        ], due_date=today + timedelta(days=5))

        for spec in INVENTORY:
            spec = dict(spec)
            days = spec.pop('expiry_days')
            InventoryItem.objects.create(expiry_date=today + timedelta(days=days) if days else None, **spec)

        self.stdout.write(self.style.SUCCESS("Demo data seeded. Password for all accounts: %s" % password))
