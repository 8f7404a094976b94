"""
End-to-end flow through the HTTP API.

Logs in with real Bearer tokens and walks a patient from registration to
a paid bill: booking, a medical record, a bill and its payments.
"""
from decimal import Decimal

from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import Appointment, Bill, Doctor, User


class ClinicFlowTests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.admin = User.objects.create_user(email='admin@hospital.test', password='password123',
                                              name='Admin', role=User.ROLE_ADMIN)
        doctor_user = User.objects.create_user(email='sarah@hospital.test', password='password123',
                                               name='Dr. Sarah Johnson', role=User.ROLE_DOCTOR)
        self.doctor = Doctor.objects.create(user=doctor_user, specialization='Cardiology', qualification='MD',
                                            license_number='DOC-2024-001', consultation_fee=Decimal('150.00'))

    def bearer(self, email: str) -> APIClient:
        client = APIClient()
        r = client.post(reverse('login_view'), {'email': email, 'password': 'password123'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['data']['token']}")
        return client

    def test_patient_journey(self):
        # Patient signs up and books
        r = APIClient().post(reverse('register_view'), {
            'name': 'John Doe', 'email': 'john@hospital.test', 'password': 'password123',
            'dateOfBirth': '1990-05-15', 'gender': 'male',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        patient_client = self.bearer('john@hospital.test')
        me = patient_client.get(reverse('profile_view')).data['data']
        patient_id = me['profile']['id']

        r = patient_client.post(reverse('appointments'), {
            'doctorId': self.doctor.id, 'appointmentDate': '2030-03-01', 'appointmentTime': '09:30',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        appointment_id = r.data['data']['id']

        # Doctor sees the booking, completes it and writes a record
        doctor_client = self.bearer('sarah@hospital.test')
        listed = doctor_client.get(reverse('appointments')).data['data']['appointments']
        self.assertEqual([a['id'] for a in listed], [appointment_id])
        r = doctor_client.put(reverse('appointment_detail', args=[appointment_id]),
                              {'status': 'completed', 'notes': 'BP 140/90'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(Appointment.objects.get(pk=appointment_id).status, Appointment.STATUS_COMPLETED)

        r = doctor_client.post(reverse('records'), {
            'patientId': patient_id, 'diagnosis': 'Hypertension (Stage 1)', 'prescription': 'Amlodipine 5mg',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)

        # Doctor bills the visit; patient pays in two instalments
        r = doctor_client.post(reverse('bills'), {
            'patientId': patient_id,
            'services': [{'name': 'Consultation', 'quantity': 1, 'price': '150.00'},
                         {'name': 'ECG', 'quantity': 1, 'price': '100.00'}],
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        bill_id = r.data['data']['id']
        self.assertTrue(r.data['data']['invoiceNumber'].startswith('INV-'))

        r = patient_client.post(reverse('bill_payment', args=[bill_id]), {'amount': '100', 'paymentMethod': 'card'},
                                format='json')
        self.assertEqual(r.data['data']['status'], 'partially_paid')
        r = patient_client.post(reverse('bill_payment', args=[bill_id]), {'amount': '150'}, format='json')
        self.assertEqual(r.data['data']['status'], 'paid')
        self.assertEqual(r.data['data']['balanceAmount'], '0.00')

        bill = Bill.objects.get(pk=bill_id)
        self.assertEqual(bill.total_amount, bill.paid_amount + bill.balance_amount)

        # The patient's history shows the record; admin stats reflect the payment
        history = patient_client.get(reverse('patient_record_history', args=[patient_id])).data['data']
        self.assertEqual([h['diagnosis'] for h in history], ['Hypertension (Stage 1)'])
        stats = self.bearer('admin@hospital.test').get(reverse('bill_stats')).data['data']
        self.assertEqual(stats['totalRevenue'], '250.00')
        self.assertEqual(stats['paidBills'], 1)

    def test_patient_is_kept_out_of_staff_endpoints(self):
        User.objects.create_user(email='john@hospital.test', password='password123', name='John')
        client = self.bearer('john@hospital.test')
        for name in ('patients', 'patient_stats', 'bill_stats', 'inventory_stats', 'appointment_stats'):
            r = client.get(reverse(name))
            self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN, name)
            self.assertFalse(r.data['success'])
