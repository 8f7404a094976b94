from datetime import date
from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.models import Doctor, Patient, User


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make(role, email=None, password='password123', **extra):
        email = email or f'{role}{User.objects.count() + 1}@hospital.test'
        extra.setdefault('name', email.split('@')[0].title())
        return User.objects.create_user(email=email, password=password, role=role, **extra)
    return _make


@pytest.fixture
def make_patient(make_user):
    def _make(email=None, **profile):
        user = make_user(User.ROLE_PATIENT, email=email)
        profile.setdefault('date_of_birth', date(1990, 5, 15))
        profile.setdefault('gender', 'male')
        return Patient.objects.create(user=user, **profile)
    return _make


@pytest.fixture
def make_doctor(make_user):
    def _make(email=None, **profile):
        user = make_user(User.ROLE_DOCTOR, email=email)
        profile.setdefault('specialization', 'Cardiology')
        profile.setdefault('qualification', 'MD')
        profile.setdefault('license_number', f'DOC-{user.pk:04d}')
        profile.setdefault('consultation_fee', Decimal('150.00'))
        return Doctor.objects.create(user=user, **profile)
    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user(User.ROLE_ADMIN, email='admin@hospital.test')


@pytest.fixture
def nurse_user(make_user):
    return make_user(User.ROLE_NURSE, email='nurse@hospital.test')


@pytest.fixture
def patient(make_patient):
    return make_patient(email='john@hospital.test')


@pytest.fixture
def doctor(make_doctor):
    return make_doctor(email='sarah@hospital.test')


@pytest.fixture
def client_for():
    """APIClient already authenticated as ``user``."""
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return _client
