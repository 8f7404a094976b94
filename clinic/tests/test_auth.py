from datetime import timedelta

import pytest
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from clinic.models import AuditEvent, Patient, User

pytestmark = pytest.mark.django_db


def login(client, email, password):
    return client.post(reverse('login_view'), {'email': email, 'password': password}, format='json')


def test_login_issues_week_long_token_with_role_claims(make_user):
    user = make_user(User.ROLE_DOCTOR, email='doc@hospital.test')
    r = login(APIClient(), 'doc@hospital.test', 'password123')
    assert r.status_code == 200
    assert r.data['success'] is True
    assert r.data['data']['user']['role'] == 'doctor'

    token = AccessToken(r.data['data']['token'])
    assert token['id'] == user.id
    assert token['email'] == 'doc@hospital.test'
    assert token['role'] == 'doctor'
    assert timedelta(seconds=token['exp'] - token['iat']) == timedelta(days=7)
    assert AuditEvent.objects.filter(action='login', user=user).exists()


def test_login_email_is_case_insensitive(make_user):
    make_user(User.ROLE_PATIENT, email='john@hospital.test')
    assert login(APIClient(), 'John@Hospital.test', 'password123').status_code == 200


def test_bad_credentials_are_401():
    r = login(APIClient(), 'nobody@hospital.test', 'password123')
    assert r.status_code == 401
    assert r.data == {'success': False, 'message': 'Invalid email or password'}


def test_wrong_password_is_401(make_user):
    make_user(User.ROLE_PATIENT, email='john@hospital.test')
    assert login(APIClient(), 'john@hospital.test', 'nope-nope').status_code == 401


def test_inactive_account_cannot_log_in(make_user):
    make_user(User.ROLE_NURSE, email='nurse@hospital.test', status=User.STATUS_INACTIVE)
    r = login(APIClient(), 'nurse@hospital.test', 'password123')
    assert r.status_code == 403
    assert r.data['message'] == 'Account is not active'


def test_bearer_token_authenticates_and_deactivation_revokes_it(make_user):
    user = make_user(User.ROLE_NURSE, email='nurse@hospital.test')
    client = APIClient()
    token = login(client, 'nurse@hospital.test', 'password123').data['data']['token']
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    r = client.get(reverse('profile_view'))
    assert r.status_code == 200
    assert r.data['data']['user']['email'] == 'nurse@hospital.test'

    user.status = User.STATUS_INACTIVE
    user.save()
    r = client.get(reverse('profile_view'))
    assert r.status_code == 401
    assert r.data['success'] is False


def test_missing_or_garbage_token_is_401():
    client = APIClient()
    assert client.get(reverse('profile_view')).status_code == 401
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
    r = client.get(reverse('profile_view'))
    assert r.status_code == 401
    assert r.data['success'] is False


def test_public_registration_always_makes_a_patient():
    r = APIClient().post(reverse('register_view'), {
        'name': 'Mallory', 'email': 'mallory@hospital.test', 'password': 'secret123', 'role': 'admin',
        'dateOfBirth': '1992-03-04', 'gender': 'female',
    }, format='json')
    assert r.status_code == 201
    assert r.data['data']['user']['role'] == 'patient'
    assert r.data['data']['token']
    user = User.objects.get(email='mallory@hospital.test')
    assert user.role == User.ROLE_PATIENT
    assert Patient.objects.filter(user=user).exists()


def test_admin_may_register_staff(client_for, admin_user):
    r = client_for(admin_user).post(reverse('register_view'), {
        'name': 'Nurse Ann', 'email': 'ann@hospital.test', 'password': 'secret123', 'role': 'nurse',
    }, format='json')
    assert r.status_code == 201
    assert User.objects.get(email='ann@hospital.test').role == User.ROLE_NURSE


def test_duplicate_email_is_rejected(make_user):
    make_user(User.ROLE_PATIENT, email='john@hospital.test')
    r = APIClient().post(reverse('register_view'), {
        'name': 'John', 'email': 'john@hospital.test', 'password': 'secret123',
    }, format='json')
    assert r.status_code == 400
    assert r.data['message'] == 'Email already registered'


def test_registration_validation_errors_use_envelope():
    r = APIClient().post(reverse('register_view'), {'email': 'not-an-email'}, format='json')
    assert r.status_code == 400
    assert r.data['success'] is False
    assert r.data['message'] == 'Validation failed'
    assert 'email' in r.data['errors'] and 'password' in r.data['errors']


def test_change_password(client_for, make_user):
    user = make_user(User.ROLE_PATIENT, email='john@hospital.test')
    client = client_for(user)
    r = client.put(reverse('change_password_view'),
                   {'currentPassword': 'wrong-one', 'newPassword': 'brand-new-1'}, format='json')
    assert r.status_code == 401
    r = client.put(reverse('change_password_view'),
                   {'currentPassword': 'password123', 'newPassword': 'brand-new-1'}, format='json')
    assert r.status_code == 200
    assert login(APIClient(), 'john@hospital.test', 'brand-new-1').status_code == 200


def test_profile_update_touches_patient_profile(client_for, patient):
    r = client_for(patient.user).put(reverse('profile_view'),
                                     {'name': 'John Q. Doe', 'allergies': 'Penicillin'}, format='json')
    assert r.status_code == 200
    patient.refresh_from_db()
    assert patient.allergies == 'Penicillin'
    assert patient.user.name == 'John Q. Doe'
    assert r.data['data']['profile']['allergies'] == 'Penicillin'


def test_refresh_and_logout(make_user):
    user = make_user(User.ROLE_PATIENT, email='john@hospital.test')
    client = APIClient()
    data = login(client, 'john@hospital.test', 'password123').data['data']

    r = client.post(reverse('refresh_view'), {'refreshToken': data['refreshToken']}, format='json')
    assert r.status_code == 200
    refreshed = AccessToken(r.data['data']['token'])
    assert refreshed['role'] == 'patient'
    assert refreshed['id'] == user.id

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['token']}")
    r = client.post(reverse('logout_view'), {'refreshToken': data['refreshToken']}, format='json')
    assert r.status_code == 200
    r = client.post(reverse('refresh_view'), {'refreshToken': data['refreshToken']}, format='json')
    assert r.status_code == 401


def test_html_is_stripped_from_names(client_for, admin_user):
    r = client_for(admin_user).post(reverse('register_view'), {
        'name': '<script>x</script>Eve', 'email': 'eve@hospital.test', 'password': 'secret123', 'role': 'nurse',
    }, format='json')
    assert r.status_code == 201
    assert '<' not in User.objects.get(email='eve@hospital.test').name


# ---------------------------------------------------------------------
# Role gates and envelope
# ---------------------------------------------------------------------
@pytest.mark.parametrize('role,url_name,expected', [
    ('patient', 'patients', 403),
    ('nurse', 'patients', 200),
    ('doctor', 'patient_stats', 403),
    ('admin', 'patient_stats', 200),
    ('nurse', 'bill_stats', 403),
    ('patient', 'inventory_stats', 403),
    ('doctor', 'appointment_stats', 200),
])
def test_role_gates(client_for, make_user, role, url_name, expected):
    r = client_for(make_user(role)).get(reverse(url_name))
    assert r.status_code == expected
    assert r.data['success'] is (expected == 200)


def test_unknown_api_route_is_json_404(client_for, admin_user):
    r = client_for(admin_user).get('/api/does-not-exist')
    assert r.status_code == 404
    assert r.json() == {'success': False, 'message': 'Route not found'}


def test_health_is_public():
    r = APIClient().get(reverse('health'))
    assert r.status_code == 200
    assert r.json()['success'] is True
