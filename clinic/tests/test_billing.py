from datetime import date
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone

from clinic.models import AuditEvent, Bill
from clinic.services.billing import (
    BillingError,
    BillLocked,
    PaymentError,
    apply_payment,
    calculate_total,
    create_bill,
    delete_bill,
    derive_bill_status,
    next_invoice_number,
    update_bill,
)

pytestmark = pytest.mark.django_db

SERVICES = [
    {'name': 'Consultation', 'quantity': 1, 'price': Decimal('150')},
    {'name': 'Lab test', 'quantity': 2, 'price': Decimal('50')},
]


def test_calculate_total_sums_quantity_times_price():
    assert calculate_total(SERVICES) == Decimal('250.00')
    assert calculate_total([]) == Decimal('0.00')


@pytest.mark.parametrize('total,paid,expected', [
    ('100', '0', 'pending'),
    ('100', '40', 'partially_paid'),
    ('100', '100', 'paid'),
])
def test_derive_bill_status(total, paid, expected):
    assert derive_bill_status(Decimal(total), Decimal(paid)) == expected


def test_invoice_numbers_count_up_within_the_month(patient):
    first = create_bill(patient, services=SERVICES)
    second = create_bill(patient, services=SERVICES)
    prefix = 'INV-' + timezone.localdate().strftime('%Y%m') + '-'
    assert first.invoice_number == prefix + '0001'
    assert second.invoice_number == prefix + '0002'


def test_invoice_sequence_restarts_each_month_and_survives_five_digits(patient):
    Bill.objects.create(patient=patient, invoice_number='INV-202510-9999', total_amount=1, balance_amount=1)
    Bill.objects.create(patient=patient, invoice_number='INV-202510-10000', total_amount=1, balance_amount=1)
    assert next_invoice_number(date(2025, 10, 3)) == 'INV-202510-10001'
    assert next_invoice_number(date(2025, 11, 1)) == 'INV-202511-0001'


def test_new_bill_is_pending_with_full_balance(patient):
    bill = create_bill(patient, services=SERVICES, notes='walk-in')
    assert bill.total_amount == Decimal('250.00')
    assert bill.paid_amount == Decimal('0.00')
    assert bill.balance_amount == Decimal('250.00')
    assert bill.status == Bill.STATUS_PENDING


def test_zero_total_bill_is_rejected(patient):
    with pytest.raises(BillingError):
        create_bill(patient, services=[{'name': 'Free check', 'quantity': 1, 'price': Decimal('0')}])
    assert Bill.objects.count() == 0


def test_total_beyond_money_column_is_rejected(patient):
    huge = [{'name': 'Bulk order', 'quantity': 100000000, 'price': Decimal('99999999.99')}]
    with pytest.raises(BillingError):
        create_bill(patient, services=huge)
    bill = create_bill(patient, services=SERVICES)
    with pytest.raises(BillingError):
        update_bill(bill.pk, services=huge)
    bill.refresh_from_db()
    assert bill.total_amount == Decimal('250.00')


def test_partial_then_full_payment(patient):
    bill = create_bill(patient, services=SERVICES)
    bill = apply_payment(bill.pk, Decimal('100'), 'cash')
    assert bill.status == Bill.STATUS_PARTIALLY_PAID
    assert bill.balance_amount == Decimal('150.00')
    assert bill.payment_method == 'cash'

    bill = apply_payment(bill.pk, Decimal('150'))
    assert bill.status == Bill.STATUS_PAID
    assert bill.balance_amount == Decimal('0.00')
    assert bill.total_amount == bill.paid_amount + bill.balance_amount


@pytest.mark.parametrize('amount', ['0', '-10', '250.01'])
def test_invalid_payment_leaves_bill_untouched(patient, amount):
    bill = create_bill(patient, services=SERVICES)
    with pytest.raises(PaymentError):
        apply_payment(bill.pk, Decimal(amount))
    bill.refresh_from_db()
    assert bill.paid_amount == Decimal('0.00')
    assert bill.status == Bill.STATUS_PENDING


def test_update_cannot_drop_total_below_paid(patient):
    bill = create_bill(patient, services=SERVICES)
    apply_payment(bill.pk, Decimal('200'))
    with pytest.raises(BillingError):
        update_bill(bill.pk, services=[{'name': 'Consultation', 'quantity': 1, 'price': Decimal('100')}])

    bill = update_bill(bill.pk, services=[{'name': 'Consultation', 'quantity': 1, 'price': Decimal('200')}])
    assert bill.balance_amount == Decimal('0.00')
    assert bill.status == Bill.STATUS_PAID


def test_overdue_flag_only_with_outstanding_balance(patient):
    bill = create_bill(patient, services=SERVICES)
    bill = update_bill(bill.pk, status=Bill.STATUS_OVERDUE)
    assert bill.status == Bill.STATUS_OVERDUE

    # an edit keeps the flag, a payment replaces it
    bill = update_bill(bill.pk, notes='reminder sent')
    assert bill.status == Bill.STATUS_OVERDUE
    bill = apply_payment(bill.pk, Decimal('250'))
    assert bill.status == Bill.STATUS_PAID

    with pytest.raises(BillingError):
        update_bill(bill.pk, status=Bill.STATUS_OVERDUE)
    with pytest.raises(BillingError):
        update_bill(bill.pk, status=Bill.STATUS_PENDING)


def test_paid_bill_cannot_be_deleted(patient):
    bill = create_bill(patient, services=SERVICES)
    apply_payment(bill.pk, Decimal('10'))
    with pytest.raises(BillLocked):
        delete_bill(bill.pk)

    unpaid = create_bill(patient, services=SERVICES)
    delete_bill(unpaid.pk)
    assert not Bill.objects.filter(pk=unpaid.pk).exists()


# ---------------------------------------------------------------------
# HTTP layer
# ---------------------------------------------------------------------
def test_create_bill_over_http(client_for, doctor, patient):
    client = client_for(doctor.user)
    r = client.post(reverse('bills'), {
        'patientId': patient.id,
        'services': [{'name': 'Consultation', 'quantity': 1, 'price': '150.00'}],
    }, format='json')
    assert r.status_code == 201
    assert r.data['success'] is True
    assert r.data['data']['totalAmount'] == '150.00'
    assert r.data['data']['status'] == 'pending'


def test_oversized_bill_over_http_is_400(client_for, doctor, patient):
    r = client_for(doctor.user).post(reverse('bills'), {
        'patientId': patient.id,
        'services': [{'name': 'Bulk order', 'quantity': 100000000, 'price': '99999999.99'}],
    }, format='json')
    assert r.status_code == 400
    assert r.data['success'] is False
    assert Bill.objects.count() == 0


def test_admin_clears_due_date(client_for, admin_user, patient):
    bill = create_bill(patient, services=SERVICES, due_date=date(2030, 1, 31))
    client = client_for(admin_user)

    r = client.put(reverse('bill_detail', args=[bill.pk]), {'notes': 'called patient'}, format='json')
    assert r.status_code == 200
    bill.refresh_from_db()
    assert bill.due_date == date(2030, 1, 31)

    r = client.put(reverse('bill_detail', args=[bill.pk]), {'dueDate': None}, format='json')
    assert r.status_code == 200
    bill.refresh_from_db()
    assert bill.due_date is None


def test_payment_over_http_reports_invalid_amount(client_for, admin_user, patient):
    bill = create_bill(patient, services=SERVICES)
    client = client_for(admin_user)
    r = client.post(reverse('bill_payment', args=[bill.pk]), {'amount': '999'}, format='json')
    assert r.status_code == 400
    assert r.data == {'success': False, 'message': 'Invalid payment amount'}

    r = client.post(reverse('bill_payment', args=[bill.pk]), {'amount': '50', 'paymentMethod': 'card'},
                    format='json')
    assert r.status_code == 200
    assert r.data['data']['balanceAmount'] == '200.00'
    assert AuditEvent.objects.filter(action='payment', object_id=bill.pk).exists()


def test_patient_pays_only_own_bill(client_for, make_patient):
    alice, bob = make_patient(email='alice@hospital.test'), make_patient(email='bob@hospital.test')
    bill = create_bill(bob, services=SERVICES)
    r = client_for(alice.user).post(reverse('bill_payment', args=[bill.pk]), {'amount': '10'}, format='json')
    assert r.status_code == 404
    r = client_for(bob.user).post(reverse('bill_payment', args=[bill.pk]), {'amount': '10'}, format='json')
    assert r.status_code == 200


def test_patient_list_shows_only_own_bills(client_for, make_patient):
    alice, bob = make_patient(email='alice@hospital.test'), make_patient(email='bob@hospital.test')
    create_bill(alice, services=SERVICES)
    create_bill(bob, services=SERVICES)
    r = client_for(alice.user).get(reverse('bills'))
    assert r.status_code == 200
    bills = r.data['data']['bills']
    assert [b['patientId'] for b in bills] == [alice.id]
    assert r.data['data']['pagination'] == {'total': 1, 'page': 1, 'pages': 1}


def test_deleting_paid_bill_over_http(client_for, admin_user, patient):
    bill = create_bill(patient, services=SERVICES)
    apply_payment(bill.pk, Decimal('250'))
    r = client_for(admin_user).delete(reverse('bill_detail', args=[bill.pk]))
    assert r.status_code == 400
    assert r.data['message'] == 'Cannot delete a bill that has been paid'


def test_billing_stats(client_for, admin_user, patient):
    paid = create_bill(patient, services=SERVICES)
    apply_payment(paid.pk, Decimal('250'))
    partly = create_bill(patient, services=SERVICES)
    apply_payment(partly.pk, Decimal('50'))
    create_bill(patient, services=SERVICES)

    r = client_for(admin_user).get(reverse('bill_stats'))
    assert r.status_code == 200
    stats = r.data['data']
    assert stats['totalRevenue'] == '300.00'
    assert stats['pendingAmount'] == '450.00'
    assert stats['totalBills'] == 3
    assert stats['paidBills'] == 1
    assert stats['pendingBills'] == 1


def test_billing_stats_is_admin_only(client_for, doctor):
    assert client_for(doctor.user).get(reverse('bill_stats')).status_code == 403
