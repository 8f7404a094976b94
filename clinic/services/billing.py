"""
Billing rules.

A bill's balance is always ``total_amount - paid_amount`` and its status
follows from that arithmetic: ``paid`` when nothing is owed, ``pending``
while nothing has been paid and ``partially_paid`` in between.  An admin
may flag a bill with an outstanding balance ``overdue``; the flag survives
edits and is replaced by the derived status on the next payment.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.db.models.functions import Length
from django.utils import timezone

from clinic.models import Bill, Patient

logger = logging.getLogger(__name__)

INVOICE_ATTEMPTS = 5
ZERO = Decimal('0.00')
CENT = Decimal('0.01')
# Bill money columns are DECIMAL(10, 2)
MAX_TOTAL = Decimal('99999999.99')
UNSET = object()


class BillingError(Exception):
    """A billing operation was refused.  ``str(exc)`` is the client message."""


class PaymentError(BillingError):
    pass


class BillLocked(BillingError):
    pass


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT)


def calculate_total(services: Optional[Iterable[dict]]) -> Decimal:
    """Sum of quantity x price over the service lines."""
    total = ZERO
    for line in services or []:
        total += Decimal(str(line['quantity'])) * Decimal(str(line['price']))
    return _money(total)


def derive_bill_status(total: Decimal, paid: Decimal) -> str:
    balance = _money(total) - _money(paid)
    if balance == ZERO:
        return Bill.STATUS_PAID
    if _money(paid) == ZERO:
        return Bill.STATUS_PENDING
    return Bill.STATUS_PARTIALLY_PAID


def invoice_prefix(day: date) -> str:
    return f"INV-{day.year}{day.month:02d}-"


def next_invoice_number(day: Optional[date] = None) -> str:
    """Next invoice number in the month of ``day``: ``INV-YYYYMM-NNNN``."""
    prefix = invoice_prefix(day or timezone.localdate())
    last = (
        Bill.objects.filter(invoice_number__startswith=prefix)
        .order_by(Length('invoice_number').desc(), '-invoice_number')
        .values_list('invoice_number', flat=True)
        .first()
    )
    seq = int(last[len(prefix):]) + 1 if last else 1
    return f"{prefix}{seq:04d}"


def _serialize_services(services: Iterable[dict]) -> list[dict]:
    return [
        {'name': line['name'], 'quantity': int(line['quantity']), 'price': str(_money(line['price']))}
        for line in services
    ]


def _check_total(total: Decimal) -> None:
    if total <= ZERO:
        raise BillingError('Bill total must be greater than zero')
    if total > MAX_TOTAL:
        raise BillingError('Bill total exceeds the maximum of 99999999.99')


def create_bill(patient: Patient, *, services: list[dict], due_date=None, notes: str = '') -> Bill:
    total = calculate_total(services)
    _check_total(total)
    # The invoice number is unique; a concurrent insert of the same number
    # makes this attempt fail, so pick the next one and try again.
    for attempt in range(INVOICE_ATTEMPTS):
        try:
            with transaction.atomic():
                bill = Bill.objects.create(
                    patient=patient,
                    invoice_number=next_invoice_number(),
                    total_amount=total,
                    paid_amount=ZERO,
                    balance_amount=total,
                    status=Bill.STATUS_PENDING,
                    services=_serialize_services(services),
                    due_date=due_date,
                    notes=notes or '',
                )
        except IntegrityError:
            logger.warning("invoice number collision, retrying (attempt %s)", attempt + 1)
            continue
        logger.info("bill %s created for patient %s total=%s", bill.invoice_number, patient.pk, total)
        return bill
    raise BillingError('Could not allocate an invoice number, please retry')


@transaction.atomic
def update_bill(bill_id: int, *, services=None, due_date=UNSET, notes=None, status=None) -> Bill:
    """Apply an admin edit.  Passing ``due_date=None`` clears the due date."""
    bill = Bill.objects.select_for_update().get(pk=bill_id)
    if services is not None:
        total = calculate_total(services)
        if total < bill.paid_amount:
            raise BillingError('Total amount cannot be less than the amount already paid')
        _check_total(total)
        bill.services = _serialize_services(services)
        bill.total_amount = total
        bill.balance_amount = total - bill.paid_amount
    if due_date is not UNSET:
        bill.due_date = due_date
    if notes is not None:
        bill.notes = notes
    overdue = bill.status == Bill.STATUS_OVERDUE
    if status is not None:
        if status != Bill.STATUS_OVERDUE:
            raise BillingError('Only the overdue status can be set manually')
        if bill.balance_amount == ZERO:
            raise BillingError('A fully paid bill cannot be overdue')
        overdue = True
    bill.status = derive_bill_status(bill.total_amount, bill.paid_amount)
    if overdue and bill.balance_amount > ZERO:
        bill.status = Bill.STATUS_OVERDUE
    bill.save()
    return bill


@transaction.atomic
def apply_payment(bill_id: int, amount, payment_method: str = '') -> Bill:
    """Record a payment of ``amount`` against a bill.

    Rejects non-positive amounts and amounts above the outstanding balance;
    a rejected payment leaves the bill untouched.
    """
    bill = Bill.objects.select_for_update().get(pk=bill_id)
    amount = _money(amount)
    if amount <= ZERO or amount > bill.balance_amount:
        raise PaymentError('Invalid payment amount')
    bill.paid_amount = bill.paid_amount + amount
    bill.balance_amount = bill.total_amount - bill.paid_amount
    bill.status = derive_bill_status(bill.total_amount, bill.paid_amount)
    if payment_method:
        bill.payment_method = payment_method
    bill.save(update_fields=['paid_amount', 'balance_amount', 'status', 'payment_method', 'updated_at'])
    logger.info("payment of %s on %s, balance now %s", amount, bill.invoice_number, bill.balance_amount)
    return bill


@transaction.atomic
def delete_bill(bill_id: int) -> None:
    bill = Bill.objects.select_for_update().get(pk=bill_id)
    if bill.paid_amount > ZERO or bill.status == Bill.STATUS_PAID:
        raise BillLocked('Cannot delete a bill that has been paid')
    bill.delete()


def billing_stats() -> dict:
    qs = Bill.objects.all()
    revenue = qs.aggregate(total=Sum('paid_amount'))['total']
    pending = qs.filter(
        status__in=[Bill.STATUS_PENDING, Bill.STATUS_PARTIALLY_PAID, Bill.STATUS_OVERDUE]
    ).aggregate(total=Sum('balance_amount'))['total']
    return {
        'totalRevenue': str(_money(revenue or ZERO)),
        'pendingAmount': str(_money(pending or ZERO)),
        'totalBills': qs.count(),
        'paidBills': qs.filter(status=Bill.STATUS_PAID).count(),
        'pendingBills': qs.filter(status=Bill.STATUS_PENDING).count(),
        'overdueBills': qs.filter(status=Bill.STATUS_OVERDUE).count(),
    }


def format_bill(bill: Bill) -> dict:
    from clinic.services.profiles import format_patient_brief

    return {
        'id': bill.id,
        'invoiceNumber': bill.invoice_number,
        'patientId': bill.patient_id,
        'patient': format_patient_brief(bill.patient) if bill.patient_id else None,
        'totalAmount': str(bill.total_amount),
        'paidAmount': str(bill.paid_amount),
        'balanceAmount': str(bill.balance_amount),
        'status': bill.status,
        'billDate': bill.bill_date.isoformat() if bill.bill_date else None,
        'dueDate': bill.due_date.isoformat() if bill.due_date else None,
        'services': bill.services,
        'paymentMethod': bill.payment_method or None,
        'notes': bill.notes,
    }
