"""
Billing views.

The arithmetic and status rules live in :mod:`clinic.services.billing`;
these views validate input, check who may touch which bill, and wrap the
result in the response envelope.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import Bill, Patient, User
from clinic.permissions import IsAdmin
from clinic.responses import fail, not_found, ok, paginate
from clinic.serializers.bill import BillCreateSerializer, BillListQuerySerializer, BillUpdateSerializer, PaymentSerializer
from clinic.services.audit import log_action
from clinic.services.billing import (
    UNSET,
    BillingError,
    apply_payment,
    billing_stats,
    create_bill,
    delete_bill,
    format_bill,
    update_bill,
)
from clinic.services.profiles import scope_by_role

FORBIDDEN = 'You do not have permission to perform this action'


def _visible(user):
    # doctors see every bill; only patients are narrowed
    qs = Bill.objects.select_related('patient__user')
    return scope_by_role(qs, user, doctor_field=None)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def bills(request):
    if request.method == 'GET':
        q = BillListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        v = q.validated_data
        qs = _visible(request.user)
        if v.get('status'):
            qs = qs.filter(status=v['status'])
        if v.get('patientId'):
            qs = qs.filter(patient_id=v['patientId'])
        qs = qs.order_by('-bill_date', '-id')
        return ok(paginate(qs, v['page'], v['limit'], 'bills', format_bill))

    if request.user.role not in (User.ROLE_ADMIN, User.ROLE_DOCTOR):
        return fail(FORBIDDEN, status=403)
    s = BillCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    patient = Patient.objects.filter(pk=v['patientId']).first()
    if patient is None:
        return not_found('Patient')
    try:
        bill = create_bill(patient, services=v['services'], due_date=v.get('dueDate'), notes=v.get('notes', ''))
    except BillingError as e:
        return fail(str(e))
    log_action(user=request.user, action='bill_create', object_type='bill', object_id=bill.id,
               detail={'invoice': bill.invoice_number, 'total': str(bill.total_amount)})
    return ok(format_bill(bill), message='Bill created successfully', status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def bill_stats(request):
    return ok(billing_stats())


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def bill_detail(request, pk: int):
    bill = _visible(request.user).filter(pk=pk).first()
    if bill is None:
        return not_found('Bill')
    if request.method == 'GET':
        return ok(format_bill(bill))

    if request.user.role != User.ROLE_ADMIN:
        return fail(FORBIDDEN, status=403)

    if request.method == 'DELETE':
        try:
            delete_bill(bill.pk)
        except BillingError as e:
            return fail(str(e))
        log_action(user=request.user, action='bill_delete', object_type='bill', object_id=pk,
                   detail={'invoice': bill.invoice_number})
        return ok(message='Bill deleted successfully')

    s = BillUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    try:
        bill = update_bill(
            bill.pk,
            services=v.get('services'),
            due_date=v.get('dueDate', UNSET),
            notes=v.get('notes'),
            status=v.get('status'),
        )
    except BillingError as e:
        return fail(str(e))
    return ok(format_bill(bill), message='Bill updated successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def bill_payment(request, pk: int):
    bill = _visible(request.user).filter(pk=pk).first()
    if bill is None:
        return not_found('Bill')
    s = PaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    try:
        bill = apply_payment(bill.pk, v['amount'], v.get('paymentMethod', ''))
    except BillingError as e:
        return fail(str(e))
    log_action(user=request.user, action='payment', object_type='bill', object_id=pk,
               detail={'amount': str(v['amount']), 'balance': str(bill.balance_amount)})
    return ok(format_bill(bill), message='Payment processed successfully')
