from rest_framework import serializers

from .common import CleanCharField, PageQuerySerializer

STATUSES = ['pending', 'partially_paid', 'paid', 'overdue']
PAYMENT_METHODS = ['cash', 'card', 'insurance', 'online']


class BillListQuerySerializer(PageQuerySerializer):
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    patientId = serializers.IntegerField(required=False, min_value=1)


class ServiceLineSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class BillCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    services = ServiceLineSerializer(many=True, allow_empty=False)
    dueDate = serializers.DateField(required=False, allow_null=True)
    notes = CleanCharField(required=False, allow_blank=True, default='')


class BillUpdateSerializer(serializers.Serializer):
    services = ServiceLineSerializer(many=True, required=False, allow_empty=False)
    dueDate = serializers.DateField(required=False, allow_null=True)
    notes = CleanCharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=STATUSES, required=False)


class PaymentSerializer(serializers.Serializer):
    # Range is checked against the balance by the billing service
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paymentMethod = serializers.ChoiceField(choices=PAYMENT_METHODS, required=False)
