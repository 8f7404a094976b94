from rest_framework import serializers

from .common import CleanCharField, PageQuerySerializer

TYPES = ['consultation', 'follow_up', 'emergency', 'checkup']
STATUSES = ['scheduled', 'confirmed', 'completed', 'cancelled', 'no_show']


class AppointmentListQuerySerializer(PageQuerySerializer):
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    date = serializers.DateField(required=False)
    doctorId = serializers.IntegerField(required=False, min_value=1)
    patientId = serializers.IntegerField(required=False, min_value=1)


class AppointmentCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(required=False, min_value=1)
    doctorId = serializers.IntegerField(min_value=1)
    appointmentDate = serializers.DateField()
    appointmentTime = serializers.TimeField()
    type = serializers.ChoiceField(choices=TYPES, required=False, default='consultation')
    reason = CleanCharField(required=False, allow_blank=True, default='')


class AppointmentUpdateSerializer(serializers.Serializer):
    appointmentDate = serializers.DateField(required=False)
    appointmentTime = serializers.TimeField(required=False)
    type = serializers.ChoiceField(choices=TYPES, required=False)
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    notes = CleanCharField(required=False, allow_blank=True)
