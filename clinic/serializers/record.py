from rest_framework import serializers

from .common import CleanCharField, PageQuerySerializer


class RecordListQuerySerializer(PageQuerySerializer):
    patientId = serializers.IntegerField(required=False, min_value=1)
    doctorId = serializers.IntegerField(required=False, min_value=1)


class RecordCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(required=False, min_value=1)
    diagnosis = CleanCharField()
    symptoms = CleanCharField(required=False, allow_blank=True, default='')
    prescription = CleanCharField(required=False, allow_blank=True, default='')
    labTests = CleanCharField(required=False, allow_blank=True, default='')
    treatmentNotes = CleanCharField(required=False, allow_blank=True, default='')
    followUpDate = serializers.DateField(required=False, allow_null=True)


class RecordUpdateSerializer(serializers.Serializer):
    diagnosis = CleanCharField(required=False)
    symptoms = CleanCharField(required=False, allow_blank=True)
    prescription = CleanCharField(required=False, allow_blank=True)
    labTests = CleanCharField(required=False, allow_blank=True)
    treatmentNotes = CleanCharField(required=False, allow_blank=True)
    followUpDate = serializers.DateField(required=False, allow_null=True)
