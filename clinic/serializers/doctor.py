from rest_framework import serializers

from .common import CleanCharField, PageQuerySerializer

AVAILABILITY = ['available', 'on_leave', 'busy']


class DoctorListQuerySerializer(PageQuerySerializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=64)
    specialization = serializers.CharField(required=False, allow_blank=True, max_length=255)


class DoctorCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    specialization = CleanCharField(max_length=255)
    qualification = CleanCharField(max_length=255)
    experience = serializers.IntegerField(required=False, min_value=0, default=0)
    licenseNumber = CleanCharField(max_length=64)
    consultationFee = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, min_value=0,
                                               default=0)
    schedule = serializers.JSONField(required=False)

    def validate_email(self, v):
        return v.strip().lower()


class DoctorUpdateSerializer(serializers.Serializer):
    name = CleanCharField(required=False, max_length=255)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    specialization = CleanCharField(required=False, max_length=255)
    qualification = CleanCharField(required=False, max_length=255)
    experience = serializers.IntegerField(required=False, min_value=0)
    consultationFee = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, min_value=0)
    schedule = serializers.JSONField(required=False)
    availability = serializers.ChoiceField(choices=AVAILABILITY, required=False)


class ScheduleUpdateSerializer(serializers.Serializer):
    schedule = serializers.JSONField(required=False)
    availability = serializers.ChoiceField(choices=AVAILABILITY, required=False)
