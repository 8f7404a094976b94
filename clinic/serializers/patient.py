from rest_framework import serializers

from .common import CleanCharField, PageQuerySerializer

GENDERS = ['male', 'female', 'other']


class PatientListQuerySerializer(PageQuerySerializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=64)


class PatientCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    dateOfBirth = serializers.DateField()
    gender = serializers.ChoiceField(choices=GENDERS)
    bloodGroup = CleanCharField(required=False, allow_blank=True, max_length=8)
    address = CleanCharField(required=False, allow_blank=True)
    emergencyContact = CleanCharField(required=False, allow_blank=True, max_length=255)
    medicalHistory = CleanCharField(required=False, allow_blank=True)
    allergies = CleanCharField(required=False, allow_blank=True)

    def validate_email(self, v):
        return v.strip().lower()


class PatientUpdateSerializer(serializers.Serializer):
    """Partial update; the front-end may send either naming of a field."""
    name = CleanCharField(required=False, max_length=255)
    firstName = CleanCharField(required=False, allow_blank=True, max_length=128)
    lastName = CleanCharField(required=False, allow_blank=True, max_length=128)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    dateOfBirth = serializers.DateField(required=False)
    gender = serializers.ChoiceField(choices=GENDERS, required=False)
    bloodGroup = CleanCharField(required=False, allow_blank=True, max_length=8)
    address = CleanCharField(required=False, allow_blank=True)
    emergencyContact = CleanCharField(required=False, allow_blank=True, max_length=255)
    medicalHistory = CleanCharField(required=False, allow_blank=True)
    chronicConditions = CleanCharField(required=False, allow_blank=True)
    allergies = CleanCharField(required=False, allow_blank=True)
