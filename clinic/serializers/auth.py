from rest_framework import serializers

from .common import CleanCharField

ROLE_CHOICES = ['admin', 'doctor', 'nurse', 'patient']


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()

    def validate_email(self, v):
        return (v or '').strip().lower()

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class RegisterSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    role = serializers.ChoiceField(choices=ROLE_CHOICES, required=False)
    # Optional patient profile fields
    dateOfBirth = serializers.DateField(required=False)
    gender = serializers.ChoiceField(choices=['male', 'female', 'other'], required=False)
    bloodGroup = CleanCharField(required=False, allow_blank=True, max_length=8)

    def validate_email(self, v):
        return v.strip().lower()

    def validate_name(self, v):
        if len(v) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters')
        return v


class ProfileUpdateSerializer(serializers.Serializer):
    name = CleanCharField(required=False, max_length=255)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    # Role profile fields, applied to the patient or doctor profile
    address = CleanCharField(required=False, allow_blank=True)
    bloodGroup = CleanCharField(required=False, allow_blank=True, max_length=8)
    emergencyContact = CleanCharField(required=False, allow_blank=True, max_length=255)
    allergies = CleanCharField(required=False, allow_blank=True)
    qualification = CleanCharField(required=False, max_length=255)
    consultationFee = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, min_value=0)


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField()
    newPassword = serializers.CharField(min_length=6)
