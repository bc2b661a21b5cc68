from rest_framework import serializers

from .common import CleanCharField


class ProfileSerializer(serializers.Serializer):
    firstName = CleanCharField(required=True, allow_blank=False, max_length=64)
    lastName = CleanCharField(max_length=64)
    email = serializers.EmailField(required=False, allow_blank=True)
    phoneNumber = CleanCharField(max_length=32)


class PasswordChangeSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(style={'input_type': 'password'})
    newPassword = serializers.CharField(min_length=8, style={'input_type': 'password'})
    confirmPassword = serializers.CharField(style={'input_type': 'password'})

    def validate(self, attrs):
        if attrs['newPassword'] != attrs['confirmPassword']:
            raise serializers.ValidationError({'confirmPassword': 'New passwords do not match!'})
        return attrs
