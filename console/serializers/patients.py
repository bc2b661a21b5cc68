from rest_framework import serializers

from .common import GENDERS, CleanCharField, FormSerializer

BLOOD_GROUPS = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']


class PatientSerializer(FormSerializer):
    edit_exclude = ('password',)

    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, style={'input_type': 'password'})
    firstName = CleanCharField(required=True, allow_blank=False, max_length=64)
    lastName = CleanCharField(required=True, allow_blank=False, max_length=64)
    phoneNumber = CleanCharField(max_length=32)
    address = CleanCharField(max_length=255)
    gender = serializers.ChoiceField(choices=GENDERS, required=False)
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    bloodGroup = serializers.ChoiceField(choices=BLOOD_GROUPS, required=False)
    height = serializers.DecimalField(max_digits=5, decimal_places=1, required=False, allow_null=True, min_value=0, coerce_to_string=False)
    weight = serializers.DecimalField(max_digits=5, decimal_places=1, required=False, allow_null=True, min_value=0, coerce_to_string=False)
    allergies = CleanCharField(max_length=500)
    emergencyContactName = CleanCharField(max_length=128)
    emergencyContactPhone = CleanCharField(max_length=32)
    insuranceProvider = CleanCharField(max_length=128)
    insuranceId = CleanCharField(max_length=64)

    def validate(self, attrs):
        # Existing patients keep their password unless a new one is typed
        if not attrs.get('password'):
            attrs.pop('password', None)
        return attrs
