from rest_framework import serializers

from .common import GENDERS, CleanCharField, FormSerializer


class DoctorSerializer(FormSerializer):
    edit_exclude = ('password',)

    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, style={'input_type': 'password'})
    firstName = CleanCharField(required=True, allow_blank=False, max_length=64)
    lastName = CleanCharField(required=True, allow_blank=False, max_length=64)
    phoneNumber = CleanCharField(max_length=32)
    address = CleanCharField(max_length=255)
    gender = serializers.ChoiceField(choices=GENDERS, required=False)
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    departmentId = serializers.IntegerField(required=False, allow_null=True, style={'lookup': 'departments'})
    specialization = CleanCharField(max_length=100)
    licenseNumber = CleanCharField(max_length=64)
    qualification = CleanCharField(max_length=255)
    experienceYears = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=80)
    consultationFee = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0, coerce_to_string=False)
    bio = CleanCharField(max_length=2000, style={'base_template': 'textarea.html'})

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'Password is required for new doctors.'})
        if not attrs.get('password'):
            attrs.pop('password', None)
        return attrs
