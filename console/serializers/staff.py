from django.utils import timezone
from rest_framework import serializers

from .common import GENDERS, CleanCharField, FormSerializer


class StaffSerializer(FormSerializer):
    edit_exclude = ('password',)
    edit_aliases = {'isAdmin': 'admin'}

    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, style={'input_type': 'password'})
    firstName = CleanCharField(required=True, allow_blank=False, max_length=64)
    lastName = CleanCharField(required=True, allow_blank=False, max_length=64)
    phoneNumber = CleanCharField(max_length=32)
    address = CleanCharField(max_length=255)
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=GENDERS, required=False)
    departmentId = serializers.IntegerField(required=False, allow_null=True, style={'lookup': 'departments'})
    position = CleanCharField(max_length=100)
    hireDate = serializers.DateField(required=False, allow_null=True, initial=timezone.localdate)
    isAdmin = serializers.BooleanField(default=False)

    def validate(self, attrs):
        # New accounts need a password; edits keep the existing one when blank
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'Password is required for new staff.'})
        if not attrs.get('password'):
            attrs.pop('password', None)
        return attrs
