from rest_framework import serializers

from ..operators import DOCTOR, STAFF


class LoginSerializer(serializers.Serializer):
    identifier = serializers.CharField()
    password = serializers.CharField(style={'input_type': 'password'})
    portal = serializers.ChoiceField(choices=[STAFF, DOCTOR], default=STAFF)

    def to_internal_value(self, data):
        # Accept ``username`` as an alias of ``identifier``
        if hasattr(data, 'dict'):
            data = data.dict()
        data = dict(data)
        if not data.get('identifier') and data.get('username'):
            data['identifier'] = data['username']
        return super().to_internal_value(data)

    def validate_identifier(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v
