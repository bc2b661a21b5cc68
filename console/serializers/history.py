from rest_framework import serializers

RANGE_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d', 'iso-8601']
AUDIT_MODES = ['all', 'user', 'entity', 'action', 'date-range']
LOGIN_MODES = ['all', 'user', 'failed', 'date-range']


class _QuerySerializer(serializers.Serializer):
    """Query-string serializer that ignores empty inputs."""

    def to_internal_value(self, data):
        if hasattr(data, 'dict'):
            data = data.dict()
        data = {k: v for k, v in dict(data).items() if v not in ('', None)}
        return super().to_internal_value(data)


class AuditLogQuerySerializer(_QuerySerializer):
    filter = serializers.ChoiceField(choices=AUDIT_MODES, default='all')
    username = serializers.CharField(required=False)
    entityType = serializers.CharField(required=False)
    entityId = serializers.CharField(required=False)
    action = serializers.CharField(required=False)
    start = serializers.DateTimeField(required=False, input_formats=RANGE_FORMATS)
    end = serializers.DateTimeField(required=False, input_formats=RANGE_FORMATS)
    q = serializers.CharField(required=False)


class LoginHistoryQuerySerializer(_QuerySerializer):
    filter = serializers.ChoiceField(choices=LOGIN_MODES, default='all')
    username = serializers.CharField(required=False)
    start = serializers.DateTimeField(required=False, input_formats=RANGE_FORMATS)
    end = serializers.DateTimeField(required=False, input_formats=RANGE_FORMATS)
    q = serializers.CharField(required=False)
