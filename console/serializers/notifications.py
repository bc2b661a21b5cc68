from rest_framework import serializers

from .common import CleanCharField, FormSerializer

RECIPIENT_TYPES = ['STAFF', 'DOCTOR', 'PATIENT', 'ADMIN']
PRIORITIES = ['LOW', 'NORMAL', 'HIGH', 'URGENT']


class NotificationSerializer(FormSerializer):
    title = CleanCharField(required=True, allow_blank=False, max_length=200)
    message = CleanCharField(required=True, allow_blank=False, max_length=2000, style={'base_template': 'textarea.html'})
    recipientType = serializers.ChoiceField(choices=RECIPIENT_TYPES, initial='STAFF')
    recipientId = CleanCharField(required=True, allow_blank=False, max_length=64)
    senderUsername = CleanCharField(max_length=150)
    priority = serializers.ChoiceField(choices=PRIORITIES, initial='NORMAL', default='NORMAL')
