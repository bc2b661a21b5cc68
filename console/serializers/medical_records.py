from datetime import datetime, time

from django.utils import timezone
from rest_framework import serializers

from .common import CleanCharField, FormSerializer

RECORD_TYPES = [
    'GENERAL_CHECKUP', 'EMERGENCY', 'FOLLOW_UP', 'SURGERY',
    'LAB_TEST', 'IMAGING', 'VACCINATION', 'CONSULTATION',
]


def _text(max_length=4000):
    return CleanCharField(max_length=max_length, style={'base_template': 'textarea.html'})


class MedicalRecordSerializer(FormSerializer):
    patientId = CleanCharField(required=True, allow_blank=False, max_length=32, style={'lookup': 'patients'})
    doctorId = CleanCharField(required=True, allow_blank=False, max_length=32, style={'lookup': 'doctors'})
    appointmentId = serializers.IntegerField(required=False, allow_null=True, style={'lookup': 'appointments'})
    recordType = serializers.ChoiceField(choices=RECORD_TYPES, initial='GENERAL_CHECKUP', default='GENERAL_CHECKUP')
    diagnosis = _text()
    symptoms = _text()
    treatment = _text()
    notes = _text()
    prescription = _text()
    testResults = _text()
    medicalHistory = _text()
    recordDate = serializers.DateField(initial=timezone.localdate)
    nextAppointment = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        # The backend stores both as timestamps at midnight
        for name in ('recordDate', 'nextAppointment'):
            if attrs.get(name):
                attrs[name] = datetime.combine(attrs[name], time.min)
        return attrs
