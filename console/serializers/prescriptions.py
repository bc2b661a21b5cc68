from datetime import timedelta

from django.utils import timezone
from rest_framework import serializers

from .common import ITEM_COLUMNS, CleanCharField, FormSerializer, MedicationItemsField

PRESCRIPTION_STATUSES = ['ACTIVE', 'COMPLETED', 'EXPIRED', 'CANCELLED']
DEFAULT_VALIDITY_DAYS = 30


def _blank_item():
    return [{'medicationName': '', 'dosage': '', 'frequency': '', 'instructions': '', 'quantity': 1, 'duration': ''}]


class PrescriptionSerializer(FormSerializer):
    patientId = CleanCharField(required=True, allow_blank=False, max_length=32, style={'lookup': 'patients'})
    doctorId = CleanCharField(required=True, allow_blank=False, max_length=32, style={'lookup': 'doctors'})
    medicalRecordId = serializers.IntegerField(required=False, allow_null=True, style={'lookup': 'medical-records'})
    prescriptionDate = serializers.DateField(initial=timezone.localdate)
    expiryDate = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=PRESCRIPTION_STATUSES, initial='ACTIVE', default='ACTIVE')
    notes = CleanCharField(max_length=2000, style={'base_template': 'textarea.html'})
    isRefillable = serializers.BooleanField(default=False)
    totalRefills = serializers.IntegerField(min_value=0, max_value=24, default=0, initial=0)
    medications = MedicationItemsField(min_length=1, initial=_blank_item)

    def validate(self, attrs):
        if not attrs.get('expiryDate'):
            attrs['expiryDate'] = attrs['prescriptionDate'] + timedelta(days=DEFAULT_VALIDITY_DAYS)
        elif attrs['expiryDate'] < attrs['prescriptionDate']:
            raise serializers.ValidationError({'expiryDate': 'Expiry date cannot be before the prescription date.'})
        if not attrs.get('isRefillable'):
            attrs['totalRefills'] = 0
        # Older backends read a single medication from the top level
        first = attrs['medications'][0]
        for column in ITEM_COLUMNS:
            if first.get(column) is not None:
                attrs[column] = first[column]
        return attrs


class PrescriptionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PRESCRIPTION_STATUSES)
