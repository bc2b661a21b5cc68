from datetime import datetime, time

from django.utils import timezone
from rest_framework import serializers

from .common import CleanCharField, FormSerializer

PAYMENT_STATUSES = ['COMPLETED', 'PENDING', 'REFUNDED', 'FAILED', 'CANCELLED']
PAYMENT_METHODS = ['CASH', 'CREDIT_CARD', 'DEBIT_CARD', 'INSURANCE', 'BANK_TRANSFER', 'OTHER']
PAYMENT_TYPES = ['CONSULTATION', 'PROCEDURE', 'MEDICATION', 'LABORATORY', 'OTHER']


class PaymentSerializer(FormSerializer):
    """Payment form.

    The backend charges the patient of the appointment, so ``patientId``
    is copied from the selected appointment rather than entered.  Needs a
    ``lookups`` entry in the serializer context.
    """
    appointmentId = serializers.IntegerField(style={'lookup': 'appointments'})
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    paymentDate = serializers.DateField(required=False, allow_null=True, initial=timezone.localdate)
    paymentMethod = serializers.ChoiceField(choices=PAYMENT_METHODS, initial='CASH', default='CASH')
    status = serializers.ChoiceField(choices=PAYMENT_STATUSES, initial='COMPLETED', default='COMPLETED')
    type = serializers.ChoiceField(choices=PAYMENT_TYPES, initial='CONSULTATION', default='CONSULTATION')
    notes = CleanCharField(max_length=2000, style={'base_template': 'textarea.html'})

    def validate(self, attrs):
        lookups = self.context.get('lookups')
        appointment = lookups.fetch('appointments', attrs['appointmentId']) if lookups is not None else None
        if not appointment or not appointment.get('patientId'):
            raise serializers.ValidationError({'appointmentId': 'Selected appointment was not found.'})
        attrs['patientId'] = appointment['patientId']
        # Sent as a timestamp at midnight
        attrs['paymentDate'] = datetime.combine(attrs.get('paymentDate') or timezone.localdate(), time.min)
        return attrs
