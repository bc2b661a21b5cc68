from rest_framework import serializers

from .common import CleanCharField, FormSerializer

APPOINTMENT_STATUSES = ['SCHEDULED', 'COMPLETED', 'IN_PROGRESS', 'CANCELLED', 'NO_SHOW']


class AppointmentSerializer(FormSerializer):
    edit_aliases = {'appointmentTime': 'startTime'}

    patientId = CleanCharField(required=True, allow_blank=False, max_length=32, style={'lookup': 'patients'})
    doctorId = CleanCharField(required=True, allow_blank=False, max_length=32, style={'lookup': 'doctors'})
    appointmentDate = serializers.DateField()
    appointmentTime = serializers.TimeField(format='%H:%M', input_formats=['%H:%M', '%H:%M:%S'])
    status = serializers.ChoiceField(choices=APPOINTMENT_STATUSES, initial='SCHEDULED', default='SCHEDULED')
    reason = CleanCharField(max_length=500)
    notes = CleanCharField(max_length=2000, style={'base_template': 'textarea.html'})
    appointmentFee = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0)
    isPaid = serializers.BooleanField(default=False)

    def validate(self, attrs):
        # The backend stores a slot; the form only captures its start
        start = attrs['appointmentTime'].strftime('%H:%M')
        attrs['startTime'] = start
        attrs['endTime'] = start
        return attrs


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=APPOINTMENT_STATUSES)
