from .common import CleanCharField, FormSerializer


class DepartmentSerializer(FormSerializer):
    name = CleanCharField(required=True, allow_blank=False, max_length=128)
    description = CleanCharField(max_length=1000, style={'base_template': 'textarea.html'})
    headDoctorId = CleanCharField(max_length=32, style={'lookup': 'doctors'})
