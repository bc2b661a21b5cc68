from rest_framework import serializers

from .common import CleanCharField, FormSerializer

DOSAGE_FORMS = ['TABLET', 'CAPSULE', 'LIQUID', 'INJECTION', 'TOPICAL', 'INHALER', 'SUPPOSITORY', 'PATCH', 'OTHER']
STOCK_ACTIONS = ['ADD', 'SUBTRACT']
# Stock at or below this level is flagged when a medication has no reorder level
LOW_STOCK_LEVEL = 10


class MedicationSerializer(FormSerializer):
    name = CleanCharField(required=True, allow_blank=False, max_length=200)
    genericName = CleanCharField(max_length=200)
    brand = CleanCharField(max_length=200)
    manufacturer = CleanCharField(max_length=200)
    dosageForm = serializers.ChoiceField(choices=DOSAGE_FORMS, required=False)
    strength = CleanCharField(max_length=100)
    stockQuantity = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    requiresPrescription = serializers.BooleanField(default=False)
    description = CleanCharField(max_length=2000, style={'base_template': 'textarea.html'})
    sideEffects = CleanCharField(max_length=2000, style={'base_template': 'textarea.html'})
    contraindications = CleanCharField(max_length=2000, style={'base_template': 'textarea.html'})
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0, coerce_to_string=False)
    reorderLevel = serializers.IntegerField(required=False, allow_null=True, min_value=0, initial=LOW_STOCK_LEVEL)
    storage = CleanCharField(max_length=255)
    batchNumber = CleanCharField(max_length=64)
    barcode = CleanCharField(max_length=64)
    manufactureDate = serializers.DateField(required=False, allow_null=True)
    expiryDate = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        made, expires = attrs.get('manufactureDate'), attrs.get('expiryDate')
        if made and expires and expires < made:
            raise serializers.ValidationError({'expiryDate': 'Expiry date cannot be before the manufacture date.'})
        return attrs


class StockUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    action = serializers.ChoiceField(choices=STOCK_ACTIONS, default='ADD')

    def to_internal_value(self, data):
        # The screen names the action field ``updateType``
        if hasattr(data, 'dict'):
            data = data.dict()
        data = dict(data)
        if 'action' not in data and 'updateType' in data:
            data['action'] = data['updateType']
        return super().to_internal_value(data)
