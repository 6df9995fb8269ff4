from rest_framework import serializers

from .models import StockRecalibration, RecalibrationItem


class RecalibrationItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = RecalibrationItem
        fields = ['id', 'item_key', 'item_name', 'category', 'unit', 'system_quantity', 'actual_quantity',
                  'difference', 'adjustment_type', 'notes']
        read_only_fields = fields


class StockRecalibrationSerializer(serializers.ModelSerializer):
    items = RecalibrationItemSerializer(many=True, read_only=True)
    submitted_by_name = serializers.CharField(source='submitted_by.display_name', read_only=True, default=None)

    class Meta:
        model = StockRecalibration
        fields = ['id', 'location_type', 'location_id', 'location_name', 'date', 'month', 'status', 'items',
                  'submitted_by', 'submitted_by_name', 'approved_by', 'approved_at', 'rejected_by',
                  'rejected_at', 'rejection_reason', 'created_at', 'updated_at']
        read_only_fields = fields


class CountSerializer(serializers.Serializer):
    item_key = serializers.CharField()
    actual_quantity = serializers.IntegerField(min_value=0)
    adjustment_type = serializers.ChoiceField(choices=RecalibrationItem.ADJUSTMENT_CHOICES, required=False,
                                              allow_null=True, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class SubmitRecalibrationSerializer(serializers.Serializer):
    location_type = serializers.ChoiceField(choices=StockRecalibration.LOCATION_TYPE_CHOICES)
    location_id = serializers.IntegerField(min_value=1)
    items = CountSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one item count is required')
        keys = [item['item_key'] for item in value]
        if len(keys) != len(set(keys)):
            raise serializers.ValidationError('Each item may be counted only once')
        return value
