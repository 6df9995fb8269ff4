from django.db import transaction
from rest_framework import serializers

from bhandar.core import timeutils
from .models import (
    ProductionBatch, ProductionBatchLine, ProductionRequest, ProductionRequestLine,
)


class ProductionBatchLineSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='item.display_name', read_only=True)
    item_key = serializers.CharField(source='item.name', read_only=True)

    class Meta:
        model = ProductionBatchLine
        fields = ['id', 'item', 'item_key', 'item_name', 'dough', 'stuffing', 'final']
        read_only_fields = ['id']

    def validate_item(self, value):
        if value.category != 'finished_product' or not value.is_active:
            raise serializers.ValidationError('Only active finished products can be produced')
        return value


class ProductionBatchSerializer(serializers.ModelSerializer):
    lines = ProductionBatchLineSerializer(many=True)
    production_house_name = serializers.CharField(source='production_house.name', read_only=True)
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)

    class Meta:
        model = ProductionBatch
        fields = ['id', 'date', 'production_house', 'production_house_name', 'notes', 'approval_status',
                  'approved_by', 'approved_at', 'lines', 'created_by', 'created_by_name', 'created_at',
                  'updated_at']
        read_only_fields = ['id', 'approval_status', 'approved_by', 'approved_at', 'created_by', 'created_at',
                            'updated_at']

    def validate_lines(self, value):
        if not value:
            raise serializers.ValidationError('At least one product line is required')
        items = [line['item'].pk for line in value]
        if len(items) != len(set(items)):
            raise serializers.ValidationError('Each product may appear only once')
        return value

    @transaction.atomic
    def create(self, validated_data):
        lines = validated_data.pop('lines')
        batch = ProductionBatch.objects.create(**validated_data)
        ProductionBatchLine.objects.bulk_create([ProductionBatchLine(batch=batch, **line) for line in lines])
        return batch

    @transaction.atomic
    def update(self, instance, validated_data):
        lines = validated_data.pop('lines', None)
        instance = super().update(instance, validated_data)
        if lines is not None:
            instance.lines.all().delete()
            ProductionBatchLine.objects.bulk_create([ProductionBatchLine(batch=instance, **line) for line in lines])
        return instance


class ProductionRequestLineSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='item.display_name', read_only=True)
    item_key = serializers.CharField(source='item.name', read_only=True)

    class Meta:
        model = ProductionRequestLine
        fields = ['id', 'item', 'item_key', 'item_name', 'quantity']
        read_only_fields = ['id']


class ProductionRequestSerializer(serializers.ModelSerializer):
    lines = ProductionRequestLineSerializer(many=True)
    request_date = serializers.DateField(required=False)
    store_name = serializers.CharField(source='store.name', read_only=True)
    production_house_name = serializers.CharField(source='production_house.name', read_only=True, default=None)
    requested_by_name = serializers.CharField(source='requested_by.display_name', read_only=True, default=None)
    total_quantity = serializers.SerializerMethodField()

    class Meta:
        model = ProductionRequest
        fields = ['id', 'store', 'store_name', 'production_house', 'production_house_name', 'request_date',
                  'status', 'notes', 'lines', 'total_quantity', 'requested_by', 'requested_by_name',
                  'accepted_by', 'accepted_at', 'in_preparation_by', 'in_preparation_at', 'prepared_by',
                  'prepared_at', 'shipped_by', 'shipped_at', 'delivered_by', 'delivered_at', 'delivered_date',
                  'cancelled_by', 'cancelled_at', 'delay_notified_at', 'created_at', 'updated_at']
        read_only_fields = ['id', 'status', 'requested_by', 'accepted_by', 'accepted_at', 'in_preparation_by',
                            'in_preparation_at', 'prepared_by', 'prepared_at', 'shipped_by', 'shipped_at',
                            'delivered_by', 'delivered_at', 'delivered_date', 'cancelled_by', 'cancelled_at',
                            'delay_notified_at', 'created_at', 'updated_at']

    def get_total_quantity(self, obj):
        return sum(line.quantity for line in obj.lines.all())

    def validate_lines(self, value):
        lines = [line for line in value if line['quantity'] > 0]
        if not lines:
            raise serializers.ValidationError('Request at least one item with a quantity above zero')
        items = [line['item'].pk for line in lines]
        if len(items) != len(set(items)):
            raise serializers.ValidationError('Each item may appear only once')
        return lines

    def validate(self, attrs):
        store = attrs.get('store', getattr(self.instance, 'store', None))
        if attrs.get('production_house') is None and getattr(self.instance, 'production_house', None) is None:
            attrs['production_house'] = store.production_house
        if attrs.get('production_house') is None and self.instance is None:
            raise serializers.ValidationError({'production_house': 'Store has no production house assigned'})

        request_date = attrs.get('request_date') or getattr(self.instance, 'request_date', None) or timeutils.today()
        attrs['request_date'] = request_date
        clash = ProductionRequest.objects.filter(store=store, request_date=request_date).exclude(
            status=ProductionRequest.STATUS_CANCELLED)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError({'request_date': 'A request for this store and date already exists'})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        lines = validated_data.pop('lines')
        request = ProductionRequest.objects.create(**validated_data)
        ProductionRequestLine.objects.bulk_create([ProductionRequestLine(request=request, **line) for line in lines])
        return request

    @transaction.atomic
    def update(self, instance, validated_data):
        lines = validated_data.pop('lines', None)
        instance = super().update(instance, validated_data)
        if lines is not None:
            instance.lines.all().delete()
            ProductionRequestLine.objects.bulk_create(
                [ProductionRequestLine(request=instance, **line) for line in lines])
        return instance


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProductionRequest.STATUS_CHOICES)


class ThresholdSerializer(serializers.Serializer):
    high = serializers.IntegerField(min_value=0)
    medium = serializers.IntegerField(min_value=0)
    low = serializers.IntegerField(min_value=0)

    def validate(self, attrs):
        if not attrs['low'] <= attrs['medium'] <= attrs['high']:
            raise serializers.ValidationError('Thresholds must satisfy low <= medium <= high')
        return attrs
