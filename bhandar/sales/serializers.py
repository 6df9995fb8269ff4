from decimal import Decimal, InvalidOperation

from rest_framework import serializers

from bhandar.core import timeutils
from .models import SalesRecord, ItemSale

MONEY_FIELDS = ['offline_sales', 'paytm_amount', 'cash_amount', 'online_sales', 'online_sales_commission',
                'employee_salary', 'cash_offset']


class SalesRecordSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source='store.name', read_only=True)
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)
    approved_by_name = serializers.CharField(source='approved_by.display_name', read_only=True, default=None)
    rejected_by_name = serializers.CharField(source='rejected_by.display_name', read_only=True, default=None)
    gross_sales = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    net_sales = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    cash_discrepancy = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = SalesRecord
        fields = ['id', 'date', 'store', 'store_name', *MONEY_FIELDS, 'actual_cash_in_hand', 'notes',
                  'gross_sales', 'net_sales', 'cash_discrepancy',
                  'approval_status', 'approval_required', 'approved_by', 'approved_by_name', 'approved_at',
                  'rejected_by', 'rejected_by_name', 'rejected_at', 'rejection_reason',
                  'created_by', 'created_by_name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'approval_status', 'approval_required', 'approved_by', 'approved_at',
                            'rejected_by', 'rejected_at', 'rejection_reason', 'created_by', 'created_at',
                            'updated_at']

    def validate(self, attrs):
        for field in MONEY_FIELDS:
            value = attrs.get(field)
            if value is not None and value < 0 and field != 'cash_offset':
                raise serializers.ValidationError({field: 'Amount cannot be negative'})

        store = attrs.get('store', getattr(self.instance, 'store', None))
        date = attrs.get('date', getattr(self.instance, 'date', None))
        clash = SalesRecord.objects.filter(store=store, date=date)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError({'date': 'Sales for this store and date already exist'})
        return attrs


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=False, trim_whitespace=True,
                                   error_messages={'blank': 'Rejection reason is required',
                                                   'required': 'Rejection reason is required'})


class ItemSaleSerializer(serializers.ModelSerializer):
    class Meta:
        model = ItemSale
        fields = ['id', 'item_name', 'quantity', 'revenue', 'date', 'period', 'store', 'uploaded_by', 'uploaded_at']
        read_only_fields = fields


def _to_decimal(value):
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        return Decimal('0')
    return number if number.is_finite() else Decimal('0')


def sanitize_item_sale(row, default_period=None):
    """
    Coerce one uploaded row into ItemSale fields.

    Missing names become "Unknown", non-numeric quantity/revenue become 0,
    a missing or unparseable date falls back to today.
    """
    if not isinstance(row, dict):
        row = {}
    name = str(row.get('itemName') or row.get('item_name') or '').strip()[:100] or 'Unknown'
    date = timeutils.parse_date_param(row.get('date')) or timeutils.today()
    period = str(row.get('period') or default_period or 'custom')[:20]
    store = row.get('store') or row.get('storeId') or None
    return {
        'item_name': name,
        'quantity': _to_decimal(row.get('quantity')),
        'revenue': _to_decimal(row.get('revenue')),
        'date': date,
        'period': period,
        'store_id': store,
    }
