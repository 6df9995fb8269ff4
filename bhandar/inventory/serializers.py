from decimal import Decimal

from rest_framework import serializers

from .models import StockPurchase, Overhead, FixedCost, PaymentFields

PAYMENT_FIELDS = ['payment_method', 'cash_amount', 'online_amount']


def apply_payment_split(attrs, total, instance=None):
    """
    Fill cash/online amounts from the payment method.

    "cash" and "online" put the whole total on one side; "both" requires the
    two amounts to add up to the total.
    """
    method = attrs.get('payment_method', getattr(instance, 'payment_method', PaymentFields.PAYMENT_CASH))
    if method == PaymentFields.PAYMENT_CASH:
        attrs['cash_amount'] = total
        attrs['online_amount'] = Decimal('0.00')
    elif method == PaymentFields.PAYMENT_ONLINE:
        attrs['cash_amount'] = Decimal('0.00')
        attrs['online_amount'] = total
    else:
        cash = attrs.get('cash_amount', getattr(instance, 'cash_amount', None)) or Decimal('0.00')
        online = attrs.get('online_amount', getattr(instance, 'online_amount', None)) or Decimal('0.00')
        if cash < 0 or online < 0:
            raise serializers.ValidationError({'payment_method': 'Payment amounts cannot be negative'})
        if abs((cash + online) - total) > Decimal('0.01'):
            raise serializers.ValidationError({
                'payment_method': f'Cash ({cash}) + online ({online}) must equal the total ({total})'
            })
    return attrs


class StockPurchaseSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)
    total_cost = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)

    class Meta:
        model = StockPurchase
        fields = ['id', 'date', 'category', 'item_name', 'quantity', 'unit', 'cost_per_unit', 'total_cost',
                  'store', 'store_name', 'notes', *PAYMENT_FIELDS, 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('Quantity must be greater than 0')
        return value

    def validate_cost_per_unit(self, value):
        if value < 0:
            raise serializers.ValidationError('Cost per unit cannot be negative')
        return value

    def validate(self, attrs):
        instance = self.instance
        if attrs.get('total_cost') is None:
            quantity = attrs.get('quantity', getattr(instance, 'quantity', None))
            cost_per_unit = attrs.get('cost_per_unit', getattr(instance, 'cost_per_unit', None))
            attrs['total_cost'] = (quantity * cost_per_unit).quantize(Decimal('0.01'))
        return apply_payment_split(attrs, attrs['total_cost'], instance)


class OverheadSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)
    employee_name = serializers.CharField(source='employee.name', read_only=True, default=None)

    class Meta:
        model = Overhead
        fields = ['id', 'date', 'category', 'description', 'amount', 'store', 'store_name', 'employee',
                  'employee_name', *PAYMENT_FIELDS, 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than 0')
        return value

    def validate(self, attrs):
        instance = self.instance
        category = attrs.get('category', getattr(instance, 'category', None))
        employee = attrs.get('employee', getattr(instance, 'employee', None))
        if category == 'personal_expense' and employee is None:
            raise serializers.ValidationError({'employee': 'Personal expenses must name an employee'})
        if category != 'personal_expense':
            attrs['employee'] = None
        amount = attrs.get('amount', getattr(instance, 'amount', None))
        return apply_payment_split(attrs, amount, instance)


class FixedCostSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)

    class Meta:
        model = FixedCost
        fields = ['id', 'date', 'category', 'description', 'amount', 'units', 'unit_price', 'store',
                  'store_name', *PAYMENT_FIELDS, 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    def validate(self, attrs):
        instance = self.instance
        category = attrs.get('category', getattr(instance, 'category', None))
        units = attrs.get('units', getattr(instance, 'units', None))
        unit_price = attrs.get('unit_price', getattr(instance, 'unit_price', None))
        if category == 'lpg_gas' and units is not None and unit_price is not None:
            attrs['amount'] = (units * unit_price).quantize(Decimal('0.01'))

        amount = attrs.get('amount', getattr(instance, 'amount', None))
        if amount is None:
            raise serializers.ValidationError({'amount': 'Amount is required'})
        if amount <= 0:
            raise serializers.ValidationError({'amount': 'Amount must be greater than 0'})
        return apply_payment_split(attrs, amount, instance)
