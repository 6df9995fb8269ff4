import django_filters

from .models import StockPurchase, Overhead, FixedCost


class ExpenseFilter(django_filters.FilterSet):
    store = django_filters.NumberFilter(field_name='store_id')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    category = django_filters.CharFilter(field_name='category')


class StockPurchaseFilter(ExpenseFilter):
    item_name = django_filters.CharFilter(field_name='item_name', lookup_expr='icontains')

    class Meta:
        model = StockPurchase
        fields = ['store', 'date_from', 'date_to', 'category', 'item_name']


class OverheadFilter(ExpenseFilter):
    employee = django_filters.NumberFilter(field_name='employee_id')

    class Meta:
        model = Overhead
        fields = ['store', 'date_from', 'date_to', 'category', 'employee']


class FixedCostFilter(ExpenseFilter):
    class Meta:
        model = FixedCost
        fields = ['store', 'date_from', 'date_to', 'category']
