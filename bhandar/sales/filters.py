import django_filters

from .models import SalesRecord, ItemSale


class SalesRecordFilter(django_filters.FilterSet):
    store = django_filters.NumberFilter(field_name='store_id')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    approval_status = django_filters.ChoiceFilter(choices=SalesRecord.STATUS_CHOICES)

    class Meta:
        model = SalesRecord
        fields = ['store', 'date_from', 'date_to', 'approval_status']


class ItemSaleFilter(django_filters.FilterSet):
    store = django_filters.NumberFilter(field_name='store_id')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    period = django_filters.CharFilter(field_name='period')

    class Meta:
        model = ItemSale
        fields = ['store', 'date_from', 'date_to', 'period']
