import django_filters

from .models import ProductionBatch, ProductionRequest


class ProductionBatchFilter(django_filters.FilterSet):
    production_house = django_filters.NumberFilter(field_name='production_house_id')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    approval_status = django_filters.ChoiceFilter(choices=ProductionBatch.STATUS_CHOICES)

    class Meta:
        model = ProductionBatch
        fields = ['production_house', 'date_from', 'date_to', 'approval_status']


class ProductionRequestFilter(django_filters.FilterSet):
    store = django_filters.NumberFilter(field_name='store_id')
    production_house = django_filters.NumberFilter(field_name='production_house_id')
    status = django_filters.MultipleChoiceFilter(choices=ProductionRequest.STATUS_CHOICES)
    date = django_filters.DateFilter(field_name='request_date')
    date_from = django_filters.DateFilter(field_name='request_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='request_date', lookup_expr='lte')

    class Meta:
        model = ProductionRequest
        fields = ['store', 'production_house', 'status', 'date', 'date_from', 'date_to']
