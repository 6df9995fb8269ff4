"""Dataset definitions and CSV rendering for data export"""
import csv
import io
import json

from django.core.serializers.json import DjangoJSONEncoder

from bhandar.hr.models import Payout
from bhandar.hr.serializers import PayoutSerializer
from bhandar.inventory.models import StockPurchase, Overhead
from bhandar.inventory.serializers import StockPurchaseSerializer, OverheadSerializer
from bhandar.production.models import ProductionRequest
from bhandar.production.serializers import ProductionRequestSerializer
from bhandar.sales.models import SalesRecord
from bhandar.sales.serializers import SalesRecordSerializer

# dataset -> (queryset factory, serializer, date field used for date_from/date_to)
DATASETS = {
    'sales': (lambda: SalesRecord.objects.select_related('store', 'created_by'), SalesRecordSerializer, 'date'),
    'inventory': (lambda: StockPurchase.objects.select_related('store'), StockPurchaseSerializer, 'date'),
    'overheads': (lambda: Overhead.objects.select_related('store', 'employee'), OverheadSerializer, 'date'),
    'production-requests': (
        lambda: ProductionRequest.objects.select_related('store', 'production_house', 'requested_by')
        .prefetch_related('lines__item'),
        ProductionRequestSerializer,
        'request_date',
    ),
    'payouts': (lambda: Payout.objects.select_related('employee'), PayoutSerializer, 'date'),
}


def export_rows(dataset, date_from=None, date_to=None):
    """(headers, rows) for a dataset, rows being serializer output dicts"""
    queryset_factory, serializer_class, date_field = DATASETS[dataset]
    queryset = queryset_factory()
    if date_from:
        queryset = queryset.filter(**{f'{date_field}__gte': date_from})
    if date_to:
        queryset = queryset.filter(**{f'{date_field}__lte': date_to})

    headers = [name for name, field in serializer_class().fields.items() if not field.write_only]
    return headers, serializer_class(queryset, many=True).data


def _cell(value):
    if value is None:
        return ''
    if isinstance(value, (dict, list)):
        return json.dumps(value, cls=DjangoJSONEncoder)
    return value


def to_csv(headers, rows):
    """Header row plus one line per row; nested values are JSON encoded"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(row.get(header)) for header in headers])
    return buffer.getvalue()
