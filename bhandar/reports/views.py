import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bhandar.core import timeutils
from bhandar.core.permissions import is_manager_or_cluster_head
from .exporters import DATASETS, export_rows, to_csv

logger = logging.getLogger('bhandar.reports')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_dataset(request, dataset):
    """
    Export a dataset as CSV (default) or JSON.

    Query params: format=csv|json, date_from, date_to (YYYY-MM-DD)
    """
    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can export data'},
                        status=status.HTTP_403_FORBIDDEN)
    if dataset not in DATASETS:
        return Response({'error': f"Unknown dataset '{dataset}'. Choose from: {', '.join(DATASETS)}"},
                        status=status.HTTP_404_NOT_FOUND)

    export_format = request.query_params.get('format', 'csv')
    if export_format not in ('csv', 'json'):
        return Response({'error': 'format must be csv or json'}, status=status.HTTP_400_BAD_REQUEST)

    date_from = timeutils.parse_date_param(request.query_params.get('date_from'))
    date_to = timeutils.parse_date_param(request.query_params.get('date_to'))
    headers, rows = export_rows(dataset, date_from, date_to)
    logger.info(f"User {request.user.username} exported {len(rows)} {dataset} rows as {export_format}")

    filename = f"{dataset}_{timeutils.today().isoformat()}"
    if export_format == 'json':
        response = Response({'dataset': dataset, 'count': len(rows), 'rows': rows})
        response['Content-Disposition'] = f'attachment; filename="{filename}.json"'
        return response

    response = HttpResponse(to_csv(headers, rows), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}.csv"'
    return response
