import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum, Count, F, DecimalField, ExpressionWrapper
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bhandar.core.exceptions import validation_error_response
from bhandar.core import timeutils
from bhandar.core.permissions import is_cluster_head, is_manager_or_cluster_head
from bhandar.core.utils import create_audit_log
from bhandar.locations.models import Store
from bhandar.notifications.models import Notification
from bhandar.notifications.services import notify
from .filters import SalesRecordFilter, ItemSaleFilter
from .models import SalesRecord, ItemSale
from .serializers import SalesRecordSerializer, RejectSerializer, ItemSaleSerializer, sanitize_item_sale

logger = logging.getLogger('bhandar.sales')

ZERO = Decimal('0.00')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sales_list_create(request):
    """
    List sales records or record a day's sales.

    GET filters: store, date_from, date_to, approval_status.
    POST is limited to managers; new records wait for cluster head approval.
    """
    if request.method == 'GET':
        queryset = SalesRecord.objects.select_related('store', 'created_by', 'approved_by', 'rejected_by')
        filterset = SalesRecordFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return validation_error_response(filterset.errors)
        return Response(SalesRecordSerializer(filterset.qs, many=True).data)

    if not is_manager_or_cluster_head(request.user):
        logger.warning(f"User {request.user.username} attempted to add sales without manager role")
        return Response({'error': 'Only managers can add sales data'}, status=status.HTTP_403_FORBIDDEN)

    serializer = SalesRecordSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Sales validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    record = serializer.save(
        created_by=request.user,
        approval_status=SalesRecord.STATUS_PENDING,
        approval_required=True,
    )
    create_audit_log(request, 'create', 'SalesRecord', record.id, object_name=str(record))
    logger.info(f"Sales for {record.store} on {record.date} recorded by {request.user.username}")
    return Response(SalesRecordSerializer(record).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def sales_detail(request, pk):
    record = get_object_or_404(SalesRecord.objects.select_related('store'), pk=pk)

    if request.method == 'GET':
        return Response(SalesRecordSerializer(record).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers can modify sales data'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        create_audit_log(request, 'delete', 'SalesRecord', record.id, object_name=str(record))
        record.delete()
        logger.info(f"Sales record {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = SalesRecordSerializer(record, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        logger.warning(f"Sales update validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)

    extra = {}
    if record.approval_status != SalesRecord.STATUS_PENDING:
        # Any edit needs a fresh approval
        extra = {
            'approval_status': SalesRecord.STATUS_PENDING,
            'approved_by': None,
            'approved_at': None,
            'rejected_by': None,
            'rejected_at': None,
            'rejection_reason': '',
        }
    record = serializer.save(**extra)
    create_audit_log(request, 'update', 'SalesRecord', record.id, request.data, object_name=str(record))
    return Response(SalesRecordSerializer(record).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def sales_approve(request, pk):
    if not is_cluster_head(request.user):
        return Response({'error': 'Only cluster heads can approve sales data'}, status=status.HTTP_403_FORBIDDEN)

    record = get_object_or_404(SalesRecord.objects.select_related('store', 'created_by'), pk=pk)
    if record.approval_status == SalesRecord.STATUS_APPROVED:
        return Response({'error': 'Sales data is already approved'}, status=status.HTTP_400_BAD_REQUEST)

    record.approval_status = SalesRecord.STATUS_APPROVED
    record.approved_by = request.user
    record.approved_at = timeutils.now()
    record.rejected_by = None
    record.rejected_at = None
    record.rejection_reason = ''
    record.save()

    create_audit_log(request, 'approve', 'SalesRecord', record.id, object_name=str(record))
    notify(record.created_by, Notification.TYPE_SALES_APPROVAL, 'Sales approved',
           f"Sales for {record.store.name} on {timeutils.format_date_ist(record.date)} were approved",
           related_id=record.id, related_date=record.date)
    logger.info(f"Sales record {pk} approved by {request.user.username}")
    return Response(SalesRecordSerializer(record).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def sales_reject(request, pk):
    if not is_cluster_head(request.user):
        return Response({'error': 'Only cluster heads can reject sales data'}, status=status.HTTP_403_FORBIDDEN)

    record = get_object_or_404(SalesRecord.objects.select_related('store', 'created_by'), pk=pk)
    serializer = RejectSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    record.approval_status = SalesRecord.STATUS_REJECTED
    record.rejected_by = request.user
    record.rejected_at = timeutils.now()
    record.rejection_reason = serializer.validated_data['reason']
    record.approved_by = None
    record.approved_at = None
    record.save()

    create_audit_log(request, 'reject', 'SalesRecord', record.id, {'reason': record.rejection_reason},
                     object_name=str(record))
    notify(record.created_by, Notification.TYPE_SALES_APPROVAL, 'Sales rejected',
           f"Sales for {record.store.name} on {timeutils.format_date_ist(record.date)} were rejected: "
           f"{record.rejection_reason}",
           related_id=record.id, related_date=record.date)
    logger.info(f"Sales record {pk} rejected by {request.user.username}")
    return Response(SalesRecordSerializer(record).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_summary(request):
    """Totals per store for a date range (defaults to the current month)"""
    today = timeutils.today()
    date_from = timeutils.parse_date_param(request.query_params.get('date_from')) or today.replace(day=1)
    date_to = timeutils.parse_date_param(request.query_params.get('date_to')) or today
    if date_from > date_to:
        return Response({'error': 'date_from must be on or before date_to'}, status=status.HTTP_400_BAD_REQUEST)

    records = SalesRecord.objects.filter(date__gte=date_from, date__lte=date_to)
    if request.query_params.get('store'):
        records = records.filter(store_id=request.query_params['store'])
    if request.query_params.get('approved_only') == 'true':
        records = records.filter(approval_status=SalesRecord.STATUS_APPROVED)

    money = DecimalField(max_digits=14, decimal_places=2)
    rows = records.values('store_id', 'store__name').annotate(
        days=Count('id'),
        offline=Sum('offline_sales'),
        online=Sum('online_sales'),
        commission=Sum('online_sales_commission'),
        salary=Sum('employee_salary'),
        cash=Sum('cash_amount'),
        discrepancy=Sum(ExpressionWrapper(F('actual_cash_in_hand') - F('cash_amount'), output_field=money)),
    ).order_by('store__name')

    stores = []
    totals = {'gross': ZERO, 'commission': ZERO, 'net': ZERO, 'salary': ZERO, 'discrepancy': ZERO}
    for row in rows:
        gross = (row['offline'] or ZERO) + (row['online'] or ZERO)
        commission = row['commission'] or ZERO
        entry = {
            'store': row['store_id'],
            'store_name': row['store__name'],
            'days': row['days'],
            'gross': gross,
            'commission': commission,
            'net': gross - commission,
            'salary': row['salary'] or ZERO,
            'discrepancy': row['discrepancy'] or ZERO,
        }
        for key in totals:
            totals[key] += entry[key]
        stores.append(entry)

    return Response({
        'date_from': date_from,
        'date_to': date_to,
        'stores': stores,
        'totals': totals,
    })


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def item_sales(request):
    """
    GET: list uploaded item sales (filters: date_from, date_to, period, store)
    POST: bulk upload {salesData: [...], period}
    DELETE: clear every uploaded row
    """
    if request.method == 'GET':
        filterset = ItemSaleFilter(request.query_params, queryset=ItemSale.objects.all())
        if not filterset.is_valid():
            return validation_error_response(filterset.errors)
        return Response(ItemSaleSerializer(filterset.qs, many=True).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers can manage item sales'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        count, _ = ItemSale.objects.all().delete()
        create_audit_log(request, 'clear', 'ItemSale', 'all', {'deleted': count})
        logger.info(f"User {request.user.username} cleared {count} item sales")
        return Response({'success': True, 'deleted': count})

    rows = request.data.get('salesData') if isinstance(request.data, dict) else None
    if not isinstance(rows, list) or not rows:
        return Response({'error': 'salesData must be a non-empty array'}, status=status.HTTP_400_BAD_REQUEST)

    period = request.data.get('period')
    known_stores = set(Store.objects.values_list('id', flat=True))
    objects = []
    for row in rows:
        fields = sanitize_item_sale(row, period)
        store_id = fields.pop('store_id')
        try:
            store_id = int(store_id) if store_id is not None else None
        except (TypeError, ValueError):
            store_id = None
        objects.append(ItemSale(store_id=store_id if store_id in known_stores else None,
                                uploaded_by=request.user, **fields))

    with transaction.atomic():
        created = ItemSale.objects.bulk_create(objects)

    create_audit_log(request, 'bulk_upload', 'ItemSale', 'bulk', {'count': len(created), 'period': period})
    logger.info(f"User {request.user.username} uploaded {len(created)} item sales")
    return Response({'success': True, 'count': len(created)}, status=status.HTTP_201_CREATED)
