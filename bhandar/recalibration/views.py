import logging

from django.db import transaction
from django.db.models import Prefetch
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bhandar.core.exceptions import validation_error_response
from bhandar.core import timeutils
from bhandar.core.permissions import is_manager_or_cluster_head
from bhandar.core.utils import create_audit_log
from bhandar.notifications.models import Notification
from bhandar.notifications.services import notify
from bhandar.production import ledger
from bhandar.production.stock import LOCATION_TYPES, resolve_location
from bhandar.sales.serializers import RejectSerializer
from .models import StockRecalibration, RecalibrationItem
from .serializers import StockRecalibrationSerializer, SubmitRecalibrationSerializer
from .services import in_recalibration_window, draft_items, build_counted_items

logger = logging.getLogger('bhandar.recalibration')

ACTIVE_STATUSES = [StockRecalibration.STATUS_PENDING, StockRecalibration.STATUS_APPROVED]


def _with_items(queryset):
    return queryset.select_related('submitted_by').prefetch_related(
        Prefetch('items', queryset=RecalibrationItem.objects.all()))


def _location_from_params(request):
    location_type = request.query_params.get('location_type')
    location_id = request.query_params.get('location_id')
    if location_type not in LOCATION_TYPES:
        return None, Response({'error': 'location_type must be store or production_house'},
                              status=status.HTTP_400_BAD_REQUEST)
    location = resolve_location(location_type, location_id)
    if location is None:
        return None, Response({'error': 'Location not found'}, status=status.HTTP_404_NOT_FOUND)
    return (location_type, location), None


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recalibration_draft(request):
    """Pre-filled count sheet for a location; actual defaults to the system quantity"""
    resolved, error = _location_from_params(request)
    if error:
        return error
    location_type, location = resolved
    today = timeutils.today()
    return Response({
        'location_type': location_type,
        'location_id': location.pk,
        'location_name': location.name,
        'month': ledger.month_key(today),
        'windowOpen': in_recalibration_window(today),
        'items': draft_items(location_type, location.pk),
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def recalibration_list_create(request):
    """
    GET: recalibrations (filters: location_type, location_id, status, month)
    POST: submit a count; only allowed in the first days of the month
    """
    if request.method == 'GET':
        queryset = _with_items(StockRecalibration.objects.all())
        params = request.query_params
        if params.get('location_type'):
            queryset = queryset.filter(location_type=params['location_type'])
        if params.get('location_id'):
            queryset = queryset.filter(location_id=params['location_id'])
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        if params.get('month'):
            queryset = queryset.filter(month=params['month'])
        return Response(StockRecalibrationSerializer(queryset, many=True).data)

    today = timeutils.today()
    if not in_recalibration_window(today):
        logger.warning(f"User {request.user.username} attempted recalibration outside the window on {today}")
        return Response({'error': 'Stock recalibration is only allowed during the first 5 days of the month'},
                        status=status.HTTP_400_BAD_REQUEST)

    serializer = SubmitRecalibrationSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    data = serializer.validated_data

    location_type = data['location_type']
    location = resolve_location(location_type, data['location_id'])
    if location is None:
        return Response({'error': 'Location not found'}, status=status.HTTP_404_NOT_FOUND)

    month = ledger.month_key(today)
    already = StockRecalibration.objects.filter(
        location_type=location_type, location_id=location.pk, month=month, status__in=ACTIVE_STATUSES,
    ).exists()
    if already:
        return Response({'error': f'{location.name} has already been recalibrated for {month}'},
                        status=status.HTTP_409_CONFLICT)

    rows, errors = build_counted_items(location_type, location.pk, data['items'])
    if errors:
        return Response({'error': next(iter(errors.values())), 'errors': errors},
                        status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        recalibration = StockRecalibration.objects.create(
            location_type=location_type,
            location_id=location.pk,
            location_name=location.name,
            date=today,
            month=month,
            submitted_by=request.user,
        )
        RecalibrationItem.objects.bulk_create([RecalibrationItem(recalibration=recalibration, **row) for row in rows])

    create_audit_log(request, 'recalibration_submit', 'StockRecalibration', recalibration.id,
                     {'items': len(rows)}, object_name=str(recalibration))
    logger.info(f"Recalibration {recalibration.id} submitted for {location.name} by {request.user.username}")
    recalibration = _with_items(StockRecalibration.objects.all()).get(pk=recalibration.pk)
    return Response(StockRecalibrationSerializer(recalibration).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recalibration_last(request):
    """Most recent non-rejected count for a location"""
    resolved, error = _location_from_params(request)
    if error:
        return error
    location_type, location = resolved
    record = _with_items(StockRecalibration.objects.filter(
        location_type=location_type, location_id=location.pk,
    ).exclude(status=StockRecalibration.STATUS_REJECTED)).order_by('-date', '-created_at').first()
    return Response({
        'record': StockRecalibrationSerializer(record).data if record else None,
        'lastRecalibration': record.date if record else None,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recalibration_pending(request):
    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can review recalibrations'},
                        status=status.HTTP_403_FORBIDDEN)
    queryset = _with_items(StockRecalibration.objects.filter(status=StockRecalibration.STATUS_PENDING))
    return Response(StockRecalibrationSerializer(queryset, many=True).data)


def _review(request, pk, approve):
    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can review recalibrations'},
                        status=status.HTTP_403_FORBIDDEN)

    recalibration = get_object_or_404(StockRecalibration.objects.select_related('submitted_by'), pk=pk)
    if recalibration.status != StockRecalibration.STATUS_PENDING:
        return Response({'error': 'Only pending recalibrations can be reviewed'},
                        status=status.HTTP_400_BAD_REQUEST)

    if approve:
        recalibration.status = StockRecalibration.STATUS_APPROVED
        recalibration.approved_by = request.user
        recalibration.approved_at = timeutils.now()
    else:
        serializer = RejectSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        recalibration.status = StockRecalibration.STATUS_REJECTED
        recalibration.rejected_by = request.user
        recalibration.rejected_at = timeutils.now()
        recalibration.rejection_reason = serializer.validated_data['reason']
    recalibration.save()

    action = 'approve' if approve else 'reject'
    create_audit_log(request, action, 'StockRecalibration', recalibration.id, object_name=str(recalibration))
    message = f"Stock recalibration for {recalibration.location_name} ({recalibration.month}) was {recalibration.status}"
    if not approve:
        message += f": {recalibration.rejection_reason}"
    notify(recalibration.submitted_by, Notification.TYPE_RECALIBRATION, f"Recalibration {recalibration.status}",
           message, related_id=recalibration.id, related_date=recalibration.date)
    logger.info(f"Recalibration {pk} {recalibration.status} by {request.user.username}")
    recalibration = _with_items(StockRecalibration.objects.all()).get(pk=pk)
    return Response(StockRecalibrationSerializer(recalibration).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recalibration_approve(request, pk):
    return _review(request, pk, approve=True)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recalibration_reject(request, pk):
    return _review(request, pk, approve=False)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def wastage_report(request):
    """
    Adjusted items for a month with totals.

    totalWastage sums the shortfall of wastage items; totalCountingErrors
    sums the absolute difference of counting-error items.
    """
    month = request.query_params.get('month') or ledger.month_key(timeutils.today())
    recalibrations = StockRecalibration.objects.filter(month=month).exclude(
        status=StockRecalibration.STATUS_REJECTED)
    if request.query_params.get('location_type'):
        recalibrations = recalibrations.filter(location_type=request.query_params['location_type'])
    if request.query_params.get('location_id'):
        recalibrations = recalibrations.filter(location_id=request.query_params['location_id'])

    items = RecalibrationItem.objects.filter(
        recalibration__in=recalibrations,
        adjustment_type__isnull=False,
    ).select_related('recalibration').order_by('recalibration__location_name', 'item_name')

    rows = []
    total_wastage = 0
    total_counting_errors = 0
    for item in items:
        recalibration = item.recalibration
        if item.adjustment_type == RecalibrationItem.ADJUSTMENT_WASTAGE and item.difference < 0:
            total_wastage += abs(item.difference)
        elif item.adjustment_type == RecalibrationItem.ADJUSTMENT_COUNTING_ERROR:
            total_counting_errors += abs(item.difference)
        rows.append({
            'recalibration': recalibration.id,
            'location_type': recalibration.location_type,
            'location_id': recalibration.location_id,
            'location_name': recalibration.location_name,
            'date': recalibration.date,
            'status': recalibration.status,
            'item_key': item.item_key,
            'item_name': item.item_name,
            'system_quantity': item.system_quantity,
            'actual_quantity': item.actual_quantity,
            'difference': item.difference,
            'adjustment_type': item.adjustment_type,
            'notes': item.notes,
        })

    locations = set(recalibrations.values_list('location_type', 'location_id'))
    return Response({
        'month': month,
        'items': rows,
        'summary': {
            'totalWastage': total_wastage,
            'totalCountingErrors': total_counting_errors,
            'totalRecalibrations': recalibrations.count(),
            'uniqueLocations': len(locations),
        },
    })
