import logging
import re
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Prefetch
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bhandar.catalog.constants import ENTITY_STORE
from bhandar.core.exceptions import validation_error_response
from bhandar.core import timeutils
from bhandar.core.permissions import is_cluster_head, is_manager_or_cluster_head
from bhandar.core.utils import create_audit_log
from bhandar.locations.models import Store
from bhandar.notifications.models import Notification
from bhandar.notifications.services import notify, cluster_heads
from . import ledger
from .filters import ProductionBatchFilter, ProductionRequestFilter
from .models import ProductionBatch, ProductionBatchLine, ProductionRequest, ProductionRequestLine, StockThreshold
from .serializers import (
    ProductionBatchSerializer, ProductionRequestSerializer, StatusUpdateSerializer, ThresholdSerializer,
)
from .stock import LOCATION_TYPES, resolve_location, finished_items, unique_by_key, store_thresholds, stock_status

logger = logging.getLogger('bhandar.production')

MONTH_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')


def heads_production(user, production_house):
    return production_house is not None and production_house.production_head_id == user.id


def _request_queryset():
    return ProductionRequest.objects.select_related(
        'store', 'production_house', 'requested_by',
    ).prefetch_related(Prefetch('lines', queryset=ProductionRequestLine.objects.select_related('item')))


# Production batches
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def batch_list_create(request):
    """List production batches (filters: production_house, date_from, date_to, approval_status) or record one"""
    if request.method == 'GET':
        queryset = ProductionBatch.objects.select_related('production_house', 'created_by').prefetch_related(
            Prefetch('lines', queryset=ProductionBatchLine.objects.select_related('item')))
        filterset = ProductionBatchFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return validation_error_response(filterset.errors)
        return Response(ProductionBatchSerializer(filterset.qs, many=True).data)

    serializer = ProductionBatchSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Production batch validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)

    house = serializer.validated_data['production_house']
    if not (is_manager_or_cluster_head(request.user) or heads_production(request.user, house)):
        return Response({'error': 'Only production heads, managers or cluster heads can record production'},
                        status=status.HTTP_403_FORBIDDEN)

    batch = serializer.save(created_by=request.user)
    create_audit_log(request, 'create', 'ProductionBatch', batch.id, object_name=str(batch))
    logger.info(f"Production batch {batch.id} recorded for {house.name} by {request.user.username}")
    return Response(ProductionBatchSerializer(batch).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def batch_detail(request, pk):
    batch = get_object_or_404(ProductionBatch.objects.select_related('production_house'), pk=pk)

    if request.method == 'GET':
        return Response(ProductionBatchSerializer(batch).data)

    if not (is_manager_or_cluster_head(request.user) or heads_production(request.user, batch.production_house)):
        return Response({'error': 'You cannot modify this production batch'}, status=status.HTTP_403_FORBIDDEN)
    if batch.approval_status == ProductionBatch.STATUS_APPROVED and not is_cluster_head(request.user):
        return Response({'error': 'Approved batches can only be changed by a cluster head'},
                        status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'DELETE':
        create_audit_log(request, 'delete', 'ProductionBatch', batch.id, object_name=str(batch))
        batch.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ProductionBatchSerializer(batch, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    batch = serializer.save()
    create_audit_log(request, 'update', 'ProductionBatch', batch.id, request.data, object_name=str(batch))
    return Response(ProductionBatchSerializer(batch).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def batch_approve(request, pk):
    if not is_cluster_head(request.user):
        return Response({'error': 'Only cluster heads can approve production'}, status=status.HTTP_403_FORBIDDEN)

    batch = get_object_or_404(ProductionBatch, pk=pk)
    if batch.approval_status == ProductionBatch.STATUS_APPROVED:
        return Response({'error': 'Production batch is already approved'}, status=status.HTTP_400_BAD_REQUEST)

    batch.approval_status = ProductionBatch.STATUS_APPROVED
    batch.approved_by = request.user
    batch.approved_at = timeutils.now()
    batch.save(update_fields=['approval_status', 'approved_by', 'approved_at', 'updated_at'])
    create_audit_log(request, 'approve', 'ProductionBatch', batch.id, object_name=str(batch))
    logger.info(f"Production batch {pk} approved by {request.user.username}")
    return Response(ProductionBatchSerializer(batch).data)


# Production requests
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def request_list_create(request):
    """
    List production requests (filters: store, production_house, status, date, date_from, date_to)
    or create one for a store.
    """
    if request.method == 'GET':
        filterset = ProductionRequestFilter(request.query_params, queryset=_request_queryset())
        if not filterset.is_valid():
            return validation_error_response(filterset.errors)
        return Response(ProductionRequestSerializer(filterset.qs, many=True).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only store managers or cluster heads can create production requests'},
                        status=status.HTTP_403_FORBIDDEN)

    serializer = ProductionRequestSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Production request validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    store = serializer.validated_data['store']
    if not is_cluster_head(request.user) and store.manager_id != request.user.id:
        return Response({'error': 'You can only request stock for a store you manage'},
                        status=status.HTTP_403_FORBIDDEN)
    production_request = serializer.save(requested_by=request.user)

    house = production_request.production_house
    notify(house.production_head if house else None, Notification.TYPE_PRODUCTION_REQUEST,
           'New production request',
           f"{production_request.store.name} requested stock for "
           f"{timeutils.format_date_ist(production_request.request_date)}",
           related_id=production_request.id, related_date=production_request.request_date)
    create_audit_log(request, 'create', 'ProductionRequest', production_request.id,
                     object_name=str(production_request))
    logger.info(f"Production request {production_request.id} created by {request.user.username}")
    return Response(ProductionRequestSerializer(production_request).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def request_detail(request, pk):
    production_request = get_object_or_404(_request_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(ProductionRequestSerializer(production_request).data)

    owner = production_request.requested_by_id == request.user.id
    if not (owner or is_cluster_head(request.user)):
        return Response({'error': 'Only the requester or a cluster head can change this request'},
                        status=status.HTTP_403_FORBIDDEN)
    if production_request.status != ProductionRequest.STATUS_PENDING:
        return Response({'error': 'Only pending requests can be changed'}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'DELETE':
        create_audit_log(request, 'delete', 'ProductionRequest', production_request.id,
                         object_name=str(production_request))
        production_request.delete()
        logger.info(f"Production request {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ProductionRequestSerializer(production_request, data=request.data,
                                             partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    production_request = serializer.save()
    create_audit_log(request, 'update', 'ProductionRequest', production_request.id, request.data,
                     object_name=str(production_request))
    return Response(ProductionRequestSerializer(production_request).data)


def _may_set_status(user, production_request, new_status):
    if is_cluster_head(user):
        return True
    if new_status == ProductionRequest.STATUS_CANCELLED:
        return production_request.requested_by_id == user.id
    if new_status == ProductionRequest.STATUS_DELIVERED:
        return production_request.store.manager_id == user.id
    return heads_production(user, production_request.production_house)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_update_status(request, pk):
    """Move a request one step along its flow, or cancel it while pending"""
    serializer = StatusUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    new_status = serializer.validated_data['status']

    with transaction.atomic():
        production_request = get_object_or_404(
            ProductionRequest.objects.select_for_update().select_related('store', 'production_house'), pk=pk)

        if not production_request.can_move_to(new_status):
            return Response({
                'error': f"Cannot change status from {production_request.status} to {new_status}"
            }, status=status.HTTP_400_BAD_REQUEST)
        if not _may_set_status(request.user, production_request, new_status):
            return Response({'error': f'You are not allowed to mark this request as {new_status}'},
                            status=status.HTTP_403_FORBIDDEN)

        previous = production_request.status
        now = timeutils.now()
        production_request.status = new_status
        setattr(production_request, f'{new_status}_by', request.user)
        setattr(production_request, f'{new_status}_at', now)
        if new_status == ProductionRequest.STATUS_DELIVERED:
            production_request.delivered_date = timeutils.today()
        production_request.save()

    create_audit_log(request, 'status_change', 'ProductionRequest', production_request.id,
                     {'from': previous, 'to': new_status}, object_name=str(production_request))
    if production_request.requested_by_id != request.user.id:
        notify(production_request.requested_by, Notification.TYPE_REQUEST_STATUS, 'Production request updated',
               f"Request for {production_request.store.name} on "
               f"{timeutils.format_date_ist(production_request.request_date)} is now "
               f"{production_request.get_status_display()}",
               related_id=production_request.id, related_date=production_request.request_date)
    logger.info(f"Production request {pk} moved {previous} -> {new_status} by {request.user.username}")
    return Response(ProductionRequestSerializer(_request_queryset().get(pk=pk)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def check_pending_requests(request):
    """Alert cluster heads about requests left pending past the alert window"""
    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can run this check'},
                        status=status.HTTP_403_FORBIDDEN)

    cutoff = timeutils.now() - timedelta(hours=settings.BHANDAR_PENDING_REQUEST_ALERT_HOURS)
    overdue = list(ProductionRequest.objects.filter(
        status=ProductionRequest.STATUS_PENDING,
        created_at__lte=cutoff,
        delay_notified_at__isnull=True,
    ).select_related('store'))

    heads = list(cluster_heads())
    sent = 0
    for production_request in overdue:
        sent += len(notify(
            heads, Notification.TYPE_REQUEST_DELAYED, 'Production request pending',
            f"Request from {production_request.store.name} for "
            f"{timeutils.format_date_ist(production_request.request_date)} has been pending for more than "
            f"{settings.BHANDAR_PENDING_REQUEST_ALERT_HOURS} hours",
            related_id=production_request.id, related_date=production_request.request_date,
        ))
    if overdue:
        ProductionRequest.objects.filter(pk__in=[r.pk for r in overdue]).update(delay_notified_at=timeutils.now())
        logger.info(f"Flagged {len(overdue)} overdue production requests, {sent} notifications sent")
    return Response({'newPendingCount': len(overdue), 'notificationsSent': sent})


# Thresholds and stock
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def stock_thresholds(request, pk):
    """
    GET: {item_key: {high, medium, low}} for every finished product of the store
    PUT: {"thresholds": {item_key: {high, medium, low}}}
    """
    store = get_object_or_404(Store, pk=pk)
    items = unique_by_key(finished_items(ENTITY_STORE, store.pk))

    if request.method == 'GET':
        return Response({'store': store.pk, 'thresholds': store_thresholds(store, items)})

    if not (is_cluster_head(request.user) or store.manager_id == request.user.id):
        return Response({'error': "Only the store's manager or a cluster head can change thresholds"},
                        status=status.HTTP_403_FORBIDDEN)

    payload = request.data.get('thresholds') if isinstance(request.data, dict) else None
    if not isinstance(payload, dict) or not payload:
        return Response({'error': 'thresholds must be a non-empty object'}, status=status.HTTP_400_BAD_REQUEST)

    by_key = {item.name: item for item in items}
    unknown = [key for key in payload if key not in by_key]
    if unknown:
        return Response({'error': f"Unknown items: {', '.join(sorted(unknown))}"}, status=status.HTTP_400_BAD_REQUEST)

    validated = {}
    errors = {}
    for key, values in payload.items():
        serializer = ThresholdSerializer(data=values)
        if serializer.is_valid():
            validated[key] = serializer.validated_data
        else:
            errors[key] = serializer.errors
    if errors:
        return Response({'error': 'Invalid thresholds', 'errors': errors}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        for key, values in validated.items():
            StockThreshold.objects.update_or_create(
                store=store, item=by_key[key], defaults={**values, 'updated_by': request.user})
    create_audit_log(request, 'update', 'StockThreshold', store.pk, payload, object_name=store.name)
    logger.info(f"Thresholds for {len(validated)} items updated at {store.name} by {request.user.username}")
    return Response({'store': store.pk, 'thresholds': store_thresholds(store, items)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_status_view(request):
    """Stock position per finished product: ?location_type=store|production_house&location_id=&month=YYYY-MM"""
    location_type = request.query_params.get('location_type', ENTITY_STORE)
    location_id = request.query_params.get('location_id')
    month = request.query_params.get('month') or ledger.month_key(timeutils.today())

    if location_type not in LOCATION_TYPES:
        return Response({'error': 'location_type must be store or production_house'},
                        status=status.HTTP_400_BAD_REQUEST)
    if not MONTH_PATTERN.match(month):
        return Response({'error': 'month must be in YYYY-MM format'}, status=status.HTTP_400_BAD_REQUEST)
    location = resolve_location(location_type, location_id)
    if location is None:
        return Response({'error': 'Location not found'}, status=status.HTTP_404_NOT_FOUND)

    return Response({
        'location_type': location_type,
        'location_id': location.pk,
        'location_name': location.name,
        'month': month,
        'items': stock_status(location_type, location.pk, month),
    })
