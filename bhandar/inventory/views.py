import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bhandar.core.exceptions import validation_error_response
from bhandar.core.permissions import is_manager_or_cluster_head
from bhandar.core.utils import create_audit_log
from .filters import StockPurchaseFilter, OverheadFilter, FixedCostFilter
from .models import StockPurchase, Overhead, FixedCost
from .serializers import StockPurchaseSerializer, OverheadSerializer, FixedCostSerializer

logger = logging.getLogger('bhandar.inventory')


def _list_create(request, queryset, serializer_class, filter_class, label):
    if request.method == 'GET':
        filterset = filter_class(request.query_params, queryset=queryset.select_related('store', 'created_by'))
        if not filterset.is_valid():
            return validation_error_response(filterset.errors)
        return Response(serializer_class(filterset.qs, many=True).data)

    if not is_manager_or_cluster_head(request.user):
        logger.warning(f"User {request.user.username} attempted to add {label} without manager role")
        return Response({'error': f'Only managers can add {label} entries'}, status=status.HTTP_403_FORBIDDEN)

    serializer = serializer_class(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"{label} validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    obj = serializer.save(created_by=request.user)
    create_audit_log(request, 'create', queryset.model.__name__, obj.id, object_name=str(obj))
    logger.info(f"{label} entry {obj.id} created by {request.user.username}")
    return Response(serializer.data, status=status.HTTP_201_CREATED)


def _detail(request, pk, model, serializer_class, label):
    obj = get_object_or_404(model, pk=pk)

    if request.method == 'GET':
        return Response(serializer_class(obj).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': f'Only managers can modify {label} entries'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        create_audit_log(request, 'delete', model.__name__, obj.id, object_name=str(obj))
        obj.delete()
        logger.info(f"{label} entry {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = serializer_class(obj, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        logger.warning(f"{label} update validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    obj = serializer.save()
    create_audit_log(request, 'update', model.__name__, obj.id, request.data, object_name=str(obj))
    return Response(serializer.data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def stock_purchase_list_create(request):
    """List stock purchases (filters: store, date_from, date_to, category, item_name) or record one"""
    return _list_create(request, StockPurchase.objects.all(), StockPurchaseSerializer, StockPurchaseFilter, 'inventory')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def stock_purchase_detail(request, pk):
    return _detail(request, pk, StockPurchase, StockPurchaseSerializer, 'inventory')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def overhead_list_create(request):
    """List overheads (filters: store, date_from, date_to, category, employee) or record one"""
    return _list_create(request, Overhead.objects.select_related('employee'), OverheadSerializer, OverheadFilter,
                        'overhead')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def overhead_detail(request, pk):
    return _detail(request, pk, Overhead, OverheadSerializer, 'overhead')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def fixed_cost_list_create(request):
    return _list_create(request, FixedCost.objects.all(), FixedCostSerializer, FixedCostFilter, 'fixed cost')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def fixed_cost_detail(request, pk):
    return _detail(request, pk, FixedCost, FixedCostSerializer, 'fixed cost')
