import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bhandar.core.exceptions import validation_error_response
from bhandar.core.permissions import is_manager_or_cluster_head
from bhandar.core.utils import create_audit_log
from .constants import (
    ITEM_CATEGORY_CHOICES, ENTITY_TYPE_CHOICES, ENTITY_GLOBAL, PURCHASE_CATEGORIES, PURCHASE_CATEGORY_ITEMS,
    OVERHEAD_CATEGORIES, FIXED_COST_CATEGORIES, DEFAULT_MOMO_ITEMS,
)
from .models import InventoryItem
from .serializers import InventoryItemSerializer

logger = logging.getLogger('bhandar.catalog')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def inventory_item_list_create(request):
    """
    List active catalog items or create one.

    Query params:
    - entityType / entityId: items linked to that entity plus all global items
    - category: finished_product, raw_material or sauce_chutney
    """
    if request.method == 'GET':
        items = InventoryItem.objects.active().visible_to(
            request.query_params.get('entityType'),
            request.query_params.get('entityId'),
        )
        category = request.query_params.get('category')
        if category:
            items = items.filter(category=category)
        return Response(InventoryItemSerializer(items, many=True).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can create inventory items'},
                        status=status.HTTP_403_FORBIDDEN)

    serializer = InventoryItemSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Inventory item validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    item = serializer.save(created_by=request.user)
    create_audit_log(request, 'create', 'InventoryItem', item.id, object_name=item.display_name)
    logger.info(f"Inventory item '{item.name}' created by {request.user.username}")
    return Response(InventoryItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def inventory_item_detail(request, pk):
    item = get_object_or_404(InventoryItem, pk=pk)

    if request.method == 'GET':
        return Response(InventoryItemSerializer(item).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can modify inventory items'},
                        status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        # Soft delete keeps history (sales, recalibrations) readable
        item.is_active = False
        item.save(update_fields=['is_active', 'updated_at'])
        create_audit_log(request, 'delete', 'InventoryItem', item.id, object_name=item.display_name)
        logger.info(f"Inventory item {pk} deactivated by {request.user.username}")
        return Response({'success': True})

    serializer = InventoryItemSerializer(item, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        logger.warning(f"Inventory item update validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    item = serializer.save()
    create_audit_log(request, 'update', 'InventoryItem', item.id, request.data, object_name=item.display_name)
    return Response(InventoryItemSerializer(item).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def initialize_default_items(request):
    """Create the default global momo products that do not exist yet"""
    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can initialize items'},
                        status=status.HTTP_403_FORBIDDEN)

    existing = set(
        InventoryItem.objects.active().filter(linked_entity_type=ENTITY_GLOBAL).values_list('name', flat=True)
    )
    created = []
    with transaction.atomic():
        for name, display_name in DEFAULT_MOMO_ITEMS:
            if name in existing:
                continue
            created.append(InventoryItem.objects.create(
                name=name,
                display_name=display_name,
                category='finished_product',
                unit='pieces',
                linked_entity_type=ENTITY_GLOBAL,
                created_by=request.user,
            ))

    logger.info(f"Initialized {len(created)} default items for {request.user.username}")
    return Response({
        'success': True,
        'created': len(created),
        'skipped': len(DEFAULT_MOMO_ITEMS) - len(created),
        'items': InventoryItemSerializer(created, many=True).data,
    }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_categories(request):
    return Response({
        'itemCategories': dict(ITEM_CATEGORY_CHOICES),
        'entityTypes': dict(ENTITY_TYPE_CHOICES),
        'purchaseCategories': PURCHASE_CATEGORIES,
        'purchaseCategoryItems': PURCHASE_CATEGORY_ITEMS,
        'overheadCategories': OVERHEAD_CATEGORIES,
        'fixedCostCategories': FIXED_COST_CATEGORIES,
    })
