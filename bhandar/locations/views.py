import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bhandar.core.exceptions import validation_error_response
from bhandar.core.permissions import is_cluster_head
from bhandar.core.utils import create_audit_log
from .cache import get_cached_store_list, cache_store_list
from .models import Store, ProductionHouse
from .serializers import StoreSerializer, ProductionHouseSerializer

logger = logging.getLogger('bhandar.locations')

User = get_user_model()


def _forbidden(message):
    return Response({'error': message}, status=status.HTTP_403_FORBIDDEN)


def _save_unique(serializer, label):
    """Save a serializer, translating code clashes into a 400"""
    try:
        return serializer.save(), None
    except IntegrityError as e:
        logger.error(f"IntegrityError saving {label}: {str(e)}", exc_info=True)
        return None, Response({'error': f'A {label} with this code already exists'}, status=status.HTTP_400_BAD_REQUEST)


# Store views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def store_list_create(request):
    """List active stores or create a new store (create requires cluster head)"""
    if request.method == 'GET':
        include_inactive = request.query_params.get('include_inactive') == 'true'
        if not include_inactive:
            cached_data = get_cached_store_list()
            if cached_data is not None:
                return Response(cached_data)

        stores = Store.objects.select_related('production_house', 'manager')
        if not include_inactive:
            stores = stores.filter(is_active=True)
        data = StoreSerializer(stores, many=True).data
        if not include_inactive:
            cache_store_list(data)
        return Response(data)

    if not is_cluster_head(request.user):
        logger.warning(f"User {request.user.username} attempted to create store without cluster head role")
        return _forbidden('Only cluster heads can create stores')

    serializer = StoreSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Store creation validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    store, error = _save_unique(serializer, 'store')
    if error:
        return error
    create_audit_log(request, 'create', 'Store', store.id, object_name=store.name)
    logger.info(f"Store '{store.name}' created by {request.user.username}")
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def store_detail(request, pk):
    """Retrieve, update or delete a store (update/delete requires cluster head)"""
    store = get_object_or_404(Store, pk=pk)

    if request.method == 'GET':
        return Response(StoreSerializer(store).data)

    if not is_cluster_head(request.user):
        logger.warning(f"User {request.user.username} attempted to modify store {pk} without cluster head role")
        return _forbidden('Only cluster heads can modify stores')

    if request.method == 'DELETE':
        logger.info(f"User {request.user.username} deleting store {pk} ({store.name})")
        create_audit_log(request, 'delete', 'Store', store.id, object_name=store.name)
        store.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = StoreSerializer(store, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        logger.warning(f"Store update validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    store, error = _save_unique(serializer, 'store')
    if error:
        return error
    create_audit_log(request, 'update', 'Store', store.id, request.data, object_name=store.name)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def store_assign_production_house(request, pk):
    """Link a store to the production house that supplies it"""
    if not is_cluster_head(request.user):
        return _forbidden('Only cluster heads can assign production houses')

    store = get_object_or_404(Store, pk=pk)
    house_id = request.data.get('production_house')
    house = None
    if house_id:
        house = ProductionHouse.objects.filter(pk=house_id, is_active=True).first()
        if not house:
            return Response({'error': 'Production house not found'}, status=status.HTTP_404_NOT_FOUND)

    store.production_house = house
    store.save(update_fields=['production_house', 'updated_at'])
    create_audit_log(request, 'assign', 'Store', store.id, {'production_house': house_id}, object_name=store.name)
    logger.info(f"Store {store.name} assigned to production house {house.name if house else None}")
    return Response(StoreSerializer(store).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def store_assign_manager(request, pk):
    """Make a manager account the in-charge of a store"""
    if not is_cluster_head(request.user):
        return _forbidden('Only cluster heads can assign store managers')

    store = get_object_or_404(Store, pk=pk)
    user_id = request.data.get('manager')
    manager = None
    if user_id:
        manager = User.objects.filter(pk=user_id, is_active=True).first()
        if not manager:
            return Response({'error': 'Manager not found'}, status=status.HTTP_404_NOT_FOUND)
        if manager.role != User.ROLE_MANAGER:
            return Response({'error': 'The specified user is not a manager'}, status=status.HTTP_400_BAD_REQUEST)

    store.manager = manager
    store.save(update_fields=['manager', 'updated_at'])
    create_audit_log(request, 'assign', 'Store', store.id, {'manager': user_id}, object_name=store.name)
    return Response(StoreSerializer(store).data)


# Production house views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def production_house_list_create(request):
    """List production houses or create one (create requires cluster head)"""
    if request.method == 'GET':
        houses = ProductionHouse.objects.select_related('production_head')
        if request.query_params.get('include_inactive') != 'true':
            houses = houses.filter(is_active=True)
        return Response(ProductionHouseSerializer(houses, many=True).data)

    if not is_cluster_head(request.user):
        return _forbidden('Only cluster heads can create production houses')

    serializer = ProductionHouseSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    house, error = _save_unique(serializer, 'production house')
    if error:
        return error
    create_audit_log(request, 'create', 'ProductionHouse', house.id, object_name=house.name)
    logger.info(f"Production house '{house.name}' created by {request.user.username}")
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def production_house_detail(request, pk):
    """Retrieve, update or delete a production house"""
    house = get_object_or_404(ProductionHouse, pk=pk)

    if request.method == 'GET':
        return Response(ProductionHouseSerializer(house).data)

    if not is_cluster_head(request.user):
        return _forbidden('Only cluster heads can modify production houses')

    if request.method == 'DELETE':
        create_audit_log(request, 'delete', 'ProductionHouse', house.id, object_name=house.name)
        house.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ProductionHouseSerializer(house, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    house, error = _save_unique(serializer, 'production house')
    if error:
        return error
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def production_house_assign_head(request, pk):
    """Make a user the production head (in-charge) of a production house"""
    if not is_cluster_head(request.user):
        return _forbidden('Only cluster heads can assign production heads')

    house = get_object_or_404(ProductionHouse, pk=pk)
    user_id = request.data.get('production_head')
    head = None
    if user_id:
        head = User.objects.filter(pk=user_id, is_active=True).first()
        if not head:
            return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

    house.production_head = head
    house.save(update_fields=['production_head', 'updated_at'])
    create_audit_log(request, 'assign', 'ProductionHouse', house.id, {'production_head': user_id}, object_name=house.name)
    return Response(ProductionHouseSerializer(house).data)
