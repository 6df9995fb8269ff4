import logging

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .exceptions import validation_error_response
from .models import User, AuditLog
from .permissions import IsStaffOrClusterHead, is_cluster_head, is_manager_or_cluster_head
from .serializers import (
    UserSerializer, SignupSerializer, FixRoleSerializer,
    BhandarTokenObtainPairSerializer, AuditLogSerializer,
)
from .utils import create_audit_log

logger = logging.getLogger('bhandar.core')


class LoginView(TokenObtainPairView):
    serializer_class = BhandarTokenObtainPairSerializer


class RefreshView(TokenRefreshView):
    pass


def issue_tokens(user):
    refresh = BhandarTokenObtainPairSerializer.get_token(user)
    return {'access': str(refresh.access_token), 'refresh': str(refresh)}


@api_view(['POST'])
@permission_classes([AllowAny])
def signup(request):
    """Create a login account; employees are linked to their employee record"""
    serializer = SignupSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Signup validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)

    from bhandar.hr.models import Employee

    employee_id = serializer.validated_data.get('employee_id')
    with transaction.atomic():
        user = serializer.save()
        if employee_id:
            employee = Employee.objects.filter(employee_id=employee_id, user__isnull=True).first()
            if employee:
                employee.email = user.email
                employee.user = user
                employee.save(update_fields=['email', 'user', 'updated_at'])
                logger.info(f"Linked user {user.email} to employee {employee.employee_id}")
            else:
                logger.warning(f"Signup for {user.email}: employee {employee_id} not found or already linked")

    logger.info(f"User {user.email} signed up with role {user.role}")
    return Response({
        'success': True,
        'user': UserSerializer(user).data,
        **issue_tokens(user),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role, organisational links and capability flags"""
    user = request.user
    data = UserSerializer(user).data

    employee = getattr(user, 'employee_profile', None)
    data['employee_id'] = employee.employee_id if employee else None
    data['store_id'] = employee.store_id if employee and employee.store_id else None

    managed_store = user.managed_stores.filter(is_active=True).first()
    if managed_store and not data['store_id']:
        data['store_id'] = managed_store.id
    headed_house = user.headed_production_houses.filter(is_active=True).first()
    data['production_house_id'] = headed_house.id if headed_house else None

    data['can_approve_sales'] = is_cluster_head(user)
    data['can_manage_hierarchy'] = is_cluster_head(user)
    data['can_approve_recalibrations'] = is_manager_or_cluster_head(user)
    data['can_record_sales'] = user.is_superuser or user.role == User.ROLE_MANAGER
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def fix_role(request):
    """Set the role of an existing account"""
    serializer = FixRoleSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    email = serializer.validated_data['email']
    role = serializer.validated_data['role']
    user = User.objects.filter(email__iexact=email).first()
    if not user:
        return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

    previous = user.role
    user.role = role
    user.save(update_fields=['role', 'updated_at'])
    create_audit_log(request, 'update', 'User', user.id, {'role': {'from': previous, 'to': role}}, object_name=user.email)
    logger.info(f"Role of {email} changed from {previous} to {role} by {request.user.username}")
    return Response({'success': True, 'message': f'Role updated to {role}. Please log out and log back in.'})


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    return Response({'status': 'ok'})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffOrClusterHead])
def audit_log_list(request):
    """List audit logs with optional action/model filters"""
    logs = AuditLog.objects.select_related('user')
    action = request.query_params.get('action')
    model_name = request.query_params.get('model_name')
    if action:
        logs = logs.filter(action=action)
    if model_name:
        logs = logs.filter(model_name=model_name)
    serializer = AuditLogSerializer(logs[:500], many=True)
    return Response(serializer.data)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def clear_data(request):
    """Delete the caller's own purchases, overheads and sales entries"""
    from bhandar.inventory.models import StockPurchase, Overhead
    from bhandar.sales.models import SalesRecord

    with transaction.atomic():
        purchases, _ = StockPurchase.objects.filter(created_by=request.user).delete()
        overheads, _ = Overhead.objects.filter(created_by=request.user).delete()
        sales, _ = SalesRecord.objects.filter(created_by=request.user).delete()

    create_audit_log(request, 'clear', 'User', request.user.id,
                     {'purchases': purchases, 'overheads': overheads, 'sales': sales})
    logger.info(f"User {request.user.username} cleared {purchases} purchases, {overheads} overheads, {sales} sales")
    return Response({'success': True, 'message': 'All data cleared successfully'})
