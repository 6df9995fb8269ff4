import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Sum, Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response

from bhandar.core.exceptions import validation_error_response
from bhandar.core import timeutils
from bhandar.core.permissions import is_cluster_head, is_manager_or_cluster_head
from bhandar.core.utils import create_audit_log
from bhandar.notifications.models import Notification
from bhandar.notifications.services import notify
from bhandar.sales.serializers import RejectSerializer
from .filters import EmployeeFilter, TimesheetFilter, LeaveFilter, PayoutFilter
from .models import Employee, Timesheet, Leave, Payout
from .serializers import (
    EmployeeSerializer, EmployeeBriefSerializer, SetupClusterHeadSerializer,
    TimesheetSerializer, LeaveSerializer, PayoutSerializer,
)
from .services import next_employee_id, leave_balance_for

logger = logging.getLogger('bhandar.hr')

User = get_user_model()


def own_employee(user):
    return getattr(user, 'employee_profile', None)


def can_review(user, employee):
    """Cluster heads review everyone; managers review their direct reports"""
    if is_cluster_head(user):
        return True
    manager = employee.manager
    return manager is not None and manager.user_id is not None and manager.user_id == user.id


def visible_employees(user):
    """Employees whose timesheets/leaves the user may see"""
    if is_cluster_head(user) or user.is_staff:
        return Employee.objects.all()
    me = own_employee(user)
    if me is None:
        return Employee.objects.none()
    if me.role == 'manager':
        return Employee.objects.filter(pk=me.pk) | Employee.objects.filter(manager=me)
    return Employee.objects.filter(pk=me.pk)


def _filtered(filter_class, request, queryset):
    filterset = filter_class(request.query_params, queryset=queryset)
    if not filterset.is_valid():
        return None, validation_error_response(filterset.errors)
    return filterset.qs, None


# Employee views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def employee_list_create(request):
    """List employees (filters: role, manager, cluster_head, store, status, search) or create one"""
    if request.method == 'GET':
        queryset = Employee.objects.select_related('manager', 'cluster_head', 'store')
        employees, error = _filtered(EmployeeFilter, request, queryset)
        if error:
            return error
        return Response(EmployeeSerializer(employees, many=True).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can create employees'},
                        status=status.HTTP_403_FORBIDDEN)

    data = request.data.copy() if hasattr(request.data, 'copy') else dict(request.data)
    me = own_employee(request.user)
    if me is not None and me.role == 'manager' and data.get('role', 'employee') == 'employee' and not data.get('manager'):
        data['manager'] = me.pk

    serializer = EmployeeSerializer(data=data)
    if not serializer.is_valid():
        logger.warning(f"Employee creation validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    employee = serializer.save(created_by=request.user)
    create_audit_log(request, 'create', 'Employee', employee.id, object_name=str(employee))
    logger.info(f"Employee {employee.employee_id} created by {request.user.username}")
    return Response(EmployeeSerializer(employee).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def employee_detail(request, pk):
    employee = get_object_or_404(Employee.objects.select_related('manager', 'cluster_head', 'store'), pk=pk)

    if request.method == 'GET':
        return Response(EmployeeSerializer(employee).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can modify employees'},
                        status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        if not is_cluster_head(request.user):
            return Response({'error': 'Only cluster heads can delete employees'}, status=status.HTTP_403_FORBIDDEN)
        create_audit_log(request, 'delete', 'Employee', employee.id, object_name=str(employee))
        employee.delete()
        logger.info(f"Employee {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = EmployeeSerializer(employee, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        logger.warning(f"Employee update validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    employee = serializer.save()
    changes = {k: v for k, v in request.data.items() if k != 'password'}
    create_audit_log(request, 'update', 'Employee', employee.id, changes, object_name=str(employee))
    return Response(EmployeeSerializer(employee).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def employee_next_id(request):
    return Response({'employee_id': next_employee_id()})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def employees_by_manager(request, pk):
    """Direct reports of a manager"""
    manager = get_object_or_404(Employee, pk=pk)
    return Response(EmployeeSerializer(manager.reports.select_related('store'), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def managers_by_cluster_head(request, pk):
    cluster_head = get_object_or_404(Employee, pk=pk, role='cluster_head')
    managers = cluster_head.cluster_managers.filter(role='manager').select_related('store')
    return Response(EmployeeSerializer(managers, many=True).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def employee_assign_manager(request, pk):
    """Set (or clear with null) the manager an employee reports to"""
    if not is_cluster_head(request.user):
        return Response({'error': 'Only cluster heads can assign managers'}, status=status.HTTP_403_FORBIDDEN)

    employee = get_object_or_404(Employee, pk=pk)
    manager_id = request.data.get('manager')
    manager = None
    if manager_id:
        manager = Employee.objects.filter(pk=manager_id).first()
        if manager is None:
            return Response({'error': 'Manager not found'}, status=status.HTTP_404_NOT_FOUND)
        if manager.role != 'manager':
            return Response({'error': 'The selected employee is not a manager'}, status=status.HTTP_400_BAD_REQUEST)
        if manager.pk == employee.pk:
            return Response({'error': 'An employee cannot report to themselves'}, status=status.HTTP_400_BAD_REQUEST)

    employee.manager = manager
    employee.save(update_fields=['manager', 'updated_at'])
    create_audit_log(request, 'assign', 'Employee', employee.id, {'manager': manager_id}, object_name=str(employee))
    logger.info(f"Employee {employee.employee_id} assigned to manager {manager.employee_id if manager else None}")
    return Response(EmployeeSerializer(employee).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def employee_assign_cluster_head(request, pk):
    """Set (or clear with null) the cluster head a manager reports to"""
    if not is_cluster_head(request.user):
        return Response({'error': 'Only cluster heads can assign cluster heads'}, status=status.HTTP_403_FORBIDDEN)

    manager = get_object_or_404(Employee, pk=pk)
    if manager.role != 'manager':
        return Response({'error': 'Only managers can be assigned to a cluster head'},
                        status=status.HTTP_400_BAD_REQUEST)

    cluster_head_id = request.data.get('cluster_head')
    cluster_head = None
    if cluster_head_id:
        cluster_head = Employee.objects.filter(pk=cluster_head_id).first()
        if cluster_head is None:
            return Response({'error': 'Cluster head not found'}, status=status.HTTP_404_NOT_FOUND)
        if cluster_head.role != 'cluster_head':
            return Response({'error': 'The selected employee is not a cluster head'},
                            status=status.HTTP_400_BAD_REQUEST)

    manager.cluster_head = cluster_head
    manager.save(update_fields=['cluster_head', 'updated_at'])
    create_audit_log(request, 'assign', 'Employee', manager.id, {'cluster_head': cluster_head_id},
                     object_name=str(manager))
    return Response(EmployeeSerializer(manager).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def organizational_hierarchy(request):
    """Cluster heads with their managers and each manager's employees"""
    employees = list(Employee.objects.filter(status='active').select_related('store'))
    by_role = {'cluster_head': [], 'manager': [], 'employee': []}
    for employee in employees:
        by_role.setdefault(employee.role, []).append(employee)

    def brief(employee):
        return EmployeeBriefSerializer(employee).data

    def manager_node(manager):
        node = brief(manager)
        node['employees'] = [brief(e) for e in by_role['employee'] if e.manager_id == manager.pk]
        return node

    tree = []
    for head in by_role['cluster_head']:
        node = brief(head)
        node['managers'] = [manager_node(m) for m in by_role['manager'] if m.cluster_head_id == head.pk]
        tree.append(node)

    manager_ids = {m.pk for m in by_role['manager']}
    head_ids = {h.pk for h in by_role['cluster_head']}
    return Response({
        'hierarchy': tree,
        'unassignedManagers': [manager_node(m) for m in by_role['manager'] if m.cluster_head_id not in head_ids],
        'unassignedEmployees': [brief(e) for e in by_role['employee'] if e.manager_id not in manager_ids],
        'stats': {
            'totalClusterHeads': len(by_role['cluster_head']),
            'totalManagers': len(by_role['manager']),
            'totalEmployees': len(by_role['employee']),
        },
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cluster_head_list(request):
    heads = Employee.objects.filter(role='cluster_head').annotate(manager_count=Count('cluster_managers'))
    data = []
    for head in heads:
        entry = EmployeeBriefSerializer(head).data
        entry['manager_count'] = head.manager_count
        data.append(entry)
    return Response(data)


@api_view(['POST'])
@permission_classes([AllowAny])
def setup_cluster_head(request):
    """Bootstrap the first cluster head account"""
    if User.objects.filter(role=User.ROLE_CLUSTER_HEAD).exists() or \
            Employee.objects.filter(role='cluster_head').exists():
        logger.warning("Rejected setup-cluster-head: a cluster head already exists")
        return Response({'error': 'A cluster head already exists'}, status=status.HTTP_409_CONFLICT)

    serializer = SetupClusterHeadSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    data = serializer.validated_data

    with transaction.atomic():
        user = User.objects.create_user(
            username=data['email'],
            email=data['email'],
            password=data['password'],
            first_name=data['name'][:150],
            role=User.ROLE_CLUSTER_HEAD,
        )
        employee = Employee.objects.create(
            employee_id=next_employee_id(),
            name=data['name'],
            email=data['email'],
            phone=data.get('phone', ''),
            role='cluster_head',
            joining_date=timeutils.today(),
            user=user,
            created_by=user,
        )

    create_audit_log(request, 'create', 'Employee', employee.id, {'setup': 'cluster_head'}, user=user,
                     object_name=str(employee))
    logger.info(f"Cluster head {employee.employee_id} set up for {user.email}")
    return Response({
        'success': True,
        'employee': EmployeeSerializer(employee).data,
    }, status=status.HTTP_201_CREATED)


# Timesheet views
def _resolve_timesheet_employee(request, data):
    """Employees may only log their own hours"""
    me = own_employee(request.user)
    if not is_manager_or_cluster_head(request.user):
        if me is None:
            return None
        data['employee'] = me.pk
    elif not data.get('employee') and me is not None:
        data['employee'] = me.pk
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def timesheet_list_create(request):
    """List visible timesheets (filters: employee, status, date_from, date_to) or save one entry"""
    if request.method == 'GET':
        queryset = Timesheet.objects.filter(employee__in=visible_employees(request.user)).select_related('employee')
        timesheets, error = _filtered(TimesheetFilter, request, queryset)
        if error:
            return error
        return Response(TimesheetSerializer(timesheets, many=True).data)

    data = _resolve_timesheet_employee(request, dict(request.data.items()))
    if data is None:
        return Response({'error': 'No employee profile is linked to this account'}, status=status.HTTP_403_FORBIDDEN)

    serializer = TimesheetSerializer(data=data)
    if not serializer.is_valid():
        logger.warning(f"Timesheet validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    timesheet = serializer.save_entry()
    logger.info(f"Timesheet {timesheet.date} saved for {timesheet.employee.employee_id}")
    return Response(TimesheetSerializer(timesheet).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def timesheet_bulk_save(request):
    """Save several entries at once; nothing is saved if any entry is invalid"""
    entries = request.data.get('timesheets') if isinstance(request.data, dict) else None
    if not isinstance(entries, list) or not entries:
        return Response({'error': 'timesheets must be a non-empty array'}, status=status.HTTP_400_BAD_REQUEST)

    serializers_ = []
    errors = {}
    for index, entry in enumerate(entries):
        data = _resolve_timesheet_employee(request, dict(entry) if isinstance(entry, dict) else {})
        if data is None:
            return Response({'error': 'No employee profile is linked to this account'},
                            status=status.HTTP_403_FORBIDDEN)
        serializer = TimesheetSerializer(data=data)
        if serializer.is_valid():
            serializers_.append(serializer)
        else:
            errors[str(index)] = serializer.errors
    if errors:
        logger.warning(f"Bulk timesheet validation failed: {errors}")
        return Response({'error': 'One or more timesheet entries are invalid', 'errors': errors},
                        status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        saved = [serializer.save_entry() for serializer in serializers_]
    logger.info(f"User {request.user.username} saved {len(saved)} timesheet entries")
    return Response({'success': True, 'timesheets': TimesheetSerializer(saved, many=True).data},
                    status=status.HTTP_201_CREATED)


def _review(request, obj, approve, label, notification_type):
    """Approve or reject a timesheet/leave on behalf of the employee's manager or a cluster head"""
    if not can_review(request.user, obj.employee):
        return Response({'error': f"Only the employee's manager or a cluster head can review this {label}"},
                        status=status.HTTP_403_FORBIDDEN)
    if obj.status != obj.STATUS_PENDING:
        return Response({'error': f'Only pending {label}s can be reviewed'}, status=status.HTTP_400_BAD_REQUEST)

    if approve:
        obj.status = obj.STATUS_APPROVED
        obj.approved_by = request.user
        obj.approved_at = timeutils.now()
        action = 'approve'
    else:
        serializer = RejectSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        obj.status = obj.STATUS_REJECTED
        obj.rejected_by = request.user
        obj.rejected_at = timeutils.now()
        obj.rejection_reason = serializer.validated_data['reason']
        action = 'reject'
    obj.save()

    create_audit_log(request, action, obj.__class__.__name__, obj.id, object_name=str(obj))
    notify(obj.employee.user, notification_type, f"{label.capitalize()} {obj.status}",
           f"Your {label} for {timeutils.format_date_ist(getattr(obj, 'date', None) or obj.leave_date)} "
           f"was {obj.status}", related_id=obj.id)
    logger.info(f"{label.capitalize()} {obj.id} {obj.status} by {request.user.username}")
    return None


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def timesheet_approve(request, pk):
    timesheet = get_object_or_404(Timesheet.objects.select_related('employee__manager', 'employee__user'), pk=pk)
    error = _review(request, timesheet, True, 'timesheet', Notification.TYPE_TIMESHEET)
    return error or Response(TimesheetSerializer(timesheet).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def timesheet_reject(request, pk):
    timesheet = get_object_or_404(Timesheet.objects.select_related('employee__manager', 'employee__user'), pk=pk)
    error = _review(request, timesheet, False, 'timesheet', Notification.TYPE_TIMESHEET)
    return error or Response(TimesheetSerializer(timesheet).data)


# Leave views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def leave_list_create(request):
    """List visible leaves or apply for one (balance must be positive)"""
    if request.method == 'GET':
        queryset = Leave.objects.filter(employee__in=visible_employees(request.user)).select_related('employee')
        leaves, error = _filtered(LeaveFilter, request, queryset)
        if error:
            return error
        return Response(LeaveSerializer(leaves, many=True).data)

    data = _resolve_timesheet_employee(request, dict(request.data.items()))
    if data is None:
        return Response({'error': 'No employee profile is linked to this account'}, status=status.HTTP_403_FORBIDDEN)

    serializer = LeaveSerializer(data=data)
    if not serializer.is_valid():
        logger.warning(f"Leave application validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)
    leave = serializer.save()

    manager = leave.employee.manager
    notify(manager.user if manager else None, Notification.TYPE_LEAVE, 'New leave application',
           f"{leave.employee.name} applied for leave on {timeutils.format_date_ist(leave.leave_date)}",
           related_id=leave.id, related_date=leave.leave_date)
    logger.info(f"Leave {leave.leave_date} applied for {leave.employee.employee_id}")
    return Response(LeaveSerializer(leave).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def leave_balance(request, employee_id):
    employee = get_object_or_404(Employee, employee_id=employee_id)
    if not visible_employees(request.user).filter(pk=employee.pk).exists():
        return Response({'error': "You can only view your own or your team's leave balance"},
                        status=status.HTTP_403_FORBIDDEN)
    return Response({'employee_id': employee.employee_id, 'balance': leave_balance_for(employee)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def leave_approve(request, pk):
    leave = get_object_or_404(Leave.objects.select_related('employee__manager', 'employee__user'), pk=pk)
    error = _review(request, leave, True, 'leave', Notification.TYPE_LEAVE)
    return error or Response(LeaveSerializer(leave).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def leave_reject(request, pk):
    leave = get_object_or_404(Leave.objects.select_related('employee__manager', 'employee__user'), pk=pk)
    error = _review(request, leave, False, 'leave', Notification.TYPE_LEAVE)
    return error or Response(LeaveSerializer(leave).data)


# Payout views
def visible_payouts(user):
    """Managers and cluster heads see every payout; others only their own"""
    queryset = Payout.objects.select_related('employee')
    if not is_manager_or_cluster_head(user):
        queryset = queryset.filter(employee__in=visible_employees(user))
    return queryset


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def payout_list_create(request):
    """
    GET: payouts (filters: employee, date_from, date_to)
    POST: {payouts: [{employee, date, amount, notes}, ...]} saved all-or-nothing
    """
    if request.method == 'GET':
        payouts, error = _filtered(PayoutFilter, request, visible_payouts(request.user))
        if error:
            return error
        return Response(PayoutSerializer(payouts, many=True).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can record payouts'},
                        status=status.HTTP_403_FORBIDDEN)

    rows = request.data.get('payouts') if isinstance(request.data, dict) else None
    if not isinstance(rows, list) or not rows:
        return Response({'error': 'payouts must be a non-empty array'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = PayoutSerializer(data=rows, many=True)
    if not serializer.is_valid():
        logger.warning(f"Payout validation failed: {serializer.errors}")
        return Response({'error': 'One or more payouts are invalid', 'errors': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)
    with transaction.atomic():
        payouts = serializer.save(created_by=request.user)
    create_audit_log(request, 'create', 'Payout', 'bulk', {'count': len(payouts)})
    logger.info(f"User {request.user.username} recorded {len(payouts)} payouts")
    return Response(PayoutSerializer(payouts, many=True).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def payout_detail(request, pk):
    payout = get_object_or_404(visible_payouts(request.user), pk=pk)

    if request.method == 'GET':
        return Response(PayoutSerializer(payout).data)

    if not is_manager_or_cluster_head(request.user):
        return Response({'error': 'Only managers or cluster heads can modify payouts'},
                        status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        create_audit_log(request, 'delete', 'Payout', payout.id, object_name=str(payout))
        payout.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = PayoutSerializer(payout, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    payout = serializer.save()
    create_audit_log(request, 'update', 'Payout', payout.id, request.data, object_name=str(payout))
    return Response(PayoutSerializer(payout).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payout_summary(request):
    """Total paid per employee over an optional date range"""
    payouts, error = _filtered(PayoutFilter, request, visible_payouts(request.user))
    if error:
        return error
    rows = payouts.values('employee_id', 'employee__employee_id', 'employee__name').annotate(
        total=Sum('amount'), count=Count('id'),
    ).order_by('employee__employee_id')
    return Response([
        {
            'employee': row['employee_id'],
            'employee_code': row['employee__employee_id'],
            'employee_name': row['employee__name'],
            'total': row['total'],
            'count': row['count'],
        }
        for row in rows
    ])
