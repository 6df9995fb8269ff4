from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.db import transaction
from rest_framework import serializers

from .models import Employee, Timesheet, Leave, Payout
from .services import next_employee_id, hours_between, leave_balance_for

User = get_user_model()


class EmployeeSerializer(serializers.ModelSerializer):
    employee_id = serializers.CharField(required=False, max_length=20)
    password = serializers.CharField(write_only=True, required=False, allow_blank=False)
    manager_name = serializers.CharField(source='manager.name', read_only=True, default=None)
    cluster_head_name = serializers.CharField(source='cluster_head.name', read_only=True, default=None)
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)
    has_login = serializers.SerializerMethodField()

    class Meta:
        model = Employee
        fields = ['id', 'employee_id', 'name', 'email', 'phone', 'dob', 'role', 'employment_type', 'joining_date',
                  'status', 'manager', 'manager_name', 'cluster_head', 'cluster_head_name', 'store', 'store_name',
                  'user', 'has_login', 'password', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['id', 'user', 'created_by', 'created_at', 'updated_at']

    def get_has_login(self, obj):
        return obj.user_id is not None

    def validate_employee_id(self, value):
        if self.instance is not None:
            # Immutable once assigned
            return self.instance.employee_id
        value = value.strip().upper()
        if Employee.objects.filter(employee_id=value).exists():
            raise serializers.ValidationError(f'Employee ID {value} is already in use')
        return value

    def validate_email(self, value):
        return value.strip().lower() if value else value

    def validate_manager(self, value):
        if value is not None and value.role != 'manager':
            raise serializers.ValidationError('Assigned manager must have the manager role')
        return value

    def validate_cluster_head(self, value):
        if value is not None and value.role != 'cluster_head':
            raise serializers.ValidationError('Assigned cluster head must have the cluster_head role')
        return value

    def validate(self, attrs):
        password = attrs.get('password')
        if password:
            email = attrs.get('email') or getattr(self.instance, 'email', None)
            if not email:
                raise serializers.ValidationError({'email': 'Email is required to create a login'})
            if self.instance is not None and self.instance.user_id:
                raise serializers.ValidationError({'password': 'This employee already has a login'})
            if User.objects.filter(username=email).exists():
                raise serializers.ValidationError({'email': 'A user with this email already exists'})
            validate_password(password)
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        password = validated_data.pop('password', None)
        if not validated_data.get('employee_id'):
            validated_data['employee_id'] = next_employee_id()
        if password:
            validated_data['user'] = User.objects.create_user(
                username=validated_data['email'],
                email=validated_data['email'],
                password=password,
                first_name=validated_data['name'][:150],
                role=validated_data.get('role', 'employee'),
            )
        return super().create(validated_data)

    @transaction.atomic
    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        validated_data.pop('employee_id', None)
        instance = super().update(instance, validated_data)
        if password:
            instance.user = User.objects.create_user(
                username=instance.email,
                email=instance.email,
                password=password,
                first_name=instance.name[:150],
                role=instance.role,
            )
            instance.save(update_fields=['user', 'updated_at'])
        elif instance.user_id and 'role' in validated_data and instance.user.role != instance.role:
            instance.user.role = instance.role
            instance.user.save(update_fields=['role'])
        return instance


class EmployeeBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = ['id', 'employee_id', 'name', 'email', 'role', 'status', 'store', 'manager', 'cluster_head']


class SetupClusterHeadSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    phone = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(username=value).exists() or User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('A user with this email already exists')
        return value

    def validate_password(self, value):
        validate_password(value)
        return value


class TimesheetSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.name', read_only=True)
    employee_code = serializers.CharField(source='employee.employee_id', read_only=True)

    class Meta:
        model = Timesheet
        fields = ['id', 'employee', 'employee_name', 'employee_code', 'date', 'start_time', 'end_time',
                  'total_hours', 'status', 'approved_by', 'approved_at', 'rejected_by', 'rejected_at',
                  'rejection_reason', 'submitted_at']
        read_only_fields = ['id', 'total_hours', 'status', 'approved_by', 'approved_at', 'rejected_by',
                            'rejected_at', 'rejection_reason', 'submitted_at']
        # Same employee/date replaces the existing entry instead of failing
        validators = []

    def validate(self, attrs):
        start = attrs.get('start_time')
        end = attrs.get('end_time')
        if start is None or end is None:
            raise serializers.ValidationError('Both start time and end time are required')

        total = hours_between(start, end)
        if total <= 0:
            raise serializers.ValidationError({'end_time': 'End time must be after start time'})
        minimum = settings.BHANDAR_MIN_TIMESHEET_HOURS
        if total < minimum:
            raise serializers.ValidationError({'total_hours': f'Minimum {minimum} hours required per entry'})

        on_leave = Leave.objects.filter(
            employee=attrs['employee'],
            leave_date=attrs['date'],
            status__in=[Leave.STATUS_PENDING, Leave.STATUS_APPROVED],
        ).exists()
        if on_leave:
            raise serializers.ValidationError({'date': 'Cannot log hours on a day with a leave application'})

        attrs['total_hours'] = total
        return attrs

    def save_entry(self):
        """Create or replace the entry for (employee, date), resetting it to pending"""
        data = self.validated_data
        timesheet, _ = Timesheet.objects.update_or_create(
            employee=data['employee'],
            date=data['date'],
            defaults={
                'start_time': data['start_time'],
                'end_time': data['end_time'],
                'total_hours': data['total_hours'],
                'status': Timesheet.STATUS_PENDING,
                'approved_by': None,
                'approved_at': None,
                'rejected_by': None,
                'rejected_at': None,
                'rejection_reason': '',
            },
        )
        self.instance = timesheet
        return timesheet


class LeaveSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.name', read_only=True)
    employee_code = serializers.CharField(source='employee.employee_id', read_only=True)

    class Meta:
        model = Leave
        fields = ['id', 'employee', 'employee_name', 'employee_code', 'leave_date', 'reason', 'status',
                  'approved_by', 'approved_at', 'rejected_by', 'rejected_at', 'rejection_reason', 'applied_at']
        read_only_fields = ['id', 'status', 'approved_by', 'approved_at', 'rejected_by', 'rejected_at',
                            'rejection_reason', 'applied_at']

    def validate_reason(self, value):
        if not value.strip():
            raise serializers.ValidationError('Reason is required')
        return value.strip()

    def validate(self, attrs):
        employee = attrs['employee']
        if leave_balance_for(employee) <= 0:
            raise serializers.ValidationError('Insufficient leave balance')
        clash = Leave.objects.filter(
            employee=employee,
            leave_date=attrs['leave_date'],
        ).exclude(status=Leave.STATUS_REJECTED)
        if clash.exists():
            raise serializers.ValidationError({'leave_date': 'A leave already exists for this date'})
        return attrs


class PayoutSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.name', read_only=True)
    employee_code = serializers.CharField(source='employee.employee_id', read_only=True)

    class Meta:
        model = Payout
        fields = ['id', 'employee', 'employee_name', 'employee_code', 'date', 'amount', 'notes', 'created_by',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than 0')
        return value
