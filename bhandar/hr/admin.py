from django.contrib import admin

from .models import Employee, Timesheet, Leave, Payout


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['employee_id', 'name', 'role', 'employment_type', 'status', 'manager', 'cluster_head', 'store']
    list_filter = ['role', 'employment_type', 'status', 'store']
    search_fields = ['employee_id', 'name', 'email']
    raw_id_fields = ['manager', 'cluster_head', 'user']


@admin.register(Timesheet)
class TimesheetAdmin(admin.ModelAdmin):
    list_display = ['employee', 'date', 'start_time', 'end_time', 'total_hours', 'status']
    list_filter = ['status']
    date_hierarchy = 'date'


@admin.register(Leave)
class LeaveAdmin(admin.ModelAdmin):
    list_display = ['employee', 'leave_date', 'status', 'applied_at']
    list_filter = ['status']


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ['employee', 'date', 'amount', 'created_by']
    date_hierarchy = 'date'
