"""Employee id allocation, leave balance and timesheet hour arithmetic"""
import re
from datetime import datetime, date as date_cls
from decimal import Decimal

from django.conf import settings

from bhandar.core import timeutils
from .models import Employee, Leave

EMPLOYEE_ID_PREFIX = 'BM'
EMPLOYEE_ID_PATTERN = re.compile(r'^BM(\d+)$')


def next_employee_id():
    """BM + the highest existing sequence number plus one, zero padded to 3 digits"""
    highest = 0
    for employee_id in Employee.objects.filter(employee_id__startswith=EMPLOYEE_ID_PREFIX).values_list(
            'employee_id', flat=True):
        match = EMPLOYEE_ID_PATTERN.match(employee_id)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{EMPLOYEE_ID_PREFIX}{highest + 1:03d}"


def calculate_leave_balance(joining_date, used_leaves, today=None):
    """
    Leaves credited this calendar year minus the ones already used.

    Credit accrues per month from the joining month (or January for people
    who joined in an earlier year) up to and including the current month.
    """
    today = today or timeutils.today()
    per_month = settings.BHANDAR_LEAVES_PER_MONTH
    if joining_date is None:
        joining_date = date_cls(today.year, 1, 1)
    if joining_date > today:
        return 0

    if joining_date.year == today.year:
        months = today.month - joining_date.month + 1
    else:
        months = today.month
    return max(0, months * per_month - used_leaves)


def leave_balance_for(employee, today=None):
    today = today or timeutils.today()
    used = Leave.objects.filter(
        employee=employee,
        status=Leave.STATUS_APPROVED,
        leave_date__year=today.year,
    ).count()
    return calculate_leave_balance(employee.joining_date, used, today)


def hours_between(start_time, end_time):
    """Decimal hours from start to end on the same day; negative when end precedes start"""
    anchor = date_cls(2000, 1, 1)
    delta = datetime.combine(anchor, end_time) - datetime.combine(anchor, start_time)
    return (Decimal(delta.total_seconds()) / Decimal(3600)).quantize(Decimal('0.01'))
