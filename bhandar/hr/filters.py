import django_filters

from .models import Employee, Timesheet, Leave, Payout


class EmployeeFilter(django_filters.FilterSet):
    role = django_filters.ChoiceFilter(choices=Employee.ROLE_CHOICES)
    manager = django_filters.NumberFilter(field_name='manager_id')
    cluster_head = django_filters.NumberFilter(field_name='cluster_head_id')
    store = django_filters.NumberFilter(field_name='store_id')
    status = django_filters.ChoiceFilter(choices=Employee.STATUS_CHOICES)
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Employee
        fields = ['role', 'manager', 'cluster_head', 'store', 'status']

    def filter_search(self, queryset, name, value):
        return queryset.filter(name__icontains=value) | queryset.filter(employee_id__icontains=value)


class DatedFilter(django_filters.FilterSet):
    employee = django_filters.NumberFilter(field_name='employee_id')
    status = django_filters.ChoiceFilter(choices=Timesheet.STATUS_CHOICES)


class TimesheetFilter(DatedFilter):
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')

    class Meta:
        model = Timesheet
        fields = ['employee', 'status', 'date_from', 'date_to']


class LeaveFilter(DatedFilter):
    date_from = django_filters.DateFilter(field_name='leave_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='leave_date', lookup_expr='lte')

    class Meta:
        model = Leave
        fields = ['employee', 'status', 'date_from', 'date_to']


class PayoutFilter(django_filters.FilterSet):
    employee = django_filters.NumberFilter(field_name='employee_id')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')

    class Meta:
        model = Payout
        fields = ['employee', 'date_from', 'date_to']
