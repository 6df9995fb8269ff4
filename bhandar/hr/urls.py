from django.urls import path
from . import views

urlpatterns = [
    path('employees/', views.employee_list_create, name='employee-list-create'),
    path('employees/next-id/', views.employee_next_id, name='employee-next-id'),
    path('employees/manager/<int:pk>/', views.employees_by_manager, name='employees-by-manager'),
    path('employees/cluster-head/<int:pk>/managers/', views.managers_by_cluster_head,
         name='managers-by-cluster-head'),
    path('employees/<int:pk>/', views.employee_detail, name='employee-detail'),
    path('employees/<int:pk>/assign-manager/', views.employee_assign_manager, name='employee-assign-manager'),
    path('employees/<int:pk>/assign-cluster-head/', views.employee_assign_cluster_head,
         name='employee-assign-cluster-head'),
    path('organizational-hierarchy/', views.organizational_hierarchy, name='organizational-hierarchy'),
    path('cluster-heads/', views.cluster_head_list, name='cluster-head-list'),
    path('setup-cluster-head/', views.setup_cluster_head, name='setup-cluster-head'),
    path('timesheets/', views.timesheet_list_create, name='timesheet-list-create'),
    path('timesheets/bulk/', views.timesheet_bulk_save, name='timesheet-bulk'),
    path('timesheets/<int:pk>/approve/', views.timesheet_approve, name='timesheet-approve'),
    path('timesheets/<int:pk>/reject/', views.timesheet_reject, name='timesheet-reject'),
    path('leaves/', views.leave_list_create, name='leave-list-create'),
    path('leaves/balance/<str:employee_id>/', views.leave_balance, name='leave-balance'),
    path('leaves/<int:pk>/approve/', views.leave_approve, name='leave-approve'),
    path('leaves/<int:pk>/reject/', views.leave_reject, name='leave-reject'),
    path('payouts/', views.payout_list_create, name='payout-list-create'),
    path('payouts/summary/', views.payout_summary, name='payout-summary'),
    path('payouts/<int:pk>/', views.payout_detail, name='payout-detail'),
]
