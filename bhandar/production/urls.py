from django.urls import path
from . import views

urlpatterns = [
    path('production-batches/', views.batch_list_create, name='production-batch-list-create'),
    path('production-batches/<int:pk>/', views.batch_detail, name='production-batch-detail'),
    path('production-batches/<int:pk>/approve/', views.batch_approve, name='production-batch-approve'),
    path('production-requests/', views.request_list_create, name='production-request-list-create'),
    path('production-requests/check-pending/', views.check_pending_requests, name='production-request-check-pending'),
    path('production-requests/<int:pk>/', views.request_detail, name='production-request-detail'),
    path('production-requests/<int:pk>/status/', views.request_update_status, name='production-request-status'),
    path('stores/<int:pk>/stock-thresholds/', views.stock_thresholds, name='store-stock-thresholds'),
    path('stock/status/', views.stock_status_view, name='stock-status'),
]
