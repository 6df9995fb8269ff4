from django.urls import path
from .views import (
    stock_purchase_list_create, stock_purchase_detail,
    overhead_list_create, overhead_detail,
    fixed_cost_list_create, fixed_cost_detail,
)

urlpatterns = [
    path('inventory/', stock_purchase_list_create, name='stock-purchase-list-create'),
    path('inventory/<int:pk>/', stock_purchase_detail, name='stock-purchase-detail'),
    path('overheads/', overhead_list_create, name='overhead-list-create'),
    path('overheads/<int:pk>/', overhead_detail, name='overhead-detail'),
    path('fixed-costs/', fixed_cost_list_create, name='fixed-cost-list-create'),
    path('fixed-costs/<int:pk>/', fixed_cost_detail, name='fixed-cost-detail'),
]
