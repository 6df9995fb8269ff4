from django.urls import path
from .views import sales_list_create, sales_detail, sales_approve, sales_reject, sales_summary, item_sales

urlpatterns = [
    path('sales/', sales_list_create, name='sales-list-create'),
    path('sales/summary/', sales_summary, name='sales-summary'),
    path('sales/<int:pk>/', sales_detail, name='sales-detail'),
    path('sales/<int:pk>/approve/', sales_approve, name='sales-approve'),
    path('sales/<int:pk>/reject/', sales_reject, name='sales-reject'),
    path('item-sales/', item_sales, name='item-sales'),
]
