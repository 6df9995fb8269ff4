from django.urls import path
from .views import inventory_item_list_create, inventory_item_detail, initialize_default_items, inventory_categories

urlpatterns = [
    path('inventory-items/', inventory_item_list_create, name='inventory-item-list-create'),
    path('inventory-items/initialize-defaults/', initialize_default_items, name='inventory-item-initialize-defaults'),
    path('inventory-items/<int:pk>/', inventory_item_detail, name='inventory-item-detail'),
    path('inventory-categories/', inventory_categories, name='inventory-categories'),
]
