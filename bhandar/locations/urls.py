from django.urls import path
from .views import (
    store_list_create, store_detail, store_assign_production_house, store_assign_manager,
    production_house_list_create, production_house_detail, production_house_assign_head,
)

urlpatterns = [
    path('stores/', store_list_create, name='store-list-create'),
    path('stores/<int:pk>/', store_detail, name='store-detail'),
    path('stores/<int:pk>/assign-production-house/', store_assign_production_house, name='store-assign-production-house'),
    path('stores/<int:pk>/assign-manager/', store_assign_manager, name='store-assign-manager'),
    path('production-houses/', production_house_list_create, name='production-house-list-create'),
    path('production-houses/<int:pk>/', production_house_detail, name='production-house-detail'),
    path('production-houses/<int:pk>/assign-head/', production_house_assign_head, name='production-house-assign-head'),
]
