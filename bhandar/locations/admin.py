from django.contrib import admin
from .models import Store, ProductionHouse


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'production_house', 'manager', 'is_active', 'created_at']
    list_filter = ['is_active', 'production_house']
    search_fields = ['name', 'code']
    ordering = ['name']


@admin.register(ProductionHouse)
class ProductionHouseAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'production_head', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'code']
    ordering = ['name']
