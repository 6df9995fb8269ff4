from django.contrib import admin

from .models import InventoryItem


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ['display_name', 'name', 'category', 'unit', 'linked_entity_type', 'linked_entity_id', 'is_active']
    list_filter = ['category', 'linked_entity_type', 'is_active']
    search_fields = ['name', 'display_name']
