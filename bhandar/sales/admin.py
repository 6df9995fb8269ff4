from django.contrib import admin

from .models import SalesRecord, ItemSale


@admin.register(SalesRecord)
class SalesRecordAdmin(admin.ModelAdmin):
    list_display = ['date', 'store', 'offline_sales', 'online_sales', 'cash_amount', 'approval_status', 'created_by']
    list_filter = ['approval_status', 'store']
    date_hierarchy = 'date'
    readonly_fields = ['approved_by', 'approved_at', 'rejected_by', 'rejected_at', 'created_at', 'updated_at']


@admin.register(ItemSale)
class ItemSaleAdmin(admin.ModelAdmin):
    list_display = ['date', 'item_name', 'quantity', 'revenue', 'period', 'store']
    list_filter = ['period', 'store']
    search_fields = ['item_name']
