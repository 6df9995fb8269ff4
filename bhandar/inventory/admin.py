from django.contrib import admin

from .models import StockPurchase, Overhead, FixedCost


@admin.register(StockPurchase)
class StockPurchaseAdmin(admin.ModelAdmin):
    list_display = ['date', 'item_name', 'category', 'quantity', 'unit', 'total_cost', 'payment_method', 'store']
    list_filter = ['category', 'payment_method', 'store']
    search_fields = ['item_name']
    date_hierarchy = 'date'


@admin.register(Overhead)
class OverheadAdmin(admin.ModelAdmin):
    list_display = ['date', 'category', 'amount', 'payment_method', 'store', 'employee']
    list_filter = ['category', 'payment_method', 'store']
    date_hierarchy = 'date'


@admin.register(FixedCost)
class FixedCostAdmin(admin.ModelAdmin):
    list_display = ['date', 'category', 'amount', 'units', 'unit_price', 'store']
    list_filter = ['category', 'store']
    date_hierarchy = 'date'
