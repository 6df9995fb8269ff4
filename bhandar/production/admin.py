from django.contrib import admin

from .models import ProductionBatch, ProductionBatchLine, ProductionRequest, ProductionRequestLine, StockThreshold


class ProductionBatchLineInline(admin.TabularInline):
    model = ProductionBatchLine
    extra = 0


@admin.register(ProductionBatch)
class ProductionBatchAdmin(admin.ModelAdmin):
    list_display = ['date', 'production_house', 'approval_status', 'created_by']
    list_filter = ['approval_status', 'production_house']
    inlines = [ProductionBatchLineInline]


class ProductionRequestLineInline(admin.TabularInline):
    model = ProductionRequestLine
    extra = 0


@admin.register(ProductionRequest)
class ProductionRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'store', 'production_house', 'request_date', 'status', 'requested_by']
    list_filter = ['status', 'production_house']
    date_hierarchy = 'request_date'
    inlines = [ProductionRequestLineInline]


@admin.register(StockThreshold)
class StockThresholdAdmin(admin.ModelAdmin):
    list_display = ['store', 'item', 'high', 'medium', 'low']
    list_filter = ['store']
