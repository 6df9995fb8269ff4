from django.contrib import admin

from .models import StockRecalibration, RecalibrationItem


class RecalibrationItemInline(admin.TabularInline):
    model = RecalibrationItem
    extra = 0


@admin.register(StockRecalibration)
class StockRecalibrationAdmin(admin.ModelAdmin):
    list_display = ['location_name', 'location_type', 'month', 'date', 'status', 'submitted_by']
    list_filter = ['location_type', 'status', 'month']
    inlines = [RecalibrationItemInline]
