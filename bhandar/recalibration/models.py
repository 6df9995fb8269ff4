from django.conf import settings
from django.db import models

from bhandar.catalog.constants import ENTITY_STORE, ENTITY_PRODUCTION_HOUSE


class StockRecalibration(models.Model):
    """Monthly physical count of finished stock at one location"""
    LOCATION_TYPE_CHOICES = [
        (ENTITY_STORE, 'Store'),
        (ENTITY_PRODUCTION_HOUSE, 'Production House'),
    ]
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    location_type = models.CharField(max_length=20, choices=LOCATION_TYPE_CHOICES)
    location_id = models.PositiveIntegerField()
    location_name = models.CharField(max_length=200)
    date = models.DateField()
    month = models.CharField(max_length=7, db_index=True, help_text="YYYY-MM")
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    submitted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                     related_name='submitted_recalibrations')
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='+')
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='+')
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.location_name} {self.month}"

    class Meta:
        db_table = 'stock_recalibrations'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['location_type', 'location_id', 'month']),
        ]


class RecalibrationItem(models.Model):
    ADJUSTMENT_WASTAGE = 'wastage'
    ADJUSTMENT_COUNTING_ERROR = 'counting_error'
    ADJUSTMENT_CHOICES = [
        (ADJUSTMENT_WASTAGE, 'Wastage'),
        (ADJUSTMENT_COUNTING_ERROR, 'Counting Error'),
    ]

    recalibration = models.ForeignKey(StockRecalibration, on_delete=models.CASCADE, related_name='items')
    item_key = models.CharField(max_length=120)
    item_name = models.CharField(max_length=200)
    category = models.CharField(max_length=30, blank=True)
    unit = models.CharField(max_length=30, blank=True)
    system_quantity = models.IntegerField(default=0)
    actual_quantity = models.IntegerField(default=0)
    difference = models.IntegerField(default=0)
    adjustment_type = models.CharField(max_length=20, choices=ADJUSTMENT_CHOICES, null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'recalibration_items'
        ordering = ['item_name']
