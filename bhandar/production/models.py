from decimal import Decimal

from django.conf import settings
from django.db import models


class ProductionBatch(models.Model):
    """A day's output at a production house, counted per finished product"""
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
    ]

    date = models.DateField(db_index=True)
    production_house = models.ForeignKey('locations.ProductionHouse', on_delete=models.CASCADE,
                                         related_name='batches')
    notes = models.TextField(blank=True)
    approval_status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='approved_batches')
    approved_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   related_name='production_batches')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.production_house} {self.date}"

    class Meta:
        db_table = 'production_batches'
        ordering = ['-date', '-created_at']


class ProductionBatchLine(models.Model):
    batch = models.ForeignKey(ProductionBatch, on_delete=models.CASCADE, related_name='lines')
    item = models.ForeignKey('catalog.InventoryItem', on_delete=models.PROTECT, related_name='batch_lines')
    dough = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    stuffing = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    final = models.PositiveIntegerField(default=0, help_text="Finished pieces produced")

    class Meta:
        db_table = 'production_batch_lines'
        unique_together = [['batch', 'item']]


class ProductionRequest(models.Model):
    """Stock a store asks its production house to prepare and ship"""
    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_IN_PREPARATION = 'in_preparation'
    STATUS_PREPARED = 'prepared'
    STATUS_SHIPPED = 'shipped'
    STATUS_DELIVERED = 'delivered'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_IN_PREPARATION, 'In Preparation'),
        (STATUS_PREPARED, 'Prepared'),
        (STATUS_SHIPPED, 'Shipped'),
        (STATUS_DELIVERED, 'Delivered'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    FLOW = [STATUS_PENDING, STATUS_ACCEPTED, STATUS_IN_PREPARATION, STATUS_PREPARED, STATUS_SHIPPED,
            STATUS_DELIVERED]

    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='production_requests')
    production_house = models.ForeignKey('locations.ProductionHouse', on_delete=models.SET_NULL, null=True,
                                         blank=True, related_name='production_requests')
    request_date = models.DateField(db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True)
    requested_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                     related_name='production_requests')
    accepted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='+')
    accepted_at = models.DateTimeField(null=True, blank=True)
    in_preparation_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                          blank=True, related_name='+')
    in_preparation_at = models.DateTimeField(null=True, blank=True)
    prepared_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='+')
    prepared_at = models.DateTimeField(null=True, blank=True)
    shipped_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='+')
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                     related_name='+')
    delivered_at = models.DateTimeField(null=True, blank=True)
    delivered_date = models.DateField(null=True, blank=True, db_index=True)
    cancelled_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                     related_name='+')
    cancelled_at = models.DateTimeField(null=True, blank=True)
    delay_notified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Request #{self.pk} {self.store} {self.request_date}"

    def next_status(self):
        """The single status this request may move to next, or None at the end of the flow"""
        if self.status not in self.FLOW:
            return None
        index = self.FLOW.index(self.status)
        return self.FLOW[index + 1] if index + 1 < len(self.FLOW) else None

    def can_move_to(self, new_status):
        if new_status == self.STATUS_CANCELLED:
            return self.status == self.STATUS_PENDING
        return new_status == self.next_status()

    class Meta:
        db_table = 'production_requests'
        ordering = ['-request_date', '-created_at']


class ProductionRequestLine(models.Model):
    request = models.ForeignKey(ProductionRequest, on_delete=models.CASCADE, related_name='lines')
    item = models.ForeignKey('catalog.InventoryItem', on_delete=models.PROTECT, related_name='request_lines')
    quantity = models.PositiveIntegerField()

    class Meta:
        db_table = 'production_request_lines'
        unique_together = [['request', 'item']]


class StockThreshold(models.Model):
    """Per-store levels used to flag low stock of a finished product"""
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='stock_thresholds')
    item = models.ForeignKey('catalog.InventoryItem', on_delete=models.CASCADE, related_name='thresholds')
    high = models.PositiveIntegerField(default=600)
    medium = models.PositiveIntegerField(default=300)
    low = models.PositiveIntegerField(default=150)
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='+')
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stock_thresholds'
        unique_together = [['store', 'item']]
