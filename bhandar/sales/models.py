from decimal import Decimal

from django.conf import settings
from django.db import models


class SalesRecord(models.Model):
    """A store's takings for one day, approved by a cluster head"""
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    date = models.DateField(db_index=True)
    store = models.ForeignKey('locations.Store', on_delete=models.CASCADE, related_name='sales_records')
    offline_sales = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    paytm_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    cash_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    online_sales = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    online_sales_commission = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    employee_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    actual_cash_in_hand = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    cash_offset = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    approval_status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    approval_required = models.BooleanField(default=True)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='approved_sales')
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='rejected_sales')
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   related_name='sales_records')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.store} {self.date}"

    @property
    def gross_sales(self):
        return self.offline_sales + self.online_sales

    @property
    def net_sales(self):
        return self.gross_sales - self.online_sales_commission

    @property
    def cash_discrepancy(self):
        if self.actual_cash_in_hand is None:
            return Decimal('0.00')
        return self.actual_cash_in_hand - self.cash_amount

    class Meta:
        db_table = 'sales_records'
        ordering = ['-date', 'store']
        unique_together = [['store', 'date']]


class ItemSale(models.Model):
    """Per-item sales figures uploaded from a POS export"""
    item_name = models.CharField(max_length=100)
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    revenue = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    date = models.DateField(db_index=True)
    period = models.CharField(max_length=20, default='custom')
    store = models.ForeignKey('locations.Store', on_delete=models.SET_NULL, null=True, blank=True,
                              related_name='item_sales')
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='item_sales')
    uploaded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.item_name} x {self.quantity} ({self.date})"

    class Meta:
        db_table = 'item_sales'
        ordering = ['-date', 'item_name']
