from decimal import Decimal

from django.conf import settings
from django.db import models

from bhandar.catalog.constants import PURCHASE_CATEGORIES, OVERHEAD_CATEGORIES, FIXED_COST_CATEGORIES, as_choices


class PaymentFields(models.Model):
    """How an expense was paid; "both" splits the amount across cash and online"""
    PAYMENT_CASH = 'cash'
    PAYMENT_ONLINE = 'online'
    PAYMENT_BOTH = 'both'
    PAYMENT_METHOD_CHOICES = [
        (PAYMENT_CASH, 'Cash'),
        (PAYMENT_ONLINE, 'Online'),
        (PAYMENT_BOTH, 'Cash + Online'),
    ]

    payment_method = models.CharField(max_length=10, choices=PAYMENT_METHOD_CHOICES, default=PAYMENT_CASH)
    cash_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    online_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        abstract = True


class StockPurchase(PaymentFields):
    """Raw material bought for a store or kitchen"""
    date = models.DateField(db_index=True)
    category = models.CharField(max_length=30, choices=as_choices(PURCHASE_CATEGORIES))
    item_name = models.CharField(max_length=200)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit = models.CharField(max_length=30)
    cost_per_unit = models.DecimalField(max_digits=12, decimal_places=2)
    total_cost = models.DecimalField(max_digits=12, decimal_places=2)
    store = models.ForeignKey('locations.Store', on_delete=models.SET_NULL, null=True, blank=True,
                              related_name='stock_purchases')
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   related_name='stock_purchases')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.item_name} ({self.date})"

    class Meta:
        db_table = 'stock_purchases'
        ordering = ['-date', '-created_at']


class Overhead(PaymentFields):
    """Variable running cost such as fuel, travel or repairs"""
    date = models.DateField(db_index=True)
    category = models.CharField(max_length=30, choices=as_choices(OVERHEAD_CATEGORIES))
    description = models.CharField(max_length=255, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    store = models.ForeignKey('locations.Store', on_delete=models.SET_NULL, null=True, blank=True,
                              related_name='overheads')
    employee = models.ForeignKey('hr.Employee', on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name='personal_expenses')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   related_name='overheads')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_category_display()} {self.amount} ({self.date})"

    class Meta:
        db_table = 'overheads'
        ordering = ['-date', '-created_at']


class FixedCost(PaymentFields):
    """Recurring cost: electricity, rent or LPG refills"""
    date = models.DateField(db_index=True)
    category = models.CharField(max_length=20, choices=as_choices(FIXED_COST_CATEGORIES))
    description = models.CharField(max_length=255, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    units = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    store = models.ForeignKey('locations.Store', on_delete=models.SET_NULL, null=True, blank=True,
                              related_name='fixed_costs')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                   related_name='fixed_costs')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_category_display()} {self.amount} ({self.date})"

    class Meta:
        db_table = 'fixed_costs'
        ordering = ['-date', '-created_at']
