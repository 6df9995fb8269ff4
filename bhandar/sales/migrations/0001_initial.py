# Generated manually for the initial sales record and item sale tables

import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


def money(**kwargs):
    return models.DecimalField(decimal_places=2, max_digits=12, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('locations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SalesRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(db_index=True)),
                ('offline_sales', money(default=Decimal('0.00'))),
                ('paytm_amount', money(default=Decimal('0.00'))),
                ('cash_amount', money(default=Decimal('0.00'))),
                ('online_sales', money(default=Decimal('0.00'))),
                ('online_sales_commission', money(default=Decimal('0.00'))),
                ('employee_salary', money(default=Decimal('0.00'))),
                ('actual_cash_in_hand', money(blank=True, null=True)),
                ('cash_offset', money(default=Decimal('0.00'))),
                ('notes', models.TextField(blank=True)),
                ('approval_status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=10)),
                ('approval_required', models.BooleanField(default=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_sales', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sales_records', to=settings.AUTH_USER_MODEL)),
                ('rejected_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rejected_sales', to=settings.AUTH_USER_MODEL)),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sales_records', to='locations.store')),
            ],
            options={
                'db_table': 'sales_records',
                'ordering': ['-date', 'store'],
                'unique_together': {('store', 'date')},
            },
        ),
        migrations.CreateModel(
            name='ItemSale',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_name', models.CharField(max_length=100)),
                ('quantity', money(default=Decimal('0'))),
                ('revenue', money(default=Decimal('0'))),
                ('date', models.DateField(db_index=True)),
                ('period', models.CharField(default='custom', max_length=20)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('store', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='item_sales', to='locations.store')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='item_sales', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'item_sales',
                'ordering': ['-date', 'item_name'],
            },
        ),
    ]
