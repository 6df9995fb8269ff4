# Generated manually for the initial purchase, overhead and fixed cost tables

import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

PAYMENT_METHOD_CHOICES = [('cash', 'Cash'), ('online', 'Online'), ('both', 'Cash + Online')]


def payment_fields():
    return [
        ('payment_method', models.CharField(choices=PAYMENT_METHOD_CHOICES, default='cash', max_length=10)),
        ('cash_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
        ('online_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('locations', '0001_initial'),
        ('hr', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='StockPurchase',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *payment_fields(),
                ('date', models.DateField(db_index=True)),
                ('category', models.CharField(choices=[('fresh_produce', 'Fresh Produce'), ('spices_seasonings', 'Spices & Seasonings'), ('dairy', 'Dairy Products'), ('meat', 'Meat & Protein'), ('packaging', 'Packaging Materials'), ('gas_utilities', 'Gas & Utilities'), ('production', 'Production Ingredients'), ('staff_essentials', 'Staff Essentials')], max_length=30)),
                ('item_name', models.CharField(max_length=200)),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=12)),
                ('unit', models.CharField(max_length=30)),
                ('cost_per_unit', models.DecimalField(decimal_places=2, max_digits=12)),
                ('total_cost', models.DecimalField(decimal_places=2, max_digits=12)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_purchases', to=settings.AUTH_USER_MODEL)),
                ('store', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_purchases', to='locations.store')),
            ],
            options={
                'db_table': 'stock_purchases',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Overhead',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *payment_fields(),
                ('date', models.DateField(db_index=True)),
                ('category', models.CharField(choices=[('fuel', 'Fuel Cost'), ('travel', 'Travel Cost'), ('transportation', 'Transportation Cost'), ('marketing', 'Marketing Cost'), ('service_charge', 'Service Charge (Food Aggregators)'), ('repair', 'Repair Cost'), ('party', 'Party Cost'), ('lunch', 'Lunch Cost'), ('personal_expense', 'Personal Expense'), ('miscellaneous', 'Miscellaneous Cost')], max_length=30)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='overheads', to=settings.AUTH_USER_MODEL)),
                ('employee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='personal_expenses', to='hr.employee')),
                ('store', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='overheads', to='locations.store')),
            ],
            options={
                'db_table': 'overheads',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='FixedCost',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *payment_fields(),
                ('date', models.DateField(db_index=True)),
                ('category', models.CharField(choices=[('electricity', 'Electricity'), ('rent', 'Rent'), ('lpg_gas', 'LPG Gas')], max_length=20)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('units', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('unit_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fixed_costs', to=settings.AUTH_USER_MODEL)),
                ('store', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fixed_costs', to='locations.store')),
            ],
            options={
                'db_table': 'fixed_costs',
                'ordering': ['-date', '-created_at'],
            },
        ),
    ]
