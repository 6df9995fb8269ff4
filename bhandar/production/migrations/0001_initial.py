# Generated manually for the initial production batch, request and threshold tables

import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


def user_fk(**kwargs):
    return models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                             to=settings.AUTH_USER_MODEL, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('locations', '0001_initial'),
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ProductionBatch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(db_index=True)),
                ('notes', models.TextField(blank=True)),
                ('approval_status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved')], default='pending', max_length=10)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', user_fk(related_name='approved_batches')),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='production_batches', to=settings.AUTH_USER_MODEL)),
                ('production_house', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='batches', to='locations.productionhouse')),
            ],
            options={
                'db_table': 'production_batches',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ProductionBatchLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('dough', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10)),
                ('stuffing', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10)),
                ('final', models.PositiveIntegerField(default=0, help_text='Finished pieces produced')),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='production.productionbatch')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='batch_lines', to='catalog.inventoryitem')),
            ],
            options={
                'db_table': 'production_batch_lines',
                'unique_together': {('batch', 'item')},
            },
        ),
        migrations.CreateModel(
            name='ProductionRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('request_date', models.DateField(db_index=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('in_preparation', 'In Preparation'), ('prepared', 'Prepared'), ('shipped', 'Shipped'), ('delivered', 'Delivered'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('accepted_at', models.DateTimeField(blank=True, null=True)),
                ('in_preparation_at', models.DateTimeField(blank=True, null=True)),
                ('prepared_at', models.DateTimeField(blank=True, null=True)),
                ('shipped_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_date', models.DateField(blank=True, db_index=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('delay_notified_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('accepted_by', user_fk(related_name='+')),
                ('in_preparation_by', user_fk(related_name='+')),
                ('prepared_by', user_fk(related_name='+')),
                ('shipped_by', user_fk(related_name='+')),
                ('delivered_by', user_fk(related_name='+')),
                ('cancelled_by', user_fk(related_name='+')),
                ('requested_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='production_requests', to=settings.AUTH_USER_MODEL)),
                ('production_house', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='production_requests', to='locations.productionhouse')),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='production_requests', to='locations.store')),
            ],
            options={
                'db_table': 'production_requests',
                'ordering': ['-request_date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ProductionRequestLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField()),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='request_lines', to='catalog.inventoryitem')),
                ('request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='production.productionrequest')),
            ],
            options={
                'db_table': 'production_request_lines',
                'unique_together': {('request', 'item')},
            },
        ),
        migrations.CreateModel(
            name='StockThreshold',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('high', models.PositiveIntegerField(default=600)),
                ('medium', models.PositiveIntegerField(default=300)),
                ('low', models.PositiveIntegerField(default=150)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='thresholds', to='catalog.inventoryitem')),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_thresholds', to='locations.store')),
                ('updated_by', user_fk(related_name='+')),
            ],
            options={
                'db_table': 'stock_thresholds',
                'unique_together': {('store', 'item')},
            },
        ),
    ]
