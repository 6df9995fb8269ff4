# Generated manually for the initial stock recalibration tables

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StockRecalibration',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('location_type', models.CharField(choices=[('store', 'Store'), ('production_house', 'Production House')], max_length=20)),
                ('location_id', models.PositiveIntegerField()),
                ('location_name', models.CharField(max_length=200)),
                ('date', models.DateField()),
                ('month', models.CharField(db_index=True, help_text='YYYY-MM', max_length=7)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=10)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('rejected_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('submitted_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='submitted_recalibrations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'stock_recalibrations',
                'ordering': ['-date', '-created_at'],
                'indexes': [models.Index(fields=['location_type', 'location_id', 'month'], name='stock_recal_locatio_8d4f6a_idx')],
            },
        ),
        migrations.CreateModel(
            name='RecalibrationItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_key', models.CharField(max_length=120)),
                ('item_name', models.CharField(max_length=200)),
                ('category', models.CharField(blank=True, max_length=30)),
                ('unit', models.CharField(blank=True, max_length=30)),
                ('system_quantity', models.IntegerField(default=0)),
                ('actual_quantity', models.IntegerField(default=0)),
                ('difference', models.IntegerField(default=0)),
                ('adjustment_type', models.CharField(blank=True, choices=[('wastage', 'Wastage'), ('counting_error', 'Counting Error')], max_length=20, null=True)),
                ('notes', models.TextField(blank=True)),
                ('recalibration', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='recalibration.stockrecalibration')),
            ],
            options={
                'db_table': 'recalibration_items',
                'ordering': ['item_name'],
            },
        ),
    ]
