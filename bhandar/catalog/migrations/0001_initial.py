# Generated manually for the initial inventory item catalog

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
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=120)),
                ('display_name', models.CharField(max_length=200)),
                ('category', models.CharField(choices=[('finished_product', 'Finished Product'), ('raw_material', 'Raw Material'), ('sauce_chutney', 'Sauce & Chutney')], max_length=30)),
                ('unit', models.CharField(max_length=30)),
                ('linked_entity_type', models.CharField(choices=[('store', 'Store'), ('production_house', 'Production House'), ('global', 'Global')], default='global', max_length=20)),
                ('linked_entity_id', models.CharField(blank=True, max_length=50, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_items', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'inventory_items',
                'ordering': ['category', 'display_name'],
                'indexes': [models.Index(fields=['linked_entity_type', 'linked_entity_id'], name='inventory_i_linked__3b8d21_idx')],
            },
        ),
    ]
