from rest_framework import serializers

from .constants import ENTITY_GLOBAL
from .models import InventoryItem, normalize_item_name


class InventoryItemSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)

    class Meta:
        model = InventoryItem
        fields = ['id', 'name', 'display_name', 'category', 'unit', 'linked_entity_type', 'linked_entity_id',
                  'is_active', 'created_by', 'created_by_name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    def validate_name(self, value):
        name = normalize_item_name(value)
        if not name:
            raise serializers.ValidationError('Name is required')
        return name

    def validate(self, attrs):
        instance = self.instance
        entity_type = attrs.get('linked_entity_type', getattr(instance, 'linked_entity_type', ENTITY_GLOBAL))
        entity_id = attrs.get('linked_entity_id', getattr(instance, 'linked_entity_id', None))

        if entity_type == ENTITY_GLOBAL:
            attrs['linked_entity_id'] = None
            entity_id = None
        elif not entity_id:
            raise serializers.ValidationError({'linked_entity_id': 'Linked entity ID is required for non-global items'})
        else:
            attrs['linked_entity_id'] = str(entity_id)
            entity_id = str(entity_id)

        name = attrs.get('name', getattr(instance, 'name', None))
        duplicates = InventoryItem.objects.active().filter(
            name__iexact=name,
            linked_entity_type=entity_type,
            linked_entity_id=entity_id,
        )
        if instance is not None:
            duplicates = duplicates.exclude(pk=instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError({'name': f'An item named "{name}" already exists in this context'})
        return attrs
