from django.conf import settings
from django.db import models

from bhandar.production.ledger import normalize_item_key
from .constants import ITEM_CATEGORY_CHOICES, ENTITY_TYPE_CHOICES, ENTITY_GLOBAL


def normalize_item_name(value):
    """Catalog key, built the same way sales rows are matched against it"""
    return normalize_item_key(value)


class InventoryItemQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def visible_to(self, entity_type=None, entity_id=None):
        """Items linked to the entity plus every global item"""
        if not entity_type:
            return self
        scoped = models.Q(linked_entity_type=entity_type)
        if entity_id:
            scoped &= models.Q(linked_entity_id=str(entity_id))
        return self.filter(scoped | models.Q(linked_entity_type=ENTITY_GLOBAL)).distinct()


class InventoryItem(models.Model):
    """Catalog definition of something that is bought, produced or sold"""
    name = models.CharField(max_length=120, db_index=True)
    display_name = models.CharField(max_length=200)
    category = models.CharField(max_length=30, choices=ITEM_CATEGORY_CHOICES)
    unit = models.CharField(max_length=30)
    linked_entity_type = models.CharField(max_length=20, choices=ENTITY_TYPE_CHOICES, default=ENTITY_GLOBAL)
    linked_entity_id = models.CharField(max_length=50, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='inventory_items')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = InventoryItemQuerySet.as_manager()

    def __str__(self):
        return self.display_name

    class Meta:
        db_table = 'inventory_items'
        ordering = ['category', 'display_name']
        indexes = [
            models.Index(fields=['linked_entity_type', 'linked_entity_id']),
        ]
