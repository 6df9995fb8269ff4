"""
Cached store lookups.

Store lists are read on almost every dashboard request and change rarely,
so they are cached and invalidated from model signals.
"""
import logging

from django.core.cache import cache
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import Store, ProductionHouse

logger = logging.getLogger(__name__)

STORE_LIST_KEY = 'store_list:active'
STORE_LIST_CACHE_TTL = 600  # 10 minutes


def get_cached_store_list():
    cached_data = cache.get(STORE_LIST_KEY)
    if cached_data is not None:
        logger.debug("Cache hit for store list")
    return cached_data


def cache_store_list(data, ttl=STORE_LIST_CACHE_TTL):
    cache.set(STORE_LIST_KEY, data, ttl)
    logger.debug(f"Cached store list with {len(data)} stores")


def invalidate_store_list():
    cache.delete(STORE_LIST_KEY)
    logger.debug("Invalidated store list cache")


@receiver(post_save, sender=Store)
@receiver(post_delete, sender=Store)
@receiver(post_save, sender=ProductionHouse)
@receiver(post_delete, sender=ProductionHouse)
def store_changed(sender, instance, **kwargs):
    invalidate_store_list()
