"""
Cache invalidation signals
Order writes invalidate the cached dashboard statistics
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .cache_utils import invalidate_order_stats_cache

logger = logging.getLogger(__name__)


@receiver(post_save, sender='shipping.Order')
@receiver(post_delete, sender='shipping.Order')
def invalidate_order_stats_on_change(sender, instance, **kwargs):
    logger.debug(f"Order {instance.pk} changed, invalidating stats cache")
    invalidate_order_stats_cache()
