import logging
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import Review
from .ratings import recalculate_provider_rating

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Review)
def update_provider_average_rating(sender, instance, created, **kwargs):
    """
    Cada vez que se crea una review, recalcula el promedio del proveedor.
    """
    if created:
        provider = recalculate_provider_rating(instance.provider)
        logger.info(
            f"Provider {provider.id} rating actualizado: {provider.average_rating}⭐ "
            f"({provider.total_reviews} reviews)"
        )


@receiver(post_delete, sender=Review)
def recalculate_provider_rating_on_delete(sender, instance, **kwargs):
    """
    Cuando se elimina una review, recalcular el rating del proveedor.
    """
    provider = recalculate_provider_rating(instance.provider)
    logger.info(
        f"Provider {provider.id} rating recalculado tras eliminar review: {provider.average_rating}⭐"
    )
