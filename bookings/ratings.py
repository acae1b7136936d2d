import logging
from decimal import Decimal

from django.db.models import Avg, Count

from users.models import ProviderProfile

from .models import Review

logger = logging.getLogger(__name__)


def recalculate_provider_rating(provider: ProviderProfile) -> ProviderProfile:
    """
    Recalcula average_rating y total_reviews del proveedor desde sus reviews.

    Sin reviews, el rating vuelve a 0.00.
    """
    stats = Review.objects.filter(booking__provider=provider).aggregate(
        avg_rating=Avg('rating'),
        total=Count('id'),
    )
    avg_rating = stats['avg_rating']

    provider.average_rating = (
        Decimal(str(round(avg_rating, 2))) if avg_rating else Decimal('0.00')
    )
    provider.total_reviews = stats['total']
    provider.save(update_fields=['average_rating', 'total_reviews'])
    return provider


def rebuild_all_provider_ratings() -> int:
    """Recalcula el rating de todos los proveedores; devuelve cuántos cambiaron."""
    changed = 0
    for provider in ProviderProfile.objects.all():
        before = (provider.average_rating, provider.total_reviews)
        recalculate_provider_rating(provider)
        if (provider.average_rating, provider.total_reviews) != before:
            changed += 1
    logger.info(f"Provider ratings rebuilt: {changed} changed")
    return changed
