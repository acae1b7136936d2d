from django.db.models.signals import post_save
from django.dispatch import receiver
from django.contrib.auth import get_user_model
from .models import ProviderProfile
import logging

User = get_user_model()
logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_provider_profile(sender, instance, created, **kwargs):
    """
    Crea automáticamente un ProviderProfile cuando se registra un usuario con rol SERVICE_PROVIDER.
    """
    if created and instance.role == User.Role.SERVICE_PROVIDER:
        ProviderProfile.objects.create(user=instance)
        logger.info(f"ProviderProfile creado automáticamente para usuario {instance.email}")
