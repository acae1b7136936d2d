from datetime import timedelta

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


def default_expiration():
    """Las solicitudes expiran 24 horas después de publicarse."""
    return timezone.now() + timedelta(hours=24)


class ServiceRequestQuerySet(models.QuerySet):

    def expired(self):
        """Solicitudes abiertas u ofertadas cuya fecha de expiración ya pasó."""
        return self.filter(
            status__in=[ServiceRequest.Status.OPEN, ServiceRequest.Status.OFFERED],
            expires_at__lt=timezone.now(),
        )

    def open_for_recommendation(self):
        return self.filter(
            status=ServiceRequest.Status.OPEN,
            expires_at__gt=timezone.now(),
        )


class ServiceRequest(models.Model):
    class Status(models.TextChoices):
        OPEN = 'OPEN', _('Open')
        OFFERED = 'OFFERED', _('Offered')
        IN_PROGRESS = 'IN_PROGRESS', _('In Progress')
        COMPLETED = 'COMPLETED', _('Completed')
        CANCELLED = 'CANCELLED', _('Cancelled')

    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='service_requests',
        verbose_name=_('Requester')
    )
    title = models.CharField(_('Title'), max_length=200)
    service_category = models.CharField(_('Service Category'), max_length=100, db_index=True)
    notes = models.TextField(_('Notes'), blank=True)
    min_budget = models.DecimalField(_('Minimum Budget'), max_digits=10, decimal_places=2, default=0)
    max_budget = models.DecimalField(_('Maximum Budget'), max_digits=10, decimal_places=2, default=0)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.OPEN,
        verbose_name=_('Status')
    )
    cancellation_reason = models.CharField(_('Cancellation Reason'), max_length=255, blank=True)
    expires_at = models.DateTimeField(_('Expires At'), default=default_expiration)
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created At'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Updated At'))

    objects = ServiceRequestQuerySet.as_manager()

    class Meta:
        verbose_name = _('Service Request')
        verbose_name_plural = _('Service Requests')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', '-created_at'], name='request_status_created_idx'),
        ]

    def __str__(self):
        return f"Request #{self.pk} - {self.service_category} ({self.status})"


class Booking(models.Model):
    class Status(models.TextChoices):
        APPLIED = 'APPLIED', _('Applied')
        ACCEPTED = 'ACCEPTED', _('Accepted')
        IN_PROGRESS = 'IN_PROGRESS', _('In Progress')
        COMPLETED = 'COMPLETED', _('Completed')
        CANCELLED = 'CANCELLED', _('Cancelled')
        DECLINED = 'DECLINED', _('Declined')

    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='requested_bookings',
        verbose_name=_('Requester')
    )
    provider = models.ForeignKey(
        'users.ProviderProfile',
        on_delete=models.CASCADE,
        related_name='bookings',
        verbose_name=_('Provider')
    )
    service_request = models.ForeignKey(
        ServiceRequest,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bookings',
        verbose_name=_('Service Request')
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACCEPTED,
        verbose_name=_('Status')
    )
    completion_notes = models.TextField(_('Completion Notes'), blank=True)
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created At'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Updated At'))

    class Meta:
        verbose_name = _('Booking')
        verbose_name_plural = _('Bookings')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['provider', 'status'], name='booking_provider_status_idx'),
            models.Index(fields=['requester', 'provider', 'status'], name='booking_req_prov_status_idx'),
        ]

    def __str__(self):
        return f"Booking #{self.pk} - {self.requester.email} → {self.provider.user.email} ({self.status})"


class Review(models.Model):
    booking = models.OneToOneField(
        Booking,
        on_delete=models.CASCADE,
        related_name='review',
        verbose_name=_('Booking')
    )
    rating = models.PositiveSmallIntegerField(
        _('Rating'),
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(_('Comment'), blank=True)
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created At'))

    class Meta:
        verbose_name = _('Review')
        verbose_name_plural = _('Reviews')
        ordering = ['-created_at']

    def __str__(self):
        return f"Review for booking #{self.booking_id} ({self.rating}★)"

    @property
    def provider(self):
        return self.booking.provider
