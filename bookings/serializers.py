import logging

from django.db import transaction
from django.db.models import F
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from users.models import ProviderProfile

from .models import Booking, ServiceRequest
from .transitions import get_valid_booking_transitions

logger = logging.getLogger(__name__)


class ServiceRequestSerializer(serializers.ModelSerializer):
    requester = serializers.EmailField(source='requester.email', read_only=True)

    class Meta:
        model = ServiceRequest
        fields = [
            'id', 'requester', 'title', 'service_category', 'notes',
            'min_budget', 'max_budget', 'status', 'expires_at', 'created_at',
        ]
        read_only_fields = fields


class ServiceRequestRecommendationSerializer(ServiceRequestSerializer):
    """Solicitud + metadata agregada por RecommendationPresenter.prepare_request_data."""
    recommendation_score = serializers.FloatField(read_only=True)
    match_reason = serializers.CharField(read_only=True)

    class Meta(ServiceRequestSerializer.Meta):
        fields = ServiceRequestSerializer.Meta.fields + ['recommendation_score', 'match_reason']


class BookingSerializer(serializers.ModelSerializer):
    requester = serializers.EmailField(source='requester.email', read_only=True)
    provider = serializers.EmailField(source='provider.user.email', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'requester', 'provider', 'service_request', 'status',
            'completion_notes', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class BookingStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = Booking
        fields = ['status', 'completion_notes']

    def validate_status(self, value):
        current_status = self.instance.status
        allowed_statuses = get_valid_booking_transitions(current_status)

        if value not in allowed_statuses:
            valid = ', '.join(sorted(allowed_statuses)) or 'none'
            raise serializers.ValidationError(
                _(f"Cannot transition from {current_status} to {value}. Valid transitions: {valid}.")
            )

        return value

    @transaction.atomic
    def update(self, instance, validated_data):
        previous_status = instance.status
        booking = super().update(instance, validated_data)

        if booking.status == Booking.Status.COMPLETED and previous_status != Booking.Status.COMPLETED:
            ProviderProfile.objects.filter(pk=booking.provider_id).update(
                total_jobs_completed=F('total_jobs_completed') + 1
            )
            logger.info(f"Booking #{booking.id} completada; provider {booking.provider_id} +1 trabajo")

        return booking
