from rest_framework import serializers
from django.contrib.auth import get_user_model

from .models import ProviderProfile

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'role', 'skills']
        read_only_fields = ['id', 'role', 'email', 'skills']


class ProviderProfileSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    skills = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = ProviderProfile
        fields = [
            'id',
            'user',
            'skills',
            'bio',
            'years_experience',
            'hourly_rate',
            'availability',
            'is_verified',
            'average_rating',
            'total_reviews',
            'total_jobs_completed',
        ]
        read_only_fields = fields


class ProviderRecommendationSerializer(ProviderProfileSerializer):
    """
    Perfil de proveedor + metadata de recomendación.

    Los campos extra los agrega RecommendationPresenter.prepare_provider_data.
    """
    recommendation_score = serializers.FloatField(read_only=True)
    content_based_score = serializers.FloatField(read_only=True)
    collaborative_score = serializers.FloatField(read_only=True)
    recommendation_reason = serializers.CharField(read_only=True)

    class Meta(ProviderProfileSerializer.Meta):
        fields = ProviderProfileSerializer.Meta.fields + [
            'recommendation_score',
            'content_based_score',
            'collaborative_score',
            'recommendation_reason',
        ]


class RecommendedProvidersQuerySerializer(serializers.Serializer):
    """Query params de GET /api/users/providers/recommended/"""
    service_request = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, default=10, min_value=1, max_value=50)
    min_score = serializers.FloatField(required=False, default=0.3, min_value=0.0, max_value=1.0)
    include_unavailable = serializers.BooleanField(required=False, default=False)


class RecommendedRequestsQuerySerializer(serializers.Serializer):
    """Query params de GET /api/users/requests/recommended/"""
    limit = serializers.IntegerField(required=False, default=10, min_value=1, max_value=50)
    min_score = serializers.FloatField(required=False, default=0.3, min_value=0.0, max_value=1.0)
