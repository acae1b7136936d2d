"""
Recommendation views.

Hybrid (content-based + collaborative) recommendations in both directions:
providers for a service request, and open requests for a provider.
"""
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response
import logging
import time

from bookings.models import ServiceRequest
from bookings.serializers import (
    ServiceRequestRecommendationSerializer,
    ServiceRequestSerializer,
)

from ..models import ProviderProfile
from ..permissions import IsServiceProvider
from ..serializers import (
    ProviderProfileSerializer,
    ProviderRecommendationSerializer,
    RecommendedProvidersQuerySerializer,
    RecommendedRequestsQuerySerializer,
)
from ..services import RecommendationEngine, RecommendationPresenter
from ..throttles import RecommendedProvidersThrottle, RecommendedRequestsThrottle

logger = logging.getLogger(__name__)


class RecommendedProvidersView(APIView):
    """
    GET /api/users/providers/recommended/

    Query params:
        service_request: id de la solicitud (opcional)
        limit: 1-50, default 10
        min_score: 0-1, default 0.3
        include_unavailable: incluir proveedores NOT_AVAILABLE

    Sin service_request devuelve los proveedores verificados ordenados por rating.

    Response (200 OK):
        {
            "service_request": 12,
            "strategy_used": "hybrid",
            "total_results": 2,
            "recommendations": [
                {
                    "id": 3,
                    "user": {...},
                    "skills": ["Plumbing"],
                    "recommendation_score": 0.76,
                    "content_based_score": 0.79,
                    "collaborative_score": 0.71,
                    "recommendation_reason": "Strong skill match, Highly rated by similar clients"
                }
            ],
            "performance_ms": 12.4,
            "fallback": false
        }
    """

    permission_classes = [permissions.IsAuthenticated]
    throttle_classes = [RecommendedProvidersThrottle]

    def get(self, request):
        start_time = time.time()

        query_serializer = RecommendedProvidersQuerySerializer(data=request.query_params)
        if not query_serializer.is_valid():
            return Response(query_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        params = query_serializer.validated_data
        engine = RecommendationEngine()

        if params.get('service_request') is None:
            providers = engine.top_rated_providers(limit=params['limit'])
            serializer = ProviderProfileSerializer(providers, many=True)
            elapsed_ms = (time.time() - start_time) * 1000
            return Response(
                RecommendationPresenter.build_response(
                    strategy='top_rated',
                    recommendations_serialized=serializer.data,
                    elapsed_ms=elapsed_ms,
                ),
                status=status.HTTP_200_OK,
            )

        service_request = get_object_or_404(ServiceRequest, pk=params['service_request'])

        try:
            results = engine.recommend_workers_for(
                service_request,
                limit=params['limit'],
                min_score=params['min_score'],
                include_unavailable=params['include_unavailable'],
            )
            providers = RecommendationPresenter.prepare_provider_data(results)
            serializer = ProviderRecommendationSerializer(providers, many=True)

            elapsed_ms = (time.time() - start_time) * 1000
            response_data = RecommendationPresenter.build_response(
                strategy='hybrid',
                recommendations_serialized=serializer.data,
                elapsed_ms=elapsed_ms,
                service_request_id=service_request.pk,
            )
            return Response(response_data, status=status.HTTP_200_OK)

        except Exception as e:
            logger.exception(f"Unexpected error in provider recommendation: {e}")
            return Response(
                {
                    'error': 'Internal server error',
                    'detail': 'Ocurrió un error procesando la recomendación'
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )


class RecommendedRequestsView(APIView):
    """
    GET /api/users/requests/recommended/

    Solicitudes abiertas recomendadas para el proveedor autenticado.
    Si el motor falla, devuelve las solicitudes abiertas más recientes
    con "fallback": true.
    """

    permission_classes = [IsServiceProvider]
    throttle_classes = [RecommendedRequestsThrottle]

    def get(self, request):
        start_time = time.time()

        query_serializer = RecommendedRequestsQuerySerializer(data=request.query_params)
        if not query_serializer.is_valid():
            return Response(query_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        params = query_serializer.validated_data

        try:
            provider = request.user.provider_profile
        except ProviderProfile.DoesNotExist:
            return Response(
                {'error': 'Provider profile not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        engine = RecommendationEngine()

        try:
            results = engine.recommend_requests_for(
                provider,
                limit=params['limit'],
                min_score=params['min_score'],
            )
            requests = RecommendationPresenter.prepare_request_data(results)
            serialized = ServiceRequestRecommendationSerializer(requests, many=True).data
            strategy, fallback = 'hybrid', False

        except Exception as e:
            logger.exception(f"Request recommendation failed for provider {provider.id}: {e}")
            open_requests = engine.open_requests(limit=params['limit'])
            serialized = ServiceRequestSerializer(open_requests, many=True).data
            strategy, fallback = 'open_requests', True

        elapsed_ms = (time.time() - start_time) * 1000
        return Response(
            RecommendationPresenter.build_response(
                strategy=strategy,
                recommendations_serialized=serialized,
                elapsed_ms=elapsed_ms,
                fallback=fallback,
            ),
            status=status.HTTP_200_OK,
        )
