"""
Recommendation Engine para SkillConnect - Recomendación híbrida

Combina dos señales por candidato:
    - Content-based: skills, rating, reviews, experiencia, trabajos completados
    - Collaborative: historial de reservas del proveedor, de la categoría y del solicitante

y las fusiona (60% content + 40% collaborative) para rankear.

Direcciones:
    - recommend_workers_for(service_request): proveedores para una solicitud
    - recommend_requests_for(provider): solicitudes abiertas para un proveedor

El motor es de solo lectura y no guarda estado entre llamadas; los errores
del ORM se propagan al llamador.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar

from bookings.models import Booking, ServiceRequest
from users.models import ProviderProfile, User

from .ranking import ScoredCandidate, match_reason, rank, recommendation_reason
from .scoring import BookingHistory, score_collaborative, score_content, score_request_history

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RecommendationEngine:
    """
    Motor de recomendación híbrido.

    Attributes:
        workers (int): hilos para puntuar candidatos en paralelo (1 = secuencial)

    Examples:
        >>> engine = RecommendationEngine()
        >>> results = engine.recommend_workers_for(service_request, limit=5)
        >>> results[0].entity, results[0].hybrid_score, results[0].reason
    """

    SIMILAR_REQUESTS_LIMIT = 50
    OPEN_REQUESTS_LIMIT = 100
    HISTORY_STATUSES = (Booking.Status.COMPLETED, Booking.Status.IN_PROGRESS)

    def __init__(self, workers: int = 1):
        self.workers = max(int(workers), 1)

    # ------------------------------------------------------------------
    # Proveedores para una solicitud
    # ------------------------------------------------------------------

    def recommend_workers_for(
        self,
        service_request: ServiceRequest,
        limit: int = 10,
        min_score: float = 0.3,
        include_unavailable: bool = False,
    ) -> List[ScoredCandidate]:
        """
        Recomienda proveedores para una solicitud de servicio.

        Args:
            service_request: solicitud objetivo
            limit: máximo de resultados
            min_score: score híbrido mínimo
            include_unavailable: incluir proveedores NOT_AVAILABLE

        Returns:
            Lista de ScoredCandidate (entity = ProviderProfile) ordenada por score.
            Lista vacía si no hay proveedores elegibles.
        """
        start_time = time.time()

        providers = list(self.eligible_providers(include_unavailable))
        if not providers:
            logger.info(
                f"No eligible providers for request {service_request.pk} "
                f"({service_request.service_category})"
            )
            return []

        history = BookingHistory(
            Booking.objects
            .filter(status__in=self.HISTORY_STATUSES)
            .select_related('service_request')
        )
        similar_requests = list(
            ServiceRequest.objects
            .filter(service_category__iexact=service_request.service_category.strip())
            .exclude(pk=service_request.pk)
            .order_by('-created_at')[:self.SIMILAR_REQUESTS_LIMIT]
        )

        def score(provider):
            return ScoredCandidate(
                entity=provider,
                content_score=score_content(provider, service_request),
                collaborative_score=score_collaborative(
                    provider, service_request, similar_requests, history
                ),
            )

        results = rank(
            self._score_all(providers, score),
            min_score=min_score,
            limit=limit,
            reason_builder=recommendation_reason,
        )

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Worker recommendations: request={service_request.pk}, "
            f"candidates={len(providers)}, history={len(history)}, "
            f"results={len(results)}, time={elapsed_ms:.2f}ms"
        )
        return results

    def eligible_providers(self, include_unavailable: bool = False):
        """Perfiles verificados de proveedores activos, en orden estable."""
        providers = ProviderProfile.objects.filter(
            is_verified=True,
            user__is_active=True,
            user__role=User.Role.SERVICE_PROVIDER,
        ).select_related('user').order_by('id')

        if not include_unavailable:
            providers = providers.exclude(availability=ProviderProfile.Availability.NOT_AVAILABLE)
        return providers

    def top_rated_providers(self, limit: int = 10):
        """Estrategia sin solicitud: proveedores verificados por rating (sin scoring)."""
        return self.eligible_providers().order_by('-average_rating', '-total_reviews', 'id')[:limit]

    # ------------------------------------------------------------------
    # Solicitudes para un proveedor
    # ------------------------------------------------------------------

    def recommend_requests_for(
        self,
        provider: ProviderProfile,
        limit: int = 10,
        min_score: float = 0.3,
    ) -> List[ScoredCandidate]:
        """
        Recomienda solicitudes abiertas a un proveedor.

        El score colaborativo es 0.8 si el proveedor ya completó un trabajo
        de la misma categoría, 0.5 en otro caso.

        Returns:
            Lista de ScoredCandidate (entity = ServiceRequest) ordenada por score.
        """
        start_time = time.time()

        open_requests = list(self.open_requests(self.OPEN_REQUESTS_LIMIT))
        provider_history = list(
            Booking.objects
            .filter(provider=provider, status__in=self.HISTORY_STATUSES)
            .select_related('service_request')
        )

        def score(service_request):
            return ScoredCandidate(
                entity=service_request,
                content_score=score_content(provider, service_request),
                collaborative_score=score_request_history(provider_history, service_request),
            )

        results = rank(
            self._score_all(open_requests, score),
            min_score=min_score,
            limit=limit,
            reason_builder=match_reason,
        )

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Request recommendations: provider={provider.pk}, "
            f"candidates={len(open_requests)}, history={len(provider_history)}, "
            f"results={len(results)}, time={elapsed_ms:.2f}ms"
        )
        return results

    def open_requests(self, limit: int = 10):
        """Solicitudes OPEN no expiradas, más recientes primero."""
        return (
            ServiceRequest.objects
            .open_for_recommendation()
            .select_related('requester')
            .order_by('-created_at', '-id')[:limit]
        )

    # ------------------------------------------------------------------

    def _score_all(self, items: Sequence[T], scorer: Callable[[T], ScoredCandidate]) -> List[ScoredCandidate]:
        """Puntúa cada candidato conservando el orden de entrada."""
        if self.workers == 1 or len(items) < 2:
            return [scorer(item) for item in items]

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(scorer, items))
