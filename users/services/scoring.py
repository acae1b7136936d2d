"""
Scorers del motor de recomendación.

- ``score_content``: similitud proveedor ↔ solicitud a partir de skills,
  rating, reviews, experiencia y trabajos completados.
- ``score_collaborative``: señal basada en historial de reservas.

Ambos promedian solo los factores presentes (con sus pesos), de modo que un
proveedor nuevo sin datos no queda penalizado por campos vacíos.
Las funciones son puras: reciben instancias ya cargadas y no consultan la BD.
"""

import math
from collections import defaultdict
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from bookings.models import Booking, ServiceRequest

# Pesos del score de contenido
SKILL_MATCH_WEIGHT = 0.40
RATING_WEIGHT = 0.25
REVIEWS_WEIGHT = 0.15
EXPERIENCE_WEIGHT = 0.10
JOBS_COMPLETED_WEIGHT = 0.10

MAX_RATING = 5.0
REVIEWS_SATURATION = 10
EXPERIENCE_SATURATION_YEARS = 5.0
JOBS_SATURATION = 20.0

# Pesos del score colaborativo
SUCCESS_RATE_WEIGHT = 0.40
POPULARITY_WEIGHT = 0.30
REQUESTER_PREFERENCE_WEIGHT = 0.30

DEFAULT_COLLABORATIVE_SCORE = 0.5
REQUEST_HISTORY_MATCH_SCORE = 0.8

FULFILLED_REQUEST_STATUSES = frozenset({
    ServiceRequest.Status.COMPLETED,
    ServiceRequest.Status.IN_PROGRESS,
})


def _normalize_category(value: Optional[str]) -> str:
    return (value or '').strip().lower()


def _weighted_average(factors: Sequence[Tuple[float, float]], default: float) -> float:
    """Promedio ponderado de (valor, peso); ``default`` si no hay factores."""
    if not factors:
        return default
    values, weights = zip(*factors)
    score = np.average(values, weights=weights)
    return float(np.clip(score, 0.0, 1.0))


def skill_match_ratio(skills: Iterable[str], category: str) -> float:
    """Fracción de skills que contienen la categoría o están contenidas en ella."""
    skills = list(skills)
    category = _normalize_category(category)
    matching = [
        skill for skill in skills
        if skill and (category in skill.lower() or skill.lower() in category)
    ]
    return len(matching) / max(len(skills), 1)


def content_factors(provider, service_request) -> List[Tuple[float, float]]:
    """
    Factores presentes del score de contenido como pares (valor normalizado, peso).

    Un valor numérico en cero cuenta como ausente.
    """
    factors = []

    skills = provider.skills
    if service_request.service_category and skills is not None:
        factors.append((
            skill_match_ratio(skills, service_request.service_category),
            SKILL_MATCH_WEIGHT,
        ))

    rating = float(provider.average_rating or 0)
    if rating > 0:
        factors.append((min(rating / MAX_RATING, 1.0), RATING_WEIGHT))

    reviews = provider.total_reviews or 0
    if reviews > 0:
        review_score = math.log10(reviews + 1) / math.log10(REVIEWS_SATURATION + 1)
        factors.append((min(review_score, 1.0), REVIEWS_WEIGHT))

    years = provider.years_experience or 0
    if years > 0:
        factors.append((min(years / EXPERIENCE_SATURATION_YEARS, 1.0), EXPERIENCE_WEIGHT))

    jobs = provider.total_jobs_completed or 0
    if jobs > 0:
        factors.append((min(jobs / JOBS_SATURATION, 1.0), JOBS_COMPLETED_WEIGHT))

    return factors


def score_content(provider, service_request) -> float:
    """
    Score content-based entre un proveedor y una solicitud.

    Returns:
        float en [0, 1]; 0 si ningún factor está presente.
    """
    return _weighted_average(content_factors(provider, service_request), default=0.0)


class BookingHistory:
    """
    Índice en memoria del historial de reservas.

    Agrupa las reservas por proveedor y por solicitante una sola vez para
    no recorrer la lista completa por cada candidato.
    """

    def __init__(self, bookings: Iterable[Booking]):
        self.bookings = list(bookings)
        self._by_provider = defaultdict(list)
        self._by_requester = defaultdict(list)
        for booking in self.bookings:
            self._by_provider[booking.provider_id].append(booking)
            self._by_requester[booking.requester_id].append(booking)

    def __len__(self):
        return len(self.bookings)

    def completed_for_provider(self, provider_id) -> List[Booking]:
        return [
            booking for booking in self._by_provider.get(provider_id, [])
            if booking.status == Booking.Status.COMPLETED
        ]

    def for_requester(self, requester_id) -> List[Booking]:
        return self._by_requester.get(requester_id, [])


def _booking_category(booking: Booking) -> str:
    if booking.service_request is None:
        return ''
    return _normalize_category(booking.service_request.service_category)


def score_collaborative(
    provider,
    service_request,
    similar_requests: Sequence[ServiceRequest],
    historical_bookings,
) -> float:
    """
    Score colaborativo basado en historial.

    Factores:
        1. Tasa de éxito del proveedor en la misma categoría (0.40)
        2. Popularidad: fracción de solicitudes similares atendidas (0.30)
        3. Preferencia del solicitante: fracción de sus reservas completadas (0.30)

    Los factores 2 y 3 no dependen del proveedor.

    Args:
        historical_bookings: reservas o un ``BookingHistory`` ya construido

    Returns:
        float en [0, 1]; 0.5 si no hay ningún factor presente.
    """
    if isinstance(historical_bookings, BookingHistory):
        history = historical_bookings
    else:
        history = BookingHistory(historical_bookings)

    factors = []
    category = _normalize_category(service_request.service_category)

    completed = history.completed_for_provider(provider.pk)
    if completed:
        same_category = [b for b in completed if _booking_category(b) == category]
        factors.append((len(same_category) / len(completed), SUCCESS_RATE_WEIGHT))

    if similar_requests:
        fulfilled = [r for r in similar_requests if r.status in FULFILLED_REQUEST_STATUSES]
        factors.append((len(fulfilled) / len(similar_requests), POPULARITY_WEIGHT))

    requester_bookings = history.for_requester(service_request.requester_id)
    if requester_bookings:
        completed_count = sum(
            1 for b in requester_bookings if b.status == Booking.Status.COMPLETED
        )
        factors.append((
            completed_count / len(requester_bookings),
            REQUESTER_PREFERENCE_WEIGHT,
        ))

    return _weighted_average(factors, default=DEFAULT_COLLABORATIVE_SCORE)


def score_request_history(provider_bookings: Iterable[Booking], service_request) -> float:
    """0.8 si el proveedor ya completó un trabajo de la misma categoría, si no 0.5."""
    category = _normalize_category(service_request.service_category)
    for booking in provider_bookings:
        if booking.status == Booking.Status.COMPLETED and _booking_category(booking) == category:
            return REQUEST_HISTORY_MATCH_SCORE
    return DEFAULT_COLLABORATIVE_SCORE
