"""
Custom throttling classes para el sistema de recomendación.

Rates configurados en REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']:
    - RecommendedProvidersThrottle: 60 req/min
    - RecommendedRequestsThrottle: 60 req/min
"""

from rest_framework.throttling import UserRateThrottle


class RecommendedProvidersThrottle(UserRateThrottle):
    """
    Throttle para proveedores recomendados.

    Cada llamada carga todos los proveedores elegibles y el historial de
    reservas, por eso tiene un límite propio.
    """
    scope = 'recommended_providers'


class RecommendedRequestsThrottle(UserRateThrottle):
    scope = 'recommended_requests'
