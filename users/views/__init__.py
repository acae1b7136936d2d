"""
Users app views.

    - recommendation_views: hybrid provider / request recommendations
"""

from .recommendation_views import (
    RecommendedProvidersView,
    RecommendedRequestsView,
)

__all__ = [
    'RecommendedProvidersView',
    'RecommendedRequestsView',
]
