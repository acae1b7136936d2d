"""
Recommendation Response Presenter.

Handles the presentation layer for recommendation results.
Transforms engine output (ScoredCandidate lists) into API-friendly data.
"""
from typing import Any, Dict, List, Optional

from .ranking import ScoredCandidate


class RecommendationPresenter:
    """
    Prepares recommendation data for API responses.

    Responsibilities:
        - Enrich provider / request objects with recommendation metadata
        - Format response structure
    """

    @staticmethod
    def prepare_provider_data(results: List[ScoredCandidate]) -> List:
        """
        Enrich provider profiles with their scores and reason.

        Args:
            results: ranked candidates whose entity is a ProviderProfile

        Returns:
            List of enriched ProviderProfile instances, in ranking order
        """
        providers = []
        for candidate in results:
            provider = candidate.entity
            provider.recommendation_score = round(candidate.hybrid_score, 4)
            provider.content_based_score = round(candidate.content_score, 4)
            provider.collaborative_score = round(candidate.collaborative_score, 4)
            provider.recommendation_reason = candidate.reason
            providers.append(provider)
        return providers

    @staticmethod
    def prepare_request_data(results: List[ScoredCandidate]) -> List:
        """Enrich service requests with recommendation_score and match_reason."""
        requests = []
        for candidate in results:
            service_request = candidate.entity
            service_request.recommendation_score = round(candidate.hybrid_score, 4)
            service_request.match_reason = candidate.reason
            requests.append(service_request)
        return requests

    @staticmethod
    def build_response(
        strategy: str,
        recommendations_serialized: List[Dict],
        elapsed_ms: float,
        service_request_id: Optional[int] = None,
        fallback: bool = False,
    ) -> Dict[str, Any]:
        """
        Build the final API response structure.

        Args:
            strategy: Strategy used (hybrid/top_rated/open_requests)
            recommendations_serialized: Serialized items
            elapsed_ms: Response time in milliseconds
            service_request_id: Target request, if any
            fallback: Whether the engine failed and plain results were returned

        Returns:
            Complete API response dict
        """
        response = {
            'strategy_used': strategy,
            'total_results': len(recommendations_serialized),
            'recommendations': recommendations_serialized,
            'performance_ms': round(elapsed_ms, 2),
            'fallback': fallback,
        }
        if service_request_id is not None:
            response['service_request'] = service_request_id
        return response
