"""
Business logic services for users app.

Services handle complex business logic separate from views:
    - RecommendationEngine: hybrid provider / request recommendations
    - RecommendationPresenter: Response formatting
    - skill_consistency: validation and repair of the dual skill arrays
"""

from .recommendation_engine import RecommendationEngine
from .recommendation_presenter import RecommendationPresenter

__all__ = [
    'RecommendationEngine',
    'RecommendationPresenter',
]
