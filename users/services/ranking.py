"""
Fusión híbrida y ranking de candidatos.

hybrid = 0.6 * content + 0.4 * collaborative
"""

from dataclasses import dataclass, replace
from operator import attrgetter
from typing import Any, Callable, Iterable, List, Optional

CONTENT_WEIGHT = 0.6
COLLABORATIVE_WEIGHT = 0.4

STRONG_SCORE_THRESHOLD = 0.7
EXCELLENT_RATING = 4.5
EXPERIENCED_JOBS = 20


@dataclass(frozen=True)
class ScoredCandidate:
    """Candidato (proveedor o solicitud) con sus scores; no se persiste."""
    entity: Any
    content_score: float
    collaborative_score: float
    hybrid_score: float = 0.0
    reason: str = ''


def fuse(content_score: float, collaborative_score: float) -> float:
    return CONTENT_WEIGHT * content_score + COLLABORATIVE_WEIGHT * collaborative_score


def recommendation_reason(candidate: ScoredCandidate) -> str:
    """Razón legible para un proveedor recomendado."""
    provider = candidate.entity
    reasons = []

    if candidate.content_score > STRONG_SCORE_THRESHOLD:
        reasons.append("Strong skill match")
    if candidate.collaborative_score > STRONG_SCORE_THRESHOLD:
        reasons.append("Highly rated by similar clients")
    if float(getattr(provider, 'average_rating', 0) or 0) >= EXCELLENT_RATING:
        reasons.append("Excellent ratings")
    if (getattr(provider, 'total_jobs_completed', 0) or 0) > EXPERIENCED_JOBS:
        reasons.append("Experienced provider")

    return ", ".join(reasons) if reasons else "Good overall match"


def match_reason(candidate: ScoredCandidate) -> str:
    """Razón legible para una solicitud recomendada a un proveedor."""
    reasons = []

    if candidate.content_score > STRONG_SCORE_THRESHOLD:
        reasons.append("Matches your skills")
    if candidate.collaborative_score > STRONG_SCORE_THRESHOLD:
        reasons.append("Similar to your completed work")

    return ", ".join(reasons) if reasons else "Good match for your profile"


def rank(
    candidates: Iterable[ScoredCandidate],
    min_score: float = 0.3,
    limit: Optional[int] = 10,
    reason_builder: Callable[[ScoredCandidate], str] = recommendation_reason,
) -> List[ScoredCandidate]:
    """
    Calcula el score híbrido, filtra por ``min_score``, ordena y recorta.

    El ordenamiento es estable: con scores iguales se conserva el orden de entrada.
    """
    fused = [
        replace(c, hybrid_score=fuse(c.content_score, c.collaborative_score))
        for c in candidates
    ]
    kept = [c for c in fused if c.hybrid_score >= min_score]
    kept.sort(key=attrgetter('hybrid_score'), reverse=True)

    if limit is not None:
        kept = kept[:max(limit, 0)]

    return [replace(c, reason=reason_builder(c)) for c in kept]
