"""Plain data types passed between the rating store, the engine and the request layer."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Rating:
    user_id: int
    film_id: int
    rating: int


@dataclass(frozen=True)
class UserRecord:
    user_id: int
    name: Optional[str] = None


@dataclass(frozen=True)
class FilmRecord:
    film_id: int
    title: Optional[str] = None
    year: Optional[int] = None
    genres: Optional[List[str]] = field(default=None, compare=False)


@dataclass(frozen=True)
class Recommendation:
    """A ranked film prediction. Rank is 1-based and implied by list order on the wire."""

    film_id: int
    predicted_score: float
    rank: int

    def to_dict(self) -> Dict:
        return {"film_id": self.film_id, "predicted_score": self.predicted_score}


@dataclass(frozen=True)
class RecommendationList:
    user_id: int
    recommendations: List[Recommendation]

    def to_dict(self) -> Dict:
        return {
            "type": "recommendations",
            "user_id": self.user_id,
            "count": len(self.recommendations),
            "recommendations": [rec.to_dict() for rec in self.recommendations],
        }


@dataclass(frozen=True)
class ErrorResponse:
    error: str
    status_code: int = 500

    def to_dict(self) -> Dict:
        return {"type": "error", "error": self.error}
