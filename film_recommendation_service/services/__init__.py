"""Service classes"""

from .data_loader_service import RemoteRatingStore
from .rating_store import DatabaseRatingStore, create_rating_store
from .recommendation_service import RecommendationService

__all__ = ["DatabaseRatingStore", "RemoteRatingStore", "RecommendationService", "create_rating_store"]
