"""Rank unrated films for a user by predicted rating."""
import logging
from typing import List, Optional

from film_recommendation_service.ml.predictor import RatingPredictor
from film_recommendation_service.ml.rating_matrix import RatingMatrix
from film_recommendation_service.schemas import Recommendation

logger = logging.getLogger(__name__)


class FilmRanker:
    """Select the top-N films a user has not rated."""

    def __init__(self, predictor: Optional[RatingPredictor] = None):
        self.predictor = predictor or RatingPredictor()

    def rank(self, user_id: int, count: int, matrix: RatingMatrix) -> List[Recommendation]:
        """
        Rank candidate films for a user.

        Candidates are all known films the user has not rated. Films without a
        defined prediction are dropped. Ordering is by predicted rating
        descending, then film ID ascending.

        Args:
            user_id: Target user ID
            count: Maximum number of recommendations; non-positive yields []
            matrix: Rating matrix snapshot

        Returns:
            Up to `count` recommendations, best first
        """
        if count <= 0:
            return []

        rated = matrix.ratings_of(user_id).keys()
        candidates = matrix.all_films() - rated

        predictions = []
        for film_id in candidates:
            predicted = self.predictor.predict(user_id, film_id, matrix)
            if predicted is not None:
                predictions.append((film_id, predicted))

        predictions.sort(key=lambda item: (-item[1], item[0]))

        logger.debug(
            f"User {user_id}: {len(predictions)}/{len(candidates)} candidates have predictions"
        )

        return [
            Recommendation(film_id=film_id, predicted_score=predicted, rank=rank)
            for rank, (film_id, predicted) in enumerate(predictions[:count], 1)
        ]
