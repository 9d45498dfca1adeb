"""User-based rating prediction."""
import logging
from typing import Optional

import numpy as np

from film_recommendation_service.ml.rating_matrix import RatingMatrix
from film_recommendation_service.ml.similarity_computer import SimilarityComputer

logger = logging.getLogger(__name__)


class RatingPredictor:
    """Predict the rating a user would give a film from similar users' ratings."""

    def __init__(
            self,
            similarity_computer: Optional[SimilarityComputer] = None,
            rating_min: float = 1,
            rating_max: float = 5,
            allow_negative: bool = False
    ):
        """
        Initialize the predictor.

        Args:
            similarity_computer: Similarity engine (default: SimilarityComputer())
            rating_min: Lower bound of the rating scale
            rating_max: Upper bound of the rating scale
            allow_negative: Let negatively correlated users contribute with
                inverted weight. Off by default; only positive similarities count.
        """
        self.similarity_computer = similarity_computer or SimilarityComputer()
        self.rating_min = rating_min
        self.rating_max = rating_max
        self.allow_negative = allow_negative

    def predict(self, user_id: int, film_id: int, matrix: RatingMatrix) -> Optional[float]:
        """
        Predict a user's rating for a film.

        Uses the similarity-weighted mean of other users' ratings for the film:
        sum(s_i * r_i) / sum(s_i). In signed mode the denominator is sum(|s_i|).

        If the user already rated the film, the observed rating is returned
        unchanged.

        Args:
            user_id: Target user ID
            film_id: Film ID
            matrix: Rating matrix snapshot

        Returns:
            Predicted rating clamped to the rating scale, or None when no rater
            has a usable similarity to the user
        """
        observed = matrix.ratings_of(user_id).get(film_id)
        if observed is not None:
            return float(observed)

        weighted_sum = 0.0
        weight_total = 0.0
        for rater_id in sorted(matrix.raters_of(film_id)):
            if rater_id == user_id:
                continue

            score = self.similarity_computer.user_similarity(user_id, rater_id, matrix)
            if score is None or score.value == 0:
                continue
            if score.value < 0 and not self.allow_negative:
                continue

            weighted_sum += score.value * matrix.raters_of(film_id)[rater_id]
            weight_total += abs(score.value)

        if weight_total == 0:
            return None

        return float(np.clip(weighted_sum / weight_total, self.rating_min, self.rating_max))
