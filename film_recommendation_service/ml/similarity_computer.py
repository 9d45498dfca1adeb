"""Compute user-user and film-film similarity from co-rated entries."""
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
from scipy.stats import pearsonr
from sklearn.metrics.pairwise import cosine_similarity

from film_recommendation_service.ml.rating_matrix import RatingMatrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimilarityScore:
    """Similarity between two entities and the number of co-rated entries behind it."""

    value: float
    support: int
    method: str


class SimilarityComputer:
    """
    Compute similarity between two rating vectors over their overlap.

    Pearson correlation is used when both co-rated vectors vary. When either
    vector is constant (always the case with a single co-rated entry) the
    correlation is undefined, and cosine similarity over the same vectors is
    used instead. No overlap means no evidence: the result is None, not 0.
    """

    def user_similarity(self, user_a: int, user_b: int, matrix: RatingMatrix) -> Optional[SimilarityScore]:
        """
        Similarity between two users over the films both have rated.

        Args:
            user_a: First user ID
            user_b: Second user ID
            matrix: Rating matrix snapshot

        Returns:
            SimilarityScore, or None when the users share no rated film
        """
        first, second = sorted((user_a, user_b))
        return self._similarity(matrix.ratings_of(first), matrix.ratings_of(second))

    def film_similarity(self, film_a: int, film_b: int, matrix: RatingMatrix) -> Optional[SimilarityScore]:
        """
        Similarity between two films over the users who rated both.

        Args:
            film_a: First film ID
            film_b: Second film ID
            matrix: Rating matrix snapshot

        Returns:
            SimilarityScore, or None when no user rated both films
        """
        first, second = sorted((film_a, film_b))
        return self._similarity(matrix.raters_of(first), matrix.raters_of(second))

    def most_similar_films(
            self,
            film_id: int,
            matrix: RatingMatrix,
            n: int = 10,
            min_similarity: float = 0.0
    ) -> List[Dict]:
        """
        Rank other films by similarity to a film.

        Args:
            film_id: Source film ID
            matrix: Rating matrix snapshot
            n: Number of films to return
            min_similarity: Minimum similarity threshold

        Returns:
            List of dicts with film_id, similarity_score and support, best first
        """
        if n <= 0:
            return []

        # Only films sharing at least one rater can have a defined similarity
        candidates = set()
        for user_id in matrix.raters_of(film_id):
            candidates.update(matrix.ratings_of(user_id))
        candidates.discard(film_id)

        scored = []
        for other_id in candidates:
            score = self.film_similarity(film_id, other_id, matrix)
            if score is None or score.value < min_similarity:
                continue
            scored.append({
                'film_id': other_id,
                'similarity_score': score.value,
                'support': score.support
            })

        scored.sort(key=lambda item: (-item['similarity_score'], item['film_id']))
        return scored[:n]

    def _similarity(
            self,
            vector_a: Mapping[int, int],
            vector_b: Mapping[int, int]
    ) -> Optional[SimilarityScore]:
        co_rated = sorted(vector_a.keys() & vector_b.keys())
        if not co_rated:
            return None

        a, b = self._co_rated_vectors(vector_a, vector_b, co_rated)

        if np.ptp(a) == 0 or np.ptp(b) == 0:
            value = float(cosine_similarity(a.reshape(1, -1), b.reshape(1, -1))[0, 0])
            method = "cosine"
        else:
            value = float(pearsonr(a, b)[0])
            method = "pearson"

        return SimilarityScore(
            value=float(np.clip(value, -1.0, 1.0)),
            support=len(co_rated),
            method=method
        )

    def _co_rated_vectors(
            self,
            vector_a: Mapping[int, int],
            vector_b: Mapping[int, int],
            keys: List[int]
    ) -> Tuple[np.ndarray, np.ndarray]:
        a = np.array([vector_a[k] for k in keys], dtype=float)
        b = np.array([vector_b[k] for k in keys], dtype=float)
        return a, b
