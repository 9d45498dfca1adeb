"""Service for collaborative-filtering film recommendations."""
import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Union

from film_recommendation_service.config import (
    allow_negative_similarity,
    get_rating_scale,
    get_refresh_interval
)
from film_recommendation_service.errors import DataUnavailableError, UnknownUserError
from film_recommendation_service.ml.predictor import RatingPredictor
from film_recommendation_service.ml.ranker import FilmRanker
from film_recommendation_service.ml.rating_matrix import RatingMatrix
from film_recommendation_service.ml.similarity_computer import SimilarityComputer
from film_recommendation_service.schemas import ErrorResponse, Recommendation, RecommendationList

logger = logging.getLogger(__name__)


class RecommendationService:
    """
    Service for user-based collaborative-filtering recommendations.

    Holds the current rating matrix snapshot and decides when to rebuild it
    from the rating store. Each call works on one snapshot from start to end;
    a rebuild swaps in a new snapshot without disturbing calls already running
    on the old one.
    """

    def __init__(
            self,
            rating_store,
            refresh_interval: Optional[float] = None,
            rating_min: Optional[int] = None,
            rating_max: Optional[int] = None,
            allow_negative: Optional[bool] = None,
            clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the recommendation service.

        Args:
            rating_store: Source of ratings, users and films
            refresh_interval: Seconds before the matrix is rebuilt; 0 disables
                time-based refresh (None = from config)
            rating_min: Lower bound of the rating scale (None = from config)
            rating_max: Upper bound of the rating scale (None = from config)
            allow_negative: Let negatively correlated users contribute to
                predictions (None = from config)
            clock: Monotonic clock used for refresh decisions
        """
        config_min, config_max = get_rating_scale()
        self.rating_store = rating_store
        self.refresh_interval = get_refresh_interval() if refresh_interval is None else refresh_interval
        self.rating_min = config_min if rating_min is None else rating_min
        self.rating_max = config_max if rating_max is None else rating_max
        self.allow_negative = allow_negative_similarity() if allow_negative is None else allow_negative
        self._clock = clock

        self.similarity_computer = SimilarityComputer()
        self.predictor = RatingPredictor(
            similarity_computer=self.similarity_computer,
            rating_min=self.rating_min,
            rating_max=self.rating_max,
            allow_negative=self.allow_negative
        )
        self.ranker = FilmRanker(self.predictor)

        # Lazy-built snapshot
        self._snapshot: Optional[RatingMatrix] = None
        self._last_build_attempt: Optional[float] = None
        self._stale = False
        self._last_build_failed = False
        self._build_lock = threading.Lock()

        logger.info("Initialized RecommendationService")
        logger.info(
            f"Rating scale: {self.rating_min}-{self.rating_max}, "
            f"refresh interval: {self.refresh_interval}s, allow negative: {self.allow_negative}"
        )

    # ===== SNAPSHOT MANAGEMENT =====

    def _build_snapshot(self) -> RatingMatrix:
        """Read the rating store and swap in a new snapshot."""
        was_stale = self._stale
        self._last_build_attempt = self._clock()
        self._stale = False
        logger.info("Building rating matrix...")

        try:
            ratings = self.rating_store.list_ratings()
            users = self.rating_store.list_users()
            films = self.rating_store.list_films()
        except DataUnavailableError:
            self._stale = self._stale or was_stale
            self._last_build_failed = True
            raise

        self._last_build_failed = False

        snapshot = RatingMatrix.build(ratings, users=users, films=films)
        self._snapshot = snapshot
        return snapshot

    def _interval_elapsed(self) -> bool:
        if self._last_build_attempt is None:
            return True
        return self._clock() - self._last_build_attempt >= self.refresh_interval

    def _needs_refresh(self) -> bool:
        if self._stale:
            # After a failed rebuild, wait one interval before retrying
            if self._last_build_failed and self.refresh_interval > 0:
                return self._interval_elapsed()
            return True
        if self.refresh_interval <= 0:
            return False
        return self._interval_elapsed()

    def get_snapshot(self) -> RatingMatrix:
        """
        Get the current rating matrix, building or refreshing it if due.

        The first build blocks and raises DataUnavailableError on failure.
        Later refreshes run in at most one caller at a time; other callers
        keep using the existing snapshot, and a failed refresh keeps serving
        the existing snapshot until the next attempt, one refresh interval later.

        Returns:
            RatingMatrix snapshot
        """
        snapshot = self._snapshot
        if snapshot is None:
            with self._build_lock:
                if self._snapshot is None:
                    return self._build_snapshot()
                return self._snapshot

        if self._needs_refresh() and self._build_lock.acquire(blocking=False):
            try:
                if self._needs_refresh():
                    snapshot = self._build_snapshot()
            except DataUnavailableError as e:
                logger.warning(f"Rating matrix refresh failed, serving previous snapshot: {e}")
            finally:
                self._build_lock.release()

        return snapshot

    def refresh(self) -> RatingMatrix:
        """
        Rebuild the rating matrix now.

        Raises:
            DataUnavailableError: if the rating store cannot be read
        """
        with self._build_lock:
            return self._build_snapshot()

    def mark_stale(self):
        """Rebuild the matrix on next use (e.g. after a rating was written)."""
        self._stale = True
        self._last_build_failed = False

    # ===== RECOMMENDATIONS =====

    def recommend(self, user_id: int, count: int) -> List[Recommendation]:
        """
        Recommend films a user has not rated.

        Args:
            user_id: Target user ID
            count: Maximum number of recommendations

        Returns:
            Recommendations ordered by predicted rating, then film ID

        Raises:
            UnknownUserError: if the user is not in the rating matrix
            DataUnavailableError: if the rating store cannot be read on first load
        """
        snapshot = self.get_snapshot()

        if not snapshot.has_user(user_id):
            raise UnknownUserError(user_id)

        return self.ranker.rank(user_id, count, snapshot)

    def get_recommendation_response(
            self,
            user_id: int,
            count: int
    ) -> Union[RecommendationList, ErrorResponse]:
        """
        Recommend films, reporting known failures as an ErrorResponse.

        Args:
            user_id: Target user ID
            count: Maximum number of recommendations

        Returns:
            RecommendationList on success, ErrorResponse (404 unknown user,
            503 rating store unavailable) otherwise
        """
        try:
            recommendations = self.recommend(user_id, count)
        except UnknownUserError as e:
            return ErrorResponse(error=str(e), status_code=404)
        except DataUnavailableError as e:
            logger.error(f"Recommendations unavailable for user {user_id}: {e}")
            return ErrorResponse(error="Rating data unavailable", status_code=503)

        return RecommendationList(user_id=user_id, recommendations=recommendations)

    def predict(self, user_id: int, film_id: int) -> Optional[float]:
        """
        Predict a user's rating for a film.

        Returns:
            Predicted rating, or None without enough evidence

        Raises:
            UnknownUserError: if the user is not in the rating matrix
        """
        snapshot = self.get_snapshot()

        if not snapshot.has_user(user_id):
            raise UnknownUserError(user_id)

        return self.predictor.predict(user_id, film_id, snapshot)

    def get_similar_films(
            self,
            film_id: int,
            n: int = 10,
            min_similarity: float = 0.0
    ) -> List[Dict]:
        """
        Get films rated most similarly to a film by the same users.

        Args:
            film_id: Source film ID
            n: Number of films
            min_similarity: Minimum similarity threshold

        Returns:
            List of dicts with film_id, similarity_score and support
        """
        snapshot = self.get_snapshot()

        if film_id not in snapshot.all_films():
            logger.warning(f"Film ID {film_id} not found in rating matrix")
            return []

        return self.similarity_computer.most_similar_films(
            film_id, snapshot, n=n, min_similarity=min_similarity
        )

    def get_stats(self) -> Dict:
        """Get statistics about the recommendation system."""
        snapshot = self.get_snapshot()
        return {
            'matrix': snapshot.stats(),
            'rating_scale': {'min': self.rating_min, 'max': self.rating_max},
            'refresh_interval': self.refresh_interval,
            'allow_negative_similarity': self.allow_negative
        }
