"""Rating store that reads from another film-recommend service over HTTP"""
from typing import List, Dict, Optional
import logging
import requests

from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from film_recommendation_service.config import get_rating_store_url
from film_recommendation_service.errors import DataUnavailableError
from film_recommendation_service.schemas import FilmRecord, Rating, UserRecord

logger = logging.getLogger(__name__)


class RemoteRatingStore:
    """
    Rating store backed by the users/watched endpoints of a remote service.

    The remote API has no film catalog endpoint, so the known films are the
    films that appear in ratings, and the known users are the users with at
    least one rating. list_users and list_films reuse the watched lists read
    by the latest list_ratings call, so one matrix build is one GET.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: int = 10):
        # Default to localhost for development
        self.base_url = (base_url or get_rating_store_url() or "http://localhost:7071/api").rstrip('/')
        self.timeout = timeout
        self._watched_lists: Optional[Dict[int, Dict[int, int]]] = None

        # Configure session with retries
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        # noinspection HttpUrlsUsage
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _get(self, path: str, params: Optional[Dict] = None, allow_not_found: bool = False) -> Optional[Dict]:
        """
        GET a JSON document.

        Args:
            path: Path below base_url
            params: Query parameters
            allow_not_found: Return None on 404 instead of raising

        Raises:
            DataUnavailableError: on transport errors, error statuses or a non-JSON body
        """
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            if allow_not_found and response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise DataUnavailableError(f"Rating store unavailable: {url}") from e

    def _parse_watched(self, result, path: str) -> Dict[int, Dict[int, int]]:
        """Convert a {id: {film_id: rating}} document with string keys to ints."""
        try:
            return {
                int(key): {int(film_id): int(rating) for film_id, rating in films.items()}
                for key, films in result.items()
            }
        except (AttributeError, TypeError, ValueError) as e:
            logger.error(f"Malformed watched document from {self.base_url}/{path}: {e}")
            raise DataUnavailableError(f"Rating store returned malformed data: {path}") from e

    # ===== WATCHED ENDPOINTS =====

    def get_watched_lists(self) -> Dict[int, Dict[int, int]]:
        """
        Fetch every user's watched list.

        Returns:
            Dict mapping user_id to {film_id: rating}
        """
        result = self._get("watched")
        if not isinstance(result, dict) or 'watched' not in result:
            logger.error(f"Malformed watched document from {self.base_url}/watched")
            raise DataUnavailableError("Rating store returned malformed data: watched")
        return self._parse_watched(result['watched'], "watched")

    def get_ratings_by_user(self, user_id: int) -> Dict[int, int]:
        """Fetch one user's watched list as {film_id: rating}."""
        result = self._get("watched", params={'user_id': user_id})
        if not isinstance(result, dict) or 'watched' not in result:
            logger.error(f"Malformed watched document from {self.base_url}/watched for user {user_id}")
            raise DataUnavailableError("Rating store returned malformed data: watched")
        return self._parse_watched({user_id: result['watched']}, "watched").get(user_id, {})

    def list_ratings(self) -> List[Rating]:
        """Fetch all ratings, ordered by user then film."""
        self._watched_lists = self.get_watched_lists()
        ratings = [
            Rating(user_id=user_id, film_id=film_id, rating=rating)
            for user_id, films in sorted(self._watched_lists.items())
            for film_id, rating in sorted(films.items())
        ]
        logger.info(f"✓ Loaded {len(ratings)} ratings from {self.base_url}")
        return ratings

    def _current_watched_lists(self) -> Dict[int, Dict[int, int]]:
        if self._watched_lists is None:
            self._watched_lists = self.get_watched_lists()
        return self._watched_lists

    def add_rating(self, user_id: int, film_id: int, rating: int) -> Rating:
        """Add a film to a user's watched list on the remote service."""
        url = f"{self.base_url}/watched"
        payload = {'user_id': user_id, 'film_id': film_id, 'rating': rating}
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to post rating to {url}: {e}")
            raise DataUnavailableError(f"Rating store unavailable: {url}") from e
        return Rating(user_id=user_id, film_id=film_id, rating=rating)

    # ===== USER ENDPOINTS =====

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        """Fetch a user by ID, or None if the remote reports 404."""
        result = self._get("users", params={'user_id': user_id}, allow_not_found=True)
        if not result:
            return None
        return UserRecord(user_id=int(result['user_id']), name=result.get('name'))

    def get_user_by_name(self, name: str) -> Optional[UserRecord]:
        """Fetch a user by name, or None if the remote reports 404."""
        result = self._get("users", params={'name': name}, allow_not_found=True)
        if not result:
            return None
        return UserRecord(user_id=int(result['user_id']), name=result.get('name'))

    def list_users(self) -> List[UserRecord]:
        """Users with at least one rating, as of the latest list_ratings call."""
        return [UserRecord(user_id=user_id) for user_id in sorted(self._current_watched_lists())]

    def list_films(self) -> List[FilmRecord]:
        """Films with at least one rating, as of the latest list_ratings call."""
        film_ids = set()
        for films in self._current_watched_lists().values():
            film_ids.update(films)
        return [FilmRecord(film_id=film_id) for film_id in sorted(film_ids)]
