"""Rating store backed by the service's own database."""
import logging
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from film_recommendation_service.config import get_rating_store_url, use_remote_rating_store
from film_recommendation_service.errors import DataUnavailableError
from film_recommendation_service.models.database import SessionLocal
from film_recommendation_service.repos import FilmRepository, UserRepository, WatchedRepository
from film_recommendation_service.schemas import FilmRecord, Rating, UserRecord
from film_recommendation_service.services.data_loader_service import RemoteRatingStore

logger = logging.getLogger(__name__)


# noinspection PyMethodMayBeStatic
class DatabaseRatingStore:
    """
    Read-mostly access to users, films and ratings in the database.

    Every call opens its own session. Database failures are raised as
    DataUnavailableError.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory or SessionLocal

    def _run(self, operation: str, fn):
        db = self.session_factory()
        try:
            return fn(db)
        except SQLAlchemyError as e:
            logger.error(f"Rating store {operation} failed: {e}")
            raise DataUnavailableError(f"Rating store unavailable during {operation}") from e
        finally:
            db.close()

    def list_ratings(self) -> List[Rating]:
        """Get all ratings."""
        return self._run("list_ratings", lambda db: [
            Rating(user_id=w.user_id, film_id=w.film_id, rating=w.rating)
            for w in WatchedRepository(db).get_all_watched()
        ])

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        """Get a user by ID, or None."""
        def fetch(db):
            user = UserRepository(db).get_user(user_id)
            return UserRecord(user_id=user.user_id, name=user.name) if user else None
        return self._run("get_user", fetch)

    def get_user_by_name(self, name: str) -> Optional[UserRecord]:
        """Get a user by name, or None."""
        def fetch(db):
            user = UserRepository(db).get_user_by_name(name)
            return UserRecord(user_id=user.user_id, name=user.name) if user else None
        return self._run("get_user_by_name", fetch)

    def list_users(self) -> List[UserRecord]:
        """Get all users."""
        return self._run("list_users", lambda db: [
            UserRecord(user_id=u.user_id, name=u.name)
            for u in UserRepository(db).get_all_users()
        ])

    def list_films(self) -> List[FilmRecord]:
        """Get the film catalog."""
        return self._run("list_films", lambda db: [
            FilmRecord(film_id=f.film_id, title=f.title, year=f.year, genres=f.genres)
            for f in FilmRepository(db).get_all_films()
        ])

    def get_ratings_by_user(self, user_id: int) -> Dict[int, int]:
        """Get a user's watched list as {film_id: rating}."""
        return self._run("get_ratings_by_user", lambda db: {
            w.film_id: w.rating
            for w in WatchedRepository(db).get_watched_by_user(user_id)
        })

    def get_watched_lists(self) -> Dict[int, Dict[int, int]]:
        """Get every user's watched list as {user_id: {film_id: rating}}."""
        return self._run("get_watched_lists", lambda db: WatchedRepository(db).get_watched_lists())

    def add_rating(self, user_id: int, film_id: int, rating: int) -> Rating:
        """Add a film to a user's watched list, replacing any earlier rating."""
        def store(db):
            watched = WatchedRepository(db).add_watched_film(user_id, film_id, rating)
            return Rating(user_id=watched.user_id, film_id=watched.film_id, rating=watched.rating)
        return self._run("add_rating", store)


def create_rating_store():
    """Create the rating store selected by configuration."""
    if use_remote_rating_store():
        logger.info(f"Using remote rating store: {get_rating_store_url()}")
        return RemoteRatingStore()

    logger.info("Using database rating store")
    return DatabaseRatingStore()
