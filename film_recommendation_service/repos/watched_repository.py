"""Repository for managing users' watched lists and ratings in the database."""

from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from datetime import datetime, UTC
import logging

from film_recommendation_service.models import WatchedFilm

logger = logging.getLogger(__name__)


class WatchedRepository:
    """
    Repository for managing users' watched lists and ratings in the database.
    """

    def __init__(self, db: Session):
        self.db = db

    def add_watched_film(self, user_id: int, film_id: int, rating: int) -> WatchedFilm:
        """
        Add a film to a user's watched list, or replace the existing rating.

        Args:
            user_id: User ID
            film_id: Film ID
            rating: Rating score

        Returns:
            WatchedFilm object
        """
        existing = self.db.get(WatchedFilm, (user_id, film_id))

        if existing:
            existing.rating = rating  # type: ignore[assignment]
            existing.watched_at = datetime.now(UTC)  # type: ignore[assignment]
            watched = existing
        else:
            watched = WatchedFilm(
                user_id=user_id,
                film_id=film_id,
                rating=rating,
                watched_at=datetime.now(UTC)
            )
            self.db.add(watched)

        self.db.commit()
        self.db.refresh(watched)

        return watched

    def bulk_store_watched(self, records: List[Dict], batch_size: int = 1000) -> int:
        """
        Store many ratings, replacing existing ones for the same (user, film).

        Args:
            records: List of dicts with user_id, film_id, rating
            batch_size: Number of records to merge per commit

        Returns:
            Number of ratings stored
        """
        # Later records win for the same (user, film)
        records = list({(item['user_id'], item['film_id']): item for item in records}.values())

        count = 0
        for i in range(0, len(records), batch_size):
            batch = records[i:i + batch_size]
            for item in batch:
                self.db.merge(WatchedFilm(
                    user_id=item['user_id'],
                    film_id=item['film_id'],
                    rating=item['rating'],
                    watched_at=datetime.now(UTC)
                ))
            self.db.commit()
            count += len(batch)

        logger.info(f"✓ Stored {count} ratings")
        return count

    # noinspection PyTypeChecker
    def get_watched_by_user(self, user_id: int) -> List[WatchedFilm]:
        """Get a user's watched films."""
        return (
            self.db.query(WatchedFilm)
            .filter(WatchedFilm.user_id == user_id)
            .order_by(WatchedFilm.film_id)
            .all()
        )

    # noinspection PyTypeChecker
    def get_all_watched(self) -> List[WatchedFilm]:
        """Get every watched film record, in a stable order."""
        return (
            self.db.query(WatchedFilm)
            .order_by(WatchedFilm.user_id, WatchedFilm.film_id)
            .all()
        )

    def get_watched_lists(self) -> Dict[int, Dict[int, int]]:
        """
        Get all watched lists.

        Returns:
            Dict mapping user_id to {film_id: rating}
        """
        watched_lists: Dict[int, Dict[int, int]] = {}
        for record in self.get_all_watched():
            watched_lists.setdefault(record.user_id, {})[record.film_id] = record.rating
        return watched_lists

    def delete_watched_film(self, user_id: int, film_id: int) -> bool:
        """
        Remove a film from a user's watched list.

        Returns:
            True if deleted, False if not found
        """
        count = (
            self.db.query(WatchedFilm)
            .filter(WatchedFilm.user_id == user_id, WatchedFilm.film_id == film_id)
            .delete()
        )
        self.db.commit()

        return count > 0

    def count_watched(self, user_id: Optional[int] = None) -> int:
        """
        Count watched film records.

        Args:
            user_id: If provided, count for specific user. Otherwise count all.

        Returns:
            Number of records
        """
        query = self.db.query(WatchedFilm)

        if user_id is not None:
            query = query.filter(WatchedFilm.user_id == user_id)

        return query.count()
