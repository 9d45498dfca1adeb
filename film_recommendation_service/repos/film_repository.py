"""Repository for managing the film catalog."""

import logging

from sqlalchemy.orm import Session

from film_recommendation_service.models import Film

logger = logging.getLogger(__name__)


class FilmRepository:
    """
    Repository for managing the film catalog.
    """

    def __init__(self, db: Session):
        self.db = db

    def bulk_store_films(self, films_data: list[dict], batch_size: int = 100) -> int:
        """
        Replace the film catalog.

        Args:
            films_data: List of film data dicts
            batch_size: Batch size for inserts

        Returns:
            Number of films stored
        """
        logger.info("Clearing existing films...")
        self.db.query(Film).delete()
        self.db.commit()

        records = [
            Film(
                film_id=film_data["film_id"],
                title=film_data["title"],
                year=film_data.get("year"),
                genres=film_data.get("genres"),
            )
            for film_data in films_data
        ]

        count = 0
        for i in range(0, len(records), batch_size):
            batch = records[i : i + batch_size]
            self.db.bulk_save_objects(batch)
            self.db.commit()
            count += len(batch)

        logger.info(f"✓ Stored {count} films")
        return count

    def get_film(self, film_id: int) -> Film | None:
        """Get film by ID."""
        return self.db.query(Film).filter(Film.film_id == film_id).first()

    # noinspection PyTypeChecker
    def get_all_films(self) -> list[Film]:
        """Get the whole film catalog ordered by ID."""
        return self.db.query(Film).order_by(Film.film_id).all()

    def count_films(self) -> int:
        """Count films in the catalog."""
        return self.db.query(Film).count()
