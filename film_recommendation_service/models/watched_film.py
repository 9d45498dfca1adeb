"""A film on a user's watched list, with the user's rating."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Index, Integer

from film_recommendation_service.models.base import Base


class WatchedFilm(Base):
    """A user's rating of a film.

    (user_id, film_id) is the primary key: rating a film again replaces the
    earlier rating.
    """

    __tablename__ = "watched_films"

    user_id = Column(Integer, primary_key=True)
    film_id = Column(Integer, primary_key=True)
    rating = Column(Integer, nullable=False)

    watched_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("idx_watched_film_id", "film_id"),
    )

    def __repr__(self):
        return (
            f"<WatchedFilm(user_id={self.user_id}, film_id={self.film_id}, "
            f"rating={self.rating})>"
        )
