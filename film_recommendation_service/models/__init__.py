"""SQLAlchemy models"""

from film_recommendation_service.models.base import Base
from film_recommendation_service.models.film import Film
from film_recommendation_service.models.user import User
from film_recommendation_service.models.watched_film import WatchedFilm

__all__ = [
    "Base",
    "Film",
    "User",
    "WatchedFilm",
]
