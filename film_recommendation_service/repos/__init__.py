"""Repository classes"""

from film_recommendation_service.repos.film_repository import FilmRepository
from film_recommendation_service.repos.user_repository import UserRepository
from film_recommendation_service.repos.watched_repository import WatchedRepository

__all__ = [
    "FilmRepository",
    "UserRepository",
    "WatchedRepository",
]
