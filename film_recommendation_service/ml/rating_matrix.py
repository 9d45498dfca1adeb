"""Sparse in-memory user/film rating matrix."""
import logging
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping

from film_recommendation_service.schemas import FilmRecord, Rating, UserRecord

logger = logging.getLogger(__name__)

_EMPTY: Mapping[int, int] = MappingProxyType({})


class RatingMatrix:
    """
    Immutable snapshot of every known rating, indexed both by user and by film.

    Only observed ratings are stored. The user->film and film->user views are
    derived together from one deduplicated rating set and never mutated after
    build, so they always agree.
    """

    def __init__(
            self,
            by_user: Dict[int, Dict[int, int]],
            by_film: Dict[int, Dict[int, int]],
            users: FrozenSet[int],
            films: FrozenSet[int],
            rating_count: int
    ):
        self._by_user = {uid: MappingProxyType(row) for uid, row in by_user.items()}
        self._by_film = {fid: MappingProxyType(col) for fid, col in by_film.items()}
        self._users = users
        self._films = films
        self.rating_count = rating_count
        self.built_at = datetime.now(UTC)

    @classmethod
    def build(
            cls,
            ratings: Iterable[Rating],
            users: Iterable[UserRecord] = (),
            films: Iterable[FilmRecord] = ()
    ) -> "RatingMatrix":
        """
        Build a matrix from a sequence of ratings.

        Args:
            ratings: Ratings in store order; a later rating for the same
                (user, film) pair supersedes an earlier one
            users: Optional user catalog, so users without ratings are known
            films: Optional film catalog, so unrated films are candidates

        Returns:
            RatingMatrix snapshot
        """
        cells: Dict[tuple, int] = {}
        for r in ratings:
            cells[(r.user_id, r.film_id)] = r.rating

        by_user: Dict[int, Dict[int, int]] = {}
        by_film: Dict[int, Dict[int, int]] = {}
        for (user_id, film_id), rating in cells.items():
            by_user.setdefault(user_id, {})[film_id] = rating
            by_film.setdefault(film_id, {})[user_id] = rating

        all_users = frozenset(by_user) | frozenset(u.user_id for u in users)
        all_films = frozenset(by_film) | frozenset(f.film_id for f in films)

        logger.info(
            f"✓ Built rating matrix: {len(cells)} ratings, "
            f"{len(all_users)} users, {len(all_films)} films"
        )
        return cls(by_user, by_film, all_users, all_films, len(cells))

    def ratings_of(self, user_id: int) -> Mapping[int, int]:
        """Films rated by a user, as {film_id: rating}."""
        return self._by_user.get(user_id, _EMPTY)

    def raters_of(self, film_id: int) -> Mapping[int, int]:
        """Users who rated a film, as {user_id: rating}."""
        return self._by_film.get(film_id, _EMPTY)

    def all_users(self) -> FrozenSet[int]:
        return self._users

    def all_films(self) -> FrozenSet[int]:
        return self._films

    def has_user(self, user_id: int) -> bool:
        return user_id in self._users

    def stats(self) -> Dict:
        """Get statistics about the matrix."""
        n_users = len(self._users)
        n_films = len(self._films)
        cells = n_users * n_films
        return {
            'users': n_users,
            'films': n_films,
            'ratings': self.rating_count,
            'density': self.rating_count / cells if cells > 0 else 0.0,
            'built_at': self.built_at,
        }
