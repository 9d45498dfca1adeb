"""Errors surfaced by the recommendation engine."""


class RecommendationError(Exception):
    """Base class for recommendation errors."""


class UnknownUserError(RecommendationError):
    """The requested user has no entry in the rating matrix."""

    def __init__(self, user_id: int):
        super().__init__(f"Unknown user: {user_id}")
        self.user_id = user_id


class DataUnavailableError(RecommendationError):
    """The rating store could not be read."""
