"""Repository for managing users."""

import logging

from sqlalchemy.orm import Session

from film_recommendation_service.models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Repository for managing users.
    """

    def __init__(self, db: Session):
        self.db = db

    def store_user(self, user_data: dict) -> User:
        """
        Store or update a user.

        Args:
            user_data: Dict with user_id and name

        Returns:
            User object
        """
        user_id = user_data["user_id"]

        existing = self.db.query(User).filter(User.user_id == user_id).first()

        if existing:
            existing.name = user_data["name"]  # type: ignore[assignment]
            user = existing
        else:
            user = User(user_id=user_id, name=user_data["name"])
            self.db.add(user)

        self.db.commit()
        self.db.refresh(user)

        return user

    def bulk_store_users(self, users_data: list[dict]) -> int:
        """Store or update many users. Returns the number stored."""
        for user_data in users_data:
            self.db.merge(User(user_id=user_data["user_id"], name=user_data["name"]))
        self.db.commit()

        logger.info(f"✓ Stored {len(users_data)} users")
        return len(users_data)

    def get_user(self, user_id: int) -> User | None:
        """Get user by ID."""
        return self.db.query(User).filter(User.user_id == user_id).first()

    def get_user_by_name(self, name: str) -> User | None:
        """Get user by name."""
        return self.db.query(User).filter(User.name == name).first()

    # noinspection PyTypeChecker
    def get_all_users(self) -> list[User]:
        """Get all users ordered by ID."""
        return self.db.query(User).order_by(User.user_id).all()

    def count_users(self) -> int:
        """Count total users."""
        return self.db.query(User).count()
