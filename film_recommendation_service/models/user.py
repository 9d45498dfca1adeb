"""Users who keep watched lists"""
from sqlalchemy import Column, Integer, String

from film_recommendation_service.models.base import Base


class User(Base):
    """A user of the service. Referenced by ID from watched lists."""
    __tablename__ = 'users'

    user_id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)

    def __repr__(self):
        return f"<User(user_id={self.user_id}, name='{self.name}')>"
