"""Film catalog"""
from sqlalchemy import Column, Integer, String
from sqlalchemy.types import JSON

from film_recommendation_service.models.base import Base


class Film(Base):
    """A film that users can watch and rate."""
    __tablename__ = 'films'

    film_id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    year = Column(Integer, nullable=True)
    genres = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<Film(film_id={self.film_id}, title='{self.title}')>"
