"""Unit tests for film_recommendation_service.models.base."""
from sqlalchemy.orm import DeclarativeMeta

from film_recommendation_service.models.base import Base


class TestBase:
    """Tests for Base declarative base."""

    def test_base_is_declarative_base(self):
        # Assert
        assert hasattr(Base, 'metadata')
        assert hasattr(Base, 'registry')
        assert isinstance(Base, DeclarativeMeta)

    def test_base_metadata_has_model_tables(self):
        """Test that every model registers its table."""
        # Arrange
        import film_recommendation_service.models  # noqa: F401

        # Assert
        assert {'users', 'films', 'watched_films'} <= set(Base.metadata.tables)
