"""Shared test fixtures and configuration for pytest."""
import pytest
from pathlib import Path
from unittest.mock import Mock
from typing import List
import tempfile
import json
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from film_recommendation_service.errors import DataUnavailableError
from film_recommendation_service.ml.rating_matrix import RatingMatrix
from film_recommendation_service.models.base import Base
from film_recommendation_service.models.film import Film
from film_recommendation_service.models.user import User
from film_recommendation_service.models.watched_film import WatchedFilm
from film_recommendation_service.schemas import FilmRecord, Rating, UserRecord


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_session_factory(test_db_engine):
    """Session factory bound to the test database."""
    return sessionmaker(bind=test_db_engine)


@pytest.fixture(scope="function")
def test_db_session(test_session_factory):
    """Create a database session for testing."""
    session = test_session_factory()
    yield session
    session.close()


# ===== Sample Data Fixtures =====

@pytest.fixture
def scenario_ratings() -> List[Rating]:
    """Users 1-3 rating films 10, 20, 30."""
    return [
        Rating(user_id=1, film_id=10, rating=5),
        Rating(user_id=1, film_id=20, rating=3),
        Rating(user_id=2, film_id=10, rating=5),
        Rating(user_id=2, film_id=20, rating=3),
        Rating(user_id=2, film_id=30, rating=4),
        Rating(user_id=3, film_id=10, rating=1),
    ]


@pytest.fixture
def scenario_matrix(scenario_ratings) -> RatingMatrix:
    """Rating matrix built from scenario_ratings."""
    return RatingMatrix.build(scenario_ratings)


@pytest.fixture
def sample_ratings() -> List[Rating]:
    """A denser set of ratings with agreeing, disagreeing and unrelated users."""
    return [
        # User 1 and user 2 agree
        Rating(1, 101, 5), Rating(1, 102, 4), Rating(1, 103, 1), Rating(1, 104, 2),
        Rating(2, 101, 5), Rating(2, 102, 5), Rating(2, 103, 1), Rating(2, 104, 1),
        Rating(2, 105, 5), Rating(2, 106, 2),
        # User 3 disagrees with user 1
        Rating(3, 101, 1), Rating(3, 102, 2), Rating(3, 103, 5), Rating(3, 104, 4),
        Rating(3, 105, 1), Rating(3, 107, 5),
        # User 4 only shares film 101 with user 1
        Rating(4, 101, 4), Rating(4, 108, 3),
        # User 5 shares nothing with user 1
        Rating(5, 109, 4), Rating(5, 110, 2),
    ]


@pytest.fixture
def sample_users() -> List[UserRecord]:
    return [UserRecord(user_id=i, name=f"user{i}") for i in range(1, 7)]


@pytest.fixture
def sample_films() -> List[FilmRecord]:
    return [FilmRecord(film_id=i, title=f"Film {i}") for i in range(101, 112)]


@pytest.fixture
def sample_matrix(sample_ratings, sample_users, sample_films) -> RatingMatrix:
    return RatingMatrix.build(sample_ratings, users=sample_users, films=sample_films)


# ===== Mock Fixtures =====

@pytest.fixture
def fake_rating_store(scenario_ratings):
    """Rating store test double serving scenario_ratings."""
    store = Mock()
    store.list_ratings.return_value = list(scenario_ratings)
    store.list_users.return_value = [
        UserRecord(user_id=1, name='alice'),
        UserRecord(user_id=2, name='bob'),
        UserRecord(user_id=3, name='carol'),
        UserRecord(user_id=4, name='dave'),
    ]
    store.list_films.return_value = [
        FilmRecord(film_id=10, title='Alien'),
        FilmRecord(film_id=20, title='Brazil'),
        FilmRecord(film_id=30, title='Chinatown'),
    ]
    return store


@pytest.fixture
def failing_rating_store():
    """Rating store test double that cannot be read."""
    store = Mock()
    store.list_ratings.side_effect = DataUnavailableError("store down")
    store.list_users.side_effect = DataUnavailableError("store down")
    store.list_films.side_effect = DataUnavailableError("store down")
    return store


# ===== Temporary Directory Fixtures =====

@pytest.fixture
def temp_data_dir():
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ===== Configuration Fixtures =====

@pytest.fixture
def mock_config(monkeypatch):
    """Mock configuration values."""
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///:memory:')
    monkeypatch.setenv('RATING_MIN', '1')
    monkeypatch.setenv('RATING_MAX', '5')
    monkeypatch.setenv('MATRIX_REFRESH_SECONDS', '300')
    monkeypatch.setenv('ALLOW_NEGATIVE_SIMILARITY', 'false')
    monkeypatch.setenv('USE_REMOTE_RATING_STORE', 'false')


# ===== Database Record Fixtures =====

@pytest.fixture
def sample_user_records(test_db_session) -> List[User]:
    """Create sample User records in the test database."""
    records = [
        User(user_id=1, name='alice'),
        User(user_id=2, name='bob'),
        User(user_id=3, name='carol'),
    ]
    for record in records:
        test_db_session.add(record)
    test_db_session.commit()
    return records


@pytest.fixture
def sample_film_records(test_db_session) -> List[Film]:
    """Create sample Film records in the test database."""
    records = [
        Film(film_id=10, title='Alien', year=1979, genres=['Horror', 'Sci-Fi']),
        Film(film_id=20, title='Brazil', year=1985, genres=['Comedy']),
        Film(film_id=30, title='Chinatown', year=1974, genres=['Drama', 'Mystery']),
    ]
    for record in records:
        test_db_session.add(record)
    test_db_session.commit()
    return records


@pytest.fixture
def sample_watched_records(test_db_session) -> List[WatchedFilm]:
    """Create sample WatchedFilm records in the test database."""
    records = [
        WatchedFilm(user_id=1, film_id=10, rating=5),
        WatchedFilm(user_id=1, film_id=20, rating=3),
        WatchedFilm(user_id=2, film_id=10, rating=5),
        WatchedFilm(user_id=2, film_id=20, rating=3),
        WatchedFilm(user_id=2, film_id=30, rating=4),
        WatchedFilm(user_id=3, film_id=10, rating=1),
    ]
    for record in records:
        test_db_session.add(record)
    test_db_session.commit()
    return records


# ===== Repository Fixtures =====

@pytest.fixture
def user_repository(test_db_session):
    from film_recommendation_service.repos import UserRepository
    return UserRepository(test_db_session)


@pytest.fixture
def film_repository(test_db_session):
    from film_recommendation_service.repos import FilmRepository
    return FilmRepository(test_db_session)


@pytest.fixture
def watched_repository(test_db_session):
    from film_recommendation_service.repos import WatchedRepository
    return WatchedRepository(test_db_session)


# ===== Azure Functions Fixtures =====

@pytest.fixture
def mock_http_request():
    """Mock Azure Functions HttpRequest."""
    mock_req = Mock()
    mock_req.route_params = {}
    mock_req.params = {}
    mock_req.get_json.return_value = {}
    return mock_req


@pytest.fixture
def mock_local_settings(tmp_path):
    """Write a local.settings.json file and return its directory."""
    settings = {
        "Values": {
            "RATING_MIN": "0",
            "RATING_MAX": "10",
        }
    }
    settings_file = tmp_path / "local.settings.json"
    with open(settings_file, 'w') as f:
        json.dump(settings, f)
    return tmp_path
