"""
Tests for scripts/recommend_for_user.py
"""

from unittest.mock import patch

from film_recommendation_service.errors import DataUnavailableError, UnknownUserError
from film_recommendation_service.schemas import Recommendation
from scripts.recommend_for_user import main, parse_args


class TestParseArgs:
    """Tests for parse_args function."""

    def test_defaults(self):
        args = parse_args(['42'])

        assert args.user_id == 42
        assert args.n == 10
        assert args.allow_negative is False
        assert args.remote_url is None

    def test_all_options(self):
        args = parse_args(['42', '--n', '3', '--allow-negative', '--remote-url', 'http://store/api'])

        assert args.n == 3
        assert args.allow_negative is True
        assert args.remote_url == 'http://store/api'


class TestMain:
    """Tests for main function."""

    @patch('scripts.recommend_for_user.create_rating_store')
    def test_main_prints_recommendations(self, mock_create_store, fake_rating_store):
        mock_create_store.return_value = fake_rating_store

        assert main(['1', '--n', '5']) == 0
        fake_rating_store.list_ratings.assert_called_once()

    @patch('scripts.recommend_for_user.RecommendationService')
    @patch('scripts.recommend_for_user.RemoteRatingStore')
    def test_main_uses_remote_url(self, mock_remote_store, mock_service_class):
        mock_service_class.return_value.recommend.return_value = [
            Recommendation(film_id=30, predicted_score=4.0, rank=1)
        ]

        assert main(['1', '--remote-url', 'http://store/api', '--allow-negative']) == 0
        mock_remote_store.assert_called_once_with(base_url='http://store/api')
        mock_service_class.assert_called_once_with(
            rating_store=mock_remote_store.return_value,
            allow_negative=True
        )

    @patch('scripts.recommend_for_user.create_rating_store')
    def test_main_user_without_recommendations(self, mock_create_store, fake_rating_store):
        mock_create_store.return_value = fake_rating_store

        assert main(['4']) == 0

    @patch('scripts.recommend_for_user.create_rating_store')
    def test_main_unknown_user_returns_error(self, mock_create_store, fake_rating_store):
        mock_create_store.return_value = fake_rating_store

        assert main(['999']) == 1

    @patch('scripts.recommend_for_user.RecommendationService')
    @patch('scripts.recommend_for_user.create_rating_store')
    def test_main_store_unavailable_returns_error(self, mock_create_store, mock_service_class):
        mock_service_class.return_value.recommend.side_effect = DataUnavailableError("store down")

        assert main(['1']) == 1

    @patch('scripts.recommend_for_user.RecommendationService')
    @patch('scripts.recommend_for_user.create_rating_store')
    def test_main_unknown_user_error_logged(self, mock_create_store, mock_service_class, caplog):
        mock_service_class.return_value.recommend.side_effect = UnknownUserError(7)

        main(['7'])

        assert "Unknown user: 7" in caplog.text
