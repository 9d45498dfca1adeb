"""
Print film recommendations for a user from the configured rating store.

Usage:
    python scripts/recommend_for_user.py 42
    python scripts/recommend_for_user.py 42 --n 20 --allow-negative
    python scripts/recommend_for_user.py 42 --remote-url http://localhost:7071/api
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import logging
import argparse

from film_recommendation_service.errors import RecommendationError
from film_recommendation_service.services import RecommendationService, RemoteRatingStore, create_rating_store

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Recommend films for a user'
    )
    parser.add_argument('user_id', type=int, help='User to recommend films for')
    parser.add_argument(
        '--n',
        type=int,
        default=10,
        help='Number of recommendations (default: 10)'
    )
    parser.add_argument(
        '--allow-negative',
        action='store_true',
        help='Let negatively correlated users contribute to predictions'
    )
    parser.add_argument(
        '--remote-url',
        type=str,
        default=None,
        help='Read ratings from a remote film-recommend service instead of the configured store'
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main execution function."""
    args = parse_args(argv)

    rating_store = RemoteRatingStore(base_url=args.remote_url) if args.remote_url else create_rating_store()
    service = RecommendationService(
        rating_store=rating_store,
        allow_negative=args.allow_negative or None
    )

    try:
        recommendations = service.recommend(args.user_id, args.n)
    except RecommendationError as e:
        logger.error(str(e))
        return 1

    if not recommendations:
        logger.info(f"No recommendations for user {args.user_id}")
        return 0

    logger.info(f"Recommendations for user {args.user_id}:")
    for rec in recommendations:
        logger.info(f"  {rec.rank}. film {rec.film_id} (predicted: {rec.predicted_score:.2f})")

    return 0


if __name__ == '__main__':
    sys.exit(main())
