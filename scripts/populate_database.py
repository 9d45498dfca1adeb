"""
Populate the database with users, films and ratings from CSV files.

Expected files in the input directory:
    users.csv    user_id,name
    films.csv    film_id,title[,year][,genres]   (genres pipe-separated)
    ratings.csv  user_id,film_id,rating

Later rows in ratings.csv replace earlier rows for the same (user_id, film_id).
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import logging
import pandas as pd
import numpy as np
import argparse

from sqlalchemy.orm import Session

from film_recommendation_service.config import get_rating_scale
from film_recommendation_service.repos import FilmRepository, UserRepository, WatchedRepository
from film_recommendation_service.services import DatabaseRatingStore, RecommendationService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def clean_dataframe_for_db(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean DataFrame by replacing NaN/NA values with None for database compatibility.

    Args:
        df: Input DataFrame

    Returns:
        Cleaned DataFrame
    """
    df = df.astype(object)
    df = df.replace({np.nan: None, pd.NA: None})
    df = df.where(pd.notnull(df), None)

    return df


def _read_csv(path: Path, required_columns: list[str]) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    df = pd.read_csv(path)
    missing = [col for col in required_columns if col not in df.columns]
    if missing:
        raise ValueError(f"{path.name} is missing columns: {', '.join(missing)}")

    logger.info(f"Loaded {len(df)} rows from {path}")
    return df


def load_users(db: Session, input_dir: Path) -> int:
    """
    Load users.csv into the database.

    Returns:
        Number of users stored
    """
    users_df = _read_csv(input_dir / 'users.csv', ['user_id', 'name'])
    users_df = clean_dataframe_for_db(users_df)

    users_data = [
        {'user_id': int(row['user_id']), 'name': row['name']}
        for row in users_df.to_dict('records')
    ]
    return UserRepository(db).bulk_store_users(users_data)


def load_films(db: Session, input_dir: Path) -> int:
    """
    Load films.csv into the database, replacing the catalog.

    Returns:
        Number of films stored
    """
    films_df = _read_csv(input_dir / 'films.csv', ['film_id', 'title'])
    films_df = clean_dataframe_for_db(films_df)

    films_data = []
    for row in films_df.to_dict('records'):
        genres = row.get('genres')
        films_data.append({
            'film_id': int(row['film_id']),
            'title': row['title'],
            'year': int(row['year']) if row.get('year') is not None else None,
            'genres': [g.strip() for g in genres.split('|') if g.strip()] if genres else None,
        })

    return FilmRepository(db).bulk_store_films(films_data)


def load_ratings(db: Session, input_dir: Path, rating_min: int, rating_max: int) -> int:
    """
    Load ratings.csv into the database, skipping ratings outside the scale.

    Returns:
        Number of ratings stored
    """
    ratings_df = _read_csv(input_dir / 'ratings.csv', ['user_id', 'film_id', 'rating'])
    ratings_df = ratings_df.dropna(subset=['user_id', 'film_id', 'rating'])

    in_scale = ratings_df['rating'].between(rating_min, rating_max)
    if not in_scale.all():
        logger.warning(f"Skipping {(~in_scale).sum()} ratings outside {rating_min}-{rating_max}")
        ratings_df = ratings_df[in_scale]

    records = [
        {'user_id': int(row.user_id), 'film_id': int(row.film_id), 'rating': int(row.rating)}
        for row in ratings_df.itertuples(index=False)
    ]
    return WatchedRepository(db).bulk_store_watched(records)


def verify_recommendations(service: RecommendationService, user_ids: list[int], n: int = 5):
    """
    Log recommendations for a few users.

    Args:
        service: Recommendation service instance
        user_ids: Users to test
        n: Recommendations per user
    """
    logger.info("\n" + "="*70)
    logger.info("TESTING RECOMMENDATIONS")
    logger.info("="*70)

    for user_id in user_ids:
        logger.info(f"\nRecommendations for user {user_id}:")
        recommendations = service.recommend(user_id, n)

        if recommendations:
            for rec in recommendations:
                logger.info(f"  {rec.rank}. film {rec.film_id} (predicted: {rec.predicted_score:.2f})")
        else:
            logger.warning("  No recommendations found")


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description='Populate database with users, films and ratings'
    )
    parser.add_argument(
        '--input-dir',
        type=str,
        default='data/raw',
        help='Input directory with users.csv, films.csv and ratings.csv (default: data/raw)'
    )
    parser.add_argument(
        '--skip-test',
        action='store_true',
        help='Skip recommendation testing'
    )

    args = parser.parse_args()

    input_dir = project_root / args.input_dir
    rating_min, rating_max = get_rating_scale()

    logger.info("="*70)
    logger.info("POPULATE DATABASE")
    logger.info("="*70)
    logger.info(f"Input directory: {input_dir}")
    logger.info(f"Rating scale: {rating_min}-{rating_max}")

    from film_recommendation_service.models import Base
    from film_recommendation_service.models.database import SessionLocal, engine

    try:
        Base.metadata.create_all(engine)

        db = SessionLocal()
        try:
            user_count = load_users(db, input_dir)
            film_count = load_films(db, input_dir)
            rating_count = load_ratings(db, input_dir, rating_min, rating_max)
            user_ids = [user.user_id for user in UserRepository(db).get_all_users()[:3]]
        finally:
            db.close()

        if not args.skip_test:
            service = RecommendationService(rating_store=DatabaseRatingStore(SessionLocal))
            verify_recommendations(service, user_ids)
        else:
            logger.info("\n⊘ Skipping recommendation testing")

        logger.info("\n" + "="*70)
        logger.info("✓ DATABASE POPULATION COMPLETE")
        logger.info("="*70)
        logger.info(f"Users: {user_count}")
        logger.info(f"Films: {film_count}")
        logger.info(f"Ratings: {rating_count}")

    except Exception as e:
        logger.error(f"Error during database population: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
