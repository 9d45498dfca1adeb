"""Collaborative-filtering engine: rating matrix, similarity, prediction, ranking"""

from film_recommendation_service.ml.predictor import RatingPredictor
from film_recommendation_service.ml.ranker import FilmRanker
from film_recommendation_service.ml.rating_matrix import RatingMatrix
from film_recommendation_service.ml.similarity_computer import SimilarityComputer, SimilarityScore

__all__ = [
    "FilmRanker",
    "RatingMatrix",
    "RatingPredictor",
    "SimilarityComputer",
    "SimilarityScore",
]
