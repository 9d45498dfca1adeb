"""Recommendation, user and watched-list endpoints."""
import azure.functions as func
import logging
import json

from film_recommendation_service.config import get_rating_scale
from film_recommendation_service.errors import DataUnavailableError
from film_recommendation_service.schemas import ErrorResponse
from film_recommendation_service.services import RecommendationService, create_rating_store

# Initialize blueprint
bp = func.Blueprint()

# Rating store and recommendation service shared by all requests of this worker
rating_store = create_rating_store()
recommendation_service = RecommendationService(rating_store=rating_store)

logger = logging.getLogger(__name__)

MAX_RESULTS = 50


def _json_response(body, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body, default=str),  # default=str handles datetime
        status_code=status_code,
        mimetype="application/json"
    )


def _error(message: str, status_code: int) -> func.HttpResponse:
    return _json_response(ErrorResponse(error=message, status_code=status_code).to_dict(), status_code)


def _parse_count(req: func.HttpRequest):
    """Parse the `n` query parameter. Returns (n, error_response)."""
    try:
        n = int(req.params.get('n', 10))
    except ValueError:
        return None, _error("n must be an integer", 400)

    if n < 0 or n > MAX_RESULTS:
        return None, _error(f"n must be between 0 and {MAX_RESULTS}", 400)

    return n, None


@bp.route(route="users/{user_id}/recommendations", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_user_recommendations(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get film recommendations for a user.

    Query Parameters:
        - n: Number of recommendations (default: 10, max: 50)
    """
    try:
        user_id = req.route_params.get('user_id')

        if not user_id:
            return _error("user_id is required", 400)

        try:
            user_id = int(user_id)
        except ValueError:
            return _error("user_id must be an integer", 400)

        n, error = _parse_count(req)
        if error:
            return error

        result = recommendation_service.get_recommendation_response(user_id=user_id, count=n)

        if isinstance(result, ErrorResponse):
            return _json_response(result.to_dict(), result.status_code)

        return _json_response(result.to_dict())

    except Exception as e:
        logger.error(f"Error getting recommendations: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


@bp.route(route="films/{film_id}/similar", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_similar_films(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get films rated most similarly to a film.

    Query Parameters:
        - n: Number of films (default: 10, max: 50)
        - min_similarity: Minimum similarity threshold (default: 0.0)
    """
    try:
        try:
            film_id = int(req.route_params.get('film_id'))
        except (TypeError, ValueError):
            return _error("film_id must be an integer", 400)

        n, error = _parse_count(req)
        if error:
            return error

        try:
            min_similarity = float(req.params.get('min_similarity', 0.0))
        except ValueError:
            return _error("min_similarity must be a number", 400)

        if min_similarity < -1 or min_similarity > 1:
            return _error("min_similarity must be between -1 and 1", 400)

        similar = recommendation_service.get_similar_films(
            film_id=film_id,
            n=n,
            min_similarity=min_similarity
        )

        return _json_response({
            "film_id": film_id,
            "count": len(similar),
            "similar_films": similar
        })

    except DataUnavailableError as e:
        logger.error(f"Rating data unavailable: {e}")
        return _error("Rating data unavailable", 503)
    except Exception as e:
        logger.error(f"Error getting similar films: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


@bp.route(route="users", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_user(req: func.HttpRequest) -> func.HttpResponse:
    """
    Look up a user.

    Query Parameters:
        - name: User name
        - user_id: User ID
    """
    try:
        name = req.params.get('name')
        user_id = req.params.get('user_id')

        if name:
            user = rating_store.get_user_by_name(name)
        elif user_id:
            try:
                user = rating_store.get_user(int(user_id))
            except ValueError:
                return _error("user_id must be an integer", 400)
        else:
            return _error("name or user_id is required", 400)

        if user is None:
            return _error("User not found", 404)

        return _json_response({"user_id": user.user_id, "name": user.name})

    except DataUnavailableError as e:
        logger.error(f"Rating data unavailable: {e}")
        return _error("Rating data unavailable", 503)
    except Exception as e:
        logger.error(f"Error getting user: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


@bp.route(route="watched", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_watched(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get watched lists.

    Query Parameters:
        - user_id: Only this user's watched list (default: all users)
    """
    try:
        user_id = req.params.get('user_id')

        if user_id:
            try:
                user_id = int(user_id)
            except ValueError:
                return _error("user_id must be an integer", 400)

            return _json_response({
                "user_id": user_id,
                "watched": rating_store.get_ratings_by_user(user_id)
            })

        return _json_response({"watched": rating_store.get_watched_lists()})

    except DataUnavailableError as e:
        logger.error(f"Rating data unavailable: {e}")
        return _error("Rating data unavailable", 503)
    except Exception as e:
        logger.error(f"Error getting watched lists: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


@bp.route(route="watched", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def add_watched(req: func.HttpRequest) -> func.HttpResponse:
    """
    Add a film to a user's watched list.

    JSON body: {"user_id": int, "film_id": int, "rating": int}
    """
    try:
        try:
            params = req.get_json()
        except ValueError:
            return _error("invalid JSON body", 400)

        if not isinstance(params, dict):
            return _error("invalid JSON body", 400)

        # Enforce required params
        values = {}
        for param in ("user_id", "film_id", "rating"):
            if params.get(param) in (None, ""):
                return _error(f"no {param} provided", 400)
            try:
                values[param] = int(params[param])
            except (TypeError, ValueError):
                return _error(f"{param} must be an integer", 400)

        rating_min, rating_max = get_rating_scale()
        if not rating_min <= values["rating"] <= rating_max:
            return _error(f"rating must be between {rating_min} and {rating_max}", 400)

        rating_store.add_rating(values["user_id"], values["film_id"], values["rating"])
        recommendation_service.mark_stale()

        return _json_response({"message": "film successfully added", **values})

    except DataUnavailableError as e:
        logger.error(f"Rating data unavailable: {e}")
        return _error("Rating data unavailable", 503)
    except Exception as e:
        logger.error(f"Error adding watched film: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


@bp.route(route="recommendations/stats", methods=["GET"])
def get_recommendation_stats(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get statistics about the recommendation system.
    """
    try:
        return _json_response(recommendation_service.get_stats())

    except DataUnavailableError as e:
        logger.error(f"Rating data unavailable: {e}")
        return _error("Rating data unavailable", 503)
    except Exception as e:
        logger.error(f"Error getting stats: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


# noinspection PyUnusedLocal
@bp.route(route="recommendations/health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return _json_response({
        "status": "healthy",
        "service": "film-recommendation-service",
        "version": "1.0.0"
    })
