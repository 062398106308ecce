import logging
from flask import request, current_app
from werkzeug.exceptions import HTTPException, BadRequest, UnsupportedMediaType, Unauthorized, Forbidden
from typing import Any, Dict
from functools import wraps

from .metrics import DOMAIN_ERROR_COUNT

logger = logging.getLogger(__name__)

# -----------------------------
# Domain errors
# -----------------------------

class MoviesLibraryError(Exception):
    status = 500
    code = "MOVIES_LIBRARY_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class ValidationError(MoviesLibraryError, ValueError):
    status = 400
    code = "VALIDATION_ERROR"


class ArgumentError(MoviesLibraryError, ValueError):
    status = 400
    code = "ARGUMENT_ERROR"


class NotFoundError(MoviesLibraryError, LookupError):
    status = 404
    code = "MOVIE_NOT_FOUND"


class KeyNotFoundError(MoviesLibraryError, KeyError):
    # KeyError would otherwise repr() the message in str()
    status = 404
    code = "NO_MATCHING_MOVIES"


# -----------------------------
# JSON error handlers
# -----------------------------

def _envelope(status: int, code: str, message: str):
    return {"error": {"status": status, "code": code, "message": message}}, status

def install_json_error_handlers(app):
    @app.errorhandler(MoviesLibraryError)
    def handle_domain(e: MoviesLibraryError):
        DOMAIN_ERROR_COUNT.labels(e.code).inc()
        return _envelope(e.status, e.code, e.message)

    @app.errorhandler(HTTPException)
    def handle_http(e: HTTPException):
        return _envelope(e.code, e.name.replace(" ", "_").upper(), e.description)

    @app.errorhandler(Exception)
    def handle_generic(e: Exception):
        # Avoid leaking details in production responses
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return _envelope(500, "INTERNAL_SERVER_ERROR", "Internal Server Error")


# -----------------------------
# Validators & helpers
# -----------------------------

MOVIE_INVALID = "Movie is not valid."
TITLE_MAX = 255
GENRE_MAX = 64
YEAR_MIN, YEAR_MAX = 1888, 2100
RATING_MIN, RATING_MAX = 0.0, 10.0

def is_blank(v: Any) -> bool:
    return not isinstance(v, str) or not v.strip()

def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)

def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)

def is_valid_movie(movie) -> bool:
    if movie is None:
        return False
    # required
    if is_blank(movie.title) or len(movie.title) > TITLE_MAX:
        return False
    if is_blank(movie.director) or len(movie.director) > TITLE_MAX:
        return False
    # optional, range-checked when present
    if movie.year_released is not None:
        if not _is_int(movie.year_released) or not (YEAR_MIN <= movie.year_released <= YEAR_MAX):
            return False
    if movie.genre is not None:
        if not isinstance(movie.genre, str) or len(movie.genre) > GENRE_MAX:
            return False
    if movie.duration is not None:
        if not _is_int(movie.duration) or movie.duration <= 0:
            return False
    if movie.rating is not None:
        if not _is_number(movie.rating) or not (RATING_MIN <= movie.rating <= RATING_MAX):
            return False
    return True

def validate_movie(movie) -> None:
    if not is_valid_movie(movie):
        logger.warning("rejected movie %r", movie)
        raise ValidationError(MOVIE_INVALID)

def validate_title_arg(title: Any) -> str:
    if is_blank(title):
        raise ArgumentError("Title cannot be empty")
    return title

def expect_json():
    if request.method in {"POST", "PUT", "PATCH"}:
        ctype = request.headers.get("Content-Type", "")
        if "application/json" not in ctype:
            raise UnsupportedMediaType("Use Content-Type: application/json")

def read_json() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        raise BadRequest("Invalid or missing JSON body")
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


# -----------------------------
# Auth decorator
# -----------------------------

def require_auth(fn):
    """
    If API_TOKEN is configured on the app, require a Bearer token on mutating requests.
    When API_TOKEN is not set, auth is effectively disabled (everything allowed).
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = current_app.config.get("API_TOKEN")
        if not token:
            return fn(*args, **kwargs)

        hdr = request.headers.get("Authorization", "")
        parts = hdr.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise Unauthorized("Missing or invalid Authorization header")
        if parts[1] != token:
            raise Forbidden("Invalid token")
        return fn(*args, **kwargs)
    return wrapper
