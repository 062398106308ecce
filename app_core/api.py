from flask import Blueprint, request, abort
from models import db, Movie
from .collection import SqlMovieCollection
from .controller import MoviesLibraryController
from .errors import expect_json, read_json, require_auth
from .repository import MoviesRepository

api_bp = Blueprint("api", __name__, url_prefix="/api")  # blueprint for API routes

def build_controller() -> MoviesLibraryController:
    # built per request on the scoped session; nothing is shared between requests
    return MoviesLibraryController(MoviesRepository(SqlMovieCollection(db.session)))

def movie_to_dict(m: Movie):
    return m.to_document()

def movie_from_json(data, with_id=False) -> Movie:
    # ids are assigned on insert; only updates may name one
    return Movie(
        id=(data.get("id") or None) if with_id else None,
        title=data.get("title"),
        director=data.get("director"),
        year_released=data.get("year_released"),
        genre=data.get("genre"),
        duration=data.get("duration"),
        rating=data.get("rating"),
    )

@api_bp.get("/health")
def health():
    return {"ok": True}

@api_bp.get("/movies")
def list_movies():
    items = build_controller().get_all()
    return {"total": len(items), "items": [movie_to_dict(m) for m in items]}

@api_bp.get("/search/movies")
def search_movies():
    found = build_controller().search_by_title_fragment(request.args.get("q"))
    return {"total": len(found), "items": [movie_to_dict(m) for m in found]}

@api_bp.get("/movies/<path:title>")
def get_movie(title):
    m = build_controller().get_by_title(title)
    if m is None:
        abort(404, f"Movie with title '{title}' not found.")
    return movie_to_dict(m)

@api_bp.post("/movies")
@require_auth
def create_movie():
    expect_json()
    m = movie_from_json(read_json())
    build_controller().add(m)
    return movie_to_dict(m), 201

@api_bp.put("/movies")
@require_auth
def update_movie():
    expect_json()
    m = movie_from_json(read_json(), with_id=True)
    build_controller().update(m)
    return movie_to_dict(m)

@api_bp.delete("/movies/<path:title>")
@require_auth
def delete_movie(title):
    build_controller().delete(title)
    return {"deleted": title}
