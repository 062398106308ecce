from typing import List, Optional

from models import Movie
from .errors import (
    ArgumentError, KeyNotFoundError, NotFoundError,
    validate_movie, validate_title_arg,
)
from .repository import MoviesRepository


class MoviesLibraryController:
    """
    Entry point for callers: validates input, then delegates to the repository.

    Errors raised:
      ValidationError   add/update with a missing or out-of-range field
      ArgumentError     delete with a blank title, search with an empty fragment
      NotFoundError     delete/update of a movie that is not stored
      KeyNotFoundError  search that matches nothing
    """

    def __init__(self, repository: MoviesRepository):
        self._repository = repository

    def add(self, movie: Movie) -> None:
        validate_movie(movie)
        self._repository.add(movie)

    def delete(self, title: str) -> None:
        validate_title_arg(title)
        if self._repository.delete(title) == 0:
            raise NotFoundError(f"Movie with title '{title}' not found.")

    def update(self, movie: Movie) -> None:
        validate_movie(movie)
        if self._repository.update(movie) == 0:
            raise NotFoundError(f"Movie with title '{movie.title}' not found.")

    def get_all(self) -> List[Movie]:
        return self._repository.get_all()

    def get_by_title(self, title: str) -> Optional[Movie]:
        return self._repository.get_by_title(title)

    def search_by_title_fragment(self, fragment: str) -> List[Movie]:
        if not isinstance(fragment, str) or fragment == "":
            raise ArgumentError("Title fragment cannot be empty")
        found = self._repository.search_by_title_fragment(fragment)
        if not found:
            raise KeyNotFoundError(f"No movies found with title containing '{fragment}'.")
        return found
