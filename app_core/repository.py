import logging
from typing import List, Optional

from models import Movie
from .collection import CONTAINS

logger = logging.getLogger(__name__)


class MoviesRepository:
    """
    Movie operations on top of a document collection.

    No validation happens here; callers go through MoviesLibraryController.
    Write methods return the number of affected documents so the caller can
    decide what a miss means.
    """

    def __init__(self, collection):
        self._movies = collection

    def add(self, movie: Movie) -> None:
        movie.id = self._movies.insert(movie.to_document())
        logger.debug("added movie %s %r", movie.id, movie.title)

    def delete(self, title: str) -> int:
        deleted = self._movies.delete_one({"title": title})
        logger.debug("delete %r -> %d", title, deleted)
        return deleted

    def update(self, movie: Movie) -> int:
        # the immutable id wins, so a renamed movie still finds its document
        if not movie.id:
            doc = self._movies.find_one({"title": movie.title})
            if doc is None:
                return 0
            movie.id = doc["id"]
        replaced = self._movies.replace_one({"id": movie.id}, movie.to_document())
        logger.debug("update %s %r -> %d", movie.id, movie.title, replaced)
        return replaced

    def get_all(self) -> List[Movie]:
        return [Movie.from_document(d) for d in self._movies.find()]

    def get_by_title(self, title: str) -> Optional[Movie]:
        doc = self._movies.find_one({"title": title})
        return Movie.from_document(doc) if doc else None

    def search_by_title_fragment(self, fragment: str) -> List[Movie]:
        return [Movie.from_document(d) for d in self._movies.find({"title": {CONTAINS: fragment}})]
