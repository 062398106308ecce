import logging
import uuid
from typing import Any, Dict, Iterable, Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from models import DOCUMENT_FIELDS, MovieDocument

logger = logging.getLogger(__name__)

CONTAINS = "$contains"


class SqlMovieCollection:
    """
    Document-style collection of movies on top of a SQLAlchemy session.

    Filters are plain dicts:
      {"title": "Alien"}                     exact (case-sensitive) match
      {"title": {"$contains": "Ali"}}        case-sensitive substring match
    An empty filter matches every document.
    """

    def __init__(self, session, model=MovieDocument):
        self.session = session
        self.model = model

    # -----------------------------
    # writes
    # -----------------------------

    def insert(self, document: Dict[str, Any]) -> str:
        row = self._new_row(document)
        self.session.add(row)
        self._commit()
        return row.id

    def insert_many(self, documents: Iterable[Dict[str, Any]]) -> List[str]:
        rows = [self._new_row(d) for d in documents]
        self.session.add_all(rows)
        self._commit()
        logger.debug("inserted %d movie documents", len(rows))
        return [r.id for r in rows]

    def delete_one(self, filter: Optional[Dict[str, Any]]) -> int:
        row = self._first_row(filter)
        if row is None:
            return 0
        self.session.delete(row)
        self._commit()
        return 1

    def replace_one(self, filter: Optional[Dict[str, Any]], document: Dict[str, Any]) -> int:
        row = self._first_row(filter)
        if row is None:
            return 0
        for name in DOCUMENT_FIELDS:
            if name != "id":
                setattr(row, name, document.get(name))
        self._commit()
        return 1

    # -----------------------------
    # reads
    # -----------------------------

    def find(self, filter: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        for row in self._rows(filter):
            yield _to_document(row)

    def find_one(self, filter: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        row = self._first_row(filter)
        return _to_document(row) if row is not None else None

    def count(self, filter: Optional[Dict[str, Any]] = None) -> int:
        return sum(1 for _ in self._rows(filter))

    # -----------------------------
    # helpers
    # -----------------------------

    def _commit(self):
        # a failed commit must not leave the injected session unusable
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("movie collection write rolled back")
            raise

    def _new_row(self, document: Dict[str, Any]):
        data = {name: document.get(name) for name in DOCUMENT_FIELDS}
        data["id"] = data["id"] or uuid.uuid4().hex
        return self.model(**data)

    def _rows(self, filter):
        filter = filter or {}
        stmt = select(self.model)
        for name, cond in filter.items():
            stmt = stmt.where(self._clause(name, cond))
        stmt = stmt.order_by(self.model.pk.asc())
        for row in self.session.scalars(stmt).all():
            # LIKE is case-insensitive on some backends; re-check in Python
            if _matches(row, filter):
                yield row

    def _first_row(self, filter):
        for row in self._rows(filter):
            return row
        return None

    def _clause(self, name: str, cond: Any):
        if name not in DOCUMENT_FIELDS:
            raise ValueError(f"unknown document field: {name!r}")
        column = getattr(self.model, name)
        if isinstance(cond, dict):
            ops = set(cond) - {CONTAINS}
            if ops or CONTAINS not in cond:
                raise ValueError(f"unsupported filter for {name!r}: {cond!r}")
            return column.contains(cond[CONTAINS], autoescape=True)
        if cond is None:
            return column.is_(None)
        return column == cond


def _to_document(row) -> Dict[str, Any]:
    return {name: getattr(row, name) for name in DOCUMENT_FIELDS}


def _matches(row, filter: Dict[str, Any]) -> bool:
    for name, cond in filter.items():
        value = getattr(row, name)
        if isinstance(cond, dict):
            if value is None or cond[CONTAINS] not in value:
                return False
        elif value != cond:
            return False
    return True
