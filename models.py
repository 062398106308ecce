from dataclasses import dataclass, fields
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

DOCUMENT_FIELDS = ("id", "title", "director", "year_released", "genre", "duration", "rating")


class MovieDocument(db.Model): # storage row for one movie document
    __tablename__ = "movies"
    pk = db.Column(db.Integer, primary_key=True)          # insertion order
    id = db.Column(db.String(32), unique=True, nullable=False)
    title = db.Column(db.String(255), nullable=False, index=True)
    director = db.Column(db.String(255))
    year_released = db.Column(db.Integer)
    genre = db.Column(db.String(64))
    duration = db.Column(db.Integer)        # minutes
    rating = db.Column(db.Float)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<MovieDocument {self.id} {self.title!r}>"


@dataclass
class Movie:
    """Domain movie record passed between callers, the controller and the repository."""
    title: str | None = None
    director: str | None = None
    year_released: int | None = None
    genre: str | None = None
    duration: int | None = None
    rating: float | None = None
    id: str | None = None  # assigned on insert, never changed by updates

    def to_document(self) -> dict:
        return {name: getattr(self, name) for name in DOCUMENT_FIELDS}

    @classmethod
    def from_document(cls, doc: dict) -> "Movie":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in doc.items() if k in known})
