#just using this to load sample data into the db
from app import app
from models import db, Movie
from app_core.api import build_controller

with app.app_context():
    db.drop_all(); db.create_all()
    controller = build_controller()
    rows = [
        Movie(title="The Matrix", director="Lana Wachowski", year_released=1999, genre="Sci-Fi", duration=136, rating=8.7),
        Movie(title="Inception", director="Christopher Nolan", year_released=2010, genre="Sci-Fi", duration=148, rating=8.8),
        Movie(title="Dune: Part One", director="Denis Villeneuve", year_released=2021, genre="Sci-Fi", duration=155, rating=8.0),
    ]
    for m in rows:
        controller.add(m)
    print("Seeded:", len(controller.get_all()))
