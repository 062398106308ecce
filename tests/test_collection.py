import os, sys, pytest
import types

from sqlalchemy.exc import IntegrityError

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from models import db, Movie
from app_core.collection import SqlMovieCollection
from app_core.repository import MoviesRepository


@pytest.fixture()
def movies(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path/'collection.db'}",
    })
    ctx = app.app_context()
    ctx.push()
    yield SqlMovieCollection(db.session)
    db.session.remove()
    db.drop_all()
    db.engine.dispose()
    ctx.pop()


def _doc(title, **kw):
    doc = {"title": title, "director": "Director", "year_released": 2000, "genre": "Drama", "duration": 100, "rating": 6.5}
    doc.update(kw)
    return doc


def test_insert_generates_id_and_find_one_returns_document(movies):
    new_id = movies.insert(_doc("Alien"))
    assert isinstance(new_id, str) and len(new_id) == 32

    doc = movies.find_one({"title": "Alien"})
    assert doc == {**_doc("Alien"), "id": new_id}

def test_insert_keeps_given_id(movies):
    assert movies.insert(_doc("Alien", id="fixed-id")) == "fixed-id"
    assert movies.find_one({"id": "fixed-id"})["title"] == "Alien"

def test_insert_many_and_find_in_insertion_order(movies):
    ids = movies.insert_many([_doc("A"), _doc("B"), _doc("C")])
    assert len(set(ids)) == 3
    assert [d["title"] for d in movies.find()] == ["A", "B", "C"]

def test_find_is_lazy(movies):
    movies.insert(_doc("A"))
    assert isinstance(movies.find(), types.GeneratorType)

def test_find_contains_filter(movies):
    movies.insert_many([_doc("Star Wars"), _doc("Starship Troopers"), _doc("star trek")])
    found = [d["title"] for d in movies.find({"title": {"$contains": "Star"}})]
    assert found == ["Star Wars", "Starship Troopers"]

def test_find_with_several_conditions(movies):
    movies.insert_many([_doc("Heat", year_released=1995), _doc("Heat", year_released=1986)])
    found = list(movies.find({"title": "Heat", "year_released": 1986}))
    assert len(found) == 1
    assert found[0]["year_released"] == 1986

def test_find_none_value_matches_null(movies):
    movies.insert_many([_doc("A", genre=None), _doc("B")])
    assert [d["title"] for d in movies.find({"genre": None})] == ["A"]

def test_find_one_missing_returns_none(movies):
    assert movies.find_one({"title": "nope"}) is None

def test_delete_one_counts(movies):
    movies.insert(_doc("A"))
    assert movies.delete_one({"title": "A"}) == 1
    assert movies.delete_one({"title": "A"}) == 0
    assert movies.count() == 0

def test_replace_one_overwrites_fields_but_not_id(movies):
    original_id = movies.insert(_doc("A"))
    replaced = movies.replace_one({"id": original_id}, _doc("B", id="other", genre=None, rating=9.5))
    assert replaced == 1

    doc = movies.find_one({"id": original_id})
    assert doc["title"] == "B"
    assert doc["genre"] is None
    assert doc["rating"] == 9.5
    assert movies.find_one({"id": "other"}) is None

def test_replace_one_no_match(movies):
    assert movies.replace_one({"title": "missing"}, _doc("X")) == 0
    assert movies.count() == 0

def test_count_with_filter(movies):
    movies.insert_many([_doc("A"), _doc("A"), _doc("B")])
    assert movies.count() == 3
    assert movies.count({"title": "A"}) == 2

@pytest.mark.parametrize("bad", [
    {"budget": 10},
    {"title": {"$regex": "A.*"}},
    {"title": {}},
])
def test_unsupported_filters_raise(movies, bad):
    with pytest.raises(ValueError):
        movies.find_one(bad)


# ---- repository on top of the collection ----

def test_repository_add_sets_id_and_get_by_title(movies):
    repo = MoviesRepository(movies)
    m = Movie(title="Alien", director="Ridley Scott", year_released=1979, genre="Horror", duration=117, rating=8.5)
    repo.add(m)
    assert m.id
    assert repo.get_by_title("Alien") == m

def test_repository_does_not_validate(movies):
    repo = MoviesRepository(movies)
    repo.add(Movie(title="No director"))
    assert repo.get_by_title("No director").director is None

def test_repository_delete_and_update_report_counts(movies):
    repo = MoviesRepository(movies)
    assert repo.delete("missing") == 0
    assert repo.update(Movie(title="missing", director="x")) == 0

    m = Movie(title="Alien", director="Ridley Scott")
    repo.add(m)
    m.title = "Aliens"
    assert repo.update(m) == 1
    assert repo.get_by_title("Alien") is None
    assert repo.delete("Aliens") == 1

def test_repository_get_all_and_search(movies):
    repo = MoviesRepository(movies)
    assert repo.get_all() == []
    assert repo.search_by_title_fragment("x") == []
    repo.add(Movie(title="Alien", director="Ridley Scott"))
    repo.add(Movie(title="Aliens", director="James Cameron"))
    repo.add(Movie(title="Heat", director="Michael Mann"))
    assert len(repo.get_all()) == 3
    assert [m.title for m in repo.search_by_title_fragment("Alien")] == ["Alien", "Aliens"]

def test_failed_write_is_rolled_back(movies):
    movies.insert(_doc("A", id="dup"))
    with pytest.raises(IntegrityError):
        movies.insert_many([_doc("B"), _doc("C", id="dup")])

    # the session is usable again and nothing from the failed batch was kept
    assert [d["title"] for d in movies.find()] == ["A"]
    movies.insert(_doc("D"))
    assert movies.count() == 2
