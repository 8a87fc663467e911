"""Shared fixtures for the kinpath test suite."""
import os

# Set env vars BEFORE any kinpath imports
os.environ.setdefault("KINPATH_SEARCH_TIMEOUT", "0")
os.environ.setdefault("KINPATH_DEFAULT_LOCALE", "en")

import pytest
import kuzu
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kinpath.db import _init_schema, get_conn
from kinpath import crud, trees
from kinpath.models import Base, Sex
from kinpath.provider import PersonRecord, SnapshotProvider
from kinpath.vocabulary import RelationshipVocabulary


# ── JSON import constants ──

SIMPLE_GRAPH = {
    "people": [
        {"id": "ali", "display_name": "Ali", "sex": "M"},
        {"id": "omar", "display_name": "Omar", "sex": "M"},
        {"id": "sara", "display_name": "Sara", "sex": "F"},
        {"id": "nadia", "display_name": "Nadia", "sex": "F", "is_deceased": True},
    ],
    "parent_child": [
        {"parent": "ali", "child": "omar"},
        {"parent": "ali", "child": "sara"},
    ],
    "unions": [["omar", "nadia"]],
}


# ── In-memory graphs ──

def make_snapshot(people: dict, parent_child=(), unions=(), tree_id="t1") -> SnapshotProvider:
    """people maps id -> sex code."""
    records = [PersonRecord(id=pid, sex=Sex.parse(sex), tree_id=tree_id, display_name=pid.title())
               for pid, sex in people.items()]
    return SnapshotProvider(records, parent_child, unions)


@pytest.fixture
def vocabulary():
    return RelationshipVocabulary.default()


@pytest.fixture
def family():
    """Three generations plus an in-law and a stranger.

    hassan -> ali, karim
    ali -> omar, sara        karim -> rania
    omar + nadia -> yusuf    sara -> layla
    zed has no edges
    """
    return make_snapshot(
        {
            "hassan": "M", "ali": "M", "karim": "M", "omar": "M", "sara": "F",
            "rania": "F", "nadia": "F", "yusuf": "M", "layla": "F", "zed": "U",
        },
        parent_child=[
            ("hassan", "ali"), ("hassan", "karim"),
            ("ali", "omar"), ("ali", "sara"), ("karim", "rania"),
            ("omar", "yusuf"), ("nadia", "yusuf"), ("sara", "layla"),
        ],
        unions=[("omar", "nadia")],
    )


@pytest.fixture
def chain():
    """p0 -> p1 -> ... -> p9, all sex U."""
    ids = [f"p{i}" for i in range(10)]
    return make_snapshot({pid: "U" for pid in ids},
                         parent_child=list(zip(ids, ids[1:])))


# ── Database fixtures ──

@pytest.fixture
def db_path(tmp_path):
    """Temp directory for a fresh KuzuDB."""
    return tmp_path / "test_db"


@pytest.fixture
def db(db_path):
    """Initialized KuzuDB with the full schema."""
    database = kuzu.Database(str(db_path))
    _init_schema(database)
    yield database
    database.close()


@pytest.fixture
def conn(db):
    """KuzuDB connection for unit tests."""
    return kuzu.Connection(db)


@pytest.fixture
def tree_one(conn):
    return trees.create_tree(conn, "Tree One")


@pytest.fixture
def tree_two(conn):
    return trees.create_tree(conn, "Tree Two")


@pytest.fixture
def kuzu_family(conn, tree_one):
    """Ali -> Omar, Ali -> Sara, union {Omar, Nadia} stored in KuzuDB."""
    tid = tree_one["id"]
    people = {
        "ali": crud.create_person(conn, "Ali", "M", tree_id=tid),
        "omar": crud.create_person(conn, "Omar", "M", tree_id=tid),
        "sara": crud.create_person(conn, "Sara", "F", tree_id=tid),
        "nadia": crud.create_person(conn, "Nadia", "F", tree_id=tid),
    }
    crud.add_parent(conn, tid, people["ali"]["id"], people["omar"]["id"])
    crud.add_parent(conn, tid, people["ali"]["id"], people["sara"]["id"])
    crud.create_union(conn, tid, [people["omar"]["id"], people["nadia"]["id"]])
    return {name: p["id"] for name, p in people.items()} | {"tree": tid}


# ── SQLAlchemy fixtures ──

@pytest.fixture
def session():
    """In-memory SQLite session shared across threads."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    db = Session()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


# ── FastAPI app fixtures ──

@pytest.fixture
def app_with_db(db):
    """FastAPI app with dependency override pointing at test DB."""
    from kinpath.main import app

    def override_get_conn():
        c = kuzu.Connection(db)
        try:
            yield c
        finally:
            pass

    app.dependency_overrides[get_conn] = override_get_conn
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_with_db):
    return TestClient(app_with_db, raise_server_exceptions=False)
