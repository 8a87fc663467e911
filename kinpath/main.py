import logging
from typing import Literal

import kuzu
from fastapi import FastAPI, Depends, HTTPException, Query

from . import config, crud, schemas, trees
from .db import get_conn
from .engine import find_relationship_path
from .kuzu_provider import KuzuGraphProvider
from .pathfinder import SearchCancelled
from .provider import GraphProviderError
from .vocabulary import RelationshipVocabulary

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="kinpath")


def get_vocabulary(conn: kuzu.Connection = Depends(get_conn)) -> RelationshipVocabulary:
    """Vocabulary from the RelationshipType table, or the bundled seed when it is empty."""
    vocabulary = RelationshipVocabulary.from_kuzu(conn)
    if len(vocabulary) == 0:
        return RelationshipVocabulary.default()
    return vocabulary


@app.get("/health")
def health():
    return {"ok": True}


# ── Trees ──

@app.post("/api/trees", response_model=schemas.TreeOut)
def create_tree(body: schemas.TreeCreate, conn: kuzu.Connection = Depends(get_conn)):
    return trees.create_tree(conn, body.name)


@app.get("/api/trees", response_model=list[schemas.TreeOut])
def list_trees(conn: kuzu.Connection = Depends(get_conn)):
    return trees.list_trees(conn)


@app.get("/api/trees/{tree_id}", response_model=schemas.TreeOut)
def get_tree(tree_id: str, conn: kuzu.Connection = Depends(get_conn)):
    return trees.require_tree(conn, tree_id)


@app.delete("/api/trees/{tree_id}")
def delete_tree(tree_id: str, conn: kuzu.Connection = Depends(get_conn)):
    trees.require_tree(conn, tree_id)
    trees.delete_tree(conn, tree_id)
    logger.info("Deleted tree %s", tree_id)
    return {"ok": True}


# ── People and edges ──

@app.post("/api/trees/{tree_id}/people", response_model=schemas.PersonOut)
def add_person(tree_id: str, body: schemas.PersonCreate, conn: kuzu.Connection = Depends(get_conn)):
    trees.require_tree(conn, tree_id)
    return crud.create_person(
        conn, body.display_name, body.sex, body.notes, tree_id=tree_id,
        birth_date=body.birth_date, death_date=body.death_date, is_deceased=body.is_deceased,
    )


@app.get("/api/trees/{tree_id}/people", response_model=list[schemas.PersonOut])
def list_people(tree_id: str, conn: kuzu.Connection = Depends(get_conn)):
    trees.require_tree(conn, tree_id)
    return crud.list_people(conn, tree_id)


@app.post("/api/trees/{tree_id}/parents", response_model=schemas.ParentOut)
def add_parent(tree_id: str, body: schemas.ParentCreate, conn: kuzu.Connection = Depends(get_conn)):
    trees.require_tree(conn, tree_id)
    try:
        return crud.add_parent(conn, tree_id, body.parent_id, body.child_id, body.rel_type)
    except ValueError as e:
        raise HTTPException(400, str(e))


@app.get("/api/trees/{tree_id}/parents", response_model=list[schemas.ParentOut])
def list_parents(tree_id: str, conn: kuzu.Connection = Depends(get_conn)):
    trees.require_tree(conn, tree_id)
    return crud.list_parent_edges(conn, tree_id)


@app.post("/api/trees/{tree_id}/unions", response_model=schemas.UnionOut)
def add_union(tree_id: str, body: schemas.UnionCreate, conn: kuzu.Connection = Depends(get_conn)):
    trees.require_tree(conn, tree_id)
    try:
        return crud.create_union(conn, tree_id, body.member_ids)
    except ValueError as e:
        raise HTTPException(400, str(e))


# ── Relationship queries ──

@app.get("/api/trees/{tree_id}/relationship-path", response_model=schemas.RelationshipResult)
def relationship_path(
    tree_id: str,
    person1_id: str = "",
    person2_id: str = "",
    max_depth: int = Query(config.MAX_DEPTH, ge=0, le=config.MAX_DEPTH_LIMIT),
    locale: Literal["en", "ar", "nob"] | None = None,
    conn: kuzu.Connection = Depends(get_conn),
    vocabulary: RelationshipVocabulary = Depends(get_vocabulary),
):
    if not person1_id.strip() or not person2_id.strip():
        raise HTTPException(400, "person1_id and person2_id are required")
    trees.require_tree(conn, tree_id)
    try:
        return find_relationship_path(
            KuzuGraphProvider(conn), tree_id, person1_id.strip(), person2_id.strip(),
            max_depth=max_depth, locale=locale, vocabulary=vocabulary,
        )
    except GraphProviderError:
        raise HTTPException(503, "Family graph unavailable")
    except SearchCancelled:
        raise HTTPException(504, "Relationship search timed out")


@app.get("/api/relationship-types", response_model=list[schemas.RelationshipTypeOut])
def relationship_types(vocabulary: RelationshipVocabulary = Depends(get_vocabulary)):
    return [
        {"id": e.type_id, "key": e.key, "category": e.category, "names": e.names}
        for e in vocabulary.entries()
    ]
