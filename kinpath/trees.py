"""FamilyTree CRUD. A tree is the scope every relationship query runs in."""
import uuid
from datetime import datetime, timezone
import kuzu


def create_tree(conn: kuzu.Connection, name: str) -> dict:
    tid = str(uuid.uuid4())
    now = datetime.now(timezone.utc).isoformat()
    conn.execute(
        "CREATE (t:FamilyTree {id: $id, name: $name, created_at: $ts})",
        {"id": tid, "name": name, "ts": now}
    )
    return {"id": tid, "name": name, "created_at": now}


def get_tree(conn: kuzu.Connection, tree_id: str) -> dict | None:
    result = conn.execute(
        "MATCH (t:FamilyTree) WHERE t.id = $id RETURN t.id, t.name, t.created_at",
        {"id": tree_id}
    )
    if result.has_next():
        row = result.get_next()
        return {"id": row[0], "name": row[1], "created_at": row[2]}
    return None


def list_trees(conn: kuzu.Connection) -> list[dict]:
    result = conn.execute(
        "MATCH (t:FamilyTree) RETURN t.id, t.name, t.created_at ORDER BY t.name"
    )
    trees = []
    while result.has_next():
        row = result.get_next()
        trees.append({"id": row[0], "name": row[1], "created_at": row[2]})
    return trees


def delete_tree(conn: kuzu.Connection, tree_id: str):
    """Delete a tree with its people, parent edges and unions."""
    conn.execute(
        "MATCH (p:Person) WHERE p.tree_id = $tid DETACH DELETE p",
        {"tid": tree_id}
    )
    conn.execute(
        "MATCH (u:FamilyUnion) WHERE u.tree_id = $tid DETACH DELETE u",
        {"tid": tree_id}
    )
    conn.execute(
        "MATCH (t:FamilyTree) WHERE t.id = $tid DETACH DELETE t",
        {"tid": tree_id}
    )


def require_tree(conn: kuzu.Connection, tree_id: str) -> dict:
    """Return the tree or raise a 404 HTTPException."""
    from fastapi import HTTPException
    tree = get_tree(conn, tree_id)
    if tree is None:
        raise HTTPException(404, "Tree not found")
    return tree
