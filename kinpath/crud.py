"""Person, parent-edge and union writes against KuzuDB."""
import uuid
from datetime import datetime, timezone

import kuzu

from .models import Sex

PERSON_FIELDS = "p.id, p.display_name, p.sex, p.notes, p.tree_id, p.birth_date, p.death_date, p.is_deceased"


def _person_dict(row) -> dict:
    return {
        "id": row[0], "display_name": row[1], "sex": row[2], "notes": row[3] or None,
        "tree_id": row[4], "birth_date": row[5] or None, "death_date": row[6] or None,
        "is_deceased": bool(row[7]),
    }


# ── People ──

def create_person(conn: kuzu.Connection, display_name: str, sex: str = "U",
                  notes: str | None = None, tree_id: str = "",
                  birth_date: str | None = None, death_date: str | None = None,
                  is_deceased: bool = False, person_id: str | None = None) -> dict:
    pid = person_id or str(uuid.uuid4())
    if death_date:
        is_deceased = True
    conn.execute(
        "CREATE (p:Person {id: $id, display_name: $name, sex: $sex, notes: $notes, "
        "tree_id: $tid, birth_date: $bd, death_date: $dd, is_deceased: $dec})",
        {"id": pid, "name": display_name, "sex": Sex.parse(sex).value, "notes": notes or "",
         "tid": tree_id, "bd": birth_date or "", "dd": death_date or "", "dec": is_deceased}
    )
    return get_person(conn, pid)


def get_person(conn: kuzu.Connection, person_id: str, tree_id: str | None = None) -> dict | None:
    query = "MATCH (p:Person) WHERE p.id = $id"
    params = {"id": person_id}
    if tree_id is not None:
        query += " AND p.tree_id = $tid"
        params["tid"] = tree_id
    result = conn.execute(f"{query} RETURN {PERSON_FIELDS}", params)
    if result.has_next():
        return _person_dict(result.get_next())
    return None


def list_people(conn: kuzu.Connection, tree_id: str) -> list[dict]:
    result = conn.execute(
        f"MATCH (p:Person) WHERE p.tree_id = $tid RETURN {PERSON_FIELDS} "
        "ORDER BY p.display_name, p.id",
        {"tid": tree_id}
    )
    people = []
    while result.has_next():
        people.append(_person_dict(result.get_next()))
    return people


# ── Parent / child edges ──

def add_parent(conn: kuzu.Connection, tree_id: str, parent_id: str, child_id: str,
               rel_type: str = "biological") -> dict:
    """Link parent -> child. Both people must be in ``tree_id``.
    Re-adding an existing pair returns the existing edge."""
    if parent_id == child_id:
        raise ValueError("A person cannot be their own parent")
    for pid in (parent_id, child_id):
        if get_person(conn, pid, tree_id=tree_id) is None:
            raise ValueError(f"Person {pid} not found in tree")

    result = conn.execute(
        "MATCH (p:Person)-[r:PARENT_OF]->(c:Person) WHERE p.id = $pid AND c.id = $cid "
        "RETURN r.id, r.rel_type",
        {"pid": parent_id, "cid": child_id}
    )
    if result.has_next():
        row = result.get_next()
        return {"id": row[0], "parent_id": parent_id, "child_id": child_id, "rel_type": row[1]}

    rid = str(uuid.uuid4())
    conn.execute(
        "MATCH (p:Person), (c:Person) WHERE p.id = $pid AND c.id = $cid "
        "CREATE (p)-[:PARENT_OF {id: $rid, rel_type: $rt}]->(c)",
        {"pid": parent_id, "cid": child_id, "rid": rid, "rt": rel_type}
    )
    return {"id": rid, "parent_id": parent_id, "child_id": child_id, "rel_type": rel_type}


def list_parent_edges(conn: kuzu.Connection, tree_id: str) -> list[dict]:
    result = conn.execute(
        "MATCH (p:Person)-[r:PARENT_OF]->(c:Person) WHERE p.tree_id = $tid "
        "RETURN r.id, p.id, c.id, r.rel_type ORDER BY p.id, c.id",
        {"tid": tree_id}
    )
    edges = []
    while result.has_next():
        row = result.get_next()
        edges.append({"id": row[0], "parent_id": row[1], "child_id": row[2], "rel_type": row[3]})
    return edges


# ── Unions ──

def create_union(conn: kuzu.Connection, tree_id: str, member_ids: list[str]) -> dict:
    members = list(dict.fromkeys(member_ids))
    if len(members) < 2:
        raise ValueError("A union needs at least two distinct members")
    for pid in members:
        if get_person(conn, pid, tree_id=tree_id) is None:
            raise ValueError(f"Person {pid} not found in tree")

    uid = str(uuid.uuid4())
    conn.execute(
        "CREATE (u:FamilyUnion {id: $id, tree_id: $tid, created_at: $ts})",
        {"id": uid, "tid": tree_id, "ts": datetime.now(timezone.utc).isoformat()}
    )
    for pid in members:
        conn.execute(
            "MATCH (p:Person), (u:FamilyUnion) WHERE p.id = $pid AND u.id = $uid "
            "CREATE (p)-[:IN_UNION]->(u)",
            {"pid": pid, "uid": uid}
        )
    return {"id": uid, "tree_id": tree_id, "member_ids": members}


def list_unions(conn: kuzu.Connection, tree_id: str) -> list[dict]:
    result = conn.execute(
        "MATCH (p:Person)-[:IN_UNION]->(u:FamilyUnion) WHERE u.tree_id = $tid "
        "RETURN u.id, p.id, u.created_at ORDER BY u.created_at, u.id, p.id",
        {"tid": tree_id}
    )
    unions: dict[str, dict] = {}
    while result.has_next():
        uid, pid, _ = result.get_next()
        unions.setdefault(uid, {"id": uid, "tree_id": tree_id, "member_ids": []})
        unions[uid]["member_ids"].append(pid)
    return list(unions.values())
