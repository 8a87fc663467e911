"""JSON graph importer: people, parent edges and unions into a new tree.

Expected schema::

    {
      "people": [{"id": str, "display_name": str, "sex": "M"|"F"|"U", "is_deceased": bool}, ...],
      "parent_child": [{"parent": str, "child": str}, ...],
      "unions": [[str, str, ...], ...]
    }

File ids are local to the file; every person gets a fresh id in the store
and ``id_map`` records the translation.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import kuzu

from . import crud, trees

logger = logging.getLogger(__name__)


def parse_graph_json(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))
    with open(p, "r", encoding="utf-8") as f:
        return validate_graph(json.load(f))


def validate_graph(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError("JSON root must be an object")
    if not isinstance(data.get("people"), list):
        raise ValueError("JSON must contain a 'people' array")
    for field in ("parent_child", "unions"):
        if not isinstance(data.setdefault(field, []), list):
            raise ValueError(f"'{field}' must be an array")
    return data


def import_graph(conn: kuzu.Connection, data: Dict[str, Any], tree_name: str) -> dict:
    """Create a tree named ``tree_name`` and load ``data`` into it.

    Bad rows are skipped and reported in ``errors`` rather than aborting the
    import.
    """
    data = validate_graph(data)
    tree = trees.create_tree(conn, tree_name)
    tid = tree["id"]
    id_map: Dict[str, str] = {}
    errors = []

    for i, raw in enumerate(data["people"]):
        file_id = str(raw.get("id") or "").strip() if isinstance(raw, dict) else ""
        if not file_id:
            errors.append({"index": i, "type": "person_error", "message": "Person has no id"})
            continue
        if file_id in id_map:
            errors.append({"index": i, "type": "duplicate_id",
                           "message": f"Duplicate person id {file_id}"})
            continue
        person = crud.create_person(
            conn, raw.get("display_name") or file_id, sex=raw.get("sex", "U"),
            tree_id=tid, is_deceased=bool(raw.get("is_deceased", False)),
        )
        id_map[file_id] = person["id"]

    edges = 0
    for i, raw in enumerate(data["parent_child"]):
        raw = raw if isinstance(raw, dict) else {}
        parent = id_map.get(str(raw.get("parent", "")))
        child = id_map.get(str(raw.get("child", "")))
        if parent is None or child is None:
            errors.append({"index": i, "type": "unknown_person",
                           "message": f"Edge {raw.get('parent')} -> {raw.get('child')} references an unknown person"})
            continue
        try:
            crud.add_parent(conn, tid, parent, child)
        except ValueError as e:
            errors.append({"index": i, "type": "edge_error", "message": str(e)})
            continue
        edges += 1

    unions = 0
    for i, members in enumerate(data["unions"]):
        members = members if isinstance(members, list) else []
        missing = [m for m in members if str(m) not in id_map]
        if missing:
            errors.append({"index": i, "type": "unknown_person",
                           "message": f"Union references unknown people: {', '.join(map(str, missing))}"})
            continue
        try:
            crud.create_union(conn, tid, [id_map[str(m)] for m in members])
        except ValueError as e:
            errors.append({"index": i, "type": "union_error", "message": str(e)})
            continue
        unions += 1

    logger.info("Imported tree %s (%s): %d people, %d parent edges, %d unions, %d errors",
                tree_name, tid, len(id_map), edges, unions, len(errors))
    return {
        "tree": tree, "people": len(id_map), "parent_edges": edges, "unions": unions,
        "id_map": id_map, "errors": errors,
    }


def import_graph_file(conn: kuzu.Connection, path: str | Path, tree_name: str) -> dict:
    return import_graph(conn, parse_graph_json(path), tree_name)
