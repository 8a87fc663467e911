"""GraphProvider backed by the KuzuDB family graph."""
import logging
from collections import defaultdict
from typing import Optional

import kuzu

from .models import Sex
from .provider import GraphProvider, GraphProviderError, PersonRecord, SnapshotProvider, in_scope

logger = logging.getLogger(__name__)


def _scoped(query: str, scope: Optional[str], *aliases: str) -> str:
    if scope is None:
        return query
    return query + "".join(f" AND {a}.tree_id = $tid" for a in aliases)


def _record(row) -> PersonRecord:
    return PersonRecord(
        id=row[0],
        sex=Sex.parse(row[1]),
        tree_id=row[2] or "",
        display_name=row[3] or "",
        is_deceased=bool(row[4]),
    )


class KuzuGraphProvider(GraphProvider):
    """Runs one Cypher query per lookup against an open connection."""

    def __init__(self, conn: kuzu.Connection):
        self.conn = conn

    def _ids(self, query: str, person_id: str, scope: Optional[str]) -> list[str]:
        params = {"id": person_id}
        if scope is not None:
            params["tid"] = scope
        result = self._execute(query + " RETURN DISTINCT x.id ORDER BY x.id", params)
        ids = []
        while result.has_next():
            ids.append(result.get_next()[0])
        return ids

    def _execute(self, query: str, params: dict):
        try:
            return self.conn.execute(query, params)
        except Exception as e:
            logger.warning("Kuzu query failed: %s", e)
            raise GraphProviderError(str(e)) from e

    def get_person(self, person_id, scope):
        result = self._execute(
            "MATCH (p:Person) WHERE p.id = $id "
            "RETURN p.id, p.sex, p.tree_id, p.display_name, p.is_deceased",
            {"id": person_id}
        )
        if not result.has_next():
            return None
        record = _record(result.get_next())
        return record if in_scope(record, scope) else None

    def get_parents(self, person_id, scope):
        query = _scoped(
            "MATCH (x:Person)-[:PARENT_OF]->(c:Person) WHERE c.id = $id", scope, "x", "c"
        )
        return self._ids(query, person_id, scope)

    def get_children(self, person_id, scope):
        query = _scoped(
            "MATCH (p:Person)-[:PARENT_OF]->(x:Person) WHERE p.id = $id", scope, "p", "x"
        )
        return self._ids(query, person_id, scope)

    def get_spouses(self, person_id, scope):
        query = _scoped(
            "MATCH (p:Person)-[:IN_UNION]->(u:FamilyUnion)<-[:IN_UNION]-(x:Person) "
            "WHERE p.id = $id AND x.id <> p.id", scope, "p", "x"
        )
        return self._ids(query, person_id, scope)


def load_snapshot(conn: kuzu.Connection, tree_id: str) -> SnapshotProvider:
    """Read a whole tree into an immutable in-memory provider."""
    people = []
    result = conn.execute(
        "MATCH (p:Person) WHERE p.tree_id = $tid "
        "RETURN p.id, p.sex, p.tree_id, p.display_name, p.is_deceased",
        {"tid": tree_id}
    )
    while result.has_next():
        people.append(_record(result.get_next()))

    edges = []
    result = conn.execute(
        "MATCH (p:Person)-[:PARENT_OF]->(c:Person) "
        "WHERE p.tree_id = $tid AND c.tree_id = $tid RETURN p.id, c.id",
        {"tid": tree_id}
    )
    while result.has_next():
        row = result.get_next()
        edges.append((row[0], row[1]))

    unions = defaultdict(list)
    result = conn.execute(
        "MATCH (p:Person)-[:IN_UNION]->(u:FamilyUnion) WHERE u.tree_id = $tid "
        "RETURN u.id, p.id",
        {"tid": tree_id}
    )
    while result.has_next():
        row = result.get_next()
        unions[row[0]].append(row[1])

    logger.info("Loaded snapshot of tree %s: %d people, %d parent edges, %d unions",
                tree_id, len(people), len(edges), len(unions))
    return SnapshotProvider(people, edges, unions.values())
