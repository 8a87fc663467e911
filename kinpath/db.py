"""KuzuDB embedded graph database connection."""
import logging
import kuzu

from . import config

logger = logging.getLogger(__name__)

DB_PATH = config.DB_PATH
_database = None


def open_database(path) -> kuzu.Database:
    """Open (or create) a graph at `path` with the current schema."""
    path.parent.mkdir(parents=True, exist_ok=True)
    database = kuzu.Database(str(path))
    _init_schema(database)
    logger.info("Opened family graph at %s", path)
    return database


def get_database():
    global _database
    if _database is None:
        _database = open_database(DB_PATH)
    return _database


def _init_schema(db):
    conn = kuzu.Connection(db)

    # ── Family graph ──
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS Person("
        "id STRING, display_name STRING, sex STRING, notes STRING, "
        "tree_id STRING, birth_date STRING, death_date STRING, is_deceased BOOL, "
        "PRIMARY KEY(id))"
    )
    conn.execute(
        "CREATE REL TABLE IF NOT EXISTS PARENT_OF("
        "FROM Person TO Person, id STRING, rel_type STRING)"
    )
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS FamilyUnion("
        "id STRING, tree_id STRING, created_at STRING, "
        "PRIMARY KEY(id))"
    )
    conn.execute("CREATE REL TABLE IF NOT EXISTS IN_UNION(FROM Person TO FamilyUnion)")

    # ── FamilyTree table (tenant scope) ──
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS FamilyTree("
        "id STRING, name STRING, created_at STRING, "
        "PRIMARY KEY(id))"
    )

    # ── Relationship vocabulary (trilingual label lookup) ──
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS RelationshipType("
        "id INT64, rkey STRING, name_english STRING, name_arabic STRING, "
        "name_nubian STRING, category STRING, sort_order INT64, is_active BOOL, "
        "PRIMARY KEY(id))"
    )


def seed_relationship_types(conn: kuzu.Connection, vocabulary) -> int:
    """Copy a vocabulary into the RelationshipType table if it is empty.
    Returns the number of rows written."""
    result = conn.execute("MATCH (t:RelationshipType) RETURN count(*)")
    if result.has_next() and result.get_next()[0] > 0:
        return 0
    written = 0
    for entry in vocabulary.entries():
        if entry.type_id is None:
            continue
        conn.execute(
            "CREATE (t:RelationshipType {id: $id, rkey: $rkey, name_english: $en, "
            "name_arabic: $ar, name_nubian: $nob, category: $cat, "
            "sort_order: $sort, is_active: true})",
            {"id": entry.type_id, "rkey": entry.key,
             "en": entry.names.get("en", ""), "ar": entry.names.get("ar", ""),
             "nob": entry.names.get("nob", ""), "cat": entry.category or "",
             "sort": entry.sort_order}
        )
        written += 1
    logger.info("Seeded %d relationship types", written)
    return written


def get_conn():
    db = get_database()
    conn = kuzu.Connection(db)
    try:
        yield conn
    finally:
        pass
