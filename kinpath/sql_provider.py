"""GraphProvider over the relational schema in ``models`` (SQLAlchemy)."""
import logging
from collections import defaultdict

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased, sessionmaker

from . import config
from .models import Base, FamilyUnion, ParentChild, Person, UnionMember
from .provider import GraphProvider, GraphProviderError, PersonRecord, SnapshotProvider, in_scope

logger = logging.getLogger(__name__)


def create_sql_engine(url: str = None, **kwargs):
    """Engine plus session factory; creates the tables if they are missing."""
    url = url or config.DATABASE_URL
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, **kwargs)
    Base.metadata.create_all(engine)
    return engine, sessionmaker(bind=engine, autoflush=False, autocommit=False)


def _record(p: Person) -> PersonRecord:
    return PersonRecord(id=p.id, sex=p.sex, tree_id=p.tree_id,
                        display_name=p.display_name, is_deceased=p.is_deceased)


class SqlGraphProvider(GraphProvider):
    def __init__(self, db: Session):
        self.db = db

    def _ids(self, stmt) -> list[str]:
        try:
            return list(self.db.scalars(stmt.distinct().order_by(stmt.selected_columns[0])))
        except SQLAlchemyError as e:
            logger.warning("SQL graph query failed: %s", e)
            raise GraphProviderError(str(e)) from e

    def get_person(self, person_id, scope):
        try:
            p = self.db.get(Person, person_id)
        except SQLAlchemyError as e:
            raise GraphProviderError(str(e)) from e
        if p is None:
            return None
        record = _record(p)
        return record if in_scope(record, scope) else None

    def _edge_query(self, near_col, far_col, person_id, scope):
        near, far = aliased(Person), aliased(Person)
        stmt = (select(far_col)
                .join(near, near.id == near_col)
                .join(far, far.id == far_col)
                .where(near_col == person_id))
        if scope is not None:
            stmt = stmt.where(near.tree_id == scope, far.tree_id == scope)
        return stmt

    def get_parents(self, person_id, scope):
        return self._ids(self._edge_query(ParentChild.child_id, ParentChild.parent_id, person_id, scope))

    def get_children(self, person_id, scope):
        return self._ids(self._edge_query(ParentChild.parent_id, ParentChild.child_id, person_id, scope))

    def get_spouses(self, person_id, scope):
        mine, theirs = aliased(UnionMember), aliased(UnionMember)
        near, far = aliased(Person), aliased(Person)
        stmt = (select(theirs.person_id)
                .join(mine, mine.union_id == theirs.union_id)
                .join(near, near.id == mine.person_id)
                .join(far, far.id == theirs.person_id)
                .where(mine.person_id == person_id, theirs.person_id != person_id))
        if scope is not None:
            stmt = stmt.where(near.tree_id == scope, far.tree_id == scope)
        return self._ids(stmt)


def load_snapshot(db: Session, tree_id: str) -> SnapshotProvider:
    people = [_record(p) for p in db.scalars(select(Person).where(Person.tree_id == tree_id))]
    parent, child = aliased(Person), aliased(Person)
    edges = [tuple(row) for row in db.execute(
        select(ParentChild.parent_id, ParentChild.child_id)
        .join(parent, parent.id == ParentChild.parent_id)
        .join(child, child.id == ParentChild.child_id)
        .where(parent.tree_id == tree_id, child.tree_id == tree_id)
    )]
    unions = defaultdict(list)
    rows = db.execute(
        select(UnionMember.union_id, UnionMember.person_id)
        .join(FamilyUnion, FamilyUnion.id == UnionMember.union_id)
        .where(FamilyUnion.tree_id == tree_id)
    )
    for union_id, person_id in rows:
        unions[union_id].append(person_id)
    return SnapshotProvider(people, edges, unions.values())
