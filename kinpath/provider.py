"""Read-only access to a family graph.

A provider answers four questions about one tree scope: who are this
person's parents, children and union partners, and does the person exist.
Backends live in ``kuzu_provider`` and ``sql_provider``; this module holds
the interface, an immutable in-memory snapshot and a per-query cache.

``scope`` is a tree id, or ``None`` for no tree filter. Edges whose far end
lies outside the scope are invisible. Every list is sorted by id so that
traversal order, and therefore tie-breaking between equal-length paths,
is stable across calls.
"""
from __future__ import annotations

import abc
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Sex

logger = logging.getLogger(__name__)


class GraphProviderError(RuntimeError):
    """The backing store failed while answering a graph lookup."""


@dataclass(frozen=True)
class PersonRecord:
    id: str
    sex: Sex = Sex.U
    tree_id: str = ""
    display_name: str = ""
    is_deceased: bool = False


def in_scope(record: Optional[PersonRecord], scope: Optional[str]) -> bool:
    return record is not None and (scope is None or record.tree_id == scope)


class GraphProvider(abc.ABC):
    """Interface consumed by the classifiers and the pathfinder."""

    @abc.abstractmethod
    def get_person(self, person_id: str, scope: Optional[str]) -> Optional[PersonRecord]:
        """Return the person if it exists inside ``scope``."""

    @abc.abstractmethod
    def get_parents(self, person_id: str, scope: Optional[str]) -> List[str]:
        ...

    @abc.abstractmethod
    def get_children(self, person_id: str, scope: Optional[str]) -> List[str]:
        ...

    @abc.abstractmethod
    def get_spouses(self, person_id: str, scope: Optional[str]) -> List[str]:
        """Partners sharing at least one union, never the person itself."""

    def person_exists(self, person_id: str, scope: Optional[str]) -> Tuple[bool, Optional[Sex]]:
        record = self.get_person(person_id, scope)
        if record is None:
            return False, None
        return True, record.sex

    def locate_person(self, person_id: str) -> Optional[PersonRecord]:
        """Unscoped lookup, used to tell a wrong tree from a missing person."""
        return self.get_person(person_id, None)


class SnapshotProvider(GraphProvider):
    """Immutable in-memory graph: an arena of person records keyed by id.

    Edges pointing at ids with no record are dropped at lookup time, so a
    snapshot built from partial data never yields dangling neighbors.
    """

    def __init__(self, people: Iterable[PersonRecord],
                 parent_child: Iterable[Tuple[str, str]] = (),
                 unions: Iterable[Iterable[str]] = ()):
        self._people: Dict[str, PersonRecord] = {p.id: p for p in people}
        parents = defaultdict(set)
        children = defaultdict(set)
        spouses = defaultdict(set)
        for parent_id, child_id in parent_child:
            parents[child_id].add(parent_id)
            children[parent_id].add(child_id)
        for members in unions:
            members = set(members)
            for member in members:
                spouses[member].update(members - {member})
        self._parents = {k: tuple(sorted(v)) for k, v in parents.items()}
        self._children = {k: tuple(sorted(v)) for k, v in children.items()}
        self._spouses = {k: tuple(sorted(v)) for k, v in spouses.items()}

    def __len__(self):
        return len(self._people)

    def _visible(self, person_id, ids, scope) -> List[str]:
        if not in_scope(self._people.get(person_id), scope):
            return []
        return [i for i in ids if in_scope(self._people.get(i), scope)]

    def get_person(self, person_id, scope):
        record = self._people.get(person_id)
        return record if in_scope(record, scope) else None

    def get_parents(self, person_id, scope):
        return self._visible(person_id, self._parents.get(person_id, ()), scope)

    def get_children(self, person_id, scope):
        return self._visible(person_id, self._children.get(person_id, ()), scope)

    def get_spouses(self, person_id, scope):
        return self._visible(person_id, self._spouses.get(person_id, ()), scope)


class CachingProvider(GraphProvider):
    """Memoizes another provider for the lifetime of one query.

    Not shared between queries: the wrapped store may change, and a query
    only needs a consistent view of the people it actually touches.
    """

    def __init__(self, inner: GraphProvider):
        self._inner = inner
        self._cache: Dict[tuple, object] = {}
        self.misses = 0

    def _cached(self, method: str, *args):
        key = (method,) + args
        if key in self._cache:
            return self._cache[key]
        self.misses += 1
        value = getattr(self._inner, method)(*args)
        self._cache[key] = value
        return value

    def get_person(self, person_id, scope):
        return self._cached("get_person", person_id, scope)

    def get_parents(self, person_id, scope):
        return self._cached("get_parents", person_id, scope)

    def get_children(self, person_id, scope):
        return self._cached("get_children", person_id, scope)

    def get_spouses(self, person_id, scope):
        return self._cached("get_spouses", person_id, scope)

    def locate_person(self, person_id):
        return self._cached("locate_person", person_id)
