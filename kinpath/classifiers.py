"""Named relationship classifiers, tried in a fixed priority order.

Each classifier is a predicate plus path constructor: given a graph, a
scope and two people ``a`` and ``b``, it either returns a :class:`Match`
(kind, the walk from ``a`` to ``b``, and the shared ancestor when there is
one) or ``None``. ``CLASSIFIERS`` lists them closest-first; the first match
wins. A grandparent is also two BFS steps away, so the specific checks must
run before the generic search.

Every returned path is a full walk: consecutive ids are joined by a
parent/child or union edge.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .provider import GraphProvider
from .schemas import RelationshipKind

logger = logging.getLogger(__name__)

Scope = Optional[str]


@dataclass(frozen=True)
class Match:
    kind: RelationshipKind
    path: Tuple[str, ...]
    common_ancestor_id: Optional[str] = None

    @property
    def length(self) -> int:
        return len(self.path) - 1


@dataclass(frozen=True)
class Classifier:
    kind: RelationshipKind
    match: Callable[[GraphProvider, Scope, str, str], Optional[Match]]


def match_self(graph: GraphProvider, scope: Scope, a: str, b: str) -> Optional[Match]:
    if a == b:
        return Match(RelationshipKind.SELF, (a,))
    return None


def match_parent(graph, scope, a, b):
    if b in graph.get_parents(a, scope):
        return Match(RelationshipKind.PARENT, (a, b))
    return None


def match_child(graph, scope, a, b):
    if b in graph.get_children(a, scope):
        return Match(RelationshipKind.CHILD, (a, b))
    return None


def match_spouse(graph, scope, a, b):
    if b in graph.get_spouses(a, scope):
        return Match(RelationshipKind.SPOUSE, (a, b))
    return None


def match_sibling(graph, scope, a, b):
    """Any shared parent; half and full siblings are not told apart."""
    b_parents = set(graph.get_parents(b, scope))
    for p in graph.get_parents(a, scope):
        if p in b_parents:
            return Match(RelationshipKind.SIBLING, (a, p, b), common_ancestor_id=p)
    return None


def match_grandparent(graph, scope, a, b):
    for p in graph.get_parents(a, scope):
        if b in graph.get_parents(p, scope):
            return Match(RelationshipKind.GRANDPARENT, (a, p, b))
    return None


def match_grandchild(graph, scope, a, b):
    for c in graph.get_children(a, scope):
        if b in graph.get_children(c, scope):
            return Match(RelationshipKind.GRANDCHILD, (a, c, b))
    return None


def match_uncle_aunt(graph, scope, a, b):
    """``b`` is a sibling of one of ``a``'s parents."""
    parents = graph.get_parents(a, scope)
    # a parent with several parent edges of its own must not turn into an uncle
    if b in parents:
        return None
    for p in parents:
        for g in graph.get_parents(p, scope):
            if b in graph.get_children(g, scope):
                return Match(RelationshipKind.UNCLE_AUNT, (a, p, g, b), common_ancestor_id=g)
    return None


def match_nephew_niece(graph, scope, a, b):
    """``b`` is a child of one of ``a``'s siblings."""
    if b in graph.get_children(a, scope):
        return None
    for p in graph.get_parents(a, scope):
        for s in graph.get_children(p, scope):
            if s == a:
                continue
            if b in graph.get_children(s, scope):
                return Match(RelationshipKind.NEPHEW_NIECE, (a, p, s, b), common_ancestor_id=p)
    return None


def match_cousin(graph, scope, a, b):
    """First cousins: a shared grandparent reached through different parents."""
    b_parents = set(graph.get_parents(b, scope))
    if not b_parents:
        return None
    for p in graph.get_parents(a, scope):
        for g in graph.get_parents(p, scope):
            for u in graph.get_children(g, scope):
                # u == p would make b a sibling, not a cousin
                if u == p or u == a:
                    continue
                if u in b_parents:
                    return Match(RelationshipKind.COUSIN, (a, p, g, u, b), common_ancestor_id=g)
    return None


CLASSIFIERS: Tuple[Classifier, ...] = (
    Classifier(RelationshipKind.SELF, match_self),
    Classifier(RelationshipKind.PARENT, match_parent),
    Classifier(RelationshipKind.CHILD, match_child),
    Classifier(RelationshipKind.SPOUSE, match_spouse),
    Classifier(RelationshipKind.SIBLING, match_sibling),
    Classifier(RelationshipKind.GRANDPARENT, match_grandparent),
    Classifier(RelationshipKind.GRANDCHILD, match_grandchild),
    Classifier(RelationshipKind.UNCLE_AUNT, match_uncle_aunt),
    Classifier(RelationshipKind.NEPHEW_NIECE, match_nephew_niece),
    Classifier(RelationshipKind.COUSIN, match_cousin),
)


def classify(graph: GraphProvider, scope: Scope, a: str, b: str,
             classifiers: Tuple[Classifier, ...] = CLASSIFIERS) -> Optional[Match]:
    """Return the first matching named relationship, or None."""
    for classifier in classifiers:
        found = classifier.match(graph, scope, a, b)
        if found is not None:
            logger.debug("%s -> %s classified as %s", a, b, found.kind.value)
            return found
    return None
