"""Single entry point for "how are these two people related?".

``find_relationship_path`` validates both ids against the tree scope, runs
the named classifiers in priority order, falls back to a bounded BFS and
assembles an immutable :class:`RelationshipResult`. Missing people, people
in another tree and "no path within max_depth" are returned as result
values; only provider failures and cancellation raise.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import List, Optional, Sequence

from . import config
from .classifiers import classify
from .labels import LabelResolver, edge_key
from .models import Sex
from .pathfinder import edge_between, shortest_path
from .provider import CachingProvider, GraphProvider, GraphProviderError
from .schemas import (
    CommonAncestor, EdgeType, ErrorCode, PathStep, RelationshipKind, RelationshipResult,
)
from .vocabulary import RelationshipVocabulary

logger = logging.getLogger(__name__)

TRAIL_SEPARATOR = " → "


def find_relationship_path(provider: GraphProvider, scope: Optional[str],
                           person_a: str, person_b: str,
                           max_depth: int = config.MAX_DEPTH,
                           locale: Optional[str] = None,
                           vocabulary: Optional[RelationshipVocabulary] = None,
                           cancel_event: Optional[threading.Event] = None,
                           timeout: Optional[float] = None) -> RelationshipResult:
    """Describe ``person_b`` as seen from ``person_a``.

    ``scope`` is a tree id; with ``None`` both people must share a tree and
    that tree becomes the scope. ``timeout`` is in seconds (``None`` reads
    ``KINPATH_SEARCH_TIMEOUT``, 0 disables it) and, like ``cancel_event``,
    only bounds the BFS fallback.
    """
    if max_depth < 0:
        raise ValueError("max_depth must be >= 0")
    locale = locale or config.DEFAULT_LOCALE
    resolver = LabelResolver(vocabulary or RelationshipVocabulary.default())
    graph = CachingProvider(provider)

    try:
        return _find(graph, resolver, scope, person_a, person_b, max_depth,
                     locale, cancel_event, timeout)
    except GraphProviderError:
        logger.warning("Graph lookup failed for %s -> %s in tree %s",
                       person_a, person_b, scope, exc_info=True)
        raise


def _find(graph, resolver, scope, a, b, max_depth, locale, cancel_event, timeout):
    rec_a, rec_b = graph.locate_person(a), graph.locate_person(b)
    if rec_a is None or rec_b is None:
        return _error(resolver, ErrorCode.PERSON_NOT_FOUND, locale)

    if scope is None:
        if rec_a.tree_id != rec_b.tree_id:
            return _error(resolver, ErrorCode.INVALID_SCOPE, locale)
        scope = rec_a.tree_id
    exists_a, _ = graph.person_exists(a, scope)
    exists_b, sex_b = graph.person_exists(b, scope)
    if not (exists_a and exists_b):
        return _error(resolver, ErrorCode.INVALID_SCOPE, locale)

    match = classify(graph, scope, a, b)
    if match is not None:
        path = list(match.path)
        edges = [edge_between(graph, scope, x, y) for x, y in zip(path, path[1:])]
        kind = match.kind
        common_id = match.common_ancestor_id
    else:
        deadline = _deadline(timeout)
        hit = shortest_path(graph, scope, a, b, max_depth,
                            cancel_event=cancel_event, deadline=deadline)
        if hit is None:
            label = resolver.resolve(RelationshipKind.NONE, sex_b, locale)
            return RelationshipResult(
                found=False, path_length=-1, kind=RelationshipKind.NONE,
                label_key=label.key, display_label=label.display,
                relationship_type_id=label.type_id, locale=locale,
            )
        path, edges = hit
        kind = RelationshipKind.DISTANT
        common_id = None

    peak = _peak(path, edges)
    if common_id is None and peak is not None:
        common_id = path[peak]

    label = resolver.resolve(kind, sex_b, locale, steps=len(edges))
    return RelationshipResult(
        found=True,
        path_length=len(edges),
        kind=kind,
        label_key=label.key,
        display_label=label.display,
        path_ids=tuple(path),
        common_ancestor_id=common_id,
        relationship_type_id=label.type_id,
        path=tuple(_steps(graph, scope, path, edges)),
        trail=TRAIL_SEPARATOR.join(e.value for e in edges),
        common_ancestors=_common_ancestors(path, common_id),
        locale=locale,
    )


def _deadline(timeout: Optional[float]) -> Optional[float]:
    if timeout is None:
        timeout = config.SEARCH_TIMEOUT
    return time.monotonic() + timeout if timeout > 0 else None


def _error(resolver: LabelResolver, code: ErrorCode, locale: str) -> RelationshipResult:
    label = resolver.resolve(RelationshipKind.ERROR, None, locale, error=code)
    return RelationshipResult(
        found=False, path_length=-1, kind=RelationshipKind.ERROR,
        label_key=label.key, display_label=label.display, error=code,
        relationship_type_id=label.type_id, locale=locale,
    )


def _steps(graph, scope, path: Sequence[str], edges: Sequence[EdgeType]) -> List[PathStep]:
    sexes = []
    for pid in path:
        record = graph.get_person(pid, scope)
        sexes.append(record.sex if record else Sex.U)
    steps = []
    for i, pid in enumerate(path):
        edge = edges[i] if i < len(edges) else EdgeType.NONE
        next_sex = sexes[i + 1] if i + 1 < len(path) else None
        steps.append(PathStep(
            person_id=pid,
            sex=sexes[i].value,
            edge_to_next=edge,
            relationship_to_next_key=edge_key(edge, next_sex),
        ))
    return steps


def _peak(path: Sequence[str], edges: Sequence[EdgeType]) -> Optional[int]:
    """Index of the top of an up-then-down blood line, or None.

    Only walks made of parent hops followed by child hops have one; any
    spouse hop, or going up again after coming down, disqualifies the path.
    """
    if not edges:
        return None
    peak = 0
    descending = False
    for i, edge in enumerate(edges):
        if edge == EdgeType.PARENT:
            if descending:
                return None
            peak = i + 1
        elif edge == EdgeType.CHILD:
            descending = True
        else:
            return None
    return peak if peak > 0 else None


def _common_ancestors(path: Sequence[str], common_id: Optional[str]):
    if common_id is None or common_id not in path:
        return ()
    index = list(path).index(common_id)
    return (CommonAncestor(
        person_id=common_id,
        generations_from_person1=index,
        generations_from_person2=len(path) - 1 - index,
    ),)
