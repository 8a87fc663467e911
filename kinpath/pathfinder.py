"""Bounded breadth-first search over parent, child and union edges.

Used when no named classifier matches. Edges are unweighted and undirected
for search purposes; each hop remembers which kind of edge it crossed so
callers can describe the walk ("parent → child → spouse").

A single visited set makes the search terminate on cyclic or malformed
data. The target is tested when it is first discovered, so the first hit
is a shortest path by edge count. Within a level, neighbors are expanded
parents first, then children, then spouses, each group in id order; that
fixes which of several equal-length paths is returned.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Dict, Iterator, List, Optional, Tuple

from .provider import GraphProvider
from .schemas import EdgeType

logger = logging.getLogger(__name__)


class SearchCancelled(TimeoutError):
    """The caller cancelled the search or its deadline passed."""


def neighbors(graph: GraphProvider, scope: Optional[str], person_id: str) -> Iterator[Tuple[str, EdgeType]]:
    for pid in graph.get_parents(person_id, scope):
        yield pid, EdgeType.PARENT
    for pid in graph.get_children(person_id, scope):
        yield pid, EdgeType.CHILD
    for pid in graph.get_spouses(person_id, scope):
        yield pid, EdgeType.SPOUSE


def edge_between(graph: GraphProvider, scope: Optional[str], current: str, nxt: str) -> EdgeType:
    """Classify the edge from ``current`` to ``nxt``; parent wins over child over spouse."""
    if nxt in graph.get_parents(current, scope):
        return EdgeType.PARENT
    if nxt in graph.get_children(current, scope):
        return EdgeType.CHILD
    if nxt in graph.get_spouses(current, scope):
        return EdgeType.SPOUSE
    return EdgeType.NONE


def _check_cancelled(cancel_event: Optional[threading.Event], deadline: Optional[float]):
    if cancel_event is not None and cancel_event.is_set():
        raise SearchCancelled("Relationship search was cancelled")
    if deadline is not None and time.monotonic() >= deadline:
        raise SearchCancelled("Relationship search timed out")


def shortest_path(graph: GraphProvider, scope: Optional[str], source: str, target: str,
                  max_depth: int, cancel_event: Optional[threading.Event] = None,
                  deadline: Optional[float] = None) -> Optional[Tuple[List[str], List[EdgeType]]]:
    """Return ``(path, edges)`` for one shortest walk of at most ``max_depth`` edges.

    ``edges[i]`` is what ``path[i + 1]`` is relative to ``path[i]``. Returns
    None when the frontier empties or every remaining node sits at the depth
    bound. Raises :class:`SearchCancelled` if ``cancel_event`` is set or
    ``deadline`` (a ``time.monotonic()`` value) passes mid-search.
    """
    if max_depth < 0:
        raise ValueError("max_depth must be >= 0")
    if source == target:
        return [source], []

    prev: Dict[str, Tuple[Optional[str], Optional[EdgeType]]] = {source: (None, None)}
    queue = deque([(source, 0)])
    expanded = 0

    while queue:
        node, depth = queue.popleft()
        # queue is depth-ordered: once one node is at the bound, all are
        if depth >= max_depth:
            break
        _check_cancelled(cancel_event, deadline)
        expanded += 1
        for nb, edge in neighbors(graph, scope, node):
            if nb in prev:
                continue
            prev[nb] = (node, edge)
            if nb == target:
                logger.debug("BFS reached %s at depth %d after %d expansions",
                             target, depth + 1, expanded)
                return _rebuild(prev, target)
            queue.append((nb, depth + 1))

    logger.debug("BFS from %s exhausted after %d expansions (max_depth=%d)",
                 source, expanded, max_depth)
    return None


def _rebuild(prev, target) -> Tuple[List[str], List[EdgeType]]:
    path: List[str] = []
    edges: List[EdgeType] = []
    node = target
    while node is not None:
        path.append(node)
        parent, edge = prev[node]
        if edge is not None:
            edges.append(edge)
        node = parent
    path.reverse()
    edges.reverse()
    return path, edges
