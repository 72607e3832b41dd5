# edges.py
# Outgoing transitions of a DAWG node, kept as an immutable sorted tuple.

from bisect import bisect_left
from typing import Iterator, Optional, Tuple

# ((char, child_id), ...) sorted by char, one pair per char
Edges = Tuple[Tuple[str, int], ...]

EMPTY: Edges = ()


def _find(edges: Edges, ch: str) -> int:
    return bisect_left(edges, (ch,))


def lookup(edges: Edges, ch: str) -> Optional[int]:
    """Child Id reached over ``ch``, or None if there is no such edge."""
    i = _find(edges, ch)
    if i < len(edges) and edges[i][0] == ch:
        return edges[i][1]
    return None


def with_edge(edges: Edges, ch: str, child: int) -> Edges:
    """
    Return a copy of ``edges`` where ``ch`` leads to ``child``.
    The pair is inserted in order if ``ch`` is new, replaced otherwise.
    """
    i = _find(edges, ch)
    if i < len(edges) and edges[i][0] == ch:
        return edges[:i] + ((ch, child),) + edges[i + 1:]
    return edges[:i] + ((ch, child),) + edges[i:]


def chars(edges: Edges) -> Iterator[str]:
    for ch, _ in edges:
        yield ch


def children(edges: Edges) -> Iterator[int]:
    for _, child in edges:
        yield child
