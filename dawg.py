# dawg.py
# Minimal acyclic automaton (DAWG) mapping strings to values.
# Insert and delete rewrite only the nodes on the key's path; sharing of
# equal subtrees is kept by the hash-consed store in graph.py.

import time
from typing import Any, Iterable, Iterator, List, Optional, Tuple

import edges as E
from graph import LEAF, Graph, Node
from utils import vlog


# ---------- Engine ----------
# Every edit first walks the key read-only, then rewrites the path bottom-up:
# retire the old Id, register the replacement. Nothing is registered or
# retired before the walk has finished.
def _walk_path(graph: Graph, key: str, start: int) -> List[Tuple[int, Node]]:
    """(Id, node) for key[:0], key[:1], ... as far as the edges reach."""
    path = []
    idx = start
    for ch in key:
        n = graph.fetch(idx)
        path.append((idx, n))
        idx = E.lookup(n.edges, ch)
        if idx is None:
            return path
    path.append((idx, graph.fetch(idx)))
    return path


def _rewrite_path(graph: Graph, key: str, path: List[Tuple[int, Node]], new: int) -> int:
    # path[k] leads on to the rewritten child over key[k]
    for k in range(len(path) - 1, -1, -1):
        idx, n = path[k]
        graph.retire(idx)
        new = graph.register(Node(n.value, E.with_edge(n.edges, key[k], new)))
    return new


def insert_node(graph: Graph, key: str, value: Any, start: int) -> int:
    """Rebuild the path for ``key`` below ``start`` ending in ``value``; return the new Id."""
    try:
        hash(value)
    except TypeError:
        raise TypeError(f"DAWG values must be hashable, not {type(value).__name__}") from None
    path = _walk_path(graph, key, start)
    if len(path) == len(key) + 1:
        idx, n = path.pop()
        graph.retire(idx)
        new = graph.register(Node(value, n.edges))
    else:
        # key[len(path):] has no nodes yet; build it from the end
        new = graph.register(Node(value))
        for ch in reversed(key[len(path):]):
            new = graph.register(Node(None, ((ch, new),)))
    return _rewrite_path(graph, key, path, new)


def delete_node(graph: Graph, key: str, start: int) -> int:
    """Clear the value stored for ``key`` below ``start``; return the new Id."""
    path = _walk_path(graph, key, start)
    if len(path) < len(key) + 1:
        return start
    idx, n = path.pop()
    graph.retire(idx)
    return _rewrite_path(graph, key, path, graph.register(Node(None, n.edges)))


def lookup_node(graph: Graph, key: str, start: int) -> Optional[Any]:
    path = _walk_path(graph, key, start)
    if len(path) < len(key) + 1:
        return None
    return path[-1][1].value


def _check_key(key):
    if not isinstance(key, str):
        raise TypeError(f"DAWG keys must be str, not {type(key).__name__}")


class DAWG:
    """
    Minimal automaton with the API we want:
      - DAWG.empty() / DAWG.from_list(pairs) / DAWG.from_keys(keys)
      - insert(key, value) / delete(key), in place
      - lookup(key) -> value or None
      - size() -> number of states
      - has_prefix(str) / is_word(str) / iter_extensions(prefix)
    Internals:
      graph: Graph holding every node; root: Id of the start state.
    Values are hashable and never None (None means "no key ends here").
    """

    __slots__ = ("graph", "root")

    def __init__(self, graph: Graph, root: int):
        self.graph = graph
        self.root = root

    # ---------- Construction ----------
    @classmethod
    def empty(cls) -> "DAWG":
        graph = Graph()
        return cls(graph, graph.register(LEAF))

    @classmethod
    def from_list(cls, pairs: Iterable[Tuple[str, Any]]) -> "DAWG":
        """Insert ``pairs`` in order; a repeated key keeps its last value."""
        t0 = time.time()
        d = cls.empty()
        n = 0
        for key, value in pairs:
            d.insert(key, value)
            n += 1
        vlog(f"DAWG built from {n} pairs ({d.size()} states)", t0)
        return d

    @classmethod
    def from_keys(cls, keys: Iterable[str]) -> "DAWG":
        """Set-membership automaton: every key maps to True."""
        return cls.from_list((k, True) for k in keys)

    def copy(self) -> "DAWG":
        with self.graph.lock:
            return DAWG(self.graph.copy(), self.root)

    # ---------- Mutation ----------
    def insert(self, key: str, value: Any) -> "DAWG":
        _check_key(key)
        if value is None:
            raise ValueError("cannot store None in a DAWG")
        with self.graph.lock:
            self.root = insert_node(self.graph, key, value, self.root)
        return self

    def delete(self, key: str) -> "DAWG":
        _check_key(key)
        with self.graph.lock:
            self.root = delete_node(self.graph, key, self.root)
        return self

    # ---------- Queries ----------
    def lookup(self, key: str) -> Optional[Any]:
        _check_key(key)
        return lookup_node(self.graph, key, self.root)

    def size(self) -> int:
        return self.graph.count()

    num_states = size

    def __contains__(self, key) -> bool:
        return isinstance(key, str) and self.lookup(key) is not None

    def __getitem__(self, key: str) -> Any:
        value = self.lookup(key)
        if value is None:
            raise KeyError(key)
        return value

    def has_prefix(self, s: str) -> bool:
        """True if s is a path from the root (empty string is always a prefix)."""
        return self._walk(s) is not None

    def is_word(self, s: str) -> bool:
        """True if some value is stored under s."""
        return self.lookup(s) is not None

    def iter_extensions(self, prefix: str) -> Iterator[Tuple[str, bool]]:
        """
        Yield (next_char, is_terminal_after_appending_char) for all single-letter
        continuations of 'prefix'. If prefix isn't present, yields nothing.
        """
        idx = self._walk(prefix)
        if idx is None:
            return
        for ch, child in self.graph.fetch(idx).edges:
            yield ch, self.graph.fetch(child).value is not None

    def items(self) -> Iterator[Tuple[str, Any]]:
        """(key, value) pairs in lexicographic order of keys."""
        stack = [("", self.root)]
        while stack:
            prefix, idx = stack.pop()
            node = self.graph.fetch(idx)
            if node.value is not None:
                yield prefix, node.value
            for ch, child in reversed(node.edges):
                stack.append((prefix + ch, child))

    def keys(self) -> Iterator[str]:
        for key, _ in self.items():
            yield key

    def __iter__(self) -> Iterator[str]:
        return self.keys()

    def __repr__(self) -> str:
        return f"DAWG(root={self.root}, states={self.size()})"

    # ---------- Helpers ----------
    def _walk(self, s: str) -> Optional[int]:
        """Return node Id after consuming s, or None if no such path."""
        _check_key(s)
        idx = self.root
        for ch in s:
            nxt = E.lookup(self.graph.fetch(idx).edges, ch)
            if nxt is None:
                return None
            idx = nxt
        return idx


# ---------- Functional API ----------
# Each call leaves its argument untouched and returns a new automaton.
def empty() -> DAWG:
    return DAWG.empty()


def insert(key: str, value: Any, dawg: DAWG) -> DAWG:
    return dawg.copy().insert(key, value)


def delete(key: str, dawg: DAWG) -> DAWG:
    return dawg.copy().delete(key)


def lookup(key: str, dawg: DAWG) -> Optional[Any]:
    return dawg.lookup(key)


def size(dawg: DAWG) -> int:
    return dawg.size()


def from_list(pairs: Iterable[Tuple[str, Any]]) -> DAWG:
    return DAWG.from_list(pairs)


def from_keys(keys: Iterable[str]) -> DAWG:
    return DAWG.from_keys(keys)
