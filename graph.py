# graph.py
# Hash-consed node store for the DAWG: equal nodes share one Id, and each
# Id carries a reference count. Slots are reused once their count drops to 0.

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from edges import EMPTY, Edges


class DeadNodeError(KeyError):
    """An Id was used after its node had been released (or was never issued)."""


@dataclass(frozen=True, eq=False)
class Node:
    value: Any = None
    edges: Edges = EMPTY

    # 1, 1.0 and True hash alike; keep them apart so lookups return what was stored
    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return (
            type(self.value) is type(other.value)
            and self.value == other.value
            and self.edges == other.edges
        )

    def __hash__(self):
        return hash((type(self.value), self.value, self.edges))


LEAF = Node()


class Graph:
    """
    Arena of nodes indexed by small integer Ids.

    Internals:
      _nodes:  List[Optional[Node]], None marks a free slot
      _counts: List[int], reference count per slot
      _index:  Dict[Node, int], live node -> Id (the hash-consing table)
      _free:   List[int], released slots, most recent last
    """

    __slots__ = ("_nodes", "_counts", "_index", "_free", "lock")

    def __init__(self):
        self._nodes: List[Optional[Node]] = []
        self._counts: List[int] = []
        self._index: Dict[Node, int] = {}
        self._free: List[int] = []
        # held by the engine for a whole insert/delete
        self.lock = threading.RLock()

    # ---------- Store API ----------
    def register(self, node: Node) -> int:
        """Return the Id of ``node``, sharing an equal live node when one exists."""
        i = self._index.get(node)
        if i is not None:
            self._counts[i] += 1
            return i
        if self._free:
            i = self._free.pop()
            self._nodes[i] = node
            self._counts[i] = 1
        else:
            i = len(self._nodes)
            self._nodes.append(node)
            self._counts.append(1)
        self._index[node] = i
        return i

    def retire(self, i: int) -> None:
        """Drop one reference to ``i``; the slot is freed when none remain."""
        node = self.fetch(i)
        self._counts[i] -= 1
        if self._counts[i] == 0:
            del self._index[node]
            self._nodes[i] = None
            self._free.append(i)

    def fetch(self, i: int) -> Node:
        if 0 <= i < len(self._nodes):
            node = self._nodes[i]
            if node is not None:
                return node
        raise DeadNodeError(i)

    def count(self) -> int:
        return len(self._index)

    # ---------- Helpers ----------
    def refcount(self, i: int) -> int:
        self.fetch(i)
        return self._counts[i]

    def ids(self) -> Iterator[int]:
        """Live Ids in ascending order."""
        for i, node in enumerate(self._nodes):
            if node is not None:
                yield i

    @classmethod
    def restore(cls, slots: Dict[int, tuple]) -> "Graph":
        """
        Rebuild a store from ``{id: (node, refcount)}``, keeping the Ids.
        Unused slots below the highest Id become free slots.
        """
        g = cls()
        size = max(slots) + 1 if slots else 0
        g._nodes = [None] * size
        g._counts = [0] * size
        for i, (node, count) in slots.items():
            if i < 0:
                raise ValueError(f"negative node id {i}")
            if count < 1:
                raise ValueError(f"node {i} has reference count {count}")
            if node in g._index:
                raise ValueError(f"nodes {g._index[node]} and {i} are equal")
            g._nodes[i] = node
            g._counts[i] = count
            g._index[node] = i
        g._free = [i for i in range(size - 1, -1, -1) if g._nodes[i] is None]
        return g

    def copy(self) -> "Graph":
        """Independent store with the same Ids, nodes and counts."""
        g = Graph()
        g._nodes = list(self._nodes)
        g._counts = list(self._counts)
        g._index = dict(self._index)
        g._free = list(self._free)
        return g

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Graph(live={len(self._index)}, slots={len(self._nodes)})"
