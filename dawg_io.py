# dawg_io.py
# JSON persistence for DAWG values and a structural invariant checker.

import json
import time
from typing import Any, Dict, List

from dawg import DAWG
from graph import DeadNodeError, Graph, Node
from utils import vlog

FORMAT = "dawg-json"
VERSION = 1


class InvariantError(ValueError):
    """The automaton is cyclic, references a dead node, or is not minimal."""


def check_invariants(dawg: DAWG) -> None:
    """
    Raise InvariantError unless:
      - the root and every node reachable from it are live,
      - no path revisits a node (acyclic),
      - no two reachable Ids hold equal nodes (minimal),
      - every live node is reachable, with a reference count equal to the
        number of distinct paths from the root to it.
    """
    graph = dawg.graph
    # iterative DFS: 0 = on current path, 1 = finished
    state: Dict[int, int] = {}
    order: List[int] = []
    stack = [(dawg.root, False)]
    while stack:
        idx, done = stack.pop()
        if done:
            state[idx] = 1
            order.append(idx)
            continue
        mark = state.get(idx)
        if mark == 1:
            continue
        if mark == 0:
            raise InvariantError(f"cycle through node {idx}")
        try:
            node = graph.fetch(idx)
        except DeadNodeError:
            raise InvariantError(f"reachable node {idx} is not live") from None
        state[idx] = 0
        stack.append((idx, True))
        for _, child in node.edges:
            if state.get(child) == 0:
                raise InvariantError(f"cycle through node {child}")
            if child not in state:
                stack.append((child, False))

    seen: Dict[Node, int] = {}
    for idx in order:
        node = graph.fetch(idx)
        other = seen.setdefault(node, idx)
        if other != idx:
            raise InvariantError(f"nodes {other} and {idx} are equal")

    unreachable = set(graph.ids()) - set(order)
    if unreachable:
        raise InvariantError(f"live nodes not reachable from root: {sorted(unreachable)}")

    # order is post-order, so reversed it lists parents before children
    paths = {idx: 0 for idx in order}
    paths[dawg.root] = 1
    for idx in reversed(order):
        for _, child in graph.fetch(idx).edges:
            paths[child] += paths[idx]
    for idx in order:
        if graph.refcount(idx) != paths[idx]:
            raise InvariantError(
                f"node {idx} has reference count {graph.refcount(idx)}, expected {paths[idx]}"
            )


def to_dict(dawg: DAWG) -> Dict[str, Any]:
    graph = dawg.graph
    nodes = []
    for idx in graph.ids():
        node = graph.fetch(idx)
        nodes.append([idx, graph.refcount(idx), node.value, [[ch, child] for ch, child in node.edges]])
    return {"format": FORMAT, "version": VERSION, "root": dawg.root, "nodes": nodes}


def _is_int(x) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def from_dict(doc: Dict[str, Any]) -> DAWG:
    if not isinstance(doc, dict) or doc.get("format") != FORMAT:
        raise ValueError("not a dawg-json document")
    if doc.get("version") != VERSION:
        raise ValueError(f"unsupported dawg-json version: {doc.get('version')!r}")
    slots = {}
    try:
        for idx, count, value, edge_list in doc["nodes"]:
            if not _is_int(idx) or not _is_int(count):
                raise ValueError(f"node id and count must be integers, got {idx!r}, {count!r}")
            if isinstance(value, (list, dict)):
                raise ValueError(f"node {idx} has unhashable value {value!r}")
            edges = []
            for ch, child in edge_list:
                if not isinstance(ch, str) or len(ch) != 1 or not _is_int(child):
                    raise ValueError(f"node {idx} has malformed edge {[ch, child]!r}")
                edges.append((ch, child))
            edges = tuple(sorted(edges))
            if len({ch for ch, _ in edges}) != len(edges):
                raise ValueError(f"node {idx} has duplicate edges")
            if idx in slots:
                raise ValueError(f"node {idx} listed twice")
            slots[idx] = (Node(value, edges), count)
        root = doc["root"]
    except (KeyError, TypeError) as e:
        raise ValueError(f"malformed dawg-json document: {e!r}") from e
    if not _is_int(root):
        raise ValueError(f"root must be an integer, got {root!r}")
    dawg = DAWG(Graph.restore(slots), root)
    check_invariants(dawg)
    return dawg


def save(dawg: DAWG, path: str) -> None:
    t0 = time.time()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_dict(dawg), f)
    vlog(f"Saved DAWG with {dawg.size()} states to {path}", t0)


def load(path: str) -> DAWG:
    t0 = time.time()
    with open(path, "r", encoding="utf-8") as f:
        try:
            doc = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path} is not valid JSON") from e
    dawg = from_dict(doc)
    vlog(f"Loaded DAWG with {dawg.size()} states from {path}", t0)
    return dawg
