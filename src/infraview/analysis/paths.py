"""
Path Engine.

Shortest path and bounded enumeration of simple paths along edge direction
(source -> target).
"""

from collections import deque
from typing import Deque, Dict, Iterator, List, Sequence, Set, Tuple

from pydantic import BaseModel, Field

from ..config import DEFAULT_MAX_PATHS
from ..core.types import Edge


class PathResult(BaseModel):
    exists: bool
    path: List[str] = Field(default_factory=list)
    edge_ids: List[str] = Field(default_factory=list)
    length: int = -1

    @classmethod
    def missing(cls) -> "PathResult":
        return cls(exists=False, path=[], edge_ids=[], length=-1)


def _outgoing_adjacency(edges: Sequence[Edge]) -> Dict[str, List[Tuple[str, str]]]:
    """source -> [(target, edge_id)] in edge input order."""
    adjacency: Dict[str, List[Tuple[str, str]]] = {}
    for edge in edges:
        adjacency.setdefault(edge.source_id, []).append((edge.target_id, edge.id))
    return adjacency


def shortest_path(from_id: str, to_id: str, edges: Sequence[Edge]) -> PathResult:
    """
    Breadth-first search for the fewest-hop path from ``from_id`` to ``to_id``.

    Among equally short paths the one using earlier edges (in input order)
    wins. An unreachable target yields ``exists=False`` and ``length=-1``.
    """
    if from_id == to_id:
        return PathResult(exists=True, path=[from_id], edge_ids=[], length=0)

    adjacency = _outgoing_adjacency(edges)
    queue: Deque[Tuple[str, List[str], List[str]]] = deque([(from_id, [from_id], [])])
    visited: Set[str] = set()

    while queue:
        node_id, path, edge_ids = queue.popleft()

        if node_id == to_id:
            return PathResult(exists=True, path=path, edge_ids=edge_ids, length=len(edge_ids))

        if node_id in visited:
            continue
        visited.add(node_id)

        for target, edge_id in adjacency.get(node_id, []):
            if target not in visited:
                queue.append((target, path + [target], edge_ids + [edge_id]))

    return PathResult.missing()


def all_paths(
    from_id: str,
    to_id: str,
    edges: Sequence[Edge],
    max_paths: int = DEFAULT_MAX_PATHS,
) -> List[PathResult]:
    """
    Enumerate up to ``max_paths`` simple paths from ``from_id`` to ``to_id``.

    Nodes are marked visited only along the current branch, so a node may
    appear on several paths but never twice on one. Hitting the cap simply
    ends the enumeration.
    """
    found: List[PathResult] = []
    if max_paths <= 0:
        return found

    if from_id == to_id:
        return [PathResult(exists=True, path=[from_id], edge_ids=[], length=0)]

    adjacency = _outgoing_adjacency(edges)
    path: List[str] = [from_id]
    edge_ids: List[str] = []
    on_branch: Set[str] = {from_id}

    # Explicit stack of (node, remaining adjacency) frames; long chains must
    # not depend on the interpreter's recursion limit.
    stack: List[Tuple[str, Iterator[Tuple[str, str]]]] = [
        (from_id, iter(adjacency.get(from_id, [])))
    ]
    while stack and len(found) < max_paths:
        current, targets = stack[-1]
        step = next(targets, None)
        if step is None:
            stack.pop()
            if stack:
                path.pop()
                edge_ids.pop()
                on_branch.discard(current)
            continue

        target, edge_id = step
        if target in on_branch:
            continue
        if target == to_id:
            found.append(PathResult(
                exists=True,
                path=path + [target],
                edge_ids=edge_ids + [edge_id],
                length=len(edge_ids) + 1,
            ))
            continue

        on_branch.add(target)
        path.append(target)
        edge_ids.append(edge_id)
        stack.append((target, iter(adjacency.get(target, []))))

    return found
