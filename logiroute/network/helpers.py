"""Utilities for searching the road graph."""

from __future__ import annotations

import math
from collections import deque
from typing import Dict, Iterable, Optional, Set

from .graph import GridPosition, RoadGraph
from .grid import PositionTranslator


def find_access_points(
    cells: Iterable[GridPosition],
    graph: RoadGraph,
    translator: PositionTranslator,
) -> Set[GridPosition]:
    """Return the road nodes a facility can step onto from its footprint.

    A road node counts as an access point when it borders one of the occupied
    cells (per the translator's notion of adjacency) or, if an occupied cell is
    itself registered in the graph, when it is one of that cell's graph
    neighbours. Occupied cells are never their own access points. An empty
    result means the facility has no road access yet, which is a normal state.
    """

    occupied = {tuple(cell) for cell in cells}
    access: Set[GridPosition] = set()

    for cell in occupied:
        # Geometric neighbours supplied by the grid (bounds already applied)
        for neighbour in translator.adjacent_cells(cell):
            if neighbour not in occupied and graph.has_node(neighbour):
                access.add(neighbour)
        # Footprints overlapping a road node inherit that node's connections
        for neighbour in graph.neighbors(cell):
            if neighbour not in occupied:
                access.add(neighbour)

    return access


def multi_source_distances(
    origins: Iterable[GridPosition],
    max_distance: int,
    graph: RoadGraph,
) -> Dict[GridPosition, int]:
    """Return hop distance from the nearest origin to every node within ``max_distance``.

    Breadth-first search seeded with every origin at distance 0. Each node is
    assigned a distance exactly once, so the cost is linear in the edges of the
    explored region. Nodes that are unreachable or further than the cap are
    absent from the result.
    """

    if max_distance < 0:
        raise ValueError("max_distance must be >= 0")

    distances: Dict[GridPosition, int] = {}
    queue: deque[GridPosition] = deque()
    for origin in origins:
        origin = tuple(origin)
        # Duplicate origins collapse to a single entry
        if origin in distances:
            continue
        distances[origin] = 0
        queue.append(origin)

    while queue:
        # FIFO order guarantees the first assignment is the shortest one
        node = queue.popleft()
        dist = distances[node]
        if dist >= max_distance:
            continue
        for neighbour in graph.neighbors(node):
            if neighbour in distances:
                continue
            distances[neighbour] = dist + 1
            queue.append(neighbour)

    return distances


def road_distance_between(
    distances: Dict[GridPosition, int],
    access_points: Iterable[GridPosition],
) -> Optional[int]:
    """Smallest known distance over ``access_points``, or ``None`` if none is reachable."""

    best: Optional[int] = None
    for point in access_points:
        dist = distances.get(point)
        if dist is not None and (best is None or dist < best):
            best = dist
    return best


def straight_line_distance(a: GridPosition, b: GridPosition) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])
