"""Road graph snapshot and its owning network.

The road subsystem owns the graph and rebuilds it whenever topology changes.
Routing code only ever reads the snapshot handed out by ``RoadNetwork`` and
must fetch it again on every resolution instead of holding on to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional, Set, Tuple

GridPosition = Tuple[int, int]

FOUR_NEIGHBOURS: Tuple[GridPosition, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass
class RoadGraph:
    """Undirected adjacency between road cells."""

    adjacency: Dict[GridPosition, Set[GridPosition]] = field(default_factory=dict)

    def neighbors(self, node: GridPosition) -> FrozenSet[GridPosition]:
        return frozenset(self.adjacency.get(node, ()))

    def has_node(self, node: GridPosition) -> bool:
        return node in self.adjacency

    def is_empty(self) -> bool:
        return not self.adjacency

    def __len__(self) -> int:
        return len(self.adjacency)

    def __contains__(self, node: object) -> bool:
        return node in self.adjacency

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[Tuple[GridPosition, GridPosition]],
        nodes: Iterable[GridPosition] = (),
    ) -> "RoadGraph":
        """Build an undirected graph from explicit ``(a, b)`` connections.

        ``nodes`` adds isolated road cells that have no connection yet.
        """

        adjacency: Dict[GridPosition, Set[GridPosition]] = {}
        for node in nodes:
            adjacency.setdefault(tuple(node), set())
        for a, b in edges:
            a, b = tuple(a), tuple(b)
            adjacency.setdefault(a, set()).add(b)
            adjacency.setdefault(b, set()).add(a)
        return cls(adjacency=adjacency)

    @classmethod
    def from_road_cells(cls, cells: Iterable[GridPosition]) -> "RoadGraph":
        """Connect every road cell to its four-directional road neighbours."""

        cell_set = {tuple(cell) for cell in cells}
        adjacency: Dict[GridPosition, Set[GridPosition]] = {}
        for x, y in cell_set:
            adjacency[(x, y)] = {
                (x + dx, y + dy)
                for dx, dy in FOUR_NEIGHBOURS
                if (x + dx, y + dy) in cell_set
            }
        return cls(adjacency=adjacency)


class RoadNetwork:
    """Holds the current road graph on behalf of the road subsystem.

    ``get_road_graph`` returns ``None`` until a graph has been built, which is
    the normal state of a map where facilities are placed before any road.
    """

    def __init__(self, graph: Optional[RoadGraph] = None):
        self._graph = graph
        # Bumped on every swap so observers can tell a rebuild happened
        self.version = 0

    def get_road_graph(self) -> Optional[RoadGraph]:
        return self._graph

    def set_graph(self, graph: Optional[RoadGraph]) -> None:
        self._graph = graph
        self.version += 1

    def clear(self) -> None:
        self.set_graph(None)
