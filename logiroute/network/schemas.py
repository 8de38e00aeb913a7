"""Pydantic schema for road graphs.

Mirrors ``RoadGraph`` in a form that survives JSON: explicit node and edge
lists instead of a mapping keyed by tuples.
"""

from __future__ import annotations

from typing import List, Tuple

from pydantic import BaseModel, Field

from .graph import RoadGraph


class RoadGraphState(BaseModel):
    """Serializable road graph."""

    nodes: List[Tuple[int, int]] = Field(
        default_factory=list,
        description="Road cells, including ones without connections",
    )
    edges: List[Tuple[Tuple[int, int], Tuple[int, int]]] = Field(
        default_factory=list,
        description="Undirected connections between road cells",
    )

    def to_graph(self) -> RoadGraph:
        return RoadGraph.from_edges(self.edges, nodes=self.nodes)

    @classmethod
    def from_graph(cls, graph: RoadGraph) -> "RoadGraphState":
        edges = []
        for node in sorted(graph.adjacency):
            for neighbour in sorted(graph.neighbors(node)):
                # Each undirected edge once
                if node < neighbour:
                    edges.append((node, neighbour))
        return cls(nodes=sorted(graph.adjacency), edges=edges)
