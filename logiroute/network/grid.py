"""Footprint translation between facility roots and grid cells.

Facilities are addressed by their root cell; the grid system knows how many
cells each one covers and which cells border them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Protocol, Set, Tuple

from .graph import FOUR_NEIGHBOURS, GridPosition


class PositionTranslator(Protocol):
    """Converts a facility's root cell into graph-addressable cells."""

    def occupied_cells(self, root: GridPosition) -> Set[GridPosition]:
        ...

    def adjacent_cells(self, cell: GridPosition) -> Iterable[GridPosition]:
        ...


@dataclass
class GridSystem:
    """Rectangular footprints on an optionally bounded grid.

    Roots that were never placed are treated as single-cell footprints.
    """

    width: Optional[int] = None
    height: Optional[int] = None
    footprints: Dict[GridPosition, Tuple[int, int]] = field(default_factory=dict)

    def place(self, root: GridPosition, size: Tuple[int, int] = (1, 1)) -> None:
        w, h = size
        if w < 1 or h < 1:
            raise ValueError(f"Footprint size must be at least 1x1, got {w}x{h}")
        self.footprints[tuple(root)] = (w, h)

    def remove(self, root: GridPosition) -> None:
        self.footprints.pop(tuple(root), None)

    def in_bounds(self, cell: GridPosition) -> bool:
        x, y = cell
        if self.width is not None and not 0 <= x < self.width:
            return False
        if self.height is not None and not 0 <= y < self.height:
            return False
        return True

    def occupied_cells(self, root: GridPosition) -> Set[GridPosition]:
        rx, ry = root
        w, h = self.footprints.get((rx, ry), (1, 1))
        return {(rx + dx, ry + dy) for dx in range(w) for dy in range(h)}

    def adjacent_cells(self, cell: GridPosition) -> Iterable[GridPosition]:
        x, y = cell
        for dx, dy in FOUR_NEIGHBOURS:
            neighbour = (x + dx, y + dy)
            if self.in_bounds(neighbour):
                yield neighbour
