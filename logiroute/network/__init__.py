"""Road network tier for Logiroute."""

from .graph import GridPosition, RoadGraph, RoadNetwork
from .grid import GridSystem, PositionTranslator
from .schemas import RoadGraphState
from .helpers import (
    find_access_points,
    multi_source_distances,
    road_distance_between,
    straight_line_distance,
)

__all__ = [
    "GridPosition",
    "RoadGraph",
    "RoadNetwork",
    "GridSystem",
    "PositionTranslator",
    "RoadGraphState",
    "find_access_points",
    "multi_source_distances",
    "road_distance_between",
    "straight_line_distance",
]
