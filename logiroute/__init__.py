"""
Logiroute - self-healing logistics routing for facility simulations.

Resolves, for each production facility, the stockpile that receives its output
and the producer or stockpile that supplies its input, preferring road
distance when a road graph exists and straight-line distance when it does not.

No global state. Registry, road network and grid system are injected.
"""

__version__ = "0.1.0"

# Main driver
from .world import LogisticsWorld

# Routing core
from .resolver import RouteResolver, RoutingPolicy
from .scheduler import AccessConsumer, ReResolutionScheduler, RetryInterval
from .registry import CandidateRegistry, InMemoryRegistry
from .errors import (
    DuplicateEntityError,
    OverrideCapabilityError,
    RoutingError,
    SelfRouteError,
)

# Road network helpers
from .network import (
    GridPosition,
    GridSystem,
    PositionTranslator,
    RoadGraph,
    RoadGraphState,
    RoadNetwork,
    find_access_points,
    multi_source_distances,
    road_distance_between,
    straight_line_distance,
)

# Core schemas
from .schemas import (
    Facility,
    ProviderCapability,
    ProviderKind,
    ReceiverCapability,
    ReceiverKind,
    ResourceType,
    Route,
)

# Scenario loader helpers
from .scenario import ScenarioLoader

__all__ = [
    # Main class
    "LogisticsWorld",
    # Routing core
    "RouteResolver",
    "RoutingPolicy",
    "AccessConsumer",
    "ReResolutionScheduler",
    "RetryInterval",
    "CandidateRegistry",
    "InMemoryRegistry",
    # Errors
    "RoutingError",
    "OverrideCapabilityError",
    "SelfRouteError",
    "DuplicateEntityError",
    # Schemas
    "Facility",
    "ProviderCapability",
    "ProviderKind",
    "ReceiverCapability",
    "ReceiverKind",
    "ResourceType",
    "Route",
    # Scenario helpers
    "ScenarioLoader",
    # Road network helpers
    "GridPosition",
    "GridSystem",
    "PositionTranslator",
    "RoadGraph",
    "RoadGraphState",
    "RoadNetwork",
    "find_access_points",
    "multi_source_distances",
    "road_distance_between",
    "straight_line_distance",
]
