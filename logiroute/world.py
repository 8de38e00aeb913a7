"""
Frame-driven driver for routing across every facility in a world.

Owns the shared collaborators (candidate registry, road network, grid system)
and one resolver/scheduler pair per routed facility: anything that produces or
needs a resource. Stockpiles and plain sinks are registered and placed but are
endpoints only; they never resolve or retry. Each routed facility resolves
independently and greedily; the world only fans out steps and change events.

Simulation step:
1. Advance every facility's retry scheduler by ``delta_seconds``
2. Schedulers of unconfigured facilities refresh when their interval elapses
3. Step listeners receive ``(tick, refreshed_ids)``

Change events (``notify_world_changed``) refresh every facility immediately,
independent of any timer.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .logging_utils import log_error, log_info
from .network import GridSystem, RoadGraph, RoadNetwork
from .registry import InMemoryRegistry
from .resolver import RefreshListener, RouteResolver, RoutingPolicy
from .scheduler import AccessConsumer, ReResolutionScheduler, RetryInterval
from .schemas import Facility

StepListener = Callable[[int, List[str]], None]


class LogisticsWorld:
    """Registry, roads, and per-facility routing state for one map."""

    def __init__(
        self,
        registry: Optional[InMemoryRegistry] = None,
        road_network: Optional[RoadNetwork] = None,
        grid: Optional[GridSystem] = None,
        policy: Optional[RoutingPolicy] = None,
        retry_interval: Optional[RetryInterval] = None,
        step_listeners: Optional[List[StepListener]] = None,
    ):
        self.registry = registry or InMemoryRegistry()
        self.road_network = road_network or RoadNetwork()
        self.grid = grid or GridSystem()
        self.policy = policy or RoutingPolicy()
        self.retry_interval = retry_interval or RetryInterval()
        self.step_listeners: List[StepListener] = list(step_listeners or [])

        self.tick = 0
        self._facilities: Dict[str, Facility] = {}
        self._resolvers: Dict[str, RouteResolver] = {}
        self._schedulers: Dict[str, ReResolutionScheduler] = {}

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._facilities

    @property
    def facility_ids(self) -> List[str]:
        return list(self._facilities)

    @property
    def routed_ids(self) -> List[str]:
        return list(self._resolvers)

    def add_facility(
        self,
        facility: Facility,
        consumers: Optional[List[AccessConsumer]] = None,
        listeners: Optional[List[RefreshListener]] = None,
    ) -> Optional[RouteResolver]:
        """Place a facility and, if it routes, build its resolver and refresh once.

        Returns ``None`` for stockpiles and plain sinks.
        """

        self.registry.register(facility)
        self.grid.place(facility.position, facility.size)
        self._facilities[facility.facility_id] = facility
        if not facility.needs_routing:
            return None

        resolver = RouteResolver(
            facility,
            self.registry,
            road_network=self.road_network,
            translator=self.grid,
            policy=self.policy,
            listeners=listeners,
        )
        self._resolvers[facility.facility_id] = resolver
        self._schedulers[facility.facility_id] = ReResolutionScheduler(
            resolver, interval=self.retry_interval, consumers=consumers
        )
        resolver.refresh()
        return resolver

    def remove_facility(self, entity_id: str) -> Optional[Facility]:
        """Demolish a facility. Routes pointing at it read as absent from now on."""

        facility = self.registry.unregister(entity_id)
        self._facilities.pop(entity_id, None)
        if facility is not None:
            self.grid.remove(facility.position)
        self._resolvers.pop(entity_id, None)
        self._schedulers.pop(entity_id, None)
        return facility

    def resolver(self, entity_id: str) -> RouteResolver:
        self._check_routed(entity_id)
        return self._resolvers[entity_id]

    def scheduler(self, entity_id: str) -> ReResolutionScheduler:
        self._check_routed(entity_id)
        return self._schedulers[entity_id]

    def _check_routed(self, entity_id: str) -> None:
        if entity_id not in self._facilities:
            raise KeyError(f"Facility '{entity_id}' is not part of this world")
        if entity_id not in self._resolvers:
            raise KeyError(f"Facility '{entity_id}' is an endpoint only and has no routes")

    def set_road_graph(self, graph: Optional[RoadGraph]) -> None:
        """Swap in a rebuilt road graph and re-resolve every facility."""

        self.road_network.set_graph(graph)
        self.notify_world_changed()

    def notify_world_changed(self) -> List[str]:
        """Refresh every routed facility now, regardless of scheduler state."""

        log_info(f"[World] Map changed, refreshing {len(self._resolvers)} facilities")
        for resolver in list(self._resolvers.values()):
            resolver.refresh()
        return self.routed_ids

    def step(self, delta_seconds: float) -> List[str]:
        """Advance one simulation step; return ids whose scheduler fired."""

        self.tick += 1
        refreshed: List[str] = []
        for entity_id, scheduler in list(self._schedulers.items()):
            if scheduler.update(delta_seconds):
                refreshed.append(entity_id)

        for listener in self.step_listeners:
            try:
                listener(self.tick, refreshed)
            except Exception as exc:
                log_error(f"[World] Step listener failed: {exc}")
        return refreshed

    def run(self, num_steps: int, delta_seconds: float) -> int:
        """Run ``num_steps`` steps; return how many retries fired in total."""

        fired = 0
        for _ in range(num_steps):
            fired += len(self.step(delta_seconds))
        return fired

    def unconfigured(self) -> List[str]:
        return [
            entity_id
            for entity_id, resolver in self._resolvers.items()
            if not resolver.is_configured()
        ]

    def summary(self) -> List[str]:
        return [resolver.describe() for resolver in self._resolvers.values()]
