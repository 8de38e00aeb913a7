"""
Route resolution for a single facility.

Decides WHERE a facility's output goes and WHERE its primary input comes
from. Each side follows a fixed priority:

Output:
1. Explicit override (must expose a receiver capability, else the side fails)
2. Nearest stockpile by straight line

Input (primary need only):
1. Explicit override (must expose a provider capability, else the side fails)
2. Producer of the needed type, nearest by road hops from our access points
3. Nearest stockpile by straight line

When the road graph or grid translator is missing, step 2 degrades to a
straight-line search over every provider matching the need (producers and
stockpiles together). Every minimizing scan uses strict ``<`` so the first
candidate in registry order wins ties.

``refresh`` recomputes everything from scratch, re-fetching the road graph and
registry state each time. Nothing from a previous call is reused.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Set, Tuple, TypeVar, Union

from .config import Config
from .errors import OverrideCapabilityError, RoutingError, SelfRouteError
from .logging_utils import (
    log_deterministic,
    log_error,
    log_info,
    log_success,
    log_warning,
)
from .network import (
    GridPosition,
    PositionTranslator,
    RoadGraph,
    RoadNetwork,
    find_access_points,
    multi_source_distances,
    road_distance_between,
    straight_line_distance,
)
from .registry import CandidateRegistry
from .schemas import (
    NOT_CONFIGURED_LABEL,
    NOT_FOUND_LABEL,
    Facility,
    ProviderCapability,
    ProviderKind,
    ReceiverCapability,
    ResourceType,
    Route,
)

OverrideTarget = Union[str, Facility, None]
RefreshListener = Callable[["RouteResolver", Route], None]

_C = TypeVar("_C", ProviderCapability, ReceiverCapability)

NOT_REQUIRED_LABEL = "not required"


@dataclass(frozen=True)
class RoutingPolicy:
    """Tunable knobs for automatic search."""

    prefer_direct_supply: bool = field(default_factory=lambda: Config.PREFER_DIRECT_SUPPLY)
    max_road_distance: int = field(default_factory=lambda: Config.MAX_ROAD_DISTANCE)

    def __post_init__(self) -> None:
        if self.max_road_distance <= 0:
            raise ValueError(
                f"max_road_distance must be > 0 hops (got {self.max_road_distance})"
            )


def _stockpile_label(position: GridPosition) -> str:
    return f"Stockpile (auto) at {tuple(position)}"


def _nearest_by_straight_line(origin: GridPosition, candidates: Iterable[_C]) -> Optional[_C]:
    nearest: Optional[_C] = None
    min_distance = float("inf")
    for candidate in candidates:
        dist = straight_line_distance(origin, candidate.position)
        if dist < min_distance:
            min_distance = dist
            nearest = candidate
    return nearest


def _normalize_target(target: OverrideTarget) -> Optional[str]:
    if isinstance(target, Facility):
        return target.facility_id
    return target


class RouteResolver:
    """Owns and resolves one facility's logistics endpoints.

    Collaborators are injected: the candidate registry, the road network that
    hands out the current graph, and the translator mapping a facility root to
    its occupied cells. The last two are optional; without them input search
    falls back to straight-line distance.
    """

    def __init__(
        self,
        facility: Facility,
        registry: CandidateRegistry,
        road_network: Optional[RoadNetwork] = None,
        translator: Optional[PositionTranslator] = None,
        policy: Optional[RoutingPolicy] = None,
        listeners: Optional[List[RefreshListener]] = None,
    ):
        self.facility = facility
        self.registry = registry
        self.road_network = road_network
        self.translator = translator
        self.policy = policy or RoutingPolicy()
        self.listeners: List[RefreshListener] = list(listeners or [])

        self._output_override: Optional[str] = None
        self._input_override: Optional[str] = None

        self.route = Route()
        self.last_errors: List[RoutingError] = []
        self.refresh_count = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.facility.display_name

    @property
    def output_override(self) -> Optional[str]:
        return self._output_override

    @property
    def input_override(self) -> Optional[str]:
        return self._input_override

    @property
    def output_destination(self) -> Optional[ReceiverCapability]:
        """Current receiver, or ``None`` if unresolved or since destroyed."""

        if self.route.destination_id is None:
            return None
        return self.registry.get_receiver(self.route.destination_id)

    @property
    def input_source(self) -> Optional[ProviderCapability]:
        """Current provider, or ``None`` if unresolved or since destroyed."""

        if self.route.source_id is None:
            return None
        return self.registry.get_provider(self.route.source_id)

    @property
    def output_label(self) -> str:
        return self.route.destination_label

    @property
    def input_label(self) -> str:
        return self.route.source_label

    def add_listener(self, listener: RefreshListener) -> None:
        self.listeners.append(listener)

    def set_output_override(self, target: OverrideTarget) -> Route:
        """Bind output to ``target`` (or clear with ``None``) and refresh."""

        self._output_override = _normalize_target(target)
        return self.refresh()

    def set_input_override(self, target: OverrideTarget) -> Route:
        """Bind input to ``target`` (or clear with ``None``) and refresh."""

        self._input_override = _normalize_target(target)
        return self.refresh()

    def has_output(self) -> bool:
        return self.output_destination is not None

    def has_input(self) -> bool:
        return self.input_source is not None

    def is_configured(self) -> bool:
        """Output is mandatory; input only matters when the facility needs one."""

        if not self.has_output():
            return False
        if self.facility.needs_input:
            return self.has_input()
        return True

    def refresh(self) -> Route:
        """Recompute both endpoints from the current world.

        Never raises for routing outcomes: configuration errors are recorded on
        the route and printed, and an empty world leaves both sides absent.
        Listeners run after the new route is stored.
        """

        was_configured = self.is_configured()
        errors: List[RoutingError] = []

        destination_id, destination_label = self._resolve_output(errors)
        source_id, source_label = self._resolve_input(errors)

        self.route = Route(
            source_id=source_id,
            destination_id=destination_id,
            source_label=source_label,
            destination_label=destination_label,
            errors=[exc.short() for exc in errors],
        )
        self.last_errors = errors
        self.refresh_count += 1

        now_configured = self.is_configured()
        if now_configured != was_configured:
            state = "configured" if now_configured else "unconfigured"
            log_info(f"[Routing] {self.name}: routes now {state}")

        self._notify_listeners()
        return self.route

    # ------------------------------------------------------------------
    # Output side
    # ------------------------------------------------------------------

    def _resolve_output(self, errors: List[RoutingError]) -> Tuple[Optional[str], str]:
        if self._output_override is not None:
            receiver = self._lookup_override(
                self._output_override, "output", "a receiver capability", self.registry.get_receiver, errors
            )
            if receiver is None:
                return None, f"{self._target_name(self._output_override)} (ERROR)"
            log_success(f"[Routing] {self.name}: Output → {receiver.name}")
            return receiver.entity_id, receiver.name

        receiver = self._find_nearest_stockpile_receiver()
        if receiver is None:
            log_warning(f"[Routing] {self.name}: Output receiver NOT FOUND! Build a stockpile.")
            return None, NOT_FOUND_LABEL

        log_success(
            f"[Routing] {self.name}: Output → auto-selected stockpile at {tuple(receiver.position)}"
        )
        return receiver.entity_id, _stockpile_label(receiver.position)

    def _find_nearest_stockpile_receiver(self) -> Optional[ReceiverCapability]:
        candidates = [
            receiver
            for receiver in self.registry.stockpile_receivers()
            if receiver.entity_id != self.facility.facility_id
        ]
        if not candidates:
            log_deterministic(f"[Routing] {self.name}: no stockpile on the map")
            return None
        return _nearest_by_straight_line(self.facility.position, candidates)

    # ------------------------------------------------------------------
    # Input side
    # ------------------------------------------------------------------

    def _resolve_input(self, errors: List[RoutingError]) -> Tuple[Optional[str], str]:
        if self._input_override is not None:
            provider = self._lookup_override(
                self._input_override, "input", "a provider capability", self.registry.get_provider, errors
            )
            if provider is None:
                return None, f"{self._target_name(self._input_override)} (ERROR)"
            log_success(f"[Routing] {self.name}: Input ← {provider.name}")
            return provider.entity_id, provider.name

        need = self.facility.primary_need
        if need is None:
            return None, NOT_REQUIRED_LABEL

        source: Optional[ProviderCapability] = None
        if self.policy.prefer_direct_supply:
            source = self._find_nearest_producer(need)

        if source is None:
            source = self._find_nearest_stockpile_provider(need)

        if source is None:
            log_warning(
                f"[Routing] {self.name}: Input source NOT FOUND! Build a stockpile or a {need} producer."
            )
            return None, NOT_FOUND_LABEL

        if source.kind is ProviderKind.STOCKPILE:
            log_success(
                f"[Routing] {self.name}: Input ← auto-selected stockpile at {tuple(source.position)}"
            )
            return source.entity_id, _stockpile_label(source.position)

        log_success(f"[Routing] {self.name}: Input ← producer {source.name}")
        return source.entity_id, f"{source.name} (producer)"

    def _find_nearest_stockpile_provider(self, need: ResourceType) -> Optional[ProviderCapability]:
        candidates = [
            provider
            for provider in self.registry.providers_for(need, ProviderKind.STOCKPILE)
            if provider.entity_id != self.facility.facility_id
        ]
        if not candidates:
            log_deterministic(f"[Routing] {self.name}: no stockpile on the map")
            return None
        return _nearest_by_straight_line(self.facility.position, candidates)

    def _find_nearest_producer(self, need: ResourceType) -> Optional[ProviderCapability]:
        """Pick the producer of ``need`` with the fewest road hops from us.

        Returns ``None`` when no producer exists, when we have no road access,
        or when producers have road access but none is reachable within the
        cap. Missing infrastructure, or producers that do not touch any road,
        switch to the straight-line search instead.
        """

        log_deterministic(f"[Routing] {self.name}: looking for a {need} producer...")
        producers = [
            provider
            for provider in self.registry.providers_for(need, ProviderKind.PRODUCER)
            if provider.entity_id != self.facility.facility_id
        ]
        if not producers:
            log_deterministic(f"[Routing] {self.name}: no {need} producers on the map")
            return None

        graph = self._current_graph()
        translator = self.translator
        if translator is None or graph is None or graph.is_empty():
            log_warning(
                f"[Routing] {self.name}: road network unavailable, choosing nearest by distance"
            )
            return self._nearest_matching_provider(need)

        log_deterministic(
            f"[Routing] {self.name}: {len(producers)} {need} producer(s) found, checking roads..."
        )
        my_access = self._access_points(self.facility.position, graph, translator)
        if not my_access:
            log_warning(f"[Routing] {self.name}: no road access from this facility!")
            return None

        distances = multi_source_distances(my_access, self.policy.max_road_distance, graph)

        nearest: Optional[ProviderCapability] = None
        min_road_distance: Optional[int] = None
        any_producer_access = False
        for producer in producers:
            producer_access = self._access_points(producer.position, graph, translator)
            if producer_access:
                any_producer_access = True
            dist = road_distance_between(distances, producer_access)
            if dist is not None and (min_road_distance is None or dist < min_road_distance):
                min_road_distance = dist
                nearest = producer

        if nearest is not None:
            log_deterministic(
                f"[Routing] {self.name}: {nearest.name} is {min_road_distance} road hops away"
            )
            return nearest

        if not any_producer_access:
            log_warning(
                f"[Routing] {self.name}: no {need} producer touches a road yet, choosing nearest by distance"
            )
            return self._nearest_matching_provider(need)

        log_warning(f"[Routing] {self.name}: {need} producers found, but no road leads to them!")
        return None

    def _nearest_matching_provider(self, need: ResourceType) -> Optional[ProviderCapability]:
        candidates = [
            provider
            for provider in self.registry.providers_for(need)
            if provider.entity_id != self.facility.facility_id
        ]
        return _nearest_by_straight_line(self.facility.position, candidates)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _current_graph(self) -> Optional[RoadGraph]:
        # Fetched per call; the road subsystem may have rebuilt it since last time
        if self.road_network is None:
            return None
        return self.road_network.get_road_graph()

    def _access_points(
        self, root: GridPosition, graph: RoadGraph, translator: PositionTranslator
    ) -> Set[GridPosition]:
        cells = translator.occupied_cells(tuple(root))
        return find_access_points(cells, graph, translator)

    def _lookup_override(
        self,
        target_id: str,
        side: str,
        capability: str,
        lookup: Callable[[str], Optional[_C]],
        errors: List[RoutingError],
    ) -> Optional[_C]:
        if target_id == self.facility.facility_id:
            exc: RoutingError = SelfRouteError(facility_id=self.facility.facility_id, side=side)
        else:
            found = lookup(target_id)
            if found is not None:
                return found
            exc = OverrideCapabilityError(
                facility_id=self.facility.facility_id,
                target_id=target_id,
                side=side,
                capability=capability,
            )
        errors.append(exc)
        log_warning(f"[Routing] {exc}")
        return None

    def _target_name(self, target_id: str) -> str:
        facility = self.registry.get_facility(target_id)
        return facility.display_name if facility is not None else target_id

    def _notify_listeners(self) -> None:
        for listener in self.listeners:
            try:
                listener(self, self.route)
            except Exception as exc:
                log_error(f"[Routing] {self.name}: refresh listener failed: {exc}")

    def describe(self) -> str:
        """One-line diagnostic summary of the current route."""

        status = "ok" if self.is_configured() else NOT_CONFIGURED_LABEL
        return (
            f"{self.name}: output → {self.output_label} | "
            f"input ← {self.input_label} [{status}]"
        )
