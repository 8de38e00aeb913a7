"""Tests for RouteResolver priority policy, overrides and fallbacks."""

from __future__ import annotations

import contextlib
import io
from typing import List, Optional, Tuple

from logiroute.errors import OverrideCapabilityError, SelfRouteError
from logiroute.network import GridSystem, RoadGraph, RoadNetwork
from logiroute.registry import InMemoryRegistry
from logiroute.resolver import RouteResolver, RoutingPolicy
from logiroute.schemas import NOT_FOUND_LABEL, Facility, Route


def _world(
    facilities: List[Facility],
    graph: Optional[RoadGraph] = None,
) -> Tuple[InMemoryRegistry, RoadNetwork, GridSystem]:
    registry = InMemoryRegistry()
    grid = GridSystem()
    for facility in facilities:
        registry.register(facility)
        grid.place(facility.position, facility.size)
    return registry, RoadNetwork(graph), grid


def _chain(start, end, hops: int, lane: int):
    """Edges joining ``start`` to ``end`` in exactly ``hops`` steps via far-away filler nodes."""

    nodes = [start] + [(lane, i) for i in range(1, hops)] + [end]
    return list(zip(nodes, nodes[1:]))


def _mill(**overrides) -> Facility:
    data = dict(facility_id="mill", name="Mill", position=(0, 0), required_resources=["wood"])
    data.update(overrides)
    return Facility(**data)


def _producer(facility_id="forester", position=(5, 5), resource="wood") -> Facility:
    return Facility(facility_id=facility_id, name=facility_id.title(), position=position, output_resource=resource)


def _stockpile(facility_id="stockpile", position=(1, 1)) -> Facility:
    return Facility(facility_id=facility_id, name=facility_id.title(), position=position, is_stockpile=True)


def _scenario_graph() -> RoadGraph:
    # Mill (0,0) touches (-1,0); forester (5,5) touches (5,6); stockpile (1,1) touches (1,2).
    # Forester is 7 hops from the mill, the stockpile 20 hops.
    edges = _chain((-1, 0), (5, 6), 7, lane=100) + _chain((-1, 0), (1, 2), 20, lane=200)
    return RoadGraph.from_edges(edges)


def _resolve(facilities, graph=None, policy=None, use_grid=True, use_network=True) -> RouteResolver:
    registry, network, grid = _world(facilities, graph)
    resolver = RouteResolver(
        facilities[0],
        registry,
        road_network=network if use_network else None,
        translator=grid if use_grid else None,
        policy=policy or RoutingPolicy(prefer_direct_supply=True, max_road_distance=1000),
    )
    with contextlib.redirect_stdout(io.StringIO()):
        resolver.refresh()
    return resolver


def test_producer_reached_by_road_beats_nearer_stockpile():
    resolver = _resolve([_mill(), _producer(), _stockpile()], graph=_scenario_graph())

    assert resolver.input_source.entity_id == "forester"
    assert resolver.input_label == "Forester (producer)"
    assert resolver.output_destination.entity_id == "stockpile"
    assert resolver.is_configured() is True


def test_producer_preferred_even_when_stockpile_is_closer_by_road():
    edges = _chain((-1, 0), (5, 6), 7, lane=100) + [((-1, 0), (1, 2))]
    resolver = _resolve([_mill(), _producer(), _stockpile()], graph=RoadGraph.from_edges(edges))

    assert resolver.input_source.entity_id == "forester"


def test_empty_graph_picks_straight_line_nearest_provider():
    resolver = _resolve([_mill(), _producer(), _stockpile()], graph=RoadGraph())

    # Stockpile is 1.41 away, forester 7.07
    assert resolver.input_source.entity_id == "stockpile"
    assert resolver.input_label == "Stockpile (auto) at (1, 1)"


def test_missing_road_network_or_grid_degrades_to_straight_line():
    facilities = [_mill(), _producer(position=(2, 0)), _stockpile(position=(9, 9))]

    no_network = _resolve(facilities, graph=_scenario_graph(), use_network=False)
    assert no_network.input_source.entity_id == "forester"

    no_grid = _resolve(facilities, graph=_scenario_graph(), use_grid=False)
    assert no_grid.input_source.entity_id == "forester"


def test_empty_graph_without_stockpile_uses_nearest_matching_producer():
    facilities = [
        _mill(),
        _producer("far", position=(10, 10)),
        _producer("near", position=(2, 2)),
        _producer("quarry", position=(1, 0), resource="stone"),
    ]
    resolver = _resolve(facilities, graph=None)

    assert resolver.input_source.entity_id == "near"
    assert resolver.has_output() is False
    assert resolver.output_label == NOT_FOUND_LABEL


def test_producer_type_must_match_primary_need():
    # Quarry is one hop away but makes stone; the forester is 7 hops away
    edges = _chain((-1, 0), (5, 6), 7, lane=100) + [((-1, 0), (2, 1))]
    facilities = [_mill(), _producer("quarry", position=(2, 2), resource="stone"), _producer()]
    resolver = _resolve(facilities, graph=RoadGraph.from_edges(edges))

    assert resolver.input_source.entity_id == "forester"
    assert resolver.input_source.resource_type == "wood"


def test_only_first_required_resource_is_routed():
    facilities = [
        _mill(required_resources=["planks", "wood"]),
        _producer(position=(0, 2)),
    ]
    resolver = _resolve(facilities, graph=RoadGraph.from_road_cells([(0, 1)]))

    assert resolver.has_input() is False
    assert resolver.input_label == NOT_FOUND_LABEL


def test_road_ties_go_to_first_registered_producer():
    edges = [((-1, 0), (10, 11)), ((-1, 0), (20, 21))]
    first = _producer("alpha", position=(10, 10))
    second = _producer("beta", position=(20, 20))

    resolver = _resolve([_mill(), first, second], graph=RoadGraph.from_edges(edges))
    assert resolver.input_source.entity_id == "alpha"

    resolver = _resolve([_mill(), second, first], graph=RoadGraph.from_edges(edges))
    assert resolver.input_source.entity_id == "beta"


def test_straight_line_ties_go_to_first_registered_stockpile():
    facilities = [_mill(), _stockpile("east", position=(2, 0)), _stockpile("west", position=(-2, 0))]
    resolver = _resolve(facilities)

    assert resolver.output_destination.entity_id == "east"
    assert resolver.input_source.entity_id == "east"


def test_facility_without_road_access_falls_back_to_stockpile():
    # Roads exist, but none touches the mill
    edges = _chain((30, 30), (5, 6), 3, lane=100)
    resolver = _resolve([_mill(), _producer(), _stockpile()], graph=RoadGraph.from_edges(edges))

    assert resolver.input_source.entity_id == "stockpile"


def test_unreachable_producer_falls_back_to_stockpile():
    # Producer has road access, but on a disconnected network
    graph = RoadGraph.from_edges([((-1, 0), (-2, 0)), ((5, 6), (5, 7))])
    resolver = _resolve([_mill(), _producer(), _stockpile(position=(40, 40))], graph=graph)

    assert resolver.input_source.entity_id == "stockpile"


def test_unreachable_producer_without_stockpile_leaves_input_absent():
    graph = RoadGraph.from_edges([((-1, 0), (-2, 0)), ((5, 6), (5, 7))])
    resolver = _resolve([_mill(), _producer()], graph=graph)

    assert resolver.has_input() is False
    assert resolver.is_configured() is False


def test_producers_off_the_road_use_straight_line():
    # Mill has road access but no producer touches a road yet
    graph = RoadGraph.from_edges([((-1, 0), (-2, 0))])
    facilities = [_mill(), _producer(position=(3, 0)), _stockpile(position=(20, 20))]
    resolver = _resolve(facilities, graph=graph)

    assert resolver.input_source.entity_id == "forester"


def test_road_distance_cap_excludes_far_producers():
    policy = RoutingPolicy(prefer_direct_supply=True, max_road_distance=5)
    resolver = _resolve([_mill(), _producer(), _stockpile()], graph=_scenario_graph(), policy=policy)

    assert resolver.input_source.entity_id == "stockpile"


def test_direct_supply_disabled_goes_to_stockpile():
    policy = RoutingPolicy(prefer_direct_supply=False, max_road_distance=1000)
    resolver = _resolve([_mill(), _producer(), _stockpile()], graph=_scenario_graph(), policy=policy)

    assert resolver.input_source.entity_id == "stockpile"


def test_stockpile_never_routes_output_to_itself():
    depot = _stockpile("depot", position=(0, 0))
    resolver = _resolve([depot])
    assert resolver.has_output() is False

    resolver = _resolve([depot, _stockpile("annex", position=(50, 50))])
    assert resolver.output_destination.entity_id == "annex"


def test_producer_never_sources_from_itself():
    recycler = Facility(
        facility_id="recycler",
        position=(0, 0),
        required_resources=["scrap"],
        output_resource="scrap",
    )
    resolver = _resolve([recycler], graph=None)

    assert resolver.has_input() is False


def test_facility_without_needs_is_configured_by_output_alone():
    lumberyard = Facility(facility_id="lumberyard", position=(0, 0), output_resource="wood")
    resolver = _resolve([lumberyard, _stockpile()])

    assert resolver.is_configured() is True
    assert resolver.has_input() is False
    assert resolver.input_label == "not required"


def test_refresh_is_idempotent():
    resolver = _resolve([_mill(), _producer(), _stockpile()], graph=_scenario_graph())
    first = resolver.route

    with contextlib.redirect_stdout(io.StringIO()):
        second = resolver.refresh()

    assert first == second
    assert resolver.refresh_count == 2


def test_output_override_without_receiver_capability_does_not_fall_back():
    resolver = _resolve([_mill(), _producer(), _stockpile()], graph=_scenario_graph())
    assert resolver.has_output() is True

    with contextlib.redirect_stdout(io.StringIO()):
        route = resolver.set_output_override("forester")

    assert resolver.has_output() is False
    assert resolver.is_configured() is False
    assert route.destination_label == "Forester (ERROR)"
    assert route.errors == ["output override 'forester' lacks a receiver capability"]
    assert isinstance(resolver.last_errors[0], OverrideCapabilityError)


def test_output_override_binds_to_receiver_and_clears():
    facilities = [_mill(), _stockpile("near", position=(1, 0)), _stockpile("far", position=(30, 0))]
    resolver = _resolve(facilities)

    with contextlib.redirect_stdout(io.StringIO()):
        resolver.set_output_override(facilities[2])
    assert resolver.output_destination.entity_id == "far"
    assert resolver.output_label == "Far"
    assert resolver.output_override == "far"

    with contextlib.redirect_stdout(io.StringIO()):
        resolver.set_output_override(None)
    assert resolver.output_destination.entity_id == "near"


def test_output_override_accepts_plain_receivers():
    market = Facility(facility_id="market", position=(4, 4), accepts_deliveries=True)
    resolver = _resolve([_mill(), market])
    assert resolver.has_output() is False

    with contextlib.redirect_stdout(io.StringIO()):
        resolver.set_output_override("market")
    assert resolver.output_destination.entity_id == "market"


def test_input_override_failure_and_self_override():
    bakery = Facility(facility_id="bakery", position=(8, 8), required_resources=["flour"])
    resolver = _resolve([_mill(), bakery, _producer(), _stockpile()], graph=_scenario_graph())

    with contextlib.redirect_stdout(io.StringIO()):
        resolver.set_input_override("bakery")
    assert resolver.has_input() is False
    assert resolver.input_label == "bakery (ERROR)"

    with contextlib.redirect_stdout(io.StringIO()):
        resolver.set_input_override("mill")
    assert resolver.has_input() is False
    assert isinstance(resolver.last_errors[0], SelfRouteError)

    with contextlib.redirect_stdout(io.StringIO()):
        resolver.set_input_override("stockpile")
    assert resolver.input_source.entity_id == "stockpile"
    assert resolver.route.errors == []


def test_override_to_unknown_entity_is_a_configuration_error():
    resolver = _resolve([_mill(), _stockpile()])

    with contextlib.redirect_stdout(io.StringIO()):
        resolver.set_output_override("ghost")

    assert resolver.has_output() is False
    assert resolver.output_label == "ghost (ERROR)"


def test_destroyed_endpoint_reads_as_absent_without_refresh():
    registry, network, grid = _world([_mill(), _producer(), _stockpile()])
    resolver = RouteResolver(registry.get_facility("mill"), registry, network, grid)
    with contextlib.redirect_stdout(io.StringIO()):
        resolver.refresh()
    assert resolver.is_configured() is True

    registry.unregister("stockpile")

    assert resolver.route.destination_id == "stockpile"
    assert resolver.output_destination is None
    assert resolver.has_output() is False
    assert resolver.is_configured() is False


def test_graph_is_fetched_again_on_every_refresh():
    registry, network, grid = _world([_mill(), _producer(), _stockpile()])
    resolver = RouteResolver(
        registry.get_facility("mill"),
        registry,
        network,
        grid,
        policy=RoutingPolicy(prefer_direct_supply=True, max_road_distance=1000),
    )

    with contextlib.redirect_stdout(io.StringIO()):
        resolver.refresh()
        assert resolver.input_source.entity_id == "stockpile"

        network.set_graph(_scenario_graph())
        resolver.refresh()
        assert resolver.input_source.entity_id == "forester"

        network.clear()
        resolver.refresh()
        assert resolver.input_source.entity_id == "stockpile"


def test_listeners_receive_every_refresh():
    registry, network, grid = _world([_mill(), _stockpile()])
    seen: List[Route] = []
    resolver = RouteResolver(
        registry.get_facility("mill"),
        registry,
        network,
        grid,
        listeners=[lambda res, route: seen.append(route)],
    )

    with contextlib.redirect_stdout(io.StringIO()):
        resolver.refresh()
        resolver.set_output_override("mill")

    assert len(seen) == 2
    assert seen[0].destination_id == "stockpile"
    assert seen[1].destination_id is None


def test_failing_listener_is_logged_and_later_listeners_still_run(monkeypatch):
    monkeypatch.setenv("LOGIROUTE_NO_COLOR", "1")
    registry, network, grid = _world([_mill(), _stockpile()])
    seen: List[Route] = []

    def explode(res, route):
        raise RuntimeError("boom")

    resolver = RouteResolver(
        registry.get_facility("mill"),
        registry,
        network,
        grid,
        listeners=[explode, lambda res, route: seen.append(route)],
    )

    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        route = resolver.refresh()

    assert route.destination_id == "stockpile"
    assert resolver.route is route
    assert seen == [route]
    assert "[!] [Routing] Mill: refresh listener failed: boom" in buf.getvalue()


def test_describe_reports_labels_and_status():
    resolver = _resolve([_mill(), _producer(), _stockpile()], graph=_scenario_graph())

    assert resolver.describe() == (
        "Mill: output → Stockpile (auto) at (1, 1) | input ← Forester (producer) [ok]"
    )
