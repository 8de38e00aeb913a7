"""Tests for scenario loading via ScenarioLoader."""

import contextlib
import io
import json
from pathlib import Path

import pytest

from logiroute import Facility
from logiroute.scenario import ScenarioLoader

VILLAGE_DIR = Path(__file__).parent.parent / "examples" / "village"


def _load_village():
    loader = ScenarioLoader(scenarios_dir=VILLAGE_DIR)
    with contextlib.redirect_stdout(io.StringIO()):
        return loader.load("scenario")


def test_village_resolves_producers_over_roads():
    world = _load_village()

    assert world.facility_ids == ["lumberyard", "sawmill", "carpenter"]
    assert world.resolver("sawmill").input_source.entity_id == "lumberyard"
    # Carpenter routes only its first need (planks), which the sawmill makes
    assert world.resolver("carpenter").input_source.entity_id == "sawmill"
    assert world.retry_interval.seconds == 5.0
    assert world.grid.occupied_cells((6, 0)) == {(6, 0), (7, 0)}


def test_village_heals_after_stockpile_is_built():
    world = _load_village()
    assert world.unconfigured() == ["lumberyard", "sawmill", "carpenter"]

    with contextlib.redirect_stdout(io.StringIO()):
        world.add_facility(
            Facility(facility_id="stockpile", position=(3, 0), is_stockpile=True)
        )
        assert world.run(num_steps=4, delta_seconds=1.0) == 0
        fired = world.run(num_steps=1, delta_seconds=1.0)

    assert fired == 3
    assert world.unconfigured() == []
    assert world.facility_ids == ["lumberyard", "sawmill", "carpenter", "stockpile"]

    with contextlib.redirect_stdout(io.StringIO()):
        assert world.run(num_steps=20, delta_seconds=1.0) == 0
    assert world.resolver("sawmill").output_destination.entity_id == "stockpile"


def test_missing_scenario_file(tmp_path):
    loader = ScenarioLoader(scenarios_dir=tmp_path)

    with pytest.raises(FileNotFoundError):
        loader.load("nowhere")


def test_missing_required_fields(tmp_path):
    (tmp_path / "broken.json").write_text(json.dumps({"name": "Broken"}))
    loader = ScenarioLoader(scenarios_dir=tmp_path)

    with pytest.raises(ValueError, match="missing required fields"):
        loader.load("broken")


def test_facility_entries_and_overrides_are_validated():
    loader = ScenarioLoader()

    with pytest.raises(ValueError, match="facility_id"):
        loader.build({"name": "x", "description": "", "facilities": [{"position": [0, 0]}]})

    with pytest.raises(ValueError, match="unknown facilities"):
        loader.build(
            {
                "name": "x",
                "description": "",
                "facilities": [{"facility_id": "a", "position": [0, 0]}],
                "overrides": {"b": {"output": "a"}},
            }
        )


def test_build_applies_edges_policy_and_overrides():
    data = {
        "name": "Links",
        "description": "Explicit edges and a manual output binding",
        "facilities": [
            {"facility_id": "mill", "position": [0, 0], "required_resources": ["wood"]},
            {"facility_id": "near", "position": [1, 1], "is_stockpile": True},
            {"facility_id": "far", "position": [40, 40], "is_stockpile": True},
            {"facility_id": "forester", "position": [20, 20], "output_resource": "wood"},
        ],
        "roads": {"cells": [[0, -1]], "edges": [[[0, -1], [20, 21]]]},
        "overrides": {"mill": {"output": "far"}},
        "policy": {"prefer_direct_supply": True, "max_road_distance": 10},
        "retry_interval_seconds": 2,
    }

    with contextlib.redirect_stdout(io.StringIO()):
        world = ScenarioLoader().build(data)

    mill = world.resolver("mill")
    assert mill.output_destination.entity_id == "far"
    assert mill.input_source.entity_id == "forester"
    assert world.policy.max_road_distance == 10
    assert world.retry_interval.seconds == 2.0
    assert world.road_network.get_road_graph().neighbors((0, -1)) == {(20, 21)}


def test_overrides_on_stockpiles_are_rejected():
    data = {
        "name": "Depot override",
        "description": "Stockpiles have no routes to bind",
        "facilities": [
            {"facility_id": "wh", "position": [0, 0], "is_stockpile": True},
            {"facility_id": "wh2", "position": [5, 0], "is_stockpile": True},
        ],
        "overrides": {"wh": {"output": "wh2"}},
    }

    with contextlib.redirect_stdout(io.StringIO()):
        with pytest.raises(ValueError, match="no routes"):
            ScenarioLoader().build(data)
