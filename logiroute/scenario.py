"""
Scenario loading for JSON-defined logistics maps.

This module provides ScenarioLoader for converting JSON scenario files into a
ready-to-step LogisticsWorld. A scenario defines the initial conditions:
- Facilities (position, footprint, needs, output, stockpile flag)
- Optional road network (road cells and/or explicit edges)
- Optional manual route overrides
- Optional routing policy and retry interval

Scenario file structure:
```json
{
  "name": "Riverside",
  "description": "...",
  "facilities": [
    {"facility_id": "mill", "position": [0, 0], "required_resources": ["wood"]}
  ],
  "roads": {"cells": [[1, 0], [2, 0]], "edges": [[[2, 0], [9, 9]]]},
  "overrides": {"mill": {"output": "wh-east"}},
  "policy": {"prefer_direct_supply": true, "max_road_distance": 500},
  "retry_interval_seconds": 5.0
}
```

Usage:
    loader = ScenarioLoader()
    world = loader.load("village/scenario")
    world.run(num_steps=10, delta_seconds=1.0)
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Config
from .network import RoadGraph, RoadGraphState
from .resolver import RoutingPolicy
from .scheduler import RetryInterval
from .schemas import Facility
from .world import LogisticsWorld


class ScenarioLoader:
    """Load and validate logistics scenarios from JSON files.

    Facilities are added in file order. That order is the registry order, so it
    decides ties between equally distant candidates.
    """

    def __init__(self, scenarios_dir: Optional[Path] = None):
        """Initialize scenario loader.

        Args:
            scenarios_dir: Directory containing scenario files.
                          Defaults to Config.SCENARIOS_DIR
        """
        self.scenarios_dir = scenarios_dir or Config.SCENARIOS_DIR

    def load(self, scenario_name: str) -> LogisticsWorld:
        """Load a scenario by name and return the populated world.

        Roads are installed before any facility is placed so the initial
        refresh of each facility already sees them. Overrides are applied last.

        Raises:
            FileNotFoundError: If scenario file doesn't exist in scenarios_dir
            ValueError: If scenario JSON missing required fields or malformed
            json.JSONDecodeError: If file contains invalid JSON
        """
        scenario_path = self.scenarios_dir / f"{scenario_name}.json"

        if not scenario_path.exists():
            raise FileNotFoundError(
                f"Scenario '{scenario_name}' not found at {scenario_path}"
            )

        data = json.loads(scenario_path.read_text())
        return self.build(data)

    def build(self, data: Dict[str, Any]) -> LogisticsWorld:
        """Build a world from already-parsed scenario data."""

        self._validate_scenario(data)

        policy = RoutingPolicy(**data["policy"]) if "policy" in data else RoutingPolicy()
        interval = (
            RetryInterval(float(data["retry_interval_seconds"]))
            if "retry_interval_seconds" in data
            else RetryInterval()
        )
        world = LogisticsWorld(policy=policy, retry_interval=interval)

        if "roads" in data:
            world.road_network.set_graph(self._parse_roads(data["roads"]))

        for entry in data["facilities"]:
            world.add_facility(Facility(**entry))

        overrides = data.get("overrides", {})
        endpoints = [fid for fid in overrides if fid not in world.routed_ids]
        if endpoints:
            raise ValueError(f"Overrides reference stockpiles or sinks, which have no routes: {endpoints}")

        for facility_id, override in overrides.items():
            resolver = world.resolver(facility_id)
            if "output" in override:
                resolver.set_output_override(override["output"])
            if "input" in override:
                resolver.set_input_override(override["input"])

        return world

    def _validate_scenario(self, data: Dict[str, Any]) -> None:
        """Validate scenario data has required fields.

        Raises:
            ValueError: If required fields are missing
        """
        required = ["name", "description", "facilities"]
        missing = [field for field in required if field not in data]

        if missing:
            raise ValueError(f"Scenario missing required fields: {missing}")

        ids: List[str] = []
        for entry in data["facilities"]:
            if "facility_id" not in entry or "position" not in entry:
                raise ValueError(
                    "Each facility entry must include 'facility_id' and 'position'"
                )
            ids.append(entry["facility_id"])

        unknown = [fid for fid in data.get("overrides", {}) if fid not in ids]
        if unknown:
            raise ValueError(f"Overrides reference unknown facilities: {unknown}")

    def _parse_roads(self, raw: Dict[str, Any]) -> RoadGraph:
        """Combine four-connected road cells with any explicit edges."""

        graph = RoadGraph.from_road_cells(tuple(cell) for cell in raw.get("cells", []))
        # Edges go through the schema so malformed pairs fail validation early
        linked = RoadGraphState(edges=raw.get("edges", [])).to_graph()
        for node, neighbours in linked.adjacency.items():
            graph.adjacency.setdefault(node, set()).update(neighbours)
        return graph
