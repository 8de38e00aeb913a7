"""
Pydantic schemas for the Logiroute routing core.

Design Philosophy:
- Facilities describe what they are (position, footprint, needs, output)
- Capabilities are a closed set of tagged variants derived from a facility,
  never discovered by probing arbitrary objects at runtime
- Routes hold identity keys only; whether an endpoint still exists is a fresh
  registry lookup, so destroyed entities simply read as absent
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .network import GridPosition

ResourceType = str


# ============================================================================
# Capability Variants
# ============================================================================


class ProviderKind(str, Enum):
    """Entities that can be pulled from."""

    PRODUCER = "producer"    # Supplies exactly one resource type
    STOCKPILE = "stockpile"  # Supplies any resource type


class ReceiverKind(str, Enum):
    """Entities that can be pushed to."""

    STOCKPILE = "stockpile"
    OTHER = "other"


# ============================================================================
# Facilities
# ============================================================================


class Facility(BaseModel):
    """A placed building that consumes and/or produces resources.

    ``position`` is the root cell; ``size`` expands it into a rectangular
    footprint. Only the first entry of ``required_resources`` is routed, so a
    facility with several needs sources just its primary one.
    """

    facility_id: str = Field(..., description="Unique identity key")
    name: Optional[str] = Field(None, description="Display name for diagnostics")
    position: GridPosition = Field(..., description="Root grid cell")
    size: Tuple[int, int] = Field((1, 1), description="Footprint width and height in cells")
    required_resources: List[ResourceType] = Field(
        default_factory=list, description="Ordered input needs; empty means no input"
    )
    output_resource: Optional[ResourceType] = Field(
        None, description="Resource type this facility produces, if any"
    )
    is_stockpile: bool = Field(False, description="Warehouse that stores and supplies any type")
    accepts_deliveries: bool = Field(
        False, description="Non-stockpile sink that can be pushed to"
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("size")
    @classmethod
    def _check_size(cls, value: Tuple[int, int]) -> Tuple[int, int]:
        if value[0] < 1 or value[1] < 1:
            raise ValueError(f"size must be at least 1x1, got {value[0]}x{value[1]}")
        return value

    @property
    def display_name(self) -> str:
        return self.name or self.facility_id

    @property
    def needs_input(self) -> bool:
        return bool(self.required_resources)

    @property
    def primary_need(self) -> Optional[ResourceType]:
        return self.required_resources[0] if self.required_resources else None

    @property
    def needs_routing(self) -> bool:
        """Producers and consumers route; stockpiles and plain sinks are endpoints only."""

        if self.is_stockpile:
            return False
        return self.output_resource is not None or self.needs_input


# ============================================================================
# Capabilities
# ============================================================================


class ProviderCapability(BaseModel):
    """Something a facility can pull its input from."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    name: str
    kind: ProviderKind
    # None for stockpiles, which are type-agnostic
    resource_type: Optional[ResourceType] = None
    position: GridPosition

    def matches(self, resource_type: ResourceType) -> bool:
        """Return ``True`` when this provider can supply ``resource_type``."""

        if self.kind is ProviderKind.STOCKPILE:
            return True
        return self.resource_type == resource_type


class ReceiverCapability(BaseModel):
    """Something a facility can push its output to."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    name: str
    kind: ReceiverKind
    position: GridPosition


# ============================================================================
# Routes
# ============================================================================

NOT_CONFIGURED_LABEL = "not configured"
NOT_FOUND_LABEL = "NOT FOUND!"


class Route(BaseModel):
    """Resolved endpoints of one facility.

    Identity keys only; the route never owns the entities it points at.
    """

    source_id: Optional[str] = Field(None, description="Provider supplying the primary input")
    destination_id: Optional[str] = Field(None, description="Receiver taking the output")
    source_label: str = Field(NOT_CONFIGURED_LABEL, description="Diagnostic display for input")
    destination_label: str = Field(
        NOT_CONFIGURED_LABEL, description="Diagnostic display for output"
    )
    errors: List[str] = Field(
        default_factory=list, description="Configuration errors from the last refresh"
    )

    def same_endpoints(self, other: "Route") -> bool:
        return (self.source_id, self.destination_id) == (other.source_id, other.destination_id)
