"""
CandidateRegistry interface for looking up providers and receivers.

The registry is owned by the world, not by the routing core. Resolvers only
query it: enumerate candidates of a capability, or look one up by identity to
check it still exists. Iteration follows registration order, which is what
every "first encountered wins" tie-break relies on.

Usage pattern:
    registry = InMemoryRegistry()
    registry.register(Facility(facility_id="wh-1", position=(4, 2), is_stockpile=True))
    registry.get_receiver("wh-1")          # ReceiverCapability
    registry.providers_for("wood")         # stockpiles + wood producers
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .errors import DuplicateEntityError
from .schemas import (
    Facility,
    ProviderCapability,
    ProviderKind,
    ReceiverCapability,
    ReceiverKind,
    ResourceType,
)


class CandidateRegistry(ABC):
    """Abstract read interface over every entity currently in the world."""

    @abstractmethod
    def providers(self) -> List[ProviderCapability]:
        """Return every provider capability in registration order."""
        pass

    @abstractmethod
    def receivers(self) -> List[ReceiverCapability]:
        """Return every receiver capability in registration order."""
        pass

    @abstractmethod
    def get_provider(self, entity_id: str) -> Optional[ProviderCapability]:
        pass

    @abstractmethod
    def get_receiver(self, entity_id: str) -> Optional[ReceiverCapability]:
        pass

    @abstractmethod
    def get_facility(self, entity_id: str) -> Optional[Facility]:
        pass

    def providers_for(
        self,
        resource_type: ResourceType,
        kind: Optional[ProviderKind] = None,
    ) -> List[ProviderCapability]:
        """Return providers able to supply ``resource_type``, optionally of one kind."""

        return [
            provider
            for provider in self.providers()
            if (kind is None or provider.kind is kind) and provider.matches(resource_type)
        ]

    def stockpile_receivers(self) -> List[ReceiverCapability]:
        return [r for r in self.receivers() if r.kind is ReceiverKind.STOCKPILE]


class InMemoryRegistry(CandidateRegistry):
    """Dict-backed registry with producers indexed by resource type."""

    def __init__(self) -> None:
        # Dicts preserve insertion order, which doubles as the tie-break order
        self._facilities: Dict[str, Facility] = {}
        self._providers: Dict[str, ProviderCapability] = {}
        self._receivers: Dict[str, ReceiverCapability] = {}
        self._producers_by_type: Dict[ResourceType, List[str]] = {}

    def __len__(self) -> int:
        return len(self._facilities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._facilities

    def register(self, facility: Facility) -> None:
        """Add a facility and derive its capabilities.

        A stockpile provides and receives any type. A facility with an output
        resource is a producer of that type. ``accepts_deliveries`` marks a
        plain sink.
        """

        existing = self._facilities.get(facility.facility_id)
        if existing is not None:
            raise DuplicateEntityError(facility.facility_id, existing.display_name)

        self._facilities[facility.facility_id] = facility
        name = facility.display_name

        if facility.is_stockpile:
            self._providers[facility.facility_id] = ProviderCapability(
                entity_id=facility.facility_id,
                name=name,
                kind=ProviderKind.STOCKPILE,
                position=facility.position,
            )
            self._receivers[facility.facility_id] = ReceiverCapability(
                entity_id=facility.facility_id,
                name=name,
                kind=ReceiverKind.STOCKPILE,
                position=facility.position,
            )
        elif facility.output_resource is not None:
            self._providers[facility.facility_id] = ProviderCapability(
                entity_id=facility.facility_id,
                name=name,
                kind=ProviderKind.PRODUCER,
                resource_type=facility.output_resource,
                position=facility.position,
            )
            self._producers_by_type.setdefault(facility.output_resource, []).append(
                facility.facility_id
            )

        if facility.accepts_deliveries and not facility.is_stockpile:
            self._receivers[facility.facility_id] = ReceiverCapability(
                entity_id=facility.facility_id,
                name=name,
                kind=ReceiverKind.OTHER,
                position=facility.position,
            )

    def unregister(self, entity_id: str) -> Optional[Facility]:
        """Remove an entity and all its capabilities. Safe to call for unknown ids."""

        facility = self._facilities.pop(entity_id, None)
        self._providers.pop(entity_id, None)
        self._receivers.pop(entity_id, None)
        if facility is not None and facility.output_resource is not None:
            ids = self._producers_by_type.get(facility.output_resource, [])
            if entity_id in ids:
                ids.remove(entity_id)
        return facility

    def providers(self) -> List[ProviderCapability]:
        return list(self._providers.values())

    def receivers(self) -> List[ReceiverCapability]:
        return list(self._receivers.values())

    def get_provider(self, entity_id: str) -> Optional[ProviderCapability]:
        return self._providers.get(entity_id)

    def get_receiver(self, entity_id: str) -> Optional[ReceiverCapability]:
        return self._receivers.get(entity_id)

    def get_facility(self, entity_id: str) -> Optional[Facility]:
        return self._facilities.get(entity_id)

    def providers_for(
        self,
        resource_type: ResourceType,
        kind: Optional[ProviderKind] = None,
    ) -> List[ProviderCapability]:
        # Producers come straight from the type index instead of a full scan
        if kind is ProviderKind.PRODUCER:
            return [
                self._providers[entity_id]
                for entity_id in self._producers_by_type.get(resource_type, [])
            ]
        return super().providers_for(resource_type, kind)
