"""Exceptions raised or recorded by the routing core.

Configuration errors are never raised out of ``RouteResolver.refresh``; the
resolver records them on the route and prints a warning so the
misconfiguration stays visible. Registry misuse is raised normally.
"""

from typing import Optional


class RoutingError(Exception):
    """Base class for routing failures."""

    def short(self) -> str:
        """One-line form recorded on ``Route.errors``."""
        return str(self)


class OverrideCapabilityError(RoutingError):
    """An explicit override points at an entity lacking the required capability."""

    def __init__(self, *, facility_id: str, target_id: str, side: str, capability: str) -> None:
        self.facility_id = facility_id
        self.target_id = target_id
        self.side = side
        self.capability = capability
        message = (
            f"{facility_id}: {side} override '{target_id}' does not expose {capability}.\n"
            "Remediation tips:\n"
            f"  - Point the {side} override at a stockpile or a matching producer\n"
            "  - Clear the override to fall back to automatic search\n"
            "  - Check the target was not demolished"
        )
        super().__init__(message)

    def short(self) -> str:
        return f"{self.side} override '{self.target_id}' lacks {self.capability}"


class SelfRouteError(RoutingError):
    """An override would route a facility to itself."""

    def __init__(self, *, facility_id: str, side: str) -> None:
        self.facility_id = facility_id
        self.side = side
        super().__init__(f"{facility_id}: {side} override points at the facility itself")

    def short(self) -> str:
        return f"{self.side} override points at itself"


class DuplicateEntityError(RoutingError):
    """An entity id was registered twice."""

    def __init__(self, entity_id: str, existing_name: Optional[str] = None) -> None:
        self.entity_id = entity_id
        detail = f" (already registered as '{existing_name}')" if existing_name else ""
        super().__init__(f"Entity '{entity_id}' is already registered{detail}")
