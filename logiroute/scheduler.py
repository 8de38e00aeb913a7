"""Retry scheduling for facilities whose routes are not configured yet.

A facility is often placed before the stockpile or road it needs. Rather than
failing, its scheduler keeps re-running ``RouteResolver.refresh`` on a fixed
interval until the routes come up configured, then goes quiet. Manual refreshes
(for example after a "map changed" event) bypass the scheduler entirely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from .config import Config
from .logging_utils import log_error, log_retry
from .resolver import RouteResolver


@dataclass(frozen=True)
class RetryInterval:
    """Represents an ``every N seconds`` retry cadence."""

    seconds: float = field(default_factory=lambda: Config.RETRY_INTERVAL_SECONDS)

    def __post_init__(self) -> None:
        if self.seconds <= 0:
            raise ValueError("retry interval must be > 0 seconds")

    def is_due(self, elapsed: float) -> bool:
        """Return ``True`` once ``elapsed`` reaches the interval."""

        return elapsed >= self.seconds


class AccessConsumer(Protocol):
    """Production-side component that re-checks readiness after a retry."""

    def refresh_logistics_access(self, resolver: RouteResolver) -> None:
        ...


class ReResolutionScheduler:
    """Per-facility retry timer driven by simulation steps."""

    def __init__(
        self,
        resolver: RouteResolver,
        interval: Optional[RetryInterval] = None,
        consumers: Optional[List[AccessConsumer]] = None,
    ):
        self.resolver = resolver
        self.interval = interval or RetryInterval()
        self.consumers: List[AccessConsumer] = list(consumers or [])
        self.elapsed = 0.0
        self.fire_count = 0

    def add_consumer(self, consumer: AccessConsumer) -> None:
        self.consumers.append(consumer)

    def reset(self) -> None:
        self.elapsed = 0.0

    def update(self, delta_seconds: float) -> bool:
        """Advance the timer; return ``True`` when a retry fired on this step."""

        if self.resolver.is_configured():
            # Nothing to heal; start counting from zero if routes break again
            self.elapsed = 0.0
            return False

        self.elapsed += max(delta_seconds, 0.0)
        if not self.interval.is_due(self.elapsed):
            return False

        self.elapsed = 0.0
        self.fire_count += 1
        log_retry(f"[Routing] {self.resolver.name}: routes not configured, retrying...")
        self.resolver.refresh()
        self._notify_consumers()
        return True

    def _notify_consumers(self) -> None:
        for consumer in self.consumers:
            try:
                consumer.refresh_logistics_access(self.resolver)
            except Exception as exc:
                log_error(f"[Routing] {self.resolver.name}: access consumer failed: {exc}")
