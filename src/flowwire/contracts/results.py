"""Operation outcomes and results.

These types answer: "What did an operation decide?"

Every public entry point of the core returns one of these instead of
raising; callers surface ``reason`` strings directly to users.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flowwire.contracts.enums import HandleDirection
from flowwire.contracts.graph import Edge
from flowwire.contracts.types import DataTypeCode, HandleId, NodeID


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Allow/deny decision for one proposed connection."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls, reason: str | None = None) -> ValidationResult:
        return cls(allowed=True, reason=reason)

    @classmethod
    def deny(cls, reason: str) -> ValidationResult:
        return cls(allowed=False, reason=reason)


@dataclass(frozen=True, slots=True)
class RemovedEdge:
    """An existing edge the cleanup pass rejected, with the reason why."""

    edge: Edge
    reason: str


@dataclass(frozen=True, slots=True)
class SweepResult:
    """Outcome of a cleanup sweep. Callers delete ``removed`` from the graph."""

    kept: tuple[Edge, ...]
    removed: tuple[RemovedEdge, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.removed


@dataclass(frozen=True, slots=True)
class ActivationChange:
    """Direction of an activation flip between the stored and computed state."""

    is_activating: bool
    is_deactivating: bool

    @property
    def has_changed(self) -> bool:
        return self.is_activating or self.is_deactivating


def activation_changed(current_is_active: bool, calculated_is_active: bool) -> ActivationChange:
    """Compare stored activation with a freshly computed one."""
    return ActivationChange(
        is_activating=not current_is_active and calculated_is_active,
        is_deactivating=current_is_active and not calculated_is_active,
    )


@dataclass(frozen=True, slots=True)
class MismatchDiagnosis:
    """Developer diagnostic for a handle lookup that found nothing.

    Attributes:
        node_id: Node whose incoming edges were inspected
        expected_handle: Handle id the caller looked for
        actual_handles: Target handle ids actually present on incoming edges
        matching_connections: Number of incoming edges on expected_handle
        suggestions: Human-readable hints, including likely-bug warnings
    """

    node_id: NodeID
    expected_handle: str
    actual_handles: tuple[HandleId, ...]
    matching_connections: int
    suggestions: tuple[str, ...] = ()

    @property
    def likely_bug(self) -> bool:
        return any(s.startswith("LIKELY BUG") for s in self.suggestions)


@dataclass(frozen=True, slots=True)
class ConnectionDiagnostic:
    """Per-edge finding from analyze_flow_handles()."""

    edge: Edge
    is_valid: bool
    type_match: bool
    issues: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HandleDiagnostic:
    """Per-handle finding from analyze_flow_handles()."""

    node_id: NodeID
    node_type: str
    handle_id: HandleId
    direction: HandleDirection
    data_type: DataTypeCode
    is_connected: bool
    connections: tuple[str, ...] = ()
    issues: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class FlowDiagnostic:
    """Whole-graph handle and connection analysis."""

    handles: tuple[HandleDiagnostic, ...]
    connections: tuple[ConnectionDiagnostic, ...]
    global_issues: tuple[str, ...] = field(default_factory=tuple)

    @property
    def valid_connections(self) -> int:
        return sum(1 for c in self.connections if c.is_valid)

    @property
    def invalid_connections(self) -> int:
        return sum(1 for c in self.connections if not c.is_valid)

    @property
    def unconnected_handles(self) -> int:
        return sum(1 for h in self.handles if not h.is_connected)
