"""Structured diagnostic events.

Components emit these through an injected EventSink in addition to
structlog, so hosts and tests can assert on what happened without
scraping log output.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from flowwire.contracts.types import EdgeID, NodeID


@dataclass(frozen=True, slots=True)
class UnknownDataTypeEvent:
    """A declared type contained a code the catalog does not know; ``any`` was used."""

    code: str
    declared: str


@dataclass(frozen=True, slots=True)
class ConnectionRejectedEvent:
    """The validator denied a proposed or existing connection."""

    source: NodeID | None
    target: NodeID | None
    reason: str


@dataclass(frozen=True, slots=True)
class CatalogNotReadyEvent:
    """A decision was taken while the node type catalog was still loading."""

    allowed: bool


@dataclass(frozen=True, slots=True)
class EdgeSweptEvent:
    """The cleanup pass marked an existing edge for removal."""

    edge_id: EdgeID
    reason: str


@dataclass(frozen=True, slots=True)
class ActivationFailedEvent:
    """Evaluating one node raised; the node was degraded to inactive.

    Attributes:
        node_id: Node whose evaluation failed
        node_type: Node type string
        error: String form of the exception
        error_type: Exception class name
    """

    node_id: NodeID
    node_type: str
    error: str
    error_type: str


@dataclass(frozen=True, slots=True)
class ActivationCommittedEvent:
    """An activation flip was relayed to the graph provider."""

    node_id: NodeID
    is_active: bool


type FlowwireEvent = (
    UnknownDataTypeEvent
    | ConnectionRejectedEvent
    | CatalogNotReadyEvent
    | EdgeSweptEvent
    | ActivationFailedEvent
    | ActivationCommittedEvent
)

EventSink = Callable[[FlowwireEvent], None]
"""Receiver for structured events; must not raise."""


class EventCollector:
    """EventSink that keeps every event in order. Handy for tests and tooling."""

    def __init__(self) -> None:
        self.events: list[FlowwireEvent] = []

    def __call__(self, event: FlowwireEvent) -> None:
        self.events.append(event)

    def of_type[E](self, event_type: type[E]) -> list[E]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()
