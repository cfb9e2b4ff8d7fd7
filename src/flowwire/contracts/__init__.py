"""Shared contracts for cross-boundary data types.

All dataclasses, enums and branded identifiers that cross subsystem
boundaries are defined here. This package is a LEAF MODULE with no
outbound dependencies to core/engine.

Import patterns:
    # Contracts (lightweight)
    from flowwire.contracts import Edge, HandleId, parse, compatible

    # Settings classes live in core
    from flowwire.core.config import FlowwireSettings
"""

from flowwire.contracts.compatibility import CompatibilityResult, check_compatibility, compatible
from flowwire.contracts.datatypes import (
    ANY,
    ARRAY,
    BOOLEAN,
    JSON,
    JSON_OBJECT,
    NUMBER,
    OBJECT,
    STRING,
    TRIGGER_SIGNAL,
    DataType,
    PrimitiveType,
    UnionType,
    describe,
    is_json_like,
    label,
    normalize,
    parse,
    primitive,
    render,
    union_of,
)
from flowwire.contracts.enums import ActivationSource, HandleDirection, NodeCategory, ValueKind
from flowwire.contracts.errors import CatalogLoadCancelled, CatalogNotReadyError, NodeTypeNotFound
from flowwire.contracts.events import (
    ActivationCommittedEvent,
    ActivationFailedEvent,
    CatalogNotReadyEvent,
    ConnectionRejectedEvent,
    EdgeSweptEvent,
    EventCollector,
    EventSink,
    FlowwireEvent,
    UnknownDataTypeEvent,
)
from flowwire.contracts.graph import ActivationRecord, ConnectionCandidate, Edge, Handle, HandleSpec, Node
from flowwire.contracts.json_shape import JsonShape, conforms_to_shape
from flowwire.contracts.results import (
    ActivationChange,
    ConnectionDiagnostic,
    FlowDiagnostic,
    HandleDiagnostic,
    MismatchDiagnosis,
    RemovedEdge,
    SweepResult,
    ValidationResult,
    activation_changed,
)
from flowwire.contracts.types import (
    INPUT_HANDLE,
    JSON_HANDLE,
    OUTPUT_HANDLE,
    TRIGGER_HANDLE,
    Commit,
    DataTypeCode,
    EdgeID,
    HandleId,
    NodeID,
    is_json_passthrough_handle,
    is_trigger_handle,
    make_data_type_code,
    make_edge_id,
    make_handle_id,
    make_node_id,
    split_handle_id,
)

__all__ = [
    # datatypes
    "ANY",
    "ARRAY",
    "BOOLEAN",
    "JSON",
    "JSON_OBJECT",
    "NUMBER",
    "OBJECT",
    "STRING",
    "TRIGGER_SIGNAL",
    "DataType",
    "PrimitiveType",
    "UnionType",
    "describe",
    "is_json_like",
    "label",
    "normalize",
    "parse",
    "primitive",
    "render",
    "union_of",
    # compatibility
    "CompatibilityResult",
    "check_compatibility",
    "compatible",
    # enums
    "ActivationSource",
    "HandleDirection",
    "NodeCategory",
    "ValueKind",
    # errors
    "CatalogLoadCancelled",
    "CatalogNotReadyError",
    "NodeTypeNotFound",
    # events
    "ActivationCommittedEvent",
    "ActivationFailedEvent",
    "CatalogNotReadyEvent",
    "ConnectionRejectedEvent",
    "EdgeSweptEvent",
    "EventCollector",
    "EventSink",
    "FlowwireEvent",
    "UnknownDataTypeEvent",
    # graph
    "ActivationRecord",
    "ConnectionCandidate",
    "Edge",
    "Handle",
    "HandleSpec",
    "Node",
    # json shape
    "JsonShape",
    "conforms_to_shape",
    # results
    "ActivationChange",
    "ConnectionDiagnostic",
    "FlowDiagnostic",
    "HandleDiagnostic",
    "MismatchDiagnosis",
    "RemovedEdge",
    "SweepResult",
    "ValidationResult",
    "activation_changed",
    # identifiers
    "INPUT_HANDLE",
    "JSON_HANDLE",
    "OUTPUT_HANDLE",
    "TRIGGER_HANDLE",
    "Commit",
    "DataTypeCode",
    "EdgeID",
    "HandleId",
    "NodeID",
    "is_json_passthrough_handle",
    "is_trigger_handle",
    "make_data_type_code",
    "make_edge_id",
    "make_handle_id",
    "make_node_id",
    "split_handle_id",
]
