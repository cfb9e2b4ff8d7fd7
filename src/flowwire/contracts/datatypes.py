"""DataType catalog: canonical value kinds, union parsing and rendering.

A DataType is either a PrimitiveType (one ValueKind) or a UnionType
(an ordered, de-duplicated tuple of primitives). Two unions are equal
when their member sets are equal, regardless of order.

Codes on the wire:
    boolean→b, string→s, number→n, array→a, object→o, any→x,
    json-object→{}, trigger-signal→tr, union separator "|"

Round-trip law: parse(render(t)) == t for every DataType t.

Unknown codes never raise. External node metadata is frequently
incomplete, so an unknown member degrades to ``any`` and a warning is
recorded (structlog event ``unknown_data_type`` plus an
UnknownDataTypeEvent on the optional sink).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

import structlog

from flowwire.contracts.enums import ValueKind
from flowwire.contracts.types import DataTypeCode

if TYPE_CHECKING:
    from flowwire.contracts.events import EventSink

logger = structlog.get_logger(__name__)

UNION_SEPARATOR = "|"


@dataclass(frozen=True, slots=True)
class PrimitiveType:
    """A single value kind. Instances are interned; use primitive()."""

    kind: ValueKind

    @property
    def code(self) -> DataTypeCode:
        return DataTypeCode(self.kind.value)

    @property
    def is_any(self) -> bool:
        return self.kind is ValueKind.ANY

    @property
    def members(self) -> tuple[PrimitiveType, ...]:
        return (self,)

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True, slots=True, eq=False)
class UnionType:
    """'One of several' primitive kinds.

    Construct through union_of() so members are flattened and
    de-duplicated; a union always has at least two members.
    """

    members: tuple[PrimitiveType, ...]

    def __post_init__(self) -> None:
        if len(self.members) < 2:
            raise ValueError(f"UnionType needs at least two members, got {len(self.members)}")
        if len(set(self.members)) != len(self.members):
            raise ValueError(f"UnionType members must be unique: {self.members}")

    @property
    def is_any(self) -> bool:
        return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnionType):
            return NotImplemented
        return frozenset(self.members) == frozenset(other.members)

    def __hash__(self) -> int:
        return hash(frozenset(self.members))

    def __str__(self) -> str:
        return UNION_SEPARATOR.join(m.kind.value for m in self.members)


type DataType = PrimitiveType | UnionType

_PRIMITIVES: dict[ValueKind, PrimitiveType] = {kind: PrimitiveType(kind) for kind in ValueKind}

_BY_CODE: dict[str, ValueKind] = {kind.value: kind for kind in ValueKind}

# Verbose names used by external metadata (JSON node registries, handle
# declarations) mapped onto canonical kinds. Lookup is case-insensitive.
_LONG_FORM: dict[str, ValueKind] = {
    "boolean": ValueKind.BOOLEAN,
    "bool": ValueKind.BOOLEAN,
    "string": ValueKind.STRING,
    "number": ValueKind.NUMBER,
    "array": ValueKind.ARRAY,
    "object": ValueKind.OBJECT,
    "any": ValueKind.ANY,
    "json-object": ValueKind.JSON_OBJECT,
    "jsonobject": ValueKind.JSON_OBJECT,
    "trigger-signal": ValueKind.TRIGGER_SIGNAL,
    "trigger": ValueKind.TRIGGER_SIGNAL,
    "json": ValueKind.JSON,
    "bigint": ValueKind.BIGINT,
    "float": ValueKind.FLOAT,
    "undefined": ValueKind.UNDEFINED,
    "null": ValueKind.NULL,
    "symbol": ValueKind.SYMBOL,
    "date": ValueKind.DATE,
    "vibe": ValueKind.VIBE,
    "tools": ValueKind.TOOLS,
    # Images are carried as objects
    "image": ValueKind.OBJECT,
}

_LABELS: dict[ValueKind, str] = {
    ValueKind.BOOLEAN: "On|Off",
    ValueKind.STRING: "Text",
    ValueKind.NUMBER: "Number",
    ValueKind.ARRAY: "List",
    ValueKind.OBJECT: "Object",
    ValueKind.ANY: "Any",
    ValueKind.JSON_OBJECT: "JSON Object",
    ValueKind.TRIGGER_SIGNAL: "Trigger",
    ValueKind.JSON: "JSON",
    ValueKind.BIGINT: "Big Number",
    ValueKind.FLOAT: "Decimal",
    ValueKind.UNDEFINED: "Undefined",
    ValueKind.NULL: "Null",
    ValueKind.SYMBOL: "Symbol",
    ValueKind.DATE: "Date",
    ValueKind.VIBE: "Vibe",
    ValueKind.TOOLS: "Tools",
}

_DESCRIPTIONS: dict[ValueKind, str] = {
    ValueKind.BOOLEAN: "Boolean - True/false values",
    ValueKind.STRING: "String - Text and string values",
    ValueKind.NUMBER: "Number - Integer and numeric values",
    ValueKind.ARRAY: "Array - Lists and array structures",
    ValueKind.OBJECT: "Object - Key/value structures",
    ValueKind.ANY: "Any - Accepts all data types",
    ValueKind.JSON_OBJECT: "JSON Object - Parsed JSON objects",
    ValueKind.TRIGGER_SIGNAL: "Trigger - Activation pulses",
    ValueKind.JSON: "JSON - Objects and JSON data",
    ValueKind.VIBE: "Vibe - Custom Vibe data type",
    ValueKind.TOOLS: "Tools - AI agent tool configurations",
}

ANY = _PRIMITIVES[ValueKind.ANY]
BOOLEAN = _PRIMITIVES[ValueKind.BOOLEAN]
STRING = _PRIMITIVES[ValueKind.STRING]
NUMBER = _PRIMITIVES[ValueKind.NUMBER]
ARRAY = _PRIMITIVES[ValueKind.ARRAY]
OBJECT = _PRIMITIVES[ValueKind.OBJECT]
JSON_OBJECT = _PRIMITIVES[ValueKind.JSON_OBJECT]
TRIGGER_SIGNAL = _PRIMITIVES[ValueKind.TRIGGER_SIGNAL]
JSON = _PRIMITIVES[ValueKind.JSON]

# Kinds that carry JSON documents; JSON shape checks only apply to these.
JSON_LIKE_KINDS: frozenset[ValueKind] = frozenset(
    {ValueKind.JSON, ValueKind.JSON_OBJECT, ValueKind.OBJECT, ValueKind.ARRAY, ValueKind.ANY}
)


def primitive(kind: ValueKind) -> PrimitiveType:
    """Return the interned PrimitiveType for kind."""
    return _PRIMITIVES[kind]


def union_of(*types: DataType) -> DataType:
    """Build a DataType from one or more types.

    Nested unions are flattened and duplicates dropped (first occurrence
    wins, preserving declaration order). A single surviving member is
    returned as-is rather than wrapped.

    Raises:
        ValueError: If no types are given
    """
    if not types:
        raise ValueError("union_of() needs at least one type")
    members: list[PrimitiveType] = []
    for t in types:
        for member in t.members:
            if member not in members:
                members.append(member)
    if len(members) == 1:
        return members[0]
    return UnionType(tuple(members))


def _resolve_token(token: str) -> ValueKind | None:
    kind = _BY_CODE.get(token)
    if kind is not None:
        return kind
    return _LONG_FORM.get(token.lower())


@lru_cache(maxsize=512)
def _parse_cached(code: str) -> tuple[DataType, tuple[str, ...]]:
    tokens = [t.strip() for t in code.split(UNION_SEPARATOR)]
    tokens = [t for t in tokens if t]
    if not tokens:
        return ANY, ()

    unknown: list[str] = []
    members: list[DataType] = []
    for token in tokens:
        kind = _resolve_token(token)
        if kind is None:
            unknown.append(token)
            kind = ValueKind.ANY
        members.append(_PRIMITIVES[kind])
    return union_of(*members), tuple(unknown)


def _record_unknown(raw: str, unknown: tuple[str, ...], sink: EventSink | None) -> None:
    from flowwire.contracts.events import UnknownDataTypeEvent

    for token in unknown:
        logger.warning("unknown_data_type", code=token, declared=raw, substituted=ValueKind.ANY.value)
        if sink is not None:
            sink(UnknownDataTypeEvent(code=token, declared=raw))


def parse(code: str | None, *, sink: EventSink | None = None) -> DataType:
    """Parse a short code or union expression into a DataType.

    Accepts canonical codes ("s", "{}"), long-form names ("string") and
    unions of either ("s|number"). Blank input is ``any``.

    Args:
        code: Code or union expression
        sink: Optional event sink receiving UnknownDataTypeEvent

    Returns:
        Canonical DataType (UnionType when more than one distinct member)
    """
    if code is None:
        return ANY
    result, unknown = _parse_cached(str(code))
    if unknown:
        _record_unknown(str(code), unknown, sink)
    return result


def normalize(long_form_name: str | None, *, sink: EventSink | None = None) -> DataType:
    """Map a verbose type name from external metadata onto a canonical DataType.

    normalize("boolean") == normalize("Boolean") == parse("b"). Unknown
    names become ``any`` with a recorded warning. Canonical codes are
    accepted unchanged, so normalize() is safe on already-normalized input.
    """
    if long_form_name is None:
        return ANY
    return parse(long_form_name, sink=sink)


def render(data_type: DataType) -> DataTypeCode:
    """Render a DataType back to its wire code. Inverse of parse()."""
    return DataTypeCode(str(data_type))


def label(data_type: DataType) -> str:
    """Human-readable label for user-facing messages ('Text', 'Text or Number')."""
    return " or ".join(_LABELS[m.kind] for m in data_type.members)


def describe(data_type: DataType) -> str:
    """Tooltip description; one line per member."""
    return "\n".join(_DESCRIPTIONS.get(m.kind, _LABELS[m.kind]) for m in data_type.members)


def is_json_like(data_type: DataType) -> bool:
    """True if every member of data_type carries JSON documents."""
    return all(m.kind in JSON_LIKE_KINDS for m in data_type.members)
