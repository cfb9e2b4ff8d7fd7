"""All status codes, modes, and kinds used across subsystem boundaries."""

from enum import StrEnum


class HandleDirection(StrEnum):
    """Which end of an edge a handle can be.

    Only sources start connections; only targets end them.
    """

    SOURCE = "source"
    TARGET = "target"


class NodeCategory(StrEnum):
    """Functional category of a node type.

    Category-to-category connection policy is keyed by these values
    (see core.catalog.policy).
    """

    CREATE = "create"
    VIEW = "view"
    TRIGGER = "trigger"
    CYCLE = "cycle"
    TEST = "test"
    OTHER = "other"


class ActivationSource(StrEnum):
    """How an activation record was derived."""

    HEAD = "head"
    DOWNSTREAM = "downstream"


class ValueKind(StrEnum):
    """Semantic value kinds a handle can declare.

    The member value is the canonical short code used on the wire and in
    handle ids ("output__s"). The table must match every collaborator
    bit for bit.
    """

    BOOLEAN = "b"
    STRING = "s"
    NUMBER = "n"
    ARRAY = "a"
    OBJECT = "o"
    ANY = "x"
    JSON_OBJECT = "{}"
    TRIGGER_SIGNAL = "tr"
    # Extended kinds carried by older node registries
    JSON = "j"
    BIGINT = "N"
    FLOAT = "f"
    UNDEFINED = "u"
    NULL = "∅"
    SYMBOL = "S"
    DATE = "d"
    VIBE = "V"
    TOOLS = "t"
