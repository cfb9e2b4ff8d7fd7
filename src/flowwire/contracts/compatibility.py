"""Compatibility matrix for typed handles.

compatible(source, target) decides whether an edge from a source handle
declaring ``source`` may attach to a target handle declaring ``target``.
Rules, first match wins:

1. Either side is ``any`` → compatible
2. Both non-union and equal → compatible
3. Source is a union → compatible iff ANY member is compatible with target
4. Target is a union → compatible iff source is compatible with ANY member
5. Otherwise incompatible

The graph is directed, so callers must not assume
compatible(a, b) == compatible(b, a).
"""

from __future__ import annotations

from dataclasses import dataclass

from flowwire.contracts.datatypes import DataType, PrimitiveType, UnionType, label, render


def compatible(source: DataType, target: DataType) -> bool:
    """Return True if an edge source→target is type-legal.

    O(|members|). The primitive/primitive path performs no allocation:
    primitives are interned, so equality is an identity check on the kind.
    """
    if source.is_any or target.is_any:
        return True
    if isinstance(source, PrimitiveType) and isinstance(target, PrimitiveType):
        return source.kind is target.kind
    if isinstance(source, UnionType):
        return any(compatible(member, target) for member in source.members)
    if isinstance(target, UnionType):
        return any(compatible(source, member) for member in target.members)
    return False


@dataclass(frozen=True, slots=True)
class CompatibilityResult:
    """Result of a handle type compatibility check."""

    compatible: bool
    source: DataType
    target: DataType

    @property
    def error_message(self) -> str | None:
        """Human-readable error message if incompatible."""
        if self.compatible:
            return None
        return (
            f"Cannot connect type '{label(self.source)}' ({render(self.source)}) "
            f"to '{label(self.target)}' ({render(self.target)})."
        )


def check_compatibility(source: DataType, target: DataType) -> CompatibilityResult:
    """Check compatibility and keep both sides for error reporting."""
    return CompatibilityResult(compatible=compatible(source, target), source=source, target=target)
