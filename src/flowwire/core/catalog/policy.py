# src/flowwire/core/catalog/policy.py
"""Category-to-category connection policy."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from flowwire.contracts.enums import NodeCategory
from flowwire.core.config import CategoryPolicySettings, CategoryRule


class CategoryPolicy:
    """Decides whether a source category may link to a target category.

    Checks run in this order and the first failure wins:
    1. source allow-list (when declared) must contain the target
    2. source deny-list must not contain the target
    3. declared conflict pairs, in either direction
    """

    def __init__(
        self,
        rules: Mapping[NodeCategory, CategoryRule] | None = None,
        conflicts: Iterable[tuple[NodeCategory, NodeCategory]] = (),
    ) -> None:
        self._rules = dict(rules or {})
        self._conflicts = frozenset(frozenset(pair) for pair in conflicts)

    @classmethod
    def from_settings(cls, settings: CategoryPolicySettings) -> CategoryPolicy:
        return cls(rules=settings.resolved_rules(), conflicts=settings.conflicts)

    def rule_for(self, category: NodeCategory) -> CategoryRule | None:
        return self._rules.get(category)

    def check(self, source: NodeCategory, target: NodeCategory) -> str | None:
        """Return a rejection reason, or None when the link is allowed."""
        rule = self._rules.get(source)
        if rule is not None:
            if rule.allowed_connections is not None and target not in rule.allowed_connections:
                return f"Category '{source}' cannot connect to category '{target}'."
            if target in rule.incompatible_with:
                return f"Category '{source}' is incompatible with category '{target}'."
        if frozenset((source, target)) in self._conflicts:
            return f"Categories '{source}' and '{target}' conflict and cannot be connected."
        return None
