"""Exceptions raised inside the catalog layer.

None of these cross a public entry point of the validator, cleanup pass
or activation evaluator; those convert them into result values.
"""


class CatalogNotReadyError(RuntimeError):
    """Raised when the node type catalog is queried before it finished loading."""

    def __init__(self, message: str = "Node type catalog is not ready") -> None:
        super().__init__(message)


class CatalogLoadCancelled(Exception):
    """Raised into the readiness future when a bootstrap was cancelled.

    Attributes:
        completed_providers: Number of providers consulted before cancellation
    """

    def __init__(self, completed_providers: int) -> None:
        self.completed_providers = completed_providers
        super().__init__(f"Catalog bootstrap cancelled after {completed_providers} provider(s)")


class NodeTypeNotFound(LookupError):
    """Raised when no provider knows a node type.

    Attributes:
        node_type: The requested node type
        suggestions: Similar known node types, for error messages
    """

    def __init__(self, node_type: str, suggestions: list[str] | None = None) -> None:
        self.node_type = node_type
        self.suggestions = suggestions or []
        message = f"Unknown node type '{node_type}'"
        if self.suggestions:
            message += f". Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)
