# tests/strategies/__init__.py
"""Hypothesis strategies for property-based tests.

Re-exports commonly used strategies for convenience:
    from tests.strategies import data_types, flow_graphs, STANDARD_SETTINGS
"""

from tests.strategies.flow import data_types, edges_for, flow_graphs, node_data, type_codes
from tests.strategies.settings import DETERMINISM_SETTINGS, STANDARD_SETTINGS

__all__ = [
    "DETERMINISM_SETTINGS",
    "STANDARD_SETTINGS",
    "data_types",
    "edges_for",
    "flow_graphs",
    "node_data",
    "type_codes",
]
