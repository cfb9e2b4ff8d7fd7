# src/flowwire/core/graph.py
"""GraphSnapshot: read-only view of the node graph for one evaluation tick.

Wraps a NetworkX MultiDiGraph keyed by edge id, so several edges between
the same pair of nodes (different handles) are kept apart.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

import networkx as nx
from networkx import MultiDiGraph

from flowwire.contracts.graph import Edge, Node
from flowwire.contracts.types import NodeID
from flowwire.core.canonical import fingerprint


class GraphSnapshot:
    """Nodes and edges as handed over by the graph provider.

    Edges whose endpoints are not among the nodes are kept in ``edges``
    (the validator reports them). An edge into a known node still counts
    as incoming even when its source is missing; only edges with both
    endpoints present enter the networkx topology.
    """

    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        self._graph: MultiDiGraph[str] = nx.MultiDiGraph()
        self._nodes: dict[NodeID, Node] = {}
        for node in nodes:
            self._nodes[node.id] = node
            self._graph.add_node(node.id)

        self._edges: tuple[Edge, ...] = tuple(edges)
        self._incoming: dict[NodeID, list[Edge]] = {}
        for edge in self._edges:
            if edge.target in self._nodes:
                self._incoming.setdefault(edge.target, []).append(edge)
            if edge.source in self._nodes and edge.target in self._nodes:
                self._graph.add_edge(edge.source, edge.target, key=edge.id, edge=edge)

    @classmethod
    def from_dicts(cls, nodes: Iterable[Mapping[str, Any]], edges: Iterable[Mapping[str, Any]]) -> GraphSnapshot:
        """Build from raw graph-provider dicts.

        Raises:
            ValueError: If a node or edge is missing a required field
        """
        return cls([Node.from_dict(n) for n in nodes], [Edge.from_dict(e) for e in edges])

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._edges

    @property
    def node_lookup(self) -> Mapping[NodeID, Node]:
        return MappingProxyType(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: NodeID) -> Node | None:
        return self._nodes.get(node_id)

    def incoming_edges(self, node_id: NodeID) -> list[Edge]:
        """Edges pointing TO this node, in provider order, dangling sources included."""
        return list(self._incoming.get(node_id, ()))

    def upstream_nodes(self, node_id: NodeID) -> list[Node]:
        """Distinct known source nodes of incoming edges, first occurrence wins."""
        seen: dict[NodeID, Node] = {}
        for edge in self.incoming_edges(node_id):
            if edge.source not in seen and edge.source in self._nodes:
                seen[edge.source] = self._nodes[edge.source]
        return list(seen.values())

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def evaluation_order(self) -> list[NodeID]:
        """Stable evaluation order.

        Lexicographic topological order when the graph is acyclic; sorted
        node ids otherwise. Identical inputs always give identical order.
        """
        if self.is_acyclic():
            return [NodeID(n) for n in nx.lexicographical_topological_sort(self._graph)]
        return sorted(self._nodes)

    def data_fingerprint(self, node_id: NodeID) -> str:
        node = self._nodes[node_id]
        return fingerprint({"type": node.type, "data": node.data})

    def topology_fingerprint(self, node_id: NodeID) -> str:
        """Fingerprint of the node's incoming edges and the data behind them."""
        incoming = []
        for edge in self.incoming_edges(node_id):
            source = self._nodes.get(edge.source)
            incoming.append(
                {
                    "source": edge.source,
                    "source_type": source.type if source is not None else None,
                    "source_handle": edge.source_handle,
                    "target_handle": edge.target_handle,
                    "source_data": source.data if source is not None else None,
                }
            )
        return fingerprint(incoming)
