# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Graph-level configuration: topology policy and node-type registry.
"""

from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from nodegraph.noderegistry import NodeTypeRegistry


class GraphTopologyPolicy(Enum):
    """Which link topologies a graph accepts. Values are the document tags."""
    DAG = "DAG"
    DIRECTED_GRAPH = "DirectedGraph"
    UNDIRECTED = "Undirected"


class GraphSettings:
    """
    Topology policy plus the node-type registry used by ``Graph.add_node``.

    Args:
        topology:   Link topology policy (default DAG).
        node_types: Registry of node type definitions. A fresh, empty
                    registry is created when omitted.
    """

    def __init__(self,
                 topology: GraphTopologyPolicy = GraphTopologyPolicy.DAG,
                 node_types: Optional['NodeTypeRegistry'] = None) -> None:
        if node_types is None:
            # Lazy import: noderegistry depends on core.port
            from nodegraph.noderegistry import NodeTypeRegistry
            node_types = NodeTypeRegistry()
        self.topology = topology
        self.node_types = node_types

    def __repr__(self) -> str:
        return f"GraphSettings(topology={self.topology.value})"
