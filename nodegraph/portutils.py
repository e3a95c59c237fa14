# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Port Utilities - port lookups shared by the persister and the façade.

Single source of truth for:
- Port ordering
- Semantic-id resolution of edge endpoints (capture side)
- (node id, semantic id) -> Port lookup (restore / import side)
"""

from typing import List, Optional, Tuple, TYPE_CHECKING

from nodegraph.core.port import Port

if TYPE_CHECKING:
    from nodegraph.core.graph import Graph
    from nodegraph.core.node import Node


class PortUtils:
    """Static helpers for port-related operations."""

    # ==========================================================================
    # ORDERING
    # ==========================================================================

    @staticmethod
    def sorted_ports(node: 'Node') -> List[Port]:
        """Ports by ``sort_order``; insertion order breaks ties."""
        return sorted(node.ports, key=lambda p: p.sort_order)

    # ==========================================================================
    # SEMANTIC RESOLUTION
    # ==========================================================================

    @staticmethod
    def endpoint_of(graph: 'Graph', port_id: str) -> Tuple[str, str]:
        """
        Describe a physical port as ``(owning node id, semantic port id)``.

        Returns ``("", "")`` when the port is not in the graph.
        """
        port = graph.find_port(port_id)
        if port is None:
            return "", ""
        return port.node_id, port.semantic_id

    @staticmethod
    def find_by_semantic_id(graph: 'Graph', node_id: str, semantic_id: str) -> Optional[Port]:
        """Resolve ``(node id, semantic port id)`` to a port of ``graph``."""
        node = graph.find_node(node_id)
        if node is None:
            return None
        return node.find_port_by_semantic_id(semantic_id)
