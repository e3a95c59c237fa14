# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Graph model: the mutable in-memory aggregate edited by a host tool.
"""

from nodegraph.core.ids import new_id
from nodegraph.core.color import Color4
from nodegraph.core.port import (
    Port, PortDefinition, PortDirection, PortKind, PortCapacity,
)
from nodegraph.core.node import Node, NodeData, NodeDisplayMode
from nodegraph.core.edge import Edge, EdgeData
from nodegraph.core.decoration import (
    GraphDecoration, GraphContainer, NodeGroup, SubGraphFrame, GraphComment,
)
from nodegraph.core.settings import GraphSettings, GraphTopologyPolicy
from nodegraph.core.graph import Graph

__all__ = [
    "new_id",
    "Color4",
    "Port", "PortDefinition", "PortDirection", "PortKind", "PortCapacity",
    "Node", "NodeData", "NodeDisplayMode",
    "Edge", "EdgeData",
    "GraphDecoration", "GraphContainer", "NodeGroup", "SubGraphFrame", "GraphComment",
    "GraphSettings", "GraphTopologyPolicy",
    "Graph",
]
