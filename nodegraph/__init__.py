# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0
"""

from nodegraph.__about__ import __version__
from nodegraph.codec import FieldKind, FieldSpec, JsonFormatError
from nodegraph.core import (
    Color4, Edge, EdgeData, Graph, GraphComment, GraphSettings, GraphTopologyPolicy,
    Node, NodeData, NodeDisplayMode, NodeGroup, Port, PortCapacity,
    PortDefinition, PortDirection, PortKind, SubGraphFrame, new_id,
)
from nodegraph.noderegistry import NodeTypeDefinition, NodeTypeProvider, NodeTypeRegistry
from nodegraph.userdata import EdgeDataCodec, NodeDataCodec, RecordUserDataCodec
from nodegraph.persister import GraphPersister, RestoreResult, SchemaVersionError
from nodegraph.serializer import GraphSerializer
from nodegraph.logger import get_logger, setup_logging

__all__ = [
    "__version__",
    "FieldKind", "FieldSpec", "JsonFormatError",
    "Color4", "Edge", "EdgeData", "Graph", "GraphComment", "GraphSettings", "GraphTopologyPolicy",
    "Node", "NodeData", "NodeDisplayMode", "NodeGroup", "Port", "PortCapacity",
    "PortDefinition", "PortDirection", "PortKind", "SubGraphFrame", "new_id",
    "NodeTypeDefinition", "NodeTypeProvider", "NodeTypeRegistry",
    "EdgeDataCodec", "NodeDataCodec", "RecordUserDataCodec",
    "GraphPersister", "RestoreResult", "SchemaVersionError",
    "GraphSerializer",
    "get_logger", "setup_logging",
]
