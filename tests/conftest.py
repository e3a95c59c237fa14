"""
Shared pytest fixtures for the NodeGraph test suite.

Builds a small node-type registry and a sample graph that exercises every
persisted element: typed and ad-hoc nodes, edges, a group, a comment and a
sub-graph frame.
"""

from dataclasses import dataclass
from typing import ClassVar, Tuple

import pytest
from PySide6.QtCore import QRectF

from nodegraph.codec import FieldKind, FieldSpec
from nodegraph.core import (
    EdgeData, Graph, GraphSettings, Node, NodeData, PortCapacity,
    PortDefinition, PortDirection, PortKind, SubGraphFrame,
)
from nodegraph.noderegistry import NodeTypeDefinition, NodeTypeRegistry
from nodegraph.userdata import RecordUserDataCodec


# ---------------------------------------------------------------------------
# User-data records
# ---------------------------------------------------------------------------

@dataclass
class AddData(NodeData):
    bias: float = 0.0
    label: str = ""

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("bias", FieldKind.FLOAT),
        FieldSpec("label", FieldKind.STRING),
    )


@dataclass
class WireData(EdgeData):
    weight: int = 1

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("weight", FieldKind.INT),
    )


# ---------------------------------------------------------------------------
# Node types
# ---------------------------------------------------------------------------

MATH_ADD = NodeTypeDefinition(
    type_id="Math.Add",
    display_name="Add",
    category="Math/Basic",
    default_ports=(
        PortDefinition("a", PortDirection.INPUT, PortKind.DATA, "float", PortCapacity.SINGLE, 0),
        PortDefinition("b", PortDirection.INPUT, PortKind.DATA, "float", PortCapacity.SINGLE, 1),
        PortDefinition("sum", PortDirection.OUTPUT, PortKind.DATA, "float", PortCapacity.MULTIPLE, 2),
    ),
    description="Adds two numbers",
    tags=("sum", "plus"),
    create_default_data=AddData,
)

CONST = NodeTypeDefinition(
    type_id="Math.Constant",
    display_name="Constant",
    category="Math/Basic",
    default_ports=(
        PortDefinition("value", PortDirection.OUTPUT, PortKind.DATA, "float"),
    ),
    description="Emits a fixed value",
)

SEQUENCE = NodeTypeDefinition(
    type_id="Flow.Sequence",
    display_name="Sequence",
    category="Flow",
    default_ports=(
        PortDefinition("in", PortDirection.INPUT),
    ),
    allow_dynamic_ports=True,
    description="Runs its outputs in order",
)


@pytest.fixture
def registry():
    """Registry holding Math.Add, Math.Constant and Flow.Sequence."""
    reg = NodeTypeRegistry()
    for definition in (MATH_ADD, CONST, SEQUENCE):
        reg.register(definition)
    return reg


@pytest.fixture
def user_codec():
    """Record codec for Math.Add node data and wire edge data."""
    return RecordUserDataCodec({"Math.Add": AddData}, edge_record=WireData)


@pytest.fixture
def graph(registry):
    """Empty graph whose settings use the shared registry."""
    return Graph(GraphSettings(node_types=registry))


@pytest.fixture
def sample_graph(graph):
    """
    Two constants feeding an adder, a dynamic-port sequence node, and one
    of each decoration.
    """
    c1 = graph.add_node("Math.Constant", (0, 0))
    c2 = graph.add_node("Math.Constant", (0, 150))
    add = graph.add_node("Math.Add", (250, 60))
    add.user_data = AddData(bias=0.5, label="total")

    seq = graph.add_node("Flow.Sequence", (500, 60))
    seq.add_port(PortDefinition("then 0", PortDirection.OUTPUT, sort_order=1))
    seq.add_port(PortDefinition("then 1", PortDirection.OUTPUT, sort_order=2))

    e1 = graph.connect(c1.find_port_by_semantic_id("value").id, add.find_port_by_semantic_id("a").id)
    e1.user_data = WireData(weight=3)
    graph.connect(c2.find_port_by_semantic_id("value").id, add.find_port_by_semantic_id("b").id)

    group = graph.create_group("Inputs", [c1.id, c2.id])
    group.color = group.color.darker()
    comment = graph.create_comment("Adds two constants", (0, -120))
    comment.font_size = 18.0

    frame = SubGraphFrame("frame-1", "Collapsed adder", add.id, [add.id],
                          QRectF(230.0, 20.0, 240.0, 160.0))
    frame.source_asset_id = "assets/adder.graph"
    graph.insert_sub_graph_frame(frame)
    return graph


def port_signature(node: Node):
    """(semantic id, direction, kind, data type, capacity, sort order) per port, in sort order."""
    return [
        (p.semantic_id, p.direction, p.kind, p.data_type, p.capacity, p.sort_order)
        for p in sorted(node.ports, key=lambda p: p.sort_order)
    ]


def edge_signature(graph: Graph):
    """Edges as (id, source node/semantic port, target node/semantic port)."""
    result = set()
    for edge in graph.edges:
        src = graph.find_port(edge.source_port_id)
        dst = graph.find_port(edge.target_port_id)
        result.add((edge.id, src.node_id, src.semantic_id, dst.node_id, dst.semantic_id))
    return result
