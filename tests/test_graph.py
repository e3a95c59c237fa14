"""Tests for the in-memory graph model."""

import pytest
from PySide6.QtCore import QPointF, QSizeF

from nodegraph.core import (
    Color4, Edge, Graph, GraphSettings, GraphTopologyPolicy, Node, Port,
    PortDefinition, PortDirection, PortKind,
)


def _port(node, semantic_id):
    return node.find_port_by_semantic_id(semantic_id)


class TestNode:
    """Test node construction and port bookkeeping."""

    def test_defaults(self):
        """Test a new node's default placement and state."""
        node = Node("n1", "Math.Add")

        assert node.position == QPointF(0.0, 0.0)
        assert node.size == QSizeF(200.0, 100.0)
        assert node.ports == ()
        assert node.user_data is None
        assert node.allow_dynamic_ports is False

    def test_empty_id_rejected(self):
        """Test a node needs a non-empty id."""
        with pytest.raises(ValueError):
            Node("", "Math.Add")

    def test_position_is_copied(self):
        """Test mutating a returned position does not move the node."""
        node = Node("n1", "T", (10, 20))
        pos = node.position
        pos.setX(99)

        assert node.position == QPointF(10.0, 20.0)

    def test_add_port_from_definition(self):
        """Test ports created from definitions take their sort order."""
        node = Node("n1", "T")
        port = node.add_port(PortDefinition("out", PortDirection.OUTPUT, PortKind.DATA, "float",
                                            sort_order=4))

        assert port.node_id == "n1"
        assert port.semantic_id == "out"
        assert port.sort_order == 4
        assert port.is_output

    def test_semantic_id_defaults_to_name(self):
        """Test Port falls back to its name for the semantic id."""
        assert Port("p1", "n1", "value").semantic_id == "value"
        assert Port("p1", "n1", "value", semantic_id="v").semantic_id == "v"

    def test_duplicate_semantic_id_rejected(self):
        """Test two ports on one node cannot share a semantic id."""
        node = Node("n1", "T")
        node.add_port(PortDefinition("a", PortDirection.INPUT))

        with pytest.raises(ValueError):
            node.add_port(PortDefinition("a", PortDirection.OUTPUT))

    def test_foreign_port_rejected(self):
        """Test a port owned by another node cannot be inserted."""
        node = Node("n1", "T")

        with pytest.raises(ValueError):
            node.insert_port(Port("p1", "other", "a"))

    def test_input_output_split(self):
        """Test input_ports/output_ports filter by direction."""
        node = Node("n1", "T")
        node.add_port(PortDefinition("a", PortDirection.INPUT))
        node.add_port(PortDefinition("b", PortDirection.OUTPUT))

        assert [p.name for p in node.input_ports()] == ["a"]
        assert [p.name for p in node.output_ports()] == ["b"]


class TestGraphNodes:
    """Test adding, finding and removing nodes."""

    def test_add_node_uses_registry(self, graph):
        """Test add_node builds ports and default data from the type definition."""
        node = graph.add_node("Math.Add", (5, 6))

        assert [p.semantic_id for p in node.ports] == ["a", "b", "sum"]
        assert node.user_data is not None
        assert graph.find_node(node.id) is node
        for port in node.ports:
            assert graph.find_port(port.id) is port

    def test_add_unknown_type(self, graph):
        """Test an unregistered type gives a port-less node."""
        node = graph.add_node("Unknown.Type")

        assert node.ports == ()

    def test_graph_id_generated(self):
        """Test a fresh graph gets a uuid id unless one is given."""
        assert len(Graph().id) == 36
        assert Graph(id="fixed").id == "fixed"

    def test_insert_duplicate_node(self, graph):
        """Test inserting two nodes with the same id."""
        graph.insert_node(Node("A", "T"))

        with pytest.raises(ValueError):
            graph.insert_node(Node("A", "T"))

    def test_port_index_follows_node_edits(self, graph):
        """Test ports added or removed after insertion update the index."""
        node = graph.add_node("Flow.Sequence")
        port = node.add_port(PortDefinition("then 0", PortDirection.OUTPUT))

        assert graph.find_port(port.id) is port

        node.remove_port(port.id)
        assert graph.find_port(port.id) is None

    def test_remove_node_drops_edges_and_membership(self, sample_graph):
        """Test removing a node removes its edges and container membership."""
        add = next(n for n in sample_graph.nodes if n.type_id == "Math.Add")
        c1 = next(n for n in sample_graph.nodes if n.type_id == "Math.Constant")

        assert sample_graph.remove_node(c1.id)

        assert len(sample_graph.edges) == 1
        assert c1.id not in sample_graph.groups[0].contained_node_ids
        assert sample_graph.remove_node(add.id)
        assert sample_graph.edges == ()
        assert add.id not in sample_graph.sub_graph_frames[0].contained_node_ids
        assert not sample_graph.remove_node(add.id)


class TestGraphEdges:
    """Test connect/disconnect rules."""

    @pytest.fixture
    def pair(self, graph):
        src = graph.add_node("Math.Constant")
        dst = graph.add_node("Math.Add")
        return graph, src, dst

    def test_connect(self, pair):
        """Test an output-to-input connection."""
        graph, src, dst = pair
        edge = graph.connect(_port(src, "value").id, _port(dst, "a").id)

        assert isinstance(edge, Edge)
        assert graph.edges_for_node(src.id) == [edge]
        assert graph.successors(src.id) == {dst.id}
        assert graph.predecessors(dst.id) == {src.id}

    def test_connect_swaps_reversed_drag(self, pair):
        """Test an input-to-output drag is stored output-to-input."""
        graph, src, dst = pair
        out_port = _port(src, "value")
        edge = graph.connect(_port(dst, "a").id, out_port.id)

        assert edge.source_port_id == out_port.id

    def test_same_node_rejected(self, graph):
        """Test a node cannot link to itself."""
        node = graph.add_node("Math.Add")

        assert graph.connect(_port(node, "sum").id, _port(node, "a").id) is None

    def test_same_direction_rejected(self, graph):
        """Test two inputs cannot be linked."""
        a = graph.add_node("Math.Add")
        b = graph.add_node("Math.Add")

        assert graph.connect(_port(a, "a").id, _port(b, "b").id) is None

    def test_unknown_port_rejected(self, graph):
        """Test connecting a port id that is not in the graph."""
        node = graph.add_node("Math.Add")

        assert graph.connect("missing", _port(node, "a").id) is None

    def test_single_capacity_replaces(self, graph):
        """Test a single-capacity input keeps only the newest link."""
        c1 = graph.add_node("Math.Constant")
        c2 = graph.add_node("Math.Constant")
        add = graph.add_node("Math.Add")
        target = _port(add, "a").id

        first = graph.connect(_port(c1, "value").id, target)
        second = graph.connect(_port(c2, "value").id, target)

        assert graph.find_edge(first.id) is None
        assert graph.edges_for_port(target) == (second,)

    def test_dag_rejects_cycle(self, graph):
        """Test the DAG policy refuses a link that closes a cycle."""
        a = graph.add_node("Math.Add")
        b = graph.add_node("Math.Add")
        assert graph.connect(_port(a, "sum").id, _port(b, "a").id)

        assert graph.connect(_port(b, "sum").id, _port(a, "a").id) is None

    def test_directed_graph_allows_cycle(self, registry):
        """Test cycles are allowed outside the DAG policy."""
        graph = Graph(GraphSettings(GraphTopologyPolicy.DIRECTED_GRAPH, registry))
        a = graph.add_node("Math.Add")
        b = graph.add_node("Math.Add")
        graph.connect(_port(a, "sum").id, _port(b, "a").id)

        assert graph.connect(_port(b, "sum").id, _port(a, "a").id) is not None

    def test_insert_edge_requires_ports(self, graph):
        """Test insert_edge refuses unresolved endpoints."""
        node = graph.add_node("Math.Add")

        with pytest.raises(ValueError):
            graph.insert_edge(Edge("e1", "nowhere", _port(node, "a").id))

    def test_disconnect(self, pair):
        """Test disconnect removes the edge from every index."""
        graph, src, dst = pair
        edge = graph.connect(_port(src, "value").id, _port(dst, "a").id)

        assert graph.disconnect(edge.id)
        assert graph.edges == ()
        assert graph.edges_for_port(edge.source_port_id) == ()
        assert not graph.disconnect(edge.id)

    def test_removing_port_drops_its_edges(self, pair):
        """Test removing a connected port removes the edge."""
        graph, src, dst = pair
        port = _port(dst, "a")
        graph.connect(_port(src, "value").id, port.id)

        dst.remove_port(port.id)

        assert graph.edges == ()


class TestDecorations:
    """Test groups, comments and sub-graph frames."""

    def test_create_group_fits_nodes(self, graph):
        """Test a new group encloses its nodes with padding."""
        a = graph.add_node("Math.Add", (0, 0))
        b = graph.add_node("Math.Add", (300, 200))
        group = graph.create_group("G", [a.id, b.id])

        bounds = group.bounds
        assert bounds.contains(a.bounds())
        assert bounds.contains(b.bounds())
        assert graph.find_group(group.id) is group

    def test_group_default_color(self, graph):
        """Test the default group colour."""
        group = graph.create_group("G")

        assert group.color == Color4(0.3, 0.5, 0.8, 0.3)

    def test_color_qcolor_view(self):
        """Test the painting view clamps while the stored channels stay exact."""
        color = Color4(1.5, 0.25, -0.5, 0.3)

        qcolor = color.to_qcolor()

        assert qcolor.redF() == pytest.approx(1.0, abs=1e-3)
        assert qcolor.blueF() == pytest.approx(0.0, abs=1e-3)
        assert color.r == 1.5
        assert Color4.from_qcolor(qcolor).g == pytest.approx(0.25, abs=1e-3)

    def test_comment(self, graph):
        """Test comment creation and removal."""
        comment = graph.create_comment("note", (10, 20))

        assert comment.bounds.topLeft() == QPointF(10.0, 20.0)
        assert comment.font_size == 14.0
        assert graph.remove_comment(comment.id)
        assert graph.find_comment(comment.id) is None

    def test_find_container_frame(self, sample_graph):
        """Test locating the frame that contains a node."""
        add = next(n for n in sample_graph.nodes if n.type_id == "Math.Add")

        assert sample_graph.find_container_frame(add.id).id == "frame-1"
        assert sample_graph.remove_sub_graph_frame("frame-1")
        assert sample_graph.find_container_frame(add.id) is None
        assert sample_graph.find_node(add.id) is add
