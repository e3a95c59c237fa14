"""Tests for the import/export façade."""

import logging

import pytest
from PySide6.QtCore import QPointF

from conftest import AddData, edge_signature
from nodegraph import codec
from nodegraph.codec import JsonFormatError
from nodegraph.core import Graph, GraphSettings, Node, PortDefinition, PortDirection
from nodegraph.dto import EdgeDto, GraphDto, NodeDto, PortDto
from nodegraph.persister import SchemaVersionError
from nodegraph.serializer import GraphSerializer


@pytest.fixture
def serializer(user_codec):
    return GraphSerializer(user_data_codec=user_codec)


def _by_type(graph, type_id):
    return [n for n in graph.nodes if n.type_id == type_id]


class TestWholeGraph:
    """Test export_all / import_graph."""

    def test_round_trip(self, serializer, sample_graph):
        """Test a graph survives export and import."""
        restored = serializer.import_graph(serializer.export_all(sample_graph))

        assert restored.id == sample_graph.id
        assert {n.id for n in restored.nodes} == {n.id for n in sample_graph.nodes}
        assert edge_signature(restored) == edge_signature(sample_graph)
        assert _by_type(restored, "Math.Add")[0].user_data == AddData(bias=0.5, label="total")
        assert len(restored.groups) == len(restored.comments) == len(restored.sub_graph_frames) == 1

    def test_document_shape(self, serializer, sample_graph):
        """Test the top-level document keys."""
        text = serializer.export_all(sample_graph)

        assert text.startswith(f'{{"id":"{sample_graph.id}","schemaVersion":2,')
        for key in ('"settings":{"topology":"DAG"}', '"nodes":[', '"edges":[',
                    '"groups":[', '"comments":[', '"subGraphFrames":['):
            assert key in text

    def test_indent_option(self, user_codec, sample_graph):
        """Test the indent setting pretty-prints documents."""
        pretty = GraphSerializer(user_codec, indent=2).export_all(sample_graph)

        assert '\n  "schemaVersion": 2,' in pretty
        assert GraphSerializer(user_codec).import_graph(pretty).id == sample_graph.id

    def test_provider_document_is_smaller(self, user_codec, sample_graph, registry):
        """Test port omission shrinks documents for known types."""
        plain = GraphSerializer(user_codec).export_all(sample_graph)
        compact = GraphSerializer(user_codec, registry).export_all(sample_graph)

        assert len(compact) < len(plain)
        restored = GraphSerializer(user_codec, registry).import_graph(compact)
        assert len(restored.edges) == 2

    @pytest.mark.parametrize("document", ["", "  \n"])
    def test_blank_document(self, serializer, document):
        """Test blank documents are a format error."""
        with pytest.raises(JsonFormatError):
            serializer.import_graph(document)

    def test_malformed_document(self, serializer):
        """Test malformed text surfaces the codec error."""
        with pytest.raises(JsonFormatError):
            serializer.import_graph('{"id":"g","nodes":[')

    def test_old_document(self, serializer):
        """Test version-1 documents are refused."""
        with pytest.raises(SchemaVersionError):
            serializer.import_graph('{"id":"g","schemaVersion":1}')

    def test_missing_version_is_current(self, serializer):
        """Test a document without schemaVersion reads as the current version."""
        assert serializer.import_graph('{"id":"g"}').id == "g"

    def test_diagnostics(self, serializer):
        """Test the diagnostics entry point reports dropped edges."""
        document = ('{"id":"g","schemaVersion":2,"edges":[{"id":"e9","fromNodeId":"x",'
                    '"fromPortId":"out","toNodeId":"y","toPortId":"in"}]}')

        result = serializer.import_graph_with_diagnostics(document)

        assert result.skipped_edge_ids == ["e9"]
        assert result.graph.edges == ()


class TestSubset:
    """Test export_subset."""

    def test_keeps_selected_nodes_and_inner_edges(self, serializer, sample_graph):
        """Test only selected nodes and edges between them are exported."""
        c1, c2 = _by_type(sample_graph, "Math.Constant")
        add = _by_type(sample_graph, "Math.Add")[0]

        dto = codec.deserialize(serializer.export_subset(sample_graph, [c1.id, add.id]), GraphDto)

        assert {n.id for n in dto.nodes} == {c1.id, add.id}
        assert [(e.from_node_id, e.to_node_id) for e in dto.edges] == [(c1.id, add.id)]
        assert dto.id == ""
        assert dto.schema_version == 2
        assert dto.settings.topology == "DAG"
        assert dto.groups == [] and dto.sub_graph_frames == []

    def test_unknown_ids_ignored(self, serializer, sample_graph):
        """Test ids not in the graph select nothing."""
        dto = codec.deserialize(serializer.export_subset(sample_graph, ["nope"]), GraphDto)

        assert dto.nodes == [] and dto.edges == []


class TestImportInto:
    """Test pasting documents into an existing graph."""

    def test_fresh_ids_and_offset(self, serializer, sample_graph):
        """Test pasted nodes get new ids and shifted positions."""
        add = _by_type(sample_graph, "Math.Add")[0]
        c1 = _by_type(sample_graph, "Math.Constant")[0]
        clip = serializer.export_subset(sample_graph, [c1.id, add.id])
        before_ids = {n.id for n in sample_graph.nodes}
        before_ports = {p.id for n in sample_graph.nodes for p in n.ports}

        pasted = serializer.import_into(sample_graph, clip, (40, -10))

        assert len(pasted) == 2
        assert not {n.id for n in pasted} & before_ids
        assert not {p.id for n in pasted for p in n.ports} & before_ports
        positions = {n.type_id: n.position for n in pasted}
        assert positions["Math.Add"] == add.position + QPointF(40, -10)
        assert positions["Math.Constant"] == c1.position + QPointF(40, -10)
        assert len(sample_graph.nodes) == 6

    def test_edges_rewired_to_new_nodes(self, serializer, sample_graph):
        """Test pasted edges join the pasted nodes, not the originals."""
        add = _by_type(sample_graph, "Math.Add")[0]
        c1 = _by_type(sample_graph, "Math.Constant")[0]
        clip = serializer.export_subset(sample_graph, [c1.id, add.id])
        edges_before = set(e.id for e in sample_graph.edges)

        pasted = serializer.import_into(sample_graph, clip, (0, 0))

        new_edges = [e for e in sample_graph.edges if e.id not in edges_before]
        assert len(new_edges) == 1
        pasted_ids = {n.id for n in pasted}
        edge = new_edges[0]
        source = sample_graph.find_port(edge.source_port_id)
        target = sample_graph.find_port(edge.target_port_id)
        assert {source.node_id, target.node_id} == pasted_ids
        assert (source.semantic_id, target.semantic_id) == ("value", "a")
        assert new_edges[0].user_data.weight == 3

    def test_colliding_node_id(self, serializer):
        """Test a node 'A' pasted into a graph that already has 'A'."""
        source = Graph()
        a = Node("A", "Custom", (10, 20))
        a.add_port(PortDefinition("out", PortDirection.OUTPUT))
        b = Node("B", "Custom", (300, 20))
        b.add_port(PortDefinition("in", PortDirection.INPUT))
        source.insert_node(a)
        source.insert_node(b)
        source.connect(a.ports[0].id, b.ports[0].id)
        document = serializer.export_all(source)

        target = Graph()
        target.insert_node(Node("A", "Existing"))
        pasted = serializer.import_into(target, document, QPointF(5, 5))

        assert "A" not in {n.id for n in pasted}
        assert target.find_node("A").type_id == "Existing"
        new_a = next(n for n in pasted if n.find_port_by_semantic_id("out") is not None)
        assert new_a.position == QPointF(15, 25)
        edge = target.edges[0]
        assert target.find_port(edge.source_port_id).node_id == new_a.id

    def test_edges_to_unselected_nodes_dropped(self, serializer, sample_graph):
        """Test edges whose endpoints were not imported are dropped."""
        add = _by_type(sample_graph, "Math.Add")[0]
        document = serializer.export_all(sample_graph)
        target = Graph()

        dto = codec.deserialize(document, GraphDto)
        dto.nodes = [n for n in dto.nodes if n.id != add.id]
        pasted = serializer.import_into(target, codec.serialize(dto))

        assert len(pasted) == 3
        assert target.edges == ()

    def test_type_provider_regenerates_ports(self, user_codec, registry, sample_graph):
        """Test paste rebuilds omitted ports from the type definition."""
        serializer = GraphSerializer(user_codec, registry)
        c1 = _by_type(sample_graph, "Math.Constant")[0]
        add = _by_type(sample_graph, "Math.Add")[0]
        clip = serializer.export_subset(sample_graph, [c1.id, add.id])
        target = Graph(GraphSettings(node_types=registry))

        pasted = serializer.import_into(target, clip, (0, 0))

        pasted_add = next(n for n in pasted if n.type_id == "Math.Add")
        assert [p.semantic_id for p in pasted_add.ports] == ["a", "b", "sum"]
        assert len(target.edges) == 1

    def test_decorations_imported_with_remapped_members(self, serializer, sample_graph):
        """Test groups, comments and frames follow the pasted nodes."""
        document = serializer.export_all(sample_graph)
        target = Graph()

        pasted = serializer.import_into(target, document, (100, 0))

        pasted_ids = {n.id for n in pasted}
        group = target.groups[0]
        assert group.contained_node_ids <= pasted_ids
        assert len(group.contained_node_ids) == 2
        assert group.id != sample_graph.groups[0].id
        assert group.bounds.topLeft() == sample_graph.groups[0].bounds.topLeft() + QPointF(100, 0)

        frame = target.sub_graph_frames[0]
        assert frame.id != "frame-1"
        assert frame.representative_node_id in pasted_ids
        assert frame.contained_node_ids == {frame.representative_node_id}

        comment = target.comments[0]
        assert comment.text == "Adds two constants"
        assert comment.bounds.x() == sample_graph.comments[0].bounds.x() + 100

    def test_old_document_rejected(self, serializer):
        """Test paste applies the schema version gate."""
        target = Graph()

        with pytest.raises(SchemaVersionError):
            serializer.import_into(target, '{"id":"","schemaVersion":1,"nodes":[{"id":"n"}]}')
        assert target.nodes == ()

    def test_failed_node_leaves_target_unchanged(self, serializer, sample_graph):
        """Test a node that cannot be built aborts the paste before anything lands."""
        document = codec.serialize(GraphDto(nodes=[
            NodeDto(id="ok", type_id="Custom", ports=[PortDto(id="p0", name="x")]),
            NodeDto(id="bad", type_id="Custom",
                    ports=[PortDto(id="p1", name="x"), PortDto(id="p2", name="x")]),
        ]))
        before = (len(sample_graph.nodes), len(sample_graph.edges), len(sample_graph.groups))

        with pytest.raises(ValueError, match="Duplicate semantic port id"):
            serializer.import_into(sample_graph, document)

        assert (len(sample_graph.nodes), len(sample_graph.edges), len(sample_graph.groups)) == before

    def test_failed_edge_rolls_back_nodes(self, serializer):
        """Test undecodable edge user data removes the nodes already pasted."""
        document = codec.serialize(GraphDto(
            nodes=[
                NodeDto(id="a", type_id="Custom",
                        ports=[PortDto(id="pa", name="out", direction="Output")]),
                NodeDto(id="b", type_id="Custom", ports=[PortDto(id="pb", name="in")]),
            ],
            edges=[EdgeDto(id="e", from_node_id="a", from_port_id="out",
                           to_node_id="b", to_port_id="in", user_data='{"weight":')],
        ))
        target = Graph()
        target.insert_node(Node("keep", "Existing"))

        with pytest.raises(JsonFormatError):
            serializer.import_into(target, document)

        assert [n.id for n in target.nodes] == ["keep"]
        assert target.edges == ()

    def test_duplicate_node_ids_rejected(self, serializer):
        """Test a document listing one node id twice is refused whole."""
        document = codec.serialize(GraphDto(nodes=[NodeDto(id="n"), NodeDto(id="n")]))
        target = Graph()

        with pytest.raises(ValueError, match="duplicate node ids"):
            serializer.import_into(target, document)
        assert target.nodes == ()

    def test_blank_clipboard(self, serializer):
        """Test pasting blank text is a format error."""
        with pytest.raises(JsonFormatError):
            serializer.import_into(Graph(), "   ")

    def test_import_logged(self, serializer, sample_graph, caplog):
        """Test a completed paste logs a summary."""
        clip = serializer.export_subset(sample_graph, [n.id for n in sample_graph.nodes])

        with caplog.at_level(logging.INFO, logger="NodeGraph"):
            serializer.import_into(Graph(), clip)

        assert "Imported 4 nodes, 2 edges" in caplog.text


class TestFiles:
    """Test save_to_file / load_from_file."""

    def test_save_and_load(self, serializer, sample_graph, tmp_path):
        """Test a graph written to disk loads back."""
        path = tmp_path / "graph.json"

        serializer.save_to_file(str(path), sample_graph)
        loaded = serializer.load_from_file(str(path))

        assert path.read_text(encoding="utf-8").startswith('{"id":')
        assert edge_signature(loaded) == edge_signature(sample_graph)

    def test_unicode_content(self, serializer, tmp_path):
        """Test non-ASCII text is stored as UTF-8."""
        graph = Graph()
        graph.create_comment("Größe → 合計")
        path = tmp_path / "unicode.json"

        serializer.save_to_file(str(path), graph)

        assert serializer.load_from_file(str(path)).comments[0].text == "Größe → 合計"

    def test_missing_file(self, serializer, tmp_path, caplog):
        """Test loading a missing file raises and logs an error."""
        with pytest.raises(OSError):
            serializer.load_from_file(str(tmp_path / "absent.json"))

        assert "Load failed" in caplog.text

    def test_unwritable_path(self, serializer, sample_graph, tmp_path):
        """Test saving into a missing directory raises."""
        with pytest.raises(OSError):
            serializer.save_to_file(str(tmp_path / "no" / "such" / "dir.json"), sample_graph)
