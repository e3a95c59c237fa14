# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

serializer.py - Graph import/export façade
------------------------------------------
Turns graphs into document text and back, for files, clipboard copy/paste
and cross-tool exchange. All model conversion is delegated to
``GraphPersister``; this class only adds the text layer and id remapping.

    export_all / import_graph     whole-graph documents
    export_subset / import_into   clipboard-style partial documents

Document shape (schema version 2):
{
    "id": "...", "schemaVersion": 2,
    "settings": { "topology": "DAG" },
    "nodes": [ { "id", "typeId", "position", "size", "displayMode",
                 "allowDynamicPorts", "ports": [...], "userData"? }, ... ],
    "edges": [ { "id", "fromNodeId", "fromPortId",
                 "toNodeId", "toPortId", "userData"? }, ... ],
    "groups": [...], "comments": [...], "subGraphFrames": [...]
}
``fromPortId`` / ``toPortId`` hold semantic port ids.
"""

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from PySide6.QtCore import QPointF

from nodegraph import codec
from nodegraph.codec import JsonFormatError
from nodegraph.core.graph import Graph
from nodegraph.core.ids import new_id
from nodegraph.core.node import Node, PointLike, to_point
from nodegraph.dto import GraphDto, Vec2Dto
from nodegraph.noderegistry import NodeTypeProvider
from nodegraph.persister import GraphPersister, RestoreResult

from nodegraph.logger import get_logger
log = get_logger("Serializer")


def _shift(vec: Vec2Dto, offset: QPointF) -> Vec2Dto:
    return Vec2Dto(vec.x + offset.x(), vec.y + offset.y())


# ===========================================================================
# GRAPH SERIALIZER
# ===========================================================================

class GraphSerializer:
    """
    Document-level entry point.

    Usage:
        serializer = GraphSerializer(user_data_codec=codec, type_provider=registry)

        # Save / load
        text = serializer.export_all(graph)
        graph = serializer.import_graph(text)

        # Copy / paste
        clip = serializer.export_subset(graph, selected_ids)
        pasted = serializer.import_into(graph, clip, (40, 40))
    """

    def __init__(self,
                 user_data_codec: object = None,
                 type_provider: Optional[NodeTypeProvider] = None,
                 persister: Optional[GraphPersister] = None,
                 indent: Optional[int] = None) -> None:
        """
        Args:
            user_data_codec: Node and/or edge user-data codec.
            type_provider:   Node-type lookup used for port omission and
                             regeneration.
            persister:       Custom persister; a ``GraphPersister`` by default.
            indent:          Pretty-print width for written documents
                             (``None`` = compact).
        """
        self.user_data_codec = user_data_codec
        self.type_provider = type_provider
        self.persister = persister or GraphPersister()
        self.indent = indent

    # =======================================================================
    # WHOLE GRAPH
    # =======================================================================

    def export_all(self, graph: Graph) -> str:
        dto = self.persister.capture(graph, self.user_data_codec, self.type_provider)
        return codec.serialize(dto, indent=self.indent)

    def import_graph(self, document: str) -> Graph:
        """
        Raises:
            JsonFormatError:    Malformed or blank document.
            SchemaVersionError: Document older than the supported floor.
            ValueError:         Duplicate node ids or an unbuildable node;
                                ``target`` is left unchanged.
        """
        dto = self._read(document)
        return self.persister.restore(dto, self.user_data_codec, self.type_provider)

    def import_graph_with_diagnostics(self, document: str) -> RestoreResult:
        dto = self._read(document)
        return self.persister.restore_with_diagnostics(dto, self.user_data_codec, self.type_provider)

    def _read(self, document: str) -> GraphDto:
        dto = codec.deserialize(document, GraphDto)
        if dto is None:
            raise JsonFormatError("Empty document", 0)
        return dto

    # =======================================================================
    # PARTIAL DOCUMENTS (copy / paste)
    # =======================================================================

    def export_subset(self, graph: Graph, node_ids: Iterable[str]) -> str:
        """
        Export only the given nodes and the edges running between them.

        The document has an empty graph id and carries the source graph's
        settings.
        """
        selected = set(node_ids)
        full = self.persister.capture(graph, self.user_data_codec, self.type_provider)
        subset = GraphDto(id="", schema_version=full.schema_version, settings=full.settings)
        subset.nodes = [n for n in full.nodes if n.id in selected]
        subset.edges = [e for e in full.edges
                        if e.from_node_id in selected and e.to_node_id in selected]
        log.debug(f"Exported subset: {len(subset.nodes)} nodes, {len(subset.edges)} edges")
        return codec.serialize(subset, indent=self.indent)

    def import_into(self, target: Graph, document: str,
                    offset: PointLike = (0.0, 0.0)) -> List[Node]:
        """
        Paste a document into an existing graph.

        Every node, port and edge gets a fresh id, so nothing collides with
        what ``target`` already holds. Node positions and decoration bounds
        move by ``offset``. Edges re-bind by (remapped node id, semantic
        port id); edges whose endpoints were not imported are dropped.

        Args:
            target:   Graph receiving the new elements.
            document: Text produced by ``export_subset`` or ``export_all``.
            offset:   Translation applied to every imported element.

        Returns:
            The newly created nodes, in document order.

        Raises:
            JsonFormatError:    Malformed or blank document.
            SchemaVersionError: Document older than the supported floor.
            ValueError:         Duplicate node ids or an unbuildable node;
                                ``target`` is left unchanged.
        """
        dto = self._read(document)
        self.persister.check_version(dto)
        shift = to_point(offset)

        id_map: Dict[str, str] = {node_dto.id: new_id() for node_dto in dto.nodes}
        if len(id_map) != len(dto.nodes):
            raise ValueError("Document contains duplicate node ids")

        # Nothing touches ``target`` until every node and decoration is built.

        # -- Nodes ------------------------------------------------------------
        new_nodes: List[Node] = []
        for node_dto in dto.nodes:
            remapped = replace(
                node_dto,
                id=id_map[node_dto.id],
                position=_shift(node_dto.position, shift),
                ports=[replace(port_dto, id=new_id()) for port_dto in node_dto.ports],
            )
            new_nodes.append(
                self.persister.build_node(remapped, self.user_data_codec, self.type_provider))

        # -- Decorations ------------------------------------------------------
        def members(node_ids: List[str]) -> List[str]:
            return [id_map[n] for n in node_ids if n in id_map]

        groups = [self.persister.build_group(replace(
            group_dto, id=new_id(), position=_shift(group_dto.position, shift),
            node_ids=members(group_dto.node_ids))) for group_dto in dto.groups]

        comments = [self.persister.build_comment(replace(
            comment_dto, id=new_id(), position=_shift(comment_dto.position, shift)))
            for comment_dto in dto.comments]

        frames = [self.persister.build_frame(replace(
            frame_dto, id=new_id(), position=_shift(frame_dto.position, shift),
            node_ids=members(frame_dto.node_ids),
            representative_node_id=id_map.get(frame_dto.representative_node_id, "")))
            for frame_dto in dto.sub_graph_frames]

        # -- Commit -----------------------------------------------------------
        inserted: List[Node] = []
        try:
            for node in new_nodes:
                target.insert_node(node)
                inserted.append(node)

            # Edge user data can still fail to decode; the paste is rolled back.
            edge_count = 0
            for edge_dto in dto.edges:
                remapped = replace(
                    edge_dto,
                    id=new_id(),
                    from_node_id=id_map.get(edge_dto.from_node_id, ""),
                    to_node_id=id_map.get(edge_dto.to_node_id, ""),
                )
                edge = self.persister.bind_edge(target, remapped, self.user_data_codec)
                if edge is None:
                    log.debug(f"Import dropped edge {edge_dto.id}: endpoint not among imported nodes")
                    continue
                target.insert_edge(edge)
                edge_count += 1
        except Exception:
            for node in inserted:
                target.remove_node(node.id)
            log.warning(f"Import into graph {target.id} failed, rolled back {len(inserted)} nodes")
            raise

        for group in groups:
            target.insert_group(group)
        for comment in comments:
            target.insert_comment(comment)
        for frame in frames:
            target.insert_sub_graph_frame(frame)

        log.info(f"Imported {len(new_nodes)} nodes, {edge_count} edges into graph {target.id}")
        return new_nodes

    # =======================================================================
    # CONVENIENCE: File I/O
    # =======================================================================

    def save_to_file(self, filepath: str, graph: Graph) -> None:
        """Export ``graph`` and write it to ``filepath`` (UTF-8)."""
        text = self.export_all(graph)
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            log.error(f"Save failed: {e}")
            raise
        log.info(f"Saved to: {filepath}")

    def load_from_file(self, filepath: str) -> Graph:
        """Read ``filepath`` (UTF-8) and import it as a new graph."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            log.error(f"Load failed: {e}")
            raise
        graph = self.import_graph(text)
        log.info(f"Loaded from: {filepath}")
        return graph
