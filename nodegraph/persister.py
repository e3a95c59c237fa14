# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

persister.py - Graph <-> GraphDto conversion
--------------------------------------------
``GraphPersister`` is the only place that knows both the in-memory model
and the document records.

Capture:
    - Stamps ``CURRENT_SCHEMA_VERSION``.
    - Omits a node's ports when a type provider knows its type and the node
      has no ad-hoc ports; restore regenerates them from the definition.
    - Stores edge endpoints as (owning node id, semantic port id).
    - Flattens decoration bounds into position + size vectors.

Restore:
    - Rejects documents below ``MIN_SCHEMA_VERSION`` with
      ``SchemaVersionError`` before anything is built.
    - Rebuilds ports from the type definition (fresh ids) or verbatim.
    - Binds edges by semantic port id; an edge that does not resolve is
      dropped and reported to a diagnostics sink.

``restore`` and ``restore_with_diagnostics`` share ``_rebuild``; only the
sink differs, so both produce identical graphs for the same input.

The ``build_*`` / ``bind_edge`` helpers are public so the import façade can
reuse them on id-remapped records.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Type, TypeVar

from PySide6.QtCore import QPointF, QRectF, QSizeF

from nodegraph.core.color import Color4
from nodegraph.core.decoration import GraphComment, NodeGroup, SubGraphFrame
from nodegraph.core.edge import Edge
from nodegraph.core.graph import Graph
from nodegraph.core.ids import new_id
from nodegraph.core.node import Node, NodeDisplayMode
from nodegraph.core.port import Port, PortCapacity, PortDirection, PortKind
from nodegraph.core.settings import GraphSettings, GraphTopologyPolicy
from nodegraph.dto import (
    Color4Dto, CommentDto, EdgeDto, GraphDto, GraphSettingsDto, GroupDto,
    NodeDto, PortDto, SubGraphFrameDto, Vec2Dto,
)
from nodegraph.noderegistry import NodeTypeProvider, NodeTypeRegistry
from nodegraph.portutils import PortUtils
from nodegraph.userdata import edge_data_codec, node_data_codec

from nodegraph.logger import get_logger
log = get_logger("Persister")

E = TypeVar("E", bound=Enum)


class SchemaVersionError(ValueError):
    """Document is older than the oldest schema this persister can read."""

    def __init__(self, found: int, minimum: int) -> None:
        self.found = found
        self.minimum = minimum
        super().__init__(
            f"Unsupported schema version {found} (minimum supported is {minimum}); "
            f"migrate the document to version {minimum} or later before loading it")


@dataclass
class RestoreResult:
    """Graph plus the edges that could not be bound during restore."""
    graph: Graph
    skipped_edge_ids: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


# ==========================================================================
# DIAGNOSTICS SINKS
# ==========================================================================

def _describe_skip(dto: EdgeDto) -> str:
    return (f"Edge {dto.id} skipped: port not found "
            f"(from={dto.from_node_id}/{dto.from_port_id}, "
            f"to={dto.to_node_id}/{dto.to_port_id})")


class _NullSink:
    """Plain restore: dropped edges only reach the debug log."""

    def edge_skipped(self, dto: EdgeDto) -> None:
        log.debug(_describe_skip(dto))


class _CollectingSink:
    def __init__(self) -> None:
        self.skipped_edge_ids: List[str] = []
        self.warnings: List[str] = []

    def edge_skipped(self, dto: EdgeDto) -> None:
        message = _describe_skip(dto)
        log.warning(message)
        self.skipped_edge_ids.append(dto.id)
        self.warnings.append(message)


# ==========================================================================
# VALUE CONVERSION
# ==========================================================================

def point_to_vec(point: QPointF) -> Vec2Dto:
    return Vec2Dto(point.x(), point.y())


def size_to_vec(size: QSizeF) -> Vec2Dto:
    return Vec2Dto(size.width(), size.height())


def vec_to_point(vec: Vec2Dto) -> QPointF:
    return QPointF(vec.x, vec.y)


def vec_to_size(vec: Vec2Dto) -> QSizeF:
    return QSizeF(vec.x, vec.y)


def rect_from_vecs(position: Vec2Dto, size: Vec2Dto) -> QRectF:
    return QRectF(position.x, position.y, size.x, size.y)


def color_to_dto(color: Color4) -> Color4Dto:
    return Color4Dto(color.r, color.g, color.b, color.a)


def dto_to_color(dto: Color4Dto) -> Color4:
    return Color4(dto.r, dto.g, dto.b, dto.a)


def parse_enum(enum_type: Type[E], tag: str, default: E) -> E:
    """Map a document tag to ``enum_type``; unknown tags yield ``default``."""
    try:
        return enum_type(tag)
    except ValueError:
        log.warning(f"Unknown {enum_type.__name__} '{tag}', using '{default.value}'")
        return default


# ==========================================================================
# PERSISTER
# ==========================================================================

class GraphPersister:
    """
    Converts between ``Graph`` and ``GraphDto``.

    Stateless; one instance can serve any number of graphs. The user-data
    codec and type provider are optional collaborators passed per call.
    """

    CURRENT_SCHEMA_VERSION = 2
    MIN_SCHEMA_VERSION = 2

    # =======================================================================
    # CAPTURE
    # =======================================================================

    def capture(self,
                graph: Graph,
                user_data_codec: object = None,
                type_provider: Optional[NodeTypeProvider] = None) -> GraphDto:
        """
        Snapshot ``graph`` into a fresh ``GraphDto``.

        Args:
            graph:           Graph to capture. Not modified.
            user_data_codec: Object implementing ``NodeDataCodec`` and/or
                             ``EdgeDataCodec``; user data without a matching
                             capability is not written.
            type_provider:   Enables port omission for nodes of known types.

        Returns:
            A new ``GraphDto`` stamped with ``CURRENT_SCHEMA_VERSION``.
        """
        dto = GraphDto(
            id=graph.id,
            schema_version=self.CURRENT_SCHEMA_VERSION,
            settings=GraphSettingsDto(topology=graph.settings.topology.value),
        )

        for node in graph.nodes:
            dto.nodes.append(self.capture_node(node, user_data_codec, type_provider))
        for edge in graph.edges:
            dto.edges.append(self.capture_edge(graph, edge, user_data_codec))

        for group in graph.groups:
            bounds = group.bounds
            dto.groups.append(GroupDto(
                id=group.id,
                title=group.title,
                position=point_to_vec(bounds.topLeft()),
                size=size_to_vec(bounds.size()),
                color=color_to_dto(group.color),
                node_ids=sorted(group.contained_node_ids),
            ))

        for comment in graph.comments:
            bounds = comment.bounds
            dto.comments.append(CommentDto(
                id=comment.id,
                text=comment.text,
                position=point_to_vec(bounds.topLeft()),
                size=size_to_vec(bounds.size()),
                font_size=comment.font_size,
                text_color=color_to_dto(comment.text_color),
                background_color=color_to_dto(comment.background_color),
            ))

        for frame in graph.sub_graph_frames:
            bounds = frame.bounds
            dto.sub_graph_frames.append(SubGraphFrameDto(
                id=frame.id,
                title=frame.title,
                position=point_to_vec(bounds.topLeft()),
                size=size_to_vec(bounds.size()),
                node_ids=sorted(frame.contained_node_ids),
                representative_node_id=frame.representative_node_id,
                is_collapsed=frame.is_collapsed,
                source_asset_id=frame.source_asset_id,
            ))

        log.info(f"Captured graph {graph.id}: {len(dto.nodes)} nodes, {len(dto.edges)} edges")
        return dto

    def capture_node(self,
                     node: Node,
                     user_data_codec: object = None,
                     type_provider: Optional[NodeTypeProvider] = None) -> NodeDto:
        dto = NodeDto(
            id=node.id,
            type_id=node.type_id,
            position=point_to_vec(node.position),
            size=size_to_vec(node.size),
            display_mode=node.display_mode.value,
            allow_dynamic_ports=node.allow_dynamic_ports,
        )

        omit_ports = (type_provider is not None
                      and not node.allow_dynamic_ports
                      and type_provider.get_node_type(node.type_id) is not None)
        if not omit_ports:
            dto.ports = [self._capture_port(port) for port in PortUtils.sorted_ports(node)]

        node_codec = node_data_codec(user_data_codec)
        if node.user_data is not None and node_codec is not None:
            dto.user_data = node_codec.serialize_node_data(node.user_data)
        return dto

    @staticmethod
    def _capture_port(port: Port) -> PortDto:
        return PortDto(
            id=port.id,
            name=port.name,
            semantic_id=port.semantic_id,
            direction=port.direction.value,
            kind=port.kind.value,
            data_type=port.data_type,
            capacity=port.capacity.value,
            sort_order=port.sort_order,
        )

    def capture_edge(self, graph: Graph, edge: Edge, user_data_codec: object = None) -> EdgeDto:
        from_node_id, from_port_id = PortUtils.endpoint_of(graph, edge.source_port_id)
        to_node_id, to_port_id = PortUtils.endpoint_of(graph, edge.target_port_id)
        dto = EdgeDto(
            id=edge.id,
            from_node_id=from_node_id,
            from_port_id=from_port_id,
            to_node_id=to_node_id,
            to_port_id=to_port_id,
        )
        edge_codec = edge_data_codec(user_data_codec)
        if edge.user_data is not None and edge_codec is not None:
            dto.user_data = edge_codec.serialize_edge_data(edge.user_data)
        return dto

    # =======================================================================
    # RESTORE
    # =======================================================================

    def restore(self,
                dto: GraphDto,
                user_data_codec: object = None,
                type_provider: Optional[NodeTypeProvider] = None) -> Graph:
        """
        Rebuild a graph from ``dto``. Edges that do not resolve are dropped
        without error.

        Raises:
            SchemaVersionError: If ``dto.schema_version`` is below
                                ``MIN_SCHEMA_VERSION``.
        """
        return self._rebuild(dto, user_data_codec, type_provider, _NullSink())

    def restore_with_diagnostics(self,
                                 dto: GraphDto,
                                 user_data_codec: object = None,
                                 type_provider: Optional[NodeTypeProvider] = None) -> RestoreResult:
        """
        Same reconstruction as ``restore``; additionally reports every
        dropped edge id with one warning line each.
        """
        sink = _CollectingSink()
        graph = self._rebuild(dto, user_data_codec, type_provider, sink)
        return RestoreResult(graph, sink.skipped_edge_ids, sink.warnings)

    def check_version(self, dto: GraphDto) -> None:
        if dto.schema_version < self.MIN_SCHEMA_VERSION:
            raise SchemaVersionError(dto.schema_version, self.MIN_SCHEMA_VERSION)

    def _rebuild(self, dto: GraphDto, user_data_codec, type_provider, sink) -> Graph:
        self.check_version(dto)

        topology = parse_enum(GraphTopologyPolicy, dto.settings.topology, GraphTopologyPolicy.DAG)
        registry = type_provider if isinstance(type_provider, NodeTypeRegistry) else None
        graph = Graph(GraphSettings(topology, registry), id=dto.id or None)

        for node_dto in dto.nodes:
            graph.insert_node(self.build_node(node_dto, user_data_codec, type_provider))

        skipped = 0
        for edge_dto in dto.edges:
            edge = self.bind_edge(graph, edge_dto, user_data_codec)
            if edge is None:
                sink.edge_skipped(edge_dto)
                skipped += 1
            else:
                graph.insert_edge(edge)

        for group_dto in dto.groups:
            graph.insert_group(self.build_group(group_dto))
        for comment_dto in dto.comments:
            graph.insert_comment(self.build_comment(comment_dto))
        for frame_dto in dto.sub_graph_frames:
            graph.insert_sub_graph_frame(self.build_frame(frame_dto))

        log.info(f"Restored graph {graph.id}: {len(graph.nodes)} nodes, "
                 f"{len(graph.edges)} edges ({skipped} skipped)")
        return graph

    # -- Builders -----------------------------------------------------------

    def build_node(self,
                   dto: NodeDto,
                   user_data_codec: object = None,
                   type_provider: Optional[NodeTypeProvider] = None) -> Node:
        """
        Build a detached node from ``dto``.

        Ports come from the type definition (with fresh ids) when the node
        has no ad-hoc ports and the provider knows its type; otherwise they
        are copied from the record, ``semantic_id`` defaulting to ``name``.
        """
        node = Node(dto.id or new_id(), dto.type_id, vec_to_point(dto.position), vec_to_size(dto.size))
        node.display_mode = parse_enum(NodeDisplayMode, dto.display_mode, NodeDisplayMode.EXPANDED)
        node.allow_dynamic_ports = dto.allow_dynamic_ports

        type_def = None
        if type_provider is not None and not dto.allow_dynamic_ports:
            type_def = type_provider.get_node_type(dto.type_id)

        if type_def is not None:
            for port_def in type_def.default_ports:
                node.add_port(port_def)
        else:
            for port_dto in dto.ports:
                node.insert_port(self._build_port(node.id, port_dto))

        node_codec = node_data_codec(user_data_codec)
        if dto.user_data is not None and node_codec is not None:
            node.user_data = node_codec.deserialize_node_data(dto.type_id, dto.user_data)
        return node

    @staticmethod
    def _build_port(node_id: str, dto: PortDto) -> Port:
        return Port(
            dto.id or new_id(),
            node_id,
            dto.name,
            direction=parse_enum(PortDirection, dto.direction, PortDirection.INPUT),
            kind=parse_enum(PortKind, dto.kind, PortKind.DATA),
            data_type=dto.data_type,
            capacity=parse_enum(PortCapacity, dto.capacity, PortCapacity.MULTIPLE),
            sort_order=dto.sort_order,
            semantic_id=dto.semantic_id or dto.name,
        )

    def bind_edge(self, graph: Graph, dto: EdgeDto, user_data_codec: object = None) -> Optional[Edge]:
        """
        Resolve both endpoints of ``dto`` against ``graph`` by
        (node id, semantic port id). Returns ``None`` if either side is
        missing; the edge is not inserted.
        """
        source = PortUtils.find_by_semantic_id(graph, dto.from_node_id, dto.from_port_id)
        target = PortUtils.find_by_semantic_id(graph, dto.to_node_id, dto.to_port_id)
        if source is None or target is None:
            return None

        edge = Edge(dto.id or new_id(), source.id, target.id)
        edge_codec = edge_data_codec(user_data_codec)
        if dto.user_data is not None and edge_codec is not None:
            edge.user_data = edge_codec.deserialize_edge_data(dto.user_data)
        return edge

    @staticmethod
    def build_group(dto: GroupDto) -> NodeGroup:
        group = NodeGroup(dto.id or new_id(), dto.title, dto.node_ids,
                          rect_from_vecs(dto.position, dto.size))
        group.color = dto_to_color(dto.color)
        return group

    @staticmethod
    def build_comment(dto: CommentDto) -> GraphComment:
        comment = GraphComment(dto.id or new_id(), dto.text, rect_from_vecs(dto.position, dto.size))
        comment.font_size = dto.font_size
        comment.text_color = dto_to_color(dto.text_color)
        comment.background_color = dto_to_color(dto.background_color)
        return comment

    @staticmethod
    def build_frame(dto: SubGraphFrameDto) -> SubGraphFrame:
        frame = SubGraphFrame(dto.id or new_id(), dto.title, dto.representative_node_id,
                              dto.node_ids, rect_from_vecs(dto.position, dto.size))
        frame.is_collapsed = dto.is_collapsed
        frame.source_asset_id = dto.source_asset_id
        return frame
