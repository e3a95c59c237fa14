# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

dto.py - Graph Data Transfer Objects
------------------------------------
Primitive-only mirror of the graph model. These records sit between the
in-memory ``Graph`` and any storage format::

    Graph ──capture──▶ GraphDto ──codec──▶ JSON text
          ◀──restore──          ◀──codec──

Field names are the document keys and must stay stable across releases.
A GraphDto is built fresh for every capture and discarded after restore.
"""

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Tuple

from nodegraph.codec import FieldKind, FieldSpec


@dataclass
class Vec2Dto:
    x: float = 0.0
    y: float = 0.0

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("x", FieldKind.FLOAT),
        FieldSpec("y", FieldKind.FLOAT),
    )


@dataclass
class Color4Dto:
    """RGBA with float channels in 0..1."""
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("r", FieldKind.FLOAT),
        FieldSpec("g", FieldKind.FLOAT),
        FieldSpec("b", FieldKind.FLOAT),
        FieldSpec("a", FieldKind.FLOAT),
    )


@dataclass
class GraphSettingsDto:
    topology: str = "DAG"

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("topology", FieldKind.STRING),
    )


@dataclass
class PortDto:
    id: str = ""
    name: str = ""
    semantic_id: str = ""
    direction: str = "Input"
    kind: str = "Data"
    data_type: str = ""
    capacity: str = "Multiple"
    sort_order: int = 0

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("id", FieldKind.STRING),
        FieldSpec("name", FieldKind.STRING),
        FieldSpec("semanticId", FieldKind.STRING, attr="semantic_id"),
        FieldSpec("direction", FieldKind.STRING),
        FieldSpec("kind", FieldKind.STRING),
        FieldSpec("dataType", FieldKind.STRING, attr="data_type"),
        FieldSpec("capacity", FieldKind.STRING),
        FieldSpec("sortOrder", FieldKind.INT, attr="sort_order"),
    )


@dataclass
class NodeDto:
    id: str = ""
    type_id: str = ""
    position: Vec2Dto = field(default_factory=Vec2Dto)
    size: Vec2Dto = field(default_factory=lambda: Vec2Dto(200.0, 100.0))
    display_mode: str = "Expanded"
    allow_dynamic_ports: bool = False
    ports: List[PortDto] = field(default_factory=list)
    user_data: Optional[str] = None

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("id", FieldKind.STRING),
        FieldSpec("typeId", FieldKind.STRING, attr="type_id"),
        FieldSpec("position", FieldKind.RECORD, Vec2Dto),
        FieldSpec("size", FieldKind.RECORD, Vec2Dto),
        FieldSpec("displayMode", FieldKind.STRING, attr="display_mode"),
        FieldSpec("allowDynamicPorts", FieldKind.BOOL, attr="allow_dynamic_ports"),
        FieldSpec("ports", FieldKind.LIST, PortDto),
        FieldSpec("userData", FieldKind.STRING, attr="user_data"),
    )


@dataclass
class EdgeDto:
    """
    Edge endpoints are stored as (owning node id, semantic port id), never
    as physical port ids, so edges re-bind after ports are regenerated.
    """
    id: str = ""
    from_node_id: str = ""
    from_port_id: str = ""
    to_node_id: str = ""
    to_port_id: str = ""
    user_data: Optional[str] = None

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("id", FieldKind.STRING),
        FieldSpec("fromNodeId", FieldKind.STRING, attr="from_node_id"),
        FieldSpec("fromPortId", FieldKind.STRING, attr="from_port_id"),
        FieldSpec("toNodeId", FieldKind.STRING, attr="to_node_id"),
        FieldSpec("toPortId", FieldKind.STRING, attr="to_port_id"),
        FieldSpec("userData", FieldKind.STRING, attr="user_data"),
    )


@dataclass
class GroupDto:
    id: str = ""
    title: str = ""
    position: Vec2Dto = field(default_factory=Vec2Dto)
    size: Vec2Dto = field(default_factory=Vec2Dto)
    color: Color4Dto = field(default_factory=lambda: Color4Dto(0.3, 0.5, 0.8, 0.3))
    node_ids: List[str] = field(default_factory=list)

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("id", FieldKind.STRING),
        FieldSpec("title", FieldKind.STRING),
        FieldSpec("position", FieldKind.RECORD, Vec2Dto),
        FieldSpec("size", FieldKind.RECORD, Vec2Dto),
        FieldSpec("color", FieldKind.RECORD, Color4Dto),
        FieldSpec("nodeIds", FieldKind.LIST, FieldKind.STRING, attr="node_ids"),
    )


@dataclass
class CommentDto:
    id: str = ""
    text: str = ""
    position: Vec2Dto = field(default_factory=Vec2Dto)
    size: Vec2Dto = field(default_factory=lambda: Vec2Dto(200.0, 60.0))
    font_size: float = 14.0
    text_color: Color4Dto = field(default_factory=lambda: Color4Dto(1.0, 1.0, 1.0, 1.0))
    background_color: Color4Dto = field(default_factory=lambda: Color4Dto(0.2, 0.2, 0.2, 0.7))

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("id", FieldKind.STRING),
        FieldSpec("text", FieldKind.STRING),
        FieldSpec("position", FieldKind.RECORD, Vec2Dto),
        FieldSpec("size", FieldKind.RECORD, Vec2Dto),
        FieldSpec("fontSize", FieldKind.FLOAT, attr="font_size"),
        FieldSpec("textColor", FieldKind.RECORD, Color4Dto, attr="text_color"),
        FieldSpec("backgroundColor", FieldKind.RECORD, Color4Dto, attr="background_color"),
    )


@dataclass
class SubGraphFrameDto:
    id: str = ""
    title: str = ""
    position: Vec2Dto = field(default_factory=Vec2Dto)
    size: Vec2Dto = field(default_factory=Vec2Dto)
    node_ids: List[str] = field(default_factory=list)
    representative_node_id: str = ""
    is_collapsed: bool = False
    source_asset_id: Optional[str] = None

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("id", FieldKind.STRING),
        FieldSpec("title", FieldKind.STRING),
        FieldSpec("position", FieldKind.RECORD, Vec2Dto),
        FieldSpec("size", FieldKind.RECORD, Vec2Dto),
        FieldSpec("nodeIds", FieldKind.LIST, FieldKind.STRING, attr="node_ids"),
        FieldSpec("representativeNodeId", FieldKind.STRING, attr="representative_node_id"),
        FieldSpec("isCollapsed", FieldKind.BOOL, attr="is_collapsed"),
        FieldSpec("sourceAssetId", FieldKind.STRING, attr="source_asset_id"),
    )


@dataclass
class GraphDto:
    """Top-level document record."""
    id: str = ""
    schema_version: int = 2
    settings: GraphSettingsDto = field(default_factory=GraphSettingsDto)
    nodes: List[NodeDto] = field(default_factory=list)
    edges: List[EdgeDto] = field(default_factory=list)
    groups: List[GroupDto] = field(default_factory=list)
    comments: List[CommentDto] = field(default_factory=list)
    sub_graph_frames: List[SubGraphFrameDto] = field(default_factory=list)

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("id", FieldKind.STRING),
        FieldSpec("schemaVersion", FieldKind.INT, attr="schema_version"),
        FieldSpec("settings", FieldKind.RECORD, GraphSettingsDto),
        FieldSpec("nodes", FieldKind.LIST, NodeDto),
        FieldSpec("edges", FieldKind.LIST, EdgeDto),
        FieldSpec("groups", FieldKind.LIST, GroupDto),
        FieldSpec("comments", FieldKind.LIST, CommentDto),
        FieldSpec("subGraphFrames", FieldKind.LIST, SubGraphFrameDto, attr="sub_graph_frames"),
    )
