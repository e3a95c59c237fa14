# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Graph - the aggregate root.

Owns nodes, edges, groups, comments and sub-graph frames, each keyed by id.
Keeps two indexes current as ports come and go:

    _port_map    port id  -> Port        (O(1) find_port)
    _port_edges  port id  -> [Edge, ...] (O(1) edges_for_port)

The ``insert_*`` methods attach prebuilt elements and are what restore and
import use; the remaining editing methods build elements themselves.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

from PySide6.QtCore import QRectF

from nodegraph.core.decoration import GraphComment, NodeGroup, SubGraphFrame
from nodegraph.core.edge import Edge
from nodegraph.core.ids import new_id
from nodegraph.core.node import Node, PointLike, to_point
from nodegraph.core.port import Port, PortCapacity, PortDirection
from nodegraph.core.settings import GraphSettings, GraphTopologyPolicy

from nodegraph.logger import get_logger
log = get_logger("Graph")


class Graph:
    """
    In-memory node graph.

    Args:
        settings: Topology policy and node-type registry.
        id:       Graph id; a fresh uuid when omitted.
    """

    def __init__(self, settings: Optional[GraphSettings] = None, id: Optional[str] = None) -> None:
        self.id = id or new_id()
        self.settings = settings or GraphSettings()

        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        self._groups: Dict[str, NodeGroup] = {}
        self._comments: Dict[str, GraphComment] = {}
        self._frames: Dict[str, SubGraphFrame] = {}

        self._port_map: Dict[str, Port] = {}
        self._port_edges: Dict[str, List[Edge]] = {}

    # ==========================================================================
    # READ-ONLY VIEWS
    # ==========================================================================

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return tuple(self._edges.values())

    @property
    def groups(self) -> Tuple[NodeGroup, ...]:
        return tuple(self._groups.values())

    @property
    def comments(self) -> Tuple[GraphComment, ...]:
        return tuple(self._comments.values())

    @property
    def sub_graph_frames(self) -> Tuple[SubGraphFrame, ...]:
        return tuple(self._frames.values())

    # ==========================================================================
    # NODES
    # ==========================================================================

    def add_node(self, type_id: str, position: PointLike = (0.0, 0.0)) -> Node:
        """
        Create a node of ``type_id``; ports and default data come from the
        registry definition when the type is known.
        """
        node_id = new_id()
        while node_id in self._nodes:
            node_id = new_id()

        node = Node(node_id, type_id, position)
        type_def = self.settings.node_types.get_node_type(type_id)
        if type_def is not None:
            node.allow_dynamic_ports = type_def.allow_dynamic_ports
            for port_def in type_def.default_ports:
                node.add_port(port_def)
            if type_def.create_default_data is not None:
                node.user_data = type_def.create_default_data()
        else:
            log.debug(f"add_node: type '{type_id}' is not registered, node has no ports")

        self.insert_node(node)
        return node

    def insert_node(self, node: Node) -> None:
        """Attach a prebuilt node. Raises ``ValueError`` on an id collision."""
        if node.id in self._nodes:
            raise ValueError(f"Duplicate node id {node.id}")
        for port in node.ports:
            if port.id in self._port_map:
                raise ValueError(f"Duplicate port id {port.id}")

        self._nodes[node.id] = node
        for port in node.ports:
            self._port_map[port.id] = port
        node.add_port_listener(self._on_port_event)

    def remove_node(self, node_id: str) -> bool:
        """Remove a node with its attached edges and container memberships."""
        node = self._nodes.get(node_id)
        if node is None:
            return False

        for edge in self.edges_for_node(node_id):
            self._remove_edge(edge)

        for group in self._groups.values():
            group.contained_node_ids.discard(node_id)
        for frame in self._frames.values():
            frame.contained_node_ids.discard(node_id)

        node.remove_port_listener(self._on_port_event)
        for port in node.ports:
            self._port_map.pop(port.id, None)
            self._port_edges.pop(port.id, None)
        del self._nodes[node_id]
        return True

    def find_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def find_port(self, port_id: str) -> Optional[Port]:
        return self._port_map.get(port_id)

    def _on_port_event(self, event: str, port: Port) -> None:
        if event == "added":
            self._port_map[port.id] = port
        elif event == "removed":
            for edge in list(self._port_edges.get(port.id, ())):
                self._remove_edge(edge)
            self._port_map.pop(port.id, None)
            self._port_edges.pop(port.id, None)

    # ==========================================================================
    # EDGES
    # ==========================================================================

    def connect(self, source_port_id: str, target_port_id: str) -> Optional[Edge]:
        """
        Link two ports, correcting an input-to-output drag into
        output-to-input.

        A single-capacity target drops its existing edge first. Returns the
        new edge, or ``None`` when the link is rejected (unknown ports, same
        node, same direction, or a cycle under the DAG policy).
        """
        source = self.find_port(source_port_id)
        target = self.find_port(target_port_id)
        if source is None or target is None:
            return None
        if source.node_id == target.node_id or source.direction is target.direction:
            return None

        if source.direction is PortDirection.INPUT:
            source, target = target, source

        if (self.settings.topology is GraphTopologyPolicy.DAG
                and self._reaches(target.node_id, source.node_id)):
            log.debug(f"connect: rejected, {source.node_id} -> {target.node_id} closes a cycle")
            return None

        if target.capacity is PortCapacity.SINGLE:
            for existing in list(self._port_edges.get(target.id, ())):
                if existing.target_port_id == target.id:
                    self._remove_edge(existing)

        edge_id = new_id()
        while edge_id in self._edges:
            edge_id = new_id()
        edge = Edge(edge_id, source.id, target.id)
        self.insert_edge(edge)
        return edge

    def insert_edge(self, edge: Edge) -> None:
        """
        Attach a prebuilt edge.

        Raises:
            ValueError: On an id collision, or if either endpoint is not a
                        port of a node in this graph.
        """
        if edge.id in self._edges:
            raise ValueError(f"Duplicate edge id {edge.id}")
        for port_id in (edge.source_port_id, edge.target_port_id):
            if port_id not in self._port_map:
                raise ValueError(f"Edge {edge.id} references unknown port {port_id}")

        self._edges[edge.id] = edge
        self._port_edges.setdefault(edge.source_port_id, []).append(edge)
        self._port_edges.setdefault(edge.target_port_id, []).append(edge)

    def disconnect(self, edge_id: str) -> bool:
        edge = self._edges.get(edge_id)
        if edge is None:
            return False
        self._remove_edge(edge)
        return True

    def _remove_edge(self, edge: Edge) -> None:
        for port_id in (edge.source_port_id, edge.target_port_id):
            edges = self._port_edges.get(port_id)
            if edges and edge in edges:
                edges.remove(edge)
        self._edges.pop(edge.id, None)

    def find_edge(self, edge_id: str) -> Optional[Edge]:
        return self._edges.get(edge_id)

    def edges_for_port(self, port_id: str) -> Tuple[Edge, ...]:
        return tuple(self._port_edges.get(port_id, ()))

    def edges_for_node(self, node_id: str) -> List[Edge]:
        node = self._nodes.get(node_id)
        if node is None:
            return []
        result: List[Edge] = []
        for port in node.ports:
            for edge in self._port_edges.get(port.id, ()):
                if edge not in result:
                    result.append(edge)
        return result

    def successors(self, node_id: str) -> Set[str]:
        """Ids of nodes reached through this node's output ports."""
        node = self._nodes.get(node_id)
        if node is None:
            return set()
        result = set()
        for port in node.output_ports():
            for edge in self._port_edges.get(port.id, ()):
                target = self._port_map.get(edge.target_port_id)
                if target is not None and target.node_id != node_id:
                    result.add(target.node_id)
        return result

    def predecessors(self, node_id: str) -> Set[str]:
        """Ids of nodes feeding this node's input ports."""
        node = self._nodes.get(node_id)
        if node is None:
            return set()
        result = set()
        for port in node.input_ports():
            for edge in self._port_edges.get(port.id, ()):
                source = self._port_map.get(edge.source_port_id)
                if source is not None and source.node_id != node_id:
                    result.add(source.node_id)
        return result

    def _reaches(self, start_id: str, goal_id: str) -> bool:
        stack = [start_id]
        seen = set()
        while stack:
            current = stack.pop()
            if current == goal_id:
                return True
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self.successors(current))
        return False

    # ==========================================================================
    # DECORATIONS
    # ==========================================================================

    def create_group(self, title: str, node_ids: Optional[Iterable[str]] = None) -> NodeGroup:
        group = NodeGroup(new_id(), title, node_ids)
        group.fit_to_nodes(self)
        self.insert_group(group)
        return group

    def insert_group(self, group: NodeGroup) -> None:
        if group.id in self._groups:
            raise ValueError(f"Duplicate group id {group.id}")
        self._groups[group.id] = group

    def remove_group(self, group_id: str) -> bool:
        """Remove a group; its nodes stay in the graph."""
        return self._groups.pop(group_id, None) is not None

    def find_group(self, group_id: str) -> Optional[NodeGroup]:
        return self._groups.get(group_id)

    def create_comment(self, text: str, position: PointLike = (0.0, 0.0)) -> GraphComment:
        pos = to_point(position)
        comment = GraphComment(new_id(), text, QRectF(pos.x(), pos.y(), 200.0, 80.0))
        self.insert_comment(comment)
        return comment

    def insert_comment(self, comment: GraphComment) -> None:
        if comment.id in self._comments:
            raise ValueError(f"Duplicate comment id {comment.id}")
        self._comments[comment.id] = comment

    def remove_comment(self, comment_id: str) -> bool:
        return self._comments.pop(comment_id, None) is not None

    def find_comment(self, comment_id: str) -> Optional[GraphComment]:
        return self._comments.get(comment_id)

    def insert_sub_graph_frame(self, frame: SubGraphFrame) -> None:
        if frame.id in self._frames:
            raise ValueError(f"Duplicate sub-graph frame id {frame.id}")
        self._frames[frame.id] = frame

    def remove_sub_graph_frame(self, frame_id: str) -> bool:
        """Remove a frame; neither its nodes nor its representative node are removed."""
        return self._frames.pop(frame_id, None) is not None

    def find_sub_graph_frame(self, frame_id: str) -> Optional[SubGraphFrame]:
        return self._frames.get(frame_id)

    def find_container_frame(self, node_id: str) -> Optional[SubGraphFrame]:
        for frame in self._frames.values():
            if node_id in frame.contained_node_ids:
                return frame
        return None

    def __repr__(self) -> str:
        return f"Graph({self.id}: {len(self._nodes)} nodes, {len(self._edges)} edges)"
