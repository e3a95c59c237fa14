# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Node model.

A node owns its ports and its user data. Ports refer back to the node by
id only; the graph resolves ``node_id`` through its own index.
"""

from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple, Union

from PySide6.QtCore import QPointF, QSizeF, QRectF

from nodegraph.core.ids import new_id
from nodegraph.core.port import Port, PortDefinition, PortDirection

PointLike = Union[QPointF, Tuple[float, float]]
SizeLike = Union[QSizeF, Tuple[float, float]]

# Listener signature: (event, port) with event in {"added", "removed"}
PortListener = Callable[[str, Port], None]


def to_point(value: PointLike) -> QPointF:
    """Copy a QPointF or convert an (x, y) pair."""
    if isinstance(value, QPointF):
        return QPointF(value)
    return QPointF(float(value[0]), float(value[1]))


def to_size(value: SizeLike) -> QSizeF:
    """Copy a QSizeF or convert a (width, height) pair."""
    if isinstance(value, QSizeF):
        return QSizeF(value)
    return QSizeF(float(value[0]), float(value[1]))


class NodeDisplayMode(Enum):
    EXPANDED = "Expanded"    # title + ports + content
    COLLAPSED = "Collapsed"  # title + ports + one summary line
    MINIMIZED = "Minimized"  # single row


class NodeData:
    """
    Base class for business data attached to a node.

    Subclass it (typically as a dataclass) and register a codec for the
    node's type id; the persistence core never inspects the payload.
    """


class Node:
    """
    A node instance: type id, placement, display state, ports and data.

    Args:
        id:       Unique node id within the graph.
        type_id:  Key into the node-type registry.
        position: Canvas position.
        size:     Node size (default 200 x 100).
    """

    DEFAULT_SIZE = (200.0, 100.0)

    def __init__(self,
                 id: str,
                 type_id: str,
                 position: PointLike = (0.0, 0.0),
                 size: Optional[SizeLike] = None) -> None:
        if not id:
            raise ValueError("Node id must be a non-empty string")
        self.id = id
        self.type_id = type_id
        self._position = to_point(position)
        self._size = to_size(size if size is not None else self.DEFAULT_SIZE)
        self.display_mode = NodeDisplayMode.EXPANDED
        self.allow_dynamic_ports = False
        self.user_data: Optional[NodeData] = None
        self._ports: List[Port] = []
        self._port_listeners: List[PortListener] = []

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def position(self) -> QPointF:
        return QPointF(self._position)

    @position.setter
    def position(self, value: PointLike) -> None:
        self._position = to_point(value)

    @property
    def size(self) -> QSizeF:
        return QSizeF(self._size)

    @size.setter
    def size(self, value: SizeLike) -> None:
        self._size = to_size(value)

    def bounds(self) -> QRectF:
        return QRectF(self._position, self._size)

    # ------------------------------------------------------------------
    # Ports
    # ------------------------------------------------------------------

    @property
    def ports(self) -> Tuple[Port, ...]:
        return tuple(self._ports)

    def add_port(self, definition: PortDefinition, port_id: Optional[str] = None) -> Port:
        """Create a port from a definition with a fresh id (or ``port_id``)."""
        port = Port.from_definition(port_id or new_id(), self.id, definition)
        self.insert_port(port)
        return port

    def insert_port(self, port: Port) -> None:
        """
        Attach a fully-built port.

        Raises:
            ValueError: If the port belongs to another node, or its id or
                        semantic id is already used on this node.
        """
        if port.node_id != self.id:
            raise ValueError(f"Port {port.id} belongs to node {port.node_id}, not {self.id}")
        for existing in self._ports:
            if existing.id == port.id:
                raise ValueError(f"Duplicate port id {port.id} on node {self.id}")
            if existing.semantic_id == port.semantic_id:
                raise ValueError(
                    f"Duplicate semantic port id '{port.semantic_id}' on node {self.id}")
        self._ports.append(port)
        self._notify("added", port)

    def remove_port(self, port_id: str) -> bool:
        port = self.find_port(port_id)
        if port is None:
            return False
        self._ports.remove(port)
        self._notify("removed", port)
        return True

    def find_port(self, port_id: str) -> Optional[Port]:
        for port in self._ports:
            if port.id == port_id:
                return port
        return None

    def find_port_by_semantic_id(self, semantic_id: str) -> Optional[Port]:
        for port in self._ports:
            if port.semantic_id == semantic_id:
                return port
        return None

    def input_ports(self) -> Iterator[Port]:
        return (p for p in self._ports if p.direction is PortDirection.INPUT)

    def output_ports(self) -> Iterator[Port]:
        return (p for p in self._ports if p.direction is PortDirection.OUTPUT)

    # ------------------------------------------------------------------
    # Listeners (used by Graph to keep its port index current)
    # ------------------------------------------------------------------

    def add_port_listener(self, fn: PortListener) -> None:
        if fn not in self._port_listeners:
            self._port_listeners.append(fn)

    def remove_port_listener(self, fn: PortListener) -> None:
        try:
            self._port_listeners.remove(fn)
        except ValueError:
            pass

    def _notify(self, event: str, port: Port) -> None:
        for fn in list(self._port_listeners):
            fn(event, port)

    def __repr__(self) -> str:
        return f"Node({self.id}: {self.type_id})"
