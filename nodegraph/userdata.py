# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

userdata.py - User-data codec capabilities
------------------------------------------
The persistence core never inspects node or edge business data. Hosts
supply a codec implementing one or both capabilities:

    NodeDataCodec   serialize_node_data / deserialize_node_data(type_id, ...)
    EdgeDataCodec   serialize_edge_data / deserialize_edge_data

Each capability is checked independently; a missing one means that kind
of user data is dropped on capture and left ``None`` on restore.

``RecordUserDataCodec`` is the stock implementation: it maps node type ids
to record classes (``NodeData`` subclasses with a ``FIELDS`` table) and
encodes payloads with the structured codec.
"""

from typing import Dict, Optional, Protocol, Type, runtime_checkable

from nodegraph import codec
from nodegraph.core.edge import EdgeData
from nodegraph.core.node import NodeData

from nodegraph.logger import get_logger
log = get_logger("UserData")


@runtime_checkable
class NodeDataCodec(Protocol):
    def serialize_node_data(self, data: NodeData) -> str:
        ...

    def deserialize_node_data(self, type_id: str, payload: str) -> Optional[NodeData]:
        ...


@runtime_checkable
class EdgeDataCodec(Protocol):
    def serialize_edge_data(self, data: EdgeData) -> str:
        ...

    def deserialize_edge_data(self, payload: str) -> Optional[EdgeData]:
        ...


def node_data_codec(candidate: object) -> Optional[NodeDataCodec]:
    """``candidate`` if it offers the node-data capability, else ``None``."""
    return candidate if isinstance(candidate, NodeDataCodec) else None


def edge_data_codec(candidate: object) -> Optional[EdgeDataCodec]:
    """``candidate`` if it offers the edge-data capability, else ``None``."""
    return candidate if isinstance(candidate, EdgeDataCodec) else None


class RecordUserDataCodec:
    """
    Codec for user data declared as codec records.

    Usage::

        @dataclass
        class AddData(NodeData):
            bias: float = 0.0
            FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (FieldSpec("bias", FieldKind.FLOAT),)

        user_codec = RecordUserDataCodec({"Math.Add": AddData})

    Args:
        node_records: Map of node type id -> NodeData record class.
        edge_record:  Record class used for all edge data, if any.
    """

    def __init__(self,
                 node_records: Optional[Dict[str, Type[NodeData]]] = None,
                 edge_record: Optional[Type[EdgeData]] = None) -> None:
        self._node_records: Dict[str, Type[NodeData]] = {}
        self._edge_record: Optional[Type[EdgeData]] = None
        for type_id, record_type in (node_records or {}).items():
            self.register_node_record(type_id, record_type)
        if edge_record is not None:
            self.set_edge_record(edge_record)

    def register_node_record(self, type_id: str, record_type: Type[NodeData]) -> None:
        if not (issubclass(record_type, NodeData) and codec.is_record(record_type)):
            raise TypeError(f"{record_type.__name__} must be a NodeData subclass with a FIELDS table")
        self._node_records[type_id] = record_type

    def set_edge_record(self, record_type: Type[EdgeData]) -> None:
        if not (issubclass(record_type, EdgeData) and codec.is_record(record_type)):
            raise TypeError(f"{record_type.__name__} must be an EdgeData subclass with a FIELDS table")
        self._edge_record = record_type

    # -- Node data ----------------------------------------------------------

    def serialize_node_data(self, data: NodeData) -> str:
        return codec.serialize(data)

    def deserialize_node_data(self, type_id: str, payload: str) -> Optional[NodeData]:
        record_type = self._node_records.get(type_id)
        if record_type is None:
            log.warning(f"No user-data record registered for node type '{type_id}'")
            return None
        return codec.deserialize(payload, record_type)

    # -- Edge data ----------------------------------------------------------

    def serialize_edge_data(self, data: EdgeData) -> str:
        return codec.serialize(data)

    def deserialize_edge_data(self, payload: str) -> Optional[EdgeData]:
        if self._edge_record is None:
            log.debug("Edge user data present but no edge record registered")
            return None
        return codec.deserialize(payload, self._edge_record)
