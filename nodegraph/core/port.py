# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Port model.

A port has two identities:
    - ``id``: a generated uuid, unique in the graph, regenerated freely.
    - ``semantic_id``: a stable logical name, unique within its node.
      Edges are persisted against the semantic id so they survive
      regeneration of the physical ids.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PortDirection(Enum):
    INPUT = "Input"
    OUTPUT = "Output"


class PortKind(Enum):
    """Control flow, data flow, or asynchronous event flow."""
    CONTROL = "Control"
    DATA = "Data"
    EVENT = "Event"


class PortCapacity(Enum):
    SINGLE = "Single"
    MULTIPLE = "Multiple"


@dataclass(frozen=True)
class PortDefinition:
    """
    Port template, as declared by a node type's default port list.

    ``semantic_id`` defaults to ``name`` when left empty.
    """
    name: str
    direction: PortDirection
    kind: PortKind = PortKind.CONTROL
    data_type: str = "exec"
    capacity: PortCapacity = PortCapacity.MULTIPLE
    sort_order: int = 0
    semantic_id: str = ""

    def __post_init__(self) -> None:
        if not self.semantic_id:
            object.__setattr__(self, "semantic_id", self.name)


class Port:
    """A port instance owned by exactly one node (``node_id``)."""

    __slots__ = (
        'id',
        'node_id',
        'name',
        'semantic_id',
        'direction',
        'kind',
        'data_type',
        'capacity',
        'sort_order',
    )

    def __init__(self,
                 id: str,
                 node_id: str,
                 name: str,
                 direction: PortDirection = PortDirection.INPUT,
                 kind: PortKind = PortKind.DATA,
                 data_type: str = "",
                 capacity: PortCapacity = PortCapacity.MULTIPLE,
                 sort_order: int = 0,
                 semantic_id: Optional[str] = None) -> None:
        self.id = id
        self.node_id = node_id
        self.name = name
        self.semantic_id = semantic_id or name
        self.direction = direction
        self.kind = kind
        self.data_type = data_type
        self.capacity = capacity
        self.sort_order = sort_order

    @classmethod
    def from_definition(cls, id: str, node_id: str, definition: PortDefinition) -> 'Port':
        return cls(
            id, node_id, definition.name,
            direction=definition.direction,
            kind=definition.kind,
            data_type=definition.data_type,
            capacity=definition.capacity,
            sort_order=definition.sort_order,
            semantic_id=definition.semantic_id,
        )

    @property
    def is_output(self) -> bool:
        return self.direction is PortDirection.OUTPUT

    def __repr__(self) -> str:
        return (f"Port({self.semantic_id}, {self.direction.value}, "
                f"{self.kind.value}, {self.data_type})")
