# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0
"""

from typing import Optional


class EdgeData:
    """Base class for business data attached to an edge (e.g. a transition condition)."""


class Edge:
    """A link from a source port (usually an output) to a target port."""

    __slots__ = ('id', 'source_port_id', 'target_port_id', 'user_data')

    def __init__(self, id: str, source_port_id: str, target_port_id: str,
                 user_data: Optional[EdgeData] = None) -> None:
        if not id:
            raise ValueError("Edge id must be a non-empty string")
        self.id = id
        self.source_port_id = source_port_id
        self.target_port_id = target_port_id
        self.user_data = user_data

    def __repr__(self) -> str:
        return f"Edge({self.id}: {self.source_port_id} -> {self.target_port_id})"
