# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Non-topological canvas elements.

    GraphDecoration            bounds only
    ├── GraphContainer         title + contained node ids
    │   ├── NodeGroup          visual grouping with a colour
    │   └── SubGraphFrame      representative node, collapse state, source asset
    └── GraphComment           free text block
"""

from typing import Iterable, Optional, Set

from PySide6.QtCore import QRectF

from nodegraph.core.color import Color4


class GraphDecoration:
    """Base for canvas elements that take part in layout but not in links."""

    def __init__(self, id: str, bounds: Optional[QRectF] = None) -> None:
        if not id:
            raise ValueError("Decoration id must be a non-empty string")
        self.id = id
        self._bounds = QRectF(bounds) if bounds is not None else QRectF()

    @property
    def bounds(self) -> QRectF:
        return QRectF(self._bounds)

    @bounds.setter
    def bounds(self, value: QRectF) -> None:
        self._bounds = QRectF(value)


class GraphContainer(GraphDecoration):
    """A decoration that owns a set of node ids."""

    def __init__(self, id: str, title: str,
                 node_ids: Optional[Iterable[str]] = None,
                 bounds: Optional[QRectF] = None) -> None:
        super().__init__(id, bounds)
        self.title = title
        self.contained_node_ids: Set[str] = set(node_ids or ())

    def fit_to_nodes(self, graph, padding: float = 20.0, title_height: float = 24.0) -> None:
        """Resize ``bounds`` to enclose the contained nodes plus padding."""
        rect = QRectF()
        for node_id in self.contained_node_ids:
            node = graph.find_node(node_id)
            if node is not None:
                rect = rect.united(node.bounds()) if not rect.isNull() else node.bounds()
        if rect.isNull():
            return
        self._bounds = rect.adjusted(-padding, -padding - title_height, padding, padding)


class NodeGroup(GraphContainer):
    """Purely visual grouping; no behaviour attached."""

    DEFAULT_COLOR = Color4(0.3, 0.5, 0.8, 0.3)

    def __init__(self, id: str, title: str,
                 node_ids: Optional[Iterable[str]] = None,
                 bounds: Optional[QRectF] = None) -> None:
        super().__init__(id, title, node_ids, bounds)
        self.color: Color4 = self.DEFAULT_COLOR


class SubGraphFrame(GraphContainer):
    """
    Sub-graph container.

    ``representative_node_id`` points at a real node carrying the frame's
    boundary ports; it is what links attach to while the frame is collapsed.
    ``source_asset_id`` records the reusable template the frame was
    instantiated from, if any.
    """

    def __init__(self, id: str, title: str, representative_node_id: str,
                 node_ids: Optional[Iterable[str]] = None,
                 bounds: Optional[QRectF] = None) -> None:
        super().__init__(id, title, node_ids, bounds)
        self.representative_node_id = representative_node_id
        self.is_collapsed = False
        self.source_asset_id: Optional[str] = None


class GraphComment(GraphDecoration):
    DEFAULT_TEXT_COLOR = Color4(1.0, 1.0, 1.0, 1.0)
    DEFAULT_BACKGROUND_COLOR = Color4(0.2, 0.2, 0.2, 0.7)

    def __init__(self, id: str, text: str, bounds: Optional[QRectF] = None) -> None:
        super().__init__(id, bounds)
        self.text = text
        self.font_size = 14.0
        self.text_color = self.DEFAULT_TEXT_COLOR
        self.background_color = self.DEFAULT_BACKGROUND_COLOR
