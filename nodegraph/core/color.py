# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Float RGBA colour stored exactly as written to documents.
"""

from typing import NamedTuple

from PySide6.QtGui import QColor


class Color4(NamedTuple):
    """
    Exact float RGBA channels.

    Channels are not clamped, so HDR values above 1.0 survive a load/save
    cycle. ``to_qcolor`` is the lossy view used for painting.
    """
    r: float
    g: float
    b: float
    a: float = 1.0

    def to_qcolor(self) -> QColor:
        # QColor rejects float channels outside 0..1
        return QColor.fromRgbF(*(min(max(float(c), 0.0), 1.0) for c in self))

    @classmethod
    def from_qcolor(cls, color: QColor) -> "Color4":
        return cls(color.redF(), color.greenF(), color.blueF(), color.alphaF())

    def darker(self, factor: float = 2.0) -> "Color4":
        """Scale RGB down by ``factor``; alpha is kept."""
        return Color4(self.r / factor, self.g / factor, self.b / factor, self.a)
