# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Project metadata for NodeGraph.
"""

from typing import Final

# Metadata Definitions
__title__: Final[str] = "NodeGraph"
__description__: Final[str] = (
    "Versioned, format-independent persistence for node graphs: "
    "capture, restore, and sub-graph import/export."
)
__version__: Final[str] = "0.2.0"
__author__: Final[str] = "opticsWolf"
__license__: Final[str] = "Apache-2.0"
__copyright__: Final[str] = "Copyright (c) 2026 opticsWolf"
