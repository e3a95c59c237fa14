# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0
"""

import uuid


def new_id() -> str:
    """Fresh globally unique element id (uuid4, canonical hyphenated form)."""
    return str(uuid.uuid4())
