# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

logger.py - Centralized Logging for the persistence layer
--------------------------------------------------------
Provides per-module loggers backed by Python's standard ``logging``
library, with a callback bridge so log messages can be piped into a
host editor's log panel.

Quick Start::

    from nodegraph.logger import get_logger
    log = get_logger("Persister")

    log.info(f"Restored {count} nodes")
    log.warning(f"Edge {edge_id} dropped")

All loggers are children of the root ``"NodeGraph"`` logger, so a
single handler attached at the root controls all output.

Log Levels (as used by this package):
    DEBUG   : Per-entity detail (silently dropped edges, skipped keys)
    INFO    : Completed capture / restore / import / save / load
    WARNING : Recoverable issues (diagnosed edge drops, unknown enum tags)
    ERROR   : Failed file I/O
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, List, Callable

# ==============================================================================
# ROOT LOGGER NAME
# ==============================================================================

ROOT_LOGGER_NAME = "NodeGraph"

# ==============================================================================
# CUSTOM FORMATTER
# ==============================================================================

class GraphLogFormatter(logging.Formatter):
    """
    Compact ``[Module] LEVEL message`` formatter, with an optional
    timestamp for file output.

    Console output::

        [Persister] INFO  Restored graph 3f2a...: 4 nodes, 3 edges

    File output (with timestamp)::

        2026-02-21 14:30:05 [Serializer] INFO  Saved to: my_graph.json
    """

    CONSOLE_FMT = "[%(module_tag)s] %(levelname)-5s %(message)s"
    FILE_FMT    = "%(asctime)s [%(module_tag)s] %(levelname)-5s %(message)s"

    def __init__(self, use_timestamp: bool = False) -> None:
        fmt = self.FILE_FMT if use_timestamp else self.CONSOLE_FMT
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        # Logger name is "NodeGraph.Persister" → "Persister"
        if not hasattr(record, "module_tag"):
            record.module_tag = record.name.rsplit(".", 1)[-1]
        return super().format(record)


# ==============================================================================
# CALLBACK BRIDGE
# ==============================================================================

_callback_handler: Optional[logging.Handler] = None


class _CallbackHandler(logging.Handler):
    """
    Logging handler that forwards records to a list of callbacks.

    The callbacks receive ``(level: str, module_tag: str, message: str)``.
    """

    def __init__(self) -> None:
        super().__init__()
        self._callbacks: List[Callable] = []

    def add_callback(self, fn: Callable) -> None:
        if fn not in self._callbacks:
            self._callbacks.append(fn)

    def remove_callback(self, fn: Callable) -> None:
        try:
            self._callbacks.remove(fn)
        except ValueError:
            pass

    def emit(self, record: logging.LogRecord) -> None:
        if not self._callbacks:
            return
        try:
            msg = self.format(record)
            tag = getattr(record, "module_tag", record.name.rsplit(".", 1)[-1])
            level = record.levelname
            for cb in list(self._callbacks):
                cb(level, tag, msg)
        except Exception:
            self.handleError(record)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_logger(module_tag: str) -> logging.Logger:
    """
    Get a named logger for a specific module / component.

    Args:
        module_tag: Short identifier (e.g. ``"Persister"``, ``"Codec"``).
                    Appears in log output as ``[Persister]``.

    Returns:
        A ``logging.Logger`` that is a child of the root ``NodeGraph`` logger.
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_tag}")


def setup_logging(
    level: int = logging.INFO,
    stream=None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root NodeGraph logger.

    Call this **once** at application startup. If never called, Python's
    default behaviour applies (WARNING+ to stderr).

    Args:
        level:    Minimum log level (``logging.DEBUG``, ``logging.INFO``, etc.).
        stream:   Output stream for console handler (default ``sys.stdout``).
        log_file: Optional path to a log file.  If provided, a file handler
                  with timestamps is added alongside the console handler.

    Returns:
        The root ``NodeGraph`` logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    # Avoid duplicate handlers on repeated calls
    if not any(h is not _callback_handler for h in root.handlers):
        console = logging.StreamHandler(stream or sys.stdout)
        console.setLevel(level)
        console.setFormatter(GraphLogFormatter(use_timestamp=False))
        root.addHandler(console)

        if log_file:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(GraphLogFormatter(use_timestamp=True))
            root.addHandler(fh)

    return root


def set_log_level(level: int) -> None:
    """Change the log level of the root logger and all its handlers."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)


def add_log_callback(fn: Callable) -> None:
    """
    Register a callback to receive all log messages.

    The callback signature is ``fn(level: str, module_tag: str, message: str)``.

    Args:
        fn: Callable to invoke for each log record.
    """
    global _callback_handler
    root = logging.getLogger(ROOT_LOGGER_NAME)

    if _callback_handler is None:
        _callback_handler = _CallbackHandler()
        _callback_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(_callback_handler)

    _callback_handler.add_callback(fn)


def remove_log_callback(fn: Callable) -> None:
    """Remove a previously registered log callback."""
    if _callback_handler is not None:
        _callback_handler.remove_callback(fn)
