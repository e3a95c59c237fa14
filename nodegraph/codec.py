# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

codec.py - Structured JSON Codec
--------------------------------
Zero-dependency reader/writer for the closed set of record shapes used by
the persistence layer. It has no knowledge of graph semantics.

Records describe themselves through an explicit field table::

    @dataclass
    class Vec2Dto:
        x: float = 0.0
        y: float = 0.0

        FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
            FieldSpec("x", FieldKind.FLOAT),
            FieldSpec("y", FieldKind.FLOAT),
        )

Writing rules:
    - Keys are emitted in field-table order.
    - A STRING field holding ``None`` is omitted entirely (never ``null``).
    - Floats use the shortest round-trip decimal form (locale-invariant).

Reading rules:
    - Unknown keys are skipped structurally, so newer documents load on
      older code paths.
    - Numbers are coerced to the declared field kind (INT truncates,
      FLOAT widens); valid numeric text never raises, except an exponent
      that overflows an INT field.
    - ``null`` and absent keys leave the record's default in place.
    - Malformed text raises ``JsonFormatError`` naming the position.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from nodegraph.logger import get_logger

log = get_logger("Codec")

T = TypeVar("T")


# ==============================================================================
# ERRORS
# ==============================================================================

class JsonFormatError(ValueError):
    """Malformed document text. ``position`` is the 0-based character index."""

    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"{message} at position {position}")
        self.position = position


# ==============================================================================
# FIELD TABLES
# ==============================================================================

class FieldKind(Enum):
    BOOL = auto()
    INT = auto()
    FLOAT = auto()
    STRING = auto()
    LIST = auto()
    RECORD = auto()


@dataclass(frozen=True)
class FieldSpec:
    """
    One entry of a record's field table.

    Args:
        name: Key used in the document.
        kind: Declared kind of the value.
        item: Element kind (``FieldKind``) or record class for LIST fields,
              the record class for RECORD fields.
        attr: Attribute name on the record, when it differs from ``name``.
    """
    name: str
    kind: FieldKind
    item: Any = None
    attr: Optional[str] = None

    @property
    def attr_name(self) -> str:
        return self.attr or self.name


_SCALAR_KINDS = (FieldKind.BOOL, FieldKind.INT, FieldKind.FLOAT, FieldKind.STRING)

# Cache: record class -> { key: FieldSpec }
_field_table_cache: Dict[type, Dict[str, FieldSpec]] = {}


def is_record(value: Any) -> bool:
    """True if ``value`` (an instance or a class) carries a field table."""
    cls = value if isinstance(value, type) else type(value)
    return isinstance(getattr(cls, "FIELDS", None), tuple)


def field_table(record_type: type) -> Dict[str, FieldSpec]:
    """Return the key -> FieldSpec mapping for a record class."""
    table = _field_table_cache.get(record_type)
    if table is not None:
        return table

    if not is_record(record_type):
        raise TypeError(f"{record_type.__name__} has no FIELDS table")

    table = {}
    for spec in record_type.FIELDS:
        if spec.name in table:
            raise TypeError(f"Duplicate key '{spec.name}' in {record_type.__name__}.FIELDS")
        table[spec.name] = spec
    _field_table_cache[record_type] = table
    return table


# ==============================================================================
# WRITER
# ==============================================================================

_ESCAPES = {
    '"': '\\"',
    '\\': '\\\\',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}


def format_float(value: float) -> str:
    """Shortest decimal text that reads back to exactly ``value``."""
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Cannot serialize non-finite float {value!r}")
    return repr(value)


def _escape_string(text: str) -> str:
    out = ['"']
    for ch in text:
        esc = _ESCAPES.get(ch)
        if esc is not None:
            out.append(esc)
        elif ord(ch) < 0x20:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


class _Writer:
    """Accumulates document text for one ``serialize`` call."""

    def __init__(self, indent: Optional[int]) -> None:
        self._indent = indent
        self._out: List[str] = []

    def text(self) -> str:
        return "".join(self._out)

    # -- Layout -------------------------------------------------------------

    def _newline(self, depth: int) -> None:
        if self._indent is not None:
            self._out.append("\n" + " " * (self._indent * depth))

    def _key_separator(self) -> str:
        return ": " if self._indent is not None else ":"

    # -- Values -------------------------------------------------------------

    def write_value(self, value: Any, depth: int = 0) -> None:
        if value is None:
            self._out.append("null")
        elif isinstance(value, bool):
            self._out.append("true" if value else "false")
        elif isinstance(value, int):
            self._out.append(str(value))
        elif isinstance(value, float):
            self._out.append(format_float(value))
        elif isinstance(value, str):
            self._out.append(_escape_string(value))
        elif isinstance(value, (list, tuple)):
            self._write_array(value, depth)
        elif is_record(value):
            self._write_record(value, depth)
        else:
            raise TypeError(f"Cannot serialize value of type {type(value).__name__}")

    def _write_array(self, items, depth: int) -> None:
        if not items:
            self._out.append("[]")
            return
        self._out.append("[")
        for i, item in enumerate(items):
            if i:
                self._out.append(",")
            self._newline(depth + 1)
            self.write_value(item, depth + 1)
        self._newline(depth)
        self._out.append("]")

    def _write_record(self, record: Any, depth: int) -> None:
        self._out.append("{")
        first = True
        for spec in type(record).FIELDS:
            value = getattr(record, spec.attr_name)
            if value is None and spec.kind is FieldKind.STRING:
                continue

            if not first:
                self._out.append(",")
            first = False
            self._newline(depth + 1)
            self._out.append(_escape_string(spec.name))
            self._out.append(self._key_separator())
            self.write_value(_coerce_for_write(spec, value), depth + 1)

        if not first:
            self._newline(depth)
        self._out.append("}")


def _coerce_for_write(spec: FieldSpec, value: Any) -> Any:
    """Keep written numbers in the field's declared kind."""
    if value is None or isinstance(value, bool):
        return value
    if spec.kind is FieldKind.FLOAT and isinstance(value, int):
        return float(value)
    if spec.kind is FieldKind.INT and isinstance(value, float):
        return int(value)
    return value


def serialize(value: Any, indent: Optional[int] = None) -> str:
    """
    Serialize a record, list or primitive to JSON text.

    Args:
        value:  The value to write.
        indent: Spaces per nesting level; ``None`` writes the compact form.

    Returns:
        The document text.
    """
    writer = _Writer(indent)
    writer.write_value(value)
    return writer.text()


# ==============================================================================
# READER
# ==============================================================================

_NUMBER_CHARS = frozenset("0123456789.eE+-")
_WHITESPACE = frozenset(" \t\r\n")
_SIMPLE_UNESCAPES = {
    '"': '"',
    '\\': '\\',
    '/': '/',
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
}


class _Reader:
    """Recursive-descent reader with an explicit cursor. No backtracking."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.index = 0

    # -- Cursor helpers -----------------------------------------------------

    def peek(self) -> str:
        if self.index < len(self.text):
            return self.text[self.index]
        return ""

    def skip_whitespace(self) -> None:
        text, n = self.text, len(self.text)
        while self.index < n and text[self.index] in _WHITESPACE:
            self.index += 1

    def expect_char(self, ch: str) -> None:
        if self.peek() != ch:
            raise JsonFormatError(f"Expected '{ch}'", self.index)
        self.index += 1

    def expect_literal(self, literal: str) -> None:
        if not self.text.startswith(literal, self.index):
            raise JsonFormatError(f"Expected '{literal}'", self.index)
        self.index += len(literal)

    # -- Productions --------------------------------------------------------

    def read_record(self, record_type: Type[T]) -> T:
        self.skip_whitespace()
        self.expect_char("{")
        record = record_type()
        table = field_table(record_type)

        self.skip_whitespace()
        if self.peek() == "}":
            self.index += 1
            return record

        while True:
            self.skip_whitespace()
            key = self.read_string()
            self.skip_whitespace()
            self.expect_char(":")

            spec = table.get(key)
            if spec is None:
                log.debug(f"Skipping unknown key '{key}' on {record_type.__name__}")
                self.skip_value()
            else:
                value = self.read_field(spec)
                if value is not None:
                    setattr(record, spec.attr_name, value)

            self.skip_whitespace()
            ch = self.peek()
            if ch == ",":
                self.index += 1
                continue
            if ch == "}":
                self.index += 1
                return record
            raise JsonFormatError("Expected ',' or '}'", self.index)

    def read_field(self, spec: FieldSpec) -> Any:
        """Read one value for ``spec``; ``None`` means the document held null."""
        self.skip_whitespace()
        if self.peek() == "n":
            self.expect_literal("null")
            return None
        if spec.kind is FieldKind.RECORD:
            return self.read_record(spec.item)
        if spec.kind is FieldKind.LIST:
            return self.read_list(spec.item)
        return self.read_scalar(spec.kind)

    def read_list(self, item: Union[FieldKind, type]) -> List[Any]:
        self.skip_whitespace()
        self.expect_char("[")
        items: List[Any] = []

        self.skip_whitespace()
        if self.peek() == "]":
            self.index += 1
            return items

        while True:
            self.skip_whitespace()
            if self.peek() == "n":
                self.expect_literal("null")
                items.append(None)
            elif isinstance(item, FieldKind):
                items.append(self.read_scalar(item))
            else:
                items.append(self.read_record(item))

            self.skip_whitespace()
            ch = self.peek()
            if ch == ",":
                self.index += 1
                continue
            if ch == "]":
                self.index += 1
                return items
            raise JsonFormatError("Expected ',' or ']'", self.index)

    def read_scalar(self, kind: FieldKind) -> Any:
        if kind not in _SCALAR_KINDS:
            raise TypeError(f"{kind.name} is not a scalar kind")

        ch = self.peek()
        if kind is FieldKind.STRING:
            if ch != '"':
                raise JsonFormatError("Expected string", self.index)
            return self.read_string()

        if kind is FieldKind.BOOL:
            if ch == "t":
                self.expect_literal("true")
                return True
            if ch == "f":
                self.expect_literal("false")
                return False
            raise JsonFormatError("Expected boolean", self.index)

        return self.read_number(kind)

    def read_string(self) -> str:
        start = self.index
        self.expect_char('"')
        text, n = self.text, len(self.text)
        out: List[str] = []

        while self.index < n:
            ch = text[self.index]
            self.index += 1
            if ch == '"':
                return "".join(out)
            if ch != "\\":
                out.append(ch)
                continue

            if self.index >= n:
                break
            esc = text[self.index]
            self.index += 1
            if esc == "u":
                digits = text[self.index:self.index + 4]
                if len(digits) != 4:
                    raise JsonFormatError("Truncated unicode escape", self.index - 2)
                try:
                    out.append(chr(int(digits, 16)))
                except ValueError:
                    raise JsonFormatError("Invalid unicode escape", self.index - 2) from None
                self.index += 4
            else:
                out.append(_SIMPLE_UNESCAPES.get(esc, esc))

        raise JsonFormatError("Unterminated string", start)

    def read_number(self, kind: FieldKind) -> Union[int, float]:
        start = self.index
        text, n = self.text, len(self.text)
        while self.index < n and text[self.index] in _NUMBER_CHARS:
            self.index += 1

        token = text[start:self.index]
        if not token:
            raise JsonFormatError("Expected number", start)

        try:
            if kind is FieldKind.INT and not any(c in token for c in ".eE"):
                return int(token)
            value = float(token)
        except ValueError:
            raise JsonFormatError(f"Invalid number '{token}'", start) from None
        if kind is not FieldKind.INT:
            return value
        # fractional and exponent forms truncate through the float value
        if not math.isfinite(value):
            raise JsonFormatError(f"Number '{token}' out of range for integer field", start)
        return int(value)

    # -- Structural skip ----------------------------------------------------

    def skip_value(self) -> None:
        """Consume one value of any shape without building it."""
        self.skip_whitespace()
        ch = self.peek()
        if ch == '"':
            self.read_string()
        elif ch in ("{", "["):
            self._skip_nested()
        elif ch == "" or ch in ",]}":
            raise JsonFormatError("Expected value", self.index)
        else:
            text, n = self.text, len(self.text)
            while (self.index < n and text[self.index] not in ",]}"
                   and text[self.index] not in _WHITESPACE):
                self.index += 1

    def _skip_nested(self) -> None:
        start = self.index
        text, n = self.text, len(self.text)
        depth = 0
        in_string = False
        escaped = False

        while self.index < n:
            ch = text[self.index]
            self.index += 1
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue

            if ch == '"':
                in_string = True
            elif ch in "{[":
                depth += 1
            elif ch in "}]":
                depth -= 1
                if depth == 0:
                    return

        raise JsonFormatError("Unterminated object or array", start)


def deserialize(text: Optional[str], record_type: Type[T]) -> Optional[T]:
    """
    Read a document into a fresh instance of ``record_type``.

    Args:
        text:        The document text.
        record_type: A record class with a ``FIELDS`` table and a
                     no-argument constructor.

    Returns:
        The populated record, or ``None`` for empty / blank input.

    Raises:
        JsonFormatError: On malformed text.
    """
    if text is None or not text.strip():
        return None

    reader = _Reader(text)
    record = reader.read_record(record_type)
    reader.skip_whitespace()
    if reader.index < len(text):
        raise JsonFormatError("Unexpected trailing content", reader.index)
    return record
