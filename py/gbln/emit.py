"""
GBLN Serializer

Turns GValue trees into GBLN text, either compact (MINI) or indented.

Emission rules:
- every scalar carries its type hint: key<type>(literal)
- bool -> "t" / "f"
- null -> "()"
- int -> decimal
- float -> shortest text that reads back to the same value at its width
- string -> raw text, with \\ ( ) escaped by a backslash
- object -> key{...}, fields in insertion order (never sorted)
- array -> key<type>[a b c] when homogeneous and every literal is a bare
  token, otherwise key[<type>(a){...}[...]]
"""

from __future__ import annotations
import math
from typing import List, Optional

from .errors import ErrorKind, GblnError, error_for
from .types import (
    FLOAT_TYPES,
    INT_RANGES,
    MAX_DEPTH,
    GType,
    GValue,
    check_int,
    check_str,
    to_f32,
)


DEFAULT_INDENT = 2


# ============================================================
# Scalar Literals
# ============================================================

def emit_bool(v: bool) -> str:
    return "t" if v else "f"


def emit_float(f: float, gtype: GType = GType.F64) -> str:
    """Shortest decimal text that round-trips at the given width."""
    if math.isnan(f):
        return "nan"
    if math.isinf(f):
        return "inf" if f > 0 else "-inf"

    if gtype == GType.F32:
        s = repr(f)
        for precision in range(1, 10):
            candidate = f"{f:.{precision}g}"
            if to_f32(float(candidate)) == f:
                s = repr(float(candidate))
                break
    else:
        s = repr(f)

    if not any(c in s for c in ".e"):
        s += ".0"
    return s


def escape_literal(s: str) -> str:
    """Escape a string for a (...) body."""
    return s.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _checked(v: GValue) -> GValue:
    """Re-check bounds so a tampered value cannot reach the output."""
    try:
        if v.type in INT_RANGES:
            check_int(v.type, v.as_int())
        elif v.type == GType.STR:
            check_str(v.as_str(), v.max_len)  # type: ignore
    except GblnError as e:
        raise error_for(ErrorKind.SERIALISE, f"cannot serialise value: {e.message}", e.suggestion)
    return v


def scalar_literal(v: GValue) -> str:
    """Literal text of a scalar inside (...)."""
    t = _checked(v).type

    if t == GType.NULL:
        return ""
    if t == GType.BOOL:
        return emit_bool(v.as_bool())
    if t in INT_RANGES:
        return str(v.as_int())
    if t in FLOAT_TYPES:
        return emit_float(v.as_float(), t)
    if t == GType.STR:
        return escape_literal(v.as_str())

    raise error_for(ErrorKind.SERIALISE, f"{t.value} is not a scalar")


def _bare_literal(v: GValue) -> Optional[str]:
    """Literal text usable as a typed-array element, or None."""
    if v.type == GType.NULL:
        return "null"
    if v.type == GType.STR:
        s = v.as_str()
        if not s or s.startswith(":|") or any(c.isspace() or c == "]" for c in s):
            return None
        _checked(v)
        return s
    return scalar_literal(v)


def _typed_elements(items: List[GValue]) -> Optional[List[str]]:
    """Bare literals when the array can be written as <type>[a b c]."""
    if not items:
        return None
    first = items[0]
    if not first.is_scalar:
        return None
    hint = first.type_hint
    literals = []
    for item in items:
        if not item.is_scalar or item.type_hint != hint:
            return None
        lit = _bare_literal(item)
        if lit is None:
            return None
        literals.append(lit)
    return literals


def _require_value(v: object) -> GValue:
    if not isinstance(v, GValue):
        raise error_for(
            ErrorKind.SERIALISE,
            f"unsupported type {type(v).__name__}",
            "convert host values with from_python() first",
        )
    return v


def _descend(depth: int) -> int:
    """Depth of a container opened at `depth`; parse() rejects the same bound."""
    if depth >= MAX_DEPTH:
        raise error_for(
            ErrorKind.SERIALISE,
            f"value nests deeper than {MAX_DEPTH} levels",
            "flatten the structure; deeper text would not parse back",
        )
    return depth + 1


# ============================================================
# Main Serialization
# ============================================================

def serialize(v: GValue, mini: bool = True, indent: int = DEFAULT_INDENT) -> str:
    """
    Serialize a GValue to GBLN text.

    This is the main entry point for converting values to GBLN text.
    `indent` is the number of spaces per nesting level in pretty mode.
    """
    if isinstance(indent, bool) or not isinstance(indent, int) or indent < 0:
        raise error_for(ErrorKind.NULL_POINTER, f"invalid indent {indent!r}", "use a non-negative integer")
    v = _require_value(v)
    if mini:
        return _emit_mini(v, None, 0)
    return "\n".join(_emit_pretty(v, None, 0, indent))


def to_string_pretty(v: GValue, indent: int = DEFAULT_INDENT) -> str:
    """Serialize with one field per line."""
    return serialize(v, mini=False, indent=indent)


def _emit_mini(v: GValue, key: Optional[str], depth: int) -> str:
    prefix = key or ""
    t = v.type

    if t == GType.OBJECT:
        depth = _descend(depth)
        parts = [_emit_mini(_require_value(child), k, depth) for k, child in v.as_object().items()]
        return prefix + "{" + "".join(parts) + "}"

    if t == GType.ARRAY:
        items = [_require_value(item) for item in v.as_list()]
        typed = _typed_elements(items)
        if typed is not None:
            return f"{prefix}<{items[0].type_hint}>[{' '.join(typed)}]"
        depth = _descend(depth)
        return prefix + "[" + "".join(_emit_mini(item, None, depth) for item in items) + "]"

    return f"{prefix}<{v.type_hint}>({scalar_literal(v)})"


def _emit_pretty(v: GValue, key: Optional[str], depth: int, indent: int) -> List[str]:
    pad = " " * (indent * depth)
    prefix = pad + (key or "")
    t = v.type

    if t == GType.OBJECT:
        _descend(depth)
        fields = v.as_object()
        if not fields:
            return [prefix + "{}"]
        lines = [prefix + "{"]
        for k, child in fields.items():
            lines.extend(_emit_pretty(_require_value(child), k, depth + 1, indent))
        lines.append(pad + "}")
        return lines

    if t == GType.ARRAY:
        items = [_require_value(item) for item in v.as_list()]
        typed = _typed_elements(items)
        if typed is not None:
            return [f"{prefix}<{items[0].type_hint}>[{' '.join(typed)}]"]
        _descend(depth)
        if not items:
            return [prefix + "[]"]
        lines = [prefix + "["]
        for item in items:
            lines.extend(_emit_pretty(item, None, depth + 1, indent))
        lines.append(pad + "]")
        return lines

    return [f"{prefix}<{v.type_hint}>({scalar_literal(v)})"]


def emit_comments(lines: List[str]) -> str:
    """Render comment lines as `:| ...` text, one per line."""
    out = []
    for line in lines:
        for part in str(line).split("\n"):
            out.append(f":| {part}".rstrip())
    return "\n".join(out)
