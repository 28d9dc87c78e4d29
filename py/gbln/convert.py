"""
GBLN Host Bridge

Converts between plain Python values and GValue trees. Going in, the
narrowest bounded type that fits is chosen for every int and str.
"""

from __future__ import annotations
from typing import Any

from .errors import ErrorKind, error_for
from .types import (
    INT_RANGES,
    FLOAT_TYPES,
    MAX_DEPTH,
    SIGNED_INT_TYPES,
    GType,
    GValue,
    MapEntry,
    char_count,
    fits,
    is_identifier,
)


# Capacity classes picked for host strings, narrowest first
AUTO_STRING_CLASSES = (64, 256, 1024)


# ============================================================
# Type Selection
# ============================================================

def select_int_type(n: int) -> GType:
    """
    Narrowest signed width whose range holds `n`.

    Unsigned widths are never chosen here; build them explicitly with
    GValue.u8() and friends.
    """
    for t in SIGNED_INT_TYPES:
        if fits(t, n):
            return t
    raise error_for(
        ErrorKind.INT_OUT_OF_RANGE,
        f"integer {n} out of range for i64",
        "use GValue.u64() for values up to 2^64-1" if fits(GType.U64, n) else None,
    )


def select_str_type(s: str) -> int:
    """Narrowest automatic capacity class for `s`, counted in characters."""
    count = char_count(s)
    for n in AUTO_STRING_CLASSES:
        if count <= n:
            return n
    raise error_for(
        ErrorKind.STRING_TOO_LONG,
        f"string too long: {count} characters (max {AUTO_STRING_CLASSES[-1]})",
        "split the text into several fields",
    )


# ============================================================
# Python -> GValue
# ============================================================

def from_python(data: Any) -> GValue:
    """Convert a Python value to a GValue."""
    return _from_python(data, 0)


def _from_python(data: Any, depth: int) -> GValue:
    if isinstance(data, GValue):
        return data
    if data is None:
        return GValue.null()
    # bool before int: bool is an int subclass
    if isinstance(data, bool):
        return GValue.bool_(data)
    if isinstance(data, int):
        return GValue.int_(select_int_type(data), data)
    if isinstance(data, float):
        return GValue.f64(data)
    if isinstance(data, str):
        return GValue.str_(data, select_str_type(data))
    if isinstance(data, (dict, list, tuple)) and depth > MAX_DEPTH:
        # an innermost list of scalars becomes a typed array, which is not a level
        raise error_for(
            ErrorKind.SERIALISE,
            f"value nests deeper than {MAX_DEPTH} levels (or contains a cycle)",
        )
    if isinstance(data, dict):
        entries = []
        for k, v in data.items():
            if not isinstance(k, str):
                raise error_for(
                    ErrorKind.SERIALISE,
                    f"object key must be a string, got {type(k).__name__}",
                )
            if not is_identifier(k):
                raise error_for(
                    ErrorKind.SERIALISE,
                    f"object key {k!r} is not an identifier",
                    "keys start with a letter or _ and contain letters, digits, _, - or .",
                )
            entries.append(MapEntry(k, _from_python(v, depth + 1)))
        return GValue.object_(*entries)
    if isinstance(data, (list, tuple)):
        return GValue.array_(*[_from_python(item, depth + 1) for item in data])

    raise error_for(
        ErrorKind.SERIALISE,
        f"unsupported type {type(data).__name__}",
        "supported: None, bool, int, float, str, dict, list, tuple",
    )


# ============================================================
# GValue -> Python
# ============================================================

def to_python(v: GValue) -> Any:
    """Convert a GValue to a Python value."""
    t = v.type

    if t == GType.NULL:
        return None
    elif t == GType.BOOL:
        return v.as_bool()
    elif t in INT_RANGES:
        return v.as_int()
    elif t in FLOAT_TYPES:
        return v.as_float()
    elif t == GType.STR:
        return v.as_str()
    elif t == GType.ARRAY:
        return [to_python(item) for item in v.as_list()]
    elif t == GType.OBJECT:
        return {k: to_python(child) for k, child in v.as_object().items()}

    raise error_for(ErrorKind.TYPE_MISMATCH, f"unknown type: {t}")


# ============================================================
# Convenience Functions
# ============================================================

def dumps(data: Any, mini: bool = True, indent: int = 2) -> str:
    """Convert Python data directly to GBLN text."""
    from .emit import serialize
    v = from_python(data)
    return serialize(v, mini=mini, indent=indent)


def loads(text: str) -> Any:
    """Parse GBLN text to a Python value."""
    from .parse import parse
    return to_python(parse(text))
