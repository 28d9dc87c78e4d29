"""
GBLN Core Types

GValue is the bounded value container for GBLN data. Every constructor
checks the bound of its type, so a GValue that exists is always valid.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union
import difflib
import math
import struct

import regex

from .errors import ErrorKind, error_for


class GType(Enum):
    """GBLN value types."""
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"
    STR = "str"
    BOOL = "bool"
    NULL = "null"
    OBJECT = "object"
    ARRAY = "array"


# ============================================================
# Bounds
# ============================================================

INT_RANGES: Dict[GType, Tuple[int, int]] = {
    GType.I8: (-(1 << 7), (1 << 7) - 1),
    GType.I16: (-(1 << 15), (1 << 15) - 1),
    GType.I32: (-(1 << 31), (1 << 31) - 1),
    GType.I64: (-(1 << 63), (1 << 63) - 1),
    GType.U8: (0, (1 << 8) - 1),
    GType.U16: (0, (1 << 16) - 1),
    GType.U32: (0, (1 << 32) - 1),
    GType.U64: (0, (1 << 64) - 1),
}

SIGNED_INT_TYPES = (GType.I8, GType.I16, GType.I32, GType.I64)
UNSIGNED_INT_TYPES = (GType.U8, GType.U16, GType.U32, GType.U64)
INT_TYPES = SIGNED_INT_TYPES + UNSIGNED_INT_TYPES
FLOAT_TYPES = (GType.F32, GType.F64)

# Capacity ladder, in user-perceived characters
STRING_CLASSES = (2, 4, 8, 16, 32, 64, 128, 256, 512, 1024)
MAX_STRING_LEN = STRING_CLASSES[-1]

TYPE_TAGS = (
    "i8", "i16", "i32", "i64", "u8", "u16", "u32", "u64",
    "f32", "f64", "b", "n",
) + tuple(f"s{n}" for n in STRING_CLASSES)

_SIMPLE_TAGS: Dict[str, GType] = {
    "i8": GType.I8, "i16": GType.I16, "i32": GType.I32, "i64": GType.I64,
    "u8": GType.U8, "u16": GType.U16, "u32": GType.U32, "u64": GType.U64,
    "f32": GType.F32, "f64": GType.F64,
    "b": GType.BOOL, "n": GType.NULL,
}

_GRAPHEME = regex.compile(r"\X")

# Container nesting limit shared by the parser and the serializer
MAX_DEPTH = 200


def char_count(s: str) -> int:
    """Count user-perceived characters (extended grapheme clusters)."""
    return len(_GRAPHEME.findall(s))


def parse_type_hint(tag: str) -> Tuple[GType, Optional[int]]:
    """
    Resolve a type tag such as "u32" or "s64".

    Returns the GType and, for strings, the capacity class.
    """
    if tag in _SIMPLE_TAGS:
        return _SIMPLE_TAGS[tag], None
    if tag.startswith("s") and tag[1:].isdigit():
        n = int(tag[1:])
        if n in STRING_CLASSES:
            return GType.STR, n
    close = difflib.get_close_matches(tag, TYPE_TAGS, n=1)
    if close:
        hint = f"did you mean <{close[0]}>?"
    else:
        hint = "valid types: " + ", ".join(TYPE_TAGS)
    raise error_for(ErrorKind.INVALID_TYPE_HINT, f"invalid type hint <{tag}>", hint)


def type_tag(gtype: GType, max_len: Optional[int] = None) -> str:
    """Inverse of parse_type_hint."""
    if gtype == GType.STR:
        return f"s{max_len}"
    if gtype == GType.BOOL:
        return "b"
    if gtype == GType.NULL:
        return "n"
    if gtype in (GType.OBJECT, GType.ARRAY):
        raise ValueError(f"{gtype.value} has no type hint")
    return gtype.value


def fits(gtype: GType, n: int) -> bool:
    lo, hi = INT_RANGES[gtype]
    return lo <= n <= hi


def narrowest_int_type(n: int) -> Optional[GType]:
    """Smallest signed width holding `n`, falling back to u64."""
    for t in SIGNED_INT_TYPES:
        if fits(t, n):
            return t
    if fits(GType.U64, n):
        return GType.U64
    return None


def narrowest_string_class(count: int) -> Optional[int]:
    for n in STRING_CLASSES:
        if count <= n:
            return n
    return None


def check_int(gtype: GType, v: int) -> int:
    """Validate `v` against the range of `gtype`."""
    if isinstance(v, bool) or not isinstance(v, int):
        raise error_for(
            ErrorKind.TYPE_MISMATCH,
            f"expected an integer for {gtype.value}, got {type(v).__name__}",
        )
    if not fits(gtype, v):
        lo, hi = INT_RANGES[gtype]
        better = narrowest_int_type(v)
        hint = f"use <{better.value}>" if better else "value exceeds every integer type"
        raise error_for(
            ErrorKind.INT_OUT_OF_RANGE,
            f"integer {v} out of range for {gtype.value} (valid: {lo} to {hi})",
            hint,
        )
    return v


def check_str(v: str, max_len: int) -> str:
    """Validate `v` against capacity class `max_len`."""
    if not isinstance(v, str):
        raise error_for(
            ErrorKind.TYPE_MISMATCH,
            f"expected a string for s{max_len}, got {type(v).__name__}",
        )
    if max_len not in STRING_CLASSES:
        raise error_for(
            ErrorKind.INVALID_TYPE_HINT,
            f"invalid string capacity {max_len}",
            "capacities: " + ", ".join(str(n) for n in STRING_CLASSES),
        )
    count = char_count(v)
    if count > max_len:
        better = narrowest_string_class(count)
        hint = f"use <s{better}>" if better else f"split the text; max {MAX_STRING_LEN} characters"
        raise error_for(
            ErrorKind.STRING_TOO_LONG,
            f"string of {count} characters exceeds s{max_len} limit ({max_len} characters)",
            hint,
        )
    return v


def to_f32(v: float) -> float:
    """Round a double to the nearest single-precision value."""
    if math.isnan(v) or math.isinf(v):
        return v
    try:
        return struct.unpack("<f", struct.pack("<f", v))[0]
    except OverflowError:
        # rounds past FLT_MAX
        return math.copysign(math.inf, v)


def is_identifier(s: str) -> bool:
    """Object keys: letter or _ first, then letters, digits, _ - ."""
    if not s or not (s[0].isalpha() or s[0] == "_"):
        return False
    return all(c.isalnum() or c in "_-." for c in s)


@dataclass
class MapEntry:
    """Key-value pair for objects."""
    key: str
    value: "GValue"


class GValue:
    """
    Bounded value container for GBLN data.

    Supports: i8..i64, u8..u64, f32, f64, str (with capacity), bool, null,
    object (ordered, unique keys) and array.
    """

    __slots__ = ('_type', '_int', '_float', '_str', '_max_len', '_bool', '_object', '_list')

    def __init__(self, gtype: GType):
        self._type = gtype
        self._int: Optional[int] = None
        self._float: Optional[float] = None
        self._str: Optional[str] = None
        self._max_len: Optional[int] = None
        self._bool: Optional[bool] = None
        self._object: Optional[Dict[str, GValue]] = None
        self._list: Optional[List[GValue]] = None

    @property
    def type(self) -> GType:
        return self._type

    @property
    def max_len(self) -> Optional[int]:
        """Capacity class of a string value."""
        return self._max_len

    @property
    def type_hint(self) -> Optional[str]:
        """The <tag> text for scalars, None for objects and arrays."""
        if self._type in (GType.OBJECT, GType.ARRAY):
            return None
        return type_tag(self._type, self._max_len)

    @property
    def is_scalar(self) -> bool:
        return self._type not in (GType.OBJECT, GType.ARRAY)

    # ============================================================
    # Constructors
    # ============================================================

    @staticmethod
    def null() -> "GValue":
        return GValue(GType.NULL)

    @staticmethod
    def bool_(v: bool) -> "GValue":
        gv = GValue(GType.BOOL)
        gv._bool = bool(v)
        return gv

    @staticmethod
    def int_(gtype: GType, v: int) -> "GValue":
        if gtype not in INT_RANGES:
            raise ValueError(f"not an integer type: {gtype}")
        gv = GValue(gtype)
        gv._int = check_int(gtype, v)
        return gv

    @staticmethod
    def i8(v: int) -> "GValue":
        return GValue.int_(GType.I8, v)

    @staticmethod
    def i16(v: int) -> "GValue":
        return GValue.int_(GType.I16, v)

    @staticmethod
    def i32(v: int) -> "GValue":
        return GValue.int_(GType.I32, v)

    @staticmethod
    def i64(v: int) -> "GValue":
        return GValue.int_(GType.I64, v)

    @staticmethod
    def u8(v: int) -> "GValue":
        return GValue.int_(GType.U8, v)

    @staticmethod
    def u16(v: int) -> "GValue":
        return GValue.int_(GType.U16, v)

    @staticmethod
    def u32(v: int) -> "GValue":
        return GValue.int_(GType.U32, v)

    @staticmethod
    def u64(v: int) -> "GValue":
        return GValue.int_(GType.U64, v)

    @staticmethod
    def f32(v: float) -> "GValue":
        gv = GValue(GType.F32)
        gv._float = to_f32(float(v))
        return gv

    @staticmethod
    def f64(v: float) -> "GValue":
        gv = GValue(GType.F64)
        gv._float = float(v)
        return gv

    @staticmethod
    def str_(v: str, max_len: int = 64) -> "GValue":
        gv = GValue(GType.STR)
        gv._str = check_str(v, max_len)
        gv._max_len = max_len
        return gv

    @staticmethod
    def object_(*entries: MapEntry) -> "GValue":
        gv = GValue(GType.OBJECT)
        gv._object = {}
        for e in entries:
            gv.insert(e.key, e.value)
        return gv

    @staticmethod
    def array_(*values: "GValue") -> "GValue":
        gv = GValue(GType.ARRAY)
        gv._list = []
        for v in values:
            gv.append(v)
        return gv

    # ============================================================
    # Accessors
    # ============================================================

    def is_null(self) -> bool:
        return self._type == GType.NULL

    def is_int(self) -> bool:
        return self._type in INT_RANGES

    def is_float(self) -> bool:
        return self._type in FLOAT_TYPES

    def as_bool(self) -> bool:
        if self._type != GType.BOOL:
            raise TypeError("not a bool")
        return self._bool  # type: ignore

    def as_int(self) -> int:
        """Integer payload of any width."""
        if self._type not in INT_RANGES:
            raise TypeError("not an integer")
        return self._int  # type: ignore

    def as_float(self) -> float:
        if self._type not in FLOAT_TYPES:
            raise TypeError("not a float")
        return self._float  # type: ignore

    def as_number(self) -> Union[int, float]:
        """Get numeric value (works for any integer or float type)."""
        if self._type in INT_RANGES:
            return self._int  # type: ignore
        if self._type in FLOAT_TYPES:
            return self._float  # type: ignore
        raise TypeError("not a number")

    def as_str(self) -> str:
        if self._type != GType.STR:
            raise TypeError("not a str")
        return self._str  # type: ignore

    def as_object(self) -> Dict[str, "GValue"]:
        """Fields in insertion order. Mutate through insert/set only."""
        if self._type != GType.OBJECT:
            raise TypeError("not an object")
        return self._object  # type: ignore

    def as_list(self) -> List["GValue"]:
        if self._type != GType.ARRAY:
            raise TypeError("not an array")
        return self._list  # type: ignore

    def entries(self) -> List[MapEntry]:
        return [MapEntry(k, v) for k, v in self.as_object().items()]

    def keys(self) -> List[str]:
        return list(self.as_object())

    def get(self, key: str) -> Optional["GValue"]:
        """Get field from an object by key."""
        if self._type != GType.OBJECT:
            return None
        return self._object.get(key)  # type: ignore

    def index(self, i: int) -> "GValue":
        """Get element from an array by index."""
        if self._type != GType.ARRAY:
            raise TypeError("not an array")
        if i < 0 or i >= len(self._list):  # type: ignore
            raise IndexError("index out of bounds")
        return self._list[i]  # type: ignore

    def __len__(self) -> int:
        """Length of an array or number of object fields."""
        if self._type == GType.ARRAY:
            return len(self._list)  # type: ignore
        if self._type == GType.OBJECT:
            return len(self._object)  # type: ignore
        return 0

    def __iter__(self) -> Iterator["GValue"]:
        return iter(self.as_list())

    # ============================================================
    # Mutators
    # ============================================================

    def insert(self, key: str, value: "GValue") -> None:
        """Add a new field; an existing key is a DuplicateKey error."""
        obj = self.as_object()
        if not isinstance(value, GValue):
            raise error_for(ErrorKind.NULL_POINTER, f"field {key!r} is not a GValue")
        if not isinstance(key, str) or not is_identifier(key):
            raise error_for(
                ErrorKind.SERIALISE,
                f"object key {key!r} is not an identifier",
                "keys start with a letter or _ and contain letters, digits, _, - or .",
            )
        if key in obj:
            raise error_for(
                ErrorKind.DUPLICATE_KEY,
                f"duplicate key '{key}'",
                f"rename or remove the second '{key}'",
            )
        obj[key] = value

    def set(self, key: str, value: "GValue") -> None:
        """Replace a field in place, or append it when absent."""
        obj = self.as_object()
        if key in obj:
            if not isinstance(value, GValue):
                raise error_for(ErrorKind.NULL_POINTER, f"field {key!r} is not a GValue")
            obj[key] = value
        else:
            self.insert(key, value)

    def append(self, value: "GValue") -> None:
        """Append to array."""
        lst = self.as_list()
        if not isinstance(value, GValue):
            raise error_for(ErrorKind.NULL_POINTER, "array element is not a GValue")
        lst.append(value)

    # ============================================================
    # Deep Copy
    # ============================================================

    def clone(self) -> "GValue":
        """Create a deep copy of this value."""
        if self._type == GType.OBJECT:
            return GValue.object_(*[MapEntry(k, v.clone()) for k, v in self._object.items()])  # type: ignore
        if self._type == GType.ARRAY:
            return GValue.array_(*[v.clone() for v in self._list])  # type: ignore
        gv = GValue(self._type)
        gv._int = self._int
        gv._float = self._float
        gv._str = self._str
        gv._max_len = self._max_len
        gv._bool = self._bool
        return gv

    def __eq__(self, other: object) -> bool:
        """Strict equality: same type (and capacity) and same payload."""
        if not isinstance(other, GValue):
            return NotImplemented
        if self._type != other._type:
            return False
        if self._type == GType.OBJECT:
            return list(self._object.items()) == list(other._object.items())  # type: ignore
        if self._type == GType.ARRAY:
            return self._list == other._list
        return (
            self._int == other._int
            and self._float == other._float
            and self._str == other._str
            and self._max_len == other._max_len
            and self._bool == other._bool
        )

    __hash__ = None  # type: ignore

    def __repr__(self) -> str:
        t = self._type
        if t == GType.NULL:
            return "GValue.null()"
        elif t == GType.BOOL:
            return f"GValue.bool_({self._bool})"
        elif t in INT_RANGES:
            return f"GValue.{t.value}({self._int})"
        elif t in FLOAT_TYPES:
            return f"GValue.{t.value}({self._float!r})"
        elif t == GType.STR:
            return f"GValue.str_({self._str!r}, {self._max_len})"
        elif t == GType.ARRAY:
            return f"GValue.array_({', '.join(repr(v) for v in self._list)})"  # type: ignore
        elif t == GType.OBJECT:
            return f"GValue.object_({', '.join(self._object)})"  # type: ignore
        return f"GValue({t})"


def equivalent(a: GValue, b: GValue) -> bool:
    """
    Observational equality.

    Integers compare by value whatever their width, floats by value, and
    strings by content whatever their capacity class. Objects need the same
    key set with equivalent values; arrays compare element-wise.
    """
    if a.is_int() and b.is_int():
        return a.as_int() == b.as_int()
    if a.is_float() and b.is_float():
        x, y = a.as_float(), b.as_float()
        return x == y or (math.isnan(x) and math.isnan(y))
    if a.type != b.type:
        return False
    if a.type == GType.STR:
        return a.as_str() == b.as_str()
    if a.type == GType.BOOL:
        return a.as_bool() == b.as_bool()
    if a.type == GType.NULL:
        return True
    if a.type == GType.ARRAY:
        la, lb = a.as_list(), b.as_list()
        return len(la) == len(lb) and all(equivalent(x, y) for x, y in zip(la, lb))
    oa, ob = a.as_object(), b.as_object()
    if oa.keys() != ob.keys():
        return False
    return all(equivalent(v, ob[k]) for k, v in oa.items())


# ============================================================
# Helper Functions
# ============================================================

def field(key: str, value: GValue) -> MapEntry:
    """Create a field entry for object construction."""
    return MapEntry(key, value)


# Shorthand constructors
class G:
    """Shorthand constructors for GValue."""

    @staticmethod
    def null() -> GValue:
        return GValue.null()

    @staticmethod
    def bool(v: bool) -> GValue:
        return GValue.bool_(v)

    @staticmethod
    def i8(v: int) -> GValue:
        return GValue.i8(v)

    @staticmethod
    def i16(v: int) -> GValue:
        return GValue.i16(v)

    @staticmethod
    def i32(v: int) -> GValue:
        return GValue.i32(v)

    @staticmethod
    def i64(v: int) -> GValue:
        return GValue.i64(v)

    @staticmethod
    def u8(v: int) -> GValue:
        return GValue.u8(v)

    @staticmethod
    def u16(v: int) -> GValue:
        return GValue.u16(v)

    @staticmethod
    def u32(v: int) -> GValue:
        return GValue.u32(v)

    @staticmethod
    def u64(v: int) -> GValue:
        return GValue.u64(v)

    @staticmethod
    def f32(v: float) -> GValue:
        return GValue.f32(v)

    @staticmethod
    def f64(v: float) -> GValue:
        return GValue.f64(v)

    @staticmethod
    def str(v: str, max_len: int = 64) -> GValue:
        return GValue.str_(v, max_len)

    @staticmethod
    def object(*entries: MapEntry) -> GValue:
        return GValue.object_(*entries)

    @staticmethod
    def array(*values: GValue) -> GValue:
        return GValue.array_(*values)


g = G()
