"""
GBLN - Bounded-type, diff-friendly data notation

Every value carries an explicit type hint with a hard bound (i8..u64,
f32/f64, strings with a character capacity), so data is validated as it
is read and written.

Example:
    >>> import gbln
    >>>
    >>> # Parse GBLN text
    >>> v = gbln.parse("user{id<u32>(12345) name<s64>(Alice) active<b>(t)}")
    >>> print(v.get("user").get("name").as_str())
    Alice
    >>>
    >>> # Convert Python data, narrowest types chosen automatically
    >>> print(gbln.dumps({"age": 25, "tags": ["rust", "python"]}))
    {age<i8>(25)tags<s64>[rust python]}
    >>>
    >>> # Build values programmatically
    >>> from gbln import g, field
    >>> user = g.object(field("id", g.u32(1)), field("name", g.str("Bob", 16)))
    >>> print(gbln.serialize(user))
    {id<u32>(1)name<s16>(Bob)}
    >>>
    >>> # Store compressed, read back with auto-detection
    >>> data = gbln.write_container(user, gbln.GblnConfig.io())
    >>> gbln.is_compressed(data)
    True
    >>> gbln.read_container(data) == user
    True
"""

__version__ = "1.0.0"

# Diagnostics
from .errors import (
    ErrorKind,
    Diagnostic,
    GblnError,
    ParseError,
    ValidationError,
    IoError,
    SerialiseError,
    ConfigError,
)

# Core types
from .types import (
    GValue,
    GType,
    MapEntry,
    STRING_CLASSES,
    char_count,
    equivalent,
    field,
    g,
    G,
)

# Parsing
from .parse import (
    parse,
    parse_file,
    diagnose,
)

# Serialization
from .emit import (
    serialize,
    to_string_pretty,
)

# Python bridge
from .convert import (
    from_python,
    to_python,
    select_int_type,
    select_str_type,
    dumps,
    loads,
)

# Configuration / Containers
from .config import GblnConfig
from .container import (
    write_container,
    read_container,
    pack_text,
    write_io,
    read_io,
    is_compressed,
    suggested_extension,
)

# Async
from .aio import (
    parse_file_async,
    read_io_async,
    write_io_async,
)

__all__ = [
    # Version
    "__version__",
    # Diagnostics
    "ErrorKind",
    "Diagnostic",
    "GblnError",
    "ParseError",
    "ValidationError",
    "IoError",
    "SerialiseError",
    "ConfigError",
    # Core types
    "GValue",
    "GType",
    "MapEntry",
    "STRING_CLASSES",
    "char_count",
    "equivalent",
    "field",
    "g",
    "G",
    # Parsing
    "parse",
    "parse_file",
    "diagnose",
    # Serialization
    "serialize",
    "to_string_pretty",
    # Python bridge
    "from_python",
    "to_python",
    "select_int_type",
    "select_str_type",
    "dumps",
    "loads",
    # Configuration / Containers
    "GblnConfig",
    "write_container",
    "read_container",
    "pack_text",
    "write_io",
    "read_io",
    "is_compressed",
    "suggested_extension",
    # Async
    "parse_file_async",
    "read_io_async",
    "write_io_async",
]
