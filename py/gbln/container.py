"""
GBLN Container Codec

Wraps serialised GBLN text in an optional XZ envelope for storage.

Byte layout:
    [FD 37 7A 58 5A 00 + xz stream] | [UTF-8 GBLN text]

Compression is detected from the first six bytes only. File extensions
(.io.gbln.xz, .io.gbln, .gbln) are a naming convention and are never
consulted when reading.
"""

from __future__ import annotations
import logging
import lzma
import os
from typing import Any, Optional, Sequence, Union

from .config import GblnConfig
from .convert import from_python
from .emit import emit_comments, serialize
from .errors import ErrorKind, error_for
from .lexer import strip_comments
from .parse import parse
from .types import GValue


logger = logging.getLogger(__name__)

XZ_MAGIC = b"\xfd7zXZ\x00"

EXT_COMPRESSED = ".io.gbln.xz"
EXT_MINI = ".io.gbln"
EXT_SOURCE = ".gbln"

PathLike = Union[str, "os.PathLike[str]"]
Header = Union[str, Sequence[str], None]


# ============================================================
# Envelope
# ============================================================

def is_compressed(data: bytes) -> bool:
    """Whether `data` starts with the XZ magic bytes."""
    return bytes(data[:len(XZ_MAGIC)]) == XZ_MAGIC


def compress(raw: bytes, level: int) -> bytes:
    try:
        return lzma.compress(raw, format=lzma.FORMAT_XZ, preset=level)
    except lzma.LZMAError as e:
        raise error_for(ErrorKind.IO, f"compression failed: {e}")


def decompress(data: bytes) -> bytes:
    try:
        return lzma.decompress(data, format=lzma.FORMAT_XZ)
    except (lzma.LZMAError, EOFError) as e:
        raise error_for(ErrorKind.IO, f"corrupt compressed stream: {e}")


def _pack(text: str, config: GblnConfig) -> bytes:
    raw = text.encode("utf-8")
    if not config.compress:
        logger.debug("container: %d bytes, uncompressed", len(raw))
        return raw
    data = compress(raw, config.compression_level)
    logger.debug(
        "container: %d bytes of text, %d bytes after xz level %d",
        len(raw), len(data), config.compression_level,
    )
    return data


# ============================================================
# Write Path
# ============================================================

def write_container(value: Any, config: Optional[GblnConfig] = None, header: Header = None) -> bytes:
    """
    Serialise a value and wrap it per `config` (default GblnConfig.io()).

    `value` may be a GValue or a plain Python value. `header` lines are
    written as `:|` comments above the document unless the config strips
    comments.
    """
    config = config or GblnConfig.io()
    v = from_python(value)
    text = serialize(v, mini=config.mini_mode, indent=config.indent)
    if header and not config.strip_comments:
        lines = [header] if isinstance(header, str) else list(header)
        text = emit_comments(lines) + "\n" + text
    if not config.mini_mode:
        text += "\n"
    return _pack(text, config)


def pack_text(text: str, config: Optional[GblnConfig] = None) -> bytes:
    """
    Wrap existing GBLN source text without re-serialising it.

    The text is parsed first so that invalid documents are never stored;
    layout is kept, and comments are removed when the config says so.
    """
    config = config or GblnConfig.io()
    parse(text)
    if config.strip_comments:
        text = strip_comments(text)
    return _pack(text, config)


# ============================================================
# Read Path
# ============================================================

def decode_container(data: bytes) -> str:
    """Unwrap container bytes to GBLN text."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise error_for(
            ErrorKind.NULL_POINTER,
            f"expected bytes, got {type(data).__name__}",
        )
    data = bytes(data)
    if is_compressed(data):
        logger.debug("container: xz magic found, decompressing %d bytes", len(data))
        data = decompress(data)
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise error_for(
            ErrorKind.IO,
            f"invalid UTF-8 at byte {e.start}",
            "the data is neither GBLN text nor an xz container",
        )
    return text.lstrip("\ufeff")


def read_container(data: bytes) -> GValue:
    """Unwrap container bytes and parse the GBLN text inside."""
    return parse(decode_container(data))


# ============================================================
# Files
# ============================================================

def suggested_extension(config: Optional[GblnConfig] = None) -> str:
    """Conventional file extension for a config (advisory only)."""
    config = config or GblnConfig.io()
    if config.compress:
        return EXT_COMPRESSED
    if config.mini_mode:
        return EXT_MINI
    return EXT_SOURCE


def write_io(value: Any, path: PathLike, config: Optional[GblnConfig] = None, header: Header = None) -> None:
    """Serialise `value` and write the container to `path`."""
    data = write_container(value, config, header)
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise error_for(ErrorKind.IO, f"failed to write file '{path}': {e.strerror or e}")
    logger.debug("wrote %d bytes to %s", len(data), path)


def read_io(path: PathLike) -> GValue:
    """Read a container file, detecting compression from its content."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise error_for(ErrorKind.IO, f"failed to read file '{path}': {e.strerror or e}")
    logger.debug("read %d bytes from %s", len(data), path)
    return read_container(data)
