"""
GBLN I/O Configuration

Controls how values are written to containers: MINI or pretty text,
XZ compression and its level, indentation, and comment stripping.
"""

from __future__ import annotations
import dataclasses
from dataclasses import dataclass

from .errors import ErrorKind, error_for


MIN_COMPRESSION_LEVEL = 0
MAX_COMPRESSION_LEVEL = 9
DEFAULT_COMPRESSION_LEVEL = 6


@dataclass(frozen=True)
class GblnConfig:
    """
    Options for writing GBLN containers.

    The defaults match GblnConfig.io(): MINI text, XZ at level 6, comments
    stripped. Use GblnConfig.source() for human-edited files.
    """
    mini_mode: bool = True
    compress: bool = True
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    indent: int = 2
    strip_comments: bool = True

    def __post_init__(self) -> None:
        level = self.compression_level
        if isinstance(level, bool) or not isinstance(level, int) or not (
            MIN_COMPRESSION_LEVEL <= level <= MAX_COMPRESSION_LEVEL
        ):
            raise error_for(
                ErrorKind.NULL_POINTER,
                f"invalid compression level {level!r}",
                f"use an integer from {MIN_COMPRESSION_LEVEL} to {MAX_COMPRESSION_LEVEL}",
            )
        if isinstance(self.indent, bool) or not isinstance(self.indent, int) or self.indent < 0:
            raise error_for(
                ErrorKind.NULL_POINTER,
                f"invalid indent {self.indent!r}",
                "use a non-negative integer",
            )

    @classmethod
    def io(cls) -> "GblnConfig":
        """Production I/O format: MINI text, XZ level 6, no comments."""
        return cls()

    @classmethod
    def source(cls) -> "GblnConfig":
        """Human-readable source format: pretty text, uncompressed, comments kept."""
        return cls(mini_mode=False, compress=False, strip_comments=False)

    def replace(self, **changes) -> "GblnConfig":
        return dataclasses.replace(self, **changes)
