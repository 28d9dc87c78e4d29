"""
GBLN Diagnostics

Error kinds, the Diagnostic record, and the exception family raised by the
lexer, parser, serializer and container layer.

Every failure is reported through the exception of the call that failed;
there is no shared "last error" state to read afterwards.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """GBLN failure kinds."""
    UNEXPECTED_CHAR = "UnexpectedChar"
    UNTERMINATED_STRING = "UnterminatedString"
    UNEXPECTED_TOKEN = "UnexpectedToken"
    UNEXPECTED_EOF = "UnexpectedEof"
    INVALID_SYNTAX = "InvalidSyntax"
    INT_OUT_OF_RANGE = "IntOutOfRange"
    STRING_TOO_LONG = "StringTooLong"
    TYPE_MISMATCH = "TypeMismatch"
    INVALID_TYPE_HINT = "InvalidTypeHint"
    DUPLICATE_KEY = "DuplicateKey"
    NULL_POINTER = "NullPointer"  # invalid handle or argument
    IO = "Io"
    SERIALISE = "Serialise"


@dataclass(frozen=True)
class Diagnostic:
    """Failure detail: what went wrong, where, and how to fix it."""
    kind: ErrorKind
    message: str
    suggestion: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def has_position(self) -> bool:
        return self.line is not None and self.column is not None

    def __str__(self) -> str:
        s = self.message
        if self.has_position:
            s += f" at line {self.line}, column {self.column}"
        if self.suggestion:
            s += f" (hint: {self.suggestion})"
        return s


class GblnError(Exception):
    """
    Base exception for GBLN operations.

    The `.kind` attribute is one of the ErrorKind members and is what
    callers should branch on; `.diagnostic` carries the full detail.
    """

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic

    @property
    def kind(self) -> ErrorKind:
        return self.diagnostic.kind

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def suggestion(self) -> Optional[str]:
        return self.diagnostic.suggestion

    @property
    def line(self) -> Optional[int]:
        return self.diagnostic.line

    @property
    def column(self) -> Optional[int]:
        return self.diagnostic.column


class ParseError(GblnError):
    """Lexical or grammatical failure in GBLN text."""


class ValidationError(GblnError):
    """A value violates its bounded type, or an object key repeats."""


class IoError(GblnError):
    """Reading, writing, decompressing or decoding storage failed."""


class SerialiseError(GblnError):
    """A value cannot be represented in GBLN text."""


class ConfigError(GblnError):
    """An invalid argument or configuration value."""


_KIND_CLASSES = {
    ErrorKind.UNEXPECTED_CHAR: ParseError,
    ErrorKind.UNTERMINATED_STRING: ParseError,
    ErrorKind.UNEXPECTED_TOKEN: ParseError,
    ErrorKind.UNEXPECTED_EOF: ParseError,
    ErrorKind.INVALID_SYNTAX: ParseError,
    ErrorKind.INVALID_TYPE_HINT: ParseError,
    ErrorKind.TYPE_MISMATCH: ValidationError,
    ErrorKind.INT_OUT_OF_RANGE: ValidationError,
    ErrorKind.STRING_TOO_LONG: ValidationError,
    ErrorKind.DUPLICATE_KEY: ValidationError,
    ErrorKind.NULL_POINTER: ConfigError,
    ErrorKind.IO: IoError,
    ErrorKind.SERIALISE: SerialiseError,
}


def error_for(
    kind: ErrorKind,
    message: str,
    suggestion: Optional[str] = None,
    line: Optional[int] = None,
    column: Optional[int] = None,
) -> GblnError:
    """Build the exception matching `kind`."""
    cls = _KIND_CLASSES.get(kind, GblnError)
    return cls(Diagnostic(kind, message, suggestion, line, column))


def at_position(err: GblnError, line: int, column: int) -> GblnError:
    """Return `err` re-anchored at a source position (keeps an existing one)."""
    d = err.diagnostic
    if d.has_position:
        return err
    return error_for(d.kind, d.message, d.suggestion, line, column)
