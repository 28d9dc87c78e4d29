"""
GBLN Parser

Parses GBLN text into GValue trees. Bounds are checked while the tree is
built, so a failed parse never yields a partial value.
"""

from __future__ import annotations
import re
from typing import Optional

from .errors import Diagnostic, ErrorKind, GblnError, at_position, error_for
from .lexer import Lexer, Token, TokenType
from .types import GType, GValue, INT_RANGES, MAX_DEPTH, parse_type_hint, type_tag


# Digits in 18446744073709551615, the widest integer any type holds
_MAX_INT_DIGITS = 20

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_SPECIAL_RE = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)

_BOOL_LITERALS = {"t": True, "true": True, "f": False, "false": False}


# ============================================================
# Literals
# ============================================================

def literal_value(gtype: GType, max_len: Optional[int], text: str) -> GValue:
    """Build a GValue of the declared type from literal text."""
    tag = type_tag(gtype, max_len)

    if gtype in INT_RANGES:
        if not _INT_RE.fullmatch(text):
            raise error_for(
                ErrorKind.TYPE_MISMATCH,
                f"invalid integer literal {text!r} for <{tag}>",
                "integers are decimal digits with an optional sign",
            )
        sign = "-" if text.startswith("-") else ""
        digits = text.lstrip("+-").lstrip("0") or "0"
        if len(digits) > _MAX_INT_DIGITS:
            lo, hi = INT_RANGES[gtype]
            raise error_for(
                ErrorKind.INT_OUT_OF_RANGE,
                f"integer literal of {len(digits)} digits out of range for {tag} (valid: {lo} to {hi})",
                "value exceeds every integer type",
            )
        return GValue.int_(gtype, int(sign + digits))

    if gtype == GType.F32 or gtype == GType.F64:
        if not (_FLOAT_RE.fullmatch(text) or _FLOAT_SPECIAL_RE.fullmatch(text)):
            raise error_for(
                ErrorKind.TYPE_MISMATCH,
                f"invalid float literal {text!r} for <{tag}>",
                "use decimal or exponent notation, e.g. 3.14 or 1e-5",
            )
        if gtype == GType.F32:
            return GValue.f32(float(text))
        return GValue.f64(float(text))

    if gtype == GType.STR:
        return GValue.str_(text, max_len)  # type: ignore

    if gtype == GType.BOOL:
        if text not in _BOOL_LITERALS:
            raise error_for(
                ErrorKind.TYPE_MISMATCH,
                f"invalid boolean literal {text!r}",
                "use t, f, true or false",
            )
        return GValue.bool_(_BOOL_LITERALS[text])

    if gtype == GType.NULL:
        if text not in ("", "null"):
            raise error_for(
                ErrorKind.TYPE_MISMATCH,
                f"invalid null literal {text!r}",
                "write <n>() or <n>(null)",
            )
        return GValue.null()

    raise ValueError(f"no literal form for {gtype}")


# ============================================================
# Parser
# ============================================================

class Parser:
    """Recursive descent parser for GBLN text."""

    def __init__(self, text: str):
        self.lexer = Lexer(text)
        self.current: Token = Token(TokenType.EOF, None, 1, 1, 0)
        self.depth = 0

    def advance(self) -> Token:
        self.current = self.lexer.next_token()
        return self.current

    def _error(self, kind: ErrorKind, message: str, suggestion: Optional[str] = None,
               tok: Optional[Token] = None) -> GblnError:
        tok = tok or self.current
        return error_for(kind, message, suggestion, tok.line, tok.column)

    def _unexpected(self, expected: str, suggestion: Optional[str] = None) -> GblnError:
        tok = self.current
        if tok.type == TokenType.EOF:
            return self._error(ErrorKind.UNEXPECTED_EOF, f"unexpected end of input, expected {expected}", suggestion)
        return self._error(
            ErrorKind.UNEXPECTED_TOKEN,
            f"unexpected {_describe(tok)}, expected {expected}",
            suggestion,
        )

    def parse(self) -> GValue:
        """Parse the input and return a GValue."""
        self.advance()
        tok = self.current

        if tok.type == TokenType.EOF:
            raise self._error(
                ErrorKind.UNEXPECTED_EOF,
                "empty document",
                "write a value such as <i32>(42) or entries such as name<s64>(Alice)",
            )

        if tok.type == TokenType.IDENT:
            obj = GValue.object_()
            self._parse_entries(obj, None)
            return obj

        v = self._parse_value()
        if self.current.type != TokenType.EOF:
            raise self._error(
                ErrorKind.UNEXPECTED_TOKEN,
                f"unexpected {_describe(self.current)} after top-level value",
                "a document holds one value or a list of named entries",
            )
        return v

    def _enter(self, tok: Token) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise self._error(
                ErrorKind.INVALID_SYNTAX,
                f"nesting deeper than {MAX_DEPTH} levels",
                tok=tok,
            )

    def _parse_entries(self, obj: GValue, opening: Optional[Token]) -> None:
        """Parse NamedEntry* up to the closing '}' (or EOF at top level)."""
        while True:
            tok = self.current

            if tok.type == TokenType.EOF:
                if opening is None:
                    return
                raise self._error(
                    ErrorKind.INVALID_SYNTAX,
                    f"unclosed '{{' opened at line {opening.line}, column {opening.column}",
                    "add a closing '}'",
                    opening,
                )

            if tok.type == TokenType.RBRACE and opening is not None:
                self.advance()
                return

            if tok.type != TokenType.IDENT:
                raise self._unexpected("a key")

            key = tok.value
            self.advance()
            value = self._parse_body(key)  # type: ignore

            if key in obj.as_object():
                raise self._error(
                    ErrorKind.DUPLICATE_KEY,
                    f"duplicate key '{key}'",
                    f"rename or remove the second '{key}'",
                    tok,
                )
            obj.insert(key, value)  # type: ignore

    def _parse_body(self, key: str) -> GValue:
        """Parse what follows a key: typed scalar/array, object or untyped array."""
        tok = self.current

        if tok.type == TokenType.TYPE_HINT:
            return self._parse_typed()
        if tok.type == TokenType.LBRACE:
            return self._parse_object()
        if tok.type == TokenType.LBRACKET:
            return self._parse_array()
        if tok.type == TokenType.LPAREN:
            raise self._error(
                ErrorKind.UNEXPECTED_TOKEN,
                f"missing type hint for '{key}'",
                f"write {key}<s64>(...) or another type before the value",
            )
        raise self._unexpected(f"a value for '{key}'")

    def _parse_value(self) -> GValue:
        """Parse an anonymous value."""
        tok = self.current

        if tok.type == TokenType.TYPE_HINT:
            return self._parse_typed()
        if tok.type == TokenType.LBRACE:
            return self._parse_object()
        if tok.type == TokenType.LBRACKET:
            return self._parse_array()
        if tok.type == TokenType.IDENT:
            raise self._error(
                ErrorKind.UNEXPECTED_TOKEN,
                f"named entry '{tok.value}' where an anonymous value is expected",
                "elements of an untyped array are written as <type>(value), {...} or [...]",
            )
        raise self._unexpected("a value")

    def _parse_typed(self) -> GValue:
        """Parse TypeHint '(' Literal ')' or TypeHint '[' Literal* ']'."""
        hint = self.current
        try:
            gtype, max_len = parse_type_hint(hint.value)  # type: ignore
        except GblnError as e:
            raise at_position(e, hint.line, hint.column)
        self.advance()

        if self.current.type == TokenType.LPAREN:
            lit = self.advance()
            v = self._literal(gtype, max_len, lit)
            self.advance()
            if self.current.type != TokenType.RPAREN:
                raise self._unexpected("')'")
            self.advance()
            return v

        if self.current.type == TokenType.LBRACKET:
            arr = GValue.array_()
            self.advance()
            while self.current.type == TokenType.LITERAL:
                arr.append(self._literal(gtype, max_len, self.current))
                self.advance()
            if self.current.type != TokenType.RBRACKET:
                raise self._unexpected("']'")
            self.advance()
            return arr

        if self.current.type == TokenType.LBRACE:
            raise self._error(
                ErrorKind.UNEXPECTED_TOKEN,
                "objects do not take a type hint",
                f"remove <{hint.value}> before '{{'",
            )
        raise self._unexpected(f"'(' or '[' after <{hint.value}>")

    def _literal(self, gtype: GType, max_len: Optional[int], tok: Token) -> GValue:
        try:
            return literal_value(gtype, max_len, tok.value or "")
        except GblnError as e:
            raise at_position(e, tok.line, tok.column)

    def _parse_object(self) -> GValue:
        """Parse an object {...}"""
        opening = self.current
        self._enter(opening)
        self.advance()
        obj = GValue.object_()
        self._parse_entries(obj, opening)
        self.depth -= 1
        return obj

    def _parse_array(self) -> GValue:
        """Parse an untyped array [...] of anonymous values."""
        opening = self.current
        self._enter(opening)
        self.advance()
        arr = GValue.array_()

        while self.current.type != TokenType.RBRACKET:
            if self.current.type == TokenType.EOF:
                raise self._error(
                    ErrorKind.INVALID_SYNTAX,
                    f"unclosed '[' opened at line {opening.line}, column {opening.column}",
                    "add a closing ']'",
                    opening,
                )
            arr.append(self._parse_value())

        self.advance()
        self.depth -= 1
        return arr


def _describe(tok: Token) -> str:
    if tok.type == TokenType.IDENT:
        return f"identifier '{tok.value}'"
    if tok.type == TokenType.TYPE_HINT:
        return f"type hint <{tok.value}>"
    if tok.type == TokenType.LITERAL:
        return f"literal {tok.value!r}"
    if tok.type == TokenType.EOF:
        return "end of input"
    return f"'{tok.type}'"


# ============================================================
# Public API
# ============================================================

def parse(text: str) -> GValue:
    """Parse GBLN text into a GValue."""
    if not isinstance(text, str):
        raise error_for(
            ErrorKind.NULL_POINTER,
            f"expected str, got {type(text).__name__}",
            "decode bytes first, or use read_container() for stored data",
        )
    parser = Parser(text)
    return parser.parse()


def parse_file(path) -> GValue:
    """Read a UTF-8 GBLN source file and parse it."""
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise error_for(ErrorKind.IO, f"file '{path}' is not valid UTF-8: {e.reason}")
    except OSError as e:
        raise error_for(ErrorKind.IO, f"failed to read file '{path}': {e.strerror or e}")
    return parse(content)


def diagnose(text: str) -> Optional[Diagnostic]:
    """Return the diagnostic of the first failure in `text`, or None."""
    try:
        parse(text)
    except GblnError as e:
        return e.diagnostic
    return None
