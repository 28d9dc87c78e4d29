"""
GBLN Lexer

Turns GBLN text into tokens. The lexer is context-sensitive: the body of
`(...)` is read as one raw literal, and a `[` directly after a type hint
opens a body of whitespace-separated literals.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional

from .errors import ErrorKind, error_for


class TokenType:
    EOF = "EOF"
    IDENT = "IDENT"
    TYPE_HINT = "TYPE_HINT"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    LITERAL = "LITERAL"
    COMMENT = "COMMENT"


@dataclass
class Token:
    type: str
    value: Optional[str]
    line: int
    column: int
    offset: int


COMMENT_START = ":|"

# Characters that end a literal escape sequence
ESCAPABLE = "\\()"

_MISTAKE_HINTS = {
    '"': "string values go inside parentheses, e.g. name<s64>(text)",
    "'": "string values go inside parentheses, e.g. name<s64>(text)",
    "=": "write key<type>(value) instead of key=value",
    ",": "fields and elements are separated by whitespace, not commas",
    ":": f"comments start with '{COMMENT_START}'",
    ">": "a type hint looks like <i32>",
}


class Lexer:
    """Tokenizer for GBLN text."""

    def __init__(self, text: str, keep_comments: bool = False):
        self.text = text
        self.keep_comments = keep_comments
        self.pos = 0
        self.length = len(text)
        self.line = 1
        self.column = 1
        self._pending: Deque[Token] = deque()
        self._last_type: Optional[str] = None
        self._typed_open: Optional[Token] = None  # '[' of the typed body we are inside

    def peek_char(self, ahead: int = 0) -> str:
        i = self.pos + ahead
        if i >= self.length:
            return ""
        return self.text[i]

    def next_char(self) -> str:
        if self.pos >= self.length:
            return ""
        c = self.text[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return c

    def skip_whitespace(self) -> None:
        while self.pos < self.length and self.text[self.pos].isspace():
            self.next_char()

    def _token(self, token_type: str, value: Optional[str] = None) -> Token:
        return Token(token_type, value, self.line, self.column, self.pos)

    def next_token(self) -> Token:
        while True:
            tok = self._next_raw()
            if tok.type == TokenType.COMMENT and not self.keep_comments:
                continue
            if tok.type != TokenType.COMMENT:
                self._last_type = tok.type
            return tok

    def _next_raw(self) -> Token:
        if self._pending:
            return self._pending.popleft()
        if self._typed_open is not None:
            return self._typed_element()

        self.skip_whitespace()
        if self.pos >= self.length:
            return self._token(TokenType.EOF)

        c = self.peek_char()

        if c == ":" and self.peek_char(1) == "|":
            return self._read_comment()

        if c in "{}[])":
            tok = self._token(c, c)
            self.next_char()
            if c == "[" and self._last_type == TokenType.TYPE_HINT:
                self._typed_open = tok
            return tok

        if c == "(":
            return self._read_literal()

        if c == "<":
            return self._read_type_hint()

        if c.isalpha() or c == "_":
            return self._read_ident()

        if c.isdigit() or c in "+-":
            hint = "keys start with a letter or _; values need a type hint, e.g. <i32>(42)"
        else:
            hint = _MISTAKE_HINTS.get(c)
        raise error_for(
            ErrorKind.UNEXPECTED_CHAR,
            f"unexpected character {c!r}",
            hint,
            self.line,
            self.column,
        )

    def _read_comment(self) -> Token:
        tok = self._token(TokenType.COMMENT)
        self.next_char()
        self.next_char()
        chars = []
        while self.pos < self.length and self.text[self.pos] != "\n":
            chars.append(self.next_char())
        tok.value = "".join(chars).strip()
        return tok

    def _read_ident(self) -> Token:
        tok = self._token(TokenType.IDENT)
        chars = []
        while self.pos < self.length:
            c = self.peek_char()
            if c.isalnum() or c in "_-.":
                chars.append(self.next_char())
            else:
                break
        tok.value = "".join(chars)
        return tok

    def _read_type_hint(self) -> Token:
        tok = self._token(TokenType.TYPE_HINT)
        self.next_char()  # Skip <
        chars = []
        while True:
            c = self.peek_char()
            if c == "" or c == "\n":
                raise error_for(
                    ErrorKind.INVALID_SYNTAX,
                    "unterminated type hint",
                    "close the hint with '>', e.g. <i32>",
                    tok.line,
                    tok.column,
                )
            self.next_char()
            if c == ">":
                break
            chars.append(c)
        tok.value = "".join(chars)
        return tok

    def _read_literal(self) -> Token:
        """Read `( ... )`, returning LPAREN and queueing LITERAL and RPAREN."""
        lparen = self._token(TokenType.LPAREN, "(")
        self.next_char()
        literal = self._token(TokenType.LITERAL)
        chars = []
        depth = 0

        while True:
            c = self.peek_char()
            if c == "":
                raise error_for(
                    ErrorKind.UNTERMINATED_STRING,
                    "unterminated literal",
                    "add a closing ')'",
                    lparen.line,
                    lparen.column,
                )
            if c == "\\" and self.peek_char(1) != "" and self.peek_char(1) in ESCAPABLE:
                self.next_char()
                chars.append(self.next_char())
                continue
            if c == ")":
                if depth == 0:
                    break
                depth -= 1
            elif c == "(":
                depth += 1
            chars.append(self.next_char())

        literal.value = "".join(chars)
        rparen = self._token(TokenType.RPAREN, ")")
        self.next_char()
        self._pending.append(literal)
        self._pending.append(rparen)
        return lparen

    def _typed_element(self) -> Token:
        """Next token inside a typed `[...]` body."""
        self.skip_whitespace()
        opening = self._typed_open

        if self.pos >= self.length:
            raise error_for(
                ErrorKind.INVALID_SYNTAX,
                f"unclosed '[' opened at line {opening.line}, column {opening.column}",
                "add a closing ']'",
                opening.line,
                opening.column,
            )

        c = self.peek_char()
        if c == "]":
            tok = self._token(TokenType.RBRACKET, c)
            self.next_char()
            self._typed_open = None
            return tok

        if c == ":" and self.peek_char(1) == "|":
            return self._read_comment()

        tok = self._token(TokenType.LITERAL)
        chars = []
        while self.pos < self.length:
            c = self.peek_char()
            if c.isspace() or c == "]":
                break
            chars.append(self.next_char())
        tok.value = "".join(chars)
        return tok


# ============================================================
# Public API
# ============================================================

def tokenize(text: str, keep_comments: bool = False) -> Iterator[Token]:
    """Yield the tokens of `text`, ending with EOF."""
    lexer = Lexer(text, keep_comments=keep_comments)
    while True:
        tok = lexer.next_token()
        yield tok
        if tok.type == TokenType.EOF:
            return


def strip_comments(text: str) -> str:
    """
    Remove every `:|` comment from GBLN text.

    Literals are left untouched. Lines that held only a comment are dropped,
    and whitespace before a trailing comment is trimmed.
    """
    comments = [t for t in tokenize(text, keep_comments=True) if t.type == TokenType.COMMENT]
    if not comments:
        return text

    lines = text.split("\n")
    dropped: List[int] = []
    for tok in comments:
        i = tok.line - 1
        kept = lines[i][:tok.column - 1].rstrip()
        if not kept:
            dropped.append(i)
        lines[i] = kept
    return "\n".join(line for i, line in enumerate(lines) if i not in dropped)
