"""doublegen Lexer: Rust tokenizer with line/column and offset tracking.

Produces a stream of tokens from Rust source code. Only the syntax that can
appear in a trait declaration is distinguished; everything else is punctuation.
Multi-character operators other than `::`, `->` and `=>` are emitted one
character at a time so that nested generics such as `Vec<Vec<u8>>` close
naturally.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from doublegen.errors import SourceLocation, syntax_error, CompileError


class TokenType(Enum):
    # Keywords
    PUB = auto()
    TRAIT = auto()
    FN = auto()
    ASYNC = auto()
    UNSAFE = auto()
    EXTERN = auto()
    TYPE = auto()
    CONST = auto()
    WHERE = auto()
    IMPL = auto()
    DYN = auto()
    FOR = auto()
    SELF_VALUE = auto()
    SELF_TYPE = auto()
    MUT = auto()
    REF = auto()
    CRATE = auto()
    SUPER = auto()
    IN = auto()
    AS = auto()
    USE = auto()
    UNDERSCORE = auto()

    # Literals
    INT_LIT = auto()
    FLOAT_LIT = auto()
    STRING_LIT = auto()
    CHAR_LIT = auto()

    # Identifiers
    IDENT = auto()
    LIFETIME = auto()

    # Outer doc comment (`/// ...`), kept because it is an attribute
    DOC_COMMENT = auto()

    # Operators
    ARROW = auto()
    FAT_ARROW = auto()
    DOUBLE_COLON = auto()
    EQ = auto()
    LT = auto()
    GT = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()
    CARET = auto()
    AMP = auto()
    PIPE = auto()
    BANG = auto()
    QUESTION = auto()
    TILDE = auto()
    AT = auto()
    DOLLAR = auto()
    DOT = auto()
    POUND = auto()

    # Delimiters
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COLON = auto()
    COMMA = auto()
    SEMICOLON = auto()

    # Special
    EOF = auto()


KEYWORDS: dict[str, TokenType] = {
    "pub": TokenType.PUB,
    "trait": TokenType.TRAIT,
    "fn": TokenType.FN,
    "async": TokenType.ASYNC,
    "unsafe": TokenType.UNSAFE,
    "extern": TokenType.EXTERN,
    "type": TokenType.TYPE,
    "const": TokenType.CONST,
    "where": TokenType.WHERE,
    "impl": TokenType.IMPL,
    "dyn": TokenType.DYN,
    "for": TokenType.FOR,
    "self": TokenType.SELF_VALUE,
    "Self": TokenType.SELF_TYPE,
    "mut": TokenType.MUT,
    "ref": TokenType.REF,
    "crate": TokenType.CRATE,
    "super": TokenType.SUPER,
    "in": TokenType.IN,
    "as": TokenType.AS,
    "use": TokenType.USE,
    "_": TokenType.UNDERSCORE,
}

# Reserved words that may not name a generated trait.
RESERVED_WORDS = frozenset(KEYWORDS) | frozenset({
    "abstract", "become", "box", "break", "continue", "do", "else", "enum",
    "false", "final", "gen", "if", "let", "loop", "macro", "match", "mod",
    "move", "override", "priv", "return", "static", "struct", "true", "try",
    "typeof", "unsized", "virtual", "while", "yield", "await",
})

_SINGLE_CHAR: dict[str, TokenType] = {
    "=": TokenType.EQ,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "^": TokenType.CARET,
    "&": TokenType.AMP,
    "|": TokenType.PIPE,
    "!": TokenType.BANG,
    "?": TokenType.QUESTION,
    "~": TokenType.TILDE,
    "@": TokenType.AT,
    "$": TokenType.DOLLAR,
    ".": TokenType.DOT,
    "#": TokenType.POUND,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
}

_STRING_PREFIXES = ("r", "b", "br", "c", "cr")


@dataclass
class Token:
    type: TokenType
    value: str
    location: SourceLocation
    offset: int = 0
    end: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.location})"


class Lexer:
    """Tokenizer for Rust trait declarations."""

    def __init__(self, source: str, filename: str = "<stdin>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def _loc(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.filename)

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def _peek_ahead(self, offset: int = 1) -> Optional[str]:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return None

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _token(self, tt: TokenType, start: int, loc: SourceLocation) -> Token:
        return Token(tt, self.source[start:self.pos], loc, start, self.pos)

    def _skip_block_comment(self) -> None:
        loc = self._loc()
        self._advance()
        self._advance()
        depth = 1
        while self.pos < len(self.source):
            if self.source[self.pos] == "/" and self._peek_ahead() == "*":
                self._advance()
                self._advance()
                depth += 1
            elif self.source[self.pos] == "*" and self._peek_ahead() == "/":
                self._advance()
                self._advance()
                depth -= 1
                if depth == 0:
                    return
            else:
                self._advance()
        raise CompileError(syntax_error("Unterminated block comment", loc))

    def _skip_whitespace_and_comments(self) -> Optional[Token]:
        """Skip trivia. Returns a DOC_COMMENT token if one is found."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch.isspace():
                self._advance()
            elif ch == "/" and self._peek_ahead() == "/":
                start, loc = self.pos, self._loc()
                is_doc = self._peek_ahead(2) == "/" and self._peek_ahead(3) != "/"
                while self.pos < len(self.source) and self.source[self.pos] != "\n":
                    self._advance()
                if is_doc:
                    return Token(TokenType.DOC_COMMENT, self.source[start:self.pos].rstrip(),
                                 loc, start, self.pos)
            elif ch == "/" and self._peek_ahead() == "*":
                self._skip_block_comment()
            else:
                break
        return None

    def _read_quoted(self, quote: str, loc: SourceLocation) -> None:
        self._advance()  # opening quote
        while self.pos < len(self.source):
            ch = self._advance()
            if ch == quote:
                return
            if ch == "\\" and self.pos < len(self.source):
                self._advance()
        raise CompileError(syntax_error("Unterminated literal", loc))

    def _read_raw_string(self, loc: SourceLocation) -> None:
        hashes = 0
        while self._peek() == "#":
            self._advance()
            hashes += 1
        if self._peek() != '"':
            raise CompileError(syntax_error("Malformed raw string literal", loc))
        self._advance()
        terminator = '"' + "#" * hashes
        end = self.source.find(terminator, self.pos)
        if end < 0:
            raise CompileError(syntax_error("Unterminated raw string literal", loc))
        while self.pos < end + len(terminator):
            self._advance()

    def _read_quote(self) -> Token:
        """Either a char literal ('a', '\\n') or a lifetime ('a, 'static)."""
        start, loc = self.pos, self._loc()
        nxt = self._peek_ahead()
        if nxt == "\\" or (nxt is not None and self._peek_ahead(2) == "'"):
            self._read_quoted("'", loc)
            return self._token(TokenType.CHAR_LIT, start, loc)
        self._advance()
        if not (self._peek() and (self._peek().isalpha() or self._peek() == "_")):
            raise CompileError(syntax_error("Malformed lifetime or char literal", loc))
        while self.pos < len(self.source) and (self.source[self.pos].isalnum() or self.source[self.pos] == "_"):
            self._advance()
        return self._token(TokenType.LIFETIME, start, loc)

    def _read_number(self) -> Token:
        start, loc = self.pos, self._loc()
        is_float = False
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch.isalnum() or ch == "_":
                # Exponent sign: 1e-5, 2.5E+3
                if ch in "eE" and self._peek_ahead() in ("+", "-") and not self.source[start:self.pos].startswith("0x"):
                    self._advance()
                    is_float = True
                self._advance()
            elif ch == "." and self._peek_ahead() is not None and self._peek_ahead().isdigit() and not is_float:
                is_float = True
                self._advance()
            else:
                break
        return self._token(TokenType.FLOAT_LIT if is_float else TokenType.INT_LIT, start, loc)

    def _read_identifier(self) -> Token:
        start, loc = self.pos, self._loc()
        while self.pos < len(self.source) and (self.source[self.pos].isalnum() or self.source[self.pos] == "_"):
            self._advance()
        value = self.source[start:self.pos]

        if value in _STRING_PREFIXES:
            nxt = self._peek()
            if nxt == '"' and "r" not in value:
                self._read_quoted('"', loc)
                return self._token(TokenType.STRING_LIT, start, loc)
            if nxt in ('"', "#") and "r" in value:
                if nxt == "#" and value == "r" and self._peek_ahead() not in ('"', "#"):
                    # Raw identifier: r#type
                    self._advance()
                    while self.pos < len(self.source) and (self.source[self.pos].isalnum() or self.source[self.pos] == "_"):
                        self._advance()
                    return self._token(TokenType.IDENT, start, loc)
                self._read_raw_string(loc)
                return self._token(TokenType.STRING_LIT, start, loc)
        if value == "b" and self._peek() == "'":
            self._read_quoted("'", loc)
            return self._token(TokenType.CHAR_LIT, start, loc)

        return Token(KEYWORDS.get(value, TokenType.IDENT), value, loc, start, self.pos)

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while self.pos < len(self.source):
            doc = self._skip_whitespace_and_comments()
            if doc is not None:
                tokens.append(doc)
                continue
            if self.pos >= len(self.source):
                break

            ch = self._peek()
            loc = self._loc()
            start = self.pos

            if ch == '"':
                self._read_quoted('"', loc)
                tokens.append(self._token(TokenType.STRING_LIT, start, loc))
            elif ch == "'":
                tokens.append(self._read_quote())
            elif ch.isdigit():
                tokens.append(self._read_number())
            elif ch.isalpha() or ch == "_":
                tokens.append(self._read_identifier())
            elif ch == ":" and self._peek_ahead() == ":":
                self._advance()
                self._advance()
                tokens.append(self._token(TokenType.DOUBLE_COLON, start, loc))
            elif ch == "-" and self._peek_ahead() == ">":
                self._advance()
                self._advance()
                tokens.append(self._token(TokenType.ARROW, start, loc))
            elif ch == "=" and self._peek_ahead() == ">":
                self._advance()
                self._advance()
                tokens.append(self._token(TokenType.FAT_ARROW, start, loc))
            elif ch in _SINGLE_CHAR:
                self._advance()
                tokens.append(self._token(_SINGLE_CHAR[ch], start, loc))
            else:
                self._advance()
                raise CompileError(syntax_error(f"Unexpected character '{ch}'", loc))

        end = len(self.source)
        tokens.append(Token(TokenType.EOF, "", self._loc(), end, end))
        return tokens


def tokenize(source: str, filename: str = "<stdin>") -> list[Token]:
    """Convenience function to tokenize Rust source code."""
    return Lexer(source, filename).tokenize()
