"""
Defines the token model for the Boar language.

Tokens are the smallest lexical units produced by the Lexer: a kind taken
from a closed enumeration plus the literal source text it was read from.
"""

import enum
from dataclasses import dataclass
from typing import Dict


class TokenKind(enum.Enum):
    """All token kinds. The value is the name shown in syntax-error messages."""
    # Meta
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers and literals
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    DOT = "."
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    # Keywords
    FUNCTION = "FUNCTION"
    LET = "LET"
    TRUE = "TRUE"
    FALSE = "FALSE"
    IF = "IF"
    ELSE = "ELSE"
    RETURN = "RETURN"
    FOR = "FOR"

    def __str__(self):
        return self.value


KEYWORDS: Dict[str, TokenKind] = {
    # fmt: off
    "fn":     TokenKind.FUNCTION,
    "let":    TokenKind.LET,
    "true":   TokenKind.TRUE,
    "false":  TokenKind.FALSE,
    "if":     TokenKind.IF,
    "else":   TokenKind.ELSE,
    "return": TokenKind.RETURN,
    "for":    TokenKind.FOR,
    # fmt: on
}

# Single-character operators and delimiters that map directly to a kind.
SINGLE_CHAR_TOKENS: Dict[str, TokenKind] = {
    "=": TokenKind.ASSIGN,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "!": TokenKind.BANG,
    "*": TokenKind.ASTERISK,
    "/": TokenKind.SLASH,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    ":": TokenKind.COLON,
    ".": TokenKind.DOT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    literal: str

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.literal!r})"


def lookup_ident(ident: str) -> TokenKind:
    """Returns the keyword kind for `ident`, or IDENT for user identifiers."""
    return KEYWORDS.get(ident, TokenKind.IDENT)
