"""
The Boar lexer: turns raw source text into a stream of tokens.

The lexer is ASCII-only. It walks the source one character at a time with a
single character of lookahead, skipping whitespace before every token.
"""

from typing import Iterator

from boar.boar_token import Token, TokenKind, SINGLE_CHAR_TOKENS, lookup_ident

# Marks "no character": end of input.
NUL = ""

WHITESPACE = (" ", "\t", "\n", "\r")


def is_letter(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Produces tokens on demand via `next_token()`.

    Once the input is exhausted every further call returns an EOF token.
    Iterating over a Lexer restarts from the beginning of the source and
    yields tokens up to and including the first EOF.
    """

    def __init__(self, source: str):
        self.source = source
        # Index of `ch` in the source.
        self.position = 0
        # Index of the character after `ch`.
        self.read_position = 0
        self.ch = NUL
        self._read_char()

    def __iter__(self) -> Iterator[Token]:
        lexer = Lexer(self.source)
        while True:
            tok = lexer.next_token()
            yield tok
            if tok.kind is TokenKind.EOF:
                return

    def _read_char(self) -> None:
        if self.read_position >= len(self.source):
            self.ch = NUL
        else:
            self.ch = self.source[self.read_position]
        self.position = self.read_position
        self.read_position += 1

    def _peek_char(self) -> str:
        if self.read_position >= len(self.source):
            return NUL
        return self.source[self.read_position]

    def _skip_whitespace(self) -> None:
        while self.ch != NUL and self.ch in WHITESPACE:
            self._read_char()

    def _read_identifier(self) -> str:
        start = self.position
        while is_letter(self.ch):
            self._read_char()
        return self.source[start:self.position]

    def _read_number(self) -> str:
        start = self.position
        while is_digit(self.ch):
            self._read_char()
        return self.source[start:self.position]

    def _read_string(self) -> str:
        # Unterminated strings end at EOF with whatever was captured.
        start = self.position + 1
        while True:
            self._read_char()
            if self.ch == '"' or self.ch == NUL:
                break
        return self.source[start:self.position]

    def next_token(self) -> Token:
        self._skip_whitespace()
        ch = self.ch

        if ch == NUL:
            return Token(TokenKind.EOF, "")

        if ch == "=" and self._peek_char() == "=":
            self._read_char()
            tok = Token(TokenKind.EQ, "==")
        elif ch == "!" and self._peek_char() == "=":
            self._read_char()
            tok = Token(TokenKind.NOT_EQ, "!=")
        elif ch == '"':
            tok = Token(TokenKind.STRING, self._read_string())
        elif ch in SINGLE_CHAR_TOKENS:
            tok = Token(SINGLE_CHAR_TOKENS[ch], ch)
        elif is_letter(ch):
            # Early return: reading the identifier already advanced past it.
            literal = self._read_identifier()
            return Token(lookup_ident(literal), literal)
        elif is_digit(ch):
            return Token(TokenKind.INT, self._read_number())
        else:
            tok = Token(TokenKind.ILLEGAL, ch)

        self._read_char()
        return tok
