import pytest
from boar.boar_lexer import Lexer
from boar.boar_token import Token, TokenKind, lookup_ident

K = TokenKind

SOURCE = '''let five = 5;
let add = fn(x, y) {
  x + y;
};
!-/*5;
5 < 10 > 5;
if (5 < 10) { return true; } else { return false; }
10 == 10;
10 != 9;
"foobar"
"foo bar"
[1, 2];
{"foo": "bar"}
arr.len()
for
'''

EXPECTED = [
    (K.LET, "let"), (K.IDENT, "five"), (K.ASSIGN, "="), (K.INT, "5"), (K.SEMICOLON, ";"),
    (K.LET, "let"), (K.IDENT, "add"), (K.ASSIGN, "="), (K.FUNCTION, "fn"),
    (K.LPAREN, "("), (K.IDENT, "x"), (K.COMMA, ","), (K.IDENT, "y"), (K.RPAREN, ")"),
    (K.LBRACE, "{"), (K.IDENT, "x"), (K.PLUS, "+"), (K.IDENT, "y"), (K.SEMICOLON, ";"),
    (K.RBRACE, "}"), (K.SEMICOLON, ";"),
    (K.BANG, "!"), (K.MINUS, "-"), (K.SLASH, "/"), (K.ASTERISK, "*"), (K.INT, "5"), (K.SEMICOLON, ";"),
    (K.INT, "5"), (K.LT, "<"), (K.INT, "10"), (K.GT, ">"), (K.INT, "5"), (K.SEMICOLON, ";"),
    (K.IF, "if"), (K.LPAREN, "("), (K.INT, "5"), (K.LT, "<"), (K.INT, "10"), (K.RPAREN, ")"),
    (K.LBRACE, "{"), (K.RETURN, "return"), (K.TRUE, "true"), (K.SEMICOLON, ";"), (K.RBRACE, "}"),
    (K.ELSE, "else"), (K.LBRACE, "{"), (K.RETURN, "return"), (K.FALSE, "false"), (K.SEMICOLON, ";"),
    (K.RBRACE, "}"),
    (K.INT, "10"), (K.EQ, "=="), (K.INT, "10"), (K.SEMICOLON, ";"),
    (K.INT, "10"), (K.NOT_EQ, "!="), (K.INT, "9"), (K.SEMICOLON, ";"),
    (K.STRING, "foobar"), (K.STRING, "foo bar"),
    (K.LBRACKET, "["), (K.INT, "1"), (K.COMMA, ","), (K.INT, "2"), (K.RBRACKET, "]"), (K.SEMICOLON, ";"),
    (K.LBRACE, "{"), (K.STRING, "foo"), (K.COLON, ":"), (K.STRING, "bar"), (K.RBRACE, "}"),
    (K.IDENT, "arr"), (K.DOT, "."), (K.IDENT, "len"), (K.LPAREN, "("), (K.RPAREN, ")"),
    (K.FOR, "for"),
    (K.EOF, ""),
]


def test_next_token_sequence():
    lexer = Lexer(SOURCE)
    for i, (kind, literal) in enumerate(EXPECTED):
        tok = lexer.next_token()
        assert tok.kind is kind, f"token {i}: expected {kind!r}, got {tok!r}"
        assert tok.literal == literal, f"token {i}: expected {literal!r}, got {tok.literal!r}"


def test_iteration_yields_through_eof():
    tokens = list(Lexer("let x = 1;"))
    assert tokens[-1] == Token(K.EOF, "")
    assert [t.kind for t in tokens] == [K.LET, K.IDENT, K.ASSIGN, K.INT, K.SEMICOLON, K.EOF]
    # Iterating again starts over from the beginning.
    assert list(Lexer("let x = 1;")) == tokens


def test_eof_repeats_after_exhaustion():
    lexer = Lexer("x")
    assert lexer.next_token() == Token(K.IDENT, "x")
    assert lexer.next_token().kind is K.EOF
    assert lexer.next_token().kind is K.EOF


def test_empty_and_whitespace_only_source():
    assert Lexer("").next_token().kind is K.EOF
    assert Lexer(" \t\r\n  ").next_token().kind is K.EOF


@pytest.mark.parametrize("ch", ["@", "#", "$", "%", "&", "?"])
def test_unknown_character_is_illegal(ch):
    tok = Lexer(ch).next_token()
    assert tok == Token(K.ILLEGAL, ch)


def test_unterminated_string_ends_at_eof():
    lexer = Lexer('"abc')
    assert lexer.next_token() == Token(K.STRING, "abc")
    assert lexer.next_token().kind is K.EOF


def test_empty_string_literal():
    assert Lexer('""').next_token() == Token(K.STRING, "")


def test_identifiers_allow_underscores_but_not_digits():
    kinds = [(t.kind, t.literal) for t in Lexer("snake_case x1")]
    assert kinds == [
        (K.IDENT, "snake_case"), (K.IDENT, "x"), (K.INT, "1"), (K.EOF, ""),
    ]


@pytest.mark.parametrize("word, kind", [
    ("fn", K.FUNCTION), ("let", K.LET), ("true", K.TRUE), ("false", K.FALSE),
    ("if", K.IF), ("else", K.ELSE), ("return", K.RETURN), ("for", K.FOR),
    ("fnord", K.IDENT), ("lets", K.IDENT), ("For", K.IDENT),
])
def test_lookup_ident(word, kind):
    assert lookup_ident(word) is kind


def test_token_kind_renders_as_its_value():
    assert str(K.ASSIGN) == "="
    assert str(K.IDENT) == "IDENT"
    assert str(K.RBRACE) == "}"
