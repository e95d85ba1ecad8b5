"""
The Boar parser: an operator-precedence ("Pratt") parser over the token stream.

Each token kind may have a prefix parse function (the token starts an
expression) and/or an infix parse function (the token continues an
expression whose left operand is already parsed). Both tables are populated
once when the parser is constructed.

Syntax errors are collected as strings in `Parser.errors`; parsing carries on
past a failed statement so one pass reports every detectable error.
"""

import enum
import functools
import os
import sys
from typing import Callable, Dict, List, Optional, Tuple

from boar.boar_token import Token, TokenKind
from boar.boar_lexer import Lexer
from boar import boar_ast as ast

INT64_MAX = 2 ** 63 - 1


class Precedence(enum.IntEnum):
    LOWEST = 1
    EQUALS = 2         # == !=
    LESSGREATER = 3    # < >
    SUM = 4            # + -
    PRODUCT = 5        # * /
    PREFIX = 6         # -x !x
    ASSIGN = 7         # x = y
    CALL = 8           # f(x) a[i]
    INTERNAL_CALL = 9  # a.f(x)


PRECEDENCES: Dict[TokenKind, Precedence] = {
    # fmt: off
    TokenKind.EQ:       Precedence.EQUALS,
    TokenKind.NOT_EQ:   Precedence.EQUALS,
    TokenKind.LT:       Precedence.LESSGREATER,
    TokenKind.GT:       Precedence.LESSGREATER,
    TokenKind.PLUS:     Precedence.SUM,
    TokenKind.MINUS:    Precedence.SUM,
    TokenKind.ASTERISK: Precedence.PRODUCT,
    TokenKind.SLASH:    Precedence.PRODUCT,
    TokenKind.ASSIGN:   Precedence.ASSIGN,
    TokenKind.LPAREN:   Precedence.CALL,
    TokenKind.LBRACKET: Precedence.CALL,
    TokenKind.DOT:      Precedence.INTERNAL_CALL,
    # fmt: on
}

# Tokens at which error recovery stops skipping.
STATEMENT_BOUNDARIES = (TokenKind.SEMICOLON, TokenKind.RBRACE, TokenKind.EOF)


def traced(func):
    """Prints BEGIN/END lines around a parse rule when tracing is enabled."""
    rule = func.__name__.lstrip("_")

    @functools.wraps(func)
    def wrapper(self, *args):
        if not self.trace:
            return func(self, *args)
        self._trace_level += 1
        self._trace_print(f"BEGIN {rule}")
        try:
            return func(self, *args)
        finally:
            self._trace_print(f"END {rule}")
            self._trace_level -= 1
    return wrapper


class Parser:
    PrefixParseFn = Callable[[], Optional[ast.Expression]]
    InfixParseFn = Callable[[ast.Expression], Optional[ast.Expression]]

    def __init__(self, lexer: Lexer, trace: Optional[bool] = None):
        self.lexer = lexer
        self.errors: List[str] = []
        self.trace = bool(os.environ.get("BOAR_TRACE")) if trace is None else trace
        self._trace_level = 0

        self.cur_token = Token(TokenKind.ILLEGAL, "")
        self.peek_token = Token(TokenKind.ILLEGAL, "")
        # Read two tokens so cur_token and peek_token are both set.
        self._next_token()
        self._next_token()

        self.prefix_parse_fns: Dict[TokenKind, Parser.PrefixParseFn] = {}
        self.infix_parse_fns: Dict[TokenKind, Parser.InfixParseFn] = {}

        self._register_prefix(TokenKind.IDENT, self._parse_identifier)
        self._register_prefix(TokenKind.INT, self._parse_integer_literal)
        self._register_prefix(TokenKind.STRING, self._parse_string_literal)
        self._register_prefix(TokenKind.TRUE, self._parse_boolean)
        self._register_prefix(TokenKind.FALSE, self._parse_boolean)
        self._register_prefix(TokenKind.BANG, self._parse_prefix_expression)
        self._register_prefix(TokenKind.MINUS, self._parse_prefix_expression)
        self._register_prefix(TokenKind.LPAREN, self._parse_grouped_expression)
        self._register_prefix(TokenKind.IF, self._parse_if_expression)
        self._register_prefix(TokenKind.FUNCTION, self._parse_function_literal)
        self._register_prefix(TokenKind.LBRACKET, self._parse_array_literal)
        self._register_prefix(TokenKind.LBRACE, self._parse_hash_literal)

        for kind in (
            TokenKind.PLUS, TokenKind.MINUS, TokenKind.ASTERISK, TokenKind.SLASH,
            TokenKind.EQ, TokenKind.NOT_EQ, TokenKind.LT, TokenKind.GT,
        ):
            self._register_infix(kind, self._parse_infix_expression)
        self._register_infix(TokenKind.LPAREN, self._parse_call_expression)
        self._register_infix(TokenKind.LBRACKET, self._parse_index_expression)
        self._register_infix(TokenKind.DOT, self._parse_internal_function_call)
        self._register_infix(TokenKind.ASSIGN, self._parse_assignment_expression)

    def _register_prefix(self, kind: TokenKind, fn: "Parser.PrefixParseFn") -> None:
        self.prefix_parse_fns[kind] = fn

    def _register_infix(self, kind: TokenKind, fn: "Parser.InfixParseFn") -> None:
        self.infix_parse_fns[kind] = fn

    # --- Token helpers ---

    def _next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def _cur_token_is(self, kind: TokenKind) -> bool:
        return self.cur_token.kind is kind

    def _peek_token_is(self, kind: TokenKind) -> bool:
        return self.peek_token.kind is kind

    def _expect_peek(self, kind: TokenKind) -> bool:
        """Advances when the next token has the given kind, else records an error."""
        if self._peek_token_is(kind):
            self._next_token()
            return True
        self._peek_error(kind)
        return False

    def _peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.kind, Precedence.LOWEST)

    def _cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.kind, Precedence.LOWEST)

    def _synchronize(self) -> None:
        while self.cur_token.kind not in STATEMENT_BOUNDARIES:
            self._next_token()

    # --- Errors and tracing ---

    def _peek_error(self, kind: TokenKind) -> None:
        self.errors.append(
            f"expected next token to be {kind}, got {self.peek_token.kind} instead"
        )

    def _no_prefix_parse_fn_error(self, kind: TokenKind) -> None:
        self.errors.append(f"no prefix parse function for {kind} found")

    def _trace_print(self, msg: str) -> None:
        print("\t" * (self._trace_level - 1) + msg, file=sys.stderr)

    # --- Statements ---

    def parse_program(self) -> ast.Program:
        statements: List[ast.Statement] = []
        while not self._cur_token_is(TokenKind.EOF):
            stmt = self._parse_statement()
            if stmt is not None:
                statements.append(stmt)
            else:
                self._synchronize()
            self._next_token()
        return ast.Program(tuple(statements))

    def _parse_statement(self) -> Optional[ast.Statement]:
        match self.cur_token.kind:
            case TokenKind.LET:
                return self._parse_let_statement()
            case TokenKind.RETURN:
                return self._parse_return_statement()
            case TokenKind.FOR:
                return self._parse_for_loop_statement()
            case _:
                return self._parse_expression_statement()

    @traced
    def _parse_let_statement(self) -> Optional[ast.LetStatement]:
        token = self.cur_token
        if not self._expect_peek(TokenKind.IDENT):
            return None
        name = ast.Identifier(self.cur_token, self.cur_token.literal)
        if not self._expect_peek(TokenKind.ASSIGN):
            return None
        self._next_token()
        value = self._parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self._peek_token_is(TokenKind.SEMICOLON):
            self._next_token()
        return ast.LetStatement(token, name, value)

    @traced
    def _parse_return_statement(self) -> Optional[ast.ReturnStatement]:
        token = self.cur_token
        if self.peek_token.kind in STATEMENT_BOUNDARIES:
            if self._peek_token_is(TokenKind.SEMICOLON):
                self._next_token()
            return ast.ReturnStatement(token, None)
        self._next_token()
        value = self._parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self._peek_token_is(TokenKind.SEMICOLON):
            self._next_token()
        return ast.ReturnStatement(token, value)

    @traced
    def _parse_for_loop_statement(self) -> Optional[ast.ForLoopStatement]:
        token = self.cur_token
        if not self._expect_peek(TokenKind.LPAREN):
            return None

        # Counter declaration: let IDENT = EXPR ;
        if not self._expect_peek(TokenKind.LET):
            return None
        let_token = self.cur_token
        if not self._expect_peek(TokenKind.IDENT):
            return None
        name = ast.Identifier(self.cur_token, self.cur_token.literal)
        if not self._expect_peek(TokenKind.ASSIGN):
            return None
        self._next_token()
        initial = self._parse_expression(Precedence.LOWEST)
        if initial is None or not self._expect_peek(TokenKind.SEMICOLON):
            return None
        counter_var = ast.LetStatement(let_token, name, initial)

        # Loop condition ;
        self._next_token()
        condition = self._parse_expression(Precedence.LOWEST)
        if condition is None or not self._expect_peek(TokenKind.SEMICOLON):
            return None

        # Update: IDENT = EXPR
        if not self._expect_peek(TokenKind.IDENT):
            return None
        target = ast.Identifier(self.cur_token, self.cur_token.literal)
        if not self._expect_peek(TokenKind.ASSIGN):
            return None
        assign_token = self.cur_token
        self._next_token()
        update_value = self._parse_expression(Precedence.LOWEST)
        if update_value is None:
            return None
        update = ast.AssignmentExpression(assign_token, target, update_value)

        if not self._expect_peek(TokenKind.RPAREN):
            return None
        if not self._expect_peek(TokenKind.LBRACE):
            return None
        body = self._parse_block_statement()
        if body is None:
            return None
        if self._peek_token_is(TokenKind.SEMICOLON):
            self._next_token()
        return ast.ForLoopStatement(token, counter_var, condition, update, body)

    @traced
    def _parse_expression_statement(self) -> Optional[ast.ExpressionStatement]:
        token = self.cur_token
        expression = self._parse_expression(Precedence.LOWEST)
        if expression is None:
            return None
        if self._peek_token_is(TokenKind.SEMICOLON):
            self._next_token()
        return ast.ExpressionStatement(token, expression)

    @traced
    def _parse_block_statement(self) -> Optional[ast.BlockStatement]:
        token = self.cur_token
        statements: List[ast.Statement] = []
        self._next_token()
        while not self._cur_token_is(TokenKind.RBRACE):
            if self._cur_token_is(TokenKind.EOF):
                self.errors.append(
                    f"expected next token to be {TokenKind.RBRACE}, got {TokenKind.EOF} instead"
                )
                return None
            stmt = self._parse_statement()
            if stmt is not None:
                statements.append(stmt)
            else:
                self._synchronize()
                if self._cur_token_is(TokenKind.RBRACE):
                    break
            self._next_token()
        return ast.BlockStatement(token, tuple(statements))

    # --- Expressions ---

    @traced
    def _parse_expression(self, precedence: Precedence) -> Optional[ast.Expression]:
        prefix = self.prefix_parse_fns.get(self.cur_token.kind)
        if prefix is None:
            self._no_prefix_parse_fn_error(self.cur_token.kind)
            return None
        left = prefix()

        while (
            left is not None
            and not self._peek_token_is(TokenKind.SEMICOLON)
            and precedence < self._peek_precedence()
        ):
            infix = self.infix_parse_fns.get(self.peek_token.kind)
            if infix is None:
                return left
            self._next_token()
            left = infix(left)

        return left

    def _parse_identifier(self) -> ast.Expression:
        return ast.Identifier(self.cur_token, self.cur_token.literal)

    @traced
    def _parse_integer_literal(self) -> Optional[ast.Expression]:
        literal = self.cur_token.literal
        value = int(literal)
        if value > INT64_MAX:
            self.errors.append(f'could not parse "{literal}" as integer')
            return None
        return ast.IntegerLiteral(self.cur_token, value)

    def _parse_string_literal(self) -> ast.Expression:
        return ast.StringLiteral(self.cur_token, self.cur_token.literal)

    def _parse_boolean(self) -> ast.Expression:
        return ast.Boolean(self.cur_token, self._cur_token_is(TokenKind.TRUE))

    @traced
    def _parse_prefix_expression(self) -> Optional[ast.Expression]:
        token = self.cur_token
        self._next_token()
        right = self._parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return ast.PrefixExpression(token, token.literal, right)

    @traced
    def _parse_infix_expression(self, left: ast.Expression) -> Optional[ast.Expression]:
        token = self.cur_token
        precedence = self._cur_precedence()
        self._next_token()
        right = self._parse_expression(precedence)
        if right is None:
            return None
        return ast.InfixExpression(token, left, token.literal, right)

    def _parse_grouped_expression(self) -> Optional[ast.Expression]:
        self._next_token()
        expression = self._parse_expression(Precedence.LOWEST)
        if expression is None or not self._expect_peek(TokenKind.RPAREN):
            return None
        return expression

    @traced
    def _parse_if_expression(self) -> Optional[ast.Expression]:
        token = self.cur_token
        if not self._expect_peek(TokenKind.LPAREN):
            return None
        self._next_token()
        condition = self._parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        if not self._expect_peek(TokenKind.RPAREN):
            return None
        if not self._expect_peek(TokenKind.LBRACE):
            return None
        consequence = self._parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self._peek_token_is(TokenKind.ELSE):
            self._next_token()
            if not self._expect_peek(TokenKind.LBRACE):
                return None
            alternative = self._parse_block_statement()
            if alternative is None:
                return None

        return ast.IfExpression(token, condition, consequence, alternative)

    @traced
    def _parse_function_literal(self) -> Optional[ast.Expression]:
        token = self.cur_token
        if not self._expect_peek(TokenKind.LPAREN):
            return None
        parameters = self._parse_function_parameters()
        if parameters is None:
            return None
        if not self._expect_peek(TokenKind.LBRACE):
            return None
        body = self._parse_block_statement()
        if body is None:
            return None
        return ast.FunctionLiteral(token, parameters, body)

    def _parse_function_parameters(self) -> Optional[Tuple[ast.Identifier, ...]]:
        identifiers: List[ast.Identifier] = []
        if self._peek_token_is(TokenKind.RPAREN):
            self._next_token()
            return ()
        if not self._expect_peek(TokenKind.IDENT):
            return None
        identifiers.append(ast.Identifier(self.cur_token, self.cur_token.literal))
        while self._peek_token_is(TokenKind.COMMA):
            self._next_token()
            if not self._expect_peek(TokenKind.IDENT):
                return None
            identifiers.append(ast.Identifier(self.cur_token, self.cur_token.literal))
        if not self._expect_peek(TokenKind.RPAREN):
            return None
        return tuple(identifiers)

    def _parse_expression_list(self, end: TokenKind) -> Optional[Tuple[ast.Expression, ...]]:
        """Parses `expr, expr, ...` up to the closing `end` token.

        Shared by call arguments, array elements and method-call arguments.
        """
        items: List[ast.Expression] = []
        if self._peek_token_is(end):
            self._next_token()
            return ()

        self._next_token()
        item = self._parse_expression(Precedence.LOWEST)
        if item is None:
            return None
        items.append(item)

        while self._peek_token_is(TokenKind.COMMA):
            self._next_token()
            self._next_token()
            item = self._parse_expression(Precedence.LOWEST)
            if item is None:
                return None
            items.append(item)

        if not self._expect_peek(end):
            return None
        return tuple(items)

    @traced
    def _parse_call_expression(self, function: ast.Expression) -> Optional[ast.Expression]:
        token = self.cur_token
        arguments = self._parse_expression_list(TokenKind.RPAREN)
        if arguments is None:
            return None
        return ast.CallExpression(token, function, arguments)

    def _parse_array_literal(self) -> Optional[ast.Expression]:
        token = self.cur_token
        elements = self._parse_expression_list(TokenKind.RBRACKET)
        if elements is None:
            return None
        return ast.ArrayLiteral(token, elements)

    @traced
    def _parse_hash_literal(self) -> Optional[ast.Expression]:
        token = self.cur_token
        pairs: List[Tuple[ast.Expression, ast.Expression]] = []
        while not self._peek_token_is(TokenKind.RBRACE):
            self._next_token()
            key = self._parse_expression(Precedence.LOWEST)
            if key is None or not self._expect_peek(TokenKind.COLON):
                return None
            self._next_token()
            value = self._parse_expression(Precedence.LOWEST)
            if value is None:
                return None
            pairs.append((key, value))
            if not self._peek_token_is(TokenKind.RBRACE) and not self._expect_peek(TokenKind.COMMA):
                return None
        if not self._expect_peek(TokenKind.RBRACE):
            return None
        return ast.HashLiteral(token, tuple(pairs))

    @traced
    def _parse_index_expression(self, left: ast.Expression) -> Optional[ast.Expression]:
        token = self.cur_token
        self._next_token()
        index = self._parse_expression(Precedence.LOWEST)
        if index is None or not self._expect_peek(TokenKind.RBRACKET):
            return None

        # `left[index] = value` reinterprets the read as a write target.
        if self._peek_token_is(TokenKind.ASSIGN):
            self._next_token()
            self._next_token()
            value = self._parse_expression(Precedence.LOWEST)
            if value is None:
                return None
            return ast.IndexAssignment(token, left, index, value)

        return ast.IndexExpression(token, left, index)

    @traced
    def _parse_internal_function_call(self, left: ast.Expression) -> Optional[ast.Expression]:
        token = self.cur_token
        if not isinstance(left, ast.Identifier):
            self.errors.append(f"invalid method call receiver: {left}")
            return None
        if not self._expect_peek(TokenKind.IDENT):
            return None
        function = ast.Identifier(self.cur_token, self.cur_token.literal)
        if not self._expect_peek(TokenKind.LPAREN):
            return None
        arguments = self._parse_expression_list(TokenKind.RPAREN)
        if arguments is None:
            return None
        return ast.InternalFunctionCall(token, left, function, arguments)

    @traced
    def _parse_assignment_expression(self, left: ast.Expression) -> Optional[ast.Expression]:
        token = self.cur_token
        if not isinstance(left, ast.Identifier):
            self.errors.append(f"invalid assignment target: {left}")
            return None
        self._next_token()
        value = self._parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        return ast.AssignmentExpression(token, left, value)


def parse(source: str, trace: Optional[bool] = None) -> Tuple[ast.Program, List[str]]:
    """Parses program text, returning the AST and the list of syntax errors."""
    parser = Parser(Lexer(source), trace=trace)
    program = parser.parse_program()
    return program, parser.errors
