"""
Defines the abstract syntax tree produced by the Boar parser.

Every node carries the token that introduced it plus its constituent
sub-nodes. Nodes are frozen dataclasses: a tree is built once per parse and
never mutated afterwards. The set of variants is closed; the evaluator
dispatches over them with a single `match` statement.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from boar.boar_token import Token


# =================================================================
# Abstract Base Classes
# =================================================================

class Node:
    """Base class for all AST nodes."""
    token: Token

    def token_literal(self) -> str:
        return self.token.literal


class Statement(Node):
    pass


class Expression(Node):
    pass


# =================================================================
# Root and Statements
# =================================================================

@dataclass(frozen=True)
class Program(Node):
    statements: Tuple[Statement, ...] = ()

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


@dataclass(frozen=True)
class Identifier(Expression):
    token: Token
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LetStatement(Statement):
    token: Token
    name: Identifier
    value: Optional[Expression] = None

    def __str__(self) -> str:
        value = str(self.value) if self.value is not None else ""
        return f"{self.token_literal()} {self.name} = {value};"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    token: Token
    return_value: Optional[Expression] = None

    def __str__(self) -> str:
        value = str(self.return_value) if self.return_value is not None else ""
        return f"{self.token_literal()} {value};"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    token: Token
    expression: Optional[Expression] = None

    def __str__(self) -> str:
        return str(self.expression) if self.expression is not None else ""


@dataclass(frozen=True)
class BlockStatement(Statement):
    """An ordered sequence of statements: function bodies and branches."""
    token: Token
    statements: Tuple[Statement, ...] = ()

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


@dataclass(frozen=True)
class AssignmentExpression(Expression):
    """Rebinding of an already-bound name: `x = expr`."""
    token: Token
    name: Identifier
    value: Expression

    def __str__(self) -> str:
        return f"{self.name} = {self.value}"


@dataclass(frozen=True)
class ForLoopStatement(Statement):
    """`for (let i = 0; i < n; i = i + 1) { ... }`"""
    token: Token
    counter_var: LetStatement
    condition: Expression
    update: AssignmentExpression
    body: BlockStatement

    def __str__(self) -> str:
        return f"for ({self.counter_var} {self.condition}; {self.update}) {self.body}"


# =================================================================
# Literals
# =================================================================

@dataclass(frozen=True)
class IntegerLiteral(Expression):
    token: Token
    value: int

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class StringLiteral(Expression):
    token: Token
    value: str

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class Boolean(Expression):
    token: Token
    value: bool

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    token: Token
    parameters: Tuple[Identifier, ...]
    body: BlockStatement

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.token_literal()}({params}) {self.body}"


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    token: Token
    elements: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        return "[" + ", ".join(str(e) for e in self.elements) + "]"


@dataclass(frozen=True)
class HashLiteral(Expression):
    token: Token
    pairs: Tuple[Tuple[Expression, Expression], ...] = ()

    def __str__(self) -> str:
        return "{" + ", ".join(f"{k}:{v}" for k, v in self.pairs) + "}"


# =================================================================
# Operators, Calls and Indexing
# =================================================================

@dataclass(frozen=True)
class PrefixExpression(Expression):
    token: Token
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    token: Token
    left: Expression
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class IfExpression(Expression):
    token: Token
    condition: Expression
    consequence: BlockStatement
    alternative: Optional[BlockStatement] = None

    def __str__(self) -> str:
        out = f"if{self.condition} {self.consequence}"
        if self.alternative is not None:
            out += f"else {self.alternative}"
        return out


@dataclass(frozen=True)
class CallExpression(Expression):
    token: Token
    function: Expression
    arguments: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


@dataclass(frozen=True)
class IndexExpression(Expression):
    token: Token
    left: Expression
    index: Expression

    def __str__(self) -> str:
        return f"({self.left}[{self.index}])"


@dataclass(frozen=True)
class IndexAssignment(Expression):
    """`collection[index] = value`, mutating the collection in place."""
    token: Token
    left: Expression
    index: Expression
    value: Expression

    def __str__(self) -> str:
        return f"{self.left}[{self.index}] = {self.value}"


@dataclass(frozen=True)
class InternalFunctionCall(Expression):
    """`receiver.method(args)`: sugar for `method(receiver, args)`."""
    token: Token
    caller: Identifier
    function: Identifier
    arguments: Tuple[Expression, ...] = ()

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.caller}.{self.function}({args})"
