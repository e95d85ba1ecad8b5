"""
The core Boar interpreter, containing the Evaluator.

The Evaluator is a tree walker: it reduces an AST node, given an Environment,
to a runtime Object. Runtime errors are values (`Error` objects), not Python
exceptions; they short-circuit block evaluation exactly like `return` does.
"""
import os
import sys
from typing import Dict, List, Optional, TextIO

from boar import boar_ast as ast
from boar.boar_datatypes import (
    Object, Integer, String, Boolean, Array, Hash, Hashable,
    Function, Builtin, ReturnValue, Error, Environment,
    TRUE, FALSE, NULL, native_bool_to_boolean
)


# Helpers: identify errors and unwrap control-flow return values
def is_error(obj: Optional[Object]) -> bool:
    return isinstance(obj, Error)


def unwrap_return(obj: Optional[Object]) -> Optional[Object]:
    return obj.value if isinstance(obj, ReturnValue) else obj


def new_error(message: str) -> Error:
    return Error(message)


def is_truthy(obj: Object) -> bool:
    """Everything except null and false is truthy, integer zero included."""
    if obj is NULL or obj is FALSE:
        return False
    return True


def _int_div(a: int, b: int) -> int:
    # Integer division truncating toward zero.
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


class Evaluator:
    """The Boar execution engine."""

    def __init__(self, output: Optional[TextIO] = None):
        # Stream `puts` writes to; resolved lazily so tests can capture stdout.
        self._output = output
        self.builtins: Dict[str, Builtin] = {}
        from boar.boar_runtime import StdLib
        self.stdlib = StdLib(self)

    @property
    def output(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    @output.setter
    def output(self, stream: Optional[TextIO]):
        self._output = stream

    def _dbg(self, *parts):
        if os.environ.get("BOAR_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def _eval_value(self, node: ast.Node, env: Environment) -> Object:
        """Like `eval`, but a construct without a value reads as null."""
        result = self.eval(node, env)
        return NULL if result is None else result

    def eval(self, node: ast.Node, env: Environment) -> Optional[Object]:
        """Evaluates `node` in `env`. Returns None for constructs without a value."""
        match node:
            # Statements
            case ast.Program():
                return self._eval_program(node, env)
            case ast.ExpressionStatement():
                return self.eval(node.expression, env)
            case ast.BlockStatement():
                return self._eval_block_statement(node, env)
            case ast.LetStatement():
                value = self._eval_value(node.value, env)
                if is_error(value):
                    return value
                env.set(node.name.value, value)
                return None
            case ast.ReturnStatement():
                if node.return_value is None:
                    return ReturnValue(NULL)
                value = self._eval_value(node.return_value, env)
                if is_error(value):
                    return value
                return ReturnValue(value)
            case ast.ForLoopStatement():
                return self._eval_for_loop(node, env)

            # Literals
            case ast.IntegerLiteral():
                return Integer(node.value)
            case ast.StringLiteral():
                return String(node.value)
            case ast.Boolean():
                return native_bool_to_boolean(node.value)
            case ast.ArrayLiteral():
                elements = self._eval_expressions(node.elements, env)
                if len(elements) == 1 and is_error(elements[0]):
                    return elements[0]
                return Array(elements)
            case ast.HashLiteral():
                return self._eval_hash_literal(node, env)
            case ast.FunctionLiteral():
                return Function(node.parameters, node.body, env)

            # Expressions
            case ast.Identifier():
                return self._eval_identifier(node, env)
            case ast.PrefixExpression():
                right = self._eval_value(node.right, env)
                if is_error(right):
                    return right
                return self._eval_prefix_expression(node.operator, right)
            case ast.InfixExpression():
                left = self._eval_value(node.left, env)
                if is_error(left):
                    return left
                right = self._eval_value(node.right, env)
                if is_error(right):
                    return right
                return self._eval_infix_expression(node.operator, left, right)
            case ast.IfExpression():
                return self._eval_if_expression(node, env)
            case ast.CallExpression():
                function = self._eval_value(node.function, env)
                if is_error(function):
                    return function
                args = self._eval_expressions(node.arguments, env)
                if len(args) == 1 and is_error(args[0]):
                    return args[0]
                return self.apply_function(function, args)
            case ast.InternalFunctionCall():
                return self._eval_internal_function_call(node, env)
            case ast.IndexExpression():
                left = self._eval_value(node.left, env)
                if is_error(left):
                    return left
                index = self._eval_value(node.index, env)
                if is_error(index):
                    return index
                return self._eval_index_expression(left, index)
            case ast.IndexAssignment():
                return self._eval_index_assignment(node, env)
            case ast.AssignmentExpression():
                return self._eval_assignment(node, env)

            case _:
                raise TypeError(f"Cannot evaluate node: {node!r}")

    # --- Statements ---

    def _eval_program(self, program: ast.Program, env: Environment) -> Optional[Object]:
        result: Optional[Object] = None
        for statement in program.statements:
            result = self.eval(statement, env)
            if isinstance(result, ReturnValue):
                return result.value
            if isinstance(result, Error):
                return result
        return result

    def _eval_block_statement(self, block: ast.BlockStatement, env: Environment) -> Optional[Object]:
        # Return values stay wrapped so enclosing blocks stop too; the call boundary unwraps.
        result: Optional[Object] = None
        for statement in block.statements:
            result = self.eval(statement, env)
            if isinstance(result, (ReturnValue, Error)):
                return result
        return result

    def _eval_for_loop(self, node: ast.ForLoopStatement, env: Environment) -> Optional[Object]:
        counter = node.counter_var.name.value
        init = self.eval(node.counter_var, env)
        if is_error(init):
            return init

        condition = self._eval_loop_condition(node, env)
        if is_error(condition):
            return condition

        # A loop whose condition starts false evaluates to null.
        result: Optional[Object] = NULL
        while condition.value:
            result = self.eval(node.body, env)
            if isinstance(result, (ReturnValue, Error)):
                return result

            updated = self._eval_value(node.update.value, env)
            if is_error(updated):
                return updated
            env.set(counter, updated)

            condition = self._eval_loop_condition(node, env)
            if is_error(condition):
                return condition
            if not condition.value:
                return result
        return result

    def _eval_loop_condition(self, node: ast.ForLoopStatement, env: Environment) -> Object:
        condition = self._eval_value(node.condition, env)
        if is_error(condition):
            return condition
        if not isinstance(condition, Boolean):
            return new_error(f"invalid loop condition type: {condition.type()}")
        return condition

    # --- Expressions ---

    def _eval_identifier(self, node: ast.Identifier, env: Environment) -> Object:
        if node.value in env:
            return env.get(node.value)
        builtin = self.builtins.get(node.value)
        if builtin is not None:
            return builtin
        return new_error(f"identifier not found: {node.value}")

    def _eval_expressions(self, expressions, env: Environment) -> List[Object]:
        """Evaluates left to right, stopping at the first error."""
        result: List[Object] = []
        for expression in expressions:
            evaluated = self._eval_value(expression, env)
            if is_error(evaluated):
                return [evaluated]
            result.append(evaluated)
        return result

    def _eval_prefix_expression(self, operator: str, right: Object) -> Object:
        match operator:
            case "!":
                return FALSE if is_truthy(right) else TRUE
            case "-":
                if not isinstance(right, Integer):
                    return new_error(f"unknown operator: -{right.type()}")
                return Integer(-right.value)
            case _:
                return new_error(f"unknown operator: {operator}{right.type()}")

    def _eval_infix_expression(self, operator: str, left: Object, right: Object) -> Object:
        if isinstance(left, Integer) and isinstance(right, Integer):
            return self._eval_integer_infix_expression(operator, left, right)
        if isinstance(left, String) and isinstance(right, String):
            return self._eval_string_infix_expression(operator, left, right)
        # Booleans and null are singletons, so identity is value equality for them.
        if operator == "==":
            return native_bool_to_boolean(left is right)
        if operator == "!=":
            return native_bool_to_boolean(left is not right)
        if left.type() != right.type():
            return new_error(f"type mismatch: {left.type()} {operator} {right.type()}")
        return new_error(f"unknown operator: {left.type()} {operator} {right.type()}")

    def _eval_integer_infix_expression(self, operator: str, left: Integer, right: Integer) -> Object:
        a, b = left.value, right.value
        match operator:
            case "+":
                return Integer(a + b)
            case "-":
                return Integer(a - b)
            case "*":
                return Integer(a * b)
            case "/":
                if b == 0:
                    return new_error("division by zero")
                return Integer(_int_div(a, b))
            case "<":
                return native_bool_to_boolean(a < b)
            case ">":
                return native_bool_to_boolean(a > b)
            case "==":
                return native_bool_to_boolean(a == b)
            case "!=":
                return native_bool_to_boolean(a != b)
            case _:
                return new_error(f"unknown operator: {left.type()} {operator} {right.type()}")

    def _eval_string_infix_expression(self, operator: str, left: String, right: String) -> Object:
        if operator != "+":
            return new_error(f"unknown operator: {left.type()} {operator} {right.type()}")
        return String(left.value + right.value)

    def _eval_if_expression(self, node: ast.IfExpression, env: Environment) -> Optional[Object]:
        condition = self._eval_value(node.condition, env)
        if is_error(condition):
            return condition
        if is_truthy(condition):
            return self.eval(node.consequence, env)
        if node.alternative is not None:
            return self.eval(node.alternative, env)
        return NULL

    def _eval_hash_literal(self, node: ast.HashLiteral, env: Environment) -> Object:
        result = Hash()
        for key_node, value_node in node.pairs:
            key = self._eval_value(key_node, env)
            if is_error(key):
                return key
            if not isinstance(key, Hashable):
                return new_error(f"unusable as hash key: {key.type()}")
            value = self._eval_value(value_node, env)
            if is_error(value):
                return value
            result.set(key, value)
        return result

    def _eval_index_expression(self, left: Object, index: Object) -> Object:
        if isinstance(left, Array):
            if not isinstance(index, Integer):
                return new_error(f"array index must be INTEGER, got {index.type()}")
            idx = index.value
            if idx < 0 or idx >= len(left.elements):
                return NULL
            return left.elements[idx]
        if isinstance(left, Hash):
            if not isinstance(index, Hashable):
                return new_error(f"unusable as hash key: {index.type()}")
            pair = left.get(index)
            if pair is None:
                return NULL
            return pair.value
        return new_error(f"index operator not supported: {left.type()}")

    def _eval_index_assignment(self, node: ast.IndexAssignment, env: Environment) -> Object:
        left = self._eval_value(node.left, env)
        if is_error(left):
            return left
        index = self._eval_value(node.index, env)
        if is_error(index):
            return index
        value = self._eval_value(node.value, env)
        if is_error(value):
            return value

        if isinstance(left, Array):
            if not isinstance(index, Integer):
                return new_error(f"array index must be INTEGER, got {index.type()}")
            idx = index.value
            if idx < 0 or idx >= len(left.elements):
                return new_error(f"index out of range: {idx}")
            left.elements[idx] = value
            return value
        if isinstance(left, Hash):
            if not isinstance(index, Hashable):
                return new_error(f"unusable as hash key: {index.type()}")
            left.set(index, value)
            return value
        return new_error(f"index assignment not supported: {left.type()}")

    def _eval_assignment(self, node: ast.AssignmentExpression, env: Environment) -> Optional[Object]:
        name = node.name.value
        if name not in env:
            return new_error(f"identifier not found: {name}")
        value = self._eval_value(node.value, env)
        if is_error(value):
            return value
        env.assign(name, value)
        return None

    def _eval_internal_function_call(self, node: ast.InternalFunctionCall, env: Environment) -> Object:
        # `recv.method(a, b)` evaluates exactly like `method(recv, a, b)`.
        receiver = self._eval_value(node.caller, env)
        if is_error(receiver):
            return receiver
        function = self._eval_value(node.function, env)
        if is_error(function):
            return function
        args = self._eval_expressions(node.arguments, env)
        if len(args) == 1 and is_error(args[0]):
            return args[0]
        return self.apply_function(function, [receiver] + args)

    # --- Calls ---

    def apply_function(self, function: Object, args: List[Object]) -> Object:
        """Calls a user Function or a Builtin with already-evaluated arguments."""
        match function:
            case Function():
                self._dbg("Function call", repr(function), "argc", len(args))
                if len(args) < len(function.parameters):
                    return new_error(
                        f"wrong number of arguments: want={len(function.parameters)}, got={len(args)}"
                    )
                call_env = self._extend_function_env(function, args)
                evaluated = self.eval(function.body, call_env)
                # Unwrapping here keeps a `return` from escaping past this call.
                result = unwrap_return(evaluated)
                return NULL if result is None else result
            case Builtin():
                self._dbg("Builtin call", function.name, "argc", len(args))
                return function(*args)
            case _:
                return new_error(f"not a function: {function.type()}")

    def _extend_function_env(self, function: Function, args: List[Object]) -> Environment:
        env = function.env.enclosed()
        for param, arg in zip(function.parameters, args):
            env.set(param.value, arg)
        self._dbg("Call-scope bindings", list(env.keys()))
        return env
