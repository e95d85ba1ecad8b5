"""
The Boar runtime: the standard library of builtins and the script runner.
"""
import inspect
import io
import os
import sys
from dataclasses import dataclass, field
from typing import List, Literal, Optional, TextIO

from boar.boar_parser import parse
from boar.boar_datatypes import (
    Object, Integer, String, Array, Hash, Hashable, Builtin, Error,
    Environment, NULL
)
from boar.boar_printer import Printer


def _builtin_name(method_name: str) -> str:
    """`_values_at` -> `valuesAt`: builtins use camelCase names."""
    head, *rest = method_name.lstrip("_").split("_")
    return head + "".join(part.capitalize() for part in rest)


def _arity_error(got: int, wanted: str) -> Error:
    return Error(f"wrong number of arguments. got {got}, wanted {wanted}")


def _type_error(name: str, expected: str, got: Object) -> Error:
    return Error(f"argument to `{name}` must be {expected}, got {got.type()}")


def _single_array(name: str, args) -> Object:
    if len(args) != 1:
        return _arity_error(len(args), "1")
    if not isinstance(args[0], Array):
        return _type_error(name, "ARRAY", args[0])
    return args[0]


def _hash_with_keys(name: str, args) -> Object:
    if len(args) < 2:
        return _arity_error(len(args), "at least 2")
    if not isinstance(args[0], Hash):
        return _type_error(name, "HASH", args[0])
    for key in args[1:]:
        if not isinstance(key, Hashable):
            return Error(f"unusable as hash key: {key.type()}")
    return args[0]


# ===================================================================
# 1. The Standard Library
# ===================================================================
class StdLib:
    """Contains Python implementations for all Boar builtins.

    Every method named `_<name>` is exposed to scripts as a Builtin and
    registered into the evaluator's builtin table, which identifier lookup
    consults after the environment chain.
    """
    def __init__(self, evaluator):
        self.evaluator = evaluator
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                boar_name = _builtin_name(name)
                evaluator.builtins[boar_name] = Builtin(boar_name, member)

    # --- Sequences ---
    def _len(self, *args):
        if len(args) != 1:
            return _arity_error(len(args), "1")
        arg = args[0]
        if isinstance(arg, (String, Array)):
            return Integer(len(arg.value if isinstance(arg, String) else arg.elements))
        return Error(f"argument to `len` not supported, got {arg.type()}")

    def _first(self, *args):
        arr = _single_array("first", args)
        if isinstance(arr, Error):
            return arr
        return arr.elements[0] if arr.elements else NULL

    def _last(self, *args):
        arr = _single_array("last", args)
        if isinstance(arr, Error):
            return arr
        return arr.elements[-1] if arr.elements else NULL

    def _rest(self, *args):
        arr = _single_array("rest", args)
        if isinstance(arr, Error):
            return arr
        if not arr.elements:
            return NULL
        return Array(list(arr.elements[1:]))

    def _push(self, *args):
        if len(args) != 2:
            return _arity_error(len(args), "2")
        arr, value = args
        if not isinstance(arr, Array):
            return _type_error("push", "ARRAY", arr)
        return Array(arr.elements + [value])

    def _pop(self, *args):
        # Mutates the receiver in place.
        arr = _single_array("pop", args)
        if isinstance(arr, Error):
            return arr
        return arr.elements.pop() if arr.elements else NULL

    def _shift(self, *args):
        arr = _single_array("shift", args)
        if isinstance(arr, Error):
            return arr
        return arr.elements.pop(0) if arr.elements else NULL

    def _slice(self, *args):
        if not 1 <= len(args) <= 3:
            return _arity_error(len(args), "1 to 3")
        arr, bounds = args[0], args[1:]
        if not isinstance(arr, Array):
            return _type_error("slice", "ARRAY", arr)
        for bound in bounds:
            if not isinstance(bound, Integer):
                return _type_error("slice", "INTEGER", bound)
        size = len(arr.elements)
        start = min(max(bounds[0].value, 0), size) if len(bounds) > 0 else 0
        end = min(max(bounds[1].value, 0), size) if len(bounds) > 1 else size
        return Array(list(arr.elements[start:end]))

    def _map(self, *args):
        if len(args) != 2:
            return _arity_error(len(args), "2")
        arr, fn = args
        if not isinstance(arr, Array):
            return _type_error("map", "ARRAY", arr)
        mapped = []
        for element in arr.elements:
            result = self.evaluator.apply_function(fn, [element])
            if isinstance(result, Error):
                return result
            mapped.append(result)
        return Array(mapped)

    # --- Hashes ---
    def _delete(self, *args):
        target = _hash_with_keys("delete", args)
        if isinstance(target, Error):
            return target
        for key in args[1:]:
            if target.get(key) is not None:
                target.set(key, NULL)
        return target

    def _values_at(self, *args):
        target = _hash_with_keys("valuesAt", args)
        if isinstance(target, Error):
            return target
        values = []
        for key in args[1:]:
            pair = target.get(key)
            values.append(pair.value if pair is not None else NULL)
        return Array(values)

    def _to_array(self, *args):
        if len(args) != 1:
            return _arity_error(len(args), "1")
        target = args[0]
        if not isinstance(target, Hash):
            return _type_error("toArray", "HASH", target)
        flat = []
        for pair in target.pairs.values():
            flat.extend((pair.key, pair.value))
        return Array(flat)

    def _dig(self, *args):
        current = _hash_with_keys("dig", args)
        if isinstance(current, Error):
            return current
        for key in args[1:]:
            if not isinstance(current, Hash):
                return NULL
            pair = current.get(key)
            if pair is None:
                return NULL
            current = pair.value
        return current

    # --- I/O ---
    def _puts(self, *args):
        out = self.evaluator.output
        printer = Printer()
        for arg in args:
            print(printer.pformat(arg), file=out, flush=True)
        return NULL


# ===================================================================
# 2. Script Execution
# ===================================================================

ERROR_HEADER = "\U0001F417 Error!:"


@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Optional[Object] = None
    error_message: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    output: str = ""

    def format_error(self) -> str:
        """Formats the error for display: a header plus one `> ` line per parse error."""
        if self.status != 'error':
            return ""
        if self.errors:
            lines = [ERROR_HEADER] + [f"> {msg}" for msg in self.errors]
            return "\n".join(lines)
        return str(self.error_message or "Unknown error")


class _CapturingStream:
    """Writes through to `target` immediately and keeps a copy of the text."""

    def __init__(self, target: TextIO):
        self.target = target
        self.captured = io.StringIO()

    def write(self, text: str) -> int:
        self.target.write(text)
        return self.captured.write(text)

    def flush(self):
        self.target.flush()

    def getvalue(self) -> str:
        return self.captured.getvalue()


class ScriptRunner:
    """Parses and executes Boar code against a persistent global environment."""

    def __init__(self, output: Optional[TextIO] = None):
        from boar.boar_interpreter import Evaluator
        self._output = output
        self.evaluator = Evaluator(output=output)
        self.env = Environment()

    def _dbg(self, *parts):
        if os.environ.get("BOAR_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script."""
        # 1. Parse
        program, errors = parse(source_code)
        self._dbg("Parsed", len(program.statements), "statements,", len(errors), "errors")
        if errors:
            return ExecutionResult(
                status='error',
                error_message="ParseError: " + "; ".join(errors),
                errors=list(errors),
            )

        # 2. Evaluate. `puts` writes straight through; a copy is kept for the result.
        target = self._output if self._output is not None else sys.stdout
        buffer = _CapturingStream(target)
        self.evaluator.output = buffer
        try:
            result = self.evaluator.eval(program, self.env)
        except RecursionError as e:
            self._dbg("Host exception", type(e).__name__)
            return ExecutionResult(
                status='error',
                error_message=f"InternalError: {type(e).__name__}: {e}",
                output=buffer.getvalue(),
            )
        finally:
            self.evaluator.output = self._output
        self._dbg("Evaluated to", repr(result))

        if isinstance(result, Error):
            return ExecutionResult(
                status='error',
                value=result,
                error_message=f"RuntimeError: {result.message}",
                output=buffer.getvalue(),
            )
        return ExecutionResult(status='success', value=result, output=buffer.getvalue())
