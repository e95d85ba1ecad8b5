"""
A printer for Boar runtime values.
"""
from boar.boar_datatypes import (
    Integer, String, Boolean, Null, Array, Hash,
    Function, Builtin, ReturnValue, Error
)


class Printer:
    """Formats Boar objects into deterministic, readable strings.

    Top-level strings print raw; strings nested inside an Array or Hash are
    quoted so element boundaries stay visible.
    """

    def __init__(self, indent_width=2):
        self._indent_char = " " * indent_width
        self._handlers = self._create_handlers()

    def pformat(self, obj, level=0):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj, level)

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if obj is None:
            return self._pformat_none
        # Default to Python's repr for unknown types
        return lambda o, l: repr(o)

    def _create_handlers(self):
        return {
            Integer: self._pformat_primitive,
            String: self._pformat_str,
            Boolean: self._pformat_bool,
            Null: self._pformat_null,
            Array: self._pformat_array,
            Hash: self._pformat_hash,
            Function: self._pformat_function,
            Builtin: self._pformat_builtin,
            ReturnValue: self._pformat_return_value,
            Error: self._pformat_error,
        }

    def _pformat_primitive(self, obj, level):
        return str(obj.value)

    def _pformat_str(self, obj, level):
        if level == 0:
            return obj.value
        return f'"{obj.value}"'

    def _pformat_bool(self, obj, level):
        return 'true' if obj.value else 'false'

    def _pformat_null(self, obj, level):
        return 'null'

    def _pformat_none(self, obj, level):
        return ''

    def _pformat_array(self, obj, level):
        inner = ", ".join(self.pformat(e, level + 1) for e in obj.elements)
        return f"[{inner}]"

    def _pformat_hash(self, obj, level):
        # Insertion order of the underlying dict keeps this stable.
        items = [
            f"{self.pformat(pair.key, level + 1)}: {self.pformat(pair.value, level + 1)}"
            for pair in obj.pairs.values()
        ]
        return "{" + ", ".join(items) + "}"

    def _pformat_function(self, obj, level):
        params = ", ".join(str(p) for p in obj.parameters)
        body = str(obj.body)
        if not body:
            return f"fn({params}) {{}}"
        return f"fn({params}) {{\n{self._indent_char}{body}\n}}"

    def _pformat_builtin(self, obj, level):
        return f"builtin function {obj.name}"

    def _pformat_return_value(self, obj, level):
        return self.pformat(obj.value, level)

    def _pformat_error(self, obj, level):
        return obj.message
