"""
Defines the core runtime data types for the Boar language.

This module provides every value the evaluator produces (integers, strings,
booleans, null, arrays, hashes, functions, builtins, errors and the internal
return-value marker) together with the Environment, the scope chain that
variable lookup walks.
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from boar.boar_ast import BlockStatement, Identifier

INT64_MIN = -(2 ** 63)
INT64_MOD = 2 ** 64


def wrap_int64(value: int) -> int:
    """Wraps an arbitrary Python int to a signed 64-bit value (two's complement)."""
    return (value - INT64_MIN) % INT64_MOD + INT64_MIN


class ObjectType(str, enum.Enum):
    INTEGER = "INTEGER"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    ARRAY = "ARRAY"
    HASH = "HASH"
    FUNCTION = "FUNCTION"
    BUILTIN = "BUILTIN"
    RETURN_VALUE = "RETURN_VALUE"
    ERROR = "ERROR"

    def __str__(self):
        return self.value


# =================================================================
# Abstract Base Classes
# =================================================================

class Object(ABC):
    """Abstract base class for all Boar runtime values."""

    @abstractmethod
    def type(self) -> ObjectType:
        raise NotImplementedError

    def inspect(self) -> str:
        from boar.boar_printer import Printer
        return Printer().pformat(self)


@dataclass(frozen=True)
class HashKey:
    """The derived, comparable key a Hash stores a hashable value under.

    Two values are the same key iff type and content match, regardless of
    whether they are the same instance.
    """
    type: ObjectType
    value: Any


class Hashable(ABC):
    """Mixin for values usable as Hash keys."""

    @abstractmethod
    def hash_key(self) -> HashKey:
        raise NotImplementedError


# =================================================================
# Scalar Types
# =================================================================

@dataclass
class Integer(Object, Hashable):
    value: int

    def __post_init__(self):
        self.value = wrap_int64(self.value)

    def type(self) -> ObjectType:
        return ObjectType.INTEGER

    def hash_key(self) -> HashKey:
        return HashKey(ObjectType.INTEGER, self.value)


@dataclass
class String(Object, Hashable):
    value: str

    def type(self) -> ObjectType:
        return ObjectType.STRING

    def hash_key(self) -> HashKey:
        return HashKey(ObjectType.STRING, self.value)


class Boolean(Object, Hashable):
    """A boolean value. Only two instances ever exist: TRUE and FALSE.

    Constructing a Boolean returns the shared instance, so comparing
    booleans by identity is the same as comparing them by value.
    """
    _instances: Dict[bool, "Boolean"] = {}

    def __new__(cls, value: bool):
        value = bool(value)
        instance = cls._instances.get(value)
        if instance is None:
            instance = super().__new__(cls)
            instance.value = value
            cls._instances[value] = instance
        return instance

    def type(self) -> ObjectType:
        return ObjectType.BOOLEAN

    def hash_key(self) -> HashKey:
        return HashKey(ObjectType.BOOLEAN, 1 if self.value else 0)

    def __repr__(self) -> str:
        return f"Boolean({self.value})"


class Null(Object):
    """The absence of a value. A single shared instance exists: NULL."""
    _instance: Optional["Null"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def type(self) -> ObjectType:
        return ObjectType.NULL

    def __repr__(self) -> str:
        return "Null()"


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool_to_boolean(value: bool) -> Boolean:
    return TRUE if value else FALSE


# =================================================================
# Collections
# =================================================================

@dataclass(eq=False)
class Array(Object):
    """An ordered, mutable sequence of values.

    Arrays are reference objects: every binding that holds an Array sees
    in-place mutations made through any other binding.
    """
    elements: List[Object] = field(default_factory=list)

    def type(self) -> ObjectType:
        return ObjectType.ARRAY

    def __len__(self) -> int:
        return len(self.elements)


@dataclass
class HashPair:
    key: Object
    value: Object


@dataclass(eq=False)
class Hash(Object):
    """A mutable mapping from HashKey to the original (key, value) pair."""
    pairs: Dict[HashKey, HashPair] = field(default_factory=dict)

    def type(self) -> ObjectType:
        return ObjectType.HASH

    def get(self, key: Hashable) -> Optional[HashPair]:
        return self.pairs.get(key.hash_key())

    def set(self, key: Object, value: Object) -> None:
        self.pairs[key.hash_key()] = HashPair(key, value)

    def __len__(self) -> int:
        return len(self.pairs)


# =================================================================
# Callables and Control Flow
# =================================================================

class Function(Object):
    """A function defined in Boar with `fn`.

    This is a closure, bundling the function's parameters, its body and the
    environment in which it was defined.
    """
    def __init__(self, parameters: Tuple["Identifier", ...], body: "BlockStatement", env: "Environment"):
        self.parameters = parameters
        self.body = body
        self.env = env

    def type(self) -> ObjectType:
        return ObjectType.FUNCTION

    def __repr__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"<Function fn({params})>"


class Builtin(Object):
    """A native function exposed to Boar under a fixed name."""
    def __init__(self, name: str, fn: Callable[..., Object]):
        self.name = name
        self.fn = fn

    def type(self) -> ObjectType:
        return ObjectType.BUILTIN

    def __call__(self, *args: Object) -> Object:
        return self.fn(*args)

    def __repr__(self) -> str:
        return f"<Builtin {self.name}>"


@dataclass
class ReturnValue(Object):
    """Wraps the value of a `return` until the enclosing call unwraps it."""
    value: Object

    def type(self) -> ObjectType:
        return ObjectType.RETURN_VALUE


@dataclass
class Error(Object):
    """A runtime error. Propagates like a return until something inspects it."""
    message: str

    def type(self) -> ObjectType:
        return ObjectType.ERROR


# =================================================================
# Environment
# =================================================================

class Environment:
    """A lexical scope: name bindings plus a link to the enclosing scope.

    Lookups walk outward through the chain. `set` always writes to this
    scope (used by `let` and parameter binding); `assign` rebinds a name in
    the nearest scope that already binds it.
    """
    def __init__(self, outer: Optional["Environment"] = None):
        self.store: Dict[str, Object] = {}
        self.outer = outer

    def enclosed(self) -> "Environment":
        return Environment(outer=self)

    def find_owner(self, name: str) -> Optional["Environment"]:
        """Finds the Environment in the chain that binds `name`."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.store:
                return env
            env = env.outer
        return None

    def get(self, name: str) -> Optional[Object]:
        owner = self.find_owner(name)
        if owner is None:
            return None
        return owner.store[name]

    def set(self, name: str, value: Object) -> Object:
        self.store[name] = value
        return value

    def assign(self, name: str, value: Object) -> bool:
        """Rebinds `name` where it is already bound. Returns False if unbound."""
        owner = self.find_owner(name)
        if owner is None:
            return False
        owner.store[name] = value
        return True

    def __contains__(self, name: str) -> bool:
        return self.find_owner(name) is not None

    def keys(self):
        """Returns a view of names bound in this scope only."""
        return self.store.keys()

    def __repr__(self) -> str:
        keys = ", ".join(self.store.keys())
        outer_id = f", outer=#{id(self.outer)}" if self.outer else ""
        return f"<Environment bindings=[{keys}]{outer_id}>"
