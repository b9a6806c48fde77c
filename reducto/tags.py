"""
Tags that identify what kind of node an expression is.

Op is the closed set of operator tags. Function and Constant are the
payloads of function-application and named-constant nodes.
"""

from enum import Enum
from typing import Dict


class Op(Enum):
    """Operator tag of an expression node.

    Infix operators carry their display symbol as their value.
    """

    LITERAL = "literal"
    ADD = "+"
    MUL = "*"
    SUB = "-"
    DIV = "/"
    POW = "^"
    VAR = "variable"
    FUNC = "function"
    CONST = "constant"

    @property
    def is_leaf(self) -> bool:
        return self in LEAF_OPS


LEAF_OPS = frozenset({Op.LITERAL, Op.VAR, Op.CONST})

# Operators that always take exactly two operands
BINARY_OPS = frozenset({Op.SUB, Op.DIV, Op.POW})


class Function:
    """
    Identifies the function a function-application node invokes.

    Built-ins (sine, cosine, tangent, absolute value) are class attributes.
    Anything else is a named, uninterpreted user function:

        Function.SINE                 # built-in sine
        Function.named("f")           # user function f
        Function.named("sin")         # a user function that happens to be
                                      # called "sin"; NOT Function.SINE
        Function.lookup("sin")        # => Function.SINE
    """

    __slots__ = ('name', 'builtin')

    SINE: 'Function'
    COSINE: 'Function'
    TANGENT: 'Function'
    ABS: 'Function'

    def __init__(self, name: str, builtin: bool = False):
        if not name:
            raise ValueError("Function name must be non-empty")
        self.name = name
        self.builtin = builtin

    @classmethod
    def named(cls, name: str) -> 'Function':
        """Create a user function. It carries no simplification rule."""
        return cls(name)

    @classmethod
    def lookup(cls, name: str) -> 'Function':
        """Return the built-in with this name, or a named user function."""
        return BUILTIN_FUNCTIONS.get(name) or cls.named(name)

    def __eq__(self, other) -> bool:
        if isinstance(other, Function):
            return self.name == other.name and self.builtin == other.builtin
        return False

    def __hash__(self) -> int:
        return hash((self.name, self.builtin))

    def __repr__(self) -> str:
        if self.builtin:
            return f"Function.{_ATTR_BY_NAME[self.name]}"
        return f"Function.named({self.name!r})"


Function.SINE = Function("sin", builtin=True)
Function.COSINE = Function("cos", builtin=True)
Function.TANGENT = Function("tan", builtin=True)
Function.ABS = Function("abs", builtin=True)

_BUILTIN_ATTRS = ("SINE", "COSINE", "TANGENT", "ABS")

BUILTIN_FUNCTIONS: Dict[str, Function] = {
    getattr(Function, attr).name: getattr(Function, attr) for attr in _BUILTIN_ATTRS
}

_ATTR_BY_NAME = {getattr(Function, attr).name: attr for attr in _BUILTIN_ATTRS}


class Constant(Enum):
    """Named mathematical constant. Never folded into a rational."""

    PI = "pi"
    E = "e"
