"""
Expression trees for REDUCTO.

REDUCTO - Rewriting Expressions Down Using Coefficient-Tracking Operations

An Expr is a single recursive node type. Each node has an operator tag (Op),
an optional payload (a Rational, a variable name, a Function or a Constant)
and, for operator and function nodes, an ordered list of child nodes.

Trees are built by direct construction:

    from reducto import Expr

    x = Expr.var("x")
    expr = (x + Expr.rational(1, 2)) / 2
    str(expr)  # => "((x + (1/2)) / 2)"

Trees are strictly tree-shaped: a child belongs to exactly one parent.
Passing a node that already has a parent to a second constructor stores a
deep copy, so `x + x` holds two independent variable nodes.

Rendering (render(), str()) is fully parenthesized infix:

    literal      := INTEGER | "(" INTEGER "/" INTEGER ")"
    variable     := NAME
    constant     := "pi" | "e"
    nary         := "(" expr (" " OP " " expr)+ ")"
    application  := NAME "(" expr ("," " " expr)* ")"
"""

from typing import List, Optional, Union

from .rational import Rational, as_rational
from .tags import BINARY_OPS, Constant, Function, Op


class MalformedExpression(ValueError):
    """A node violates the structural invariants of the tree.

    Raised for operator nodes without children, leaves with children, binary
    operators with the wrong operand count, and function applications with
    an arity their rule does not accept. This is a programming error; no
    partially simplified tree should be used after it is raised.
    """


Operand = Union['Expr', Rational, int]
Payload = Union[Rational, str, Function, Constant, None]


class Expr:
    """A node of an expression tree."""

    __slots__ = ('op', 'value', 'children', '_owned')

    def __init__(self, op: Op, children: Optional[List[Operand]] = None,
                 value: Payload = None):
        """
        Build a node, taking ownership of its children.

        Prefer the factory methods (Expr.var, Expr.rational, Expr.add, ...)
        or the arithmetic operators over calling this directly.

        Raises:
            MalformedExpression: if the children do not suit the operator
        """
        if children is not None:
            children = [_adopt(_coerce(child)) for child in children]
        if isinstance(value, Rational):
            value = value.copy()
        _check_shape(op, children, value)
        self.op = op
        self.value = value
        self.children = children
        self._owned = False

    @classmethod
    def _build(cls, op: Op, children: Optional[List['Expr']] = None,
               value: Payload = None) -> 'Expr':
        """Build a node from children that are being moved, not shared."""
        node = cls.__new__(cls)
        _check_shape(op, children, value)
        node.op = op
        node.value = value
        node.children = children
        node._owned = False
        if children:
            for child in children:
                child._owned = True
        return node

    # ============================================================
    # Factories
    # ============================================================

    @classmethod
    def literal(cls, value: Union[Rational, int]) -> 'Expr':
        """A rational literal. The Rational is copied, not shared."""
        return cls._build(Op.LITERAL, value=as_rational(value).copy())

    @classmethod
    def rational(cls, numerator: int, denominator: int = 1) -> 'Expr':
        """A rational literal numerator/denominator (not reduced)."""
        return cls._build(Op.LITERAL, value=Rational(numerator, denominator))

    @classmethod
    def integer(cls, value: int) -> 'Expr':
        """An integer literal (a rational with denominator 1)."""
        return cls._build(Op.LITERAL, value=Rational(value, 1))

    @classmethod
    def var(cls, name: str) -> 'Expr':
        """A free variable."""
        return cls._build(Op.VAR, value=name)

    @classmethod
    def func(cls, function: Union[Function, str], args: List[Operand]) -> 'Expr':
        """
        A function application.

        Args:
            function: A Function tag, or a name resolved with Function.lookup
            args: Non-empty argument list

        Example:
            Expr.func(Function.SINE, [Expr.integer(0)])
            Expr.func("f", [Expr.var("x"), Expr.var("y")])
        """
        if isinstance(function, str):
            function = Function.lookup(function)
        return cls(Op.FUNC, list(args), value=function)

    @classmethod
    def constant(cls, constant: Constant) -> 'Expr':
        return cls._build(Op.CONST, value=constant)

    @classmethod
    def pi(cls) -> 'Expr':
        return cls.constant(Constant.PI)

    @classmethod
    def e(cls) -> 'Expr':
        return cls.constant(Constant.E)

    @classmethod
    def add(cls, left: Operand, right: Operand) -> 'Expr':
        return cls(Op.ADD, [left, right])

    @classmethod
    def sub(cls, left: Operand, right: Operand) -> 'Expr':
        return cls(Op.SUB, [left, right])

    @classmethod
    def mul(cls, left: Operand, right: Operand) -> 'Expr':
        return cls(Op.MUL, [left, right])

    @classmethod
    def div(cls, left: Operand, right: Operand) -> 'Expr':
        return cls(Op.DIV, [left, right])

    @classmethod
    def pow(cls, base: Operand, exponent: Operand) -> 'Expr':
        return cls(Op.POW, [base, exponent])

    # Arithmetic operators build parent nodes
    def __add__(self, other: Operand) -> 'Expr':
        return Expr.add(self, other)

    def __radd__(self, other: Operand) -> 'Expr':
        return Expr.add(other, self)

    def __sub__(self, other: Operand) -> 'Expr':
        return Expr.sub(self, other)

    def __rsub__(self, other: Operand) -> 'Expr':
        return Expr.sub(other, self)

    def __mul__(self, other: Operand) -> 'Expr':
        return Expr.mul(self, other)

    def __rmul__(self, other: Operand) -> 'Expr':
        return Expr.mul(other, self)

    def __truediv__(self, other: Operand) -> 'Expr':
        return Expr.div(self, other)

    def __rtruediv__(self, other: Operand) -> 'Expr':
        return Expr.div(other, self)

    def __pow__(self, other: Operand) -> 'Expr':
        return Expr.pow(self, other)

    def __rpow__(self, other: Operand) -> 'Expr':
        return Expr.pow(other, self)

    # ============================================================
    # Introspection
    # ============================================================

    def is_leaf(self) -> bool:
        return self.op.is_leaf

    def is_literal(self, value: Optional[Union[Rational, int]] = None) -> bool:
        """True for a literal node, optionally one structurally equal to value."""
        if self.op is not Op.LITERAL:
            return False
        return value is None or self.value == as_rational(value)

    def size(self) -> int:
        """Number of nodes in this subtree."""
        if not self.children:
            return 1
        return 1 + sum(child.size() for child in self.children)

    def copy(self) -> 'Expr':
        """Deep copy. The copy has no parent."""
        if self.op is Op.LITERAL:
            return Expr._build(Op.LITERAL, value=self.value.copy())
        children = None
        if self.children is not None:
            children = [child.copy() for child in self.children]
        return Expr._build(self.op, children, self.value)

    def _become(self, other: 'Expr') -> None:
        """Take over another node's tag, payload and children, in place."""
        self.op = other.op
        self.value = other.value
        self.children = other.children

    def _required_children(self) -> List['Expr']:
        if not self.children:
            raise MalformedExpression(f"{self.op.name} node has no children")
        return self.children

    def __eq__(self, other) -> bool:
        # Elementwise comparison of trees, not algebraic equivalence
        if not isinstance(other, Expr):
            return False
        if self.op is not other.op or self.value != other.value:
            return False
        if (self.children is None) != (other.children is None):
            return False
        if self.children is None:
            return True
        if len(self.children) != len(other.children):
            return False
        return all(a == b for a, b in zip(self.children, other.children))

    __hash__ = None

    # ============================================================
    # Rendering
    # ============================================================

    def render(self) -> str:
        """Render as a fully parenthesized infix string."""
        op = self.op
        if op is Op.LITERAL:
            r = self.value
            if r.is_integer():
                return str(r.numerator)
            return f"({r.numerator}/{r.denominator})"
        if op is Op.VAR:
            return self.value
        if op is Op.CONST:
            return self.value.value
        if op is Op.FUNC:
            args = ", ".join(child.render() for child in self._required_children())
            return f"{self.value.name}({args})"
        delim = f" {op.value} "
        return "(" + delim.join(child.render() for child in self._required_children()) + ")"

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Expr({self.render()})"

    # ============================================================
    # Absolute value
    # ============================================================

    def abs(self) -> None:
        """
        Apply the absolute value transform in place.

        - literal: negated if negative
        - addition, multiplication, division: pushed onto every child
        - subtraction, power, variable, function application: wrapped as
          abs(<node>)
        - constant: unchanged (constants are non-negative)

        Pushing through a multiplication treats each factor on its own,
        which only tracks "make every factor non-negative", not the true
        absolute value of the product. Addition is pushed through the same
        way.
        """
        op = self.op
        if op is Op.LITERAL:
            if self.value.is_negative():
                self.value.negate()
        elif op in (Op.ADD, Op.MUL, Op.DIV):
            for child in self._required_children():
                child.abs()
        elif op in (Op.SUB, Op.POW, Op.VAR, Op.FUNC):
            inner = Expr._build(op, self.children, self.value)
            self._become(Expr._build(Op.FUNC, [inner], Function.ABS))
        elif op is Op.CONST:
            pass
        else:
            raise MalformedExpression(f"Unknown operator {op!r}")


# ============================================================
# Helpers
# ============================================================

def _coerce(value: Operand) -> Expr:
    if isinstance(value, Expr):
        return value
    if isinstance(value, (Rational, int)) and not isinstance(value, bool):
        return Expr.literal(value)
    raise TypeError(f"Cannot use {value!r} as an expression")


def _adopt(node: Expr) -> Expr:
    """Mark node as owned by a new parent, copying it if it already has one."""
    if node._owned:
        node = node.copy()
    node._owned = True
    return node


def _check_shape(op: Op, children: Optional[List[Expr]], value: Payload) -> None:
    if op.is_leaf:
        if children:
            raise MalformedExpression(f"{op.name} node cannot have children")
        if op is Op.LITERAL and not isinstance(value, Rational):
            raise MalformedExpression(f"LITERAL payload must be a Rational, got {value!r}")
        if op is Op.VAR and not (isinstance(value, str) and value):
            raise MalformedExpression(f"VAR payload must be a non-empty name, got {value!r}")
        if op is Op.CONST and not isinstance(value, Constant):
            raise MalformedExpression(f"CONST payload must be a Constant, got {value!r}")
        return

    if not children:
        raise MalformedExpression(f"{op.name} node requires at least one child")
    if op in BINARY_OPS and len(children) != 2:
        raise MalformedExpression(
            f"{op.name} node requires exactly 2 children, got {len(children)}")
    if op is Op.FUNC and not isinstance(value, Function):
        raise MalformedExpression(f"FUNC payload must be a Function, got {value!r}")
