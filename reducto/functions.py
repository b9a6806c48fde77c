"""
Per-function simplification rules.

Each built-in function tag may carry a rule that receives the (already
simplified) argument list and returns the node that replaces the whole
application. Functions without an entry in FUNCTION_RULES, including every
named user function, are opaque: the application is rebuilt unchanged.

    simplify_value(Function.SINE, [Expr.integer(0)])   # => Expr(0)
    simplify_value(Function.COSINE, [Expr.var("x")])   # => Expr(cos(x))
"""

from typing import Callable, Dict, List

from .expr import Expr, MalformedExpression
from .tags import Function, Op

# Rule handler: receives the function tag and its arguments, returns the
# replacement node. The arguments are moved into the result, never shared.
FunctionRule = Callable[[Function, List[Expr]], Expr]


def _single_argument(function: Function, args: List[Expr]) -> Expr:
    if len(args) != 1:
        raise MalformedExpression(
            f"{function.name} expects one argument, got {len(args)}")
    return args[0]


def opaque(function: Function, args: List[Expr]) -> Expr:
    """Leave the application as it is."""
    return Expr._build(Op.FUNC, args, function)


def sine(function: Function, args: List[Expr]) -> Expr:
    """sin(0) => 0.

    Only a literal that is structurally the rational 0 is recognized;
    other shapes that happen to equal zero are left alone.
    """
    arg = _single_argument(function, args)
    if arg.is_literal(0):
        return Expr.integer(0)
    return opaque(function, args)


def absolute(function: Function, args: List[Expr]) -> Expr:
    """abs(x) => x.abs(), which may re-wrap x in abs()."""
    arg = _single_argument(function, args)
    arg.abs()
    return arg


FUNCTION_RULES: Dict[Function, FunctionRule] = {
    Function.SINE: sine,
    Function.ABS: absolute,
}


def simplify_value(function: Function, args: List[Expr]) -> Expr:
    """Return the simplified form of function(*args)."""
    rule = FUNCTION_RULES.get(function, opaque)
    return rule(function, args)
