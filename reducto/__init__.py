"""
REDUCTO - Rewriting Expressions Down Using Coefficient-Tracking Operations

A symbolic algebra simplifier over exact rational arithmetic.

Quick Start:
    from reducto import Expr, simplify, SimplifyOptions

    x = Expr.var("x")
    expr = Expr.rational(1, 2) + Expr.rational(3, 2) + x * 0
    simplify(expr)
    str(expr)  # => "2"

Building expressions:
    Expr.integer(3), Expr.rational(1, 2)   - rational literals
    Expr.var("x")                          - free variable
    Expr.pi(), Expr.e()                    - named constants
    Expr.func(Function.SINE, [x])          - function application
    a + b, a - b, a * b, a / b, a ** b     - operator nodes (ints coerce)

Options:
    SimplifyOptions()                      - fold literals, flatten, lower "-"
    SimplifyOptions(expand=True)           - also distribute literal factors
    SimplifyOptions(target_integers=True)  - x * (1/2) becomes x / 2

Output:
    str(expr) renders fully parenthesized infix, e.g. "(x + (y * -1))".
"""

__version__ = "0.1.0"

# Exact arithmetic
from .rational import Rational, as_rational

# Data model
from .tags import Op, Function, Constant, BUILTIN_FUNCTIONS
from .expr import Expr, MalformedExpression

# Function rules
from .functions import FUNCTION_RULES, FunctionRule, simplify_value

# Rewrite engine
from .simplify import (
    Simplifier,
    SequencedSimplifier,
    SimplifyOptions,
    SimplifyTrace,
    PassStep,
    ConvergenceError,
    PRESETS,
    DEFAULT_MAX_PASSES,
    simplify,
)

# Public API
__all__ = [
    # Version
    "__version__",
    # Arithmetic
    "Rational",
    "as_rational",
    # Data model
    "Op",
    "Function",
    "Constant",
    "BUILTIN_FUNCTIONS",
    "Expr",
    "MalformedExpression",
    # Function rules
    "FUNCTION_RULES",
    "FunctionRule",
    "simplify_value",
    # Engine
    "Simplifier",
    "SequencedSimplifier",
    "SimplifyOptions",
    "SimplifyTrace",
    "PassStep",
    "ConvergenceError",
    "PRESETS",
    "DEFAULT_MAX_PASSES",
    "simplify",
]
