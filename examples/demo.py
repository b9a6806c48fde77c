#!/usr/bin/env python3
"""
REDUCTO Feature Demonstration

This script walks through the simplifier: literal folding, subtraction
lowering, expansion, integer targeting, function rules, tracing and
sequenced phases.
"""

from reducto import (
    ConvergenceError, Expr, Function, Simplifier, SimplifyOptions, simplify,
)


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def show(expr: Expr, options: SimplifyOptions = None):
    before = str(expr)
    simplify(expr, options)
    print(f"  {before} => {expr}")


def demo_folding():
    """Demonstrate literal folding and zero absorption."""
    section("Literal Folding")

    x = Expr.var("x")
    show(Expr.rational(1, 2) + Expr.rational(3, 2))
    show(Expr.rational(4, 6))
    show(x * 0)
    show(Expr.integer(2) * x * Expr.rational(3, 4))
    show(Expr.pi() + Expr.rational(1, 2) + Expr.rational(4, 5)
         + Expr.rational(3, 2) * (Expr.rational(4, 2) * 10) + x * 0)


def demo_flattening():
    """Demonstrate associative flattening and subtraction lowering."""
    section("Flattening")

    a, b, c = Expr.var("a"), Expr.var("b"), Expr.var("c")
    show((a + b) + c)
    show(a * (b * c))
    show((a - b) - c)


def demo_options():
    """Demonstrate expansion and integer targeting."""
    section("Options")

    x = Expr.var("x")
    print("  default:")
    show((x + 1) * 2)
    print("  expand:")
    show((x + 1) * 2, SimplifyOptions.expanding())
    print("  integers:")
    show(x * Expr.rational(1, 3), SimplifyOptions.integers())
    show(x / 4, SimplifyOptions.integers())


def demo_functions():
    """Demonstrate per-function rules."""
    section("Function Rules")

    x = Expr.var("x")
    show(Expr.func(Function.SINE, [x * 0]))
    show(Expr.func(Function.COSINE, [Expr.integer(0)]))
    show(Expr.func(Function.ABS, [(x * -3) + Expr.rational(-1, 2)]))
    show(Expr.func("f", [x, Expr.rational(6, 4)]))


def demo_tracing():
    """Demonstrate simplification tracing."""
    section("Tracing")

    expr = Expr.var("x") - Expr.var("y")
    _, trace = simplify(expr, trace=True)

    print("  Verbose:")
    for line in trace.format("verbose").split("\n"):
        print(f"    {line}")
    print(f"\n  Compact: {trace.format('compact')}")
    print(f"  Passes: {trace.format('passes')}")
    print(f"  Summary: {trace.summary()}")


def demo_sequencing():
    """Demonstrate sequenced phases with >>."""
    section("Sequencing")

    pipeline = Simplifier(SimplifyOptions.expanding()) >> Simplifier(SimplifyOptions.integers())
    expr = (Expr.var("x") + Expr.rational(1, 2)) / Expr.rational(2, 1)
    print(f"  Before simplify: {expr}")
    pipeline(expr)
    print(f"  After simplify: {expr}")


def demo_limits():
    """Demonstrate the pass limit."""
    section("Pass Limit")

    expr = Expr.var("x") - Expr.var("y")
    try:
        simplify(expr, SimplifyOptions(max_passes=1))
    except ConvergenceError as e:
        print(f"  {e}")


def main():
    """Run all demonstrations."""
    print("REDUCTO - Rewriting Expressions Down Using Coefficient-Tracking Operations")
    print("Feature Demonstration")

    demo_folding()
    demo_flattening()
    demo_options()
    demo_functions()
    demo_tracing()
    demo_sequencing()
    demo_limits()

    print("\n" + "="*60)
    print(" Demo complete!")
    print("="*60)


if __name__ == "__main__":
    main()
