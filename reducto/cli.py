#!/usr/bin/env python3
"""
REDUCTO Command-Line Interface

Runs the simplifier over built-in demonstration expressions. There is no
expression parser: every demo is constructed in code.

Usage:
    reducto                           # Simplify the default demo
    reducto --list                    # List demos
    reducto scenario-d                # Simplify one demo
    reducto halve -p expand -p integers   # Expand, then target integers
    reducto halve --expand --trace    # Show every pass
"""

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

from . import __version__
from .expr import Expr, MalformedExpression
from .simplify import (
    PRESETS, ConvergenceError, DEFAULT_MAX_PASSES,
    SequencedSimplifier, Simplifier,
)
from .tags import Function

logger = logging.getLogger(__name__)


def _halve() -> Expr:
    return (Expr.var("x") + Expr.rational(1, 2)) / Expr.rational(2, 1)


def _constants() -> Expr:
    return (Expr.pi() + Expr.rational(1, 2) + Expr.rational(4, 5)
            + Expr.rational(3, 2) * (Expr.rational(4, 2) * Expr.integer(10))
            + Expr.var("x") * Expr.integer(0))


def _absolute() -> Expr:
    x = Expr.var("x")
    return Expr.func(Function.ABS, [(x * Expr.integer(-3)) + Expr.rational(-1, 2)])


def _trig() -> Expr:
    x = Expr.var("x")
    return (Expr.func(Function.SINE, [x * Expr.integer(0)])
            + Expr.func(Function.COSINE, [x])
            + Expr.func("f", [x, Expr.rational(6, 4)]))


def _nested() -> Expr:
    x, y, z = Expr.var("x"), Expr.var("y"), Expr.var("z")
    return ((x * Expr.integer(2)) * (y * Expr.integer(3))) * (z + Expr.integer(1))


# Built-in demo expressions, built fresh on every call
DEMOS: Dict[str, Callable[[], Expr]] = {
    "halve": _halve,
    "constants": _constants,
    "absolute": _absolute,
    "trig": _trig,
    "nested": _nested,
    "scenario-a": lambda: Expr.rational(1, 2) + Expr.rational(3, 2),
    "scenario-b": lambda: Expr.var("x") * Expr.integer(0),
    "scenario-c": lambda: Expr.func(Function.SINE, [Expr.integer(0)]),
    "scenario-d": lambda: Expr.var("x") - Expr.var("y"),
    "scenario-e": lambda: Expr.rational(4, 6),
}

DEFAULT_DEMO = "halve"


def build_pipeline(presets: List[str], expand: bool = False,
                   target_integers: bool = False,
                   max_passes: int = DEFAULT_MAX_PASSES):
    """
    Build a simplifier (or a sequence of them) from preset names and flags.

    Flags are layered on top of every preset. main() restricts preset names
    through argparse choices, so only library callers can pass an unknown one.

    Raises:
        KeyError: for an unknown preset name
        ValueError: for max_passes below 1
    """
    phases = []
    for name in presets or ["default"]:
        options = PRESETS[name]()
        options = options.replace(
            expand=options.expand or expand,
            target_integers=options.target_integers or target_integers,
            max_passes=max_passes,
        )
        phases.append(Simplifier(options))

    if len(phases) == 1:
        return phases[0]
    return SequencedSimplifier(phases)


def list_demos() -> str:
    lines = ["Available demos:"]
    for name, build in DEMOS.items():
        lines.append(f"  {name:<12} {build()}")
    return "\n".join(lines)


def run_demo(name: str, pipeline, trace: bool = False,
             trace_style: str = "verbose") -> int:
    """
    Simplify one demo and print it before and after.

    Returns:
        Exit code (0 for success)
    """
    expr = DEMOS[name]()
    print(f"Before simplify: {expr}")
    try:
        if trace:
            _, trace_obj = pipeline(expr, trace=True)
            print(trace_obj.format(trace_style))
        else:
            pipeline(expr)
    except (ZeroDivisionError, ConvergenceError, MalformedExpression) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"After simplify: {expr}")
    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="reducto",
        description="REDUCTO - Rewriting Expressions Down Using Coefficient-Tracking Operations",
        epilog="Examples:\n"
               "  reducto --list                      List demos\n"
               "  reducto scenario-d                  Simplify x - y\n"
               "  reducto halve -p expand -p integers Expand, then target integers\n"
               "  reducto nested --expand -t          Trace every pass\n",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "demo",
        nargs="?",
        default=DEFAULT_DEMO,
        help=f"Demo expression to simplify (default: {DEFAULT_DEMO})"
    )

    parser.add_argument(
        "-l", "--list",
        action="store_true",
        help="List demo expressions"
    )

    parser.add_argument(
        "-p", "--preset",
        action="append",
        default=[],
        choices=sorted(PRESETS),
        help="Option preset; repeat to run phases in sequence"
    )

    parser.add_argument(
        "--expand",
        action="store_true",
        help="Distribute literal factors over sums"
    )

    parser.add_argument(
        "--integers",
        action="store_true",
        help="Prefer division by an integer over multiplication by a fraction"
    )

    parser.add_argument(
        "--max-passes",
        type=int,
        default=DEFAULT_MAX_PASSES,
        help="Give up after this many passes"
    )

    parser.add_argument(
        "-t", "--trace",
        action="store_true",
        help="Enable tracing"
    )

    parser.add_argument(
        "--trace-style",
        default="verbose",
        choices=["verbose", "compact", "passes", "chain"],
        help="Trace format"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every pass"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list:
        print(list_demos())
        sys.exit(0)

    if args.demo not in DEMOS:
        print(f"Unknown demo: {args.demo}", file=sys.stderr)
        sys.exit(1)

    try:
        pipeline = build_pipeline(
            args.preset,
            expand=args.expand,
            target_integers=args.integers,
            max_passes=args.max_passes,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    logger.debug("running %s with %r", args.demo, pipeline)

    sys.exit(run_demo(args.demo, pipeline, trace=args.trace, trace_style=args.trace_style))


if __name__ == "__main__":
    main()
