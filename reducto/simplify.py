"""
Rewrite engine for REDUCTO.

REDUCTO - Rewriting Expressions Down Using Coefficient-Tracking Operations

Simplification alternates two full-tree passes until neither changes the
tree:

    structural pass  - reduce literals, fold literal operands of sums and
                       products, absorb zero factors, turn division by a
                       literal into multiplication (or the reverse when
                       targeting integers), distribute a literal factor over
                       a sum when expanding, apply function rules
    flatten pass     - splice nested sums into sums and nested products
                       into products, collapse single-operand sums and
                       products, lower subtraction to signed addition

The tree is rewritten in place. Options pick the policy:

    from reducto import Expr, Simplifier, SimplifyOptions

    x = Expr.var("x")
    expr = (x + Expr.rational(1, 2)) / 2
    Simplifier(SimplifyOptions.expanding())(expr)
    str(expr)  # => "((x * (1/2)) + (1/4))"

Phases can be chained with >>; each runs to its own fixpoint:

    pipeline = Simplifier(SimplifyOptions.expanding()) >> Simplifier(SimplifyOptions.integers())
    pipeline(expr)
    str(expr)  # => "((x / 2) + (1/4))"

Tracing:
    Use Simplifier.simplify(expr, trace=True) to see what every pass did.
"""

import logging
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .expr import Expr
from .functions import simplify_value
from .rational import Rational
from .tags import Op

logger = logging.getLogger(__name__)

DEFAULT_MAX_PASSES = 1000


class ConvergenceError(RuntimeError):
    """The fixpoint loop hit its pass limit while the tree was still changing."""

    def __init__(self, passes: int, current: str):
        super().__init__(f"Simplification did not converge after {passes} passes: {current}")
        self.passes = passes
        self.current = current


# ============================================================
# Options
# ============================================================

class SimplifyOptions:
    """
    Rewrite policy.

    Args:
        expand: Distribute a literal factor over the terms of a sum
        target_integers: Write a fractional coefficient c as a division by
            the integer 1/c instead of a multiplication by c
        max_passes: Upper bound on structural+flatten iterations
    """

    __slots__ = ('expand', 'target_integers', 'max_passes')

    def __init__(self, expand: bool = False, target_integers: bool = False,
                 max_passes: int = DEFAULT_MAX_PASSES):
        if max_passes < 1:
            raise ValueError(f"max_passes must be at least 1, got {max_passes}")
        self.expand = expand
        self.target_integers = target_integers
        self.max_passes = max_passes

    @classmethod
    def default(cls) -> 'SimplifyOptions':
        return cls()

    @classmethod
    def expanding(cls) -> 'SimplifyOptions':
        return cls(expand=True)

    @classmethod
    def integers(cls) -> 'SimplifyOptions':
        return cls(target_integers=True)

    def replace(self, **changes) -> 'SimplifyOptions':
        """Return a copy with some fields changed."""
        fields = {name: getattr(self, name) for name in self.__slots__}
        unknown = set(changes) - set(fields)
        if unknown:
            raise TypeError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        fields.update(changes)
        return SimplifyOptions(**fields)

    def to_dict(self) -> Dict:
        return {name: getattr(self, name) for name in self.__slots__}

    def __eq__(self, other) -> bool:
        if isinstance(other, SimplifyOptions):
            return self.to_dict() == other.to_dict()
        return False

    __hash__ = None

    def __repr__(self) -> str:
        return (f"SimplifyOptions(expand={self.expand}, "
                f"target_integers={self.target_integers}, "
                f"max_passes={self.max_passes})")


# Named option presets
PRESETS: Dict[str, Callable[[], SimplifyOptions]] = {
    "default": SimplifyOptions.default,
    "expand": SimplifyOptions.expanding,
    "integers": SimplifyOptions.integers,
}


# ============================================================
# Tracing
# ============================================================

class PassStep:
    """One pass of one iteration of the fixpoint loop."""

    def __init__(self, iteration: int, pass_name: str, changed: bool,
                 before: str, after: str):
        self.iteration = iteration
        self.pass_name = pass_name
        self.changed = changed
        self.before = before
        self.after = after

    def __repr__(self) -> str:
        mark = "*" if self.changed else " "
        return f"[{self.iteration}]{mark} {self.pass_name}: {self.before} → {self.after}"

    def to_dict(self) -> Dict:
        """Convert step to dictionary for serialization."""
        return {
            "iteration": self.iteration,
            "pass": self.pass_name,
            "changed": self.changed,
            "before": self.before,
            "after": self.after,
        }


class SimplifyTrace:
    """
    A record of every pass run by a simplification.

    Provides multiple formatting options:
        - Default repr: verbose multi-line format
        - format("compact"): single line with the number of passes
        - format("passes"): the names of the passes that changed the tree
        - format("chain"): the tree after each changing pass
        - to_dict(): JSON-serializable dictionary
    """

    def __init__(self):
        self.steps: List[PassStep] = []
        self.initial: Optional[str] = None
        self.final: Optional[str] = None

    def add_step(self, step: PassStep):
        self.steps.append(step)

    @property
    def changes(self) -> List[PassStep]:
        """Steps that modified the tree."""
        return [s for s in self.steps if s.changed]

    @property
    def iterations(self) -> int:
        return max((s.iteration for s in self.steps), default=0)

    def format(self, style: str = "verbose") -> str:
        """
        Format the trace in different styles.

        Args:
            style: One of "verbose", "compact", "passes", "chain"

        Returns:
            Formatted string representation of the trace.
        """
        if style == "compact":
            return f"{self.initial} --[{len(self.changes)} changes, {self.iterations} iterations]--> {self.final}"

        elif style == "passes":
            names = [f"{s.pass_name}#{s.iteration}" for s in self.changes]
            return " -> ".join(names) if names else "(no changes)"

        elif style == "chain":
            parts = [self.initial]
            for step in self.changes:
                parts.append(f"  --({step.pass_name})-->")
                parts.append(step.after)
            return "\n".join(parts)

        elif style == "verbose":
            return repr(self)

        raise ValueError(f"Unknown trace style: {style}. "
                         f"Valid options: verbose, compact, passes, chain")

    def __repr__(self) -> str:
        lines = [f"Initial: {self.initial}"]
        for step in self.steps:
            lines.append(f"  {step}")
        lines.append(f"Final: {self.final}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[PassStep]:
        return iter(self.steps)

    def __bool__(self) -> bool:
        """True if any pass changed the tree."""
        return any(s.changed for s in self.steps)

    def to_dict(self) -> Dict:
        """Convert trace to dictionary for JSON serialization."""
        return {
            "initial": self.initial,
            "final": self.final,
            "steps": [step.to_dict() for step in self.steps],
            "iterations": self.iterations,
        }

    def summary(self) -> str:
        """Get a brief summary of the simplification."""
        if not self:
            return "No simplification performed"
        structural = sum(1 for s in self.changes if s.pass_name == "structural")
        flatten = len(self.changes) - structural
        return (f"{self.iterations} iterations, {structural} structural and "
                f"{flatten} flatten passes changed the tree")


# ============================================================
# Simplifier
# ============================================================

def _replace(node: Expr, op: Op, children: List[Expr]) -> None:
    """Rewrite node in place into a fresh op node over children."""
    node._become(Expr._build(op, children))


class Simplifier:
    """
    Drives the structural and flatten passes over a tree to a fixpoint.

    Example:
        simplifier = Simplifier(SimplifyOptions(expand=True))
        simplifier(expr)                     # in place, returns expr
        expr, trace = simplifier(expr, trace=True)
    """

    def __init__(self, options: Optional[SimplifyOptions] = None):
        self.options = options if options is not None else SimplifyOptions()
        self._structural_rules: Dict[Op, Callable[[Expr], bool]] = {
            Op.LITERAL: self._reduce_literal,
            Op.ADD: self._fold_sum,
            Op.MUL: self._fold_product,
            Op.DIV: self._invert_division,
            Op.SUB: self._structural_children,
            Op.POW: self._structural_children,
            Op.VAR: _unchanged,
            Op.CONST: _unchanged,
            Op.FUNC: self._apply_function_rule,
        }
        self._flatten_rules: Dict[Op, Callable[[Expr], bool]] = {
            Op.LITERAL: _unchanged,
            Op.ADD: self._splice_associative,
            Op.MUL: self._splice_associative,
            Op.SUB: self._lower_subtraction,
            Op.DIV: self._flatten_children,
            Op.POW: self._flatten_children,
            Op.VAR: _unchanged,
            Op.CONST: _unchanged,
            Op.FUNC: self._flatten_children,
        }

    def with_options(self, options: SimplifyOptions) -> 'Simplifier':
        """Return a new simplifier using different options."""
        return Simplifier(options)

    def simplify(self, expr: Expr, trace: bool = False):
        """
        Simplify an expression in place until neither pass changes it.

        Args:
            expr: Root of the tree to rewrite
            trace: If True, return (expr, trace) tuple

        Returns:
            The same expr object, rewritten, or (expr, trace) if trace=True

        Raises:
            ConvergenceError: if options.max_passes iterations did not settle
            MalformedExpression: if the tree breaks a structural invariant
            ZeroDivisionError: on division by a literal zero
        """
        trace_obj = SimplifyTrace() if trace else None
        if trace_obj is not None:
            trace_obj.initial = expr.render()

        for iteration in range(1, self.options.max_passes + 1):
            before = expr.render() if trace_obj is not None else None
            structural = self.structural_pass(expr)
            middle = expr.render() if trace_obj is not None else None
            flatten = self.flatten_pass(expr)

            logger.debug("pass %d: structural=%s flatten=%s", iteration, structural, flatten)

            if trace_obj is not None:
                after = expr.render()
                trace_obj.add_step(PassStep(iteration, "structural", structural, before, middle))
                trace_obj.add_step(PassStep(iteration, "flatten", flatten, middle, after))

            if not structural and not flatten:
                break
        else:
            logger.warning("no fixpoint after %d passes", self.options.max_passes)
            raise ConvergenceError(self.options.max_passes, expr.render())

        if trace_obj is not None:
            trace_obj.final = expr.render()
            return expr, trace_obj
        return expr

    def __call__(self, expr: Expr, **kwargs):
        """simplifier(expr) is shorthand for simplifier.simplify(expr)."""
        return self.simplify(expr, **kwargs)

    def __rshift__(self, other: 'Simplifier') -> 'SequencedSimplifier':
        """
        Sequence two simplifiers: first >> second.

        Example:
            to_integers = Simplifier(SimplifyOptions.expanding()) >> Simplifier(SimplifyOptions.integers())
        """
        return SequencedSimplifier([self, other])

    def __repr__(self) -> str:
        return f"Simplifier({self.options!r})"

    # ============================================================
    # Structural pass
    # ============================================================

    def structural_pass(self, node: Expr) -> bool:
        """Run the structural pass over node's subtree. Returns True on change."""
        return self._structural_rules[node.op](node)

    def _structural_children(self, node: Expr) -> bool:
        changed = False
        for child in node._required_children():
            if self.structural_pass(child):
                changed = True
        return changed

    def _reduce_literal(self, node: Expr) -> bool:
        return node.value.reduce()

    def _fold_sum(self, node: Expr) -> bool:
        changed = self._structural_children(node)

        literals = [c for c in node.children if c.op is Op.LITERAL]
        if len(literals) <= 1 and not any(c.value.is_zero() for c in literals):
            return changed

        total = Rational(0)
        terms = []
        for child in node.children:
            if child.op is Op.LITERAL:
                total = total + child.value
            else:
                terms.append(child)

        if not total.is_zero():
            terms.append(Expr.literal(total))
        elif not terms:
            terms.append(Expr.integer(0))

        _replace(node, Op.ADD, terms)
        return True

    def _fold_product(self, node: Expr) -> bool:
        changed = self._structural_children(node)

        literals = [c for c in node.children if c.op is Op.LITERAL]
        if any(c.value.is_zero() for c in literals):
            node._become(Expr.integer(0))
            return True

        if literals:
            coefficient = Rational(1)
            for literal in literals:
                coefficient = coefficient * literal.value
            if len(literals) > 1:
                changed = True

            factors = [c for c in node.children if c.op is not Op.LITERAL]
            if not factors:
                node._become(Expr.literal(coefficient))
                return True

            if (self.options.target_integers and not coefficient.is_one()
                    and coefficient.reciprocal().is_integer()):
                numerator = Expr._build(Op.MUL, factors)
                _replace(node, Op.DIV, [numerator, Expr.literal(coefficient.reciprocal())])
                return True

            if not coefficient.is_one():
                factors.append(Expr.literal(coefficient))
            _replace(node, Op.MUL, factors)

        if self.options.expand and len(node.children) > 1:
            product, distributed = _expand_product(node.children)
            node._become(product)
            if distributed:
                changed = True

        return changed

    def _invert_division(self, node: Expr) -> bool:
        changed = self._structural_children(node)
        if self.options.target_integers:
            return changed

        numerator, denominator = node.children
        if denominator.op is Op.LITERAL:
            _replace(node, Op.MUL, [numerator, Expr.literal(denominator.value.reciprocal())])
            return True
        return changed

    def _apply_function_rule(self, node: Expr) -> bool:
        changed = self._structural_children(node)
        before = node.copy()
        node._become(simplify_value(node.value, node.children))
        return changed or node != before

    # ============================================================
    # Flatten pass
    # ============================================================

    def flatten_pass(self, node: Expr) -> bool:
        """Run the flatten pass over node's subtree. Returns True on change."""
        return self._flatten_rules[node.op](node)

    def _flatten_children(self, node: Expr) -> bool:
        changed = False
        for child in node._required_children():
            if self.flatten_pass(child):
                changed = True
        return changed

    def _splice_associative(self, node: Expr) -> bool:
        changed = self._flatten_children(node)

        operands = []
        for child in node.children:
            if child.op is node.op:
                operands.extend(child._required_children())
                changed = True
            else:
                operands.append(child)

        if len(operands) == 1:
            node._become(operands[0])
            return True

        _replace(node, node.op, operands)
        return changed

    def _lower_subtraction(self, node: Expr) -> bool:
        self._flatten_children(node)
        minuend, *subtrahends = node.children
        terms = [minuend]
        for subtrahend in subtrahends:
            terms.append(Expr._build(Op.MUL, [subtrahend, Expr.integer(-1)]))
        _replace(node, Op.ADD, terms)
        return True


def _unchanged(node: Expr) -> bool:
    return False


def _expand_product(factors: List[Expr]) -> Tuple[Expr, bool]:
    """
    Left-fold a product, distributing literal factors over sums.

    (a + b) * c  with literal c  =>  (a * c) + (b * c)

    Factors that are not distributed are collected in one product node, so
    the fold never nests a product inside a product. Two sums are never
    multiplied out.
    """
    accumulated = factors[0]
    product = None
    distributed = False
    for factor in factors[1:]:
        if factor.op is Op.LITERAL and accumulated.op is Op.ADD:
            terms = [Expr._build(Op.MUL, [term, factor.copy()])
                     for term in accumulated._required_children()]
            accumulated = Expr._build(Op.ADD, terms)
            product = None
            distributed = True
        elif accumulated is product:
            factor._owned = True
            product.children.append(factor)
        else:
            accumulated = product = Expr._build(Op.MUL, [accumulated, factor])
    return accumulated, distributed


class SequencedSimplifier:
    """
    Applies several simplifiers in order, each until its own fixpoint.

    Created via the >> operator on Simplifier.
    """

    def __init__(self, phases: List[Simplifier]):
        if not phases:
            raise ValueError("SequencedSimplifier needs at least one phase")
        self._phases = phases

    def simplify(self, expr: Expr, trace: bool = False):
        """Run all phases. With trace=True, returns (expr, combined trace)."""
        if not trace:
            for phase in self._phases:
                phase.simplify(expr)
            return expr

        combined = SimplifyTrace()
        combined.initial = expr.render()
        offset = 0
        for phase in self._phases:
            _, phase_trace = phase.simplify(expr, trace=True)
            for step in phase_trace:
                step.iteration += offset
                combined.add_step(step)
            offset += phase_trace.iterations
        combined.final = expr.render()
        return expr, combined

    def __call__(self, expr: Expr, **kwargs):
        return self.simplify(expr, **kwargs)

    def __rshift__(self, other) -> 'SequencedSimplifier':
        """Chain another phase: (a >> b) >> c."""
        if isinstance(other, SequencedSimplifier):
            return SequencedSimplifier(self._phases + other._phases)
        return SequencedSimplifier(self._phases + [other])

    def __repr__(self) -> str:
        return f"SequencedSimplifier({len(self._phases)} phases)"

    def __len__(self) -> int:
        return len(self._phases)

    def __iter__(self) -> Iterator[Simplifier]:
        return iter(self._phases)


def simplify(expr: Expr, options: Optional[SimplifyOptions] = None, trace: bool = False):
    """
    Simplify expr in place with the given options.

    Returns expr, or (expr, trace) if trace=True.
    """
    return Simplifier(options).simplify(expr, trace=trace)

