"""
Exact rational arithmetic for REDUCTO.

REDUCTO - Rewriting Expressions Down Using Coefficient-Tracking Operations

Every numeric literal in an expression tree is a Rational. Values are never
widened to floating point.

Reduction is explicit: the constructor stores what it is given, and
reduce() brings the pair to lowest terms in place. The four arithmetic
operators always return an already-reduced value.

reduce() divides by a signed gcd: Euclid's algorithm with a remainder that
takes the sign of the dividend. The sign of the result therefore depends on
the pair, not on a fixed slot: 2/-1 becomes -2, -1/-2 becomes 1/2, 0/-3
becomes 0 and -1/2 becomes 1/-2. Equality is structural and assumes both
sides are reduced.
"""

from typing import Union


def gcd(a: int, b: int) -> int:
    """
    Greatest common divisor with a truncating remainder.

    Unlike math.gcd the result can be negative:

        gcd(2, -1)   # => -1
        gcd(-1, -2)  # => -1
        gcd(0, -3)   # => -3
    """
    while b != 0:
        r = abs(a) % abs(b)
        if a < 0:
            r = -r
        a, b = b, r
    return a


def lcm(a: int, b: int) -> int:
    return (a * b) // gcd(a, b)


class Rational:
    """
    A fraction of two integers.

    Examples:
        Rational(4, 6).reduce()          # => True, value is now 2/3
        Rational(1, 2) + Rational(3, 2)  # => Rational(2, 1)
        Rational(3).is_integer()         # => True
    """

    __slots__ = ('numerator', 'denominator')

    def __init__(self, numerator: int, denominator: int = 1):
        if denominator == 0:
            raise ZeroDivisionError(f"Rational({numerator}, 0)")
        self.numerator = numerator
        self.denominator = denominator

    # ============================================================
    # Reduction and predicates
    # ============================================================

    def reduce(self) -> bool:
        """
        Divide numerator and denominator by their signed gcd, in place.

        Returns:
            True if the value changed, False if it was already reduced
        """
        g = gcd(self.numerator, self.denominator)
        if g == 1:
            return False
        self.numerator //= g
        self.denominator //= g
        return True

    def is_zero(self) -> bool:
        return self.numerator == 0

    def is_one(self) -> bool:
        return self.numerator == self.denominator

    def is_integer(self) -> bool:
        return self.denominator == 1

    def is_negative(self) -> bool:
        return self.numerator * self.denominator < 0

    def reciprocal(self) -> 'Rational':
        """Return a new value with numerator and denominator swapped."""
        if self.numerator == 0:
            raise ZeroDivisionError("reciprocal of zero")
        return Rational(self.denominator, self.numerator)

    def negate(self) -> None:
        """Flip the sign in place."""
        self.numerator = -self.numerator

    def copy(self) -> 'Rational':
        return Rational(self.numerator, self.denominator)

    # ============================================================
    # Arithmetic
    # ============================================================

    def _common_denominator(self, other: 'Rational') -> int:
        return lcm(self.denominator, other.denominator)

    def __add__(self, other: 'Rational') -> 'Rational':
        if not isinstance(other, Rational):
            return NotImplemented
        denom = self._common_denominator(other)
        result = Rational(
            self.numerator * (denom // self.denominator)
            + other.numerator * (denom // other.denominator),
            denom,
        )
        result.reduce()
        return result

    def __sub__(self, other: 'Rational') -> 'Rational':
        if not isinstance(other, Rational):
            return NotImplemented
        denom = self._common_denominator(other)
        result = Rational(
            self.numerator * (denom // self.denominator)
            - other.numerator * (denom // other.denominator),
            denom,
        )
        result.reduce()
        return result

    def __mul__(self, other: 'Rational') -> 'Rational':
        if not isinstance(other, Rational):
            return NotImplemented
        result = Rational(self.numerator * other.numerator,
                          self.denominator * other.denominator)
        result.reduce()
        return result

    def __truediv__(self, other: 'Rational') -> 'Rational':
        if not isinstance(other, Rational):
            return NotImplemented
        if other.is_zero():
            raise ZeroDivisionError(f"{self} / {other}")
        result = Rational(self.numerator * other.denominator,
                          self.denominator * other.numerator)
        result.reduce()
        return result

    # ============================================================
    # Comparison and display
    # ============================================================

    def __eq__(self, other) -> bool:
        # Structural: 2/4 != 1/2 until reduced
        if isinstance(other, Rational):
            return (self.numerator == other.numerator
                    and self.denominator == other.denominator)
        return False

    __hash__ = None

    def __str__(self) -> str:
        if self.is_integer():
            return str(self.numerator)
        return f"{self.numerator}/{self.denominator}"

    def __repr__(self) -> str:
        return f"Rational({self.numerator}, {self.denominator})"


RationalLike = Union[Rational, int]


def as_rational(value: RationalLike) -> Rational:
    """Coerce an int (or a Rational) to a Rational."""
    if isinstance(value, Rational):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Cannot make a Rational from {value!r}")
    return Rational(value, 1)
