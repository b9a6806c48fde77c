"""Tests for expression construction, rendering, equality and abs()."""

import pytest
from reducto import Constant, Expr, Function, MalformedExpression, Op, Rational


class TestFactories:
    """Tests for the Expr factory methods."""

    def test_rational(self):
        e = Expr.rational(1, 2)
        assert e.op is Op.LITERAL
        assert e.value == Rational(1, 2)
        assert e.children is None

    def test_rational_not_reduced(self):
        """Factories store the literal as given."""
        assert Expr.rational(4, 6).value == Rational(4, 6)

    def test_integer(self):
        """Integers are rationals with denominator 1."""
        assert Expr.integer(3).value == Rational(3, 1)

    def test_literal_copies_rational(self):
        """The node owns its own Rational."""
        r = Rational(1, 2)
        e = Expr.literal(r)
        e.value.negate()
        assert r == Rational(1, 2)

    def test_var(self):
        e = Expr.var("x")
        assert e.op is Op.VAR
        assert e.value == "x"

    def test_constants(self):
        assert Expr.pi().value is Constant.PI
        assert Expr.e().value is Constant.E

    def test_func_with_tag(self):
        e = Expr.func(Function.SINE, [Expr.var("x")])
        assert e.op is Op.FUNC
        assert e.value == Function.SINE
        assert e.children == [Expr.var("x")]

    def test_func_with_name(self):
        """Names resolve to built-ins when they exist."""
        assert Expr.func("sin", [Expr.var("x")]).value == Function.SINE
        assert Expr.func("f", [Expr.var("x")]).value == Function.named("f")

    def test_binary_factories(self):
        x, y = Expr.var("x"), Expr.var("y")
        assert Expr.add(x, y).op is Op.ADD
        assert Expr.sub(Expr.var("x"), Expr.var("y")).op is Op.SUB
        assert Expr.mul(Expr.var("x"), Expr.var("y")).op is Op.MUL
        assert Expr.div(Expr.var("x"), Expr.var("y")).op is Op.DIV
        assert Expr.pow(Expr.var("x"), Expr.var("y")).op is Op.POW


class TestOperators:
    """Tests for building trees with Python operators."""

    def test_operators_build_nodes(self):
        x, y = Expr.var("x"), Expr.var("y")
        assert str(x + y) == "(x + y)"
        assert str(x - y) == "(x - y)"
        assert str(x * y) == "(x * y)"
        assert str(x / y) == "(x / y)"
        assert str(x ** y) == "(x ^ y)"

    def test_int_coercion(self):
        x = Expr.var("x")
        assert str(x + 1) == "(x + 1)"
        assert str(2 * x) == "(2 * x)"
        assert str(1 - x) == "(1 - x)"
        assert str(1 / x) == "(1 / x)"
        assert str(2 ** x) == "(2 ^ x)"

    def test_rational_coercion(self):
        x = Expr.var("x")
        assert str(x * Rational(1, 2)) == "(x * (1/2))"

    def test_float_rejected(self):
        """Literals are never floating point."""
        with pytest.raises(TypeError):
            Expr.var("x") + 0.5

    def test_operators_do_not_chain_nary(self):
        """a + b + c nests binary additions."""
        a, b, c = Expr.var("a"), Expr.var("b"), Expr.var("c")
        assert str(a + b + c) == "((a + b) + c)"


class TestOwnership:
    """Tests for the strict tree shape."""

    def test_reused_operand_is_copied(self):
        """Using the same node twice stores two independent children."""
        x = Expr.var("x")
        e = x + x
        assert e.children[0] is x
        assert e.children[1] is not x
        assert e.children[0] == e.children[1]

    def test_subtree_reused_in_second_parent(self):
        """A subtree placed in a second parent is copied."""
        s = Expr.var("x") + 1
        first = s * 2
        second = s * 3
        assert first.children[0] is s
        assert second.children[0] is not s
        second.children[0].children[1].value.negate()
        assert str(first) == "((x + 1) * 2)"
        assert str(second) == "((x + -1) * 3)"

    def test_literal_payload_is_copied(self):
        """Constructing a literal from a Rational does not share it."""
        r = Rational(-1, 2)
        first = Expr(Op.LITERAL, value=r)
        second = Expr(Op.LITERAL, value=r)
        first.abs()
        assert first.value == Rational(1, 2)
        assert second.value == Rational(-1, 2)
        assert r == Rational(-1, 2)

    def test_copy_is_deep(self):
        e = Expr.var("x") + Expr.rational(1, 2)
        c = e.copy()
        assert c == e
        c.children[1].value.negate()
        assert c != e


class TestStructuralValidation:
    """Tests for structural invariant checks."""

    def test_operator_without_children(self):
        with pytest.raises(MalformedExpression):
            Expr(Op.ADD, [])

    def test_operator_with_none_children(self):
        with pytest.raises(MalformedExpression):
            Expr(Op.MUL)

    def test_function_without_arguments(self):
        with pytest.raises(MalformedExpression):
            Expr.func(Function.SINE, [])

    def test_binary_arity(self):
        with pytest.raises(MalformedExpression):
            Expr(Op.SUB, [Expr.var("x")])
        with pytest.raises(MalformedExpression):
            Expr(Op.DIV, [Expr.var("x"), Expr.var("y"), Expr.var("z")])

    def test_leaf_with_children(self):
        with pytest.raises(MalformedExpression):
            Expr(Op.VAR, [Expr.var("y")], value="x")

    def test_bad_payloads(self):
        with pytest.raises(MalformedExpression):
            Expr(Op.LITERAL, value=3)
        with pytest.raises(MalformedExpression):
            Expr(Op.VAR, value="")
        with pytest.raises(MalformedExpression):
            Expr(Op.FUNC, [Expr.var("x")], value="sin")

    def test_nary_add_allowed(self):
        e = Expr(Op.ADD, [Expr.var("a"), Expr.var("b"), Expr.var("c")])
        assert str(e) == "(a + b + c)"

    def test_malformed_is_value_error(self):
        assert issubclass(MalformedExpression, ValueError)


class TestRendering:
    """Tests for the fully parenthesized display string."""

    def test_integer_literal(self):
        assert str(Expr.integer(2)) == "2"
        assert str(Expr.integer(-1)) == "-1"

    def test_fraction_literal(self):
        assert str(Expr.rational(2, 3)) == "(2/3)"

    def test_integer_valued_unreduced(self):
        """Only denominator 1 renders as an integer."""
        assert str(Expr.rational(4, 2)) == "(4/2)"

    def test_variable_and_constants(self):
        assert str(Expr.var("theta")) == "theta"
        assert str(Expr.pi()) == "pi"
        assert str(Expr.e()) == "e"

    def test_application(self):
        e = Expr.func("f", [Expr.var("x"), Expr.integer(1)])
        assert str(e) == "f(x, 1)"

    def test_nested(self):
        e = Expr.func(Function.SINE, [Expr.var("x") * Expr.pi()]) + Expr.rational(1, 2)
        assert e.render() == "(sin((x * pi)) + (1/2))"

    def test_render_is_pure(self):
        e = Expr.rational(4, 6) + Expr.var("x")
        e.render()
        assert e.children[0].value == Rational(4, 6)

    def test_repr(self):
        assert repr(Expr.var("x") + 1) == "Expr((x + 1))"


class TestEquality:
    """Tests for elementwise structural equality."""

    def test_equal_trees(self):
        assert Expr.var("x") + 1 == Expr.var("x") + 1

    def test_operand_order_matters(self):
        assert Expr.var("x") + 1 != 1 + Expr.var("x")

    def test_unreduced_literals_differ(self):
        assert Expr.rational(2, 4) != Expr.rational(1, 2)

    def test_different_functions(self):
        x = Expr.var("x")
        assert Expr.func(Function.SINE, [x]) != Expr.func(Function.COSINE, [x])
        assert Expr.func(Function.SINE, [x]) != Expr.func(Function.named("sin"), [x])

    def test_not_equal_to_other_types(self):
        assert Expr.integer(1) != 1

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(Expr.var("x"))


class TestIntrospection:
    """Tests for is_literal, is_leaf and size."""

    def test_is_literal(self):
        assert Expr.integer(0).is_literal()
        assert Expr.integer(0).is_literal(0)
        assert not Expr.integer(1).is_literal(0)
        assert not Expr.var("x").is_literal()

    def test_is_leaf(self):
        assert Expr.var("x").is_leaf()
        assert Expr.pi().is_leaf()
        assert not (Expr.var("x") + 1).is_leaf()

    def test_size(self):
        assert Expr.var("x").size() == 1
        assert ((Expr.var("x") + 1) * 2).size() == 5


class TestAbs:
    """Tests for the in-place absolute value transform."""

    def test_negative_literal(self):
        e = Expr.rational(-1, 2)
        e.abs()
        assert e == Expr.rational(1, 2)

    def test_negative_denominator_literal(self):
        """The numerator is negated, leaving a negative value positive."""
        e = Expr.rational(1, -2)
        e.abs()
        assert e == Expr.rational(-1, -2)
        assert not e.value.is_negative()

    def test_positive_literal_unchanged(self):
        e = Expr.integer(3)
        e.abs()
        assert e == Expr.integer(3)

    def test_variable_wrapped(self):
        e = Expr.var("x")
        e.abs()
        assert str(e) == "abs(x)"
        assert e.value == Function.ABS

    def test_pushed_through_addition(self):
        e = Expr.var("x") + Expr.integer(-2)
        e.abs()
        assert str(e) == "(abs(x) + 2)"

    def test_pushed_through_multiplication(self):
        """Each factor is treated on its own."""
        e = Expr.var("x") * Expr.integer(-3)
        e.abs()
        assert str(e) == "(abs(x) * 3)"

    def test_pushed_through_division(self):
        e = Expr.integer(-1) / Expr.var("y")
        e.abs()
        assert str(e) == "(1 / abs(y))"

    def test_subtraction_wrapped(self):
        e = Expr.var("x") - Expr.integer(-1)
        e.abs()
        assert str(e) == "abs((x - -1))"

    def test_power_wrapped(self):
        e = Expr.var("x") ** 2
        e.abs()
        assert str(e) == "abs((x ^ 2))"

    def test_function_wrapped(self):
        e = Expr.func(Function.COSINE, [Expr.var("x")])
        e.abs()
        assert str(e) == "abs(cos(x))"

    def test_abs_of_abs_wraps_again(self):
        e = Expr.func(Function.ABS, [Expr.var("x")])
        e.abs()
        assert str(e) == "abs(abs(x))"

    def test_constant_unchanged(self):
        e = Expr.pi()
        e.abs()
        assert e == Expr.pi()

    def test_wrapped_subtree_untouched(self):
        """The wrapped subtree is the original, not a transformed copy."""
        e = Expr.integer(-1) - Expr.var("x")
        e.abs()
        assert e.children[0] == Expr.integer(-1) - Expr.var("x")
