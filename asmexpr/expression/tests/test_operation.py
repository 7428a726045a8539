"""Tests for the operation module."""
import doctest
import unittest

from hypothesis import given
from hypothesis.strategies import integers, sampled_from

from asmexpr.expression.core import Integer, Label, Symbol
from asmexpr.expression.operation import (
    Expression, Operator, BINARY, BOOLEAN, COMPARISON, INVERSE, PRECEDENCE, UNARY, evaluate
)


class TestOperator(unittest.TestCase):
    """Tests of the Operator class and the operator tables."""

    def test_spelling(self):
        for op in Operator:
            self.assertIs(Operator(op.value), op)
            self.assertEqual(str(op), op.value)

    def test_tables(self):
        self.assertEqual(set(PRECEDENCE), set(BINARY))
        self.assertEqual(UNARY, {Operator.ADD, Operator.SUB, Operator.NOT, Operator.LNOT})
        self.assertLess(PRECEDENCE[Operator.LOR], PRECEDENCE[Operator.LAND])
        self.assertLess(PRECEDENCE[Operator.OR], PRECEDENCE[Operator.XOR])
        self.assertLess(PRECEDENCE[Operator.XOR], PRECEDENCE[Operator.AND])
        self.assertLess(PRECEDENCE[Operator.SHL], PRECEDENCE[Operator.ADD])
        self.assertEqual(PRECEDENCE[Operator.MUL], PRECEDENCE[Operator.DIV])
        self.assertTrue(COMPARISON <= BOOLEAN)

        for op in COMPARISON:
            self.assertIs(INVERSE[INVERSE[op]], op)

        with self.assertRaises(TypeError):
            PRECEDENCE[Operator.ADD] = 0


class TestEvaluate(unittest.TestCase):
    """Tests of the evaluate function."""

    def test_division(self):
        self.assertEqual(evaluate("/", 7, 2), 3)
        self.assertEqual(evaluate("/", -7, 2), -3)
        self.assertEqual(evaluate("/", 7, -2), -3)
        self.assertEqual(evaluate("/", -7, -2), 3)
        self.assertIsNone(evaluate("/", 7, 0))

    def test_shifts(self):
        self.assertEqual(evaluate(">>", -8, 1), -4)
        self.assertEqual(evaluate(">>", -1, 100), -1)
        self.assertEqual(evaluate("<<", 1, 64), 2 ** 64)
        self.assertIsNone(evaluate("<<", 1, -1))
        self.assertIsNone(evaluate(">>", 1, -1))

    def test_unary(self):
        self.assertEqual(evaluate("~", None, 0), -1)
        self.assertEqual(evaluate("-", None, 5), -5)
        self.assertEqual(evaluate("!", None, 0), 1)
        self.assertEqual(evaluate("!", None, 7), 0)

    @given(integers(), integers(), sampled_from(sorted(COMPARISON)))
    def test_boolean_result(self, x, y, op):
        self.assertIn(evaluate(op, x, y), (0, 1))
        self.assertEqual(evaluate(op, x, y), 1 - evaluate(INVERSE[op], x, y))


class TestExpression(unittest.TestCase):
    """Tests of the Expression class."""

    def test_initialization(self):
        a = Symbol("a")

        expr = Expression("a")
        self.assertIs(Expression(expr), expr)
        self.assertEqual(expr.args, (None, Operator.ADD, a))
        self.assertTrue(expr.unary)

        self.assertEqual(Expression(5).args, (None, Operator.ADD, Integer(5)))
        self.assertEqual(Expression(-5), Expression("-", 5))
        self.assertEqual(Expression("a", "+", -3).rhs, Expression(None, "-", 3))
        self.assertEqual(Expression(["a", "+", 1], "*", 2).lhs, Expression(a, "+", 1))
        self.assertEqual(Expression("a", "<<", Label("b")).rhs, Label("b"))

        expr = Expression("a", "==", 1)
        self.assertEqual((expr.lhs, expr.op, expr.rhs), (a, Operator.EQ, Integer(1)))
        self.assertFalse(expr.unary)
        self.assertTrue(expr.boolean)
        self.assertFalse(Expression("a", "+", 1).boolean)
        self.assertTrue(Expression("!", "a").boolean)

    def test_no_simplification(self):
        expr = Expression(1, "+", 2)
        self.assertEqual(expr.args, (Integer(1), Operator.ADD, Integer(2)))
        self.assertEqual(Expression("a", "-", "a").rhs, Symbol("a"))

    def test_placeholder(self):
        expr = Expression("a", "op", "b")
        self.assertEqual(expr.op, "op")
        self.assertNotIsInstance(expr.op, Operator)
        self.assertEqual(expr.externals(), [Symbol("a"), Symbol("b")])
        self.assertEqual(Expression("a", Symbol("op"), "b"), expr)

    def test_invalid_args(self):
        with self.assertRaises(TypeError):
            Expression()
        with self.assertRaises(TypeError):
            Expression(1, "+", 2, 3)
        with self.assertRaises(TypeError):
            Expression(0.5)
        with self.assertRaises(TypeError):
            Expression("a", 1, "b")
        with self.assertRaises(ValueError):
            Expression("a", "~", "b")
        with self.assertRaises(ValueError):
            Expression("*", "a")
        with self.assertRaises(ValueError):
            Expression("a", "+", None)

    def test_structural_equality(self):
        x = Expression(Expression("a", "+", 1), "*", "b")
        y = Expression(Expression("a", "+", 1), "*", "b")
        self.assertEqual(x, y)
        self.assertEqual(hash(x), hash(y))
        self.assertNotEqual(x, Expression("b", "*", Expression("a", "+", 1)))
        self.assertNotEqual(Expression("a", "+", 1), Expression(Label("a"), "+", 1))
        self.assertEqual(x.func(*x.args), x)

    @given(integers(min_value=0), integers(min_value=0))
    def test_negative_literals(self, x, y):
        expr = Expression(-x, "-", -y)
        if x > 0:
            self.assertEqual(expr.lhs, Expression(None, "-", x))
        if y > 0:
            self.assertEqual(expr.rhs, Expression(None, "-", y))
        self.assertEqual(expr.reduce(), y - x)


# noinspection PyUnusedLocal,PyUnusedLocal
def load_tests(loader, tests, ignore):
    """Add doctests."""
    import asmexpr.expression.operation
    tests.addTests(doctest.DocTestSuite(asmexpr.expression.operation))
    return tests
