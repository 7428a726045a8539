"""Tests for the matching module."""
import doctest
import unittest

from asmexpr.expression.core import Label, Symbol
from asmexpr.expression.matching import match
from asmexpr.expression.operation import Expression, Operator

E = Expression


class TestMatch(unittest.TestCase):
    """Tests of the match function."""

    def test_variables(self):
        self.assertEqual(match(E(1, "+", 2), E("var", "+", 2), {"var"}), {"var": 1})
        self.assertIsNone(match(E(1, "+", 2), E("var", "+", "var"), {"var"}))
        self.assertEqual(match(E(2, "+", 2), E("var", "+", "var"), {"var"}), {"var": 2})
        self.assertEqual(
            match(E(1, "+", 1), E("var", "op", "var"), {"var", "op"}),
            {"var": 1, "op": "+"})

    def test_declaration(self):
        expr = E("eax", "+", 1)
        self.assertEqual(match(expr, E("x", "+", 1), [Symbol("x")]), {"x": Symbol("eax")})
        self.assertEqual(match(expr, E(Label("x"), "+", 1), ["x"]), {"x": Symbol("eax")})
        self.assertEqual(match(expr, E("x", "+", "y"), ("x", "y")), {"x": Symbol("eax"), "y": 1})
        self.assertEqual(expr.match(E("x", "+", 1), "x"), {"x": Symbol("eax")})
        self.assertEqual(match(expr, ["x", "+", 1], {"x"}), {"x": Symbol("eax")})

        with self.assertRaises(TypeError):
            match(expr, E("x", "+", 1), [1])

    def test_literals(self):
        expr = E("eax", "+", 1)
        self.assertEqual(match(expr, expr, set()), {})
        self.assertIsNone(match(expr, E("ebx", "+", 1), {"x"}))
        self.assertIsNone(match(expr, E("eax", "+", 2), {"x"}))
        self.assertIsNone(match(expr, E("eax", "-", 1), {"x"}))
        self.assertIsNone(match(expr, E(Label("eax"), "+", 1), set()))
        # undeclared placeholders never match
        self.assertIsNone(match(expr, E("eax", "op", 1), set()))

    def test_structure(self):
        expr = E(E("a", "*", 2), "+", 1)
        self.assertEqual(match(expr, E("x", "+", 1), {"x"}), {"x": E("a", "*", 2)})
        self.assertEqual(match(expr, E(E("x", "*", "y"), "+", 1), {"x", "y"}), {"x": Symbol("a"), "y": 2})
        self.assertIsNone(match(E("a", "+", 1), E(E("x", "*", "y"), "+", 1), {"x", "y"}))
        self.assertEqual(match(expr, "x", {"x"}), {"x": expr})

    def test_unary(self):
        self.assertIsNone(match(E("-", "a"), E("x", "-", "a"), {"x"}))
        self.assertIsNone(match(E("b", "-", "a"), E("-", "a"), set()))
        self.assertEqual(match(E("-", "a"), E("op", "a"), {"op"}), {"op": Operator.SUB})
        self.assertEqual(match(E(-5), E("-", "n"), {"n"}), {"n": 5})

    def test_operator_variables(self):
        template = E(E("x", "op", "y"), "op", "z")
        names = {"x", "y", "z", "op"}
        self.assertEqual(
            match(E(E(1, "&", 2), "&", 3), template, names),
            {"x": 1, "y": 2, "z": 3, "op": Operator.AND})
        self.assertIsNone(match(E(E(1, "&", 2), "|", 3), template, names))


# noinspection PyUnusedLocal,PyUnusedLocal
def load_tests(loader, tests, ignore):
    """Add doctests."""
    import asmexpr.expression.matching
    tests.addTests(doctest.DocTestSuite(asmexpr.expression.matching))
    return tests
