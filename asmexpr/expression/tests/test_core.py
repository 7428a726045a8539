"""Tests for the core module."""
import doctest
import unittest

from hypothesis import given
from hypothesis.strategies import integers

from asmexpr.expression.core import operandify, Integer, Label, Symbol, Unknown
from asmexpr.expression.operation import Expression


class TestInteger(unittest.TestCase):
    """Tests of the Integer class."""

    def test_invalid_args(self):
        with self.assertRaises(AssertionError):
            Integer("1")
        with self.assertRaises(AssertionError):
            Integer(0.5)
        with self.assertRaises(AssertionError):
            Integer(True)

    def test_initialization(self):
        x = Integer(3)

        self.assertTrue(x.is_Atom)
        self.assertEqual(x.atoms(), {x})
        self.assertEqual(x.externals(), [])
        self.assertEqual(x.complexity, 1)

        with self.assertRaises(AttributeError):
            x.value = 0

    @given(integers(), integers())
    def test_comparisons(self, x, y):
        self.assertEqual(x == y, Integer(x) == Integer(y))
        self.assertEqual(x == y, Integer(x) == y)
        self.assertEqual(x != y, Integer(x) != Integer(y))
        self.assertEqual(hash(Integer(x)), hash(Integer(x)))
        self.assertEqual(hash(Integer(x)), hash(x))
        self.assertIn(x, {Integer(x)})
        self.assertIn(Integer(x), {x: None})
        self.assertEqual(int(Integer(x)), x)
        self.assertEqual(bool(Integer(x)), bool(x))

    def test_arbitrary_precision(self):
        x = Integer(2 ** 200)
        self.assertEqual(x.value, 2 ** 200)
        self.assertEqual(str(x), hex(2 ** 200))
        self.assertEqual(str(Integer(-20)), "-0x14")
        self.assertEqual(str(Integer(-3)), "-3")


class TestName(unittest.TestCase):
    """Tests of the Symbol and Label classes."""

    def test_invalid_args(self):
        with self.assertRaises(AssertionError):
            Symbol("")
        with self.assertRaises(AssertionError):
            Symbol(1)
        with self.assertRaises(AssertionError):
            Label(["l", "b", "l"])

    def test_initialization(self):
        s = Symbol("eax")
        self.assertTrue(s.is_Atom)
        self.assertEqual(s.atoms(), {s})
        self.assertEqual(s.externals(), [s])

        with self.assertRaises(AttributeError):
            s.name = "ebx"

    def test_comparisons(self):
        self.assertEqual(Symbol("eax"), Symbol("eax"))
        self.assertEqual(Symbol("eax"), "eax")
        self.assertNotEqual(Symbol("eax"), Symbol("ebx"))
        self.assertNotEqual(Symbol("eax"), Label("eax"))
        self.assertNotEqual(Symbol("eax"), Integer(0))
        self.assertEqual(len({Symbol("eax"), Symbol("eax"), Label("eax")}), 2)
        self.assertEqual(Unknown, Symbol("unknown"))
        self.assertIn("eax", {Symbol("eax")})
        self.assertIn(Label("eax"), {"eax"})
        self.assertEqual({Symbol("eax"): 1}.get("eax"), 1)


class TestOperandify(unittest.TestCase):
    """Tests of the operandify function."""

    def test_invalid_args(self):
        with self.assertRaises(TypeError):
            operandify(0.5)
        with self.assertRaises(TypeError):
            operandify(None)
        with self.assertRaises(TypeError):
            operandify({"eax": 1})

    def test_initialization(self):
        self.assertEqual(operandify(2), Integer(2))
        self.assertEqual(operandify(True), Integer(1))
        self.assertEqual(operandify("x"), Symbol("x"))
        self.assertIsInstance(operandify("x"), Symbol)
        self.assertEqual(operandify(Label("x")), Label("x"))
        self.assertEqual(operandify(["x", "+", 1]), Expression(Symbol("x"), "+", Integer(1)))
        self.assertEqual(operandify(("-", "x")), Expression(None, "-", Symbol("x")))


class TestOperand(unittest.TestCase):
    """Tests of the methods shared by all operands."""

    def test_externals(self):
        expr = Expression(Expression("eax", "+", 42), "-", Label("bla"))
        self.assertEqual(expr.externals(), [Symbol("eax"), Label("bla")])

        expr = Expression(Expression("b", "*", "a"), "+", Expression("a", "-", "c"))
        self.assertEqual(expr.externals(), [Symbol("b"), Symbol("a"), Symbol("c")])

        expr = Expression(Unknown, "+", Label("unknown"))
        self.assertEqual(expr.externals(), [Unknown, Label("unknown")])

        self.assertEqual(Expression(1, "+", 2).externals(), [])

    def test_atoms(self):
        expr = Expression(Expression("a", "+", 1), "*", Expression("-", "a"))
        self.assertEqual(expr.atoms(), {Symbol("a"), Integer(1)})
        self.assertEqual(expr.atoms(Symbol), {Symbol("a")})
        self.assertEqual(expr.complexity, 6)

    def test_arithmetic(self):
        eax = Symbol("eax")
        self.assertEqual(eax + 4, Expression("eax", "+", 4))
        self.assertEqual(eax + 4 - eax, 4)
        self.assertEqual(4 + eax, Expression("eax", "+", 4))
        self.assertEqual(10 - eax, Expression(Expression("-", "eax"), "+", 10))
        self.assertEqual(Integer(3) + 4, Integer(7))
        self.assertEqual(eax - eax, 0)
        self.assertEqual(Unknown + 4, Expression(Unknown))


# noinspection PyUnusedLocal,PyUnusedLocal
def load_tests(loader, tests, ignore):
    """Add doctests."""
    import asmexpr.expression.core
    tests.addTests(doctest.DocTestSuite(asmexpr.expression.core))
    return tests
