"""Manage the representation of symbolic expressions."""
from sympy.printing import repr as sympy_repr
from sympy.printing import str as sympy_str


# noinspection PyPep8Naming,PyMethodMayBeStatic
class ExprStrPrinter(sympy_str.StrPrinter):
    """Printing class that handles the `str` method of `Operand`.

    The output uses the grammar accepted by `parsing` and contains
    the minimal parentheses, so it parses back to an equal expression.

        >>> from asmexpr.expression.operation import Expression
        >>> Expression(Expression("a", "-", "b"), "-", Expression("c", "-", "d"))
        a - b - (c - d)
        >>> Expression("-", Expression("a", "+", 0x100))
        -(a + 0x100)
        >>> Expression("lbl")
        lbl
        >>> Expression(Expression("lbl"), "*", 2)
        +lbl * 2

    """

    _root = None

    def doprint(self, expr):
        self._root = expr
        return super().doprint(expr)

    def _level(self, expr):
        """Return the precedence level of a binary expression."""
        from asmexpr.expression import operation
        return operation.PRECEDENCE.get(expr.op, 0)

    def _need_parentheses(self, arg, parent, right=False):
        """Return true if arg need parenthesis when used as operand of parent."""
        from asmexpr.expression import operation

        if not isinstance(arg, operation.Expression) or arg.unary:
            return False
        elif parent.unary:
            return True
        elif right:
            return self._level(arg) <= self._level(parent)
        else:
            return self._level(arg) < self._level(parent)

    def _print_Integer(self, expr):
        if -16 < expr.value < 16:
            return str(expr.value)
        else:
            return hex(expr.value)

    def _print_Symbol(self, expr):
        return expr.name

    def _print_Label(self, expr):
        if '"' in expr.name:
            return "'{}'".format(expr.name)
        else:
            return '"{}"'.format(expr.name)

    def _print_Expression(self, expr):
        from asmexpr.expression import core, operation
        lhs, op, rhs = expr.args

        if self._need_parentheses(rhs, expr, right=True):
            rhs_str = "({})".format(self._print(rhs))
        else:
            rhs_str = self._print(rhs)

        if lhs is None:
            if (op == operation.Operator.ADD and expr is self._root and
                    not isinstance(rhs, operation.Expression)):
                assert isinstance(rhs, core.Operand)
                return rhs_str
            return "{}{}".format(op, rhs_str)

        if self._need_parentheses(lhs, expr):
            lhs_str = "({})".format(self._print(lhs))
        else:
            lhs_str = self._print(lhs)

        return "{} {} {}".format(lhs_str, op, rhs_str)


# noinspection PyPep8Naming,PyMethodMayBeStatic
class ExprReprPrinter(sympy_repr.ReprPrinter):
    """Printing class that handles the `Operand.vrepr` method.

        >>> from asmexpr.expression.core import Label
        >>> from asmexpr.expression.operation import Expression
        >>> Expression("eax", "&", Label("mask")).vrepr()
        "Expression(Symbol('eax'), '&', Label('mask'))"

    """

    def _print_Integer(self, expr):
        return "{}({})".format(type(expr).__name__, expr.value)

    def _print_Symbol(self, expr):
        return "{}({!r})".format(type(expr).__name__, expr.name)

    _print_Label = _print_Symbol

    def _print_Expression(self, expr):
        lhs, op, rhs = expr.args
        lhs = "None" if lhs is None else self._print(lhs)
        return "{}({}, {!r}, {})".format(
            type(expr).__name__, lhs, str(op), self._print(rhs))
