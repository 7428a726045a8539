"""Provide the operators and the expression node."""
import enum
import types

from asmexpr.expression import core


class Operator(str, enum.Enum):
    """Represent the operators of symbolic expressions.

    Operators compare equal to their spelling.

        >>> from asmexpr.expression.operation import Operator
        >>> Operator("<<") is Operator.SHL
        True
        >>> Operator.ADD == "+"
        True

    """

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    SHR = ">>"
    SHL = "<<"
    AND = "&"
    OR = "|"
    XOR = "^"
    LOR = "||"
    LAND = "&&"
    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    NOT = "~"
    LNOT = "!"

    def __str__(self):
        return self.value


UNARY = frozenset([Operator.ADD, Operator.SUB, Operator.NOT, Operator.LNOT])

BINARY = frozenset(op for op in Operator if op not in (Operator.NOT, Operator.LNOT))

COMPARISON = frozenset([
    Operator.EQ, Operator.NE, Operator.GT, Operator.GE, Operator.LT, Operator.LE])

#: Operators whose result is always 0 or 1.
BOOLEAN = COMPARISON | {Operator.LAND, Operator.LOR, Operator.LNOT}

#: Binding strength of the binary operators (higher binds tighter).
PRECEDENCE = types.MappingProxyType({
    Operator.LOR: 1,
    Operator.LAND: 2,
    Operator.OR: 3,
    Operator.XOR: 4,
    Operator.AND: 5,
    Operator.EQ: 6, Operator.NE: 6,
    Operator.LT: 7, Operator.LE: 7, Operator.GT: 7, Operator.GE: 7,
    Operator.SHL: 8, Operator.SHR: 8,
    Operator.ADD: 9, Operator.SUB: 9,
    Operator.MUL: 10, Operator.DIV: 10,
})

#: Comparison obtained by negating a comparison.
INVERSE = types.MappingProxyType({
    Operator.EQ: Operator.NE, Operator.NE: Operator.EQ,
    Operator.LT: Operator.GE, Operator.GE: Operator.LT,
    Operator.GT: Operator.LE, Operator.LE: Operator.GT,
})


def _div(x, y):
    """Division truncating toward zero."""
    if y == 0:
        return None
    q = abs(x) // abs(y)
    return q if (x < 0) == (y < 0) else -q


def _shl(x, y):
    return None if y < 0 else x << y


def _shr(x, y):
    return None if y < 0 else x >> y


#: Integer semantics of the unary operators.
UNARY_SEMANTICS = types.MappingProxyType({
    Operator.ADD: lambda x: x,
    Operator.SUB: lambda x: -x,
    Operator.NOT: lambda x: ~x,
    Operator.LNOT: lambda x: int(x == 0),
})

#: Integer semantics of the binary operators.
#:
#: A function returns None when the operation is left unevaluated
#: (division by zero, shift by a negative count).
BINARY_SEMANTICS = types.MappingProxyType({
    Operator.ADD: lambda x, y: x + y,
    Operator.SUB: lambda x, y: x - y,
    Operator.MUL: lambda x, y: x * y,
    Operator.DIV: _div,
    Operator.SHR: _shr,
    Operator.SHL: _shl,
    Operator.AND: lambda x, y: x & y,
    Operator.OR: lambda x, y: x | y,
    Operator.XOR: lambda x, y: x ^ y,
    Operator.LOR: lambda x, y: int(x != 0 or y != 0),
    Operator.LAND: lambda x, y: int(x != 0 and y != 0),
    Operator.EQ: lambda x, y: int(x == y),
    Operator.NE: lambda x, y: int(x != y),
    Operator.GT: lambda x, y: int(x > y),
    Operator.GE: lambda x, y: int(x >= y),
    Operator.LT: lambda x, y: int(x < y),
    Operator.LE: lambda x, y: int(x <= y),
})


def evaluate(op, lhs, rhs):
    """Evaluate the operator with integer operands.

    *lhs* is None for unary operators. Return None if the operation
    cannot be evaluated.

        >>> from asmexpr.expression.operation import evaluate
        >>> evaluate("/", -7, 2)
        -3
        >>> evaluate("<", 1, 2)
        1
        >>> print(evaluate("/", 1, 0))
        None

    """
    op = Operator(op)
    if lhs is None:
        return UNARY_SEMANTICS[op](rhs)
    else:
        return BINARY_SEMANTICS[op](lhs, rhs)


def _operatorify(op):
    if isinstance(op, Operator):
        return op
    elif isinstance(op, core.Name):
        op = op.name
    elif not isinstance(op, str):
        msg = "cannot convert '{}' to an operator"
        raise TypeError(msg.format(type(op).__name__))

    try:
        return Operator(op)
    except ValueError:
        # placeholder operator, only meaningful in templates
        assert op
        return op


def _operand(value):
    value = core.operandify(value)
    if isinstance(value, core.Integer) and value.value < 0:
        return Expression(None, Operator.SUB, core.Integer(-value.value))
    return value


class Expression(core.Operand):
    """Represent an operator applied to one or two operands.

    An expression is made of an operator *op*, an optional left operand
    *lhs* (None for unary operators) and a right operand *rhs*.
    The constructor takes 1 to 3 positional arguments ``(lhs, op, rhs)``,
    where *lhs* defaults to None and *op* defaults to ``+``.
    Operands given as nested lists are expanded recursively with the same
    rule. No simplification is performed (see `reduce`).

        >>> from asmexpr.expression.operation import Expression
        >>> Expression("eax", "+", 4)
        eax + 4
        >>> Expression("-", "eax")
        -eax
        >>> Expression(-4).vrepr()
        "Expression(None, '-', Integer(4))"
        >>> Expression(["eax", "*", 2], "+", [1, "+", 1])
        eax * 2 + (1 + 1)

    Negative integers are never stored as such: they are canonicalized
    to the negation of their absolute value.

    An operator that is not a known spelling is kept as a *placeholder*.
    Placeholders are only meaningful in templates (see `match`) and are
    never reduced.
    """

    __slots__ = []

    def __new__(cls, *args):
        if len(args) == 1:
            value, = args
            if isinstance(value, Expression):
                return value
            elif isinstance(value, (list, tuple)):
                return cls(*value)
            value = core.operandify(value)
            if isinstance(value, core.Integer) and value.value < 0:
                lhs, op, rhs = None, Operator.SUB, core.Integer(-value.value)
            else:
                lhs, op, rhs = None, Operator.ADD, value
        elif len(args) == 2:
            lhs = None
            op, rhs = args
        elif len(args) == 3:
            lhs, op, rhs = args
        else:
            msg = "Expression takes 1 to 3 positional arguments ({} given)"
            raise TypeError(msg.format(len(args)))

        op = _operatorify(op)
        if lhs is not None:
            lhs = _operand(lhs)
        if rhs is None:
            raise ValueError("missing right operand")
        rhs = _operand(rhs)

        if isinstance(op, Operator):
            if lhs is None and op not in UNARY:
                raise ValueError("'{}' is not a unary operator".format(op))
            if lhs is not None and op not in BINARY:
                raise ValueError("'{}' is not a binary operator".format(op))

        return super().__new__(cls, lhs, op, rhs)

    @property
    def lhs(self):
        """The left operand (None for unary operators)."""
        return self.args[0]

    @property
    def op(self):
        """The operator."""
        return self.args[1]

    @property
    def rhs(self):
        """The right operand."""
        return self.args[2]

    @property
    def unary(self):
        """True if the operator is applied to a single operand."""
        return self.args[0] is None

    @property
    def boolean(self):
        """True if the expression always evaluates to 0 or 1."""
        return self.args[1] in BOOLEAN

    def match(self, template, *variables):
        """Match the expression against a template (see `matching.match`)."""
        from asmexpr.expression import matching
        return matching.match(self, template, variables)

    def bind_inplace(self, substitutions):
        """Substitute in place (see `binding.bind_inplace`)."""
        from asmexpr.expression import binding
        return binding.bind_inplace(self, substitutions)
