"""Provide the operand types of symbolic expressions."""
from sympy import preorder_traversal, Basic, Atom


class Operand(Basic):
    """Represent the operands of symbolic expressions.

    Operands are integers, free variables (symbols and labels) and
    nested expressions.

    Operands support ``+`` and ``-`` with other operands or plain integers;
    the resulting `Expression` is reduced immediately (see `reduce`).

        >>> from asmexpr.expression.core import Integer, Symbol
        >>> Symbol("eax") + 4
        eax + 4
        >>> Symbol("eax") + 4 - Symbol("eax")
        4

    This class is not meant to be instantiated but to provide a base
    class for the different types of operands.

    Note that Operand inherits the methods of the SymPy class `Basic
    <http://docs.sympy.org/latest/modules/core.html#module-sympy.core.basic>`_;
    structural equality, hashing and `xreplace` work out of the box.

    .. Implementation details:

        Subclasses must implement the following methods:

        - __hash__() if eq is overridden.
        - _hashable_content() if new object attributes are defined.
    """

    __slots__ = []

    # Arithmetic coercion

    def __add__(self, other):
        """Override + operator."""
        from asmexpr.expression import operation
        return operation.Expression(self, "+", other).reduce()

    def __radd__(self, other):
        """Override reflected + operator."""
        from asmexpr.expression import operation
        return operation.Expression(other, "+", self).reduce()

    def __sub__(self, other):
        """Override - operator."""
        from asmexpr.expression import operation
        return operation.Expression(self, "-", other).reduce()

    def __rsub__(self, other):
        """Override reflected - operator."""
        from asmexpr.expression import operation
        return operation.Expression(other, "-", self).reduce()

    def __str__(self):
        """Return the non-verbose string representation."""
        from asmexpr.expression import printing
        return (printing.ExprStrPrinter()).doprint(self)

    __repr__ = __str__

    def vrepr(self):
        """Return a verbose string representation."""
        from asmexpr.expression import printing
        return (printing.ExprReprPrinter()).doprint(self)

    @property
    def complexity(self):
        """The number of operands (nodes and leaves) of the tree."""
        return sum(1 for node in preorder_traversal(self) if isinstance(node, Operand))

    def atoms(self, *types):
        """Returns the atoms that form the current object.

        Similar to SymPy atoms() method, but this method
        doesn't throw an exception when visiting the operator
        or a missing operand of an expression.
        """
        if types:
            types = tuple(
                [t if isinstance(t, type) else type(t) for t in types])
        nodes = [n for n in preorder_traversal(self) if isinstance(n, Operand)]
        if types:
            result = {node for node in nodes if isinstance(node, types)}
        else:
            result = {node for node in nodes if not node.args}
        return result

    def externals(self):
        """Return the free variables of the operand.

        The free variables (symbols and labels, `Unknown` included) are
        listed in left-to-right depth-first order, each one once at the
        position of its first appearance.

            >>> from asmexpr.expression.core import Label
            >>> from asmexpr.expression.operation import Expression
            >>> Expression(Expression("eax", "+", 42), "-", Label("bla")).externals()
            [eax, "bla"]

        """
        found = []
        for node in preorder_traversal(self):
            if isinstance(node, Name) and node not in found:
                found.append(node)
        return found

    def reduce(self, hook=None, **options):
        """Return the normal form of the operand (see `reduction.reduce`)."""
        from asmexpr.expression import reduction
        return reduction.reduce(self, hook, **options)

    def bind(self, substitutions):
        """Return a copy with the given substitutions (see `binding.bind`)."""
        from asmexpr.expression import binding
        return binding.bind(self, substitutions)


class Integer(Atom, Operand):
    """Represent integer operands.

    Integers have arbitrary precision, and compare equal to and hash
    like the Python `int` of the same value.

    Args:
        value: the integer value.

    ::

        >>> from asmexpr.expression.core import Integer
        >>> Integer(3)
        3
        >>> Integer(0x2a)
        0x2a
        >>> Integer(42) == 42
        True
        >>> Integer(42).vrepr()
        'Integer(42)'

    """

    def __int__(self):
        return self.value

    __index__ = __int__

    def __bool__(self):
        return self.value != 0

    def __hash__(self):
        # consistent with the equality to int
        return hash(self.value)

    def __eq__(self, other):
        """Override == operator."""
        if isinstance(other, int):
            return self.value == other
        elif isinstance(other, Integer):
            return self.value == other.value
        else:
            return False

    def __ne__(self, other):
        return not self == other

    def _hashable_content(self):
        """Return a tuple of information about self to compute its hash."""
        return self.value,

    __slots__ = ["_value"]

    def __new__(cls, value):
        assert isinstance(value, int) and not isinstance(value, bool)
        obj = Operand.__new__(cls)
        obj._value = value
        return obj

    @property
    def value(self):
        """The integer represented by the operand."""
        return self._value


class Name(Atom, Operand):
    """Represent named free variables.

    This class is not meant to be instantiated but to provide a base
    class for `Symbol` and `Label`. A name compares equal to (and
    hashes like) the Python `str` holding the same name, but a
    `Symbol` never equals a `Label`.
    """

    def __hash__(self):
        return hash(self.name)

    def __eq__(self, other):
        """Override == operator."""
        if isinstance(other, str):
            return self.name == other
        elif type(other) is type(self):
            return self.name == other.name
        else:
            return False

    def __ne__(self, other):
        return not self == other

    def _hashable_content(self):
        """Return a tuple of information about self to compute hash."""
        return self.name,

    __slots__ = ["_name"]

    def __new__(cls, name):
        assert isinstance(name, str) and name
        obj = Operand.__new__(cls)
        obj._name = name
        return obj

    @property
    def name(self):
        """The name of the variable."""
        return self._name


class Symbol(Name):
    """Represent runtime-variable quantities, such as registers.

    Args:
        name: the name of the symbol.

    ::

        >>> from asmexpr.expression.core import Symbol
        >>> Symbol("eax")
        eax
        >>> Symbol("eax").vrepr()
        "Symbol('eax')"

    """

    __slots__ = []


class Label(Name):
    """Represent fixed addressable quantities, such as linker symbols.

    Args:
        name: the name of the label.

    ::

        >>> from asmexpr.expression.core import Label
        >>> Label("_start")
        "_start"
        >>> Label("_start") == Symbol("_start")
        False

    """

    __slots__ = []


#: A value exists but cannot be statically determined.
Unknown = Symbol("unknown")


def operandify(value):
    """Convert the argument *value* to an operand.

        >>> from asmexpr.expression.core import operandify
        >>> print(operandify(0).vrepr())
        Integer(0)
        >>> print(operandify("eax").vrepr())
        Symbol('eax')
        >>> print(operandify([1, "+", "eax"]).vrepr())
        Expression(Integer(1), '+', Symbol('eax'))

    """
    if isinstance(value, Operand):
        return value
    elif isinstance(value, bool):
        return Integer(int(value))
    elif isinstance(value, int):
        return Integer(value)
    elif isinstance(value, str):
        return Symbol(value)
    elif isinstance(value, (list, tuple)):
        from asmexpr.expression import operation
        return operation.Expression(*value)
    else:
        msg = "cannot convert '{}' to an operand"
        raise TypeError(msg.format(type(value).__name__))
