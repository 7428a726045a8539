"""Parse symbolic expressions from text.

The grammar follows the C operator precedence (lowest to highest)::

    ||
    &&
    |
    ^
    &
    == !=
    < <= > >=
    << >>
    + -
    * /
    unary + - ~ !
    primary: integer, symbol, "label", ( expression )

The bitwise operators deliberately take the three C levels
(``|`` below ``^`` below ``&``) rather than a single shared level,
so ``a | b ^ c & d`` reads as ``a | (b ^ (c & d))``.
Binary operators of the same level associate left to right.
Integers are written in decimal, hexadecimal (``0x``) or binary
(``0b``). Blanks and tabs separate tokens and a newline ends the
expression.
"""
import logging
import re

from asmexpr.expression import core
from asmexpr.expression.operation import Expression, Operator, PRECEDENCE

logger = logging.getLogger(__name__)

_BLANKS = re.compile(r"[ \t]*")
_NUMBER = re.compile(r"0[xX](?P<hex>[0-9a-fA-F]+)|0[bB](?P<bin>[01]+)|(?P<dec>[0-9]+)")
_IDENTIFIER = re.compile(r"[A-Za-z_.][A-Za-z0-9_.]*")
_LABEL = re.compile(r"\"(?P<double>[^\"\n]+)\"|'(?P<single>[^'\n]+)'")
_BINARY = re.compile(r"\|\||&&|<<|>>|<=|>=|==|!=|[|^&<>+\-*/]")
_UNARY = re.compile(r"[+\-~!]")


class ExpressionParser(object):
    """Parse expressions from a text buffer.

    Args:
        text: the input buffer.
        pos: the position of the cursor in the buffer.

    Each call to `parse` reads one expression at the cursor and
    moves the cursor after it.

        >>> from asmexpr.expression.parsing import ExpressionParser
        >>> parser = ExpressionParser("mov eax, (ebx + 4) * 2", pos=9)
        >>> parser.parse()
        (ebx + 4) * 2
        >>> parser.pos
        22
        >>> print(ExpressionParser(", 4").parse())
        None

    """

    def __init__(self, text, pos=0):
        assert isinstance(text, str)
        assert 0 <= pos <= len(text)
        self.text = text
        self.pos = pos

    def _skip(self, pos):
        return _BLANKS.match(self.text, pos).end()

    def parse(self):
        """Parse the longest expression at the cursor.

        Return the expression and move the cursor after it, or return
        None and leave the cursor unchanged if no expression starts
        at the cursor. A trailing operator without right operand, or an
        unclosed parenthesis, is not consumed.
        """
        result = self._parse_binary(self.pos, min_level=1)
        if result is None:
            logger.debug("no expression at %d in %r", self.pos, self.text)
            return None

        expr, self.pos = result
        if not isinstance(expr, Expression):
            expr = Expression(None, Operator.ADD, expr)
        return expr

    def _parse_binary(self, pos, min_level):
        result = self._parse_unary(pos)
        if result is None:
            return None
        lhs, pos = result

        while True:
            m = _BINARY.match(self.text, self._skip(pos))
            if m is None:
                break
            op = Operator(m.group())
            level = PRECEDENCE[op]
            if level < min_level:
                break
            result = self._parse_binary(m.end(), level + 1)
            if result is None:
                # dangling operator
                break
            rhs, pos = result
            lhs = Expression(lhs, op, rhs)

        return lhs, pos

    def _parse_unary(self, pos):
        pos = self._skip(pos)
        m = _UNARY.match(self.text, pos)
        if m is None:
            return self._parse_primary(pos)

        result = self._parse_unary(m.end())
        if result is None:
            return None
        operand, pos = result
        return Expression(None, Operator(m.group()), operand), pos

    def _parse_primary(self, pos):
        text = self.text

        m = _NUMBER.match(text, pos)
        if m is not None:
            if m.group("hex"):
                value = int(m.group("hex"), 16)
            elif m.group("bin"):
                value = int(m.group("bin"), 2)
            else:
                value = int(m.group("dec"), 10)
            return core.Integer(value), m.end()

        m = _IDENTIFIER.match(text, pos)
        if m is not None:
            name = m.group()
            if name == core.Unknown.name:
                return core.Unknown, m.end()
            return core.Symbol(name), m.end()

        m = _LABEL.match(text, pos)
        if m is not None:
            name = m.group("double") or m.group("single")
            return core.Label(name), m.end()

        if text.startswith("(", pos):
            result = self._parse_binary(pos + 1, min_level=1)
            if result is None:
                return None
            expr, end = result
            end = self._skip(end)
            if not text.startswith(")", end):
                # unclosed parenthesis
                return None
            return expr, end + 1

        return None


def parse_string(text, pos=0):
    """Parse an expression without modifying any parser state.

        >>> from asmexpr.expression.parsing import parse_string
        >>> parse_string("eax + 4 +")
        eax + 4
        >>> parse_string("a || b && c == 0x10")
        a || b && c == 0x10
        >>> parse_string("'lbl'").vrepr()
        "Expression(None, '+', Label('lbl'))"

    """
    return ExpressionParser(text, pos).parse()
