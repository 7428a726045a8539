"""Encode and decode the immediate operands of machine instructions.

An immediate is encoded as a fixed-size integer type with a given
endianness. An expression that cannot be evaluated at assembly time
(for example, one depending on a label) is encoded as a `Relocation`,
to be resolved when the values of its free variables are known.

    >>> from asmexpr.expression.codec import encode
    >>> from asmexpr.expression.operation import Expression
    >>> encode(Expression(40, "+", 2), "u16", "big")
    b'\\x00*'
    >>> reloc = encode(Expression("_start", "+", 4), "u32", "little")
    >>> reloc.expression
    _start + 4
    >>> reloc.placeholder
    b'\\x00\\x00\\x00\\x00'
    >>> reloc.bind({"_start": 0x1000})
    b'\\x04\\x10\\x00\\x00'

"""
import collections
import enum
import logging

import bidict

from asmexpr.expression import binding
from asmexpr.expression import core
from asmexpr.expression import reduction
from asmexpr.expression.operation import Expression, Operator

logger = logging.getLogger(__name__)


class EncodeError(Exception):
    """The exception raised when a value cannot be encoded."""
    pass


class ImmediateOverflowError(EncodeError, OverflowError):
    """The exception raised when a value does not fit in its integer type.

    Attributes:
        value: the integer value
        int_type: the `IntType` of the immediate
        backtrace: the diagnostic trail given to the encoder (or None)
    """

    def __init__(self, value, int_type, backtrace=None):
        self.value = value
        self.int_type = int_type
        self.backtrace = backtrace
        msg = "{} does not fit in {} (range [{}, {}])".format(
            value, int_type.name, int_type.min, int_type.max)
        if backtrace:
            msg += "\n" + format_backtrace(backtrace)
        super().__init__(msg)


class Signedness(enum.Enum):
    """Represent the interpretation of the bits of an integer type.

    An integer type with ``ANY`` signedness accepts the values of both
    the signed and the unsigned type of the same width, and decodes
    as unsigned.
    """

    UNSIGNED = "u"
    SIGNED = "i"
    ANY = "a"


class Endianness(enum.Enum):
    """Represent the byte order of an encoded integer."""

    LITTLE = "little"
    BIG = "big"


class IntType(collections.namedtuple("IntType", ["width", "signedness"])):
    """Represent fixed-size integer types.

        >>> from asmexpr.expression.codec import IntType, Signedness
        >>> i16 = IntType(16, Signedness.SIGNED)
        >>> i16.name, i16.size, i16.min, i16.max
        ('i16', 2, -32768, 32767)
        >>> IntType(8, Signedness.ANY).min, IntType(8, Signedness.ANY).max
        (-128, 255)

    """

    __slots__ = ()

    def __new__(cls, width, signedness):
        assert isinstance(width, int) and width > 0 and width % 8 == 0
        return super().__new__(cls, width, Signedness(signedness))

    def __str__(self):
        return self.name

    @property
    def name(self):
        """The name of the type (e.g. ``u8`` or ``i32``)."""
        name = INT_TYPES.inverse.get(self)
        if name is None:
            name = "{}{}".format(self.signedness.value, self.width)
        return name

    @property
    def size(self):
        """The number of bytes of the encoded values."""
        return self.width // 8

    @property
    def min(self):
        """The minimum value of the type."""
        if self.signedness == Signedness.UNSIGNED:
            return 0
        else:
            return -(1 << (self.width - 1))

    @property
    def max(self):
        """The maximum value of the type."""
        if self.signedness == Signedness.SIGNED:
            return (1 << (self.width - 1)) - 1
        else:
            return (1 << self.width) - 1


#: The named integer types (``u8``, ``i8``, ``a8``, ..., ``a128``).
INT_TYPES = bidict.frozenbidict(
    ("{}{}".format(s.value, width), IntType(width, s))
    for width in (8, 16, 32, 64, 128) for s in Signedness
)


def typify(int_type):
    """Convert the argument to an `IntType`.

    The argument can be an `IntType`, the name of a type in `INT_TYPES`
    or a number of bytes (the type of that size with ``ANY`` signedness).

        >>> from asmexpr.expression.codec import typify
        >>> typify("u8").max
        255
        >>> typify(2).name
        'a16'

    """
    if isinstance(int_type, IntType):
        return int_type
    elif isinstance(int_type, str):
        try:
            return INT_TYPES[int_type]
        except KeyError:
            raise ValueError("unknown integer type '{}'".format(int_type)) from None
    elif isinstance(int_type, int) and not isinstance(int_type, bool):
        if int_type <= 0:
            raise ValueError("invalid integer type size {}".format(int_type))
        return IntType(8 * int_type, Signedness.ANY)
    else:
        msg = "cannot convert '{}' to an integer type"
        raise TypeError(msg.format(type(int_type).__name__))


def _concrete(value):
    """Return the integer value of the argument, or None if it is symbolic."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    value = core.operandify(value)
    if not isinstance(value, core.Integer):
        value = reduction.reduce(value)
    if isinstance(value, core.Integer):
        return value.value
    return None


def format_backtrace(backtrace):
    """Return the textual representation of a diagnostic trail.

    A backtrace is either a string or a sequence of entries
    (outermost first), one entry per line.

        >>> from asmexpr.expression.codec import format_backtrace
        >>> print(format_backtrace(["main.s:3", "macro.inc:10"]))
          in main.s:3
          in macro.inc:10

    """
    if not backtrace:
        return ""
    elif isinstance(backtrace, str):
        return backtrace
    else:
        return "\n".join("  in {}".format(entry) for entry in backtrace)


def make_signed(value, width):
    """Reinterpret the *width* low bits of the value as signed.

    If the value is symbolic, return the (reduced) expression
    ``(value ^ 2**(width-1)) - 2**(width-1)``.

        >>> from asmexpr.expression.codec import make_signed
        >>> make_signed(0xFFFF, 16), make_signed(1, 16), make_signed(0x1FF, 8)
        (-1, 1, -1)
        >>> make_signed("ax", 16)
        (ax ^ 0x8000) - 0x8000

    """
    assert isinstance(width, int) and width > 0
    sign_bit = 1 << (width - 1)

    concrete = _concrete(value)
    if concrete is None:
        expr = Expression(Expression(value, Operator.XOR, sign_bit), Operator.SUB, sign_bit)
        return reduction.reduce(expr)

    concrete &= (1 << width) - 1
    return concrete - (1 << width) if concrete & sign_bit else concrete


def in_range(value, int_type):
    """Check whether the value fits in the integer type.

    Return True or False, or None if the value is symbolic.

        >>> from asmexpr.expression.codec import in_range
        >>> from asmexpr.expression.core import Label
        >>> in_range(42, "i8"), in_range(128, "i8"), in_range(-128, "i8")
        (True, False, True)
        >>> print(in_range(Label("foo"), "u32"))
        None

    """
    int_type = typify(int_type)
    concrete = _concrete(value)
    if concrete is None:
        return None
    return int_type.min <= concrete <= int_type.max


def encode_imm(value, int_type, endianness, backtrace=None):
    """Encode an integer value.

    Raise `ImmediateOverflowError` if the value does not fit in the
    integer type, and `EncodeError` if the value is symbolic.

        >>> from asmexpr.expression.codec import encode_imm
        >>> encode_imm(42, "u8", "little")
        b'*'
        >>> encode_imm(-2, "i16", "big")
        b'\\xff\\xfe'
        >>> encode_imm(256, "u8", "little")
        Traceback (most recent call last):
        ...
        asmexpr.expression.codec.ImmediateOverflowError: 256 does not fit in u8 (range [0, 255])

    """
    int_type = typify(int_type)
    endianness = Endianness(endianness)

    concrete = _concrete(value)
    if concrete is None:
        msg = "cannot encode the symbolic value {}".format(value)
        if backtrace:
            msg += "\n" + format_backtrace(backtrace)
        raise EncodeError(msg)

    if not int_type.min <= concrete <= int_type.max:
        raise ImmediateOverflowError(concrete, int_type, backtrace)

    return concrete.to_bytes(int_type.size, endianness.value, signed=concrete < 0)


def decode_imm(data, int_type, endianness, offset=0):
    """Decode an integer value from the bytes at the given offset.

    Raise ValueError if there are not enough bytes.

        >>> from asmexpr.expression.codec import decode_imm
        >>> decode_imm([0x62, 0x6C, 0x61, 0xFE, 0xFF], "i16", "little", offset=3)
        -2
        >>> decode_imm(b"\\xfe\\xff", "u16", "little")
        65534

    """
    int_type = typify(int_type)
    endianness = Endianness(endianness)

    data = bytes(data)
    if offset < 0 or offset + int_type.size > len(data):
        msg = "truncated data: {} needs {} bytes at offset {}, got {}"
        raise ValueError(msg.format(int_type.name, int_type.size, offset, len(data)))

    chunk = data[offset:offset + int_type.size]
    signed = int_type.signedness == Signedness.SIGNED
    return int.from_bytes(chunk, endianness.value, signed=signed)


class Relocation(collections.namedtuple(
        "Relocation", ["expression", "int_type", "endianness", "backtrace"])):
    """Represent an immediate that cannot be encoded yet.

    Attributes:
        expression: the reduced expression of the immediate
        int_type: the `IntType` of the immediate
        endianness: the `Endianness` of the immediate
        backtrace: the diagnostic trail given to the encoder (or None)
    """

    __slots__ = ()

    @property
    def placeholder(self):
        """The bytes emitted in place of the immediate (zeros)."""
        return bytes(self.int_type.size)

    def bind(self, substitutions):
        """Bind the expression and encode it again.

        Return the encoded bytes or a new relocation if the bound
        expression is still symbolic.
        """
        expr = binding.bind(self.expression, substitutions)
        return encode(expr, self.int_type, self.endianness, self.backtrace)


def encode(expr, int_type, endianness, backtrace=None):
    """Encode an expression as an immediate.

    The expression is reduced first. Return the encoded bytes if
    the expression evaluates to an integer, and a `Relocation`
    otherwise. Raise `ImmediateOverflowError` as `encode_imm`.
    """
    int_type = typify(int_type)
    endianness = Endianness(endianness)

    reduced = reduction.reduce(expr)
    if isinstance(reduced, core.Integer):
        return encode_imm(reduced.value, int_type, endianness, backtrace)

    logger.debug("relocation %s of type %s", reduced, int_type.name)
    return Relocation(reduced, int_type, endianness, backtrace)
