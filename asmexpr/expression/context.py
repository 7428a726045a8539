"""Provide context managers to modify the default behaviour."""
import contextlib


class StatefulContext(contextlib.AbstractContextManager):
    """Base class for context managers with history."""

    current_context = None

    def __init__(self, new_context):
        """Initialize the context."""
        self.new_context = new_context

    def __enter__(self):
        self.previous_context = type(self).current_context
        type(self).current_context = self.new_context

    def __exit__(self, *args):
        type(self).current_context = self.previous_context


class Simplification(StatefulContext):
    """Control the Simplification context.

    Control whether or not the reduction applies the simplification laws
    (identities, cancellation in additive chains, boolean rules).
    By default, simplification is enabled. When it is disabled,
    the reduction only evaluates the fully numeric sub-expressions.

        >>> from asmexpr.expression.operation import Expression
        >>> from asmexpr.expression.context import Simplification
        >>> expr = Expression(Expression("a", "+", 2), "-", Expression("a", "-", 1))
        >>> expr.reduce()
        3
        >>> with Simplification(False):
        ...     expr.reduce()
        a + 2 - (a - 1)
        >>> Expression(Expression(1, "+", 2), "*", "a").reduce()
        a * 3
        >>> with Simplification(False):
        ...     Expression(Expression(1, "+", 2), "*", "a").reduce()
        3 * a

    """

    current_context = True

    def __init__(self, new_context):
        """Initialize the context."""
        assert new_context in [True, False]
        super().__init__(new_context)


class RewriteHook(StatefulContext):
    """Control the RewriteHook context.

    Set the rewrite hook used by the reduction when no hook is passed
    explicitly (see `reduction.reduce`). By default, there is no hook.

        >>> from asmexpr.expression.core import Symbol
        >>> from asmexpr.expression.operation import Expression
        >>> from asmexpr.expression.context import RewriteHook
        >>> registers = {Symbol("ebx"): 0x10}
        >>> with RewriteHook(registers.get):
        ...     Expression("ebx", "*", 2).reduce()
        0x20
        >>> Expression("ebx", "*", 2).reduce()
        ebx * 2

    """

    current_context = None

    def __init__(self, new_context):
        """Initialize the context."""
        assert new_context is None or callable(new_context)
        super().__init__(new_context)
