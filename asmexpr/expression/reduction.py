"""Reduce symbolic expressions to a normal form.

The reduction is a bottom-up (post-order) pass that returns either an
`Integer`, when the whole expression evaluates to a number, or a
simplified `Expression`. The reduction never fails: sub-expressions
that cannot be simplified are returned unchanged.

Besides evaluating the numeric sub-expressions, the reduction applies
the identity and absorption laws, cancels opposite terms of additive
chains and applies a bounded set of boolean simplifications.
It is not a general algebraic simplifier.

    >>> from asmexpr.expression.core import Unknown
    >>> from asmexpr.expression.operation import Expression
    >>> from asmexpr.expression.reduction import reduce
    >>> reduce(Expression("a", "+", Expression("b", "-", "a")))
    b
    >>> reduce(Expression(Expression("eax", "+", 8), "-", 12))
    eax - 4
    >>> reduce(Expression(Unknown, "*", 0))
    0
    >>> reduce(Expression(Unknown, "+", 0))
    unknown

"""
import functools
import logging

from asmexpr.expression import context
from asmexpr.expression import core
from asmexpr.expression.operation import (
    Expression, Operator, BINARY_SEMANTICS, COMPARISON, INVERSE, evaluate
)

logger = logging.getLogger(__name__)

#: Default number of substitutions a rewrite hook can perform in a reduction.
MAX_REWRITES = 1000

# rule applications at a single node before giving up
_MAX_STEPS = 64

_ASSOCIATIVE = {
    # operator: (identity, absorbing element)
    Operator.MUL: (1, 0),
    Operator.AND: (-1, 0),
    Operator.OR: (0, -1),
    Operator.XOR: (0, None),
}


def _constant(operand):
    """Return the value of a numeric operand, or None."""
    if isinstance(operand, core.Integer):
        return operand.value
    elif (isinstance(operand, Expression) and operand.unary and
            operand.op == Operator.SUB and isinstance(operand.rhs, core.Integer)):
        # canonical negative literal
        return -operand.rhs.value
    else:
        return None


def _is_unknown(operand):
    return isinstance(operand, core.Symbol) and operand == core.Unknown


def _is_additive(operand):
    return isinstance(operand, Expression) and operand.op in (Operator.ADD, Operator.SUB)


def _contains_unknown(operand):
    stack = [operand]
    while stack:
        node = stack.pop()
        if _is_unknown(node):
            return True
        elif isinstance(node, Expression):
            stack.extend(arg for arg in (node.rhs, node.lhs) if arg is not None)
    return False


def _flatten_additive(operand, sign, terms):
    """Append the signed terms of an additive chain and return its constant."""
    constant = 0
    stack = [(sign, operand)]
    while stack:
        sign, operand = stack.pop()
        value = _constant(operand)
        if value is not None:
            constant += sign * value
        elif _is_additive(operand):
            lhs, op, rhs = operand.args
            stack.append((-sign if op == Operator.SUB else sign, rhs))
            if lhs is not None:
                stack.append((sign, lhs))
        else:
            terms.append((sign, operand))
    return constant


def _build_additive(terms, constant):
    """Rebuild an additive chain, the first positive term first."""
    if terms and terms[0][0] < 0:
        for i, (sign, _) in enumerate(terms):
            if sign > 0:
                terms.insert(0, terms.pop(i))
                break

    result = None
    for sign, term in terms:
        if result is None:
            result = term if sign > 0 else Expression(None, Operator.SUB, term)
        else:
            result = Expression(result, Operator.ADD if sign > 0 else Operator.SUB, term)

    if result is None:
        return core.Integer(constant)
    elif constant > 0:
        return Expression(result, Operator.ADD, constant)
    elif constant < 0:
        return Expression(result, Operator.SUB, -constant)
    else:
        return result


def _flatten_associative(operand, op, terms, constants):
    stack = [operand]
    while stack:
        operand = stack.pop()
        value = _constant(operand)
        if value is not None:
            constants.append(value)
        elif isinstance(operand, Expression) and operand.op == op and not operand.unary:
            stack.append(operand.rhs)
            stack.append(operand.lhs)
        else:
            terms.append(operand)


class Reducer(object):
    """Reduce operands with the given rewrite hook.

    Args:
        hook: a callable invoked once per visited node (or None).
        max_rewrites: the number of substitutions the hook can perform.
        simplify: whether or not the simplification laws are applied.

    A reducer keeps the remaining rewrite budget, so a new reducer
    should be used for each reduction.
    """

    def __init__(self, hook=None, max_rewrites=MAX_REWRITES, simplify=True):
        assert hook is None or callable(hook)
        assert isinstance(max_rewrites, int) and max_rewrites >= 0
        self.hook = hook
        self.max_rewrites = max_rewrites
        self.rewrites_left = max_rewrites
        self.simplify = simplify

    def visit(self, node):
        """Reduce the node and its sub-expressions (post-order).

        The tree is traversed with an explicit stack, so the depth of
        the tree and the number of hook substitutions are not bounded
        by the Python recursion limit. The inner nodes of an additive
        chain are not rewritten on their own: the whole chain is
        flattened once, at its root.
        """
        reduced = []
        # (node, children already reduced, parent is an additive chain)
        stack = [(node, False, False)]
        while stack:
            node, ready, chained = stack.pop()

            if isinstance(node, Expression) and not ready:
                stack.append((node, True, chained))
                in_chain = self.simplify and _is_additive(node)
                stack.append((node.rhs, False, in_chain))
                if node.lhs is not None:
                    stack.append((node.lhs, False, in_chain))
                continue

            if isinstance(node, Expression):
                lhs, op, rhs = node.args
                new_rhs = reduced.pop()
                new_lhs = None if lhs is None else reduced.pop()
                if new_lhs is not lhs or new_rhs is not rhs:
                    node = Expression(new_lhs, op, new_rhs)

            replacement = self._replacement(node)
            if replacement is not None:
                stack.append((replacement, False, chained))
            elif chained and _is_additive(node):
                reduced.append(node)
            else:
                reduced.append(self.rewrite(node))

        return reduced.pop()

    def _replacement(self, node):
        """Return the hook's substitute for the node, or None."""
        if self.hook is None or self.rewrites_left == 0:
            return None

        replacement = self.hook(node)
        if replacement is None:
            return None
        replacement = core.operandify(replacement)
        if replacement == node:
            return None

        self.rewrites_left -= 1
        if self.rewrites_left == 0:
            logger.warning(
                "rewrite budget of %d exhausted, the hook is no longer applied",
                self.max_rewrites)
        return replacement

    def rewrite(self, node):
        """Apply the default rules at the node until a fixed point."""
        for _ in range(_MAX_STEPS):
            if not isinstance(node, Expression) or not isinstance(node.op, Operator):
                return node
            new_node = self._rewrite_step(node)
            if new_node == node:
                return node
            node = new_node

        logger.warning("no fixed point reached for %s", node)
        return node

    def _rewrite_step(self, node):
        lhs, op, rhs = node.args
        x, y = _constant(lhs), _constant(rhs)

        if y is not None and (lhs is None or x is not None):
            value = evaluate(op, x, y)
            return node if value is None else core.Integer(value)

        if lhs is None and op == Operator.ADD:
            return rhs

        if not self.simplify:
            return node
        elif lhs is None:
            return self._unary(node, op, rhs)
        else:
            return self._binary(node, op, lhs, rhs, x, y)

    def _unary(self, node, op, x):
        if _is_unknown(x):
            return core.Unknown
        elif op == Operator.SUB:
            return self._additive(node)
        elif op == Operator.NOT:
            if isinstance(x, Expression) and x.unary and x.op == Operator.NOT:
                return x.rhs
        elif op == Operator.LNOT:
            # !!x is not x
            if isinstance(x, Expression) and not x.unary and x.op in INVERSE:
                return Expression(x.lhs, INVERSE[x.op], x.rhs)
        return node

    def _binary(self, node, op, lhs, rhs, x, y):
        # annihilators take precedence over Unknown absorption
        if op in (Operator.MUL, Operator.AND, Operator.LAND) and 0 in (x, y):
            return core.Integer(0)
        elif op == Operator.OR and -1 in (x, y):
            return core.Integer(-1)
        elif op in (Operator.SHL, Operator.SHR) and x == 0:
            return core.Integer(0)
        elif op == Operator.LOR and any(c is not None and c != 0 for c in (x, y)):
            return core.Integer(1)

        if _is_unknown(lhs) or _is_unknown(rhs):
            return core.Unknown

        if op in (Operator.ADD, Operator.SUB):
            return self._additive(node)
        elif op in _ASSOCIATIVE:
            return self._associative(node, op)
        elif op in (Operator.SHL, Operator.SHR):
            return self._shift(node, op, lhs, y)
        elif op == Operator.DIV:
            return lhs if y == 1 else node
        elif op in COMPARISON:
            return self._comparison(node, op, lhs, rhs, y)
        elif op in (Operator.LAND, Operator.LOR):
            # remaining constants are neutral: nonzero for &&, zero for ||
            if x is not None:
                return Expression(rhs, Operator.NE, 0)
            elif y is not None:
                return Expression(lhs, Operator.NE, 0)
        return node

    def _additive(self, node):
        terms = []
        constant = _flatten_additive(node, 1, terms)

        if any(_is_unknown(term) for _, term in terms):
            return core.Unknown

        kept = []
        for sign, term in terms:
            for i, (other_sign, other) in enumerate(kept):
                if other_sign == -sign and other == term and not _contains_unknown(term):
                    del kept[i]
                    break
            else:
                kept.append((sign, term))

        return _build_additive(kept, constant)

    def _associative(self, node, op):
        identity, absorbing = _ASSOCIATIVE[op]
        terms, constants = [], []
        _flatten_associative(node, op, terms, constants)

        if constants:
            constant = functools.reduce(BINARY_SEMANTICS[op], constants)
            if constant == absorbing:
                return core.Integer(constant)
            elif constant == identity:
                constant = None
        else:
            constant = None

        if any(_is_unknown(term) for term in terms):
            return core.Unknown

        kept = []
        for term in terms:
            if op != Operator.MUL and term in kept and not _contains_unknown(term):
                if op == Operator.XOR:
                    # x ^ x == 0
                    kept.remove(term)
                # x & x == x | x == x
            else:
                kept.append(term)

        result = None
        for term in kept:
            result = term if result is None else Expression(result, op, term)

        if constant is not None:
            return core.Integer(constant) if result is None else Expression(result, op, constant)
        elif result is None:
            return core.Integer(identity)
        else:
            return result

    def _shift(self, node, op, lhs, y):
        if y == 0:
            return lhs
        elif (y is not None and y > 0 and isinstance(lhs, Expression) and
                lhs.op == op and not lhs.unary):
            # (x << a) << b == x << (a + b)
            inner = _constant(lhs.rhs)
            if inner is not None and inner >= 0:
                return Expression(lhs.lhs, op, inner + y)
        return node

    def _comparison(self, node, op, lhs, rhs, y):
        if lhs == rhs and not _contains_unknown(lhs):
            return core.Integer(int(op in (Operator.EQ, Operator.LE, Operator.GE)))
        elif op == Operator.NE and y == 0 and isinstance(lhs, Expression) and lhs.boolean:
            return lhs
        return node


def reduce(expr, hook=None, max_rewrites=MAX_REWRITES):
    """Return the normal form of the given expression.

    The result is an `Integer` if the expression evaluates to a number,
    and an `Expression` otherwise (a single free variable ``x`` is
    returned as the expression ``+x``).

    Args:
        expr: an operand (or any value accepted by `operandify`).
        hook: a callable invoked once per visited node, after the node's
            children have been reduced and before the default rules are
            applied at the node (leaves are visited too). If it returns
            None (or the node itself) the default rules apply; otherwise
            the returned value replaces the node and is reduced again,
            hook included. The inner nodes of an additive chain are
            passed to the hook unreduced, since the chain is reduced as
            a whole at its root. If None, the hook of the `RewriteHook`
            context is used.
        max_rewrites: the number of substitutions the hook can perform.
            Once exhausted, the hook is no longer invoked and the
            reduction terminates with the default rules only.

    ::

        >>> from asmexpr.expression.core import Symbol
        >>> from asmexpr.expression.operation import Expression
        >>> from asmexpr.expression.reduction import reduce
        >>> expr = Expression(Expression("val", "+", "stuff"), "*", 2)
        >>> reduce(expr)
        (val + stuff) * 2
        >>> reduce(expr, hook={Symbol("val"): 4, Symbol("stuff"): 8}.get)
        0x18

    """
    expr = core.operandify(expr)
    if hook is None:
        hook = context.RewriteHook.current_context

    reducer = Reducer(hook, max_rewrites, context.Simplification.current_context)
    result = reducer.visit(expr)

    if isinstance(result, core.Name):
        result = Expression(None, Operator.ADD, result)
    return result
