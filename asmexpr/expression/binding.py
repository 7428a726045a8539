"""Substitute sub-expressions of symbolic expressions."""
from asmexpr.expression import core
from asmexpr.expression.operation import Expression, Operator


def _key(value):
    value = core.operandify(value)
    if isinstance(value, core.Integer) and value.value < 0:
        # same form as the negative literals stored in expressions
        return Expression(None, Operator.SUB, core.Integer(-value.value))
    return value


def _rule(substitutions):
    return {_key(k): core.operandify(v) for k, v in substitutions.items()}


def bind(expr, substitutions):
    """Return a copy of the expression with the given substitutions.

    Keys and values of *substitutions* are converted to operands
    (strings are symbols). A sub-expression is replaced only if it is
    structurally equal to a key, the whole expression included.
    The argument is not modified, and the result is not reduced.

        >>> from asmexpr.expression.operation import Expression
        >>> from asmexpr.expression.binding import bind
        >>> expr = Expression("val", "+", "stuff")
        >>> bind(expr, {"val": 4, "stuff": 8})
        4 + 8
        >>> bind(expr, {"val": 4, "stuff": 8}).reduce()
        12
        >>> bind(expr, {expr: "eax"})
        eax
        >>> expr
        val + stuff

    """
    expr = core.operandify(expr)
    return expr.xreplace(_rule(substitutions))


def _fresh(value):
    """Return a copy of the value that shares no node with it."""
    if isinstance(value, Expression):
        lhs, op, rhs = value.args
        return Expression(None if lhs is None else _fresh(lhs), op, _fresh(rhs))
    return value


def _check_exclusive(expr):
    seen = set()
    stack = [expr]
    while stack:
        node = stack.pop()
        if not isinstance(node, Expression):
            continue
        if id(node) in seen:
            msg = "sub-expression {} is reachable more than once"
            raise ValueError(msg.format(node))
        seen.add(id(node))
        stack.extend(arg for arg in node.args if arg is not None)


def _bind_inplace(node, rule):
    new_args = []
    for arg in node.args:
        if isinstance(arg, core.Operand) and arg in rule:
            new_args.append(_fresh(rule[arg]))
        else:
            if isinstance(arg, Expression):
                _bind_inplace(arg, rule)
            new_args.append(arg)

    lhs, op, rhs = new_args
    node._args = (
        None if lhs is None else _key(lhs),
        op,
        _key(rhs),
    )
    # the cached hash depends on the arguments
    node._mhash = None


def bind_inplace(expr, substitutions):
    """Substitute in place the sub-expressions of the expression.

    Same as `bind`, but the nodes of *expr* are modified
    and *expr* is returned (or the replacement of *expr* if
    *expr* itself is a key of *substitutions*).

    The expression must own its nodes exclusively: a ValueError is
    raised, before any modification, if the same node is reachable
    more than once. A node shared with another expression is modified
    in both. Each substituted value is inserted as a fresh copy, so the
    result owns its nodes and can be bound in place again.

        >>> from asmexpr.expression.operation import Expression
        >>> from asmexpr.expression.binding import bind_inplace
        >>> expr = Expression(Expression("a", "*", 2), "+", "b")
        >>> bind_inplace(expr, {"a": 3}) is expr
        True
        >>> expr
        3 * 2 + b

    """
    expr = core.operandify(expr)
    rule = _rule(substitutions)
    _check_exclusive(expr)

    if expr in rule:
        return _fresh(rule[expr])
    elif isinstance(expr, Expression):
        _bind_inplace(expr, rule)
    return expr
