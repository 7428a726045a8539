"""Match expressions against templates."""
from asmexpr.expression import core
from asmexpr.expression.operation import Expression, Operator


def _names(variables):
    names = set()
    for var in variables:
        if isinstance(var, core.Name):
            names.add(var.name)
        elif isinstance(var, str):
            names.add(var)
        elif isinstance(var, (set, frozenset, list, tuple)):
            names.update(_names(var))
        else:
            msg = "invalid template variable '{}'"
            raise TypeError(msg.format(var))
    return names


def _assign(bindings, name, value):
    if name in bindings:
        return bindings[name] == value
    bindings[name] = value
    return True


def _unify(expr, template, names, bindings):
    if isinstance(template, core.Name) and template.name in names:
        return _assign(bindings, template.name, expr)

    if not isinstance(template, Expression):
        # constant or free variable not declared in the template
        return template == expr
    elif not isinstance(expr, Expression):
        return False

    t_lhs, t_op, t_rhs = template.args
    lhs, op, rhs = expr.args

    if not isinstance(t_op, Operator) and t_op in names:
        if not _assign(bindings, t_op, op):
            return False
    elif t_op != op:
        return False

    if (t_lhs is None) != (lhs is None):
        return False
    elif t_lhs is not None and not _unify(lhs, t_lhs, names, bindings):
        return False

    return _unify(rhs, t_rhs, names, bindings)


def match(expr, template, variables):
    """Match an expression against a template.

    A template is an expression whose leaves (symbols or labels) and
    placeholder operators named in *variables* are pattern variables.
    A variable matches any operand (any operator in the operator
    position), but every occurrence of the same variable must match
    equal values. Other template leaves and operators must be equal
    to the corresponding part of *expr*.

    Return a dictionary mapping each variable used to its value,
    or None if the expression does not match.

        >>> from asmexpr.expression.operation import Expression
        >>> from asmexpr.expression.matching import match
        >>> match(Expression(1, "+", 2), Expression("var", "+", 2), {"var"})
        {'var': 1}
        >>> print(match(Expression(1, "+", 2), Expression("var", "+", "var"), {"var"}))
        None
        >>> sorted(match(Expression(1, "+", 1), Expression("var", "op", "var"), {"var", "op"}).items())
        [('op', <Operator.ADD: '+'>), ('var', 1)]

    """
    expr = core.operandify(expr)
    template = core.operandify(template)
    names = _names(variables)

    bindings = {}
    if _unify(expr, template, names, bindings):
        return bindings
    return None
