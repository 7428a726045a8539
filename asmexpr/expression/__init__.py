"""Manipulate assembler expressions.

This module manipulates the arithmetic expressions found in the operands
of assembly instructions and directives, in a numeric and symbolic way.
Expressions are parsed from text, reduced to a normal form, matched
against templates, bound to values and finally encoded as immediates
(or relocations when they still depend on unresolved names).

The syntax and semantics of the operators follow the C language on
arbitrary-precision integers.

"""
