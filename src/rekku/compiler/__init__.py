"""Schema compiler -- turn JSON Schema objects into zod validator expressions.

Typical usage::

    from rekku.compiler import ReferenceSet, compile_schema

    refs = ReferenceSet()
    expr = compile_schema({"type": "string", "format": "email"}, refs)
    str(expr)  # 'z.string().email()'

Sub-modules:

* :mod:`~rekku.compiler.expressions` -- The closed set of expression kinds
  and their rendering to zod source text.
* :mod:`~rekku.compiler.schema` -- The recursive compiler and
  :class:`~rekku.compiler.schema.ReferenceSet`.
"""

from rekku.compiler.expressions import Expression, validator_symbol
from rekku.compiler.schema import ReferenceSet, compile_schema, find_fallbacks

__all__ = [
    "Expression",
    "ReferenceSet",
    "compile_schema",
    "find_fallbacks",
    "validator_symbol",
]
