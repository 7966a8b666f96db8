"""Render generated modules from Jinja2 templates.

Both kinds of generated file are plain text assembled from already-rendered
validator expressions:

* ``schema_module.ts.j2`` -- one module per named schema: the ``zod``
  import, one import per referenced schema, the ``<Name>Validator``
  declaration and its inferred type.
* ``operation.ts.j2`` -- one module per operation: imports, the three
  validators, the ``method`` / ``path`` literals and the ``render`` function.

The templates live in ``generator/jinja/`` next to this module.
Autoescape is disabled: the output is source code, not HTML.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from rekku.compiler.expressions import string_literal, to_identifier, validator_symbol

TEMPLATE_DIR = Path(__file__).parent / "jinja"
"""Path to the Jinja2 template directory (``generator/jinja/``)."""

SCHEMA_IMPORT_ROOT = "@/schemas"
"""Import prefix of schema modules, mapped by the generated ``tsconfig.json``."""


@lru_cache(maxsize=1)
def _jinja_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def import_statement(name: str) -> str:
    """Return the import line that binds the validator of schema *name*.

    Example::

        import_statement("User")
        # 'import { UserValidator } from "@/schemas/User";'
    """
    module = string_literal(f"{SCHEMA_IMPORT_ROOT}/{name}")
    return f"import {{ {validator_symbol(name)} }} from {module};"


def render_schema_module(name: str, expression: str, imports: list[str]) -> str:
    """Render the module text for one named schema.

    Args:
        name: The schema name as declared in ``components.schemas``.
        expression: The compiled validator expression.
        imports: Names of the schemas to import, in emission order.

    Returns:
        The module source, ending with a newline.
    """
    template = _jinja_env().get_template("schema_module.ts.j2")
    return template.render(
        imports=[import_statement(n) for n in imports],
        symbol=validator_symbol(name),
        type_name=to_identifier(name),
        expression=expression,
    )


def render_operation_template(
    *,
    method: str,
    path: str,
    input_schema: str,
    query_schema: str,
    output_schema: str,
    imports: list[str],
    accepts_body: bool,
) -> str:
    """Render the module text for one operation.

    Args:
        method: Upper-case HTTP method.
        path: The URL path pattern, braces included.
        input_schema: Rendered request body validator.
        query_schema: Rendered query string validator.
        output_schema: Rendered success response validator.
        imports: Names of the schemas to import, in emission order.
        accepts_body: ``False`` when ``input_schema`` is ``z.never()``; the
            generated ``render`` then returns ``input: undefined`` instead of
            parsing the data bag.

    Returns:
        The module source, ending with a newline.
    """
    template = _jinja_env().get_template("operation.ts.j2")
    return template.render(
        imports=[import_statement(n) for n in imports],
        input_schema=input_schema,
        query_schema=query_schema,
        output_schema=output_schema,
        method=string_literal(method),
        path=string_literal(path),
        accepts_body=accepts_body,
    )
