"""Operation template generator.

Turns every :class:`~rekku.models.Operation` of a parsed document into a
:class:`~rekku.models.Template`: three validator expressions (request body,
query string, success response), the import block for the named schemas
they reference, and the rendered module text.

Selection rules:

* **Input** -- no request body means ``z.never()``. Otherwise the
  ``application/json`` media type is preferred, then the first declared one.
* **Query** -- only ``in: query`` parameters; none gives ``z.object({})``.
  A parameter is optional unless marked ``required``.
* **Output** -- the first of ``200``, ``201``, ``202``; failing those, the
  first response whose description mentions "success". No match, or a match
  without content, gives ``z.never()``.

Generation is pure: no I/O, no exceptions for malformed schemas (they fall
back to ``z.any()`` and are listed in :attr:`Template.warnings`).
"""

from __future__ import annotations

import re
from typing import Optional

from rekku.compiler import ReferenceSet, compile_schema, find_fallbacks
from rekku.compiler.expressions import (
    EMPTY_OBJECT,
    NEVER,
    Expression,
    NeverExpr,
    ObjectExpr,
    ObjectField,
)
from rekku.generator.render import render_operation_template
from rekku.models import HTTPMethod, Operation, ParsedDocument, Response, Template
from rekku.parser.extractor import select_media

SUCCESS_STATUS_CODES = ("200", "201", "202")
"""Response codes checked, in order, before falling back to description text."""

_REPEATED_SLASHES = re.compile(r"/+")


def generate_templates(
    document: ParsedDocument, named_schemas: dict[str, str]
) -> list[Template]:
    """Generate one template per operation, in document order.

    Args:
        document: The parsed document.
        named_schemas: Registry of named schema name -> validator symbol, as
            returned by :func:`~rekku.generator.schemas.register_named_schemas`.

    Returns:
        The templates, in path then method declaration order.
    """
    return [generate_template(op, named_schemas) for op in document.operations]


def generate_template(operation: Operation, named_schemas: dict[str, str]) -> Template:
    """Generate the :class:`~rekku.models.Template` of a single operation.

    The three validators share one :class:`~rekku.compiler.schema.ReferenceSet`
    so the import block lists each schema once, in the order input, query,
    output first touched it.
    """
    refs = ReferenceSet()
    input_expr = compile_input_schema(operation, refs)
    query_expr = compile_query_schema(operation, refs)
    output_expr = compile_output_schema(operation, refs)

    label = f"{operation.method.value} {operation.path}"
    warnings = [
        f"{label}: {reason}"
        for expr in (input_expr, query_expr, output_expr)
        for reason in find_fallbacks(expr)
    ]
    imports: list[str] = []
    for name in refs:
        if name in named_schemas:
            imports.append(name)
        else:
            warnings.append(f"{label}: reference to undefined schema '{name}'")

    input_schema = input_expr.render()
    query_schema = query_expr.render()
    output_schema = output_expr.render()

    return Template(
        file_path=template_file_path(operation.path, operation.method),
        method=operation.method,
        path=operation.path,
        input_schema=input_schema,
        query_schema=query_schema,
        output_schema=output_schema,
        imports=imports,
        content=render_operation_template(
            method=operation.method.value,
            path=operation.path,
            input_schema=input_schema,
            query_schema=query_schema,
            output_schema=output_schema,
            imports=imports,
            accepts_body=not isinstance(input_expr, NeverExpr),
        ),
        warnings=warnings,
    )


def template_file_path(path: str, method: HTTPMethod) -> str:
    """Derive the extension-less template path for *path* and *method*.

    Leading and trailing slashes are stripped and repeated slashes collapse.
    Path parameter braces are kept as directory names.

    Example::

        template_file_path("/users/{user_id}/profile", HTTPMethod.GET)
        # 'users/{user_id}/profile/get'
        template_file_path("/", HTTPMethod.GET)
        # 'root/get'
    """
    cleaned = _REPEATED_SLASHES.sub("/", path).strip("/") or "root"
    return f"{cleaned}/{method.value.lower()}"


def compile_input_schema(operation: Operation, refs: ReferenceSet) -> Expression:
    """Compile the request body validator, ``z.never()`` when there is no body."""
    if operation.request_body is None:
        return NEVER
    media = select_media(operation.request_body.content)
    if media is None or "schema" not in media:
        return NEVER
    return compile_schema(media["schema"], refs)


def compile_query_schema(operation: Operation, refs: ReferenceSet) -> Expression:
    """Compile the query string validator from the ``in: query`` parameters."""
    params = operation.query_parameters
    if not params:
        return EMPTY_OBJECT
    return ObjectExpr(
        tuple(
            ObjectField(
                name=param.name,
                value=compile_schema(param.schema_, refs),
                optional=not param.required,
            )
            for param in params
        )
    )


def compile_output_schema(operation: Operation, refs: ReferenceSet) -> Expression:
    """Compile the success response validator, ``z.never()`` when none matches."""
    response = select_success_response(operation.responses)
    if response is None:
        return NEVER
    media = select_media(response.content)
    if media is None or "schema" not in media:
        return NEVER
    return compile_schema(media["schema"], refs)


def select_success_response(responses: dict[str, Response]) -> Optional[Response]:
    """Pick the response whose body describes a successful call.

    Returns:
        The ``200``, ``201`` or ``202`` entry (first present wins), else the
        first entry whose description contains "success" in any case, else
        ``None``.
    """
    for status in SUCCESS_STATUS_CODES:
        if status in responses:
            return responses[status]
    for response in responses.values():
        if response.description and "success" in response.description.lower():
            return response
    return None
