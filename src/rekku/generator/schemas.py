"""Compile the named schemas of a document into schema modules.

Named schemas may reference each other, and themselves, in any order. The
pass therefore runs in two steps:

1. :func:`register_named_schemas` maps every name to its validator symbol
   before any body is compiled.
2. :func:`compile_named_schemas` compiles each body in declaration order.
   A ``$ref`` compiles to the symbol taken from step 1, so a cycle never
   requires the referenced body to exist yet.

Each body gets its own :class:`~rekku.compiler.schema.ReferenceSet`; the
names it collects become the module's import block.
"""

from __future__ import annotations

from rekku.compiler import ReferenceSet, compile_schema, find_fallbacks, validator_symbol
from rekku.generator.render import render_schema_module
from rekku.models import ParsedDocument, SchemaModule


def register_named_schemas(document: ParsedDocument) -> dict[str, str]:
    """Map every named schema of *document* to its validator symbol.

    Returns:
        ``{name: "<Name>Validator"}`` in declaration order.
    """
    return {name: validator_symbol(name) for name in document.named_schemas}


def compile_named_schemas(
    document: ParsedDocument,
    named_schemas: dict[str, str] | None = None,
) -> list[SchemaModule]:
    """Compile every named schema into a :class:`~rekku.models.SchemaModule`.

    Args:
        document: The parsed document.
        named_schemas: The symbol registry from :func:`register_named_schemas`.
            Built from *document* when omitted.

    Returns:
        One module per named schema, in declaration order. A schema never
        imports itself; references to names missing from the registry are
        left out of the import block and reported in ``warnings``.
    """
    if named_schemas is None:
        named_schemas = register_named_schemas(document)

    modules: list[SchemaModule] = []
    for name, node in document.named_schemas.items():
        refs = ReferenceSet()
        expr = compile_schema(node, refs)

        imports: list[str] = []
        warnings = [f"{name}: {reason}" for reason in find_fallbacks(expr)]
        for ref in refs:
            if ref == name:
                continue
            if ref in named_schemas:
                imports.append(ref)
            else:
                warnings.append(f"{name}: reference to undefined schema '{ref}'")

        modules.append(
            SchemaModule(
                name=name,
                symbol=named_schemas.get(name, validator_symbol(name)),
                file_path=name,
                references=refs.names(),
                content=render_schema_module(name, expr.render(), imports),
                warnings=warnings,
            )
        )
    return modules
