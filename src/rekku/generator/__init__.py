"""Code generator -- turn a parsed OpenAPI document into validator modules.

This sub-package is the second half of the ``rekku generate`` pipeline:
taking a :class:`~rekku.models.ParsedDocument` (produced by the parser) and
producing one schema module per named schema plus one template per
operation, then writing them into the workspace.

Typical usage::

    from rekku.generator import (
        compile_named_schemas,
        generate_templates,
        register_named_schemas,
        write_api,
    )

    registry = register_named_schemas(document)
    modules = compile_named_schemas(document, registry)
    templates = generate_templates(document, registry)
    api_dir = write_api(".rekku", "petstore", modules, templates)

Sub-modules:

* :mod:`~rekku.generator.schemas` -- Two-pass compilation of
  ``components.schemas``: register every symbol, then compile the bodies.
* :mod:`~rekku.generator.templates` -- Per-operation input, query and
  output validators plus the import block.
* :mod:`~rekku.generator.render` -- Jinja2 rendering of both module kinds.
* :mod:`~rekku.generator.writer` -- Workspace layout, atomic writes and the
  optional prettier pass.
"""

from rekku.generator.schemas import compile_named_schemas, register_named_schemas
from rekku.generator.templates import generate_templates
from rekku.generator.writer import format_generated_code, write_api

__all__ = [
    "register_named_schemas",
    "compile_named_schemas",
    "generate_templates",
    "write_api",
    "format_generated_code",
]
