"""``rekku generate`` -- compile an OpenAPI document into validator modules.

Pipeline:

1. Load and validate the document (:mod:`rekku.parser`).
2. Register every named schema symbol, then compile the schema modules.
3. Generate one template per operation.
4. Write everything under ``<workspace>/apis/<api-name>/`` and, unless
   disabled, run prettier over the result.

Schema fragments that fell back to ``z.any()`` are reported as warnings;
they never fail the run.
"""

from __future__ import annotations

from typing import Optional

import typer

from rekku.exceptions import RekkuError
from rekku.models import ParsedDocument
from rekku.output import debug, error, info, success, suggest, warning


def load_document(source: str, timeout: float) -> ParsedDocument:
    """Load, version-check and extract the document at *source*.

    Raises:
        SpecParseError: If the document cannot be loaded or is not
            OpenAPI 3.x.
    """
    from rekku.parser import extract_document, load_spec, validate_openapi_version

    debug(f"Loading OpenAPI document from {source}")
    raw = load_spec(source, timeout=timeout)
    version = validate_openapi_version(raw)
    document = extract_document(raw, version)
    debug(
        f"Parsed '{document.title}' (OpenAPI {version}): "
        f"{len(document.named_schemas)} schemas, {len(document.operations)} operations"
    )
    return document


def generate_command(
    spec: str = typer.Argument(
        ..., help="OpenAPI document: URL, file path, or '-' for stdin."
    ),
    api_name: str = typer.Argument(..., help="Directory name for this API."),
    workspace: Optional[str] = typer.Option(
        None, "--workspace", "-w", help="Workspace root (default: .rekku)."
    ),
    no_format: bool = typer.Option(
        False, "--no-format", help="Skip the prettier formatting pass."
    ),
) -> None:
    """Generate schema modules and operation templates from an OpenAPI document.

    Example::

        rekku generate https://petstore3.swagger.io/api/v3/openapi.json petstore
        rekku generate ./openapi.yaml internal --workspace ./generated --no-format
    """
    from rekku.config import resolve_config
    from rekku.generator import (
        compile_named_schemas,
        format_generated_code,
        generate_templates,
        register_named_schemas,
        write_api,
    )

    try:
        config = resolve_config(
            cli_workspace=workspace,
            cli_format_code=False if no_format else None,
        )
        document = load_document(spec, config.request.timeout)

        registry = register_named_schemas(document)
        modules = compile_named_schemas(document, registry)
        templates = generate_templates(document, registry)

        for unit in (*modules, *templates):
            for message in unit.warnings:
                warning(message)

        api_dir = write_api(config.generate.workspace, api_name, modules, templates)
        if config.generate.format_code:
            format_generated_code(api_dir)
    except RekkuError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(
        f"Generated {len(templates)} templates and {len(modules)} schemas "
        f"for API: {api_name}"
    )
    info(f"Output written to {api_dir}")
    if not templates:
        suggest("The document declares no operations under 'paths'.")
