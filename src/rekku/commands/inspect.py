"""``rekku inspect`` -- preview generated templates without writing them.

Runs the same compilation as ``rekku generate`` and prints one table row
per operation: method, path, template file and the input / output
validators. Nothing is written to disk.
"""

from __future__ import annotations

import typer

from rekku.exceptions import RekkuError
from rekku.output import error, info, print_table, warning


def inspect_command(
    spec: str = typer.Argument(
        ..., help="OpenAPI document: URL, file path, or '-' for stdin."
    ),
) -> None:
    """List the operations of an OpenAPI document and their validators.

    Example::

        rekku inspect ./openapi.yaml
        rekku --quiet inspect https://example.com/openapi.json | cut -f1,2
    """
    from rekku.commands.generate import load_document
    from rekku.config import resolve_config
    from rekku.generator import generate_templates, register_named_schemas

    try:
        config = resolve_config()
        document = load_document(spec, config.request.timeout)
    except RekkuError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    templates = generate_templates(document, register_named_schemas(document))
    if not templates:
        info("No operations defined in this document.")
        return

    for template in templates:
        for message in template.warnings:
            warning(message)

    rows = [
        [
            t.method.value,
            t.path,
            f"templates/{t.file_path}.ts",
            t.input_schema,
            t.output_schema,
        ]
        for t in templates
    ]
    print_table(
        ["Method", "Path", "Template", "Input", "Output"],
        rows,
        title=f"{document.title} -- Operations ({len(rows)})",
    )
