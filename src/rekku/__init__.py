"""rekku -- a command-line HTTP client that generates zod validators from OpenAPI.

``rekku request`` streams a response body to stdout. ``rekku generate``
turns an OpenAPI 3.x document into one validator module per named schema
and one template per operation, with typed input, query and output
validators.

Typical workflow::

    rekku generate https://example.com/openapi.json example
    rekku request https://example.com/users -H "Accept: application/json"

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr output system with Rich support.
    compiler: JSON Schema to validator expression compiler.
    generator: Schema modules, operation templates, workspace writer.
    parser: OpenAPI document loading and extraction.
    client: Streaming HTTP client.
"""

__version__ = "0.1.0"
