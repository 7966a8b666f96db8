"""``rekku request`` -- send one HTTP request and stream the body to stdout."""

from __future__ import annotations

from typing import Optional

import typer

from rekku.exceptions import RekkuError
from rekku.output import error


def request_command(
    url: str = typer.Argument(..., help="Absolute http:// or https:// URL."),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Request header as 'Name: value'. Repeatable."
    ),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Raw request body."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0.001, help="Timeout in seconds."
    ),
    insecure: bool = typer.Option(
        False, "--insecure", "-k", help="Skip TLS certificate verification."
    ),
) -> None:
    """Send an HTTP request and stream the response body to stdout.

    A non-2xx response exits with code 3 without printing the body;
    connection failures exit with code 4.

    Example::

        rekku request https://api.example.com/users -H "Accept: application/json"
        rekku request https://api.example.com/users -X POST -d '{"name": "Ada"}'
    """
    from rekku.client import StreamClient, parse_headers, validate_method, validate_url
    from rekku.config import resolve_config

    try:
        validate_url(url)
        validate_method(method)
        headers = parse_headers(header)

        config = resolve_config(cli_timeout=timeout).request
        if insecure:
            config = config.model_copy(update={"verify_ssl": False})

        with StreamClient(config) as client:
            client.stream(url, method=method, headers=headers, body=data)
    except RekkuError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
