"""Streaming HTTP client behind ``rekku request``.

This module provides :class:`StreamClient`, a thin blocking client that
sends one request and copies the response body to stdout chunk by chunk,
without buffering it or interpreting its content type. It wraps
:class:`httpx.Client` and adds:

- **Argument validation** -- :func:`validate_url`, :func:`validate_method`
  and :func:`parse_headers` reject bad input with
  :class:`~rekku.exceptions.InvalidUsageError` before any traffic is sent.
- **Error mapping** -- a non-2xx status raises
  :class:`~rekku.exceptions.HttpStatusError`; transport failures (DNS,
  refused connection, timeout, TLS) raise
  :class:`~rekku.exceptions.RequestFailedError`.

Timeout and TLS verification come from
:class:`~rekku.models.RequestConfig`. Redirects are followed.
"""

from __future__ import annotations

from typing import Callable, Optional
from urllib.parse import urlsplit

import httpx

from rekku.exceptions import HttpStatusError, InvalidUsageError, RequestFailedError
from rekku.models import HTTPMethod, RequestConfig
from rekku.output import get_output

Sink = Callable[[bytes], None]
"""Receives each body chunk in order; defaults to writing to stdout."""


def validate_url(url: str) -> str:
    """Return *url* if it is an absolute ``http``/``https`` URL with a host.

    Raises:
        InvalidUsageError: For any other URL.
    """
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidUsageError(f"Invalid URL '{url}': {exc}") from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidUsageError(
            f"Invalid URL '{url}': expected an absolute http:// or https:// URL"
        )
    return url


def validate_method(method: str) -> HTTPMethod:
    """Return the :class:`~rekku.models.HTTPMethod` named by *method* (any case).

    Raises:
        InvalidUsageError: If *method* is not a supported HTTP method.
    """
    parsed = HTTPMethod.parse(method)
    if parsed is None:
        allowed = ", ".join(m.value for m in HTTPMethod)
        raise InvalidUsageError(f"Unsupported HTTP method '{method}'. Use one of: {allowed}")
    return parsed


def parse_headers(values: Optional[list[str]]) -> dict[str, str]:
    """Parse repeated ``"Name: value"`` strings into a header dict.

    Whitespace around the name and the value is stripped; the value may be
    empty and may itself contain colons. A later header with the same name
    replaces an earlier one.

    Raises:
        InvalidUsageError: If an entry has no colon or an empty name.

    Example::

        parse_headers(["Accept: application/json", "X-Trace: a:b"])
        # {'Accept': 'application/json', 'X-Trace': 'a:b'}
    """
    headers: dict[str, str] = {}
    for raw in values or []:
        name, sep, value = raw.partition(":")
        name = name.strip()
        if not sep or not name:
            raise InvalidUsageError(f"Invalid header '{raw}': expected 'Name: value'")
        headers[name] = value.strip()
    return headers


class StreamClient:
    """Blocking client that streams one response body at a time.

    Must be used as a context manager so that the underlying connection
    pool is opened and closed.

    Args:
        config: Timeout and TLS settings. Defaults to
            :class:`~rekku.models.RequestConfig` defaults.
        transport: Optional httpx transport, e.g. an
            :class:`httpx.MockTransport` in tests.

    Example::

        with StreamClient(RequestConfig(timeout=10)) as client:
            client.stream("https://example.com/data.json")
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> StreamClient:
        self._client = httpx.Client(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def stream(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[dict[str, str]] = None,
        body: Optional[str] = None,
        sink: Optional[Sink] = None,
    ) -> int:
        """Send a request and pass each chunk of the response body to *sink*.

        Args:
            url: Absolute ``http``/``https`` URL.
            method: HTTP method, any case.
            headers: Request headers.
            body: Raw request body, sent as UTF-8.
            sink: Chunk consumer; stdout via the global output manager when
                omitted.

        Returns:
            The number of body bytes received.

        Raises:
            InvalidUsageError: On a bad URL or method.
            HttpStatusError: When the server answers with a non-2xx status.
                Nothing is passed to *sink* in that case.
            RequestFailedError: When the request cannot be completed.
        """
        if self._client is None:
            raise RuntimeError("StreamClient must be used as a context manager")

        validate_url(url)
        http_method = validate_method(method)
        output = get_output()
        write = sink or output.write_bytes

        output.debug(f"{http_method.value} {url}")
        received = 0
        try:
            with self._client.stream(
                http_method.value,
                url,
                headers=headers,
                content=body.encode("utf-8") if body is not None else None,
            ) as response:
                if not response.is_success:
                    output.debug(
                        f"Request to {url} failed: method={http_method.value} "
                        f"headers={headers or {}} status={response.status_code}"
                    )
                    raise HttpStatusError(
                        f"HTTP error! Status: {response.status_code} {response.reason_phrase}",
                        status_code=response.status_code,
                    )
                for chunk in response.iter_bytes():
                    if chunk:
                        write(chunk)
                        received += len(chunk)
        except httpx.HTTPError as exc:
            raise RequestFailedError(f"Request to {url} failed: {exc}") from exc

        output.debug(f"Received {received} bytes")
        return received
