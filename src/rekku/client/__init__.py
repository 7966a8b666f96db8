"""HTTP client for ``rekku request``.

* :mod:`~rekku.client.stream` -- :class:`StreamClient`, which sends a single
  request and streams the response body to stdout, plus the URL, method and
  header validators used by the CLI.
"""

from rekku.client.stream import StreamClient, parse_headers, validate_method, validate_url

__all__ = ["StreamClient", "parse_headers", "validate_method", "validate_url"]
