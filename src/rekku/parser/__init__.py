"""OpenAPI document parser -- load documents and extract operations.

This sub-package turns a raw OpenAPI 3.x document (JSON or YAML, local file,
remote URL, or stdin) into a :class:`~rekku.models.ParsedDocument` that the
generators can consume.

Typical usage::

    from rekku.parser import extract_document, load_spec, validate_openapi_version

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    version = validate_openapi_version(raw)
    document = extract_document(raw, version)

Sub-modules:

* :mod:`~rekku.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~rekku.parser.resolver` -- Follows ``$ref`` pointers to shared
  parameters, request bodies, and responses; schema references are left
  for the compiler.
* :mod:`~rekku.parser.extractor` -- Walks the document and produces the
  named schemas and :class:`~rekku.models.Operation` list.
"""

from rekku.parser.extractor import extract_document
from rekku.parser.loader import load_spec, validate_openapi_version

__all__ = ["load_spec", "validate_openapi_version", "extract_document"]
