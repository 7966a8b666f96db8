"""Canonical Pydantic models shared across all rekku modules.

The models fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory
or in a project-local ``rekku.json``:
    :class:`RequestConfig`, :class:`GenerateConfig`, :class:`GlobalConfig`.

**Parser output models** -- produced by the OpenAPI extractor and consumed by
the template generator:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`Parameter`,
    :class:`RequestBody`, :class:`Response`, :class:`Operation`, and
    :class:`ParsedDocument`.

**Generation output models** -- text units handed to the workspace writer:
    :class:`SchemaModule` and :class:`Template`.

Schema nodes themselves are kept as the plain ``dict`` values they were
parsed as; the compiler reads them directly.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings applied to ``rekku request``."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class GenerateConfig(BaseModel):
    """Settings for ``rekku generate``."""

    workspace: str = Field(
        default=".rekku", description="Directory that holds generated APIs"
    )
    format_code: bool = Field(
        default=True, description="Run prettier over generated files when available"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/rekku/config.json``.

    Loaded by :func:`~rekku.config.load_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~rekku.config.resolve_config`
    for the full precedence chain.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    generate: GenerateConfig = Field(default_factory=GenerateConfig)


# --- Parser Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods for which operation templates are generated.

    Values are upper-case because they are emitted verbatim into the
    generated ``method`` declaration.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, value: str) -> Optional[HTTPMethod]:
        """Return the member for *value* (any case), or ``None`` if unknown."""
        try:
            return cls(value.upper())
        except ValueError:
            return None


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class Parameter(BaseModel):
    """A single parameter of an :class:`Operation`.

    ``schema_`` holds the raw JSON Schema of the parameter (or ``None`` when
    the document declares none); only query parameters feed the generated
    ``querySchema``.
    """

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[Any] = Field(default=None, alias="schema")

    model_config = ConfigDict(populate_by_name=True)


class RequestBody(BaseModel):
    """Request body of an operation: the raw ``content`` map, keyed by media type."""

    required: bool = False
    description: Optional[str] = None
    content: dict[str, Any] = Field(default_factory=dict)


class Response(BaseModel):
    """A response entry for one status code."""

    description: Optional[str] = None
    content: Optional[dict[str, Any]] = None


class Operation(BaseModel):
    """A single API operation (one URL path + HTTP method pair).

    Read once from the parsed document and never mutated; each operation
    produces exactly one :class:`Template`.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: dict[str, Response] = Field(default_factory=dict)

    @property
    def query_parameters(self) -> list[Parameter]:
        """Parameters bound to the query string, in declaration order."""
        return [p for p in self.parameters if p.location == ParameterLocation.QUERY]


class ParsedDocument(BaseModel):
    """In-memory representation of an OpenAPI document.

    ``named_schemas`` and ``operations`` keep document declaration order so
    that generation is reproducible byte for byte.
    """

    openapi_version: str
    title: str = "Untitled API"
    named_schemas: dict[str, Any] = Field(default_factory=dict)
    operations: list[Operation] = Field(default_factory=list)


# --- Generation Output Models ---


class SchemaModule(BaseModel):
    """Generated module for one named schema.

    ``file_path`` is relative to the ``schemas/`` directory and carries no
    extension (``"User"``); the writer appends the source suffix.
    ``warnings`` lists schema fragments that fell back to ``z.any()`` and
    references to schemas the document does not define.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    symbol: str
    file_path: str
    references: list[str] = Field(default_factory=list)
    content: str
    warnings: list[str] = Field(default_factory=list)


class Template(BaseModel):
    """Generated template for one operation.

    ``file_path`` is relative to the ``templates/`` directory and carries no
    extension (``"users/{user_id}/get"``). The three rendered validator
    expressions are kept alongside the final module text so callers can
    inspect them without re-parsing ``content``.
    """

    model_config = ConfigDict(frozen=True)

    file_path: str
    method: HTTPMethod
    path: str
    input_schema: str
    query_schema: str
    output_schema: str
    imports: list[str] = Field(default_factory=list)
    content: str
    warnings: list[str] = Field(default_factory=list)
