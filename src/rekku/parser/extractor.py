"""Extract named schemas and operations from a raw OpenAPI document.

This module walks a raw OpenAPI dictionary and builds the
:class:`~rekku.models.ParsedDocument` consumed by the generators. Unlike a
full ``$ref`` resolver it leaves schema references in place: the schema
compiler relies on them to emit validator symbols instead of inlining
(possibly recursive) schema bodies. References to shared parameters,
request bodies, responses, and path items are followed via
:func:`~rekku.parser.resolver.resolve_component`.

The single public entry point is :func:`extract_document`; the media-type
preference shared with the template generator is :func:`select_media`.

Parameter merging follows OpenAPI 3: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.
"""

from __future__ import annotations

from typing import Any, Optional

from rekku.exceptions import SpecParseError
from rekku.models import (
    HTTPMethod,
    Operation,
    Parameter,
    ParameterLocation,
    ParsedDocument,
    RequestBody,
    Response,
)
from rekku.parser.resolver import resolve_component

JSON_MEDIA_TYPE = "application/json"


def extract_document(raw_spec: dict[str, Any], openapi_version: str) -> ParsedDocument:
    """Build a :class:`~rekku.models.ParsedDocument` from a raw OpenAPI dict.

    Args:
        raw_spec: The document as returned by
            :func:`~rekku.parser.loader.load_spec`.
        openapi_version: The validated version string, as returned by
            :func:`~rekku.parser.loader.validate_openapi_version`.

    Returns:
        The parsed document with named schemas and operations in
        declaration order.

    Raises:
        SpecParseError: If ``paths`` or ``components.schemas`` is not an
            object, or a component ``$ref`` cannot be resolved.

    Example::

        raw = load_spec("petstore.yaml")
        document = extract_document(raw, validate_openapi_version(raw))
        for op in document.operations:
            print(op.method.value, op.path)
    """
    info = raw_spec.get("info")
    title = info.get("title") if isinstance(info, dict) else None
    return ParsedDocument(
        openapi_version=openapi_version,
        title=title or "Untitled API",
        named_schemas=_extract_named_schemas(raw_spec),
        operations=_extract_operations(raw_spec),
    )


def select_media(content: Any) -> Optional[dict[str, Any]]:
    """Pick the media type object to generate validators from.

    ``application/json`` wins when present; otherwise the first declared
    media type is used.

    Args:
        content: A ``content`` map keyed by media type.

    Returns:
        The chosen media type object, or ``None`` when *content* is empty or
        the chosen entry is not an object.
    """
    if not isinstance(content, dict) or not content:
        return None
    media = content.get(JSON_MEDIA_TYPE)
    if media is None:
        media = next(iter(content.values()))
    return media if isinstance(media, dict) else None


def _extract_named_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    components = spec.get("components")
    if components is None:
        components = {}
    if not isinstance(components, dict):
        raise SpecParseError("'components' must be an object")
    schemas = components.get("schemas")
    if schemas is None:
        schemas = {}
    if not isinstance(schemas, dict):
        raise SpecParseError("'components.schemas' must be an object")
    return {str(name): schema for name, schema in schemas.items()}


def _extract_operations(spec: dict[str, Any]) -> list[Operation]:
    """Extract one :class:`~rekku.models.Operation` per path + method pair.

    Keys of a path item that are not HTTP methods (``parameters``,
    ``summary``, ``servers``, ``trace``, vendor extensions) are skipped.
    Method keys are matched case-insensitively.
    """
    paths = spec.get("paths")
    if paths is None:
        paths = {}
    if not isinstance(paths, dict):
        raise SpecParseError("'paths' must be an object")

    operations: list[Operation] = []
    for path, path_item in paths.items():
        path_item = resolve_component(path_item, spec)
        if not isinstance(path_item, dict):
            continue

        path_params = path_item.get("parameters") or []

        for key, operation in path_item.items():
            method = HTTPMethod.parse(key) if isinstance(key, str) else None
            if method is None or not isinstance(operation, dict):
                continue

            merged_params = _merge_parameters(
                _resolve_list(path_params, spec),
                _resolve_list(operation.get("parameters") or [], spec),
            )

            operations.append(
                Operation(
                    path=str(path),
                    method=method,
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    parameters=_extract_parameters(merged_params),
                    request_body=_extract_request_body(
                        resolve_component(operation.get("requestBody"), spec)
                    ),
                    responses=_extract_responses(operation.get("responses") or {}, spec),
                )
            )

    return operations


def _resolve_list(items: Any, spec: dict[str, Any]) -> list[dict[str, Any]]:
    if not isinstance(items, list):
        return []
    resolved = (resolve_component(item, spec) for item in items)
    return [item for item in resolved if isinstance(item, dict)]


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.
    """
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [
        p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def _extract_parameters(params_list: list[dict[str, Any]]) -> list[Parameter]:
    """Convert raw parameter dicts into :class:`~rekku.models.Parameter` models.

    Parameters with unrecognised ``in`` locations are skipped. A parameter
    described with ``content`` instead of ``schema`` takes the schema of its
    preferred media type. Path parameters are always required.
    """
    parameters: list[Parameter] = []

    for param in params_list:
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            continue

        schema = param.get("schema")
        if schema is None:
            media = select_media(param.get("content"))
            schema = media.get("schema") if media else None

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            Parameter(
                name=str(param.get("name", "")),
                location=location,
                required=required,
                description=param.get("description"),
                schema=schema,
            )
        )

    return parameters


def _extract_request_body(body: Any) -> Optional[RequestBody]:
    if not isinstance(body, dict):
        return None
    content = body.get("content")
    return RequestBody(
        required=bool(body.get("required", False)),
        description=body.get("description"),
        content=content if isinstance(content, dict) else {},
    )


def _extract_responses(responses: Any, spec: dict[str, Any]) -> dict[str, Response]:
    """Extract responses keyed by status code string, in declaration order.

    YAML documents may use integer status codes; keys are normalised with
    ``str()`` so that ``200`` and ``"200"`` are the same entry.
    """
    if not isinstance(responses, dict):
        return {}

    result: dict[str, Response] = {}
    for status_code, response in responses.items():
        response = resolve_component(response, spec)
        if not isinstance(response, dict):
            continue
        content = response.get("content")
        result[str(status_code)] = Response(
            description=response.get("description"),
            content=content if isinstance(content, dict) else None,
        )
    return result
