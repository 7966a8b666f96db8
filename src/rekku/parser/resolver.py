"""Resolve ``$ref`` pointers to reusable OpenAPI components.

Operations often point at shared parameters, request bodies, or responses
(``{"$ref": "#/components/parameters/Limit"}``). The extractor needs those
objects themselves, so this module follows such pointers.

Schema references (``#/components/schemas/...``) are deliberately **not**
followed here: the schema compiler turns them into validator symbols, which
is what keeps recursive schemas finite. :func:`resolve_component` only ever
resolves the object it is handed, never the schemas nested inside it.

Only internal references (``#/...``) are supported. External references and
pointers to missing keys raise :class:`~rekku.exceptions.SpecParseError`.
"""

from __future__ import annotations

from typing import Any

from rekku.exceptions import SpecParseError

SCHEMA_REF_PREFIX = "#/components/schemas/"


def resolve_component(obj: Any, root: dict[str, Any]) -> Any:
    """Follow a chain of ``$ref`` pointers until a concrete object is reached.

    Args:
        obj: A component object, possibly ``{"$ref": "#/components/..."}``.
        root: The whole document, used as the lookup target.

    Returns:
        The referenced object, or *obj* itself when it is not a reference.
        A schema reference is returned unchanged.

    Raises:
        SpecParseError: On external references, dangling pointers, or a
            reference chain that loops back on itself.

    Example::

        param = resolve_component({"$ref": "#/components/parameters/Limit"}, raw)
        param["name"]  # 'limit'
    """
    seen: set[str] = set()
    current = obj
    while isinstance(current, dict) and "$ref" in current:
        ref = current["$ref"]
        if not isinstance(ref, str) or ref.startswith(SCHEMA_REF_PREFIX):
            return current
        if ref in seen:
            raise SpecParseError(f"Circular $ref chain at '{ref}'")
        seen.add(ref)
        current = resolve_pointer(ref, root)
    return current


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Handles RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/parameters/Limit"``).
        root: The root document to resolve against.

    Returns:
        The value found at the referenced path.

    Raises:
        SpecParseError: If the reference is external (does not start with
            ``#/``), or if any segment in the pointer path does not exist
            in the document.
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )

    return current
