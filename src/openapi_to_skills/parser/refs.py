"""Reference detection and schema shape classification.

OpenAPI lets almost every object be either a concrete object or a JSON
Reference (``{"$ref": "#/components/schemas/Pet"}``). The parser never
dereferences across the document: a reference is carried forward by its
local name, and it is the renderer's job to link to it. Dangling references
are therefore not an error.

This module holds the two dispatch points every other parser module relies
on:

* :func:`is_reference` / :func:`ref_name` -- reference-vs-concrete.
* :func:`classify_schema` -- the single, exhaustive mapping from a concrete
  schema object to a :class:`~openapi_to_skills.models.SchemaKind`.
"""

from __future__ import annotations

from typing import Any

from openapi_to_skills.models import SchemaKind


def is_reference(obj: Any) -> bool:
    """Return ``True`` if *obj* is a JSON Reference object (has ``$ref``)."""
    return isinstance(obj, dict) and "$ref" in obj


def ref_name(ref: str) -> str:
    """Return the local name of a ``$ref`` string.

    Takes the last JSON Pointer segment and undoes RFC 6901 escaping
    (``~1`` for ``/``, ``~0`` for ``~``).

    Example::

        >>> ref_name("#/components/schemas/Pet")
        'Pet'
    """
    segment = str(ref).rsplit("/", 1)[-1]
    if not segment:
        return str(ref)
    return segment.replace("~1", "/").replace("~0", "~")


def classify_schema(schema: dict[str, Any]) -> SchemaKind:
    """Classify a concrete schema object by fixed precedence.

    enum > allOf > oneOf > anyOf > array > object > primitive. A schema
    with ``properties`` but no ``type`` counts as an object.

    Args:
        schema: A schema object that is not a reference.

    Returns:
        The matching :class:`~openapi_to_skills.models.SchemaKind`.
    """
    if schema.get("enum") is not None:
        return SchemaKind.ENUM
    if schema.get("allOf") is not None:
        return SchemaKind.ALL_OF
    if schema.get("oneOf") is not None:
        return SchemaKind.ONE_OF
    if schema.get("anyOf") is not None:
        return SchemaKind.ANY_OF
    if schema.get("type") == "array":
        return SchemaKind.ARRAY
    if schema.get("type") == "object" or schema.get("properties") is not None:
        return SchemaKind.OBJECT
    return SchemaKind.PRIMITIVE
