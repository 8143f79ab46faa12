"""Resolve raw OpenAPI schema objects into schema IR nodes.

The resolver maps a schema object (or a reference to one) onto a
:class:`~openapi_to_skills.models.SchemaDocument`. It never dereferences
``$ref`` pointers across the document: wherever a containing schema, field,
parameter, or response points at a component, the result is a
:class:`~openapi_to_skills.models.SchemaRefDocument` carrying the component's
local name.

Public functions:

* :func:`resolve_schema` -- one named schema to a ``SchemaDocument``.
* :func:`schema_ref` -- any schema position to a ``SchemaRefDocument``.
* :func:`schema_type_label` -- the short display type (``string (email)``,
  ``Pet[]``, ``enum: a, b, c...``).
* :func:`build_schema_groups` -- ``components.schemas`` grouped by name
  prefix.

Object properties are flattened one level: a property that is an inline
object (or an array of inline objects) lists its own properties as
``nested_fields``, but those nested fields are never expanded further.
"""

from __future__ import annotations

from typing import Any

from openapi_to_skills.models import (
    FieldDocument,
    SchemaDocument,
    SchemaGroupDocument,
    SchemaKind,
    SchemaRefDocument,
)
from openapi_to_skills.naming import extract_schema_prefix
from openapi_to_skills.parser.refs import classify_schema, is_reference, ref_name

INLINE_SCHEMA_NAME = "(inline)"
"""Placeholder name given to schemas embedded in a :class:`SchemaRefDocument`."""

_COMPOSITION_KEYS: dict[SchemaKind, str] = {
    SchemaKind.ALL_OF: "allOf",
    SchemaKind.ONE_OF: "oneOf",
    SchemaKind.ANY_OF: "anyOf",
}

_ENUM_LABEL_LIMIT = 3


def resolve_schema(name: str, node: Any) -> SchemaDocument:
    """Convert a raw schema object into a :class:`SchemaDocument`.

    A bare reference becomes an ``object`` stub whose description records
    the reference target. A concrete schema is classified by
    :func:`~openapi_to_skills.parser.refs.classify_schema` and exactly the
    one payload matching its kind is populated:

    * ``object`` -- ``fields`` (when ``properties`` is declared)
    * ``enum`` -- ``enum_values``
    * ``allOf`` / ``oneOf`` / ``anyOf`` -- ``composition``
    * ``array`` -- ``items`` (when ``items`` is declared)

    Args:
        name: The schema's name (component key or ``"(inline)"``).
        node: The raw schema object.

    Returns:
        A new :class:`SchemaDocument`.
    """
    if is_reference(node):
        return SchemaDocument(
            name=name,
            type=SchemaKind.OBJECT,
            description=f"Reference: {node['$ref']}",
        )

    schema = node if isinstance(node, dict) else {}
    kind = classify_schema(schema)
    payload: dict[str, Any] = {}

    if kind == SchemaKind.OBJECT and isinstance(schema.get("properties"), dict):
        payload["fields"] = build_fields(schema)
    elif kind == SchemaKind.ENUM and isinstance(schema.get("enum"), list):
        payload["enum_values"] = list(schema["enum"])
    elif kind in _COMPOSITION_KEYS:
        members = schema.get(_COMPOSITION_KEYS[kind]) or []
        payload["composition"] = [schema_ref(member) for member in members]
    elif kind == SchemaKind.ARRAY and schema.get("items") is not None:
        payload["items"] = schema_ref(schema["items"])

    return SchemaDocument(
        name=name,
        type=kind,
        description=schema.get("description"),
        **payload,
    )


def schema_ref(node: Any) -> SchemaRefDocument:
    """Build a :class:`SchemaRefDocument` for any schema position.

    * ``{"$ref": ".../Pet"}`` -> ``ref="Pet"``
    * ``{"type": "array", "items": {"$ref": ".../Pet"}}`` -> ``ref="Pet[]"``
    * anything else -> ``inline`` schema named ``"(inline)"``
    """
    if is_reference(node):
        return SchemaRefDocument(ref=ref_name(node["$ref"]))

    array_ref = _array_item_ref(node)
    if array_ref is not None:
        return SchemaRefDocument(ref=f"{array_ref}[]")

    return SchemaRefDocument(inline=resolve_schema(INLINE_SCHEMA_NAME, node))


def build_fields(schema: dict[str, Any], nested: bool = True) -> list[FieldDocument]:
    """Build the field list of an object schema from its ``properties``.

    A field is required when its name appears in the schema's ``required``
    array; an absent ``required`` means nothing is required.

    Args:
        schema: A concrete object schema.
        nested: Whether inline object properties may get ``nested_fields``.
            ``False`` for the nested level itself, which caps the
            flattening at one level.

    Returns:
        One :class:`FieldDocument` per property, in declaration order.
    """
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return []

    required = {str(item) for item in schema.get("required") or []}
    return [
        build_field(str(prop_name), prop_schema, str(prop_name) in required, nested=nested)
        for prop_name, prop_schema in properties.items()
    ]


def build_field(
    name: str,
    node: Any,
    required: bool,
    nested: bool = True,
) -> FieldDocument:
    """Build a single :class:`FieldDocument`.

    References (and arrays of references) keep a ``schema`` pointer to the
    component; concrete schemas keep their description instead. Inline
    objects, and arrays whose items are inline objects, get one level of
    ``nested_fields`` when *nested* is true.
    """
    label = schema_type_label(node)

    if is_reference(node):
        return FieldDocument(
            name=name,
            type=label,
            required=required,
            schema=SchemaRefDocument(ref=ref_name(node["$ref"])),
        )

    schema = node if isinstance(node, dict) else {}
    extra: dict[str, Any] = {}

    array_ref = _array_item_ref(schema)
    if array_ref is not None:
        extra["schema"] = SchemaRefDocument(ref=f"{array_ref}[]")

    if nested:
        if _is_inline_object(schema):
            extra["nested_fields"] = build_fields(schema, nested=False)
        elif schema.get("type") == "array" and _is_inline_object(schema.get("items")):
            extra["nested_fields"] = build_fields(schema["items"], nested=False)

    return FieldDocument(
        name=name,
        type=label,
        required=required,
        description=schema.get("description"),
        **extra,
    )


def schema_type_label(node: Any) -> str:
    """Return a short, human-readable type string for a schema.

    Examples::

        None                                   -> "any"
        {"$ref": "#/components/schemas/Pet"}   -> "Pet"
        {"enum": ["a", "b", "c", "d"]}         -> "enum: a, b, c..."
        {"type": "array", "items": {"$ref": ".../Pet"}} -> "Pet[]"
        {"type": "array", "items": {"type": "string"}}  -> "string[]"
        {"type": "string", "format": "email"}  -> "string (email)"
    """
    if not node:
        return "any"
    if is_reference(node):
        return ref_name(node["$ref"])
    if not isinstance(node, dict):
        return "any"

    enum_values = node.get("enum")
    if isinstance(enum_values, list):
        shown = ", ".join(format_enum_value(v) for v in enum_values[:_ENUM_LABEL_LIMIT])
        suffix = "..." if len(enum_values) > _ENUM_LABEL_LIMIT else ""
        return f"enum: {shown}{suffix}"

    if node.get("type") == "array" and node.get("items") is not None:
        items = node["items"]
        if is_reference(items):
            return f"{ref_name(items['$ref'])}[]"
        item_type = items.get("type") if isinstance(items, dict) else None
        return f"{_type_name(item_type)}[]"

    label = _type_name(node.get("type"))
    if node.get("format"):
        label += f" ({node['format']})"
    return label


def build_schema_groups(schemas: Any) -> list[SchemaGroupDocument]:
    """Group ``components.schemas`` by :func:`~openapi_to_skills.naming.extract_schema_prefix`.

    Groups come out in first-seen prefix order and schemas keep their
    declaration order inside a group. Two schemas sharing a prefix need not
    be related (``PetStatus`` and ``PetFood`` both land in ``Pet``).

    Args:
        schemas: The raw ``components.schemas`` mapping (may be ``None``).

    Returns:
        A list of :class:`SchemaGroupDocument`, empty when no schemas exist.
    """
    if not isinstance(schemas, dict):
        return []

    grouped: dict[str, list[SchemaDocument]] = {}
    for key, node in schemas.items():
        name = str(key)
        prefix = extract_schema_prefix(name)
        grouped.setdefault(prefix, []).append(resolve_schema(name, node))

    return [
        SchemaGroupDocument(prefix=prefix, schemas=members)
        for prefix, members in grouped.items()
    ]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _array_item_ref(node: Any) -> str | None:
    """Return the component name when *node* is an array of references."""
    if not isinstance(node, dict) or node.get("type") != "array":
        return None
    items = node.get("items")
    if is_reference(items):
        return ref_name(items["$ref"])
    return None


def _is_inline_object(node: Any) -> bool:
    return (
        isinstance(node, dict)
        and not is_reference(node)
        and node.get("type") == "object"
        and isinstance(node.get("properties"), dict)
    )


def _type_name(value: Any) -> str:
    if not value:
        return "any"
    if isinstance(value, list):
        # 3.1-style type arrays: ["string", "null"]
        return " | ".join(str(v) for v in value)
    return str(value)


def format_enum_value(value: Any) -> str:
    """Render one enum value the way JSON spells it (``null``, ``true``)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
