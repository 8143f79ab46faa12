"""Extract operations from the ``paths`` table and group them into resources.

This module walks every path item and HTTP method, applies the caller's
:class:`~openapi_to_skills.models.ParserFilter`, decides which resource(s)
each operation belongs to, and returns the populated
:class:`~openapi_to_skills.models.ResourceDocument` list.

Processing order for each path:

1. **Path exclusion** -- the whole path is dropped when it matches any
   ``exclude_paths`` entry. A string entry matches on equality *or raw
   string prefix*, so ``"/internal"`` also drops ``"/internal-tools"``. A
   compiled pattern matches with :meth:`re.Pattern.search`.
2. **Deprecated exclusion** -- per operation, when ``exclude_deprecated``.
3. **Grouping** -- :func:`get_resource_names` returns one or more keys; an
   operation with several tags is copied into each of their resources.
4. **Tag filter** -- :func:`is_tag_included`, evaluated per key.

Resources are created on first use (with the description of the matching
top-level ``tags`` entry, if any) and finally sorted by descending operation
count. The sort is stable, so ties keep their creation order.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

from openapi_to_skills.models import (
    GroupBy,
    OperationDocument,
    ParameterDocument,
    ParserFilter,
    RequestBodyDocument,
    ResourceDocument,
    ResponseDocument,
    SecurityRequirementDocument,
)
from openapi_to_skills.parser.refs import is_reference
from openapi_to_skills.parser.schemas import schema_ref, schema_type_label

HTTP_METHODS: tuple[str, ...] = (
    "get",
    "put",
    "post",
    "delete",
    "options",
    "head",
    "patch",
    "trace",
)
"""Path-item keys treated as operations, in iteration order."""

DEFAULT_RESOURCE = "default"

PREFERRED_CONTENT_TYPE = "application/json"

_VERSION_PREFIX = re.compile(r"^/(api/)?(v\d+/)?", re.IGNORECASE)


def extract_resources(
    spec: dict[str, Any],
    path_filter: ParserFilter | None = None,
    group_by: GroupBy = GroupBy.AUTO,
) -> list[ResourceDocument]:
    """Build the resource list for a spec.

    Args:
        spec: The raw OpenAPI document.
        path_filter: Tag, deprecation and path filters. ``None`` keeps
            everything.
        group_by: The grouping strategy.

    Returns:
        Resources sorted by descending operation count.
    """
    path_filter = path_filter or ParserFilter()
    tag_descriptions = _tag_descriptions(spec.get("tags"))
    global_security = spec.get("security")

    # tag -> (description, operations), insertion-ordered
    buckets: dict[str, tuple[str | None, list[OperationDocument]]] = {}

    paths = spec.get("paths") or {}
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        if is_path_excluded(path, path_filter.exclude_paths):
            continue

        path_params = path_item.get("parameters") or []

        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            if path_filter.exclude_deprecated and operation.get("deprecated"):
                continue

            for resource_name in get_resource_names(path, operation, group_by):
                if not is_tag_included(resource_name, path_filter):
                    continue

                if resource_name not in buckets:
                    buckets[resource_name] = (tag_descriptions.get(resource_name), [])

                buckets[resource_name][1].append(
                    build_operation(
                        path,
                        method,
                        operation,
                        resource_name,
                        path_params=path_params,
                        global_security=global_security,
                    )
                )

    resources = [
        ResourceDocument(tag=tag, description=description, operations=operations)
        for tag, (description, operations) in buckets.items()
    ]
    return sorted(resources, key=lambda r: len(r.operations), reverse=True)


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


def get_resource_names(
    path: str,
    operation: dict[str, Any],
    group_by: GroupBy = GroupBy.AUTO,
) -> list[str]:
    """Return the resource name(s) an operation is filed under.

    * ``tags`` -- the declared tags, or ``["default"]`` when there are none.
    * ``path`` -- the single key from :func:`resource_from_path`.
    * ``auto`` -- the declared tags when non-empty, else the path key.
    """
    tags = [str(tag) for tag in operation.get("tags") or []]

    if group_by == GroupBy.TAGS:
        return tags or [DEFAULT_RESOURCE]
    if group_by == GroupBy.PATH:
        return [resource_from_path(path)]
    return tags or [resource_from_path(path)]


def resource_from_path(path: str) -> str:
    """Derive a resource name from the first meaningful path segment.

    Strips one optional leading ``/api/`` segment and then one optional
    ``/v<digits>/`` segment (case-insensitive) before taking the first
    segment. A missing segment or a path parameter yields ``"default"``.

    Examples::

        >>> resource_from_path("/v1/accounts/{id}")
        'accounts'
        >>> resource_from_path("/api/v2/users")
        'users'
        >>> resource_from_path("/{tenantId}/resources")
        'default'
    """
    stripped = _VERSION_PREFIX.sub("/", path, count=1)
    segments = [segment for segment in stripped.split("/") if segment]
    if not segments or segments[0].startswith("{"):
        return DEFAULT_RESOURCE
    return segments[0]


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def is_path_excluded(path: str, patterns: Iterable[str | re.Pattern]) -> bool:
    """Return ``True`` when *path* matches any exclusion pattern.

    Strings match on equality or raw string prefix (not on segment
    boundaries). Compiled patterns match anywhere via ``search``.
    """
    for pattern in patterns:
        if isinstance(pattern, str):
            if path == pattern or path.startswith(pattern):
                return True
        elif pattern.search(path):
            return True
    return False


def is_tag_included(tag: str, path_filter: ParserFilter) -> bool:
    """Apply the include/exclude tag lists to one resource name.

    A non-empty ``include_tags`` decides alone; otherwise a non-empty
    ``exclude_tags`` removes the listed names; otherwise everything passes.
    """
    if path_filter.include_tags:
        return tag in path_filter.include_tags
    if path_filter.exclude_tags:
        return tag not in path_filter.exclude_tags
    return True


# ---------------------------------------------------------------------------
# Operation mapping
# ---------------------------------------------------------------------------


def build_operation(
    path: str,
    method: str,
    operation: dict[str, Any],
    tag: str,
    path_params: list[Any] | None = None,
    global_security: list[Any] | None = None,
) -> OperationDocument:
    """Map one raw operation onto an :class:`OperationDocument`.

    Path-level parameters are merged in, operation-level ones overriding
    them by ``(name, in)``. When the operation declares no ``security``, the
    document-level requirement applies; an explicit ``[]`` means none.
    """
    operation_id = operation.get("operationId") or f"{method}-{path.replace('/', '-')}"

    op_security = operation.get("security")
    security = op_security if op_security is not None else global_security

    request_body = operation.get("requestBody")

    return OperationDocument(
        operation_id=operation_id,
        path=path,
        method=method.upper(),
        tag=tag,
        summary=operation.get("summary"),
        description=operation.get("description"),
        deprecated=bool(operation.get("deprecated", False)),
        parameters=build_parameters(
            merge_parameters(path_params or [], operation.get("parameters") or [])
        ),
        request_body=build_request_body(request_body) if request_body else None,
        responses=build_responses(operation.get("responses") or {}),
        security=flatten_security(security or []),
    )


def merge_parameters(path_params: list[Any], op_params: list[Any]) -> list[Any]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters replace path-level ones with the same
    ``name`` and ``in``. Reference entries cannot be keyed and are passed
    through untouched (they are dropped later).
    """
    overridden = {
        (param.get("name"), param.get("in"))
        for param in op_params
        if isinstance(param, dict) and not is_reference(param)
    }

    merged = [
        param
        for param in path_params
        if is_reference(param)
        or not isinstance(param, dict)
        or (param.get("name"), param.get("in")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def build_parameters(params: list[Any]) -> list[ParameterDocument]:
    """Convert concrete parameter objects; reference parameters are dropped."""
    result: list[ParameterDocument] = []
    for param in params:
        if not isinstance(param, dict) or is_reference(param):
            continue
        schema = param.get("schema")
        result.append(
            ParameterDocument(
                name=str(param.get("name", "")),
                location=str(param.get("in", "query")),
                type=schema_type_label(schema),
                required=bool(param.get("required", False)),
                description=param.get("description"),
                schema=schema_ref(schema) if schema is not None else None,
            )
        )
    return result


def build_request_body(body: Any) -> RequestBodyDocument | None:
    """Convert a ``requestBody``; a reference body yields ``None``."""
    if not isinstance(body, dict) or is_reference(body):
        return None

    content = body.get("content") or {}
    media = preferred_media_type(content)
    schema = media.get("schema") if media else None

    return RequestBodyDocument(
        description=body.get("description"),
        required=bool(body.get("required", False)),
        content_types=[str(key) for key in content],
        schema=schema_ref(schema) if schema is not None else None,
    )


def build_responses(responses: dict[str, Any]) -> list[ResponseDocument]:
    """One :class:`ResponseDocument` per declared status code.

    A reference response is kept with the description ``"(reference)"``.
    """
    result: list[ResponseDocument] = []
    for status, response in responses.items():
        if is_reference(response):
            result.append(ResponseDocument(status=str(status), description="(reference)"))
            continue
        if not isinstance(response, dict):
            continue

        media = preferred_media_type(response.get("content") or {})
        schema = media.get("schema") if media else None
        result.append(
            ResponseDocument(
                status=str(status),
                description=response.get("description") or "",
                schema=schema_ref(schema) if schema is not None else None,
            )
        )
    return result


def flatten_security(requirements: list[Any]) -> list[SecurityRequirementDocument]:
    """Flatten ``[{name: scopes}, ...]`` into ``{name, scopes}`` pairs.

    Declaration order is preserved and duplicates are kept.
    """
    result: list[SecurityRequirementDocument] = []
    for requirement in requirements:
        if not isinstance(requirement, dict):
            continue
        for name, scopes in requirement.items():
            result.append(
                SecurityRequirementDocument(name=str(name), scopes=list(scopes or []))
            )
    return result


def preferred_media_type(content: dict[str, Any]) -> dict[str, Any] | None:
    """Pick ``application/json`` when declared, else the first media type."""
    if not isinstance(content, dict) or not content:
        return None
    media = content.get(PREFERRED_CONTENT_TYPE)
    if media is None:
        media = next(iter(content.values()))
    return media if isinstance(media, dict) else None


def _tag_descriptions(tags: Any) -> dict[str, str | None]:
    descriptions: dict[str, str | None] = {}
    for tag in tags or []:
        if isinstance(tag, dict) and "name" in tag:
            descriptions[str(tag["name"])] = tag.get("description")
    return descriptions
