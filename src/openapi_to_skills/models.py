"""Canonical Pydantic models shared across all openapi_to_skills modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Option models** -- supplied by callers (or built from CLI flags and config):
    :class:`GroupBy`, :class:`ParserFilter`, :class:`ParserOptions`,
    :class:`ConvertOptions`, and the persisted :class:`ConvertConfig`.

**Intermediate representation (IR)** -- produced by
:func:`~openapi_to_skills.parser.parse_spec` and consumed by the renderer:
    :class:`SkillDocument` at the root, holding :class:`SkillMeta`,
    :class:`ResourceDocument` (with :class:`OperationDocument` and its
    parameter/body/response shapes), :class:`SchemaGroupDocument` (with
    :class:`SchemaDocument`, :class:`FieldDocument`, and
    :class:`SchemaRefDocument`), and :class:`AuthSchemeDocument`.

IR models are frozen: once the parser returns a document nothing mutates it,
and no node refers back into the source spec or to a sibling node. The tree
can be handed to any renderer as-is.
"""

from __future__ import annotations

import enum
import re
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Options ---


class GroupBy(str, enum.Enum):
    """Strategy used to assign operations to resources.

    ``TAGS`` files an operation under each of its declared tags (or
    ``default``), ``PATH`` under a key derived from the first path segment,
    and ``AUTO`` uses the tags when present and the path key otherwise.
    """

    TAGS = "tags"
    PATH = "path"
    AUTO = "auto"


class ParserFilter(BaseModel):
    """Operation filters applied while extracting resources.

    ``include_tags`` wins over ``exclude_tags``: when it is non-empty the
    exclusion list is ignored entirely. ``exclude_paths`` entries are either
    literal strings (matched by equality or raw string prefix) or compiled
    regular expressions (matched with :meth:`re.Pattern.search`).
    """

    model_config = ConfigDict(frozen=True)

    include_tags: list[str] = Field(default_factory=list)
    exclude_tags: list[str] = Field(default_factory=list)
    exclude_deprecated: bool = False
    exclude_paths: list[Union[str, re.Pattern]] = Field(default_factory=list)


class ParserOptions(BaseModel):
    """Options for :func:`~openapi_to_skills.parser.parse_spec`."""

    model_config = ConfigDict(frozen=True)

    skill_name: Optional[str] = Field(
        default=None, description="Skill name override (default: derived from info.title)"
    )
    group_by: GroupBy = GroupBy.AUTO
    filter: ParserFilter = Field(default_factory=ParserFilter)


class ConvertOptions(BaseModel):
    """Options for :func:`~openapi_to_skills.converter.convert_openapi_to_skill`.

    Example::

        ConvertOptions(
            output_dir="./skills",
            parser=ParserOptions(group_by=GroupBy.TAGS),
            template_dir="./my-templates",
            force=True,
        )
    """

    model_config = ConfigDict(frozen=True)

    output_dir: Path = Field(description="Directory the skill folder is created in")
    parser: ParserOptions = Field(default_factory=ParserOptions)
    template_dir: Optional[Path] = Field(
        default=None, description="Custom templates that override the defaults by name"
    )
    force: bool = Field(default=False, description="Replace an existing skill directory")
    dry_run: bool = Field(default=False, description="Render without writing to disk")


class ConvertConfig(BaseModel):
    """Persistent defaults for ``convert``, read from config files and env vars.

    Stored as JSON in the user config file and in ``./openapi-to-skills.json``.
    ``exclude_paths`` keeps the raw strings; entries prefixed ``re:`` are
    compiled into patterns by
    :func:`~openapi_to_skills.config.parse_exclude_patterns`.

    Example::

        {
            "output": "./skills",
            "group_by": "tags",
            "exclude_paths": ["/internal", "re:^/admin/"]
        }
    """

    model_config = ConfigDict(extra="forbid")

    output: str = Field(default="./output", description="Output directory")
    name: Optional[str] = Field(default=None, description="Skill name override")
    group_by: GroupBy = GroupBy.AUTO
    include_tags: list[str] = Field(default_factory=list)
    exclude_tags: list[str] = Field(default_factory=list)
    exclude_deprecated: bool = False
    exclude_paths: list[str] = Field(default_factory=list)
    templates: Optional[str] = Field(default=None, description="Custom templates directory")


# --- Intermediate representation ---


class SchemaKind(str, enum.Enum):
    """Shape of a :class:`SchemaDocument`.

    Exactly one kind applies to a schema, chosen by the fixed precedence
    ENUM > ALL_OF > ONE_OF > ANY_OF > ARRAY > OBJECT > PRIMITIVE in
    :func:`~openapi_to_skills.parser.refs.classify_schema`.
    """

    OBJECT = "object"
    ARRAY = "array"
    ENUM = "enum"
    PRIMITIVE = "primitive"
    ALL_OF = "allOf"
    ONE_OF = "oneOf"
    ANY_OF = "anyOf"


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ServerDocument(_Node):
    """A server entry from the spec's ``servers`` array."""

    url: str
    description: Optional[str] = None


class LicenseDocument(_Node):
    name: str
    url: Optional[str] = None


class SkillMeta(_Node):
    """Identity of the whole bundle, derived from the spec's *Info Object*.

    ``name`` is the bundle directory name: a lower-case ASCII slug of the
    title (at most 64 characters) unless the caller supplied one.
    ``description`` is the first line of ``info.description`` cut to 200
    characters.
    """

    name: str
    title: str
    description: str = ""
    version: str = ""
    openapi_version: str = ""
    license: Optional[LicenseDocument] = None
    contact: Optional[str] = None
    servers: list[ServerDocument] = Field(default_factory=list)
    security_schemes: list[str] = Field(default_factory=list)


class SchemaRefDocument(_Node):
    """Pointer to a schema: a named component (``ref``) or an embedded body.

    ``ref`` holds the local component name, with a ``[]`` suffix for an
    array of that component. ``inline`` holds a resolved schema named
    ``(inline)``. Exactly one of the two is set.
    """

    ref: Optional[str] = None
    inline: Optional[SchemaDocument] = None


class FieldDocument(_Node):
    """One property of an object schema.

    ``nested_fields`` is populated for inline object properties (or arrays
    of inline objects) and is never more than one level deep.
    """

    name: str
    type: str
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[SchemaRefDocument] = Field(default=None, alias="schema")
    nested_fields: Optional[list[FieldDocument]] = None


class SchemaDocument(_Node):
    """One named schema, with the single payload that matches its ``type``."""

    name: str
    type: SchemaKind
    description: Optional[str] = None
    fields: Optional[list[FieldDocument]] = None
    enum_values: Optional[list[Any]] = None
    composition: Optional[list[SchemaRefDocument]] = None
    items: Optional[SchemaRefDocument] = None


class SchemaGroupDocument(_Node):
    """Schemas sharing a name prefix, in declaration order."""

    prefix: str
    schemas: list[SchemaDocument] = Field(default_factory=list)


class ParameterDocument(_Node):
    name: str
    location: str = Field(alias="in")  # query, header, path, cookie
    type: str = "any"
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[SchemaRefDocument] = Field(default=None, alias="schema")


class RequestBodyDocument(_Node):
    description: Optional[str] = None
    required: bool = False
    content_types: list[str] = Field(default_factory=list)
    schema_: Optional[SchemaRefDocument] = Field(default=None, alias="schema")


class ResponseDocument(_Node):
    status: str
    description: str = ""
    schema_: Optional[SchemaRefDocument] = Field(default=None, alias="schema")


class SecurityRequirementDocument(_Node):
    """One ``{scheme name: scopes}`` entry of a security requirement."""

    name: str
    scopes: list[str] = Field(default_factory=list)


class OperationDocument(_Node):
    """A single HTTP operation (one path + method pair) filed under ``tag``.

    ``operation_id`` falls back to ``"<method>-<path with / as ->"`` when the
    spec omits it. It is not guaranteed to be unique across the document.
    """

    operation_id: str
    path: str
    method: str
    tag: str
    summary: Optional[str] = None
    description: Optional[str] = None
    deprecated: bool = False
    parameters: list[ParameterDocument] = Field(default_factory=list)
    request_body: Optional[RequestBodyDocument] = None
    responses: list[ResponseDocument] = Field(default_factory=list)
    security: list[SecurityRequirementDocument] = Field(default_factory=list)


class ResourceDocument(_Node):
    """A named group of operations (a tag or a path-derived key)."""

    tag: str
    description: Optional[str] = None
    operations: list[OperationDocument] = Field(default_factory=list)


class OAuthFlowDocument(_Node):
    name: str  # implicit, password, clientCredentials, authorizationCode
    authorization_url: Optional[str] = None
    token_url: Optional[str] = None
    refresh_url: Optional[str] = None
    scopes: dict[str, str] = Field(default_factory=dict)


class AuthSchemeDocument(_Node):
    """An OpenAPI *Security Scheme Object*.

    The ``type`` field discriminates between ``apiKey``, ``http``,
    ``oauth2``, and ``openIdConnect`` schemes. Only the fields relevant to
    the scheme type are populated; the rest remain ``None``.
    """

    name: str
    type: str
    description: Optional[str] = None
    # apiKey
    location: Optional[str] = Field(default=None, alias="in")
    param_name: Optional[str] = None
    # http
    scheme: Optional[str] = None
    bearer_format: Optional[str] = None
    # oauth2
    flows: Optional[list[OAuthFlowDocument]] = None
    # openIdConnect
    openid_connect_url: Optional[str] = None


class SkillDocument(_Node):
    """Root of the intermediate representation.

    Fully self-contained: rendering it needs no further lookups into the
    source spec.

    See Also:
        :func:`~openapi_to_skills.parser.parse_spec`: Builds this document.
        :class:`~openapi_to_skills.renderer.TemplateRenderer`: Renders it.
    """

    meta: SkillMeta
    resources: list[ResourceDocument] = Field(default_factory=list)
    schema_groups: list[SchemaGroupDocument] = Field(default_factory=list)
    auth_schemes: list[AuthSchemeDocument] = Field(default_factory=list)


SchemaRefDocument.model_rebuild()
FieldDocument.model_rebuild()
SchemaDocument.model_rebuild()
