"""Assemble a complete :class:`~openapi_to_skills.models.SkillDocument` from a raw spec.

This module is the orchestration layer of the spec-to-IR transformation. The
single public entry point is :func:`parse_spec`, which delegates to one
helper per section of the document, always in the same order:

* ``_extract_meta`` -- the ``info`` object, ``servers`` and the declared
  security scheme names.
* :func:`~openapi_to_skills.parser.resources.extract_resources` -- the
  ``paths`` object, filtered and grouped into resources.
* :func:`~openapi_to_skills.parser.schemas.build_schema_groups` --
  ``components.schemas`` grouped by name prefix.
* ``_extract_auth_schemes`` -- ``components.securitySchemes``.

:func:`parse_spec` is a pure function of its inputs: no I/O, no shared
state, and a fresh tree on every call. The input is expected to have passed
:func:`~openapi_to_skills.parser.loader.validate_spec`; beyond that, missing
optional fields degrade to empty values instead of raising.
"""

from __future__ import annotations

from typing import Any, Optional

from openapi_to_skills.models import (
    AuthSchemeDocument,
    LicenseDocument,
    OAuthFlowDocument,
    ParserOptions,
    ServerDocument,
    SkillDocument,
    SkillMeta,
)
from openapi_to_skills.naming import to_skill_name
from openapi_to_skills.parser.refs import is_reference
from openapi_to_skills.parser.resources import extract_resources
from openapi_to_skills.parser.schemas import build_schema_groups

DESCRIPTION_MAX_LENGTH = 200


def parse_spec(spec: dict[str, Any], options: Optional[ParserOptions] = None) -> SkillDocument:
    """Transform a decoded OpenAPI 3.0 document into a :class:`SkillDocument`.

    Args:
        spec: The OpenAPI document as a dict (already decoded from JSON or
            YAML, e.g. by :func:`~openapi_to_skills.parser.loader.load_spec`).
        options: Skill name override, grouping strategy and filters.
            Defaults to :class:`~openapi_to_skills.models.ParserOptions`.

    Returns:
        A self-contained, immutable IR tree.

    Example::

        raw = load_spec("petstore.yaml")
        validate_spec(raw)
        doc = parse_spec(raw, ParserOptions(group_by=GroupBy.TAGS))
        for resource in doc.resources:
            print(resource.tag, len(resource.operations))
    """
    options = options or ParserOptions()
    components = _as_dict(spec.get("components"))

    meta = _extract_meta(spec, options.skill_name)
    resources = extract_resources(spec, options.filter, options.group_by)
    schema_groups = build_schema_groups(components.get("schemas"))
    auth_schemes = _extract_auth_schemes(components.get("securitySchemes"))

    return SkillDocument(
        meta=meta,
        resources=resources,
        schema_groups=schema_groups,
        auth_schemes=auth_schemes,
    )


def _extract_meta(spec: dict[str, Any], skill_name: Optional[str] = None) -> SkillMeta:
    """Build :class:`SkillMeta` from ``info``, ``servers`` and ``components``.

    The description is the first line of ``info.description``, truncated to
    200 characters. The skill name is *skill_name* when given, otherwise
    :func:`~openapi_to_skills.naming.to_skill_name` of the title.
    """
    info = _as_dict(spec.get("info"))
    title = str(info.get("title", ""))

    raw_description = info.get("description")
    description = ""
    if isinstance(raw_description, str):
        description = raw_description.split("\n", 1)[0][:DESCRIPTION_MAX_LENGTH]

    license_info = info.get("license")
    license_doc = None
    if isinstance(license_info, dict) and license_info.get("name"):
        license_doc = LicenseDocument(name=license_info["name"], url=license_info.get("url"))

    contact = _as_dict(info.get("contact"))

    servers = [
        ServerDocument(url=str(server.get("url", "/")), description=server.get("description"))
        for server in spec.get("servers") or []
        if isinstance(server, dict)
    ]

    schemes = _as_dict(_as_dict(spec.get("components")).get("securitySchemes"))

    return SkillMeta(
        name=skill_name if skill_name is not None else to_skill_name(title),
        title=title,
        description=description,
        version=str(info.get("version", "")),
        openapi_version=str(spec.get("openapi", "")),
        license=license_doc,
        contact=contact.get("email"),
        servers=servers,
        security_schemes=[str(key) for key in schemes],
    )


def _extract_auth_schemes(schemes: Any) -> list[AuthSchemeDocument]:
    """Convert ``components.securitySchemes`` in declaration order.

    Reference entries are skipped. Only the fields relevant to each scheme's
    ``type`` are populated:

    * ``apiKey`` -- ``location`` (``in``) and ``param_name`` (``name``)
    * ``http`` -- ``scheme`` and ``bearer_format``
    * ``oauth2`` -- ``flows``
    * ``openIdConnect`` -- ``openid_connect_url``
    """
    result: list[AuthSchemeDocument] = []

    for name, scheme in _as_dict(schemes).items():
        if not isinstance(scheme, dict) or is_reference(scheme):
            continue

        scheme_type = str(scheme.get("type", ""))
        fields: dict[str, Any] = {}

        if scheme_type == "apiKey":
            fields["location"] = scheme.get("in")
            fields["param_name"] = scheme.get("name")
        elif scheme_type == "http":
            fields["scheme"] = scheme.get("scheme")
            fields["bearer_format"] = scheme.get("bearerFormat")
        elif scheme_type == "oauth2":
            fields["flows"] = _extract_oauth_flows(scheme.get("flows"))
        elif scheme_type == "openIdConnect":
            fields["openid_connect_url"] = scheme.get("openIdConnectUrl")

        result.append(
            AuthSchemeDocument(
                name=str(name),
                type=scheme_type,
                description=scheme.get("description"),
                **fields,
            )
        )

    return result


def _extract_oauth_flows(flows: Any) -> list[OAuthFlowDocument]:
    """One :class:`OAuthFlowDocument` per declared flow, in declaration order."""
    result: list[OAuthFlowDocument] = []
    for flow_name, flow in _as_dict(flows).items():
        if not isinstance(flow, dict):
            continue
        result.append(
            OAuthFlowDocument(
                name=str(flow_name),
                authorization_url=_as_str(flow.get("authorizationUrl")),
                token_url=_as_str(flow.get("tokenUrl")),
                refresh_url=_as_str(flow.get("refreshUrl")),
                scopes={str(k): str(v) for k, v in _as_dict(flow.get("scopes")).items()},
            )
        )
    return result


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None
